"""HTTP transports for the fetch client.

The client only depends on the Transport protocol; HttpxTransport is the
default engine.
"""

from collections.abc import Callable
from io import BytesIO
from typing import Protocol

import httpx
import structlog

from src.fetch.constants import DEFAULT_CHUNK_SIZE
from src.fetch.errors import (
    ResponseSizeExceededError,
    TransportError,
    TransportErrorClass,
)
from src.fetch.models import RequestDescriptor, TransportResponse
from src.fetch.redact import redact_url_credentials
from src.observability.logging import get_logger


logger = get_logger(__name__, component="transport")

_SSL_MARKERS = ("ssl", "certificate", "tls")

# Receives each body chunk as it is read
ChunkHandler = Callable[[bytes], None]


class Transport(Protocol):
    """Performs a single HTTP GET.

    Implementations follow redirects up to ``request.max_redirects``,
    honor ``request.timeout`` and bound the body to
    ``request.max_body_size``.
    """

    def execute(
        self,
        request: RequestDescriptor,
        on_chunk: ChunkHandler | None = None,
    ) -> TransportResponse:
        """Execute a request.

        Args:
            request: Request descriptor.
            on_chunk: Called with each body chunk in order, as it is read.

        Returns:
            The final response after redirects.

        Raises:
            TransportError: If the round trip could not be completed.
        """
        ...


class HttpxTransport:
    """Transport backed by httpx.

    A new httpx.Client is opened for each request so that timeout,
    redirect, proxy and auth settings always match the descriptor.
    """

    def __init__(
        self,
        transport: httpx.BaseTransport | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        """Initialize the transport.

        Args:
            transport: Optional underlying httpx transport (e.g.
                httpx.MockTransport in tests).
            chunk_size: Chunk size for streaming body reads.
        """
        self._transport = transport
        self._chunk_size = chunk_size

    def execute(
        self,
        request: RequestDescriptor,
        on_chunk: ChunkHandler | None = None,
    ) -> TransportResponse:
        """Execute a GET request with httpx.

        Args:
            request: Request descriptor.
            on_chunk: Called with each accepted body chunk before the next
                one is read. Errors it raises propagate unchanged.

        Returns:
            TransportResponse with the bounded body.

        Raises:
            TransportError: On timeout, connection, TLS, proxy or redirect
                failures, or when the body exceeds the size limit.
        """
        log = logger.bind(url=redact_url_credentials(request.url))

        try:
            with httpx.Client(
                timeout=request.timeout,
                follow_redirects=True,
                max_redirects=request.max_redirects,
                proxy=request.proxy_url,
                auth=request.auth,
                transport=self._transport,
                **request.transport_options,
            ) as client:
                with client.stream(
                    request.method, request.url, headers=request.headers
                ) as response:
                    body = self._read_body_with_limit(response, request, on_chunk)
                    return TransportResponse(
                        status_code=response.status_code,
                        url=str(response.url),
                        headers=list(response.headers.multi_items()),
                        body=body,
                    )

        except httpx.TimeoutException as e:
            raise self._failure(
                log,
                TransportErrorClass.NETWORK_TIMEOUT,
                f"Request timed out: {e}",
                request,
            ) from e

        except httpx.TooManyRedirects as e:
            raise self._failure(
                log,
                TransportErrorClass.TOO_MANY_REDIRECTS,
                f"Exceeded {request.max_redirects} redirects: {e}",
                request,
            ) from e

        except httpx.ProxyError as e:
            raise self._failure(
                log, TransportErrorClass.PROXY_ERROR, f"Proxy failed: {e}", request
            ) from e

        except httpx.ConnectError as e:
            error_class = TransportErrorClass.CONNECTION_ERROR
            if any(marker in str(e).lower() for marker in _SSL_MARKERS):
                error_class = TransportErrorClass.SSL_ERROR
            raise self._failure(
                log, error_class, f"Connection failed: {e}", request
            ) from e

        except httpx.HTTPError as e:
            raise self._failure(
                log, TransportErrorClass.UNKNOWN, f"Unexpected error: {e}", request
            ) from e

    def _read_body_with_limit(
        self,
        response: httpx.Response,
        request: RequestDescriptor,
        on_chunk: ChunkHandler | None = None,
    ) -> bytes:
        """Read response body with size limit.

        Args:
            response: Streaming HTTP response.
            request: Request descriptor carrying the limit.
            on_chunk: Optional consumer of each chunk within the limit.

        Returns:
            Response body bytes.

        Raises:
            ResponseSizeExceededError: If the size limit is exceeded.
        """
        max_size = request.max_body_size

        content_length = response.headers.get("content-length")
        if content_length and content_length.isdigit():
            declared = int(content_length)
            if declared > max_size:
                raise ResponseSizeExceededError(max_size, declared, request.url)

        buffer = BytesIO()
        total_read = 0
        for chunk in response.iter_bytes(chunk_size=self._chunk_size):
            total_read += len(chunk)
            if total_read > max_size:
                raise ResponseSizeExceededError(max_size, total_read, request.url)
            buffer.write(chunk)
            if on_chunk is not None:
                on_chunk(chunk)

        return buffer.getvalue()

    def _failure(
        self,
        log: structlog.stdlib.BoundLogger,
        error_class: TransportErrorClass,
        message: str,
        request: RequestDescriptor,
    ) -> TransportError:
        """Log and build a TransportError."""
        log.warning("transport_error", error_class=error_class.value, error=message)
        return TransportError(error_class, message, request.url)
