"""Conditional fetch client for polling remote resources."""

import time
from collections.abc import Callable
from datetime import UTC, datetime

from src.fetch.capture import capture_response
from src.fetch.config import ClientConfig
from src.fetch.constants import HEADER_ETAG, HEADER_LAST_MODIFIED, HTTP_STATUS_OK
from src.fetch.errors import PassthroughSinkError, TransportError
from src.fetch.events import (
    EVENT_EXPIRATION_COMPUTED,
    EVENT_FETCH_COMPLETE,
    EVENT_FETCH_FAILED,
    EVENT_REQUEST_START,
    EVENT_VALIDATOR_CHECKED,
    EventSink,
    FetchEvent,
    StructlogEventSink,
)
from src.fetch.expiration import resolve_expiration
from src.fetch.metrics import FetchMetrics
from src.fetch.models import (
    FetchState,
    ModificationStatus,
    RequestDescriptor,
    TransportResponse,
)
from src.fetch.redact import redact_headers, redact_url_credentials
from src.fetch.request_builder import build_request
from src.fetch.sink import OutputSink
from src.fetch.state_machine import FetchPhase, FetchStateMachine, phase_for
from src.fetch.transport import HttpxTransport, Transport
from src.fetch.validator import check_modification


def _utc_now() -> datetime:
    return datetime.now(UTC)


class FetchClient:
    """Conditional HTTP client for one polled resource.

    Each execute() performs a single GET carrying the stored validators,
    decides whether the resource changed, captures content on 200 and
    computes the next expiration. State persists across calls on the
    same instance:
    - ETag/Last-Modified are sent back as If-None-Match/If-Modified-Since
    - is_modified keeps its value when a status gives no answer
    - expiration always has a value
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: Transport | None = None,
        state: FetchState | None = None,
        events: EventSink | None = None,
        sink: OutputSink | None = None,
        clock: Callable[[], datetime] | None = None,
        metrics: FetchMetrics | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Default configuration for execute() calls.
            transport: HTTP transport (default: HttpxTransport).
            state: Initial state, e.g. validators persisted by the caller.
            events: Observability hook (default: structured logging).
            sink: Output sink for passthrough mode.
            clock: Source of the current time for expiration computation.
            metrics: Metrics collector. Defaults to one owned by this
                client; pass FetchMetrics.get_instance() to aggregate
                across clients.
        """
        self._config = config or ClientConfig()
        self._transport = transport or HttpxTransport()
        self._state = state or FetchState()
        self._events = events or StructlogEventSink()
        self._sink = sink
        self._clock = clock or _utc_now
        self._metrics = metrics or FetchMetrics()
        self._machine = FetchStateMachine()

    @property
    def state(self) -> FetchState:
        """Get the fetch state."""
        return self._state

    @property
    def config(self) -> ClientConfig:
        """Get the default configuration."""
        return self._config

    @property
    def metrics(self) -> FetchMetrics:
        """Get the metrics collector."""
        return self._metrics

    @property
    def phase(self) -> FetchPhase:
        """Get the phase reached by the most recent execution."""
        return self._machine.state

    def execute(
        self,
        url: str | None = None,
        config: ClientConfig | None = None,
    ) -> FetchState:
        """Fetch the resource.

        Args:
            url: Resource URL; when empty the stored URL is used.
            config: Configuration for this call only.

        Returns:
            The updated fetch state.

        Raises:
            ValueError: If there is no URL, or passthrough is enabled
                without an output sink.
            TransportError: If the request failed; state is left untouched.
            PassthroughSinkError: If the passthrough sink failed.
        """
        config = config or self._config
        target = url or self._state.url
        if not target:
            msg = "No URL to fetch"
            raise ValueError(msg)
        if config.passthrough and self._sink is None:
            msg = "Passthrough mode requires an output sink"
            raise ValueError(msg)

        self._machine = FetchStateMachine()
        request = build_request(
            target, config, self._state.etag, self._state.last_modified
        )
        log_url = redact_url_credentials(request.url) or request.url

        self._emit(
            EVENT_REQUEST_START,
            log_url,
            headers=redact_headers(request.headers),
            proxy=redact_url_credentials(request.proxy_url),
            basic_auth=request.auth is not None,
        )
        self._machine.transition(FetchPhase.EXECUTING)

        start_time_ns = time.perf_counter_ns()
        response = self._perform(request, config, log_url)
        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000

        self._apply_response(response, config, log_url)

        self._metrics.record_request(response.status_code, len(response.body))
        self._metrics.record_duration(duration_ms)

        self._emit(
            EVENT_FETCH_COMPLETE,
            log_url,
            status_code=response.status_code,
            final_url=redact_url_credentials(response.url),
            is_modified=self._state.is_modified,
            bytes=len(response.body),
            duration_ms=round(duration_ms, 2),
        )
        return self._state

    def _perform(
        self,
        request: RequestDescriptor,
        config: ClientConfig,
        log_url: str,
    ) -> TransportResponse:
        """Run the transport, streaming the body to the sink in passthrough mode.

        Chunks reach the sink as the transport reads them, so a body that
        later crosses the size limit may have been partly forwarded.

        Raises:
            TransportError: If the request failed.
            PassthroughSinkError: If the sink failed.
        """
        on_chunk = None
        if config.passthrough and self._sink is not None:
            on_chunk = self._sink.write

        try:
            return self._transport.execute(request, on_chunk=on_chunk)
        except TransportError as e:
            self._metrics.record_failure(e.error_class)
            self._fail(log_url, error_class=e.error_class.value, message=e.message)
            raise
        except PassthroughSinkError as e:
            self._fail(log_url, error_class="PASSTHROUGH_SINK", message=str(e))
            raise
        except Exception as e:
            self._fail(log_url, error_class=type(e).__name__, message=str(e))
            raise

    def _apply_response(
        self,
        response: TransportResponse,
        config: ClientConfig,
        log_url: str,
    ) -> None:
        """Update state from a completed response."""
        state = self._state

        outcome = check_modification(
            response.status_code,
            response.first(HEADER_ETAG),
            response.first(HEADER_LAST_MODIFIED),
            state.etag,
            state.last_modified,
            preserve_missing=config.preserve_missing_validators,
        )
        self._emit(
            EVENT_VALIDATOR_CHECKED,
            log_url,
            status_code=response.status_code,
            outcome=outcome.status.value,
            stored_etag=state.etag,
            stored_last_modified=state.last_modified,
            etag=outcome.etag,
            last_modified=outcome.last_modified,
        )

        state.url = response.url
        state.status_code = response.status_code
        state.modification = outcome.status
        state.etag = outcome.etag
        state.last_modified = outcome.last_modified
        if outcome.is_modified is not None:
            state.is_modified = outcome.is_modified

        if response.status_code == HTTP_STATUS_OK:
            captured = capture_response(response)
            state.content = captured.content
            state.content_type = captured.content_type
            state.encoding = captured.encoding

        state.expires_at = resolve_expiration(response, now=self._clock())
        self._emit(
            EVENT_EXPIRATION_COMPUTED,
            log_url,
            expiration=state.expires_at.isoformat(),
        )

        if outcome.status == ModificationStatus.NOT_MODIFIED:
            self._metrics.record_not_modified()
        elif outcome.status == ModificationStatus.UNCHECKED:
            self._metrics.record_unchecked()
        self._machine.transition(phase_for(outcome.status))

    def _fail(self, log_url: str, **data: object) -> None:
        """Move to FAILED and report the failure."""
        self._machine.transition(FetchPhase.FAILED)
        self._emit(EVENT_FETCH_FAILED, log_url, **data)

    def _emit(self, name: str, url: str, **data: object) -> None:
        """Send an event to the observability hook."""
        self._events.emit(FetchEvent(name=name, url=url, data=data))
