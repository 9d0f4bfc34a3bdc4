"""Scripted transport for fetch client tests."""

from src.fetch.models import RequestDescriptor, TransportResponse
from src.fetch.transport import ChunkHandler


def make_response(
    status_code: int = 200,
    headers: dict[str, str] | list[tuple[str, str]] | None = None,
    body: bytes = b"",
    url: str = "https://example.com/feed.xml",
) -> TransportResponse:
    """Build a TransportResponse for tests."""
    if isinstance(headers, dict):
        header_list = list(headers.items())
    else:
        header_list = list(headers or [])
    return TransportResponse(
        status_code=status_code,
        url=url,
        headers=header_list,
        body=body,
    )


class FakeTransport:
    """Transport returning queued responses or raising queued errors."""

    def __init__(
        self,
        *outcomes: TransportResponse | BaseException,
        chunk_size: int = 4,
    ) -> None:
        self._outcomes = list(outcomes)
        self.chunk_size = chunk_size
        self.requests: list[RequestDescriptor] = []

    def queue(self, outcome: TransportResponse | BaseException) -> None:
        """Append an outcome for the next call."""
        self._outcomes.append(outcome)

    def execute(
        self,
        request: RequestDescriptor,
        on_chunk: ChunkHandler | None = None,
    ) -> TransportResponse:
        """Record the request and replay the next outcome.

        The body is handed to on_chunk in chunk_size pieces.
        """
        self.requests.append(request)
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        if on_chunk is not None:
            body = outcome.body
            for start in range(0, len(body), self.chunk_size):
                on_chunk(body[start : start + self.chunk_size])
        return outcome

    @property
    def last_request(self) -> RequestDescriptor:
        """Get the most recent request."""
        return self.requests[-1]
