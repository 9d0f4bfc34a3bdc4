"""Error types for the fetch client."""

from enum import Enum


class TransportErrorClass(str, Enum):
    """Classification of transport failures.

    - NETWORK_TIMEOUT: Request timed out
    - CONNECTION_ERROR: Could not establish connection
    - SSL_ERROR: SSL/TLS certificate or handshake error
    - PROXY_ERROR: The configured proxy refused or failed the request
    - TOO_MANY_REDIRECTS: Redirect limit exceeded
    - RESPONSE_SIZE_EXCEEDED: Response body exceeded max size limit
    - UNKNOWN: Unclassified HTTP engine error
    """

    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    SSL_ERROR = "SSL_ERROR"
    PROXY_ERROR = "PROXY_ERROR"
    TOO_MANY_REDIRECTS = "TOO_MANY_REDIRECTS"
    RESPONSE_SIZE_EXCEEDED = "RESPONSE_SIZE_EXCEEDED"
    UNKNOWN = "UNKNOWN"


class FetchClientError(Exception):
    """Base exception for all fetch client errors."""


class TransportError(FetchClientError):
    """Raised when the HTTP round trip could not be completed.

    Covers connection and TLS failures, timeouts, exceeded redirect
    limits and oversized bodies. No fetch state is updated when this
    error is raised.
    """

    def __init__(
        self,
        error_class: TransportErrorClass,
        message: str,
        url: str | None = None,
    ) -> None:
        """Initialize the transport error.

        Args:
            error_class: Classification of the failure.
            message: Human-readable error message.
            url: URL being fetched when the failure happened.
        """
        super().__init__(message)
        self.error_class = error_class
        self.message = message
        self.url = url

    def to_dict(self) -> dict[str, str | None]:
        """Convert error to dictionary for logging.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error_class": self.error_class.value,
            "message": self.message,
            "url": self.url,
        }


class ResponseSizeExceededError(TransportError):
    """Raised when a response body exceeds the configured limit."""

    def __init__(self, limit: int, read: int, url: str | None = None) -> None:
        """Initialize the error.

        Args:
            limit: Configured maximum body size in bytes.
            read: Number of bytes read when the limit was crossed.
            url: URL being fetched.
        """
        self.limit = limit
        self.read = read
        super().__init__(
            TransportErrorClass.RESPONSE_SIZE_EXCEEDED,
            f"Response size exceeded limit of {limit} bytes (read {read} bytes)",
            url,
        )


class ExpirationParseError(FetchClientError):
    """Raised internally when an expiration header cannot be interpreted.

    Always caught by the expiration resolver.
    """

    def __init__(self, header: str, value: str, reason: str) -> None:
        """Initialize the error.

        Args:
            header: Header name that failed to parse.
            value: Raw header value.
            reason: Why parsing failed.
        """
        self.header = header
        self.value = value
        self.reason = reason
        super().__init__(f"Unable to parse {header} value {value!r}: {reason}")


class PassthroughSinkError(FetchClientError):
    """Raised when writing the raw body to the passthrough sink fails."""


class FetchStateError(FetchClientError):
    """Raised when an invalid execution phase transition is attempted."""

    def __init__(self, from_state: str, to_state: str) -> None:
        """Initialize the error.

        Args:
            from_state: The current phase name.
            to_state: The attempted target phase name.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(f"Invalid fetch phase transition: {from_state} -> {to_state}")
