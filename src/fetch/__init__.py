"""Conditional HTTP fetch client.

This module provides efficient polling of remote resources with:
- ETag/Last-Modified conditional requests and modification detection
- Expiration computation from Cache-Control and Expires
- Redirect, timeout, proxy and basic auth support over a pluggable transport
- Bounded body reads and optional passthrough to an output sink
- Observability hooks and metrics collection
"""

from src.fetch.capture import capture_response, find_charset, find_content_type
from src.fetch.client import FetchClient
from src.fetch.config import AuthConfig, ClientConfig, ProxyConfig
from src.fetch.constants import (
    DEFAULT_MAX_BODY_SIZE_BYTES,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_PROXY_PORT,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    HTTP_STATUS_NOT_MODIFIED,
    HTTP_STATUS_OK,
)
from src.fetch.errors import (
    ExpirationParseError,
    FetchClientError,
    FetchStateError,
    PassthroughSinkError,
    ResponseSizeExceededError,
    TransportError,
    TransportErrorClass,
)
from src.fetch.events import (
    EventSink,
    FetchEvent,
    RecordingEventSink,
    StructlogEventSink,
)
from src.fetch.expiration import parse_http_date, resolve_expiration
from src.fetch.loader import ConfigValidationError, load_client_config
from src.fetch.metrics import FetchMetrics
from src.fetch.models import (
    CapturedContent,
    FetchedDocument,
    FetchState,
    ModificationStatus,
    RequestDescriptor,
    TransportResponse,
    ValidationOutcome,
)
from src.fetch.redact import redact_headers, redact_url_credentials
from src.fetch.request_builder import build_headers, build_proxy_url, build_request
from src.fetch.sink import OutputSink, StreamSink, stdout_sink
from src.fetch.state_machine import FetchPhase, FetchStateMachine
from src.fetch.transport import HttpxTransport, Transport
from src.fetch.validator import check_modification, has_been_modified


__all__ = [
    # Client
    "FetchClient",
    "FetchState",
    "FetchPhase",
    "FetchStateMachine",
    # Config
    "ClientConfig",
    "ProxyConfig",
    "AuthConfig",
    "load_client_config",
    "ConfigValidationError",
    # Transport
    "Transport",
    "HttpxTransport",
    "RequestDescriptor",
    "TransportResponse",
    # Components
    "build_request",
    "build_headers",
    "build_proxy_url",
    "check_modification",
    "has_been_modified",
    "resolve_expiration",
    "parse_http_date",
    "capture_response",
    "find_content_type",
    "find_charset",
    # Models
    "ModificationStatus",
    "ValidationOutcome",
    "CapturedContent",
    "FetchedDocument",
    # Errors
    "FetchClientError",
    "TransportError",
    "TransportErrorClass",
    "ResponseSizeExceededError",
    "ExpirationParseError",
    "PassthroughSinkError",
    "FetchStateError",
    # Observability
    "EventSink",
    "FetchEvent",
    "StructlogEventSink",
    "RecordingEventSink",
    "FetchMetrics",
    # Passthrough
    "OutputSink",
    "StreamSink",
    "stdout_sink",
    # Constants
    "HTTP_STATUS_OK",
    "HTTP_STATUS_NOT_MODIFIED",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_MAX_REDIRECTS",
    "DEFAULT_MAX_BODY_SIZE_BYTES",
    "DEFAULT_PROXY_PORT",
    "DEFAULT_USER_AGENT",
    # Redaction
    "redact_headers",
    "redact_url_credentials",
]
