"""Data models for the fetch client."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field

from src.fetch.constants import DEFAULT_MAX_BODY_SIZE_BYTES


class ModificationStatus(str, Enum):
    """Outcome of the modification check for one execution.

    - NOT_MODIFIED: 304, or a 200 whose validators all match
    - MODIFIED: a 200 with a changed or missing validator
    - UNCHECKED: any other status, no determination performed
    """

    NOT_MODIFIED = "NOT_MODIFIED"
    MODIFIED = "MODIFIED"
    UNCHECKED = "UNCHECKED"


class RequestDescriptor(BaseModel):
    """Everything a transport needs to perform one GET."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    method: str = "GET"
    url: Annotated[str, Field(min_length=1, description="Target URL")]
    headers: dict[str, str] = Field(default_factory=dict)
    auth: tuple[str, str] | None = Field(
        default=None, description="Basic auth (username, password)"
    )
    proxy_url: str | None = Field(default=None, description="HTTP proxy URL")
    timeout: float = Field(gt=0)
    max_redirects: int = Field(ge=0)
    max_body_size: int = Field(default=DEFAULT_MAX_BODY_SIZE_BYTES, ge=1)
    transport_options: dict[str, Any] = Field(default_factory=dict)


class TransportResponse(BaseModel):
    """Response returned by a transport.

    Headers keep their order and may repeat; lookups are case-insensitive
    and only the first value of a header is significant.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: int = Field(
        ge=100, le=999, description="Three-digit HTTP status code, any class"
    )
    url: Annotated[str, Field(min_length=1, description="Final URL after redirects")]
    headers: list[tuple[str, str]] = Field(default_factory=list)
    body: bytes = b""

    def first(self, name: str) -> str | None:
        """Get the first value of a header.

        Args:
            name: Header name (case-insensitive).

        Returns:
            First header value, or None if the header is absent.
        """
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None

    def get_list(self, name: str) -> list[str]:
        """Get all values of a header, in order."""
        wanted = name.lower()
        return [value for key, value in self.headers if key.lower() == wanted]


class ValidationOutcome(BaseModel):
    """Result of comparing response validators with stored ones."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: ModificationStatus
    etag: str = ""
    last_modified: str = ""

    @property
    def is_modified(self) -> bool | None:
        """Modification flag, or None when no determination was made."""
        if self.status == ModificationStatus.UNCHECKED:
            return None
        return self.status == ModificationStatus.MODIFIED


class CapturedContent(BaseModel):
    """Body and content metadata captured from a 200 response."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    content: bytes = b""
    content_type: str = ""
    encoding: str = ""


class FetchedDocument(BaseModel):
    """Raw document handed to an external content extractor."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str
    content: bytes
    content_type: str
    encoding: str


@dataclass
class FetchState:
    """Mutable fetch state carried across polls of one resource.

    Attributes:
        url: Effective resource location (post-redirect).
        etag: Stored ETag validator, empty when unknown.
        last_modified: Stored Last-Modified validator, empty when unknown.
        is_modified: Result of the most recent modification check.
        content: Body of the last 200 response.
        content_type: Lowercased Content-Type of the last 200 response.
        encoding: Charset of the last 200 response.
        status_code: Last observed HTTP status, 0 before any fetch.
        expires_at: Computed expiration, None before any fetch.
        modification: Modification outcome of the last execution.
    """

    url: str = ""
    etag: str = ""
    last_modified: str = ""
    is_modified: bool = True
    content: bytes = b""
    content_type: str = ""
    encoding: str = ""
    status_code: int = 0
    expires_at: datetime | None = None
    modification: ModificationStatus | None = None

    @property
    def expiration(self) -> datetime:
        """Expiration instant; "now" when none has been computed."""
        if self.expires_at is None:
            return datetime.now(UTC)
        return self.expires_at

    def document(self) -> FetchedDocument:
        """Build the document consumed by content extractors."""
        return FetchedDocument(
            url=self.url,
            content=self.content,
            content_type=self.content_type,
            encoding=self.encoding,
        )
