"""Content capture from successful responses."""

from src.fetch.constants import HEADER_CONTENT_TYPE
from src.fetch.models import CapturedContent, TransportResponse


_CHARSET_TOKEN = "charset="


def find_content_type(response: TransportResponse) -> str:
    """Get the lowercased first Content-Type value, or an empty string."""
    return (response.first(HEADER_CONTENT_TYPE) or "").lower()


def find_charset(content_type: str) -> str:
    """Extract the charset from a Content-Type value.

    The ``charset=`` token is matched case-insensitively; the text after
    it is returned as sent by the server.

    Args:
        content_type: Raw Content-Type header value.

    Returns:
        Charset value, or an empty string if there is none.
    """
    index = content_type.lower().find(_CHARSET_TOKEN)
    if index < 0:
        return ""
    return content_type[index + len(_CHARSET_TOKEN) :]


def capture_response(response: TransportResponse) -> CapturedContent:
    """Capture body, content type and charset of a 200 response.

    The body is already bounded by the transport.

    Args:
        response: Transport response.

    Returns:
        CapturedContent for the response.
    """
    raw_content_type = response.first(HEADER_CONTENT_TYPE) or ""
    return CapturedContent(
        content=response.body,
        content_type=find_content_type(response),
        encoding=find_charset(raw_content_type),
    )
