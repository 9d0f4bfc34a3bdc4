"""Expiration computation from Cache-Control and Expires headers."""

import re
from datetime import UTC, datetime, timedelta
from email.utils import parsedate_to_datetime

from src.fetch.constants import HEADER_CACHE_CONTROL, HEADER_EXPIRES
from src.fetch.errors import ExpirationParseError
from src.fetch.models import TransportResponse
from src.observability.logging import get_logger


logger = get_logger(__name__)

# s-maxage is checked first so that it wins over max-age
_S_MAXAGE_PATTERN = re.compile(r"s-maxage=(\d+)")
_MAX_AGE_PATTERN = re.compile(r"max-age=(\d+)")


def resolve_expiration(
    response: TransportResponse,
    now: datetime | None = None,
) -> datetime:
    """Compute when a response becomes stale.

    Order of precedence:
    1. Cache-Control s-maxage
    2. Cache-Control max-age
    3. Expires

    Any parse failure is logged and degrades to ``now``; no exception
    escapes.

    Args:
        response: Transport response.
        now: Reference time (default: current UTC time).

    Returns:
        Timezone-aware expiration instant.
    """
    now = now or datetime.now(UTC)

    try:
        expiration = _parse_expiration(response, now)
    except ExpirationParseError as e:
        logger.warning(
            "expiration_parse_failed",
            header=e.header,
            value=e.value,
            reason=e.reason,
        )
        return now

    return expiration if expiration is not None else now


def _parse_expiration(response: TransportResponse, now: datetime) -> datetime | None:
    """Parse expiration headers.

    Returns:
        Expiration instant, or None if no usable header is present.

    Raises:
        ExpirationParseError: If a header value cannot be interpreted.
    """
    cache_control = response.first(HEADER_CACHE_CONTROL)
    if cache_control:
        for pattern in (_S_MAXAGE_PATTERN, _MAX_AGE_PATTERN):
            match = pattern.search(cache_control)
            if match:
                return _add_seconds(now, match.group(1), cache_control)

    expires = response.first(HEADER_EXPIRES)
    if expires is not None:
        return parse_http_date(expires)

    return None


def _add_seconds(now: datetime, digits: str, raw_value: str) -> datetime:
    """Add a delta-seconds value to now."""
    try:
        return now + timedelta(seconds=int(digits))
    except OverflowError as e:
        raise ExpirationParseError(
            HEADER_CACHE_CONTROL, raw_value, "delta out of range"
        ) from e


def parse_http_date(value: str) -> datetime:
    """Parse an HTTP date such as ``Wed, 21 Oct 2025 07:28:00 GMT``.

    Args:
        value: Raw Expires header value.

    Returns:
        Timezone-aware datetime (naive dates are taken as UTC).

    Raises:
        ExpirationParseError: If the value is not a valid date.
    """
    try:
        parsed = parsedate_to_datetime(value)
    except (ValueError, TypeError, IndexError) as e:
        reason = str(e) or "invalid date"
        raise ExpirationParseError(HEADER_EXPIRES, value, reason) from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
