"""Configuration models for the fetch client."""

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field

from src.fetch.constants import (
    DEFAULT_MAX_BODY_SIZE_BYTES,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_PROXY_PORT,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)


# Flags are taken as given; every other field falls back when empty or zero
_FLAG_FIELDS = frozenset({"passthrough", "preserve_missing_validators"})
_NESTED_FIELDS = frozenset({"proxy", "basic_auth"})


def _merge_fallback(
    current: dict[str, Any],
    overrides: dict[str, Any],
) -> dict[str, Any]:
    """Merge overrides into current values, ignoring empty or zero overrides.

    Args:
        current: Existing field values.
        overrides: Candidate new values.

    Returns:
        Merged field values.
    """
    merged = dict(current)
    for key, value in overrides.items():
        if key in _FLAG_FIELDS:
            merged[key] = bool(value)
        elif isinstance(value, BaseModel):
            merged[key] = _merge_fallback(current.get(key) or {}, value.model_dump())
        elif key in _NESTED_FIELDS and isinstance(value, dict):
            merged[key] = _merge_fallback(current.get(key) or {}, value)
        elif value:
            merged[key] = value
    return merged


class ProxyConfig(BaseModel):
    """HTTP proxy settings.

    Proxies are plain HTTP. Username and password are independent.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    hostname: str = ""
    port: Annotated[int, Field(ge=1, le=65535)] = DEFAULT_PROXY_PORT
    username: str = ""
    password: str = ""

    @property
    def enabled(self) -> bool:
        """Check if a proxy hostname is configured."""
        return bool(self.hostname)


class AuthConfig(BaseModel):
    """HTTP Basic authentication credentials."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    username: str = ""
    password: str = ""

    @property
    def enabled(self) -> bool:
        """Check if a username is configured."""
        return bool(self.username)


class ClientConfig(BaseModel):
    """Configuration for one fetch.

    Immutable; build a new instance (or use with_overrides) to change
    settings between fetches.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    timeout: Annotated[float, Field(gt=0, le=3600)] = DEFAULT_TIMEOUT_SECONDS
    max_redirects: Annotated[int, Field(ge=0, le=100)] = DEFAULT_MAX_REDIRECTS
    max_body_size: Annotated[int, Field(ge=1)] = DEFAULT_MAX_BODY_SIZE_BYTES
    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        DEFAULT_USER_AGENT
    )
    proxy: ProxyConfig = Field(default_factory=ProxyConfig)
    basic_auth: AuthConfig = Field(default_factory=AuthConfig)
    transport_options: dict[str, Any] = Field(
        default_factory=dict,
        description="Extra keyword arguments passed to the HTTP engine unmodified",
    )
    passthrough: bool = Field(
        default=False,
        description="If True, write the raw body to the injected output sink",
    )
    preserve_missing_validators: bool = Field(
        default=False,
        description=(
            "If True, a 200 response lacking ETag or Last-Modified keeps the "
            "previously stored validator instead of clearing it"
        ),
    )

    def with_overrides(self, **values: Any) -> "ClientConfig":
        """Return a copy with the given fields replaced.

        Empty strings, zero numbers, empty mappings and None fall back to
        the current value. Nested proxy and basic_auth values merge field
        by field with the same rule.

        Args:
            **values: Field overrides.

        Returns:
            New ClientConfig instance.

        Raises:
            ValueError: If an unknown field is given.
        """
        unknown = set(values) - set(type(self).model_fields)
        if unknown:
            msg = f"Unknown config fields: {', '.join(sorted(unknown))}"
            raise ValueError(msg)

        merged = _merge_fallback(self.model_dump(), values)
        return type(self).model_validate(merged)
