"""Request construction for conditional GETs."""

from urllib.parse import quote

from src.fetch.config import ClientConfig, ProxyConfig
from src.fetch.constants import (
    HEADER_IF_MODIFIED_SINCE,
    HEADER_IF_NONE_MATCH,
    HEADER_USER_AGENT,
    PROXY_SCHEME,
)
from src.fetch.models import RequestDescriptor


def build_proxy_url(proxy: ProxyConfig) -> str | None:
    """Build the proxy URL for a proxy configuration.

    Produces ``http://[user[:pass]@]host:port``. Username and password
    are percent-encoded independently; the password is only included
    together with a username.

    Args:
        proxy: Proxy configuration.

    Returns:
        Proxy URL, or None if no proxy hostname is configured.
    """
    if not proxy.enabled:
        return None

    userinfo = ""
    if proxy.username:
        userinfo = quote(proxy.username, safe="")
        if proxy.password:
            userinfo += ":" + quote(proxy.password, safe="")
        userinfo += "@"

    return f"{PROXY_SCHEME}://{userinfo}{proxy.hostname}:{proxy.port}"


def build_headers(
    user_agent: str,
    etag: str = "",
    last_modified: str = "",
) -> dict[str, str]:
    """Build request headers including conditional validators.

    Args:
        user_agent: User-Agent header value.
        etag: Stored ETag, sent as If-None-Match when non-empty.
        last_modified: Stored Last-Modified, sent as If-Modified-Since
            when non-empty.

    Returns:
        Headers dictionary.
    """
    headers: dict[str, str] = {HEADER_USER_AGENT: user_agent}
    if last_modified:
        headers[HEADER_IF_MODIFIED_SINCE] = last_modified
    if etag:
        headers[HEADER_IF_NONE_MATCH] = etag
    return headers


def build_request(
    url: str,
    config: ClientConfig,
    etag: str = "",
    last_modified: str = "",
) -> RequestDescriptor:
    """Assemble the request descriptor for one fetch.

    Values are passed through as configured; no validation happens here.

    Args:
        url: Resource URL.
        config: Client configuration.
        etag: Stored ETag validator.
        last_modified: Stored Last-Modified validator.

    Returns:
        RequestDescriptor ready for a transport.
    """
    auth = None
    if config.basic_auth.enabled:
        auth = (config.basic_auth.username, config.basic_auth.password or "")

    return RequestDescriptor(
        url=url,
        headers=build_headers(config.user_agent, etag, last_modified),
        auth=auth,
        proxy_url=build_proxy_url(config.proxy),
        timeout=config.timeout,
        max_redirects=config.max_redirects,
        max_body_size=config.max_body_size,
        transport_options=dict(config.transport_options),
    )
