"""HTTP constants for the fetch client.

Centralizes all HTTP-related constants and client defaults.
"""

# HTTP status codes with defined handling
HTTP_STATUS_OK = 200
HTTP_STATUS_NOT_MODIFIED = 304

# Header names (lookups are case-insensitive)
HEADER_USER_AGENT = "User-Agent"
HEADER_IF_MODIFIED_SINCE = "If-Modified-Since"
HEADER_IF_NONE_MATCH = "If-None-Match"
HEADER_ETAG = "ETag"
HEADER_LAST_MODIFIED = "Last-Modified"
HEADER_CACHE_CONTROL = "Cache-Control"
HEADER_EXPIRES = "Expires"
HEADER_CONTENT_TYPE = "Content-Type"

# Client defaults
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_MAX_REDIRECTS = 5
DEFAULT_MAX_BODY_SIZE_BYTES = 2 * 1024 * 1024  # 2 MB
DEFAULT_PROXY_PORT = 3128
DEFAULT_USER_AGENT = "PicoFeed (https://github.com/nicolus/picoFeed)"

# Proxies are plain HTTP proxies
PROXY_SCHEME = "http"

# Chunk size for streaming reads
DEFAULT_CHUNK_SIZE = 8192
