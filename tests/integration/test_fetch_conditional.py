"""Integration tests for conditional requests against a local HTTP server."""

import base64
import io
import threading
from collections.abc import Generator
from datetime import timedelta
from http.server import BaseHTTPRequestHandler, HTTPServer

import pytest

from src.fetch.client import FetchClient
from src.fetch.config import AuthConfig, ClientConfig
from src.fetch.errors import TransportError, TransportErrorClass
from src.fetch.events import RecordingEventSink
from src.fetch.models import FetchState, ModificationStatus
from src.fetch.sink import StreamSink
from src.fetch.transport import HttpxTransport
from tests.helpers.time import FIXED_NOW, fixed_clock


ETAG = '"abc123"'
LAST_MODIFIED = "Mon, 01 Jan 2024 00:00:00 GMT"
BODY = b"<?xml version='1.0'?><rss><channel><title>t</title></channel></rss>"


def get_server_url(server: HTTPServer, path: str = "/feed.xml") -> str:
    """Get the URL for a test server."""
    host, port = server.server_address[0], server.server_address[1]
    if isinstance(host, bytes):
        host = host.decode("utf-8")
    return f"http://{host}:{port}{path}"


class FeedHandler(BaseHTTPRequestHandler):
    """Serves a feed with validators, redirects, auth and errors by path."""

    requests_seen: list[dict[str, str]] = []

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        """Suppress log messages during tests."""

    def do_GET(self) -> None:  # noqa: N802
        """Route by path."""
        FeedHandler.requests_seen.append(
            {key.lower(): value for key, value in self.headers.items()}
        )

        if self.path == "/old":
            self.send_response(301)
            self.send_header("Location", "/feed.xml")
            self.end_headers()
            return

        if self.path == "/loop":
            self.send_response(302)
            self.send_header("Location", "/loop")
            self.end_headers()
            return

        if self.path == "/denied":
            self.send_response(999)
            self.send_header("Content-Length", "0")
            self.end_headers()
            return

        if self.path == "/down":
            self.send_response(503)
            self.send_header("Content-Length", "0")
            self.end_headers()
            return

        if self.path == "/private":
            expected = "Basic " + base64.b64encode(b"reader:secret").decode()
            if self.headers.get("Authorization") != expected:
                self.send_response(401)
                self.send_header("WWW-Authenticate", 'Basic realm="feeds"')
                self.send_header("Content-Length", "0")
                self.end_headers()
                return

        if (
            self.headers.get("If-None-Match") == ETAG
            or self.headers.get("If-Modified-Since") == LAST_MODIFIED
        ):
            self.send_response(304)
            self.send_header("ETag", ETAG)
            self.send_header("Last-Modified", LAST_MODIFIED)
            self.send_header("Cache-Control", "max-age=60")
            self.end_headers()
            return

        self.send_response(200)
        self.send_header("Content-Type", "application/rss+xml; charset=UTF-8")
        self.send_header("Content-Length", str(len(BODY)))
        self.send_header("ETag", ETAG)
        self.send_header("Last-Modified", LAST_MODIFIED)
        self.send_header("Cache-Control", "public, max-age=300")
        self.end_headers()
        self.wfile.write(BODY)


@pytest.fixture
def feed_server() -> Generator[HTTPServer]:
    """Start a local HTTP server."""
    FeedHandler.requests_seen = []
    server = HTTPServer(("127.0.0.1", 0), FeedHandler)
    thread = threading.Thread(target=server.serve_forever)
    thread.daemon = True
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


def make_client(**kwargs: object) -> FetchClient:
    """Build a client on the real httpx transport with a fixed clock."""
    return FetchClient(
        transport=HttpxTransport(),
        events=RecordingEventSink(),
        clock=fixed_clock,
        **kwargs,  # type: ignore[arg-type]
    )


class TestConditionalRequests:
    """Integration tests for ETag/Last-Modified round trips."""

    def test_first_fetch_stores_validators(self, feed_server: HTTPServer) -> None:
        """Test that the first fetch captures content and validators."""
        client = make_client()

        state = client.execute(get_server_url(feed_server))

        assert state.status_code == 200
        assert state.is_modified is True
        assert state.etag == ETAG
        assert state.last_modified == LAST_MODIFIED
        assert state.content == BODY
        assert state.content_type == "application/rss+xml; charset=utf-8"
        assert state.encoding == "UTF-8"
        assert state.expiration == FIXED_NOW + timedelta(seconds=300)

    def test_second_fetch_gets_304(self, feed_server: HTTPServer) -> None:
        """Test that the stored validators produce a 304."""
        client = make_client()
        url = get_server_url(feed_server)

        client.execute(url)
        state = client.execute()

        assert state.status_code == 304
        assert state.is_modified is False
        assert state.modification == ModificationStatus.NOT_MODIFIED
        assert state.content == BODY
        assert state.expiration == FIXED_NOW + timedelta(seconds=60)

        second = FeedHandler.requests_seen[-1]
        assert second["if-none-match"] == ETAG
        assert second["if-modified-since"] == LAST_MODIFIED

        metrics = client.metrics
        assert metrics.http_requests_total == {200: 1, 304: 1}
        assert metrics.http_not_modified_total == 1

    def test_persisted_validators(self, feed_server: HTTPServer) -> None:
        """Test that validators restored by the caller are sent."""
        url = get_server_url(feed_server)
        client = make_client(state=FetchState(url=url, etag=ETAG))

        state = client.execute()

        assert state.status_code == 304
        assert state.is_modified is False
        assert state.content == b""

    def test_user_agent_sent(self, feed_server: HTTPServer) -> None:
        """Test that the configured User-Agent is sent."""
        client = make_client(config=ClientConfig(user_agent="poller/2.0"))

        client.execute(get_server_url(feed_server))

        assert FeedHandler.requests_seen[-1]["user-agent"] == "poller/2.0"


class TestRedirects:
    """Integration tests for redirect handling."""

    def test_final_url_recorded(self, feed_server: HTTPServer) -> None:
        """Test that the state records the post-redirect URL."""
        client = make_client()

        state = client.execute(get_server_url(feed_server, "/old"))

        assert state.url == get_server_url(feed_server)
        assert state.status_code == 200

    def test_redirect_loop_fails(self, feed_server: HTTPServer) -> None:
        """Test that a redirect loop raises and leaves state untouched."""
        client = make_client(config=ClientConfig(max_redirects=3))

        with pytest.raises(TransportError) as exc_info:
            client.execute(get_server_url(feed_server, "/loop"))

        assert exc_info.value.error_class == TransportErrorClass.TOO_MANY_REDIRECTS
        assert client.state.url == ""
        assert client.state.status_code == 0


class TestStatusHandling:
    """Integration tests for statuses outside 200/304."""

    def test_server_error_is_unchecked(self, feed_server: HTTPServer) -> None:
        """Test that a 503 leaves is_modified unchanged."""
        url = get_server_url(feed_server, "/down")
        client = make_client(state=FetchState(url=url, is_modified=False))

        state = client.execute()

        assert state.status_code == 503
        assert state.modification == ModificationStatus.UNCHECKED
        assert state.is_modified is False
        assert state.expiration == FIXED_NOW

    def test_nonstandard_status_is_unchecked(self, feed_server: HTTPServer) -> None:
        """Test that a 999 response completes without a decision."""
        url = get_server_url(feed_server, "/denied")
        client = make_client(state=FetchState(url=url, etag=ETAG))

        state = client.execute()

        assert state.status_code == 999
        assert state.modification == ModificationStatus.UNCHECKED
        assert state.is_modified is True
        assert state.etag == ETAG

    def test_basic_auth(self, feed_server: HTTPServer) -> None:
        """Test that Basic credentials reach the server."""
        config = ClientConfig(
            basic_auth=AuthConfig(username="reader", password="secret")
        )
        client = make_client(config=config)

        state = client.execute(get_server_url(feed_server, "/private"))

        assert state.status_code == 200
        assert state.content == BODY

    def test_missing_auth_is_unchecked(self, feed_server: HTTPServer) -> None:
        """Test that a 401 is not treated as a change."""
        client = make_client()

        state = client.execute(get_server_url(feed_server, "/private"))

        assert state.status_code == 401
        assert state.modification == ModificationStatus.UNCHECKED
        assert state.content == b""


class TestLimitsAndPassthrough:
    """Integration tests for body limits and passthrough."""

    def test_body_over_limit(self, feed_server: HTTPServer) -> None:
        """Test that an oversized body fails the fetch."""
        client = make_client(config=ClientConfig(max_body_size=10))

        with pytest.raises(TransportError) as exc_info:
            client.execute(get_server_url(feed_server))

        assert (
            exc_info.value.error_class == TransportErrorClass.RESPONSE_SIZE_EXCEEDED
        )
        assert client.state.content == b""

    def test_passthrough_forwards_body(self, feed_server: HTTPServer) -> None:
        """Test that passthrough writes the body to the sink."""
        buffer = io.BytesIO()
        client = make_client(
            config=ClientConfig(passthrough=True),
            sink=StreamSink(buffer),
        )

        client.execute(get_server_url(feed_server))

        assert buffer.getvalue() == BODY

    def test_connection_refused(self) -> None:
        """Test that an unreachable host raises a connection error."""
        server = HTTPServer(("127.0.0.1", 0), FeedHandler)
        url = get_server_url(server)
        server.server_close()
        client = make_client(config=ClientConfig(timeout=2.0))

        with pytest.raises(TransportError) as exc_info:
            client.execute(url)

        assert exc_info.value.error_class in (
            TransportErrorClass.CONNECTION_ERROR,
            TransportErrorClass.NETWORK_TIMEOUT,
        )
