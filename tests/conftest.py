"""
pytest configuration and fixtures.
"""

import json
import threading
from typing import Any, Callable, Dict, Generator, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from userapi import HTTPServer, ServerConfig, create_app
from userapi.domain import InMemoryUserRepository, UserEntity
from userapi.http import HTTPResponse, parse_request


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request for a page of users."""
    return (
        b"GET /api/users?pageNumber=2&pageSize=5 HTTP/1.1\r\n"
        b"Host: localhost:5000\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: application/json\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request creating a user."""
    body = b'{"login": "alice", "firstName": "Alice", "lastName": "Liddell"}'
    head = (
        b"POST /api/users HTTP/1.1\r\n"
        b"Host: localhost:5000\r\n"
        b"Content-Type: application/json\r\n"
        b"Content-Length: %d\r\n"
        b"Connection: close\r\n"
        b"\r\n"
    ) % len(body)
    return head + body


@pytest.fixture
def config() -> ServerConfig:
    """Test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        max_workers=4,
        timeout=5.0,
        keep_alive_timeout=1.0,
        log_level="WARNING",
    )


@pytest.fixture
def repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def alice(repository: InMemoryUserRepository) -> UserEntity:
    """A stored user."""
    return repository.insert(UserEntity(login="alice", first_name="Alice", last_name="Liddell"))


@pytest.fixture
def app(config: ServerConfig, repository: InMemoryUserRepository) -> HTTPServer:
    """The users API, used in-process through dispatch()."""
    return create_app(config, repository)


def build_request(
    method: str,
    target: str,
    body: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> bytes:
    """
    Raw request bytes. A dict or list body is sent as JSON, str/bytes as is.
    """
    if body is None:
        payload = b""
    elif isinstance(body, bytes):
        payload = body
    elif isinstance(body, str):
        payload = body.encode("utf-8")
    else:
        payload = json.dumps(body).encode("utf-8")

    all_headers = {"Host": "localhost:5000"}
    if payload:
        all_headers["Content-Type"] = "application/json"
        all_headers["Content-Length"] = str(len(payload))
    all_headers.update(headers or {})

    head = f"{method} {target} HTTP/1.1\r\n"
    head += "".join(f"{name}: {value}\r\n" for name, value in all_headers.items())
    return (head + "\r\n").encode("utf-8") + payload


@pytest.fixture
def call(app: HTTPServer) -> Callable[..., HTTPResponse]:
    """
    Send a request through the real parser and the app's dispatch():

        response = call("GET", "/api/users")
    """
    def _call(method: str, target: str, body: Any = None, headers: Optional[Dict[str, str]] = None):
        request = parse_request(build_request(method, target, body, headers), ("127.0.0.1", 50000))
        return app.dispatch(request)
    return _call


class LiveServer:
    """Runs a server on a background thread for socket-level tests."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()
        if not self.server.wait_until_started(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)


@pytest.fixture
def live_server(app: HTTPServer) -> Generator[LiveServer, None, None]:
    """The users API listening on a free port."""
    server = LiveServer(app)
    server.start()

    yield server

    server.stop()
