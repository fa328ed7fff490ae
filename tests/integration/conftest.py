"""Integration test fixtures (local HTTP server).

Provides a real HTTP server on 127.0.0.1 running in a background thread.
Each test installs a responder deciding what every incoming request gets,
and can inspect the requests the server received.
"""

import threading
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Callable, Optional

import pytest


@dataclass
class ReceivedRequest:
    method: str
    path: str
    headers: dict[str, str]
    body: bytes


# Returns (status, headers, body)
Responder = Callable[[ReceivedRequest, int], tuple[int, dict[str, str], bytes]]


class LocalServer:
    """
    Threaded HTTP server driven by a responder callable.

    The responder receives the parsed request and the 1-based number of the
    request (counted across the server lifetime) and returns
    ``(status, headers, body)``.
    """

    def __init__(self):
        self.requests: list[ReceivedRequest] = []
        self.responder: Responder = lambda request, n: (200, {}, b"")
        self._lock = threading.Lock()

        server = self

        class Handler(BaseHTTPRequestHandler):
            protocol_version = "HTTP/1.1"

            def _handle(self):
                length = int(self.headers.get("Content-Length") or 0)
                body = self.rfile.read(length) if length else b""
                received = ReceivedRequest(
                    method=self.command,
                    path=self.path,
                    headers=dict(self.headers.items()),
                    body=body,
                )
                with server._lock:
                    server.requests.append(received)
                    number = len(server.requests)
                status, headers, reply = server.responder(received, number)

                self.send_response(status)
                for name, value in headers.items():
                    self.send_header(name, value)
                self.send_header("Content-Length", str(len(reply)))
                self.end_headers()
                if reply:
                    self.wfile.write(reply)

            do_GET = do_POST = do_PUT = do_DELETE = _handle

            def log_message(self, format, *args):
                pass

        self._httpd = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
        self._httpd.daemon_threads = True
        self._thread = threading.Thread(target=self._httpd.serve_forever, daemon=True)

    @property
    def url(self) -> str:
        host, port = self._httpd.server_address[:2]
        return f"http://{host}:{port}"

    @property
    def count(self) -> int:
        with self._lock:
            return len(self.requests)

    def respond_with(self, responder: Responder) -> None:
        self.responder = responder

    def always(self, status: int, headers: Optional[dict[str, str]] = None, body: bytes = b"") -> None:
        self.responder = lambda request, n: (status, dict(headers or {}), body)

    def redirect_loop(self, path: str = "/redirect") -> None:
        """Redirect every request back to ``path``."""
        self.always(307, {"Location": path})

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._httpd.shutdown()
        self._httpd.server_close()
        self._thread.join(timeout=5)


@pytest.fixture
def local_server():
    """Running LocalServer, shut down after the test.

    Usage:
        def test_something(local_server):
            local_server.always(500)
    """
    server = LocalServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def integration_settings(test_settings):
    """Settings tuned for real network calls against the local server."""
    test_settings.MAX_INTERVAL = 0.05
    test_settings.INITIAL_INTERVAL = 0.01
    test_settings.DEFAULT_RETRY_AFTER = 0.05
    return test_settings

