import threading
import time
from collections.abc import Generator
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest

from task_resolver.config.settings import Settings

_PAGES: dict[str, tuple[int, str]] = {
    "/": (200, "<html><body><p>home</p></body></html>"),
    "/list": (
        200,
        "<html><body><ul>"
        "<li class='item'>a</li><li class='item'>b</li><li>c</li><li class='item'>d</li>"
        "</ul></body></html>",
    ),
    "/gone": (410, "gone"),
}


class _SiteHandler(BaseHTTPRequestHandler):
    def _respond(self, include_body: bool) -> None:
        if self.path == "/slow":
            time.sleep(2)
        if self.path == "/moved":
            self.send_response(301)
            self.send_header("Location", "/list")
            self.end_headers()
            return
        status, body = _PAGES.get(self.path, (404, "not found"))
        payload = body.encode()
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        if include_body:
            self.wfile.write(payload)

    def do_GET(self) -> None:
        self._respond(include_body=True)

    def do_HEAD(self) -> None:
        self._respond(include_body=False)

    def log_message(self, format: str, *args: object) -> None:
        pass


@pytest.fixture(scope="session")
def site_url() -> Generator[str, None, None]:
    """Base URL of a local HTTP server with a few fixed pages."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), _SiteHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture()
def test_settings(temp_root: Path) -> Settings:
    return Settings(temp_dir=str(temp_root), adapter_timeout_seconds=5)
