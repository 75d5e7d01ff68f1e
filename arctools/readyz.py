"""A small HTTP server that answers readiness probes on ``/readyz``."""

from __future__ import annotations

import sys
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlsplit

__all__ = ["READYZ_PATH", "ReadyzHandler", "make_readyz_server", "parse_address", "serve_readyz"]

READYZ_PATH = "/readyz"


class ReadyzHandler(BaseHTTPRequestHandler):
    """Answers GET on /readyz with a status line and any other method with ``ok``."""

    server_version = "readyz"

    def _drain_body(self) -> None:
        length = int(self.headers.get("Content-Length") or 0)
        if length > 0:
            self.rfile.read(length)

    def _send(self, status: int, body: bytes) -> None:
        self.send_response(status)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)

    def _handle(self) -> None:
        self._drain_body()
        if urlsplit(self.path).path != READYZ_PATH:
            self._send(404, b"404 page not found\n")
            return
        if self.command == "GET":
            self._send(200, b"webhook server is running\n")
        else:
            self._send(200, b"ok")

    do_GET = _handle
    do_HEAD = _handle
    do_POST = _handle
    do_PUT = _handle
    do_PATCH = _handle
    do_DELETE = _handle
    do_OPTIONS = _handle

    def log_message(self, format: str, *args: object) -> None:
        """Requests are not logged."""


def parse_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` (host may be empty) into a bindable pair."""
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address {address!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        number = int(port)
    except ValueError:
        raise ValueError(f"invalid port in address {address!r}") from None
    if not 0 <= number <= 65535:
        raise ValueError(f"invalid port in address {address!r}")
    return host, number


def make_readyz_server(address: str) -> ThreadingHTTPServer:
    """Create (and bind) a readiness server listening on ``address``."""
    server = ThreadingHTTPServer(parse_address(address), ReadyzHandler)
    server.daemon_threads = True
    return server


def serve_readyz(address: str, stop_event: threading.Event, poll_interval: float = 0.2) -> None:
    """Serve readiness probes on ``address`` until ``stop_event`` is set."""
    try:
        server = make_readyz_server(address)
    except (OSError, ValueError) as err:
        print(f"problem running http server: {err}", file=sys.stderr, flush=True)
        return

    with server:
        server.timeout = poll_interval
        while not stop_event.is_set():
            server.handle_request()