"""
server.py

HTTP surface of the service. Routes:

    /metrics  Prometheus text exposition of the metrics store
    /health   liveness probe, always "OK"
    /         HTML status page

Requests are served by a threading WSGI server running in a background
thread. Handlers only take snapshots of the store, so they never wait on the
polling loop.

Classes:
    MetricsServer

Usage:
    server = MetricsServer(build_app(store), port=9184)
    server.start()
    ...
    server.stop()
"""

import logging
import threading
from socketserver import ThreadingMixIn
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import CollectorRegistry, make_wsgi_app

from tempmon import PACKAGE_LOGGER_NAME
from tempmon.exporter import build_registry
from tempmon.status_page import render_temperature_page
from tempmon.store import MetricsStore

logger = logging.getLogger(f"{PACKAGE_LOGGER_NAME}.server")


def _respond(start_response, status: str, body: bytes, content_type: str):
    start_response(status, [
        ("Content-Type", content_type),
        ("Content-Length", str(len(body))),
    ])
    return [body]


def build_app(store: MetricsStore, registry: CollectorRegistry | None = None):
    """
    Build the WSGI application serving the store.

    Args:
        store (MetricsStore): Store to read snapshots from.
        registry (CollectorRegistry): Registry for /metrics. Defaults to a
            fresh registry exporting the store.
    """
    if registry is None:
        registry = build_registry(store)
    metrics_app = make_wsgi_app(registry)

    def app(environ, start_response):
        path = environ.get("PATH_INFO") or "/"

        if path == "/metrics":
            return metrics_app(environ, start_response)
        if path == "/health":
            return _respond(start_response, "200 OK", b"OK", "text/plain; charset=utf-8")
        if path == "/":
            page = render_temperature_page(store.snapshot())
            return _respond(start_response, "200 OK", page.encode("utf-8"), "text/html; charset=utf-8")
        return _respond(start_response, "404 Not Found", b"404 Not Found", "text/plain; charset=utf-8")

    return app


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = True


class _LoggingRequestHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)


class MetricsServer:
    """
    Run a WSGI app on a background thread.

    Args:
        app: WSGI application, usually from build_app().
        port (int): TCP port. 0 picks a free port, see `port` after start().
        address (str): Listen address.
    """

    def __init__(self, app, port: int, address: str = "0.0.0.0"):
        self.app = app
        self.address = address
        self._requested_port = port
        self._httpd = None
        self._thread = None

    @property
    def port(self) -> int:
        if self._httpd is None:
            return self._requested_port
        return self._httpd.server_port

    def start(self) -> None:
        """
        Bind the socket and start serving.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._httpd = make_server(
            self.address,
            self._requested_port,
            self.app,
            server_class=_ThreadingWSGIServer,
            handler_class=_LoggingRequestHandler,
        )
        self._thread = threading.Thread(
            target=self._httpd.serve_forever,
            name="tempmon-http",
            daemon=True,
        )
        self._thread.start()
        logger.info("http server listening on %s:%d", self.address, self.port)

    def stop(self) -> None:
        if self._httpd is None:
            return
        self._httpd.shutdown()
        self._httpd.server_close()
        self._thread.join(timeout=5)
        self._httpd = None
        self._thread = None
        logger.info("http server stopped")
