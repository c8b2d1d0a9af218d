import urllib.request
from wsgiref.util import setup_testing_defaults

import pytest

from tempmon.sensors.result import ErrorKind
from tempmon.server import MetricsServer, build_app
from tempmon.store import MetricsStore


@pytest.fixture
def store():
    store = MetricsStore(["28-aaa", "28-bbb"], labels={"28-aaa": "tank1"})
    store.record_reading("28-aaa", 21.5, 1_700_000_000.0)
    store.record_error("28-bbb", ErrorKind.CRC_FAILURE)
    return store


def call(app, path):
    environ = {"PATH_INFO": path}
    setup_testing_defaults(environ)
    captured = {}

    def start_response(status, headers, exc_info=None):
        captured["status"] = status
        captured["headers"] = dict(headers)

    body = b"".join(app(environ, start_response))
    return captured["status"], captured["headers"], body


def test_health(store):
    status, headers, body = call(build_app(store), "/health")
    assert status == "200 OK"
    assert body == b"OK"


def test_metrics(store, sample_value):
    status, headers, body = call(build_app(store), "/metrics")
    assert status.startswith("200")
    assert headers["Content-Type"].startswith("text/plain")
    text = body.decode()
    assert sample_value(text, "dash_temp_readings", {"probe": "tank1"}) == 21.5
    assert sample_value(
        text, "dash_temp_read_errors_total", {"probe": "28-bbb", "error_type": "crc_failure"}
    ) == 1.0


def test_index_lists_probes(store):
    status, headers, body = call(build_app(store), "/")
    assert status == "200 OK"
    assert headers["Content-Type"] == "text/html; charset=utf-8"
    assert b"tank1" in body
    assert b"21.50" in body
    assert b"28-bbb" in body


def test_unknown_path_is_404(store):
    status, headers, body = call(build_app(store), "/nope")
    assert status == "404 Not Found"
    assert body == b"404 Not Found"


def test_server_serves_over_http(store):
    server = MetricsServer(build_app(store), port=0, address="127.0.0.1")
    server.start()
    try:
        with urllib.request.urlopen(f"http://127.0.0.1:{server.port}/health", timeout=5) as resp:
            assert resp.status == 200
            assert resp.read() == b"OK"
        with urllib.request.urlopen(f"http://127.0.0.1:{server.port}/metrics", timeout=5) as resp:
            assert b"dash_temp_readings" in resp.read()
    finally:
        server.stop()


def test_stop_without_start_is_noop(store):
    MetricsServer(build_app(store), port=0).stop()
