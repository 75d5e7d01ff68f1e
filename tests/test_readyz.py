import threading
import time

import httpx
import pytest

from arctools.readyz import make_readyz_server, parse_address, serve_readyz


@pytest.fixture
def server_url():
    server = make_readyz_server("127.0.0.1:0")
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address[:2]
    yield f"http://{host}:{port}"
    server.shutdown()
    server.server_close()


def test_get_reports_running(server_url):
    response = httpx.get(f"{server_url}/readyz")
    assert response.status_code == 200
    assert response.text == "webhook server is running\n"


def test_post_answers_ok(server_url):
    response = httpx.post(f"{server_url}/readyz", content=b"{}")
    assert response.status_code == 200
    assert response.text == "ok"


def test_other_path_is_not_found(server_url):
    response = httpx.get(f"{server_url}/elsewhere")
    assert response.status_code == 404


def test_query_string_is_ignored(server_url):
    response = httpx.get(f"{server_url}/readyz?probe=1")
    assert response.text == "webhook server is running\n"


def test_parse_address_with_empty_host():
    assert parse_address(":8000") == ("", 8000)


def test_parse_address_with_host():
    assert parse_address("localhost:9443") == ("localhost", 9443)


def test_parse_address_ipv6():
    assert parse_address("[::1]:8080") == ("::1", 8080)


@pytest.mark.parametrize("address", ["8000", "host:abc", "host:70000"])
def test_parse_address_rejects_bad_input(address):
    with pytest.raises(ValueError):
        parse_address(address)


def test_serve_readyz_reports_bad_address(capsys):
    stop = threading.Event()
    serve_readyz("nowhere", stop)
    assert "problem running http server" in capsys.readouterr().err


def test_serve_readyz_returns_when_stopped(capsys):
    stop = threading.Event()
    timer = threading.Timer(0.2, stop.set)
    timer.start()
    started = time.monotonic()
    try:
        result = serve_readyz("127.0.0.1:0", stop)
    finally:
        timer.cancel()
    elapsed = time.monotonic() - started
    assert result is None
    assert stop.is_set()
    assert elapsed < 5
    assert "problem running http server" not in capsys.readouterr().err