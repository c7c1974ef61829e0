import socket
from datetime import datetime

import requests

from health_app import HealthServer, create_app


def test_health_returns_ok_and_timestamp():
    resp = create_app().test_client().get("/health")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["ok"] is True
    assert datetime.fromisoformat(body["timestamp"]).tzinfo is not None


def test_unknown_path_is_404():
    client = create_app().test_client()

    for path in ("/", "/healthz", "/api/status"):
        resp = client.get(path)
        assert resp.status_code == 404
        assert resp.get_data(as_text=True) == "Not Found"


def test_server_serves_and_stops():
    server = HealthServer(port=0, host="127.0.0.1")
    assert server.start()
    try:
        resp = requests.get(f"http://127.0.0.1:{server.port}/health", timeout=5)
        assert resp.status_code == 200
        assert resp.json()["ok"] is True
    finally:
        server.stop()
    assert not server.running


def test_port_in_use_is_reported_not_raised():
    blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    blocker.bind(("127.0.0.1", 0))
    blocker.listen(1)
    port = blocker.getsockname()[1]
    try:
        server = HealthServer(port=port, host="127.0.0.1")
        assert server.start() is False
        assert not server.running
        server.stop()
    finally:
        blocker.close()
