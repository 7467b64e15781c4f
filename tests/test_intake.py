"""Tests for the local intake app and server."""

import gzip
import json

import pytest
import requests

from datadog_logs_sink.intake import CapturedRequest, IntakeServer, create_app

from conftest import API_KEY


@pytest.fixture
def app():
    application = create_app([API_KEY])
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    return app.test_client()


def _post(client, key, body, gzipped=True):
    data = gzip.compress(body) if gzipped else body
    headers = {"Content-Type": "application/json"}
    if gzipped:
        headers["Content-Encoding"] = "gzip"
    return client.post(f"/v1/input/{key}", data=data, headers=headers)


class TestIngestEndpoint:
    def test_accepts_known_key(self, app, client):
        resp = _post(client, API_KEY, b'{"message":["a"],"ddsource":"kafka-connect"}')
        assert resp.status_code == 202

        captured = app.config["request_log"].snapshot()
        assert len(captured) == 1
        assert captured[0].body == '{"message":["a"],"ddsource":"kafka-connect"}'
        assert captured[0].path == f"/v1/input/{API_KEY}"

    def test_rejects_unknown_key(self, app, client):
        resp = _post(client, "invalidAPIKey", b'{"message":[]}')
        assert resp.status_code == 403
        assert app.config["request_log"].snapshot() == []

    def test_uncompressed_body_accepted(self, client):
        assert _post(client, API_KEY, b'{"message":[]}', gzipped=False).status_code == 202

    def test_corrupt_gzip_rejected(self, client):
        resp = client.post(
            f"/v1/input/{API_KEY}",
            data=b"not gzip",
            headers={"Content-Encoding": "gzip"},
        )
        assert resp.status_code == 400

    def test_invalid_json_rejected(self, client):
        assert _post(client, API_KEY, b"{not json").status_code == 400

    def test_get_not_allowed(self, client):
        assert client.get(f"/v1/input/{API_KEY}").status_code == 405


class TestHealthEndpoint:
    def test_health(self, client):
        _post(client, API_KEY, b"{}")
        data = client.get("/health").get_json()
        assert data["status"] == "healthy"
        assert data["requests"] == 1


class TestCapturedRequest:
    def test_header_lines(self):
        captured = CapturedRequest(
            method="POST", path="/", headers={"Content-Type": "application/json"}
        )
        assert captured.header_lines() == ["Content-Type:application/json"]


class TestIntakeServer:
    def test_binds_ephemeral_port(self):
        server = IntakeServer([API_KEY])
        server.start()
        try:
            assert server.port > 0
            resp = requests.get(f"http://127.0.0.1:{server.port}/health", timeout=5)
            assert resp.status_code == 200
        finally:
            server.stop()

    def test_flush_captured_requests(self, intake):
        body = gzip.compress(json.dumps({"message": ["x"]}).encode())
        requests.post(
            f"http://127.0.0.1:{intake.port}/v1/input/{API_KEY}",
            data=body,
            headers={"Content-Encoding": "gzip"},
            timeout=5,
        )
        assert len(intake.captured_requests) == 1
        intake.flush_captured_requests()
        assert intake.captured_requests == []
