import threading

import pytest
from flask import Flask, redirect, request
from werkzeug.serving import make_server

from datadog_logs_sink.config import WriterConfig
from datadog_logs_sink.errors import TransportError
from datadog_logs_sink.intake import IntakeServer
from datadog_logs_sink.transport import Transport

API_KEY = "test-api-key"


class RecordingTransport(Transport):
    """Transport stub that records each request and answers with canned statuses."""

    def __init__(self, statuses=None, fail_at=None):
        self.requests = []
        self._statuses = list(statuses or [])
        self._fail_at = fail_at
        self.closed = False

    def send(self, url, body, headers):
        index = len(self.requests)
        self.requests.append((url, body, dict(headers)))
        if self._fail_at is not None and index == self._fail_at:
            raise TransportError("connection refused")
        if index < len(self._statuses):
            return self._statuses[index]
        return 202

    def close(self):
        self.closed = True


@pytest.fixture
def recording_transport():
    """Factory for RecordingTransport instances."""
    return RecordingTransport


@pytest.fixture
def intake():
    """Start a local intake on an ephemeral port, yield it, then stop it."""
    server = IntakeServer([API_KEY])
    server.start()
    yield server
    server.stop()


@pytest.fixture
def local_config(intake):
    return WriterConfig(
        host="127.0.0.1",
        port=intake.port,
        api_key=API_KEY,
        use_ssl=False,
    )


@pytest.fixture
def redirecting_intake():
    """Server that answers intake POSTs with a 302 and serves 200 at the target.

    Yields (port, hits) where hits lists every (method, path) received.
    """
    app = Flask(__name__)
    hits = []

    @app.route("/v1/input/<api_key>", methods=["POST"])
    def ingest(api_key):
        hits.append((request.method, request.path))
        return redirect("/elsewhere", code=302)

    @app.route("/elsewhere", methods=["GET", "POST"])
    def elsewhere():
        hits.append((request.method, request.path))
        return "ok", 200

    server = make_server("127.0.0.1", 0, app, threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server.server_port, hits
    server.shutdown()
    server.server_close()
    thread.join(timeout=5)
