"""Local logs intake — a stand-in for the remote endpoint, for tests and local runs."""

import json
import logging
import threading
import zlib
from dataclasses import dataclass, field

from flask import Flask, jsonify, request
from werkzeug.serving import make_server

from datadog_logs_sink.compression import decompress_payload

logger = logging.getLogger(__name__)


@dataclass
class CapturedRequest:
    method: str
    path: str
    headers: dict = field(default_factory=dict)
    body: str = ""

    def header_lines(self) -> list[str]:
        """Headers rendered as ``Name:value`` strings."""
        return [f"{name}:{value}" for name, value in self.headers.items()]


class RequestLog:
    """Thread-safe list of requests seen by the intake app."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._requests: list[CapturedRequest] = []

    def append(self, captured: CapturedRequest) -> None:
        with self._lock:
            self._requests.append(captured)

    def snapshot(self) -> list[CapturedRequest]:
        with self._lock:
            return list(self._requests)

    def clear(self) -> None:
        with self._lock:
            self._requests.clear()


def create_app(api_keys, request_log: RequestLog | None = None) -> Flask:
    """Flask application factory.

    Only POSTs addressed to a key in *api_keys* are accepted and captured;
    anything else is answered with 403 like the real intake does.
    """
    app = Flask(__name__)
    accepted_keys = set(api_keys)
    request_log = request_log if request_log is not None else RequestLog()

    app.config["request_log"] = request_log

    @app.route("/health")
    def health():
        return jsonify({
            "status": "healthy",
            "requests": len(request_log.snapshot()),
        })

    @app.route("/v1/input/<api_key>", methods=["POST"])
    def ingest(api_key):
        if api_key not in accepted_keys:
            logger.warning("Rejected request with unknown API key")
            return jsonify({"status": "forbidden"}), 403

        raw = request.get_data()
        try:
            if request.headers.get("Content-Encoding", "").lower() == "gzip":
                raw = decompress_payload(raw)
            body = raw.decode("utf-8")
            json.loads(body)
        except (OSError, EOFError, zlib.error, ValueError) as exc:
            logger.warning("Invalid payload: %s", exc)
            return jsonify({"status": "invalid", "error": str(exc)}), 400

        request_log.append(CapturedRequest(
            method=request.method,
            path=request.path,
            headers=dict(request.headers),
            body=body,
        ))
        return jsonify({}), 202

    return app


class IntakeServer:
    """Runs the intake app on a background thread."""

    def __init__(self, api_keys, host: str = "127.0.0.1", port: int = 0):
        self._request_log = RequestLog()
        self._app = create_app(api_keys, self._request_log)
        self._host = host
        self._port = port
        self._server = None
        self._thread = None
        self.server_address = None

    def _bind(self):
        self._server = make_server(self._host, self._port, self._app, threaded=True)
        self.server_address = (self._host, self._server.server_port)
        logger.info(
            "Intake listening on %s:%d", self.server_address[0], self.server_address[1]
        )

    def start(self):
        """Bind the socket and start serving in a daemon thread."""
        self._bind()
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()

    def serve_forever(self):
        """Bind and serve on the calling thread until interrupted."""
        self._bind()
        self._server.serve_forever()

    def stop(self):
        """Shut the server down and wait for its thread."""
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
        logger.info("Intake stopped after %d request(s)", len(self._request_log.snapshot()))

    @property
    def port(self) -> int:
        return self.server_address[1]

    @property
    def captured_requests(self) -> list[CapturedRequest]:
        return self._request_log.snapshot()

    def flush_captured_requests(self) -> None:
        self._request_log.clear()
