"""HTTP transport — URL/header construction and the requests-based sender."""

import logging

import requests

from datadog_logs_sink.compression import CONTENT_ENCODING
from datadog_logs_sink.config import WriterConfig
from datadog_logs_sink.errors import TransportError

logger = logging.getLogger(__name__)

INPUT_PATH = "/v1/input/"


def build_url(config: WriterConfig) -> str:
    """Return ``<scheme>://<host>:<port>/v1/input/<api_key>`` for *config*."""
    scheme = "https" if config.use_ssl else "http"
    return f"{scheme}://{config.host}:{config.port}{INPUT_PATH}{config.api_key}"


def redact_url(url: str) -> str:
    """Hide the API key path segment so the URL can be logged."""
    head, sep, key = url.partition(INPUT_PATH)
    if not sep:
        return url
    return f"{head}{INPUT_PATH}{'*' * min(len(key), 8)}"


def build_headers() -> dict[str, str]:
    """Headers required on every intake request."""
    return {
        "Content-Type": "application/json",
        "Content-Encoding": CONTENT_ENCODING,
    }


def build_proxies(config: WriterConfig) -> dict[str, str] | None:
    """Map the optional proxy setting to a requests proxies dict."""
    if not config.proxy_url:
        return None
    proxy = f"http://{config.proxy_url}:{config.proxy_port}"
    return {"http": proxy, "https": proxy}


class Transport:
    """Sends an already-compressed body to a URL and reports the status code.

    Implementations raise TransportError when no HTTP response was obtained.
    """

    def send(self, url: str, body: bytes, headers: dict[str, str]) -> int:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class HTTPTransport(Transport):
    """Transport backed by a requests.Session."""

    def __init__(
        self,
        timeout: float = 10.0,
        proxies: dict[str, str] | None = None,
        verify: bool = True,
        session: requests.Session | None = None,
    ):
        self._timeout = timeout
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()
        self._session.verify = verify
        if proxies:
            self._session.proxies.update(proxies)

    @classmethod
    def from_config(cls, config: WriterConfig) -> "HTTPTransport":
        return cls(
            timeout=config.request_timeout,
            proxies=build_proxies(config),
        )

    def send(self, url: str, body: bytes, headers: dict[str, str]) -> int:
        try:
            response = self._session.post(
                url,
                data=body,
                headers=headers,
                timeout=self._timeout,
                allow_redirects=False,
            )
        except requests.exceptions.RequestException as exc:
            # requests echoes the URL in its messages; keep the key out of them
            detail = str(exc)
            api_key = url.partition(INPUT_PATH)[2]
            if api_key:
                detail = detail.replace(api_key, "***")
            raise TransportError(
                f"POST {redact_url(url)} failed: {exc.__class__.__name__}: {detail}"
            ) from exc

        return response.status_code

    def close(self) -> None:
        """Close the HTTP session if this transport created it."""
        if self._owns_session:
            self._session.close()
