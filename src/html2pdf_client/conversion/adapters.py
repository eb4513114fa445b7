import logging
from contextlib import contextmanager
from typing import IO, Any, Iterator, Mapping

import requests

from .interfaces import TransportGateway

logger = logging.getLogger(__name__)

CHUNK = 64 * 1024


def _json_body(resp: requests.Response) -> Any:
    """Decoded JSON, or None when a successful response carries something else."""
    try:
        return resp.json()
    except ValueError:
        logger.debug("response from %s is not JSON", resp.url)
        return None


class RequestsTransport(TransportGateway):
    """HTTP transport backed by requests.

    API calls go through one session carrying the ``x-api-key`` header. Download
    URLs point at storage outside the API host, so they are fetched through a
    separate session that never sees the key.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        session: requests.Session | None = None,
        download_session: requests.Session | None = None,
        timeout: float = 60,
        download_timeout: float = 300,
    ) -> None:
        self._base = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._session.headers.update({"x-api-key": api_key})
        self._downloads = download_session or requests.Session()
        self._timeout = timeout
        self._download_timeout = download_timeout

    @property
    def base_url(self) -> str:
        return self._base

    def _url(self, path: str) -> str:
        return f"{self._base}/{path.lstrip('/')}"

    def post_json(self, path: str, payload: Mapping[str, Any]) -> Any:
        url = self._url(path)
        logger.debug("POST %s (json)", url)
        resp = self._session.post(
            url,
            json=dict(payload),
            headers={"Content-Type": "application/json"},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        return _json_body(resp)

    def post_multipart(
        self,
        path: str,
        files: Mapping[str, tuple[str, IO[bytes], str]],
        data: Mapping[str, str],
    ) -> Any:
        # requests sets the multipart Content-Type with its boundary itself
        url = self._url(path)
        logger.debug("POST %s (multipart, parts=%s)", url, sorted([*files, *data]))
        resp = self._session.post(url, files=dict(files), data=dict(data), timeout=self._timeout)
        resp.raise_for_status()
        return _json_body(resp)

    def get_json(self, path: str) -> Any:
        url = self._url(path)
        logger.debug("GET %s", url)
        resp = self._session.get(url, timeout=self._timeout)
        resp.raise_for_status()
        return _json_body(resp)

    def download(self, url: str) -> bytes:
        logger.debug("GET download (buffered)")
        resp = self._downloads.get(url, timeout=self._download_timeout)
        resp.raise_for_status()
        return resp.content

    @contextmanager
    def open_stream(self, url: str) -> Iterator[Iterator[bytes]]:
        logger.debug("GET download (streamed)")
        with self._downloads.get(url, stream=True, timeout=self._download_timeout) as resp:
            resp.raise_for_status()
            yield resp.iter_content(chunk_size=CHUNK)

    def is_transport_error(self, exc: BaseException) -> bool:
        return isinstance(exc, requests.RequestException)

    def error_details(self, exc: BaseException) -> tuple[int | None, str]:
        # Response.__bool__ reflects .ok, so compare against None explicitly
        response = getattr(exc, "response", None)
        status = None
        message = None
        if response is not None:
            status = response.status_code
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("message"):
                message = str(body["message"])
        return status, message or str(exc)
