"""
Shared fixtures: an in-memory transport and a fake clock, so the submitter and
poller run without network access or real sleeps.
"""

from contextlib import contextmanager
from pathlib import Path

import pytest

from html2pdf_client import PdfClient


class FakeTransportError(Exception):
    def __init__(self, message: str, status: int | None = None, remote_message: str | None = None):
        super().__init__(message)
        self.status = status
        self.remote_message = remote_message


class FakeTransport:
    """Records calls and replays queued responses."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.convert_response: dict | Exception = {"jobId": "job-1", "status": "queued"}
        self.job_responses: list[dict | Exception] = []
        self.downloads: dict[str, bytes | Exception] = {}
        self.uploaded: dict[str, object] = {}

    def _reply(self, value):
        if isinstance(value, Exception):
            raise value
        return value

    def post_json(self, path, payload):
        self.calls.append(("post_json", path, dict(payload)))
        return self._reply(self.convert_response)

    def post_multipart(self, path, files, data):
        name, fh, content_type = files["file"]
        self.uploaded = {
            "name": name,
            "content": fh.read(),
            "content_type": content_type,
            "path": Path(fh.name),
            "exists_during_post": Path(fh.name).exists(),
        }
        self.calls.append(("post_multipart", path, sorted(files), dict(data)))
        return self._reply(self.convert_response)

    def get_json(self, path):
        self.calls.append(("get_json", path))
        if not self.job_responses:
            raise AssertionError("unexpected status read")
        if len(self.job_responses) == 1:
            return self._reply(self.job_responses[0])
        return self._reply(self.job_responses.pop(0))

    def download(self, url):
        self.calls.append(("download", url))
        return self._reply(self.downloads[url])

    @contextmanager
    def open_stream(self, url):
        self.calls.append(("open_stream", url))
        content = self._reply(self.downloads[url])
        yield iter([content[:3], b"", content[3:]])

    def is_transport_error(self, exc):
        return isinstance(exc, FakeTransportError)

    def error_details(self, exc):
        return exc.status, exc.remote_message or str(exc)

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)


class FakeClock:
    """Monotonic clock in seconds that only moves when sleep() is called."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def transport_error():
    return FakeTransportError


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def client(transport, clock):
    return PdfClient(
        "test-api-key",
        webhook_secret="test-webhook-secret",
        transport=transport,
        clock=clock,
        sleep=clock.sleep,
    )
