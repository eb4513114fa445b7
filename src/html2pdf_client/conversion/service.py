import json
import logging
import mimetypes
import time
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Any, Callable, Iterable

from .errors import (
    ConversionTimeout,
    JobCreationError,
    JobFailed,
    RemoteRejection,
    TransportFailure,
)
from .interfaces import TransportGateway
from .models import (
    DEFAULT_JOB_TIMEOUT_MS,
    DEFAULT_POLL_INTERVAL_MS,
    ConversionRequest,
    ConversionResult,
    FileSource,
    HtmlSource,
    Job,
    UrlSource,
    check_polling,
)
from .tempfiles import temporary_html_file

logger = logging.getLogger(__name__)

CONVERT_PATH = "/convert"
JOB_PATH = "/jobs/{job_id}"


class JobSubmitter:
    """Creates conversion jobs on the remote service.

    URLs are sent as a JSON body. Inline HTML and local files are uploaded as
    multipart form data; inline HTML is first written to a temporary file that
    lives only for the duration of the upload.
    """

    def __init__(
        self,
        transport: TransportGateway,
        *,
        temp_file: Callable[[str], AbstractContextManager[Path]] = temporary_html_file,
    ) -> None:
        self._transport = transport
        self._temp_file = temp_file

    def submit(self, request: ConversionRequest) -> str:
        source = request.source
        if isinstance(source, UrlSource):
            body = self._submit_url(source, request)
        elif isinstance(source, HtmlSource):
            with self._temp_file(source.html) as path:
                body = self._submit_file(Path(path), "text/html", request)
        elif isinstance(source, FileSource):
            path = Path(source.path)
            content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
            body = self._submit_file(path, content_type, request)
        else:
            raise TypeError(f"unsupported content source: {source!r}")

        job_id = body.get("jobId") if isinstance(body, dict) else None
        if not job_id:
            raise JobCreationError("Failed to create conversion job")
        logger.info("created conversion job %s", job_id)
        return str(job_id)

    def _submit_url(self, source: UrlSource, request: ConversionRequest) -> Any:
        payload: dict[str, Any] = {"url": source.url, "options": dict(request.pdf_options)}
        if request.webhook_url:
            payload["webhookUrl"] = request.webhook_url
        return self._post(lambda: self._transport.post_json(CONVERT_PATH, payload))

    def _submit_file(self, path: Path, content_type: str, request: ConversionRequest) -> Any:
        data = {"options": json.dumps(dict(request.pdf_options))}
        if request.webhook_url:
            data["webhookUrl"] = request.webhook_url
        with path.open("rb") as f:
            files = {"file": (path.name, f, content_type)}
            return self._post(lambda: self._transport.post_multipart(CONVERT_PATH, files, data))

    def _post(self, send: Callable[[], Any]) -> Any:
        try:
            return send()
        except Exception as e:
            if not self._transport.is_transport_error(e):
                raise
            status, message = self._transport.error_details(e)
            logger.warning("conversion request rejected (status=%s)", status)
            raise RemoteRejection(status, message) from e


class JobPoller:
    """Polls a job until it reaches a terminal state, then fetches the PDF.

    Clock and sleep are injectable so the timeout logic can be driven without
    real delays. The clock returns seconds.
    """

    def __init__(
        self,
        transport: TransportGateway,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._transport = transport
        self._clock = clock
        self._sleep = sleep

    def fetch(self, job_id: str) -> Job:
        try:
            data = self._transport.get_json(JOB_PATH.format(job_id=job_id))
        except Exception as e:
            if self._transport.is_transport_error(e):
                raise TransportFailure(str(e)) from e
            raise
        # anything but an object reads as a job still pending
        return Job.from_payload(data if isinstance(data, dict) else {}, job_id)

    def wait(
        self,
        job_id: str,
        *,
        poll_interval_ms: float = DEFAULT_POLL_INTERVAL_MS,
        timeout_ms: float = DEFAULT_JOB_TIMEOUT_MS,
    ) -> Job:
        check_polling(poll_interval_ms, timeout_ms)
        start = self._clock()
        while True:
            job = self.fetch(job_id)
            if job.is_ready:
                logger.info("job %s completed", job_id)
                return job
            if job.is_failed:
                logger.warning("job %s failed: %s", job_id, job.error_message or "Unknown error")
                raise JobFailed(job_id, job.error_message)
            elapsed_ms = (self._clock() - start) * 1000
            if elapsed_ms > timeout_ms:
                logger.warning("job %s still %s after %.0f ms", job_id, job.status, elapsed_ms)
                raise ConversionTimeout(job_id, timeout_ms)
            logger.debug("job %s is %s, next poll in %s ms", job_id, job.status, poll_interval_ms)
            self._sleep(poll_interval_ms / 1000)

    def materialize(self, job: Job, save_to: str | None = None) -> ConversionResult:
        if not job.download_url:
            raise ValueError(f"job {job.id} has no download URL")
        try:
            if save_to:
                # stream straight to disk; the path is returned only after the file is closed
                with self._transport.open_stream(job.download_url) as chunks:
                    self._write_stream(chunks, save_to)
                logger.info("saved job %s to %s", job.id, save_to)
                return save_to
            content = self._transport.download(job.download_url)
        except Exception as e:
            if self._transport.is_transport_error(e):
                raise TransportFailure(str(e)) from e
            raise
        logger.info("downloaded job %s (%d bytes)", job.id, len(content))
        return bytes(content)

    @staticmethod
    def _write_stream(chunks: Iterable[bytes], save_to: str) -> None:
        with open(save_to, "wb") as f_out:
            try:
                for chunk in chunks:
                    if chunk:
                        f_out.write(chunk)
            except Exception:
                # no truncated PDF left behind
                f_out.close()
                Path(save_to).unlink(missing_ok=True)
                raise

    def run(
        self,
        job_id: str,
        *,
        poll_interval_ms: float = DEFAULT_POLL_INTERVAL_MS,
        timeout_ms: float = DEFAULT_JOB_TIMEOUT_MS,
        save_to: str | None = None,
    ) -> ConversionResult:
        job = self.wait(job_id, poll_interval_ms=poll_interval_ms, timeout_ms=timeout_ms)
        return self.materialize(job, save_to)
