import logging
import time
from typing import Any, Callable, Mapping

from .config import DEFAULT_BASE_URL, load_settings
from .conversion import ConfigurationError, ConversionRequest, Job, JobPoller, JobSubmitter, WebhookVerifier
from .conversion.adapters import RequestsTransport
from .conversion.interfaces import TransportGateway
from .conversion.models import (
    DEFAULT_CONVERT_TIMEOUT_MS,
    DEFAULT_JOB_TIMEOUT_MS,
    DEFAULT_POLL_INTERVAL_MS,
    ConversionResult,
)

logger = logging.getLogger(__name__)


class PdfClient:
    """Client for the HTML/URL to PDF conversion service.

    The transport (and its HTTP session) is created once here and shared by
    every call made through this client; it is not modified afterwards.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        webhook_secret: str | None = None,
        *,
        transport: TransportGateway | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        request_timeout: float = 60,
        download_timeout: float = 300,
    ) -> None:
        if not api_key:
            raise ConfigurationError("Missing api_key")
        self._transport = transport or RequestsTransport(
            base_url or DEFAULT_BASE_URL,
            api_key,
            timeout=request_timeout,
            download_timeout=download_timeout,
        )
        self._submitter = JobSubmitter(self._transport)
        self._poller = JobPoller(self._transport, clock=clock, sleep=sleep)
        self._webhooks = WebhookVerifier(webhook_secret)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **kwargs: Any) -> "PdfClient":
        settings = load_settings(environ)
        return cls(
            settings.api_key,
            settings.base_url,
            settings.webhook_secret,
            request_timeout=settings.request_timeout_sec,
            download_timeout=settings.download_timeout_sec,
            **kwargs,
        )

    def convert(
        self,
        *,
        html: str | None = None,
        url: str | None = None,
        file_path: str | None = None,
        pdf_options: Mapping[str, Any] | None = None,
        webhook_url: str | None = None,
        poll_interval_ms: float = DEFAULT_POLL_INTERVAL_MS,
        timeout_ms: float = DEFAULT_CONVERT_TIMEOUT_MS,
        save_to: str | None = None,
    ) -> ConversionResult:
        """Convert HTML, a URL or a local file to PDF.

        Exactly one of ``html``, ``url`` or ``file_path`` must be given.

        Returns the job id when ``webhook_url`` is set (the service will call
        back; no polling happens). Otherwise waits for the job and returns the
        PDF bytes, or the ``save_to`` path once the file has been written.
        """
        request = ConversionRequest.create(
            html=html,
            url=url,
            file_path=file_path,
            pdf_options=pdf_options,
            webhook_url=webhook_url,
            poll_interval_ms=poll_interval_ms,
            timeout_ms=timeout_ms,
            save_to=save_to,
        )
        return self.convert_request(request)

    def convert_request(self, request: ConversionRequest) -> ConversionResult:
        job_id = self.submit(request)
        if request.webhook_url:
            logger.debug("job %s will be reported to the webhook, not polling", job_id)
            return job_id
        return self._poller.run(
            job_id,
            poll_interval_ms=request.poll_interval_ms,
            timeout_ms=request.timeout_ms,
            save_to=request.save_to,
        )

    def submit(self, request: ConversionRequest) -> str:
        return self._submitter.submit(request)

    def get_job(
        self,
        job_id: str,
        *,
        poll_interval_ms: float = DEFAULT_POLL_INTERVAL_MS,
        timeout_ms: float = DEFAULT_JOB_TIMEOUT_MS,
        save_to: str | None = None,
    ) -> ConversionResult:
        """Wait for an existing job and download its PDF."""
        if not job_id:
            raise ConfigurationError("Missing job_id")
        return self._poller.run(job_id, poll_interval_ms=poll_interval_ms, timeout_ms=timeout_ms, save_to=save_to)

    def get_job_status(self, job_id: str) -> Job:
        """Read the job once, without waiting or downloading."""
        if not job_id:
            raise ConfigurationError("Missing job_id")
        return self._poller.fetch(job_id)

    def verify_webhook(self, raw_body: bytes | str, signature: str | None) -> Any:
        """Return the parsed webhook payload if ``signature`` matches the raw body."""
        return self._webhooks.verify(raw_body, signature)
