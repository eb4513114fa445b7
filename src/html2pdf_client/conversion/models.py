from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from .errors import ConfigurationError

DEFAULT_POLL_INTERVAL_MS = 2000
# convert() waits less than a direct get_job() call
DEFAULT_CONVERT_TIMEOUT_MS = 300_000
DEFAULT_JOB_TIMEOUT_MS = 900_000


class JobStatus:
    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class HtmlSource:
    html: str


@dataclass(frozen=True)
class UrlSource:
    url: str


@dataclass(frozen=True)
class FileSource:
    path: str


ContentSource = Union[HtmlSource, UrlSource, FileSource]

# bytes when held in memory, str when written to save_to
ConversionResult = Union[bytes, str]


def check_polling(poll_interval_ms: float, timeout_ms: float) -> None:
    if poll_interval_ms is None or poll_interval_ms < 0:
        raise ConfigurationError("poll_interval_ms must be a non-negative number")
    if timeout_ms is None or timeout_ms < 0:
        raise ConfigurationError("timeout_ms must be a non-negative number")


@dataclass(frozen=True)
class ConversionRequest:
    source: ContentSource
    pdf_options: Mapping[str, Any] = field(default_factory=dict)
    webhook_url: str | None = None
    poll_interval_ms: float = DEFAULT_POLL_INTERVAL_MS
    timeout_ms: float = DEFAULT_CONVERT_TIMEOUT_MS
    save_to: str | None = None

    @classmethod
    def create(
        cls,
        *,
        html: str | None = None,
        url: str | None = None,
        file_path: str | None = None,
        pdf_options: Mapping[str, Any] | None = None,
        webhook_url: str | None = None,
        poll_interval_ms: float = DEFAULT_POLL_INTERVAL_MS,
        timeout_ms: float = DEFAULT_CONVERT_TIMEOUT_MS,
        save_to: str | None = None,
    ) -> "ConversionRequest":
        """Build a request from keyword options, enforcing exactly one content source.

        Empty strings count as absent. Raises ConfigurationError without touching
        the network or the filesystem.
        """
        sources: list[ContentSource] = []
        if html:
            sources.append(HtmlSource(html))
        if url:
            sources.append(UrlSource(url))
        if file_path:
            sources.append(FileSource(str(file_path)))
        if not sources:
            raise ConfigurationError("You must provide html, url, or file_path")
        if len(sources) > 1:
            raise ConfigurationError("Provide only one of html, url, or file_path")
        check_polling(poll_interval_ms, timeout_ms)
        return cls(
            source=sources[0],
            pdf_options=dict(pdf_options or {}),
            webhook_url=webhook_url or None,
            poll_interval_ms=poll_interval_ms,
            timeout_ms=timeout_ms,
            save_to=str(save_to) if save_to else None,
        )


@dataclass(frozen=True)
class Job:
    id: str
    status: str
    download_url: str | None = None
    error_message: str | None = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any], job_id: str) -> "Job":
        return cls(
            id=str(data.get("jobId") or job_id),
            status=str(data.get("status", "")),
            download_url=data.get("downloadUrl") or None,
            error_message=data.get("errorMessage") or None,
        )

    @property
    def is_ready(self) -> bool:
        return self.status == JobStatus.COMPLETED and bool(self.download_url)

    @property
    def is_failed(self) -> bool:
        return self.status == JobStatus.FAILED
