class PdfClientError(Exception):
    """Base class for every error raised by the client."""


class ConfigurationError(PdfClientError, ValueError):
    """Missing or invalid construction/call parameters. Raised before any I/O."""


class RemoteRejection(PdfClientError):
    """The service refused a submission or could not be reached while submitting."""

    def __init__(self, status: int | None, message: str) -> None:
        self.status = status
        self.remote_message = message
        super().__init__(f"PDF conversion failed (status: {status}): {message}")


class JobCreationError(PdfClientError):
    pass


class TransportFailure(PdfClientError):
    """Network-level failure while polling or downloading; keeps the transport's message."""


class JobFailed(PdfClientError):
    def __init__(self, job_id: str, reason: str | None) -> None:
        self.job_id = job_id
        self.reason = reason
        super().__init__(f"PDF conversion failed: {reason or 'Unknown error'}")


class ConversionTimeout(PdfClientError):
    def __init__(self, job_id: str, timeout_ms: float) -> None:
        self.job_id = job_id
        self.timeout_ms = timeout_ms
        seconds = timeout_ms / 1000
        if float(seconds).is_integer():
            seconds = int(seconds)
        super().__init__(f"PDF conversion timed out after {seconds} seconds waiting for completion")


class WebhookVerificationError(PdfClientError):
    pass


class SignatureMismatch(WebhookVerificationError):
    pass


class MalformedPayload(WebhookVerificationError):
    pass
