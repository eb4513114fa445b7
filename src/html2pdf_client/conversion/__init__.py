"""
Domain layer for PDF conversion jobs.
Provides the transport gateway interface, the job submitter and poller, and
webhook signature checks, so front-ends (library calls, HTTP receivers, UIs)
share the same core logic.
"""

from .errors import (
    ConfigurationError,
    ConversionTimeout,
    JobCreationError,
    JobFailed,
    MalformedPayload,
    PdfClientError,
    RemoteRejection,
    SignatureMismatch,
    TransportFailure,
    WebhookVerificationError,
)
from .interfaces import TransportGateway
from .models import ConversionRequest, FileSource, HtmlSource, Job, JobStatus, UrlSource
from .service import JobPoller, JobSubmitter
from .webhooks import WebhookVerifier
