"""
HTML to PDF conversion client.

Submits HTML, URLs or local files to the remote conversion service, waits for
the job to finish, and returns the PDF as bytes or writes it to disk. Webhook
callbacks from the service can be checked with ``PdfClient.verify_webhook``.
"""

import logging

from .client import PdfClient
from .conversion import (
    ConfigurationError,
    ConversionRequest,
    ConversionTimeout,
    Job,
    JobCreationError,
    JobFailed,
    JobStatus,
    MalformedPayload,
    PdfClientError,
    RemoteRejection,
    SignatureMismatch,
    TransportFailure,
    WebhookVerificationError,
)

__all__ = [
    "__version__",
    "PdfClient",
    "ConversionRequest",
    "Job",
    "JobStatus",
    "PdfClientError",
    "ConfigurationError",
    "RemoteRejection",
    "JobCreationError",
    "TransportFailure",
    "JobFailed",
    "ConversionTimeout",
    "WebhookVerificationError",
    "SignatureMismatch",
    "MalformedPayload",
]

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
