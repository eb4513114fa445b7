import os
from dataclasses import dataclass
from typing import Mapping

DEFAULT_BASE_URL = "https://api.html2pdfconverter.com"

API_KEY_ENV = "HTML2PDF_API_KEY"
BASE_URL_ENV = "HTML2PDF_BASE_URL"
WEBHOOK_SECRET_ENV = "HTML2PDF_WEBHOOK_SECRET"
REQUEST_TIMEOUT_ENV = "HTML2PDF_REQUEST_TIMEOUT_SEC"
DOWNLOAD_TIMEOUT_ENV = "HTML2PDF_DOWNLOAD_TIMEOUT_SEC"


@dataclass(frozen=True)
class ClientSettings:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    webhook_secret: str | None = None
    request_timeout_sec: float = 60.0
    download_timeout_sec: float = 300.0


def load_settings(environ: Mapping[str, str] | None = None) -> ClientSettings:
    """Read client settings from the environment (or the given mapping)."""
    env = os.environ if environ is None else environ
    return ClientSettings(
        api_key=env.get(API_KEY_ENV, ""),
        base_url=env.get(BASE_URL_ENV) or DEFAULT_BASE_URL,
        webhook_secret=env.get(WEBHOOK_SECRET_ENV) or None,
        request_timeout_sec=float(env.get(REQUEST_TIMEOUT_ENV, "60")),
        download_timeout_sec=float(env.get(DOWNLOAD_TIMEOUT_ENV, "300")),
    )
