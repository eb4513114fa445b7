import hashlib
import hmac
import json
from typing import Any

from .errors import ConfigurationError, MalformedPayload, SignatureMismatch

SIGNATURE_PREFIX = "sha256="


def _as_bytes(raw: bytes | bytearray | str) -> bytes:
    if isinstance(raw, str):
        return raw.encode("utf-8")
    return bytes(raw)


class WebhookVerifier:
    """Checks ``sha256=<hex>`` HMAC signatures on webhook callbacks.

    Pass the body exactly as received; re-serialized JSON will not match.
    """

    def __init__(self, secret: str | None) -> None:
        self._secret = secret or None

    @property
    def configured(self) -> bool:
        return self._secret is not None

    def _require_secret(self) -> bytes:
        if self._secret is None:
            raise ConfigurationError("Missing webhook_secret in PdfClient constructor")
        return self._secret.encode("utf-8")

    def sign(self, raw_payload: bytes | bytearray | str) -> str:
        digest = hmac.new(self._require_secret(), _as_bytes(raw_payload), hashlib.sha256).hexdigest()
        return SIGNATURE_PREFIX + digest

    def verify(self, raw_payload: bytes | bytearray | str, signature: str | None) -> Any:
        expected = self.sign(raw_payload)
        if not hmac.compare_digest(expected.encode("utf-8"), (signature or "").encode("utf-8")):
            raise SignatureMismatch("Invalid webhook signature")
        try:
            return json.loads(_as_bytes(raw_payload))
        except ValueError as e:
            raise MalformedPayload("Invalid JSON in webhook payload") from e
