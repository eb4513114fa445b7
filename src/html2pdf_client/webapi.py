import logging
import os
from typing import Any, Callable

from fastapi import FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from html2pdf_client import __version__
from html2pdf_client.config import WEBHOOK_SECRET_ENV
from html2pdf_client.conversion import MalformedPayload, SignatureMismatch, WebhookVerifier

logger = logging.getLogger(__name__)

app = FastAPI(
    title="HTML to PDF Webhook Receiver",
    version=os.getenv("HTML2PDF_RECEIVER_VERSION", __version__),
    description=(
        "Receives job callbacks from the HTML to PDF conversion service and "
        "checks their HMAC signature before handing them to the application."
    ),
)

WEBHOOK_SECRET = os.getenv(WEBHOOK_SECRET_ENV) or None

EventHandler = Callable[[Any], None]
HANDLERS: list[EventHandler] = []


def register_handler(handler: EventHandler) -> EventHandler:
    """Register a callable to receive each verified event. Usable as a decorator."""
    HANDLERS.append(handler)
    return handler


@app.get("/health")
def health() -> dict[str, str]:
    """Basic health check endpoint."""
    return {"status": "ok"}


@app.post("/webhooks/pdf")
async def receive_webhook(
    request: Request,
    x_webhook_signature: str | None = Header(None),
) -> JSONResponse:
    """Verify and dispatch a conversion callback.

    The signature is computed over the raw body, so the body is read as bytes
    and only parsed after verification.
    """
    raw = await request.body()
    verifier = WebhookVerifier(WEBHOOK_SECRET)
    if not verifier.configured:
        logger.error("webhook received but no secret is configured")
        raise HTTPException(
            status_code=503,
            detail={"code": "not_configured", "message": f"Set {WEBHOOK_SECRET_ENV} to accept webhooks"},
        )
    try:
        event = verifier.verify(raw, x_webhook_signature)
    except SignatureMismatch as e:
        logger.warning("rejected webhook with invalid signature")
        raise HTTPException(status_code=401, detail={"code": "invalid_signature", "message": str(e)})
    except MalformedPayload as e:
        raise HTTPException(status_code=400, detail={"code": "invalid_payload", "message": str(e)})

    job_id = event.get("jobId") if isinstance(event, dict) else None
    logger.info("webhook received for job %s", job_id)
    for handler in HANDLERS:
        handler(event)
    return JSONResponse(status_code=status.HTTP_200_OK, content={"status": "received", "jobId": job_id})


def run() -> None:
    """Run a development ASGI server using uvicorn.

    Exposes the app at host:port (default 0.0.0.0:8080). Set PORT env var to override.
    """
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8080"))
    reload = os.getenv("RELOAD", "false").lower() in {"1", "true", "yes", "on"}

    uvicorn.run("html2pdf_client.webapi:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    run()
