from __future__ import annotations

import json
from typing import Any

from fastapi import BackgroundTasks, Depends, FastAPI, Form, Request
from fastapi.responses import FileResponse, JSONResponse

from .config import Settings, get_settings
from .log import configure_logging, get_logger
from .sender import SendOutcome, SmsSender
from .sms import OutboundSms
from .webhooks import log_delivery_receipt, log_inbound_message, require_webhook_auth

logger = get_logger(__name__)


def _outcome_response(outcome: SendOutcome) -> JSONResponse:
    if outcome.ok:
        status_code = 200
    elif outcome.rejected:
        status_code = 400
    else:
        status_code = 502
    return JSONResponse({"ok": outcome.ok, "message": outcome.message}, status_code=status_code)


async def _read_json_object(request: Request) -> dict[str, Any] | None:
    raw = await request.body()
    try:
        payload = json.loads(raw or b"null")
    except (json.JSONDecodeError, UnicodeDecodeError):
        payload = None

    if not isinstance(payload, dict):
        logger.warning(
            "webhook.invalid_json",
            extra={"path": request.url.path, "body_preview": raw[:200].decode("utf-8", "replace")},
        )
        return None
    return payload


def create_app(settings: Settings | None = None, sender: SmsSender | None = None) -> FastAPI:
    """
    Build the web app.

    ``settings`` defaults to the environment-derived instance; ``sender`` is
    built from it unless one is passed in (tests pass a sender with a fake
    gateway).
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(title="sms-bridge", version="0.1.0")
    app.state.settings = settings
    app.state.sender = sender or SmsSender.from_settings(settings)

    form_page = settings.project_root / "static" / "index.html"

    # --- Outbound ---

    @app.get("/")
    def form_page_view() -> FileResponse:
        """The send form. Submits to /send and shows the returned status line."""
        return FileResponse(form_page)

    @app.post("/send")
    def send_from_form(
        request: Request,
        number: str = Form(""),
        text: str = Form(""),
    ) -> JSONResponse:
        outcome = request.app.state.sender.send(to=number, text=text)
        return _outcome_response(outcome)

    @app.post("/api/sms")
    def send_from_json(payload: OutboundSms, request: Request) -> JSONResponse:
        """
        Programmatic variant of /send.

        Accepts JSON:

          { "to": "905423247231", "text": "Hi!" }
        """
        outcome = request.app.state.sender.send(to=payload.to, text=payload.text)
        return _outcome_response(outcome)

    # --- Inbound vendor webhooks ---

    @app.post("/webhooks/delivery-receipt", dependencies=[Depends(require_webhook_auth)])
    async def delivery_receipt(request: Request, background_tasks: BackgroundTasks) -> JSONResponse:
        payload = await _read_json_object(request)
        if payload is None:
            return JSONResponse({"error": "invalid_json"}, status_code=400)

        # Acknowledge first; the vendor retries anything slow or non-2xx.
        background_tasks.add_task(log_delivery_receipt, payload)
        return JSONResponse({"status": "ok"})

    @app.post("/webhooks/inbound-sms", dependencies=[Depends(require_webhook_auth)])
    async def inbound_sms(request: Request, background_tasks: BackgroundTasks) -> JSONResponse:
        payload = await _read_json_object(request)
        if payload is None:
            return JSONResponse({"error": "invalid_json"}, status_code=400)

        background_tasks.add_task(log_inbound_message, payload)
        return JSONResponse({"status": "ok"})

    @app.get("/healthz")
    def healthz(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok", "provider": request.app.state.settings.provider})

    return app


app = create_app()
