from __future__ import annotations

import base64
import binascii
import secrets
from typing import Any

from fastapi import HTTPException, Request
from pydantic import ValidationError

from .config import Settings
from .log import get_logger
from .sms import DeliveryReceipt, InboundMessage

logger = get_logger(__name__)

# --- Basic-auth gate ---


def parse_basic_authorization(header: str | None) -> tuple[str, str] | None:
    """
    Decode an ``Authorization: Basic <base64(name:password)>`` header.

    Returns None for a missing header, another scheme, or an undecodable
    value; callers treat all of those as "no credentials".
    """
    if not header:
        return None

    scheme, _, encoded = header.partition(" ")
    if scheme.lower() != "basic" or not encoded.strip():
        return None

    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    name, sep, password = decoded.partition(":")
    if not sep:
        return None
    return name, password


def credentials_match(settings: Settings, name: str, password: str) -> bool:
    if not settings.webhook_auth_enabled:
        return False
    name_ok = secrets.compare_digest(name.encode(), settings.auth_name.encode())  # type: ignore[union-attr]
    pass_ok = secrets.compare_digest(password.encode(), settings.auth_pass.encode())  # type: ignore[union-attr]
    return name_ok and pass_ok


def require_webhook_auth(request: Request) -> None:
    """
    FastAPI dependency guarding the vendor webhooks.

    Open when no webhook credentials are configured. Otherwise a missing or
    wrong Basic header is answered with 401, a non-2xx status, so the vendor
    keeps retrying instead of considering the callback delivered.
    """
    settings: Settings = request.app.state.settings
    if not settings.webhook_auth_enabled:
        return

    credentials = parse_basic_authorization(request.headers.get("Authorization"))
    if credentials is None or not credentials_match(settings, *credentials):
        logger.warning(
            "webhook.unauthorized",
            extra={"path": request.url.path, "had_credentials": credentials is not None},
        )
        raise HTTPException(
            status_code=401,
            detail="Invalid webhook credentials",
            headers={"WWW-Authenticate": "Basic"},
        )


# --- Payload logging (runs as a background task after the ack is sent) ---


def log_delivery_receipt(payload: dict[str, Any]) -> None:
    try:
        receipt = DeliveryReceipt.model_validate(payload)
    except ValidationError as exc:
        logger.warning("webhook.delivery_receipt.unparsed", extra={"error": str(exc), "raw": payload})
        return

    logger.info(
        "webhook.delivery_receipt",
        extra={
            "message_id": receipt.message_id,
            "delivery_status": receipt.status,
            "err_code": receipt.err_code,
            "price": receipt.price,
            "raw": payload,
        },
    )


def log_inbound_message(payload: dict[str, Any]) -> None:
    try:
        inbound = InboundMessage.model_validate(payload)
    except ValidationError as exc:
        logger.warning("webhook.inbound_sms.unparsed", extra={"error": str(exc), "raw": payload})
        return

    logger.info(
        "webhook.inbound_sms",
        extra={
            "message_id": inbound.message_id,
            "from_number": inbound.msisdn,
            "to_number": inbound.to,
            "keyword": inbound.keyword,
            "raw": payload,
        },
    )
