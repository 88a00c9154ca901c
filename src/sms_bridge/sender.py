from __future__ import annotations

from dataclasses import dataclass

from .config import Settings
from .gateway import SmsGateway, build_gateway
from .log import get_logger
from .sms import InvalidSms, check_text, normalise_number

logger = get_logger(__name__)


@dataclass
class SendOutcome:
    ok: bool
    message: str
    # True when the request never reached the vendor (bad number/text).
    rejected: bool = False


class SmsSender:
    """
    Outbound flow: validate, hand off to the gateway, turn the result into
    the status line shown to the user.

    Nothing is retried. A vendor rejection or a transport error is reported
    once and the caller decides what to do next.
    """

    def __init__(self, gateway: SmsGateway, from_number: str | None) -> None:
        self.gateway = gateway
        self.from_number = from_number

    @classmethod
    def from_settings(cls, settings: Settings) -> SmsSender:
        return cls(gateway=build_gateway(settings), from_number=settings.from_number)

    def send(self, to: str, text: str) -> SendOutcome:
        try:
            number = normalise_number(to)
            body = check_text(text)
        except InvalidSms as exc:
            logger.info("sms.rejected", extra={"reason": str(exc)})
            return SendOutcome(ok=False, message=str(exc), rejected=True)

        try:
            if not self.from_number:
                raise RuntimeError("SMS_FROM_NUMBER is not configured")
            result = self.gateway.send_message(to=number, from_=self.from_number, text=body)
        except Exception as exc:
            logger.exception("sms.send_error", extra={"to": number})
            return SendOutcome(ok=False, message=f"There was an error sending the SMS: {exc}")

        if not result.ok:
            logger.warning(
                "sms.vendor_failure",
                extra={"to": number, "status": result.status, "error_text": result.error_text},
            )
            return SendOutcome(ok=False, message=f"Message failed with error: {result.error_text}")

        logger.info(
            "sms.sent",
            extra={"to": number, "message_id": result.message_id, "parts": result.message_count},
        )
        if result.message_id:
            return SendOutcome(
                ok=True, message=f"Message sent successfully (id {result.message_id})."
            )
        return SendOutcome(ok=True, message="Message sent successfully.")
