from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

import httpx
from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

from .config import Settings
from .log import get_logger

logger = get_logger(__name__)

# Vonage reports per-part status codes as strings; "0" is the only success.
VONAGE_SUCCESS_STATUS = "0"


@dataclass
class SendResult:
    ok: bool
    status: str
    message_id: str | None = None
    error_text: str | None = None
    message_count: int = 1


class SmsGateway(Protocol):
    """The only surface the rest of the service needs from an SMS vendor."""

    def send_message(self, to: str, from_: str, text: str) -> SendResult: ...


class VonageGateway:
    """
    Send through the Vonage SMS API (``POST /sms/json``).

    Long texts are split by the vendor into several parts, each with its own
    status. The send only counts as successful if every part was accepted.
    """

    def __init__(
        self,
        api_key: str | None,
        api_secret: str | None,
        base_url: str = "https://rest.nexmo.com",
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_key = api_key
        self.api_secret = api_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def send_message(self, to: str, from_: str, text: str) -> SendResult:
        if not self.api_key or not self.api_secret:
            raise RuntimeError(
                "Vonage credentials are not configured (VONAGE_API_KEY / VONAGE_API_SECRET)"
            )

        form = {
            "api_key": self.api_key,
            "api_secret": self.api_secret,
            "from": from_,
            "to": to,
            "text": text,
        }
        url = f"{self.base_url}/sms/json"

        if self._client is not None:
            response = self._client.post(url, data=form, timeout=self.timeout)
        else:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(url, data=form)
        response.raise_for_status()

        result = parse_vonage_response(response.json())
        logger.debug(
            "vonage.send_response",
            extra={"status": result.status, "message_count": result.message_count},
        )
        return result


def parse_vonage_response(data: Any) -> SendResult:
    """
    Map a Vonage send response onto a SendResult.

    Expected shape::

        {"message-count": "1",
         "messages": [{"status": "0", "message-id": "..."}]}

    A rejected part carries ``"error-text"`` instead of ``"message-id"``.
    """
    if not isinstance(data, dict) or not isinstance(data.get("messages"), list) or not data["messages"]:
        raise ValueError(f"Unexpected Vonage response: {str(data)[:200]}")

    parts: list[dict[str, Any]] = data["messages"]
    message_count = int(data.get("message-count") or len(parts))

    for part in parts:
        status = str(part.get("status", ""))
        if status != VONAGE_SUCCESS_STATUS:
            return SendResult(
                ok=False,
                status=status,
                message_id=part.get("message-id"),
                error_text=part.get("error-text") or f"status {status}",
                message_count=message_count,
            )

    return SendResult(
        ok=True,
        status=VONAGE_SUCCESS_STATUS,
        message_id=parts[0].get("message-id"),
        message_count=message_count,
    )


class TwilioGateway:
    """Same contract as VonageGateway, backed by the Twilio REST client."""

    def __init__(
        self,
        account_sid: str | None,
        auth_token: str | None,
        client: Client | None = None,
    ) -> None:
        self.account_sid = account_sid
        self.auth_token = auth_token
        self._client = client

    def get_client(self) -> Client:
        if self._client is not None:
            return self._client

        if not self.account_sid or not self.auth_token:
            raise RuntimeError(
                "Twilio credentials are not configured (TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN)"
            )

        self._client = Client(self.account_sid, self.auth_token)
        return self._client

    def send_message(self, to: str, from_: str, text: str) -> SendResult:
        client = self.get_client()
        # Twilio wants E.164; our numbers arrive as bare digits.
        to_e164 = to if to.startswith("+") else f"+{to}"

        try:
            message = client.messages.create(to=to_e164, from_=from_, body=text)
        except TwilioRestException as exc:
            return SendResult(
                ok=False,
                status=str(exc.code or exc.status),
                error_text=exc.msg,
            )

        return SendResult(
            ok=True,
            status=str(message.status),
            message_id=message.sid,
            message_count=int(message.num_segments or 1),
        )


def build_gateway(settings: Settings) -> SmsGateway:
    if settings.provider == "vonage":
        return VonageGateway(
            api_key=settings.api_key,
            api_secret=settings.api_secret,
            base_url=settings.vonage_base_url,
            timeout=settings.request_timeout,
        )
    if settings.provider == "twilio":
        return TwilioGateway(
            account_sid=settings.twilio_account_sid,
            auth_token=settings.twilio_auth_token,
        )
    raise ValueError(f"Unknown SMS provider: {settings.provider!r}")
