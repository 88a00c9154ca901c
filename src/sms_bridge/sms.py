from __future__ import annotations

import re
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

MIN_NUMBER_DIGITS: Final[int] = 10
MAX_TEXT_CHARS: Final[int] = 140

# Plain digits ("905423247231") or hyphen-separated groups ("90-542-324-7231"),
# with an optional leading "+".
NUMBER_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\+?[0-9]+(?:-[0-9]+)*$")


class InvalidSms(ValueError):
    """Raised when a number or message text fails validation."""


def normalise_number(number: str) -> str:
    """
    Validate a destination number and return it as bare digits.

    The vendor expects international format without "+" or separators,
    so "+90-542-324-7231" becomes "905423247231".
    """
    candidate = number.strip()
    if not NUMBER_PATTERN.match(candidate):
        raise InvalidSms(
            "Phone number may only contain digits, optionally separated by hyphens."
        )

    digits = candidate.lstrip("+").replace("-", "")
    if len(digits) < MIN_NUMBER_DIGITS:
        raise InvalidSms(f"Phone number must contain at least {MIN_NUMBER_DIGITS} digits.")
    return digits


def check_text(text: str) -> str:
    if not text or not text.strip():
        raise InvalidSms("Message text must not be empty.")
    if len(text) > MAX_TEXT_CHARS:
        raise InvalidSms(
            f"Message text must be at most {MAX_TEXT_CHARS} characters (got {len(text)})."
        )
    return text


class OutboundSms(BaseModel):
    """JSON body accepted by the programmatic send endpoint."""

    to: str
    text: str


class VendorPayload(BaseModel):
    # Vendors add fields over time; keep whatever arrives.
    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)

    msisdn: str | None = None
    to: str | None = None
    message_id: str | None = Field(default=None, alias="messageId")
    message_timestamp: str | None = Field(default=None, alias="message-timestamp")


class DeliveryReceipt(VendorPayload):
    network_code: str | None = Field(default=None, alias="network-code")
    price: str | None = None
    status: str | None = None
    scts: str | None = None
    err_code: str | None = Field(default=None, alias="err-code")


class InboundMessage(VendorPayload):
    text: str | None = None
    type: str | None = None
    keyword: str | None = None
