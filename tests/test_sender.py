from __future__ import annotations

import logging

import httpx
import pytest

from conftest import FakeGateway, make_settings
from sms_bridge.gateway import SendResult, VonageGateway
from sms_bridge.sender import SmsSender


def test_send_success_reports_sent_successfully(fake_gateway: FakeGateway) -> None:
    sender = SmsSender(gateway=fake_gateway, from_number="Acme")

    outcome = sender.send(to="905423247231", text="Hi!")

    assert outcome.ok is True
    assert "sent successfully" in outcome.message
    assert "0A0000000123ABCD1" in outcome.message
    assert fake_gateway.calls == [{"to": "905423247231", "from_": "Acme", "text": "Hi!"}]


def test_send_success_without_message_id() -> None:
    gateway = FakeGateway(result=SendResult(ok=True, status="0"))
    outcome = SmsSender(gateway=gateway, from_number="Acme").send(to="905423247231", text="Hi!")

    assert outcome.ok is True
    assert outcome.message == "Message sent successfully."


def test_send_strips_hyphens_before_calling_vendor(fake_gateway: FakeGateway) -> None:
    SmsSender(gateway=fake_gateway, from_number="Acme").send(to="90-542-324-7231", text="Hi!")

    assert fake_gateway.calls[0]["to"] == "905423247231"


def test_malformed_number_never_reaches_gateway(fake_gateway: FakeGateway) -> None:
    outcome = SmsSender(gateway=fake_gateway, from_number="Acme").send(to="abc", text="Hi!")

    assert outcome.ok is False
    assert outcome.rejected is True
    assert "digits" in outcome.message
    assert fake_gateway.calls == []


def test_non_ascii_digits_never_reach_gateway(fake_gateway: FakeGateway) -> None:
    outcome = SmsSender(gateway=fake_gateway, from_number="Acme").send(
        to="\u0669\u0660\u0665\u0664\u0662\u0663\u0662\u0664\u0667\u0662\u0663\u0661", text="Hi!"
    )

    assert outcome.rejected is True
    assert fake_gateway.calls == []


@pytest.mark.parametrize("text", ["", "x" * 141])
def test_bad_text_never_reaches_gateway(fake_gateway: FakeGateway, text: str) -> None:
    outcome = SmsSender(gateway=fake_gateway, from_number="Acme").send(to="905423247231", text=text)

    assert outcome.ok is False
    assert outcome.rejected is True
    assert fake_gateway.calls == []


def test_vendor_failure_includes_error_text() -> None:
    gateway = FakeGateway(
        result=SendResult(ok=False, status="29", error_text="Non-Whitelisted Destination")
    )

    outcome = SmsSender(gateway=gateway, from_number="Acme").send(to="905423247231", text="Hi!")

    assert outcome.ok is False
    assert outcome.rejected is False
    assert outcome.message == "Message failed with error: Non-Whitelisted Destination"


def test_transport_error_is_reported_generically(
    app_records: list[logging.LogRecord],
) -> None:
    gateway = FakeGateway(error=httpx.ConnectError("connection refused"))

    outcome = SmsSender(gateway=gateway, from_number="Acme").send(to="905423247231", text="Hi!")

    assert outcome.ok is False
    assert outcome.rejected is False
    assert outcome.message == "There was an error sending the SMS: connection refused"

    errors = [r for r in app_records if r.getMessage() == "sms.send_error"]
    assert len(errors) == 1
    assert errors[0].exc_info is not None


def test_missing_from_number_is_reported_without_calling_vendor(fake_gateway: FakeGateway) -> None:
    outcome = SmsSender(gateway=fake_gateway, from_number=None).send(to="905423247231", text="Hi!")

    assert outcome.ok is False
    assert "SMS_FROM_NUMBER" in outcome.message
    assert fake_gateway.calls == []


def test_from_settings_wires_configured_gateway() -> None:
    sender = SmsSender.from_settings(make_settings(from_number="Acme"))

    assert sender.from_number == "Acme"
    assert isinstance(sender.gateway, VonageGateway)
    assert sender.gateway.api_key == "abc123"


def test_missing_credentials_surface_as_send_error() -> None:
    sender = SmsSender.from_settings(make_settings(api_key=None))

    outcome = sender.send(to="905423247231", text="Hi!")

    assert outcome.ok is False
    assert outcome.message.startswith("There was an error sending the SMS: Vonage credentials")
