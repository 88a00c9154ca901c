from __future__ import annotations

import base64
import logging
from collections.abc import Iterator
from typing import Any

import pytest

from sms_bridge.config import Settings
from sms_bridge.gateway import SendResult


class FakeGateway:
    """Records every send and answers with a canned result or exception."""

    def __init__(self, result: SendResult | None = None, error: Exception | None = None) -> None:
        self.result = result or SendResult(ok=True, status="0", message_id="0A0000000123ABCD1")
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def send_message(self, to: str, from_: str, text: str) -> SendResult:
        self.calls.append({"to": to, "from_": from_, "text": text})
        if self.error is not None:
            raise self.error
        return self.result


def make_settings(**overrides: Any) -> Settings:
    """Settings that ignore whatever happens to be in the test environment."""
    values: dict[str, Any] = {
        "api_key": "abc123",
        "api_secret": "s3cr3t",
        "from_number": "Acme",
        "auth_name": None,
        "auth_pass": None,
        "provider": "vonage",
        "twilio_account_sid": None,
        "twilio_auth_token": None,
        "vonage_base_url": "https://rest.example.test",
        "request_timeout": 5.0,
        "log_level": "INFO",
    }
    values.update(overrides)
    return Settings(**values)


def basic_auth(name: str, password: str) -> dict[str, str]:
    token = base64.b64encode(f"{name}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def app_records() -> Iterator[list[logging.LogRecord]]:
    """
    Capture records from the sms_bridge loggers.

    They do not propagate to the root logger, so caplog never sees them;
    attach a handler to the package logger directly.
    """
    package_logger = logging.getLogger("sms_bridge")
    handler = _ListHandler()
    package_logger.addHandler(handler)
    try:
        yield handler.records
    finally:
        package_logger.removeHandler(handler)
