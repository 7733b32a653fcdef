from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest
from twilio.base.exceptions import TwilioRestException

from recruit_relay import twilio_client
from recruit_relay.config import Settings
from recruit_relay.errors import ConfigurationError, SendError
from recruit_relay.twilio_client import SmsSender


class FakeMessages:
    def __init__(self, error: Exception | None = None) -> None:
        self.created: list[dict[str, Any]] = []
        self.error = error

    def create(self, **kwargs: Any) -> SimpleNamespace:
        if self.error is not None:
            raise self.error
        self.created.append(kwargs)
        return SimpleNamespace(sid="SM0001", status="queued")


@pytest.fixture
def fake_messages(monkeypatch: pytest.MonkeyPatch) -> FakeMessages:
    messages = FakeMessages()
    credentials: list[tuple[str, str]] = []

    def fake_client(account_sid: str, auth_token: str) -> SimpleNamespace:
        credentials.append((account_sid, auth_token))
        return SimpleNamespace(messages=messages)

    monkeypatch.setattr(twilio_client, "Client", fake_client)
    messages.credentials = credentials  # type: ignore[attr-defined]
    return messages


def test_send_uses_from_number(fake_messages: FakeMessages) -> None:
    result = SmsSender(Settings()).send("+819012345678", "こんにちは")

    assert result.sid == "SM0001"
    assert result.status == "queued"
    assert fake_messages.created == [
        {"to": "+819012345678", "body": "こんにちは", "from_": "+815000000000"}
    ]
    assert fake_messages.credentials == [("AC" + "0" * 32, "test-auth-token")]  # type: ignore[attr-defined]


def test_messaging_service_takes_precedence(
    fake_messages: FakeMessages, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("TWILIO_MESSAGING_SERVICE_SID", "MG123")

    SmsSender(Settings()).send("+819012345678", "hi")

    assert fake_messages.created == [
        {"to": "+819012345678", "body": "hi", "messaging_service_sid": "MG123"}
    ]


def test_provider_error_becomes_send_error(fake_messages: FakeMessages) -> None:
    fake_messages.error = TwilioRestException(
        400, "/Messages.json", msg="The 'To' number is not a valid phone number."
    )

    with pytest.raises(SendError, match="not a valid phone number"):
        SmsSender(Settings()).send("+81", "hi")


def test_missing_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TWILIO_ACCOUNT_SID")

    with pytest.raises(ConfigurationError, match="TWILIO_ACCOUNT_SID"):
        SmsSender(Settings()).send("+819012345678", "hi")


def test_missing_sender(fake_messages: FakeMessages, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TWILIO_FROM_NUMBER")

    with pytest.raises(ConfigurationError, match="TWILIO_FROM_NUMBER"):
        SmsSender(Settings()).send("+819012345678", "hi")
    assert fake_messages.created == []
