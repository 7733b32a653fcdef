from __future__ import annotations

from collections.abc import Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from recruit_relay.config import Settings, get_settings
from recruit_relay.errors import SendError
from recruit_relay.main import app, get_remote_client, get_sms_sender
from recruit_relay.remote import RemoteStateClient
from recruit_relay.twilio_client import SmsResult, SmsSender

AUTH_TOKEN = "test-auth-token"
ALLOWED_ORIGIN = "https://recruit.example.com"

ENV_VARS = (
    "GAS_WEBAPP_URL",
    "GAS_AUTH_TOKEN",
    "REMOTE_TIMEOUT_SECONDS",
    "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN",
    "TWILIO_FROM_NUMBER",
    "TWILIO_MESSAGING_SERVICE_SID",
    "PUBLIC_BASE_URL",
    "ALLOWED_ORIGIN",
    "TEST_CALENDAR_ID",
    "DEFAULT_TZ",
    "INTERVIEWER_EMAIL",
    "LOG_LEVEL",
    "HOST",
    "PORT",
)


class FakeRemote(RemoteStateClient):
    """Records every call; responses are looked up by path suffix."""

    def __init__(self) -> None:
        super().__init__(base_url="https://remote.test/exec", auth_token="gas-token")
        self.calls: list[tuple[str, str, dict[str, Any] | None]] = []
        self.responses: dict[str, dict[str, Any] | Exception] = {}
        self.error: Exception | None = None

    def call(
        self,
        path_suffix: str = "",
        method: str = "GET",
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        self.calls.append((path_suffix, method, payload))
        if self.error is not None:
            raise self.error
        result = self.responses.get(path_suffix, {})
        if isinstance(result, Exception):
            raise result
        return {"ok": True, **result}

    def records(self, record_type: str) -> list[dict[str, Any]]:
        return [
            payload["payload"]
            for path, _, payload in self.calls
            if path == "" and payload and payload.get("type") == record_type
        ]

    def calls_to(self, path_suffix: str) -> list[dict[str, Any] | None]:
        return [payload for path, _, payload in self.calls if path == path_suffix]


class FakeSms(SmsSender):
    def __init__(self) -> None:
        super().__init__(Settings())
        self.sent: list[tuple[str, str]] = []
        self.error: SendError | None = None

    def send(self, to: str, body: str) -> SmsResult:
        if self.error is not None:
            raise self.error
        self.sent.append((to, body))
        return SmsResult(sid=f"SM{len(self.sent):032d}", status="queued")


@pytest.fixture(autouse=True)
def relay_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Known environment for every test; settings cache is rebuilt around it."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GAS_WEBAPP_URL", "https://remote.test/exec")
    monkeypatch.setenv("GAS_AUTH_TOKEN", "gas-token")
    monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC" + "0" * 32)
    monkeypatch.setenv("TWILIO_AUTH_TOKEN", AUTH_TOKEN)
    monkeypatch.setenv("TWILIO_FROM_NUMBER", "+815000000000")
    monkeypatch.setenv("ALLOWED_ORIGIN", ALLOWED_ORIGIN)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def sms() -> FakeSms:
    return FakeSms()


@pytest.fixture
def client(remote: FakeRemote, sms: FakeSms) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_remote_client] = lambda: remote
    app.dependency_overrides[get_sms_sender] = lambda: sms
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
