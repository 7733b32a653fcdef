from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import Settings
from .errors import ConfigurationError, RemoteCallError
from .records import (
    Applicant,
    ApplicantStatusUpdate,
    Channel,
    Decision,
    Direction,
    MessageLogEntry,
    RecordType,
)

logger = logging.getLogger(__name__)


class RemoteStateClient:
    """
    JSON RPC client for the spreadsheet-backed web app that owns all records.

    Every response carries an ``ok`` flag; anything other than ``ok: true``
    is raised as RemoteCallError with the remote ``error`` as its message.
    """

    def __init__(
        self,
        base_url: str | None,
        auth_token: str = "",
        timeout: float = 20.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.auth_token = auth_token
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> RemoteStateClient:
        return cls(
            base_url=settings.gas_webapp_url,
            auth_token=settings.gas_auth_token,
            timeout=settings.remote_timeout_seconds,
        )

    def call(
        self,
        path_suffix: str = "",
        method: str = "GET",
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        if not self.base_url:
            raise ConfigurationError("GAS_WEBAPP_URL is not configured")

        url = f"{self.base_url}{path_suffix}"
        method = method.upper()
        try:
            with httpx.Client(
                timeout=self.timeout, transport=self._transport, follow_redirects=True
            ) as http:
                if method == "POST":
                    response = http.post(url, json=payload or {})
                else:
                    response = http.request(method, url, params=payload or None)
            result = response.json()
        except httpx.HTTPError as exc:
            raise RemoteCallError(f"Remote store request failed: {exc}") from exc
        except ValueError as exc:
            raise RemoteCallError("Remote store returned a non-JSON response") from exc

        if not isinstance(result, dict):
            raise RemoteCallError("Remote store returned an unexpected response")
        if not result.get("ok"):
            raise RemoteCallError(str(result.get("error") or "Remote store call failed"))
        return result

    # --- Typed record writes ---

    def put_record(self, record_type: RecordType, payload: dict[str, Any]) -> dict[str, Any]:
        return self.call(
            "",
            "POST",
            {"type": record_type.value, "token": self.auth_token, "payload": payload},
        )

    def save_applicant(self, applicant: Applicant) -> dict[str, Any]:
        return self.put_record(RecordType.APPLICANTS, applicant.model_dump())

    def update_applicant_status(self, update: ApplicantStatusUpdate) -> dict[str, Any]:
        return self.put_record(RecordType.APPLICANTS, update.model_dump(exclude_none=True))

    def append_message(self, entry: MessageLogEntry) -> dict[str, Any]:
        return self.put_record(RecordType.MESSAGES, entry.model_dump())

    def log_message(
        self,
        applicant_id: str,
        direction: Direction,
        content: str,
        channel: Channel = "sms",
        operator: str = "system",
    ) -> dict[str, Any]:
        entry = MessageLogEntry(
            applicant_id=applicant_id,
            direction=direction,
            content=content,
            channel=channel,
            operator=operator,
        )
        return self.append_message(entry)

    def save_interviewer(self, payload: dict[str, Any]) -> dict[str, Any]:
        # Interviewer rows are passed through as given.
        return self.put_record(RecordType.INTERVIEWERS, payload)

    def save_decision(self, decision: Decision) -> dict[str, Any]:
        return self.put_record(RecordType.DECISIONS, decision.model_dump())
