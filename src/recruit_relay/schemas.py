from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from .errors import ValidationError


class RequestBody(BaseModel):
    # Unknown fields are kept so they can be echoed into the audit log.
    model_config = ConfigDict(extra="allow")


class ApplicationRequest(RequestBody):
    name: str | None = None
    phone: str | None = None
    source: str | None = None
    consent_flg: Any = None
    notes: str | None = None


class NextSlotRequest(RequestBody):
    interviewer_id: str | None = None


class SmsSendRequest(RequestBody):
    to: str | None = None
    templateId: str | None = None
    variables: dict[str, Any] | None = None
    body: str | None = None
    applicant_id: str | None = None


class DecisionRequest(RequestBody):
    applicant_id: str | None = None
    decision: str | None = None
    decided_by: str | None = None
    memo: str | None = None


def require_fields(payload: BaseModel, *names: str) -> None:
    """Raise ValidationError listing every named field that is missing or falsy."""
    missing = [name for name in names if not getattr(payload, name, None)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
