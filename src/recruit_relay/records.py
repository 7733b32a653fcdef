from __future__ import annotations

import secrets
import time
import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

CROCKFORD_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"


def utcnow() -> datetime:
    return datetime.now(UTC)


def isoformat_utc(value: datetime) -> str:
    """Millisecond ISO-8601 in UTC with a trailing Z, e.g. 2025-01-31T09:00:00.000Z."""
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_iso() -> str:
    return isoformat_utc(utcnow())


def _encode_crockford(value: int, length: int) -> str:
    chars = []
    for _ in range(length):
        value, rem = divmod(value, 32)
        chars.append(CROCKFORD_ALPHABET[rem])
    return "".join(reversed(chars))


def new_applicant_id(timestamp_ms: int | None = None) -> str:
    """
    Generate a ULID: 10 chars of millisecond timestamp + 16 chars of randomness.

    Lexicographic order of ids follows creation time (to the millisecond).
    """
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    randomness = secrets.randbits(80)
    return _encode_crockford(timestamp_ms, 10) + _encode_crockford(randomness, 16)


class RecordType(str, Enum):
    APPLICANTS = "Applicants"
    INTERVIEWERS = "Interviewers"
    MESSAGES = "Messages"
    DECISIONS = "Decisions"


Direction = Literal["in", "out", "sys"]
Channel = Literal["sms", "note"]


class Applicant(BaseModel):
    applicant_id: str
    created_at: str
    name: str = ""
    phone: str
    source: str = "Web"
    consent_flg: Any = None
    status: str = "pending"
    owner: str = ""
    notes: str = ""
    next_action_at: str = ""


class ApplicantStatusUpdate(BaseModel):
    applicant_id: str
    status: str
    next_action_at: str | None = None


class MessageLogEntry(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    applicant_id: str
    at: str = Field(default_factory=now_iso)
    channel: Channel = "sms"
    direction: Direction
    content: str
    operator: str = "system"


class Interviewer(BaseModel):
    model_config = ConfigDict(extra="allow")

    interviewer_id: str
    name: str = ""
    email: str = ""
    calendar_id: str = ""


class Decision(BaseModel):
    applicant_id: str
    decided_at: str = Field(default_factory=now_iso)
    decision: str
    decided_by: str
    memo: str = ""
