from __future__ import annotations

from enum import Enum
from typing import Final

from pydantic import BaseModel


class InboundSms(BaseModel):
    phone: str
    text: str


class Intent(str, Enum):
    ACCEPT = "accept"
    RESCHEDULE = "reschedule"
    OPT_STOP = "opt_stop"
    OPT_UNSTOP = "opt_unstop"
    HELP = "help"
    UNRECOGNIZED = "unrecognized"


ACCEPT_REPLIES: Final[frozenset[str]] = frozenset({"1", "ok", "はい", "はい。"})
RESCHEDULE_REPLY: Final[str] = "2"
KEYWORD_INTENTS: Final[dict[str, Intent]] = {
    "stop": Intent.OPT_STOP,
    "unstop": Intent.OPT_UNSTOP,
    "help": Intent.HELP,
}


def normalise_reply(text: str) -> str:
    return text.strip().lower()


def classify_reply(text: str) -> Intent:
    """Map an inbound SMS body onto the keyword it answers (case and whitespace insensitive)."""
    reply = normalise_reply(text)
    if reply in ACCEPT_REPLIES:
        return Intent.ACCEPT
    if reply == RESCHEDULE_REPLY:
        return Intent.RESCHEDULE
    return KEYWORD_INTENTS.get(reply, Intent.UNRECOGNIZED)
