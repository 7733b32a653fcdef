from __future__ import annotations

import pytest

from recruit_relay.sms import Intent, classify_reply


@pytest.mark.parametrize("text", ["1", " 1 ", "OK", "ok", "Ok\n", "はい", "はい。"])
def test_accept_replies(text: str) -> None:
    assert classify_reply(text) is Intent.ACCEPT


def test_only_exact_two_reschedules() -> None:
    assert classify_reply("2") is Intent.RESCHEDULE
    assert classify_reply(" 2 ") is Intent.RESCHEDULE
    assert classify_reply("22") is Intent.UNRECOGNIZED
    assert classify_reply("2です") is Intent.UNRECOGNIZED


@pytest.mark.parametrize(
    ("text", "intent"),
    [("STOP", Intent.OPT_STOP), ("Unstop", Intent.OPT_UNSTOP), ("help ", Intent.HELP)],
)
def test_consent_keywords(text: str, intent: Intent) -> None:
    assert classify_reply(text) is intent


@pytest.mark.parametrize("text", ["3", "", "   ", "ok!", "stop please", "いいえ"])
def test_everything_else_is_unrecognized(text: str) -> None:
    assert classify_reply(text) is Intent.UNRECOGNIZED
