from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Final

from .applicants import ConsentStore, UnpersistedConsentStore
from .config import Settings
from .errors import RemoteCallError
from .interviewers import InterviewerDirectory, StaticInterviewerDirectory
from .records import ApplicantStatusUpdate, isoformat_utc, utcnow
from .remote import RemoteStateClient
from .scheduling import create_interview_event, next_slot_for_interviewer
from .sms import InboundSms, Intent, classify_reply
from .twilio_client import SmsSender

logger = logging.getLogger(__name__)

# Booking currently has no offered slot to confirm, so acceptance books a
# placeholder one day out.
PLACEHOLDER_SLOT_OFFSET: Final[timedelta] = timedelta(hours=24)
DEFAULT_INTERVIEWER_ID: Final[str] = "default"
BOOKED_STATUS: Final[str] = "2nd_booked"

STOP_ACK: Final[str] = "ALSOK採用チーム: 配信を停止しました。再開は「UNSTOP」と返信してください。"
UNSTOP_ACK: Final[str] = "ALSOK採用チーム: 配信を再開しました。停止は「STOP」と返信してください。"
HELP_ACK: Final[str] = (
    "ALSOK採用チーム: 配信停止=「STOP」、再開=「UNSTOP」、このヘルプ=「HELP」と返信してください。"
)
NO_SLOT_REPLY: Final[str] = "申し訳ございません。現在空きがございません。人事担当より連絡いたします。"


def booking_confirmation(event_id: str | None) -> str:
    return f"面接が確定しました。詳細は後日メールでお送りします。イベントID: {event_id or ''}"


def reschedule_offer(slot_at: str) -> str:
    return f"【変更対応】新しい面接候補時間: {slot_at}。よろしければ「1」と返信してください。"


@dataclass
class ReplyOutcome:
    intent: Intent
    reply_text: str | None = None
    slot_at: str | None = None


class ReplyDispatcher:
    """
    Acts on a verified inbound SMS:

    - appends the inbound text to the message log
    - classifies the reply keyword
    - runs the matching action (book, re-offer a slot, consent toggles)
    """

    def __init__(
        self,
        remote: RemoteStateClient,
        sms: SmsSender,
        settings: Settings,
        consent_store: ConsentStore | None = None,
        directory: InterviewerDirectory | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.remote = remote
        self.sms = sms
        self.settings = settings
        self.consent_store = consent_store or UnpersistedConsentStore()
        self.directory = directory or StaticInterviewerDirectory()
        self.clock = clock

    def handle(self, inbound: InboundSms, applicant_id: str) -> ReplyOutcome:
        text = inbound.text.strip()
        intent = classify_reply(text)
        logger.info("Inbound SMS from %s %r classified as %s", inbound.phone, text, intent.value)

        self.remote.log_message(applicant_id, "in", text, channel="sms", operator="")

        if intent is Intent.ACCEPT:
            return self._accept(applicant_id, inbound.phone)
        if intent is Intent.RESCHEDULE:
            return self._reschedule(applicant_id, inbound.phone)
        if intent in (Intent.OPT_STOP, Intent.OPT_UNSTOP, Intent.HELP):
            return self._opt(applicant_id, inbound.phone, intent)
        return ReplyOutcome(intent=intent)

    def _send_and_log(self, applicant_id: str, phone: str, text: str) -> None:
        self.sms.send(phone, text)
        self.remote.log_message(applicant_id, "out", text)

    def _accept(self, applicant_id: str, phone: str) -> ReplyOutcome:
        # TODO: confirm the slot from the last 2nd_schedule offer once
        # applicants can be looked up by phone.
        slot_at = isoformat_utc(self.clock() + PLACEHOLDER_SLOT_OFFSET)
        event_id = create_interview_event(self.remote, self.settings, applicant_id, phone, slot_at)

        reply = booking_confirmation(event_id)
        self._send_and_log(applicant_id, phone, reply)

        self.remote.update_applicant_status(
            ApplicantStatusUpdate(
                applicant_id=applicant_id,
                status=BOOKED_STATUS,
                next_action_at=slot_at,
            )
        )
        return ReplyOutcome(intent=Intent.ACCEPT, reply_text=reply, slot_at=slot_at)

    def _reschedule(self, applicant_id: str, phone: str) -> ReplyOutcome:
        try:
            slot_at = next_slot_for_interviewer(
                self.remote, self.settings, self.directory, DEFAULT_INTERVIEWER_ID
            )
        except RemoteCallError as exc:
            logger.warning("Free/busy lookup failed for %s: %s", applicant_id, exc)
            slot_at = None

        reply = reschedule_offer(slot_at) if slot_at else NO_SLOT_REPLY
        self._send_and_log(applicant_id, phone, reply)
        return ReplyOutcome(intent=Intent.RESCHEDULE, reply_text=reply, slot_at=slot_at)

    def _opt(self, applicant_id: str, phone: str, intent: Intent) -> ReplyOutcome:
        reply = {
            Intent.OPT_STOP: STOP_ACK,
            Intent.OPT_UNSTOP: UNSTOP_ACK,
            Intent.HELP: HELP_ACK,
        }[intent]
        self._send_and_log(applicant_id, phone, reply)

        if intent is not Intent.HELP:
            try:
                self.consent_store.set_consent(applicant_id, intent is Intent.OPT_UNSTOP)
            except NotImplementedError:
                logger.warning(
                    "Consent change (%s) for %s was not persisted", intent.value, applicant_id
                )
        return ReplyOutcome(intent=intent, reply_text=reply)
