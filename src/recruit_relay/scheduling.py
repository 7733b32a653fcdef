from __future__ import annotations

from typing import Final

from .config import Settings
from .interviewers import InterviewerDirectory
from .remote import RemoteStateClient

FREEBUSY_PATH: Final[str] = "?path=/freebusy/next"
CREATE_EVENT_PATH: Final[str] = "?path=/calendar/create-event"

HORIZON_DAYS: Final[int] = 14
WORKDAY_START_HOUR: Final[int] = 9
WORKDAY_END_HOUR: Final[int] = 18

INTERVIEW_EVENT_TITLE: Final[str] = "ALSOK二次面接"


def find_next_slot(
    remote: RemoteStateClient,
    settings: Settings,
    calendar_id: str | None = None,
) -> str | None:
    """Ask the calendar backend for the first free slot within the booking horizon."""
    result = remote.call(
        FREEBUSY_PATH,
        "POST",
        {
            "calendarId": calendar_id or settings.default_calendar_id,
            "horizonDays": HORIZON_DAYS,
            "startHour": WORKDAY_START_HOUR,
            "endHour": WORKDAY_END_HOUR,
            "tz": settings.default_tz,
        },
    )
    slot_at = result.get("slotAt")
    return str(slot_at) if slot_at else None


def create_interview_event(
    remote: RemoteStateClient,
    settings: Settings,
    applicant_id: str,
    phone: str,
    slot_at: str,
) -> str | None:
    calendar_id = settings.default_calendar_id
    result = remote.call(
        CREATE_EVENT_PATH,
        "POST",
        {
            "calendarId": calendar_id,
            "slotAt": slot_at,
            "title": INTERVIEW_EVENT_TITLE,
            "description": f"応募者: {applicant_id}\n電話: {phone}",
            "attendees": [calendar_id],
            "mailTo": settings.interviewer_email,
        },
    )
    event_id = result.get("eventId")
    return str(event_id) if event_id is not None else None


def next_slot_for_interviewer(
    remote: RemoteStateClient,
    settings: Settings,
    directory: InterviewerDirectory,
    interviewer_id: str,
) -> str | None:
    """Next free slot on the interviewer's calendar, or the default calendar when unknown."""
    interviewer = directory.get(interviewer_id)
    calendar_id = interviewer.calendar_id if interviewer and interviewer.calendar_id else None
    return find_next_slot(remote, settings, calendar_id)
