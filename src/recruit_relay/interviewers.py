from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from .records import Interviewer

DEFAULT_INTERVIEWERS: tuple[Interviewer, ...] = (
    Interviewer(
        interviewer_id="interviewer_001",
        name="田中面接官",
        email="tanaka@alsok.jp",
        calendar_id="tanaka@gmail.com",
    ),
)


class InterviewerDirectory(Protocol):
    def list_all(self) -> list[Interviewer]: ...

    def get(self, interviewer_id: str) -> Interviewer | None: ...


class StaticInterviewerDirectory:
    def __init__(self, interviewers: Iterable[Interviewer] = DEFAULT_INTERVIEWERS) -> None:
        self._by_id = {i.interviewer_id: i for i in interviewers}

    def list_all(self) -> list[Interviewer]:
        return list(self._by_id.values())

    def get(self, interviewer_id: str) -> Interviewer | None:
        return self._by_id.get(interviewer_id)
