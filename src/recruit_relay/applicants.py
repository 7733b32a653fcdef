from __future__ import annotations

from typing import Protocol


class ApplicantResolver(Protocol):
    def resolve(self, phone: str) -> str: ...


class PhoneKeyResolver:
    """
    Stand-in until applicants can be looked up by phone in the remote store.

    Messages are keyed as ``phone:<number>`` so they can be re-linked later.
    """

    def resolve(self, phone: str) -> str:
        return f"phone:{phone}"


class ConsentStore(Protocol):
    def set_consent(self, applicant_id: str, opted_in: bool) -> None: ...


class UnpersistedConsentStore:
    def set_consent(self, applicant_id: str, opted_in: bool) -> None:
        # TODO: write consent_flg onto the Applicants row once PhoneKeyResolver
        # is replaced by a real phone -> applicant_id lookup.
        raise NotImplementedError("opt-in/opt-out flags are not persisted yet")
