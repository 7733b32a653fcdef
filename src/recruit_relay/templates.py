from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final, Protocol

TEMPLATE_NOT_FOUND: Final[str] = "テンプレートが見つかりません"

DEFAULT_TEMPLATES: Final[dict[str, str]] = {
    "app_received": (
        "{NAME}様、ALSOK採用チームです。応募を受け付けました。"
        "受付番号：{APPLICANT_ID}。追ってご連絡いたします。"
    ),
    "2nd_schedule": (
        "【二次面接のご案内】{NAME}様、{DATE_JP} {START}–{END} で予定いたします。"
        "よろしければ「1」と返信、変更は「2」と返信ください。"
    ),
    "2nd_confirmed": (
        "{NAME}様、{DATE_JP} {START}–{END} で二次面接が確定しました。"
        "場所：ALSOK本社 3F会議室"
    ),
}


class TemplateStore(Protocol):
    def get(self, template_id: str) -> str | None: ...


class StaticTemplateStore:
    """In-memory template table; swap for a remote-backed store without touching callers."""

    def __init__(self, templates: Mapping[str, str] | None = None) -> None:
        self._templates = dict(DEFAULT_TEMPLATES if templates is None else templates)

    def get(self, template_id: str) -> str | None:
        return self._templates.get(template_id)


def render_template(
    template_id: str,
    variables: Mapping[str, Any] | None = None,
    store: TemplateStore | None = None,
) -> str:
    """
    Fill ``{KEY}`` placeholders of a stored template.

    - unknown template ids render as TEMPLATE_NOT_FOUND
    - placeholders without a value are left as-is
    - values are inserted verbatim (no escaping of braces)
    """
    template = (store or StaticTemplateStore()).get(template_id)
    if template is None:
        return TEMPLATE_NOT_FOUND

    text = template
    for key, value in (variables or {}).items():
        text = text.replace("{" + str(key) + "}", str(value))
    return text
