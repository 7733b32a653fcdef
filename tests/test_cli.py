from __future__ import annotations

import importlib
import logging
from typing import Any

import pytest

from recruit_relay import cli


def test_importing_app_leaves_root_logger_alone(monkeypatch: pytest.MonkeyPatch) -> None:
    import recruit_relay.main

    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    importlib.reload(recruit_relay.main)

    assert calls == []


def test_main_configures_logging_and_serves(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("PORT", "9001")
    logging_calls: list[dict[str, Any]] = []
    served: list[tuple[str, dict[str, Any]]] = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: logging_calls.append(kwargs))
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: served.append((app, kwargs)))

    cli.main()

    assert logging_calls == [{"level": logging.DEBUG}]
    assert served == [
        ("recruit_relay.main:app", {"host": "127.0.0.1", "port": 9001, "log_level": "debug"})
    ]
