# tests/test_console_connector.py

from __future__ import annotations

import builtins

import pytest

from taskdesk.connectors import console_connector
from taskdesk.connectors.console_connector import ConsoleNavigator, console_confirm, run_console_loop


def test_console_navigator_tracks_route(capsys) -> None:
    nav = ConsoleNavigator()
    assert nav.current_route == "/"

    nav.navigate("/login")

    assert nav.current_route == "/login"
    assert "Use /login" in capsys.readouterr().out


@pytest.mark.asyncio
@pytest.mark.parametrize(("answer", "expected"), [("y", True), ("YES", True), ("", False), ("n", False)])
async def test_console_confirm(monkeypatch, answer: str, expected: bool) -> None:
    monkeypatch.setattr(builtins, "input", lambda _q: answer)
    assert await console_confirm("Delete?") is expected


@pytest.mark.asyncio
async def test_console_loop_runs_commands_until_exit(monkeypatch, logged_in_state, server, capsys) -> None:
    server.add_task("Water plants")
    lines = iter(["/status", "hello", "/exit"])

    async def fake_prompt(question: str, secret: bool = False) -> str:
        return next(lines)

    monkeypatch.setattr(console_connector, "console_prompt", fake_prompt)

    await run_console_loop(logged_in_state)

    out = capsys.readouterr().out
    assert "Water plants" in out
    assert "Session: authenticated" in out
    assert "Commands start with '/'" in out
