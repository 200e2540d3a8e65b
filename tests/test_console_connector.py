# tests/test_console_connector.py

from __future__ import annotations

import asyncio
import threading

import pytest

from task_manager.connectors.console_connector import run_console_loop


def _scripted_input(lines: list[str]):
    it = iter(lines)

    def fake_input(prompt: str = "") -> str:
        try:
            return next(it)
        except StopIteration:
            raise EOFError from None

    return fake_input


@pytest.mark.asyncio
async def test_loop_runs_commands_until_exit(state, monkeypatch, capsys) -> None:
    monkeypatch.setattr("builtins.input", _scripted_input(["/title Buy   milk", "hello", "/exit", "/title never"]))

    await run_console_loop(state)

    assert state.tasks_page.wizard.draft.title == "Buy   milk"
    out = capsys.readouterr().out
    assert "Commands start with '/'" in out


@pytest.mark.asyncio
async def test_loop_stops_on_eof(state, monkeypatch) -> None:
    monkeypatch.setattr("builtins.input", _scripted_input(["/next"]))

    await asyncio.wait_for(run_console_loop(state), timeout=2)

    assert state.tasks_page.wizard.step == 2


@pytest.mark.asyncio
async def test_cancel_while_waiting_for_input_does_not_wait_for_enter(state, monkeypatch) -> None:
    waiting = threading.Event()
    release = threading.Event()

    def blocking_input(prompt: str = "") -> str:
        waiting.set()
        release.wait(5)
        raise EOFError

    monkeypatch.setattr("builtins.input", blocking_input)
    console = asyncio.create_task(run_console_loop(state))
    try:
        for _ in range(200):
            if waiting.is_set():
                break
            await asyncio.sleep(0.01)
        assert waiting.is_set()

        # Ctrl+C under asyncio.run() cancels the main task
        console.cancel()
        await asyncio.wait_for(console, timeout=1)

        readers = [t for t in threading.enumerate() if t.name == "console-input"]
        assert readers
        assert all(t.daemon for t in readers)
    finally:
        release.set()
