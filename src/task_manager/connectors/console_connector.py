# src/task_manager/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import sys
import threading
from datetime import datetime

from ..cli.bootstrap import sync_screen
from ..cli.commands import registry as command_registry
from ..cli.render import render_screen
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _rewrite_prev_line(line: str) -> None:
    """
    Replace the last terminal line with `line`.
    Best-effort: if not a TTY, just print a new line.
    """
    try:
        if sys.stdout.isatty():
            sys.stdout.write("\033[1A\033[2K\r")
            sys.stdout.write(line + "\n")
            sys.stdout.flush()
        else:
            print(line)
    except Exception:
        print(line)


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _settle(fut: asyncio.Future[str], line: str | None, exc: BaseException | None) -> None:
    if fut.done():
        return
    if exc is not None:
        fut.set_exception(exc)
    else:
        fut.set_result(line or "")


async def _read_line(prompt: str) -> str:
    """
    input() on a daemon thread.

    Unlike the default executor, a daemon thread stuck in input() does not
    hold up asyncio.run() or interpreter exit after Ctrl+C.
    """
    loop = asyncio.get_running_loop()
    fut: asyncio.Future[str] = loop.create_future()

    def worker() -> None:
        try:
            line, exc = input(prompt), None
        except (EOFError, KeyboardInterrupt) as e:
            line, exc = None, e
        try:
            loop.call_soon_threadsafe(_settle, fut, line, exc)
        except RuntimeError:
            # Loop already closed: the app is exiting and nobody waits for this line.
            logger.debug("Console input arrived after shutdown, dropped.")

    threading.Thread(target=worker, name="console-input", daemon=True).start()
    return await fut


def _mask_secrets(line: str) -> str:
    # Never echo passwords back into scrollback.
    parts = line.split()
    if len(parts) == 3 and parts[0].lower() in ("/login", "/signup"):
        return f"{parts[0]} {parts[1]} ********"
    return line


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    await sync_screen(state)
    print(render_screen(state) + "\n")

    while True:
        try:
            user_input = (await _read_line(f"[{state.navigator.current.value}] > ")).strip()
            _rewrite_prev_line(f"[{_ts_local()}] > {_mask_secrets(user_input)}")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except (KeyboardInterrupt, asyncio.CancelledError):
            logger.info("Console interrupted, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = await command_registry.handle(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is None:
            reply = "Commands start with '/'. Use /help to list available commands."

        before = state.mounted
        try:
            await sync_screen(state)
        except Exception:
            logger.exception("Screen switch failed.")

        if state.mounted != before:
            # Screen changed: show the new one instead of the command's reply.
            _print_ts(reply)
            print(render_screen(state) + "\n")
        else:
            print(f"[{_ts_local()}] {reply}\n")

    logger.info("Console connector finished.")
