#!/usr/bin/env -S uv run
# /// script
# dependencies = ["rich", "textual"]
# ///

"""
pomo.py – full-screen terminal pomodoro timer.

Usage:
    pomo [minutes]        # default: 25
"""

from __future__ import annotations

import argparse
import logging
import os
import re
import sys
from datetime import datetime
from functools import partial
from typing import Callable

from rich.console import Console
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.widgets import Static

from pomo_timer import (
    QUIT_KEYS,
    AnimationFrame,
    Effects,
    Event,
    KeyPress,
    Resize,
    Session,
    Tick,
    status_line,
)

DEFAULT_MINUTES = 25
TICK_INTERVAL = 2.0  # seconds
FPS = 60

INVALID_MINUTES = (
    "Argument must be an integer representing the number of minutes to run the pomodoro"
)

logger = logging.getLogger(__name__)
console = Console()


# ── helpers ──────────────────────────────────────────────────────────────
def setup_logging() -> None:
    """Log to ``$POMO_LOG_FILE`` if set; the terminal belongs to the TUI."""
    log_file = os.environ.get("POMO_LOG_FILE")
    if not log_file:
        return

    level = os.environ.get("POMO_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.FileHandler(log_file, mode="w")],
    )
    logging.info("pomo starting, logging to %s", log_file)


def _bar(session: Session) -> Table | Text:
    if session.complete:
        return Text("")
    grid = Table.grid(padding=(0, 1))
    grid.add_row(
        ProgressBar(
            total=1.0,
            completed=session.bar.shown,
            width=session.bar_width,
            complete_style="#7571F9",
            finished_style="#EE6FF8",
        ),
        Text(f"{session.bar.shown:>4.0%}"),
    )
    return grid


# ── Textual application ──────────────────────────────────────────────────
class PomodoroApp(App):
    """Centered progress panel driven by a :class:`Session`."""

    CSS = """
    Screen { align: center middle; }
    #panel {
        width: auto;
        height: auto;
        border: round #5fffd7;
        padding: 1 2 0 2;
    }
    #panel Static { width: auto; }
    #bar   { height: 1; }
    #help  { color: #626262; margin-top: 1; }
    """

    BINDINGS = [
        Binding(key, f"dispatch_key('{key}')", "Quit", show=False, priority=True)
        for key in sorted(QUIT_KEYS)
    ]

    def __init__(self, session: Session, clock: Callable[[], datetime] = datetime.now):
        self.session = session
        self._clock = clock
        super().__init__()

    def compose(self) -> ComposeResult:
        with Vertical(id="panel"):
            yield Static(status_line(self.session), id="status")
            yield Static(_bar(self.session), id="bar")
            yield Static("Press q or ctrl-c to quit", id="help")

    def on_mount(self) -> None:
        self.deliver(Resize(self.size.width, self.size.height))
        self.set_timer(TICK_INTERVAL, self._tick)

    # ── event plumbing ───────────────────────────────────────────────────
    def deliver(self, event: Event) -> Effects:
        """Hand *event* to the session and carry out the resulting effects."""
        effects = self.session.dispatch(event)

        if effects.quit:
            if self.session.complete:
                self.bell()
            self.exit(return_code=0)
            return effects
        if effects.schedule_tick:
            self.set_timer(TICK_INTERVAL, self._tick)
        if effects.frame_tag is not None:
            self.set_timer(1 / FPS, partial(self._frame, effects.frame_tag))

        self._refresh_panel()
        return effects

    def _tick(self) -> None:
        self.deliver(Tick(self._clock()))

    def _frame(self, tag: int) -> None:
        self.deliver(AnimationFrame(tag))

    def _refresh_panel(self) -> None:
        try:
            status = self.query_one("#status", Static)
            bar = self.query_one("#bar", Static)
        except NoMatches:  # not composed yet
            return
        status.update(status_line(self.session))
        bar.styles.width = self.session.bar_width + 5
        bar.update(_bar(self.session))

    def on_resize(self, event: events.Resize) -> None:
        self.deliver(Resize(event.size.width, event.size.height))

    def on_key(self, event: events.Key) -> None:
        self.deliver(KeyPress(event.key))

    def action_dispatch_key(self, key: str) -> None:
        self.deliver(KeyPress(key))


# ── CLI glue ─────────────────────────────────────────────────────────────
def _parse_args(argv: list[str]) -> str:
    """Return the raw minutes token; only the first argument counts."""
    parser = argparse.ArgumentParser(
        prog="pomo",
        description="Full-screen terminal pomodoro timer.",
    )
    parser.add_argument(
        "minutes",
        nargs="?",
        default=str(DEFAULT_MINUTES),
        help=f"Length of the session in minutes (default: {DEFAULT_MINUTES})",
    )
    # Unknown options are left for parse_minutes to reject.
    parser.parse_known_args(argv)
    return argv[0] if argv else str(DEFAULT_MINUTES)


def parse_minutes(raw: str) -> int:
    """Return *raw* as a positive number of minutes, or raise ValueError."""
    if not re.fullmatch(r"[+-]?[0-9]+", raw):
        raise ValueError(INVALID_MINUTES)
    minutes = int(raw)
    if minutes <= 0:
        raise ValueError("The number of minutes must be greater than zero")
    return minutes


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    setup_logging()

    try:
        minutes = parse_minutes(_parse_args(argv))
    except ValueError as exc:
        print(exc)
        return 1

    session = Session.of_minutes(minutes)
    print(f"SessionLength (sec): {int(session.session_length.total_seconds())}")

    app = PomodoroApp(session)
    try:
        app.run()
    except Exception as exc:
        logger.exception("Timer app failed")
        print(f"Unable to run the timer: {exc}")
        return 1

    if app.return_code:
        print(f"Unable to run the timer: exited with status {app.return_code}")
        return app.return_code
    if session.complete:
        console.print("✅ Done!")
    else:
        console.print("Timer cancelled.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
