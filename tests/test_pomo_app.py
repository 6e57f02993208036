"""Headless tests for the Textual front end."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

from textual.widgets import Static

from pomo import PomodoroApp
from pomo_timer import MAX_WIDTH, Session, State

START = datetime(2024, 1, 1, 9, 0, 0)


class FakeClock:
    def __init__(self) -> None:
        self.now = START

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def make_app(minutes: int = 1) -> tuple[PomodoroApp, FakeClock]:
    clock = FakeClock()
    session = Session.of_minutes(minutes, start_time=START)
    return PomodoroApp(session, clock=clock), clock


def test_q_quits_immediately() -> None:
    app, _ = make_app()

    async def run() -> None:
        async with app.run_test(size=(80, 24)) as pilot:
            await pilot.press("q")

    asyncio.run(run())
    assert app.return_code == 0
    assert app.session.state is State.IN_PROGRESS


def test_other_keys_keep_running() -> None:
    app, _ = make_app()

    async def run() -> bool:
        async with app.run_test(size=(80, 24)) as pilot:
            await pilot.press("x", "space")
            await pilot.pause()
            running = app.is_running
            await pilot.press("escape")
            return running

    assert asyncio.run(run()) is True


def test_initial_size_sets_bar_width() -> None:
    app, _ = make_app()

    async def run() -> tuple[int, int]:
        async with app.run_test(size=(60, 20)) as pilot:
            await pilot.pause()
            return app.session.width, app.session.bar_width

    width, bar_width = asyncio.run(run())
    assert width == 60
    assert bar_width == 52


def test_wide_terminal_caps_bar_width() -> None:
    app, _ = make_app()

    async def run() -> int:
        async with app.run_test(size=(200, 40)) as pilot:
            await pilot.pause()
            return app.session.bar_width

    assert asyncio.run(run()) == MAX_WIDTH


def test_session_completes_and_exits() -> None:
    app, clock = make_app(minutes=1)

    async def run() -> None:
        async with app.run_test(size=(80, 24)) as pilot:
            clock.advance(30)
            app._tick()
            await pilot.pause()
            assert app.session.percent_complete == 0.5

            clock.advance(31)
            app._tick()
            await pilot.pause()
            assert app.session.state is State.IN_PROGRESS

            clock.advance(2)
            app._tick()

    asyncio.run(run())
    assert app.session.state is State.COMPLETE
    assert app.return_code == 0


def _text(app: PomodoroApp, selector: str) -> str:
    return str(app.query_one(selector, Static).render()).strip()


def test_panel_shows_status_and_help() -> None:
    app, _ = make_app(minutes=25)

    async def run() -> tuple[str, str]:
        async with app.run_test(size=(80, 24)) as pilot:
            await pilot.pause()
            status, help_text = _text(app, "#status"), _text(app, "#help")
            await pilot.press("q")
            return status, help_text

    status, help_text = asyncio.run(run())
    assert status == "25min session in progress..."
    assert help_text == "Press q or ctrl-c to quit"


def test_bar_is_blank_once_complete() -> None:
    app, _ = make_app()

    async def run() -> tuple[str, str]:
        async with app.run_test(size=(80, 24)) as pilot:
            app.session.state = State.COMPLETE
            app._refresh_panel()
            await pilot.pause()
            status, bar = _text(app, "#status"), _text(app, "#bar")
            await pilot.press("q")
            return status, bar

    status, bar = asyncio.run(run())
    assert status == "Your session is complete!"
    assert bar == ""
