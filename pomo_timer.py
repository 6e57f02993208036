"""
pomo_timer.py – the session state machine behind the pomodoro TUI.

Feed it events one at a time with :meth:`Session.dispatch`; it answers with
:class:`Effects` telling the host loop what to do next (quit, schedule the
next tick, keep animating the bar).  No I/O, no threads, no clocks of its own.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional, Union

logger = logging.getLogger(__name__)

PADDING = 2
MAX_WIDTH = 80

#: keys that end the session, as Textual names them
QUIT_KEYS = frozenset({"q", "escape", "ctrl+c"})


class State(enum.Enum):
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


# ── events ───────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Tick:
    timestamp: datetime


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True)
class KeyPress:
    key: str


@dataclass(frozen=True)
class AnimationFrame:
    tag: int


Event = Union[Tick, Resize, KeyPress, AnimationFrame]


@dataclass(frozen=True)
class Effects:
    """What the host loop should do after an event was handled."""

    quit: bool = False
    schedule_tick: bool = False
    progress_delta: float = 0.0
    #: request another animation frame carrying this tag
    frame_tag: Optional[int] = None


# ── helpers ──────────────────────────────────────────────────────────────
def bar_width_for(width: int) -> int:
    """Width of the progress bar for a viewport *width* columns wide."""
    return max(0, min(width - PADDING * 2 - 4, MAX_WIDTH))


def status_line(session: Session) -> str:
    if session.state is State.COMPLETE:
        return "Your session is complete!"
    minutes = int(session.session_length.total_seconds() // 60)
    return f"{minutes}min session in progress..."


@dataclass
class ProgressAnimation:
    """Eases the *shown* bar value toward the *target* one, frame by frame.

    Every change of target bumps ``tag``; frames carrying an older tag belong
    to a superseded animation and are dropped.
    """

    shown: float = 0.0
    target: float = 0.0
    tag: int = 0
    speed: float = 0.25

    def incr(self, delta: float) -> int:
        self.target = min(1.0, max(0.0, self.target + delta))
        self.tag += 1
        return self.tag

    @property
    def settled(self) -> bool:
        return abs(self.target - self.shown) < 1e-3

    def frame(self, tag: int) -> bool:
        """Advance one frame; return True while more frames are needed."""
        if tag != self.tag:
            return False
        if self.settled:
            self.shown = self.target
            return False
        self.shown += (self.target - self.shown) * self.speed
        if self.settled:
            self.shown = self.target
            return False
        return True


# ── the session ──────────────────────────────────────────────────────────
@dataclass
class Session:
    session_length: timedelta
    start_time: datetime = field(default_factory=datetime.now)
    elapsed: timedelta = timedelta(0)
    percent_complete: float = 0.0
    state: State = State.IN_PROGRESS
    width: int = 0
    height: int = 0
    bar: ProgressAnimation = field(default_factory=ProgressAnimation)

    def __post_init__(self) -> None:
        if self.session_length <= timedelta(0):
            raise ValueError("Session length must be positive")
        logger.info(
            "Session of %ds started at %s",
            self.session_length.total_seconds(),
            self.start_time.isoformat(),
        )

    @classmethod
    def of_minutes(cls, minutes: int, start_time: datetime | None = None) -> Session:
        return cls(timedelta(minutes=minutes), start_time or datetime.now())

    @property
    def bar_width(self) -> int:
        return bar_width_for(self.width)

    @property
    def complete(self) -> bool:
        return self.state is State.COMPLETE

    def dispatch(self, event: Event) -> Effects:
        if isinstance(event, Tick):
            return self._on_tick(event)
        if isinstance(event, Resize):
            self.width, self.height = event.width, event.height
            return Effects()
        if isinstance(event, KeyPress):
            if event.key in QUIT_KEYS:
                logger.info("Quit requested with %r", event.key)
                return Effects(quit=True)
            return Effects()
        if isinstance(event, AnimationFrame):
            if self.bar.frame(event.tag):
                return Effects(frame_tag=event.tag)
            return Effects()
        raise TypeError(f"Unsupported event: {type(event).__name__}")

    def _on_tick(self, tick: Tick) -> Effects:
        if self.complete:
            return Effects()

        # Completion is judged on the percentage of the *previous* tick.
        previous = self.percent_complete
        if previous >= 1.0:
            self.state = State.COMPLETE
            logger.info("Session complete after %s", self.elapsed)
            return Effects(quit=True)

        self.elapsed = tick.timestamp - self.start_time
        self.percent_complete = (
            self.elapsed.total_seconds() / self.session_length.total_seconds()
        )
        delta = self.percent_complete - previous
        logger.debug("Tick at %s: %.4f (+%.4f)", tick.timestamp, self.percent_complete, delta)
        return Effects(
            schedule_tick=True,
            progress_delta=delta,
            frame_tag=self.bar.incr(delta),
        )
