"""Per-phase countdowns and the once-a-second clock that drives them."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Awaitable, Callable

if TYPE_CHECKING:
    from exam_session import ExamSession

log = logging.getLogger(__name__)

TICK_SECONDS = 1.0
WARNING_THRESHOLD_SECONDS = 5 * 60


class Countdown:
    """Remaining seconds of one phase. Counts down only while running."""

    def __init__(self, duration_seconds: int):
        self.duration = max(0, int(duration_seconds))
        self.remaining = self.duration
        self.running = False

    def start(self) -> None:
        self.running = True

    def stop(self) -> None:
        self.running = False

    def tick(self) -> bool:
        """Advance one second. Returns True on the tick that reaches zero."""
        if not self.running:
            return False
        if self.remaining <= 1:
            self.remaining = 0
            self.running = False
            return True
        self.remaining -= 1
        return False

    @property
    def expired(self) -> bool:
        return self.remaining == 0

    @property
    def warning(self) -> bool:
        return self.remaining < WARNING_THRESHOLD_SECONDS

    @property
    def elapsed(self) -> int:
        return self.duration - self.remaining

    def __repr__(self) -> str:
        return f"<Countdown(remaining={self.remaining}, running={self.running})>"


def format_seconds(seconds: int) -> str:
    """``HH:MM:SS`` when an hour or more is left, otherwise ``MM:SS``."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


async def run_session_clock(
    session: "ExamSession",
    *,
    interval: float = TICK_SECONDS,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> None:
    """
    Tick ``session`` once per elapsed ``interval`` until it is submitted.

    Ticks are scheduled against ``clock`` rather than counted from wake-ups,
    so seconds missed while the loop was stalled are applied on the next
    wake-up and a phase expires on the same schedule either way.
    """
    next_tick = clock() + interval
    while not session.is_submitted:
        await sleep(max(0.0, next_tick - clock()))
        now = clock()
        while next_tick <= now and not session.is_submitted:
            session.tick()
            next_tick += interval
    log.debug("Session clock stopped for test %s", session.content.id)
