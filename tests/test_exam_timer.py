import asyncio

import models
from exam_session import ExamSession, Phase
from exam_timer import Countdown, format_seconds, run_session_clock


def _custom(minutes: int) -> models.ExamContent:
    return models.ExamContent(
        id="clock",
        title="Clock",
        kind=models.TestKind.CUSTOM,
        sections=[
            models.Section(
                subject=models.Subject.PHYSICS,
                questions=[models.Question(options=["A", "B"], correct=1)],
            )
        ],
        duration_minutes=minutes,
    )


def test_countdown_reports_expiry_once() -> None:
    countdown = Countdown(3)
    assert countdown.tick() is False  # not started

    countdown.start()
    assert [countdown.tick() for _ in range(3)] == [False, False, True]
    assert countdown.expired is True
    assert countdown.running is False
    assert countdown.tick() is False
    assert countdown.elapsed == 3


def test_format_seconds() -> None:
    assert format_seconds(3661) == "01:01:01"
    assert format_seconds(59) == "00:59"
    assert format_seconds(-5) == "00:00"


def _fake_clock(lag: float):
    now = [0.0]

    def clock() -> float:
        return now[0]

    async def sleep(delay: float) -> None:
        now[0] += max(delay, lag)

    return clock, sleep


def test_clock_expires_attended_session() -> None:
    submitted: list[dict[str, int]] = []
    session = ExamSession(_custom(1), on_submit=submitted.append)
    clock, sleep = _fake_clock(lag=0.0)

    asyncio.run(run_session_clock(session, clock=clock, sleep=sleep))

    assert session.phase == Phase.SUBMITTED
    assert session.timer.remaining == 0
    assert clock() == 60.0
    assert len(submitted) == 1


def test_clock_catches_up_after_stall() -> None:
    submitted: list[dict[str, int]] = []
    session = ExamSession(_custom(1), on_submit=submitted.append)
    clock, sleep = _fake_clock(lag=25.0)

    asyncio.run(run_session_clock(session, clock=clock, sleep=sleep))

    assert session.phase == Phase.SUBMITTED
    assert session.timer.remaining == 0
    # three late wake-ups at 25s, 50s and 75s; expiry lands on the third
    assert clock() == 75.0
    assert len(submitted) == 1
