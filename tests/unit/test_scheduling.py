"""Tests for the one-shot timer schedulers."""

from diagnosis_map.core.scheduling import PollingScheduler
from diagnosis_map.protocols import SchedulerProtocol


class _Clock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def test_polling_scheduler_runs_only_due_callbacks() -> None:
    clock = _Clock()
    scheduler = PollingScheduler(clock=clock)
    ran: list[str] = []
    scheduler.call_later(3.0, lambda: ran.append("highlight"))
    scheduler.call_later(0.5, lambda: ran.append("clear"))

    assert scheduler.run_due() == 0
    clock.now += 1.0
    assert scheduler.run_due() == 1
    assert ran == ["clear"]
    assert scheduler.pending == 1

    clock.now += 5.0
    scheduler.run_due()
    assert ran == ["clear", "highlight"]


def test_polling_scheduler_ties_keep_scheduling_order() -> None:
    scheduler = PollingScheduler(clock=_Clock())
    ran: list[int] = []
    for i in range(3):
        scheduler.call_later(1.0, lambda i=i: ran.append(i))
    assert scheduler.run_all() == 3
    assert ran == [0, 1, 2]
    assert scheduler.pending == 0


def test_polling_scheduler_satisfies_protocol() -> None:
    assert isinstance(PollingScheduler(), SchedulerProtocol)
