# waits.py
# Pauses between creating tasks and asking the agent to run them.
#
# A wait is any callable taking a zero-argument `fetch` function that returns
# a snapshot of the contract's schedule. FixedDelay ignores it; PollingWait
# keeps calling it until a caller-supplied condition holds.

import time
from collections.abc import Callable
from typing import Any

from croncat_harness.errors import WaitTimeoutError
from croncat_harness.models import SlotSchedule

Fetcher = Callable[[], Any]
Condition = Callable[[Any], bool]


def due_hashes(schedule: SlotSchedule) -> list[str]:
    """Hashes whose slot the chain head has reached: block height for block slots, block time for cron slots."""
    due: list[str] = []
    if schedule.block_hashes and 0 < schedule.block_slot <= schedule.height:
        due += schedule.block_hashes
    if schedule.time_hashes and 0 < schedule.time_slot <= schedule.block_time_ns:
        due += schedule.time_hashes
    return due


def due_at_least(count: int) -> Condition:
    """Condition: at least `count` slotted tasks are executable at the current head."""

    def condition(schedule: SlotSchedule) -> bool:
        return len(due_hashes(schedule)) >= count

    condition.__name__ = f"due_at_least({count})"
    return condition


class FixedDelay:
    """Blocking sleep. No early exit, no cancellation."""

    def __init__(self, seconds: float, sleep: Callable[[float], None] = time.sleep) -> None:
        self.seconds = seconds
        self._sleep = sleep

    def describe(self) -> str:
        return f"sleeping {self.seconds:g}s"

    def __call__(self, fetch: Fetcher) -> None:
        self._sleep(self.seconds)


class PollingWait:
    """
    Poll `fetch` until `condition` holds, bounded by `timeout` seconds.

    The condition is evaluated before the first sleep, so a wait whose
    condition already holds returns without sleeping. Raises WaitTimeoutError
    once the deadline passes; errors from `fetch` propagate unchanged.
    """

    def __init__(
        self,
        condition: Condition,
        timeout: float,
        interval: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        on_poll: Callable[[Any, float], None] | None = None,
    ) -> None:
        self.condition = condition
        self.timeout = timeout
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._on_poll = on_poll

    def describe(self) -> str:
        name = getattr(self.condition, "__name__", "condition")
        return f"polling slot hashes for {name} (timeout {self.timeout:g}s)"

    def __call__(self, fetch: Fetcher) -> Any:
        start = self._clock()
        while True:
            snapshot = fetch()
            elapsed = self._clock() - start
            if self._on_poll is not None:
                self._on_poll(snapshot, elapsed)
            if self.condition(snapshot):
                return snapshot

            remaining = self.timeout - elapsed
            if remaining <= 0:
                raise WaitTimeoutError(
                    f"Condition {self.describe()} not met after {elapsed:.1f}s."
                )
            self._sleep(min(self.interval, remaining))
