import pytest

from croncat_harness.errors import WaitTimeoutError
from croncat_harness.models import SlotSchedule
from croncat_harness.waits import FixedDelay, PollingWait, due_at_least, due_hashes

# ---------------------------------------------------------------------------
# Eligibility
# ---------------------------------------------------------------------------


def test_block_slot_due_only_once_height_reached():
    schedule = SlotSchedule(block_slot=15, block_hashes=["a", "b"], height=14)
    assert due_hashes(schedule) == []

    schedule.height = 15
    assert due_hashes(schedule) == ["a", "b"]


def test_time_slot_compares_against_block_time():
    schedule = SlotSchedule(time_slot=1_000, time_hashes=["cron"], height=99, block_time_ns=999)
    assert due_hashes(schedule) == []

    schedule.block_time_ns = 1_000
    assert due_hashes(schedule) == ["cron"]


def test_empty_slots_are_never_due():
    assert due_hashes(SlotSchedule(height=100, block_time_ns=10**18)) == []
    assert due_at_least(1)(SlotSchedule(height=100)) is False
    assert due_at_least(0)(SlotSchedule()) is True


# ---------------------------------------------------------------------------
# Wait strategies
# ---------------------------------------------------------------------------


def test_fixed_delay_sleeps_without_polling(clock):
    fetched = []
    FixedDelay(10, sleep=clock.sleep)(lambda: fetched.append(1))

    assert clock.sleeps == [10]
    assert fetched == []


def test_polling_returns_as_soon_as_condition_holds(clock):
    heights = iter([14, 14, 15])
    wait = PollingWait(due_at_least(1), timeout=30, interval=2, clock=clock, sleep=clock.sleep)

    schedule = wait(lambda: SlotSchedule(block_slot=15, block_hashes=["a"], height=next(heights)))
    assert schedule.height == 15
    assert clock.sleeps == [2, 2]


def test_polling_does_not_sleep_when_already_ready(clock):
    wait = PollingWait(due_at_least(1), timeout=5, clock=clock, sleep=clock.sleep)

    wait(lambda: SlotSchedule(block_slot=3, block_hashes=["a"], height=3))
    assert clock.sleeps == []


def test_polling_times_out(clock):
    wait = PollingWait(due_at_least(1), timeout=5, interval=2, clock=clock, sleep=clock.sleep)

    with pytest.raises(WaitTimeoutError, match="not met"):
        wait(lambda: SlotSchedule())

    # Last sleep is clipped to the remaining budget.
    assert clock.sleeps == [2, 2, 1]


def test_polling_reports_each_attempt(clock):
    seen = []
    wait = PollingWait(
        due_at_least(1), timeout=5, clock=clock, sleep=clock.sleep,
        on_poll=lambda snapshot, elapsed: seen.append((snapshot.height, elapsed)),
    )

    wait(lambda: SlotSchedule(block_slot=7, block_hashes=["a"], height=7))
    assert seen == [(7, 0.0)]
    assert "due_at_least(1)" in wait.describe()
