# messages.py
# JSON payloads for the CronCat contract.
#
# Builders return plain dicts; encode() turns them into the compact form the
# node CLI receives. Key order is part of the contract: create_task payloads
# must match the hand-written shell literals byte for byte.

import json
from typing import Any

from croncat_harness.models import Action, Boundary, Coin, TaskRequest

IMMEDIATE = "Immediate"
ONCE = "Once"


def block_interval(blocks: int) -> dict:
    return {"Block": blocks}


def cron_interval(expression: str) -> dict:
    return {"Cron": expression}


def encode(message: dict[str, Any]) -> str:
    """Compact, order-preserving JSON encoding."""
    return json.dumps(message, separators=(",", ":"))


# ---------------------------------------------------------------------------
# Instantiate
# ---------------------------------------------------------------------------


def instantiate(denom: str) -> dict:
    return {"denom": denom}


# ---------------------------------------------------------------------------
# Execute messages
# ---------------------------------------------------------------------------


def register_agent() -> dict:
    return {"register_agent": {}}


def proxy_call() -> dict:
    return {"proxy_call": {}}


def staking_delegate(validator: str, amount: int, denom: str, gas_limit: int | None = None) -> Action:
    """A task action delegating `amount` of `denom` to `validator`."""
    coin = Coin(denom=denom, amount=str(amount))
    return Action(
        msg={"staking": {"delegate": {"validator": validator, "amount": coin.model_dump()}}},
        gas_limit=gas_limit,
    )


def _task_body(task: TaskRequest) -> dict:
    return {
        "interval": task.interval,
        "boundary": task.boundary.model_dump(exclude_none=True),
        "stop_on_fail": task.stop_on_fail,
        "actions": [action.model_dump(exclude_none=True) for action in task.actions],
        "rules": task.rules,
    }


def create_task(task: TaskRequest) -> dict:
    return {"create_task": {"task": _task_body(task)}}


def staking_task(validator: str, amount: int, denom: str, gas_limit: int) -> TaskRequest:
    """Immediate, unbounded, non-fail-stopping task with one delegation."""
    return TaskRequest(
        interval=IMMEDIATE,
        boundary=Boundary(),
        stop_on_fail=False,
        actions=[staking_delegate(validator, amount, denom, gas_limit)],
        rules=None,
    )


def remove_task(task_hash: str) -> dict:
    return {"remove_task": {"task_hash": task_hash}}


def refill_task_balance(task_hash: str) -> dict:
    return {"refill_task_balance": {"task_hash": task_hash}}


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def get_tasks(from_index: int | None = None, limit: int | None = None) -> dict:
    """Paginated task listing. Pagination keys are omitted unless given."""
    params: dict[str, int] = {}
    if from_index is not None:
        params["from_index"] = from_index
    if limit is not None:
        params["limit"] = limit
    return {"get_tasks": params}


def get_tasks_by_owner(owner_id: str) -> dict:
    return {"get_tasks_by_owner": {"owner_id": owner_id}}


def get_task(task_hash: str) -> dict:
    return {"get_task": {"task_hash": task_hash}}


def validate_interval(interval: str | dict) -> dict:
    return {"validate_interval": {"interval": interval}}


def get_task_hash(task: TaskRequest, owner_id: str, total_deposit: list[Coin]) -> dict:
    """Ask the contract for the hash it would store `task` under."""
    body = _task_body(task)
    stored = {
        "owner_id": owner_id,
        "interval": body["interval"],
        "boundary": body["boundary"],
        "stop_on_fail": body["stop_on_fail"],
        "total_deposit": [coin.model_dump() for coin in total_deposit],
        "actions": body["actions"],
        "rules": body["rules"],
    }
    return {"get_task_hash": {"task": stored}}


def get_slot_ids() -> dict:
    return {"get_slot_ids": {}}


def get_slot_hashes(slot: int | None = None) -> dict:
    """Task hashes in `slot`, or in the earliest block and time slots when omitted."""
    return {"get_slot_hashes": {"slot": slot}}
