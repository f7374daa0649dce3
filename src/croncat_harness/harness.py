# harness.py
# CronCat Deployment & Exercise Harness
#
# Drives the node CLI through one fixed, linear workflow against a freshly
# instantiated contract. The contract does all the real work; this class only
# sequences the calls and stops at the first one that fails.
#
# Control flow:
#   instantiate → resolve address → register agent → create task ×2
#   → (query → wait → proxy_call) ×2
#
# All terminal output is delegated to display.py — no formatting here.

import json
import subprocess
from datetime import datetime, timezone

from pydantic import TypeAdapter, ValidationError

from croncat_harness import display, messages
from croncat_harness.config import HarnessConfig
from croncat_harness.errors import AddressResolutionError, ExternalCallError, HarnessError
from croncat_harness.models import Coin, ContractList, SlotSchedule, StepRecord, TaskRequest, TaskResponse
from croncat_harness.node import NodeClient
from croncat_harness.waits import FixedDelay, PollingWait, due_at_least, due_hashes

PROXY_ROUNDS = 2

_TASK_LIST = TypeAdapter(list[TaskResponse])
_SLOT_HASHES = TypeAdapter(tuple[int, list[str], int, list[str]])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parse_contract_address(raw: str) -> str:
    """
    Return the most recently instantiated contract from list-contract-by-code
    output. Earlier runs against the same code ID leave older entries in front.

    Raises AddressResolutionError on malformed JSON or an empty list.
    """
    try:
        listing = ContractList.model_validate_json(raw)
    except ValidationError as exc:
        raise AddressResolutionError(f"list-contract-by-code returned malformed JSON: {exc}") from exc

    if not listing.contracts:
        raise AddressResolutionError("No contracts found for code ID.")

    address = listing.contracts[-1]
    if not address:
        raise AddressResolutionError("list-contract-by-code returned an empty address.")
    return address


def _unwrap_data(raw: str):
    """Smart-query output is wrapped in {"data": ...} by the node."""
    payload = json.loads(raw)
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


def _parse_task_list(raw: str) -> list[TaskResponse]:
    try:
        return _TASK_LIST.validate_python(_unwrap_data(raw) or [])
    except (json.JSONDecodeError, ValidationError) as exc:
        raise HarnessError(f"get_tasks returned an unexpected payload: {exc}") from exc


def _parse_slot_hashes(raw: str) -> tuple[int, list[str], int, list[str]]:
    """Decode get_slot_hashes: (block slot, block hashes, time slot, time hashes)."""
    try:
        return _SLOT_HASHES.validate_python(_unwrap_data(raw))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise HarnessError(f"get_slot_hashes returned an unexpected payload: {exc}") from exc


def _timestamp_ns(value: str) -> int:
    """RFC 3339 with up to nanosecond precision, e.g. 2022-05-01T10:00:00.123456789Z."""
    base, _, fraction = value.rstrip("Z").partition(".")
    moment = datetime.strptime(base, "%Y-%m-%dT%H:%M:%S").replace(tzinfo=timezone.utc)
    nanos = int((fraction + "0" * 9)[:9])
    return int(moment.timestamp()) * 1_000_000_000 + nanos


def _parse_chain_head(raw: str) -> tuple[int, int]:
    """Return (latest block height, latest block time in ns) from `status` output."""
    try:
        payload = json.loads(raw)
        info = payload.get("SyncInfo") or payload.get("sync_info")
        return int(info["latest_block_height"]), _timestamp_ns(info["latest_block_time"])
    except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as exc:
        raise HarnessError(f"status returned an unexpected payload: {exc!r}") from exc


def _report_poll(schedule: SlotSchedule, elapsed: float) -> None:
    slotted = len(schedule.block_hashes) + len(schedule.time_hashes)
    display.poll_status(len(due_hashes(schedule)), slotted, schedule.height, elapsed)


def build_wait(config: HarnessConfig, condition=None):
    """Fixed sleep by default; bounded polling when a poll timeout is configured."""
    if config.poll_timeout > 0:
        return PollingWait(
            condition or due_at_least(1),
            timeout=config.poll_timeout,
            interval=config.poll_interval,
            on_poll=_report_poll,
        )
    return FixedDelay(config.wait_seconds)


# ---------------------------------------------------------------------------
# Harness
# ---------------------------------------------------------------------------


class Harness:
    """
    One run of the exercise workflow.

    Every step blocks on the node CLI and raises on failure. A failing node
    call is logged before its ExternalCallError propagates, so `log` always
    ends with the step that stopped the run.

    Example:
        harness = Harness(load_config())
        harness.run()
    """

    def __init__(self, config: HarnessConfig, client: NodeClient | None = None, wait=None) -> None:
        self._config = config
        self._client = client or NodeClient(config)
        self._wait = wait or build_wait(config)
        self._contract: str | None = None
        self.log: list[StepRecord] = []

    @property
    def contract(self) -> str:
        if self._contract is None:
            raise HarnessError("Contract address has not been resolved yet.")
        return self._contract

    def _call(self, name: str, command, *args, **kwargs) -> subprocess.CompletedProcess:
        """Run one node command, echo it, and log it whether or not it succeeds."""
        try:
            result = command(*args, **kwargs)
        except ExternalCallError as exc:
            self.log.append(
                StepRecord(name=name, argv=exc.argv, returncode=exc.returncode, stdout=exc.stdout)
            )
            raise

        display.node_call(list(result.args))
        display.node_output(result.stdout)
        self.log.append(
            StepRecord(
                name=name,
                argv=list(result.args),
                returncode=result.returncode,
                stdout=result.stdout or "",
            )
        )
        return result

    def _execute(self, name: str, message: dict, sender: str, amount: str | None = None) -> None:
        self._call(
            name, self._client.execute, self.contract, messages.encode(message), sender, amount=amount
        )
        display.step_done(name)

    def _query(self, name: str, query: dict) -> str:
        return self._call(name, self._client.query_smart, self.contract, messages.encode(query)).stdout

    # ------------------------------------------------------------------
    # Workflow steps
    # ------------------------------------------------------------------

    def instantiate(self) -> None:
        cfg = self._config
        display.step_start("instantiate", f"code {cfg.code_id} as {cfg.label!r} from {cfg.owner}")
        self._call(
            "instantiate",
            self._client.instantiate,
            cfg.code_id,
            messages.encode(messages.instantiate(cfg.denom)),
            cfg.owner,
            cfg.label,
        )

    def resolve_address(self) -> str:
        display.step_start("resolve address", f"latest contract for code {self._config.code_id}")
        result = self._call("resolve", self._client.list_contracts_by_code, self._config.code_id)
        self._contract = _parse_contract_address(result.stdout)
        display.contract_resolved(self._contract)
        return self._contract

    def register_agent(self) -> None:
        display.step_start("register agent", f"agent {self._config.agent}")
        self._execute("register_agent", messages.register_agent(), self._config.agent)

    def create_task(self, amount: int) -> None:
        cfg = self._config
        display.step_start("create task", f"delegate {cfg.coin(amount)} to {cfg.validator}")
        task = messages.staking_task(cfg.validator, amount, cfg.denom, cfg.gas_limit)
        self._execute(
            "create_task",
            messages.create_task(task),
            cfg.task_creator,
            amount=cfg.coin(cfg.task_deposit),
        )

    def query_tasks(self) -> str:
        """Run get_tasks and print the raw response. Returns it uninterpreted."""
        display.step_start("get tasks", "contract-state smart get_tasks")
        return self._query("get_tasks", messages.get_tasks())

    def fetch_tasks(self) -> list[TaskResponse]:
        """Quiet get_tasks, decoded."""
        result = self._client.query_smart(self.contract, messages.encode(messages.get_tasks()))
        return _parse_task_list(result.stdout)

    def fetch_schedule(self) -> SlotSchedule:
        """
        Quiet snapshot of the earliest slots and the chain head.

        Slots are read before the head, so a slot can only look due once the
        chain has actually reached it.
        """
        result = self._client.query_smart(self.contract, messages.encode(messages.get_slot_hashes()))
        block_slot, block_hashes, time_slot, time_hashes = _parse_slot_hashes(result.stdout)

        status = self._client.status()
        height, block_time_ns = _parse_chain_head(status.stdout.strip() or status.stderr)

        return SlotSchedule(
            block_slot=block_slot,
            block_hashes=block_hashes,
            time_slot=time_slot,
            time_hashes=time_hashes,
            height=height,
            block_time_ns=block_time_ns,
        )

    def wait(self) -> None:
        display.wait_start(self._wait.describe())
        self._wait(self.fetch_schedule)

    def proxy_call(self) -> None:
        display.step_start("proxy call", f"agent {self._config.agent} executes due tasks")
        self._execute("proxy_call", messages.proxy_call(), self._config.agent)

    # ------------------------------------------------------------------
    # Ad hoc operations
    # ------------------------------------------------------------------

    def query_tasks_by_owner(self, owner_id: str) -> str:
        display.step_start("get tasks by owner", owner_id)
        return self._query("get_tasks_by_owner", messages.get_tasks_by_owner(owner_id))

    def query_task(self, task_hash: str) -> str:
        display.step_start("get task", task_hash)
        return self._query("get_task", messages.get_task(task_hash))

    def query_task_hash(self, task: TaskRequest, owner_id: str, total_deposit: list[Coin]) -> str:
        display.step_start("get task hash", f"owner {owner_id}")
        return self._query("get_task_hash", messages.get_task_hash(task, owner_id, total_deposit))

    def query_slot_ids(self) -> str:
        display.step_start("get slot ids", "active time and block slots")
        return self._query("get_slot_ids", messages.get_slot_ids())

    def query_slot_hashes(self, slot: int | None = None) -> str:
        display.step_start("get slot hashes", "earliest slots" if slot is None else f"slot {slot}")
        return self._query("get_slot_hashes", messages.get_slot_hashes(slot))

    def validate_interval(self, interval: str | dict) -> str:
        display.step_start("validate interval", json.dumps(interval))
        return self._query("validate_interval", messages.validate_interval(interval))

    def remove_task(self, task_hash: str, sender: str | None = None) -> None:
        display.step_start("remove task", task_hash)
        self._execute("remove_task", messages.remove_task(task_hash), sender or self._config.task_creator)

    def refill_task_balance(self, task_hash: str, amount: int, sender: str | None = None) -> None:
        """Top up a task's deposit. Only the task owner may refill."""
        display.step_start("refill task balance", f"{task_hash} +{self._config.coin(amount)}")
        self._execute(
            "refill_task_balance",
            messages.refill_task_balance(task_hash),
            sender or self._config.task_creator,
            amount=self._config.coin(amount),
        )

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def run(self) -> str:
        """
        Full workflow. Returns the contract address it exercised.

        Raises the first HarnessError encountered; no step after it runs.
        """
        display.banner(self._config)

        self.instantiate()
        self.resolve_address()
        self.register_agent()

        for amount in self._config.stake_amounts:
            self.create_task(amount)

        for _ in range(PROXY_ROUNDS):
            self.query_tasks()
            self.wait()
            self.proxy_call()

        display.execution_summary(self.log)
        display.final_result(self.contract)
        return self.contract
