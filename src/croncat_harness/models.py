# models.py
# Data contracts for the exercise harness.
# No business logic lives here — pure schema and validation.

from pydantic import BaseModel, Field


class Coin(BaseModel):
    """A native token amount. Amounts travel as strings (Uint128)."""

    denom: str
    amount: str


class Boundary(BaseModel):
    """Optional start/end bounds on when a task may run. Unset serializes as {}."""

    start: dict | None = None
    end: dict | None = None


class Action(BaseModel):
    """A single Cosmos message the contract will dispatch on the owner's behalf."""

    msg: dict = Field(..., description="CosmosMsg JSON, e.g. a staking delegation.")
    gas_limit: int | None = None


class TaskRequest(BaseModel):
    """Body of a create_task message."""

    interval: str | dict = Field(default="Immediate", description="Immediate, Once, {Block: n} or {Cron: expr}.")
    boundary: Boundary = Field(default_factory=Boundary)
    stop_on_fail: bool = False
    actions: list[Action] = Field(..., min_length=1)
    rules: list[dict] | None = None


class TaskResponse(BaseModel):
    """One entry of a get_tasks / get_tasks_by_owner query result."""

    task_hash: str
    owner_id: str
    interval: str | dict
    boundary: Boundary | None = None
    stop_on_fail: bool = False
    total_deposit: list[Coin] = Field(default_factory=list)
    actions: list[Action] = Field(default_factory=list)
    rules: list[dict] | None = None


class ContractList(BaseModel):
    """Response of `query wasm list-contract-by-code`."""

    contracts: list[str] | None = None


class SlotSchedule(BaseModel):
    """
    Earliest scheduled slots from get_slot_hashes, paired with the chain head
    they were read against. Slot ids of 0 mean the slot kind is empty.
    """

    block_slot: int = 0
    block_hashes: list[str] = Field(default_factory=list)
    time_slot: int = Field(default=0, description="Nanoseconds since the epoch.")
    time_hashes: list[str] = Field(default_factory=list)
    height: int = 0
    block_time_ns: int = 0


class StepRecord(BaseModel):
    """Log entry produced after each node CLI call."""

    name: str
    argv: list[str]
    returncode: int = 0
    stdout: str = Field(default="", description="Raw output captured from the node CLI.")
