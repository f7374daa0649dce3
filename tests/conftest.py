import json
import subprocess

import pytest

from croncat_harness.config import HarnessConfig

GENESIS_HEIGHT = 10


def ok(argv, stdout="", stderr=""):
    return subprocess.CompletedProcess(argv, 0, stdout=stdout, stderr=stderr)


class FakeClock:
    """Monotonic clock whose sleep just advances time."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class FakeChain:
    """
    Stand-in for the node CLI. Tracks instantiated contracts, stored tasks and
    their block slots so a full workflow can be driven without a network.

    Without a clock every tx lands in its own block. With a clock, blocks are
    produced every `block_time` seconds regardless of txs.
    """

    def __init__(
        self,
        existing=None,
        fail_on=None,
        fail_code=1,
        fail_stdout="",
        fail_stderr="Error: rpc error",
        clock=None,
        block_time=5,
        status_on_stderr=False,
    ):
        self.contracts = list(existing or [])
        self.tasks = []
        self.calls = []
        self.observed_pending = []
        self._fail_on = fail_on
        self._fail_code = fail_code
        self._fail_stdout = fail_stdout
        self._fail_stderr = fail_stderr
        self._clock = clock
        self._block_time = block_time
        self._status_on_stderr = status_on_stderr
        self._tx_height = GENESIS_HEIGHT
        self._counter = 0

    @property
    def height(self):
        if self._clock is None:
            return self._tx_height
        return GENESIS_HEIGHT + int(self._clock() // self._block_time)

    def _new_block(self):
        if self._clock is None:
            self._tx_height += 1

    def __call__(self, argv, **kwargs):
        self.calls.append(argv)
        command = argv[1:4]

        if self._fail_on and self._fail_on(argv):
            return subprocess.CompletedProcess(
                argv, self._fail_code, stdout=self._fail_stdout, stderr=self._fail_stderr
            )

        if argv[1] == "status":
            status = json.dumps(
                {
                    "SyncInfo": {
                        "latest_block_height": str(self.height),
                        "latest_block_time": "2022-05-01T10:00:00.123456789Z",
                    }
                }
            )
            if self._status_on_stderr:
                return ok(argv, "", status)
            return ok(argv, status)

        if command == ["tx", "wasm", "instantiate"]:
            self._new_block()
            self._counter += 1
            self.contracts.append(f"juno1contract{self._counter}")
            return ok(argv, '{"txhash":"AAA"}\n')

        if command == ["query", "wasm", "list-contract-by-code"]:
            return ok(argv, json.dumps({"contracts": self.contracts, "pagination": {}}))

        if command == ["tx", "wasm", "execute"]:
            self._new_block()
            msg = json.loads(argv[5])
            if "create_task" in msg:
                task = msg["create_task"]["task"]
                self.tasks.append(
                    {
                        "task_hash": f"hash{len(self.calls)}",
                        "owner_id": "juno1wallet7",
                        "interval": task["interval"],
                        "boundary": {"start": None, "end": None},
                        "stop_on_fail": task["stop_on_fail"],
                        "total_deposit": [{"denom": "ujunox", "amount": "100000"}],
                        "actions": task["actions"],
                        "rules": task["rules"],
                        "slot": self.height + 1,
                    }
                )
            elif "proxy_call" in msg:
                due = [task for task in self.tasks if task["slot"] <= self.height]
                if due:
                    self.tasks.remove(due[0])
            return ok(argv, '{"txhash":"BBB"}\n')

        if command == ["query", "wasm", "contract-state"]:
            query = json.loads(argv[6])
            if "get_slot_hashes" in query:
                if not self.tasks:
                    return ok(argv, json.dumps({"data": [0, [], 0, []]}))
                slot = min(task["slot"] for task in self.tasks)
                hashes = [task["task_hash"] for task in self.tasks if task["slot"] == slot]
                return ok(argv, json.dumps({"data": [slot, hashes, 0, []]}))
            if "get_tasks" in query:
                self.observed_pending.append(len(self.tasks))
            return ok(argv, json.dumps({"data": self.tasks}))

        raise AssertionError(f"unexpected command: {argv}")

    def executed(self, entry_point):
        return [
            argv for argv in self.calls
            if argv[1:4] == ["tx", "wasm", "execute"] and entry_point in json.loads(argv[5])
        ]


@pytest.fixture
def config():
    return HarnessConfig(wait_seconds=0)


@pytest.fixture
def chain():
    return FakeChain(existing=["juno1older"])


@pytest.fixture
def make_chain():
    return FakeChain


@pytest.fixture
def clock():
    return FakeClock()
