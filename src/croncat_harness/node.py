# node.py
# Thin subprocess wrapper around the node CLI (junod by default).
#
# Commands are passed as argv lists, never through a shell, so JSON payloads
# need no quoting. Each call blocks until the CLI returns; with
# --broadcast-mode block that means until the tx is in a block.

import subprocess

from croncat_harness.config import HarnessConfig
from croncat_harness.errors import ExternalCallError

# Exit status a shell reports for a command it cannot find.
COMMAND_NOT_FOUND = 127


class NodeClient:
    """Issues `tx wasm` and `query wasm` commands for one network config."""

    def __init__(self, config: HarnessConfig) -> None:
        self._config = config

    def _run(self, args: list[str]) -> subprocess.CompletedProcess:
        argv = [self._config.binary, *args]
        try:
            result = subprocess.run(argv, capture_output=True, text=True, check=False)
        except FileNotFoundError as exc:
            raise ExternalCallError(argv, COMMAND_NOT_FOUND, stderr=str(exc)) from exc

        if result.returncode != 0:
            raise ExternalCallError(
                argv, result.returncode, stdout=result.stdout or "", stderr=result.stderr or ""
            )
        return result

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def instantiate(
        self, code_id: int, init_msg: str, sender: str, label: str, no_admin: bool = True
    ) -> subprocess.CompletedProcess:
        args = [
            "tx", "wasm", "instantiate", str(code_id), init_msg,
            "--from", sender,
            "--label", label,
            *self._config.tx_flags(),
            "-y",
        ]
        if no_admin:
            args.append("--no-admin")
        return self._run(args)

    def execute(
        self, contract: str, msg: str, sender: str, amount: str | None = None
    ) -> subprocess.CompletedProcess:
        args = ["tx", "wasm", "execute", contract, msg]
        if amount:
            args += ["--amount", amount]
        args += ["--from", sender, *self._config.tx_flags(), "-y"]
        return self._run(args)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_contracts_by_code(self, code_id: int) -> subprocess.CompletedProcess:
        return self._run(
            [
                "query", "wasm", "list-contract-by-code", str(code_id),
                *self._config.node_flags(),
                "--output", "json",
            ]
        )

    def query_smart(self, contract: str, query: str) -> subprocess.CompletedProcess:
        return self._run(
            [
                "query", "wasm", "contract-state", "smart", contract, query,
                *self._config.node_flags(),
                "--output", "json",
            ]
        )

    def status(self) -> subprocess.CompletedProcess:
        """Chain head info. Older node builds print it on stderr instead of stdout."""
        return self._run(["status", *self._config.node_flags()])
