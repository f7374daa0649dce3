# config.py
# Network, identity and timing settings for the exercise harness.
#
# Every default is the literal the workflow was written against. Values can
# be overridden from the environment or a local .env file; nothing else reads
# the environment.

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


DEFAULT_NODE = "https://rpc.uni.juno.deuslabs.fi:443"
DEFAULT_VALIDATOR = "juno14vhcdsyf83ngsrrqc92kmw8q9xakqjm0ff2dpn"


class HarnessConfig(BaseModel):
    """Everything the harness needs to know about the chain and its wallets."""

    binary: str = Field(default="junod", description="Node CLI executable.")
    node: str = Field(default=DEFAULT_NODE, description="RPC endpoint.")
    chain_id: str = "uni-3"
    gas_prices: str = "0.025ujunox"
    gas_adjustment: float = 1.3
    broadcast_mode: str = "block"

    code_id: int = Field(default=1061, description="Pre-uploaded contract code ID.")
    denom: str = "ujunox"
    label: str = "croncat"

    owner: str = Field(default="owner", description="Identity that instantiates.")
    agent: str = Field(default="wallet6", description="Identity registered as agent.")
    task_creator: str = Field(default="wallet7", description="Identity that pays for tasks.")

    validator: str = DEFAULT_VALIDATOR
    stake_amounts: list[int] = Field(default_factory=lambda: [10000, 20000])
    task_deposit: int = Field(default=100000, description="Funds attached to create_task.")
    gas_limit: int = 150000

    wait_seconds: float = Field(default=10.0, ge=0)
    poll_timeout: float = Field(
        default=0.0, ge=0, description="Poll get_tasks instead of sleeping when > 0."
    )
    poll_interval: float = Field(default=2.0, gt=0)

    def node_flags(self) -> list[str]:
        return ["--node", self.node]

    def tx_flags(self) -> list[str]:
        return self.node_flags() + [
            "--chain-id", self.chain_id,
            "--gas-prices", self.gas_prices,
            "--gas", "auto",
            "--gas-adjustment", f"{self.gas_adjustment:g}",
            "--broadcast-mode", self.broadcast_mode,
        ]

    def coin(self, amount: int) -> str:
        """Render a CLI coin string, e.g. ``100000ujunox``."""
        return f"{amount}{self.denom}"


# Environment variable → HarnessConfig field
ENV_OVERRIDES: dict[str, str] = {
    "CRONCAT_BINARY": "binary",
    "CRONCAT_NODE": "node",
    "CRONCAT_CHAIN_ID": "chain_id",
    "CRONCAT_GAS_PRICES": "gas_prices",
    "CRONCAT_GAS_ADJUSTMENT": "gas_adjustment",
    "CRONCAT_CODE_ID": "code_id",
    "CRONCAT_DENOM": "denom",
    "CRONCAT_LABEL": "label",
    "CRONCAT_OWNER": "owner",
    "CRONCAT_AGENT": "agent",
    "CRONCAT_TASK_CREATOR": "task_creator",
    "CRONCAT_VALIDATOR": "validator",
    "CRONCAT_TASK_DEPOSIT": "task_deposit",
    "CRONCAT_WAIT_SECONDS": "wait_seconds",
    "CRONCAT_POLL_TIMEOUT": "poll_timeout",
    "CRONCAT_POLL_INTERVAL": "poll_interval",
}


def load_config(environ: dict[str, str] | None = None) -> HarnessConfig:
    """
    Build a HarnessConfig from defaults plus any CRONCAT_* overrides.

    Empty values are ignored. pydantic coerces numeric strings and raises
    ValidationError on anything it cannot parse.
    """
    env = os.environ if environ is None else environ
    overrides = {
        field: env[name]
        for name, field in ENV_OVERRIDES.items()
        if env.get(name, "").strip()
    }
    return HarnessConfig.model_validate(overrides)
