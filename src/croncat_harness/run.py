# run.py
# Entry point. Config and wiring only — no logic lives here.
#
# Override any network or wallet setting with CRONCAT_* variables, either in
# the environment or a local .env file (see config.py).

import sys

from pydantic import ValidationError

from croncat_harness import display
from croncat_harness.config import load_config
from croncat_harness.errors import ExternalCallError, HarnessError
from croncat_harness.harness import Harness


def main() -> int:
    """Run the workflow once. Exit status is that of the first failing node call."""
    try:
        config = load_config()
    except ValidationError as exc:
        display.halt("Invalid CRONCAT_* configuration.", str(exc))
        return 1

    harness = Harness(config)

    try:
        harness.run()
    except ExternalCallError as exc:
        display.execution_summary(harness.log)
        display.halt(str(exc), exc.stdout, exc.stderr)
        return exc.returncode
    except HarnessError as exc:
        display.execution_summary(harness.log)
        display.halt(str(exc))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
