# errors.py
# Exception family for the exercise harness. Every failure is terminal:
# nothing in the package catches these except run.main().


class HarnessError(Exception):
    """Base class. Any HarnessError aborts the run."""


class ExternalCallError(HarnessError):
    """Raised when the node CLI exits non-zero or cannot be started."""

    def __init__(self, argv: list[str], returncode: int, stdout: str = "", stderr: str = "") -> None:
        self.argv = argv
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"{' '.join(argv[:4])} … exited with code {returncode}")


class AddressResolutionError(HarnessError):
    """Raised when no contract address can be read from list-contract-by-code."""


class WaitTimeoutError(HarnessError):
    """Raised when a polling wait runs out of time before its condition holds."""
