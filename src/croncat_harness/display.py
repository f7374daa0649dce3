# display.py
# All terminal output for the CronCat exercise harness.
#
# This module owns presentation entirely. harness.py never formats strings —
# it calls named functions here.
#
# Colour language:
#   cyan    — workflow / routing events
#   blue    — node CLI calls and their output
#   yellow  — waits and polling
#   green   — success / confirmed
#   red     — failures, halts

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from croncat_harness.config import HarnessConfig
from croncat_harness.models import StepRecord

console = Console()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _label(tag: str, color: str) -> Text:
    t = Text()
    t.append(f" {tag} ", style=f"bold white on {color}")
    return t


def _mono(value: str, max_len: int = 120) -> str:
    if len(value) > max_len:
        return value[:max_len] + "…"
    return value


# ---------------------------------------------------------------------------
# Run entry
# ---------------------------------------------------------------------------


def banner(config: HarnessConfig) -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]CronCat Deployment & Exercise Harness[/bold cyan]\n"
            "[dim]instantiate → register agent → create tasks → proxy_call ×2[/dim]\n\n"
            f"[dim]Node     :[/dim] [white]{config.node}[/white]\n"
            f"[dim]Chain ID :[/dim] [white]{config.chain_id}[/white]\n"
            f"[dim]Code ID  :[/dim] [white]{config.code_id}[/white]",
            border_style="cyan",
            padding=(1, 4),
        )
    )


def step_start(name: str, description: str) -> None:
    console.print()
    console.print(Rule(f"[cyan]{name.upper()}[/cyan]", style="cyan"))
    console.print(f"  [white]{description}[/white]")


# ---------------------------------------------------------------------------
# Node CLI
# ---------------------------------------------------------------------------


def node_call(argv: list[str]) -> None:
    console.print(f"  [blue]→[/blue] [dim]{escape(' '.join(argv))}[/dim]", highlight=False)


def node_output(stdout: str) -> None:
    """Echo the CLI's own output untouched."""
    if stdout:
        console.out(stdout.rstrip("\n"), highlight=False)


def contract_resolved(address: str) -> None:
    console.print(f"  [bold green]✓ Contract address[/bold green]  [white]{address}[/white]")


def step_done(name: str) -> None:
    console.print(f"  [bold green]✓ {name}[/bold green]")


# ---------------------------------------------------------------------------
# Waits
# ---------------------------------------------------------------------------


def wait_start(description: str) -> None:
    console.print(f"  [yellow]… {description}[/yellow]")


def poll_status(due: int, slotted: int, height: int, elapsed: float) -> None:
    console.print(
        f"  [dim yellow]↳ {due}/{slotted} slotted task(s) due at height {height} "
        f"after {elapsed:.1f}s[/dim yellow]"
    )


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


def execution_summary(log: list[StepRecord]) -> None:
    console.print()
    table = Table(
        box=box.SIMPLE_HEAVY,
        border_style="dim",
        show_header=True,
        header_style="bold dim",
        padding=(0, 1),
    )
    table.add_column("#", justify="center", width=4)
    table.add_column("Step", width=16)
    table.add_column("Exit", justify="center", width=6)
    table.add_column("Command", style="dim white")

    for index, record in enumerate(log, start=1):
        status = (
            "[bold green]0[/bold green]"
            if record.returncode == 0
            else f"[bold red]{record.returncode}[/bold red]"
        )
        table.add_row(str(index), record.name, status, _mono(" ".join(record.argv[1:4]), 60))

    console.print(
        Panel(
            table,
            title="[dim]EXECUTION SUMMARY[/dim]",
            border_style="dim",
            padding=(0, 1),
        )
    )


def final_result(contract: str) -> None:
    console.print()
    console.print(
        Panel(
            f"[white]All steps completed against[/white] [bold white]{contract}[/bold white]",
            title=_label("DONE", "green"),
            border_style="green",
            padding=(1, 2),
        )
    )
    console.print()


def halt(reason: str, *details: str) -> None:
    """Halt panel, then any diagnostic text from the failing call, verbatim and in order."""
    body = f"[bold white]{escape(reason)}[/bold white]"
    console.print()
    console.print(
        Panel(
            body,
            title=_label("HALT", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )
    for detail in details:
        if detail:
            console.out(detail.rstrip("\n"), highlight=False)
    console.print()
