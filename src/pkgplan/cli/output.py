"""Rich output formatting helpers for the pkgplan CLI.

Removals are shown in red, installs in green, consistently across the
``solve`` and ``check`` commands.
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pkgplan.core.resolution import ActionKind, PlanReport, Resolution

_ACTION_STYLES: dict[ActionKind, str] = {
    ActionKind.REMOVE: "bold red",
    ActionKind.INSTALL: "bold green",
}

console = Console()


def action_style(kind: ActionKind) -> str:
    """Return the Rich style string for an action kind."""
    return _ACTION_STYLES.get(kind, "white")


def print_resolution(resolution: Resolution) -> None:
    """Print a plan, or the reasons no plan exists.

    Args:
        resolution: Result of ``PlanResolver.resolve()``.
    """
    if not resolution.feasible:
        console.print(Panel("[bold red]No valid configuration[/bold red]", title="Plan"))
        for msg in resolution.diagnostics:
            console.print(f"  [red]- {msg}[/red]")
        return

    console.print(Panel("[bold green]Plan found[/bold green]", title="Plan"))
    if not resolution.actions:
        console.print("[dim]Nothing to do: the installed set is already optimal.[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Action", justify="center")
    table.add_column("Package", style="bold")
    for i, action in enumerate(resolution.actions, start=1):
        table.add_row(
            str(i),
            Text(action.kind.name, style=action_style(action.kind)),
            action.package_id,
        )
    console.print(table)
    console.print(
        f"[bold]{len(resolution.removals)}[/bold] removals | "
        f"[bold]{len(resolution.installs)}[/bold] installs | "
        f"objective {resolution.objective}"
    )


def print_plan_report(report: PlanReport) -> None:
    """Print the outcome of ``pkgplan check``.

    Args:
        report: Result of ``check_plan``.
    """
    if report.valid:
        verdict = Text("VALID", style="bold green")
    else:
        verdict = Text("INVALID", style="bold red")
    header = Text.assemble(("Plan: ", "bold"), verdict, ("  Cost: ", "bold"), (str(report.cost), ""))
    console.print(Panel(header, title="Plan Check"))

    for msg in report.violations:
        console.print(f"  [red]- {msg}[/red]")
    if report.transient:
        console.print("[yellow]Intermediate states (informational):[/yellow]")
        for msg in report.transient:
            console.print(f"  [yellow]- {msg}[/yellow]")
    console.print(f"cost {report.cost}")
