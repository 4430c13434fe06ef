"""``pkgplan solve <repository> <initial> <constraints>``: Compute a plan.

Loads the three documents, builds the pseudo-Boolean model, optimises it,
and prints the resulting commands. In ``json`` format (the default) the
output is a JSON list such as ``["-B=1", "+A=1"]``.

Exit Codes:
    0: A plan was found (possibly empty).
    1: No valid configuration exists.
    2: Malformed or inconsistent input.
    3: The solving engine failed or timed out.
"""

from __future__ import annotations

import json
import sys

import click

from pkgplan.config import DEFAULT_ENGINE, SolverConfig
from pkgplan.core.repository import load_problem
from pkgplan.core.resolution import PlanResolver
from pkgplan.exceptions import PkgPlanError, SolverError

EXIT_OK = 0
EXIT_INFEASIBLE = 1
EXIT_INPUT = 2
EXIT_SOLVER = 3

_DOCUMENT = click.Path(exists=True, dir_okay=False)


@click.command("solve")
@click.argument("repository", type=_DOCUMENT)
@click.argument("initial", type=_DOCUMENT)
@click.argument("constraints", type=_DOCUMENT)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    envvar="PKGPLAN_TIMEOUT",
    help="Solver time limit in seconds (default: none).",
)
@click.option(
    "--engine",
    default=DEFAULT_ENGINE,
    show_default=True,
    envvar="PKGPLAN_ENGINE",
    help="python-sat oracle backing the optimizer.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["json", "text"]),
    default="json",
    help="Output format (default: json).",
)
def solve_command(
    repository: str,
    initial: str,
    constraints: str,
    timeout: float | None,
    engine: str,
    output_format: str,
) -> None:
    """Compute the cheapest plan reaching a state that meets CONSTRAINTS.

    REPOSITORY lists packages, INITIAL the installed ids, CONSTRAINTS the
    signed goal ranges. JSON and YAML documents are accepted.
    """
    try:
        problem = load_problem(repository, initial, constraints)
        config = SolverConfig(timeout=timeout, engine=engine)
        resolution = PlanResolver(problem, config).resolve()
    except SolverError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(EXIT_SOLVER)
    except PkgPlanError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(EXIT_INPUT)

    if output_format == "json":
        if resolution.feasible:
            click.echo(json.dumps(resolution.commands))
        else:
            click.echo("No valid configuration exists:", err=True)
            for msg in resolution.diagnostics:
                click.echo(f"  - {msg}", err=True)
    else:
        from pkgplan.cli.output import print_resolution
        print_resolution(resolution)

    sys.exit(EXIT_OK if resolution.feasible else EXIT_INFEASIBLE)
