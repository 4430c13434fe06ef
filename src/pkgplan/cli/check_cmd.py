"""``pkgplan check <repository> <initial> <constraints> <commands>``: Check a plan.

Replays the commands from the initial state, validates the final state
against every dependency, conflict, and goal constraint, and prints the
plan cost (install sizes plus one million per removal).

Exit Codes:
    0: The plan is valid.
    1: The plan is invalid.
    2: Malformed input or a command that cannot be applied.
"""

from __future__ import annotations

import json
import sys

import click

from pkgplan.core.repository import load_problem
from pkgplan.core.repository.loader import read_document
from pkgplan.core.resolution import ResolutionContext, check_plan, parse_action
from pkgplan.exceptions import DocumentError, PkgPlanError

_DOCUMENT = click.Path(exists=True, dir_okay=False)


@click.command("check")
@click.argument("repository", type=_DOCUMENT)
@click.argument("initial", type=_DOCUMENT)
@click.argument("constraints", type=_DOCUMENT)
@click.argument("commands", type=_DOCUMENT)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def check_command(
    repository: str,
    initial: str,
    constraints: str,
    commands: str,
    output_format: str,
) -> None:
    """Validate and price the plan in COMMANDS.

    COMMANDS is a list of "+name=version" / "-name=version" strings, as
    produced by ``pkgplan solve``.
    """
    try:
        problem = load_problem(repository, initial, constraints)
        data = read_document(commands)
        if not isinstance(data, list):
            raise DocumentError("Commands document must be a list")
        actions = [parse_action(item) for item in data]
        context = ResolutionContext(problem)
        report = check_plan(
            problem.repository,
            context.expand(),
            context.resolver,
            problem.initial,
            problem.constraints,
            actions,
        )
    except PkgPlanError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    if output_format == "json":
        click.echo(json.dumps({
            "valid": report.valid,
            "cost": report.cost,
            "violations": report.violations,
            "transient": report.transient,
        }, indent=2))
    else:
        from pkgplan.cli.output import print_plan_report
        print_plan_report(report)

    sys.exit(0 if report.valid else 1)
