"""pkgplan CLI: Minimal-cost install plans for package repositories.

Entry point for the ``pkgplan`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    solve: Compute an optimal install/remove plan.
    check: Validate and price an existing plan.

Usage::

    pkgplan solve repository.json initial.json constraints.json
    pkgplan solve repo.yaml initial.yaml constraints.yaml --format text
    pkgplan -v solve repository.json initial.json constraints.json --timeout 30
    pkgplan check repository.json initial.json constraints.json commands.json
"""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from pkgplan import __version__
from pkgplan.cli.check_cmd import check_command
from pkgplan.cli.solve_cmd import solve_command


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Log pipeline progress to stderr.",
)
def cli(verbose: bool) -> None:
    """pkgplan: Minimal-cost install plans via pseudo-Boolean optimization.

    Reads a package repository, the currently installed packages, and the
    user's goal constraints, and prints the cheapest sequence of removals
    and installs that reaches a consistent state meeting every goal.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
            force=True,
        )


cli.add_command(solve_command)
cli.add_command(check_command)
