"""Goal synthesis: encoding user constraints as a synthetic package.

The goal package depends on every ``+`` constraint (one clause each) and
conflicts with every ``-`` constraint. Forcing the goal to be installed
therefore forces all user constraints to hold, through the same
dependency/conflict encoding used for real packages.
"""

from __future__ import annotations

from typing import Iterable

from pkgplan.config import GOAL_NAME, GOAL_VERSION
from pkgplan.core.repository.expressions import Constraint, ConstraintKind
from pkgplan.core.repository.models import Package, Repository
from pkgplan.exceptions import ReservedNameError


def synthesize_goal(
    constraints: Iterable[Constraint],
    name: str = GOAL_NAME,
    version: str = GOAL_VERSION,
) -> Package:
    """Build the goal package for *constraints*.

    ``+A`` becomes the single-expression clause ``[A]``; with several
    matching versions any one of them satisfies it. ``-A`` adds ``A`` to
    the goal's conflicts. Constraint order only affects clause order.
    """
    depends = []
    conflicts = []
    for constraint in constraints:
        if constraint.kind is ConstraintKind.REQUIRE:
            depends.append((constraint.expression,))
        else:
            conflicts.append(constraint.expression)
    return Package(
        name=name,
        version=version,
        size=0,
        depends=tuple(depends),
        conflicts=tuple(conflicts),
    )


def add_goal(repository: Repository, goal: Package) -> Repository:
    """Return *repository* extended with *goal*.

    Raises:
        ReservedNameError: If the goal's name is already used by a package.
    """
    if goal.name in repository.names:
        raise ReservedNameError(
            f"Goal package name {goal.name!r} collides with a repository package"
        )
    return repository.with_package(goal)
