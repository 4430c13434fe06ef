"""Pseudo-Boolean formula construction.

One 0/1 variable ``x_p`` per package id. The formula contains:

- **dependency** constraints, one per distinct clause ``C`` of ``p``::

      sum(x_d for d in C) - x_p >= 0

  An empty clause yields ``-x_p >= 0``, so ``p`` can never be installed.
- **conflict** constraints, one per unordered conflicting pair::

      x_p + x_c <= 1

  A package that conflicts with itself gets ``2 x_p <= 1``, i.e. ``x_p = 0``.
- a **goal** constraint ``x_goal >= 1``.
- a minimisation **objective** ``sum(w_p * x_p)`` where ``w_p`` is the
  package size, except for initially installed packages whose weight is
  replaced by ``uninstall_cost`` (a large negative number). The weight is
  substituted, not added: keeping an installed package is worth the same
  whatever its size.
- a secondary **tiebreak** objective counting changes against the initial
  state (``+x_p`` for new packages, ``-x_p`` for installed ones). It only
  separates assignments of equal objective value, so zero-size packages
  are not installed unless something requires them.

The formula only references ids; it never mutates the repository.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from pkgplan.config import UNINSTALL_COST
from pkgplan.core.resolution.expansion import ExpandedRepository
from pkgplan.exceptions import FormulaError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Linear terms and constraints
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Term:
    """``coefficient * x_variable``."""

    coefficient: int
    variable: str


class Comparator(Enum):
    GE = ">="
    LE = "<="


class ConstraintOrigin(Enum):
    """Which part of the model produced a constraint."""

    DEPENDENCY = "dependency"
    CONFLICT = "conflict"
    GOAL = "goal"


@dataclass(frozen=True)
class LinearConstraint:
    """``sum(terms) <comparator> bound`` over 0/1 variables.

    Attributes:
        terms: Terms with distinct variables and non-zero coefficients.
        comparator: ``GE`` or ``LE``.
        bound: Integer right-hand side.
        origin: Whether this came from a dependency, conflict, or the goal.
        owner: Id of the package the constraint was generated for.
    """

    terms: tuple[Term, ...]
    comparator: Comparator
    bound: int
    origin: ConstraintOrigin
    owner: str

    def evaluate(self, assignment: dict[str, bool]) -> bool:
        """Return True if *assignment* satisfies this constraint.

        Variables missing from *assignment* count as 0.
        """
        total = sum(t.coefficient for t in self.terms if assignment.get(t.variable, False))
        if self.comparator is Comparator.GE:
            return total >= self.bound
        return total <= self.bound

    def __str__(self) -> str:
        lhs = " ".join(f"{t.coefficient:+d}*[{t.variable}]" for t in self.terms) or "0"
        return f"{lhs} {self.comparator.value} {self.bound}"


def linear(
    terms: Iterable[tuple[int, str]],
    comparator: Comparator,
    bound: int,
    origin: ConstraintOrigin,
    owner: str,
) -> LinearConstraint:
    """Build a ``LinearConstraint``, merging repeated variables.

    Terms are sorted by variable name and zero coefficients are dropped, so
    equal constraints compare equal.
    """
    merged: dict[str, int] = {}
    for coefficient, variable in terms:
        merged[variable] = merged.get(variable, 0) + coefficient
    return LinearConstraint(
        terms=tuple(Term(c, v) for v, c in sorted(merged.items()) if c != 0),
        comparator=comparator,
        bound=bound,
        origin=origin,
        owner=owner,
    )


# ---------------------------------------------------------------------------
# Formula
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Formula:
    """A pseudo-Boolean minimisation problem.

    Attributes:
        variables: One variable per package id, in repository order.
        constraints: Every linear constraint.
        objective: Minimised ``sum(coefficient * x)``; zero weights omitted.
        tiebreak: Minimised among assignments with the optimal objective.
    """

    variables: tuple[str, ...]
    constraints: tuple[LinearConstraint, ...]
    objective: tuple[Term, ...] = field(default=())
    tiebreak: tuple[Term, ...] = field(default=())

    def objective_value(self, assignment: dict[str, bool]) -> int:
        """Evaluate the objective under *assignment*."""
        return sum(t.coefficient for t in self.objective if assignment.get(t.variable, False))

    def violated(self, assignment: dict[str, bool]) -> list[LinearConstraint]:
        """Return every constraint *assignment* does not satisfy."""
        return [c for c in self.constraints if not c.evaluate(assignment)]


def build_formula(
    repository: ExpandedRepository,
    initial: Iterable[str],
    goal_id: str,
    uninstall_cost: int = UNINSTALL_COST,
) -> Formula:
    """Build the optimisation formula for an expanded repository.

    Args:
        repository: Expanded repository, goal package included.
        initial: Ids installed before planning.
        goal_id: Id of the synthetic goal package.
        uninstall_cost: Weight substituted for initially installed packages.

    Returns:
        The ``Formula``. Each distinct dependency clause and each unordered
        conflict pair appears exactly once.

    Raises:
        FormulaError: If *goal_id* or an initial id is not in *repository*,
            or a relation references an id outside it.
    """
    initial = frozenset(initial)
    if goal_id not in repository:
        raise FormulaError(f"Goal package {goal_id!r} is not in the repository")
    unknown = sorted(initial - set(repository.ids))
    if unknown:
        raise FormulaError(f"Initial ids not in the repository: {', '.join(unknown)}")

    variables = tuple(repository.ids)
    constraints: list[LinearConstraint] = []
    seen_pairs: set[frozenset[str]] = set()

    for pkg in repository:
        seen_clauses: set[frozenset[str]] = set()
        for clause in pkg.depends:
            _check_known(clause, repository, pkg.id)
            if clause in seen_clauses:
                continue
            seen_clauses.add(clause)
            constraints.append(
                linear(
                    [(1, d) for d in clause] + [(-1, pkg.id)],
                    Comparator.GE, 0, ConstraintOrigin.DEPENDENCY, pkg.id,
                )
            )

        _check_known(pkg.conflicts, repository, pkg.id)
        for other in sorted(pkg.conflicts):
            pair = frozenset((pkg.id, other))
            if pair in seen_pairs:
                continue
            seen_pairs.add(pair)
            constraints.append(
                linear(
                    [(1, pkg.id), (1, other)],
                    Comparator.LE, 1, ConstraintOrigin.CONFLICT, pkg.id,
                )
            )

    constraints.append(
        linear([(1, goal_id)], Comparator.GE, 1, ConstraintOrigin.GOAL, goal_id)
    )

    objective = []
    for pkg in repository:
        weight = uninstall_cost if pkg.id in initial else pkg.size
        if weight:
            objective.append(Term(weight, pkg.id))

    tiebreak = [
        Term(-1 if pkg_id in initial else 1, pkg_id)
        for pkg_id in variables
        if pkg_id != goal_id
    ]

    logger.debug(
        "Built formula: %d variables, %d constraints, %d objective terms",
        len(variables), len(constraints), len(objective),
    )
    return Formula(
        variables=variables,
        constraints=tuple(constraints),
        objective=tuple(objective),
        tiebreak=tuple(tiebreak),
    )


def _check_known(ids: Iterable[str], repository: ExpandedRepository, owner: str) -> None:
    for pkg_id in ids:
        if pkg_id not in repository:
            raise FormulaError(f"{owner} references {pkg_id!r}, which is not in the repository")
