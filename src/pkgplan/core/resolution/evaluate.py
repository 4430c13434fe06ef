"""Plan evaluation: replaying commands, validating states, and pricing plans.

This is the independent check for a plan: it does not look at the
formula, only at the expanded repository relations. A plan is valid when
the final state satisfies all dependencies and conflicts of the installed
packages as well as the goal constraints. Intermediate states are reported
but do not decide validity. Its cost is the install size of each ``+`` command plus
``REMOVAL_PENALTY`` per ``-`` command.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from pkgplan.config import REMOVAL_PENALTY
from pkgplan.core.repository.expressions import Constraint, ConstraintKind
from pkgplan.core.repository.models import Repository
from pkgplan.core.resolution.expansion import ExpandedRepository
from pkgplan.core.resolution.interpret import Action, ActionKind
from pkgplan.core.resolution.ranges import RangeResolver
from pkgplan.exceptions import InvalidReferenceError, PlanError


def apply_action(state: set[str], action: Action, repository: Repository) -> None:
    """Apply one action to *state* in place.

    Raises:
        InvalidReferenceError: If an install names an unknown package.
        PlanError: If the action does not fit the current state.
    """
    pkg_id = action.package_id
    if action.kind is ActionKind.INSTALL:
        if pkg_id not in repository:
            raise InvalidReferenceError(f"Package not in repository: {pkg_id}")
        if pkg_id in state:
            raise PlanError(f"Package already installed: {pkg_id}")
        state.add(pkg_id)
    else:
        if pkg_id not in state:
            raise PlanError(f"Package not installed: {pkg_id}")
        state.remove(pkg_id)


def apply_plan(
    initial: Iterable[str], actions: Iterable[Action], repository: Repository
) -> frozenset[str]:
    """Replay *actions* from *initial* and return the final state."""
    state = set(initial)
    for action in actions:
        apply_action(state, action, repository)
    return frozenset(state)


def state_violations(repository: ExpandedRepository, state: Iterable[str]) -> list[str]:
    """List every dependency clause and conflict the installed set breaks."""
    state = frozenset(state)
    problems: list[str] = []
    for pkg_id in sorted(state):
        pkg = repository[pkg_id]
        for clause in pkg.depends:
            if not clause & state:
                alternatives = ", ".join(sorted(clause)) or "nothing"
                problems.append(f"{pkg_id} requires one of [{alternatives}]")
        for other in sorted(pkg.conflicts & state):
            problems.append(f"{pkg_id} conflicts with {other}")
    return problems


def constraint_violations(
    resolver: RangeResolver, constraints: Iterable[Constraint], state: Iterable[str]
) -> list[str]:
    """List every goal constraint the final state does not meet."""
    state = frozenset(state)
    problems: list[str] = []
    for constraint in constraints:
        matching = resolver.resolve(constraint.expression) & state
        if constraint.kind is ConstraintKind.REQUIRE and not matching:
            problems.append(f"{constraint} is not satisfied")
        elif constraint.kind is ConstraintKind.FORBID and matching:
            problems.append(f"{constraint} is violated by {', '.join(sorted(matching))}")
    return problems


def plan_cost(
    actions: Iterable[Action],
    repository: Repository,
    removal_penalty: int = REMOVAL_PENALTY,
) -> int:
    """Total cost of *actions*: install sizes plus a penalty per removal."""
    cost = 0
    for action in actions:
        if action.kind is ActionKind.INSTALL:
            cost += repository[action.package_id].size
        else:
            cost += removal_penalty
    return cost


@dataclass
class PlanReport:
    """Outcome of checking a plan.

    Attributes:
        valid: True if the final state is consistent and meets every goal
            constraint.
        cost: Plan cost (meaningful even for invalid plans).
        final_state: Installed ids after replaying the plan.
        violations: Problems with the final state; any entry makes the
            plan invalid.
        transient: Problems seen in intermediate states only. Action order
            within a plan is a presentation convention, so these do not
            affect validity.
    """

    valid: bool
    cost: int
    final_state: frozenset[str] = frozenset()
    violations: list[str] = field(default_factory=list)
    transient: list[str] = field(default_factory=list)


def check_plan(
    repository: Repository,
    expanded: ExpandedRepository,
    resolver: RangeResolver,
    initial: Iterable[str],
    constraints: Iterable[Constraint],
    actions: Iterable[Action],
) -> PlanReport:
    """Replay *actions* step by step and validate the resulting state.

    Raises:
        InvalidReferenceError: If a command names an unknown package.
        PlanError: If a command does not fit the current state.
    """
    actions = list(actions)
    state = set(initial)
    transient = []
    if actions:
        transient = [f"initial: {v}" for v in state_violations(expanded, state)]

    for step, action in enumerate(actions[:-1], start=1):
        apply_action(state, action, repository)
        transient.extend(
            f"after {action} (step {step}): {v}" for v in state_violations(expanded, state)
        )
    if actions:
        apply_action(state, actions[-1], repository)

    violations = state_violations(expanded, state)
    violations.extend(constraint_violations(resolver, constraints, state))
    return PlanReport(
        valid=not violations,
        cost=plan_cost(actions, repository),
        final_state=frozenset(state),
        violations=violations,
        transient=transient,
    )
