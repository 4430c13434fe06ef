"""End-to-end planning: problem in, ordered install/remove plan out.

Stages run strictly forward::

    Problem -> goal synthesis -> range expansion -> formula -> solver -> plan

Each run owns a ``ResolutionContext`` holding the repository extended with
the goal package, the range resolver and its cache, the initial set, and
the goal id. Nothing is shared between runs, so independent problems may
be resolved concurrently with separate ``PlanResolver`` instances.

Three outcomes are distinguished:

- success: ``Resolution(feasible=True, actions=...)``;
- infeasible: ``Resolution(feasible=False, diagnostics=...)``;
- error: an exception from ``pkgplan.exceptions`` (malformed input and
  invalid references before solving, ``SolverError`` from the engine).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pkgplan.config import GOAL_NAME, GOAL_VERSION, SolverConfig
from pkgplan.core.repository.expressions import ConstraintKind
from pkgplan.core.repository.models import Problem, Repository
from pkgplan.core.resolution.expansion import ExpandedRepository, expand
from pkgplan.core.resolution.formula import Formula, build_formula
from pkgplan.core.resolution.goal import add_goal, synthesize_goal
from pkgplan.core.resolution.interpret import Action, ActionKind, interpret
from pkgplan.core.resolution.ranges import RangeResolver
from pkgplan.core.resolution.solver import MaxSATSolver, SolverAdapter

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Resolution: the output of planning
# ---------------------------------------------------------------------------


@dataclass
class Resolution:
    """Result of planning.

    Attributes:
        feasible: True if a valid final state exists.
        actions: Removals followed by installs. Empty when infeasible, and
            also empty when the initial state is already optimal.
        objective: Optimal objective value, or None when infeasible.
        diagnostics: Human-readable reasons for infeasibility.
    """

    feasible: bool
    actions: tuple[Action, ...] = ()
    objective: int | None = None
    diagnostics: list[str] = field(default_factory=list)

    @property
    def commands(self) -> list[str]:
        """Actions rendered as ``"+id"``/``"-id"`` strings."""
        return [str(a) for a in self.actions]

    @property
    def installs(self) -> list[str]:
        return [a.package_id for a in self.actions if a.kind is ActionKind.INSTALL]

    @property
    def removals(self) -> list[str]:
        return [a.package_id for a in self.actions if a.kind is ActionKind.REMOVE]


# ---------------------------------------------------------------------------
# ResolutionContext: per-run state
# ---------------------------------------------------------------------------


class ResolutionContext:
    """Everything one resolution run owns.

    Args:
        problem: The validated problem.
        goal_name: Name for the synthetic goal package.
        goal_version: Version for the synthetic goal package.
    """

    def __init__(
        self,
        problem: Problem,
        goal_name: str = GOAL_NAME,
        goal_version: str = GOAL_VERSION,
    ) -> None:
        goal = synthesize_goal(problem.constraints, name=goal_name, version=goal_version)
        self.problem = problem
        self.repository: Repository = add_goal(problem.repository, goal)
        self.resolver = RangeResolver(self.repository)
        self.initial = problem.initial
        self.goal_id = goal.id

    def expand(self) -> ExpandedRepository:
        return expand(self.repository, self.resolver)


@dataclass(frozen=True)
class CompiledProblem:
    """The intermediate artefacts of one run, before solving."""

    context: ResolutionContext
    expanded: ExpandedRepository
    formula: Formula


# ---------------------------------------------------------------------------
# PlanResolver
# ---------------------------------------------------------------------------


class PlanResolver:
    """Compute a minimal-cost plan for a ``Problem``.

    Args:
        problem: Repository, initial state, and goal constraints.
        config: Cost model and engine settings. Defaults to ``SolverConfig()``.
        solver: Engine override; defaults to a ``MaxSATSolver`` built from
            *config*.
    """

    def __init__(
        self,
        problem: Problem,
        config: SolverConfig | None = None,
        solver: SolverAdapter | None = None,
    ) -> None:
        self._problem = problem
        self._config = config or SolverConfig()
        self._solver = solver or MaxSATSolver(
            engine=self._config.engine, timeout=self._config.timeout
        )

    def compile(self) -> CompiledProblem:
        """Run every stage up to (not including) the solve call."""
        context = ResolutionContext(self._problem)
        expanded = context.expand()
        formula = build_formula(
            expanded,
            context.initial,
            context.goal_id,
            uninstall_cost=self._config.uninstall_cost,
        )
        return CompiledProblem(context=context, expanded=expanded, formula=formula)

    def resolve(self) -> Resolution:
        """Compile, solve, and interpret.

        Raises:
            FormulaError: If the formula cannot be encoded.
            SolverError: If the engine fails or times out.
        """
        compiled = self.compile()
        result = self._solver.solve(compiled.formula)

        if not result.optimal:
            diagnostics = diagnose(compiled.context, compiled.expanded)
            logger.warning("No valid configuration: %s", "; ".join(diagnostics))
            return Resolution(feasible=False, diagnostics=diagnostics)

        actions = interpret(result.assignment, compiled.context.initial, compiled.context.goal_id)
        logger.debug("Plan has %d actions, objective %s", len(actions), result.objective)
        return Resolution(feasible=True, actions=actions, objective=result.objective)


def resolve_plan(problem: Problem, config: SolverConfig | None = None) -> Resolution:
    """Convenience wrapper: ``PlanResolver(problem, config).resolve()``."""
    return PlanResolver(problem, config).resolve()


# ---------------------------------------------------------------------------
# Infeasibility diagnosis
# ---------------------------------------------------------------------------


def diagnose(context: ResolutionContext, expanded: ExpandedRepository) -> list[str]:
    """Explain, as far as cheaply possible, why no plan exists.

    Checks required ranges that match nothing, required ranges fully
    covered by forbidden ones, and required ranges whose every candidate
    has a dependency clause that matches nothing. Falls back to a generic
    message when none of these apply.
    """
    msgs: list[str] = []
    constraints = context.problem.constraints
    resolver = context.resolver

    forbidden: set[str] = set()
    for c in constraints:
        if c.kind is ConstraintKind.FORBID:
            forbidden |= resolver.resolve(c.expression)

    for c in constraints:
        if c.kind is not ConstraintKind.REQUIRE:
            continue
        expr = c.expression
        candidates = resolver.resolve(expr)
        versions = context.repository.versions(expr.name)

        if not versions:
            msgs.append(f"Required package {expr.name!r} is not in the repository")
            continue
        if not candidates:
            msgs.append(
                f"No version of {expr.name!r} satisfies {expr.raw!r} "
                f"(available: {', '.join(versions)})"
            )
            continue
        if candidates <= forbidden:
            msgs.append(f"Every package matching {str(c)!r} is also forbidden")
            continue

        dead = []
        for cand in sorted(candidates):
            pkg = context.repository[cand]
            for raw_clause, clause in zip(pkg.depends, expanded[cand].depends):
                if not clause:
                    dead.append(
                        f"{cand} requires one of "
                        f"[{', '.join(e.raw for e in raw_clause)}], none of which exists"
                    )
                    break
        if len(dead) == len(candidates):
            msgs.append(f"No candidate for {str(c)!r} is installable: " + "; ".join(dead))

    if not msgs:
        msgs.append(
            "No valid configuration exists "
            "(dependency and conflict constraints are jointly unsatisfiable)"
        )
    return msgs
