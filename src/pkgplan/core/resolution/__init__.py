"""Constraint compilation and plan computation.

Pipeline stages, leaves first:

- ``ranges``: range expression -> set of concrete ids (per-run cache)
- ``expansion``: rewrite every relation in terms of concrete ids
- ``goal``: encode user constraints as a synthetic goal package
- ``formula``: pseudo-Boolean constraints and minimisation objective
- ``solver``: python-sat MaxSAT adapter
- ``interpret``: assignment -> ordered install/remove actions
- ``pipeline``: the end-to-end ``PlanResolver``
- ``evaluate``: independent replay, validation, and pricing of plans

All public names are re-exported here.
"""

from pkgplan.core.resolution.evaluate import (
    PlanReport,
    apply_plan,
    check_plan,
    constraint_violations,
    plan_cost,
    state_violations,
)
from pkgplan.core.resolution.expansion import (
    ExpandedPackage,
    ExpandedRepository,
    expand,
)
from pkgplan.core.resolution.formula import (
    Comparator,
    ConstraintOrigin,
    Formula,
    LinearConstraint,
    Term,
    build_formula,
)
from pkgplan.core.resolution.goal import add_goal, synthesize_goal
from pkgplan.core.resolution.interpret import (
    Action,
    ActionKind,
    interpret,
    parse_action,
)
from pkgplan.core.resolution.pipeline import (
    CompiledProblem,
    PlanResolver,
    Resolution,
    ResolutionContext,
    diagnose,
    resolve_plan,
)
from pkgplan.core.resolution.ranges import RangeResolver
from pkgplan.core.resolution.solver import (
    MaxSATSolver,
    SolveResult,
    SolveStatus,
    SolverAdapter,
)

__all__ = [
    "Action",
    "ActionKind",
    "Comparator",
    "CompiledProblem",
    "ConstraintOrigin",
    "ExpandedPackage",
    "ExpandedRepository",
    "Formula",
    "LinearConstraint",
    "MaxSATSolver",
    "PlanReport",
    "PlanResolver",
    "RangeResolver",
    "Resolution",
    "ResolutionContext",
    "SolveResult",
    "SolveStatus",
    "SolverAdapter",
    "Term",
    "add_goal",
    "apply_plan",
    "build_formula",
    "check_plan",
    "constraint_violations",
    "diagnose",
    "expand",
    "interpret",
    "parse_action",
    "plan_cost",
    "resolve_plan",
    "state_violations",
    "synthesize_goal",
]
