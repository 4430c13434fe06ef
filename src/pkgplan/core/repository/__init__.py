"""Repository model: range expressions, packages, and document loading.

All public names are re-exported here so callers can write
``from pkgplan.core.repository import Repository``.
"""

from pkgplan.core.repository.expressions import (
    Constraint,
    ConstraintKind,
    Operator,
    RangeExpression,
    package_id,
    parse_constraint,
    parse_package_id,
    parse_range,
)
from pkgplan.core.repository.loader import (
    load_constraints,
    load_initial,
    load_problem,
    load_repository,
    parse_constraints,
    parse_initial,
    parse_repository,
)
from pkgplan.core.repository.models import Package, Problem, Repository

__all__ = [
    "Constraint",
    "ConstraintKind",
    "Operator",
    "Package",
    "Problem",
    "RangeExpression",
    "Repository",
    "load_constraints",
    "load_initial",
    "load_problem",
    "load_repository",
    "package_id",
    "parse_constraint",
    "parse_constraints",
    "parse_initial",
    "parse_package_id",
    "parse_range",
    "parse_repository",
]
