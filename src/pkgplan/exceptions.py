"""pkgplan exception hierarchy.

All public exceptions inherit from PkgPlanError, giving callers a single
base class to catch when they want to handle any pkgplan-specific failure
without swallowing unrelated errors.

A problem with no valid configuration is not an error: it is reported
through ``Resolution.feasible``.
"""


class PkgPlanError(Exception):
    """Base exception for all pkgplan errors."""


class ParseError(PkgPlanError):
    """Raised when textual input cannot be parsed."""


class ExpressionError(ParseError):
    """Raised when a range expression, constraint, or package id is malformed.

    Covers unknown operators (``==``, ``=>``), empty names, a missing
    version after an operator, characters outside the name/version
    alphabet, and constraints without a ``+``/``-`` prefix.
    """


class DocumentError(ParseError):
    """Raised when an input document is unreadable or has the wrong shape.

    Covers file I/O failures, JSON/YAML syntax errors, non-list documents,
    package records missing ``name``/``version``, and negative or
    non-integer sizes.
    """


class InvalidReferenceError(PkgPlanError):
    """Raised when a concrete package id does not exist in the repository.

    Typically an initial-state id that the repository does not define.
    """


class DuplicatePackageError(PkgPlanError):
    """Raised when two packages in one repository share the same id."""


class ReservedNameError(PkgPlanError):
    """Raised when the synthetic goal package id is already taken."""


class ConfigError(PkgPlanError):
    """Raised when a ``SolverConfig`` holds an unusable setting.

    Covers non-positive timeouts and engine names python-sat does not know.
    """


class InvalidPackageError(PkgPlanError):
    """Raised when a ``Package`` is constructed with invalid fields."""


class FormulaError(PkgPlanError):
    """Raised when a formula cannot be handed to the solving engine.

    Covers constraints over undeclared variables and coefficient shapes
    the engine encoding does not support.
    """


class PlanError(PkgPlanError):
    """Raised when an action sequence cannot be replayed.

    Covers installing an already-installed package and removing a package
    that is not installed.
    """


class SolverError(PkgPlanError):
    """Raised when the external solving engine fails.

    The original engine exception is always chained as ``__cause__``.
    Solving is deterministic, so failures are never retried.
    """


class SolverTimeoutError(SolverError):
    """Raised when the solving engine exceeds the configured time limit."""
