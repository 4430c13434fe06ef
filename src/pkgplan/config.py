"""Cost-model constants and solver configuration.

Configuration is passed explicitly: a ``SolverConfig`` is built once (by the
CLI or by library callers) and threaded through a single resolution run.
Nothing here is mutable process-wide state.
"""

from __future__ import annotations

from dataclasses import dataclass

from pysat.solvers import SolverNames

from pkgplan.exceptions import ConfigError

# Objective coefficient substituted (not added) for the size of every
# initially installed package. Keeping such a package installed lowers the
# minimised sum by a million, which dominates any realistic install size.
UNINSTALL_COST = -1_000_000

# Cost charged per removal when pricing a finished plan.
REMOVAL_PENALTY = 1_000_000

# "@" is outside the package-name alphabet, so the goal id cannot collide
# with any package loaded from a document.
GOAL_NAME = "@goal"
GOAL_VERSION = "1"
GOAL_ID = f"{GOAL_NAME}={GOAL_VERSION}"

DEFAULT_ENGINE = "g3"

# Every oracle alias python-sat accepts, e.g. "g3", "glucose3", "cd15".
KNOWN_ENGINES = frozenset(
    alias
    for attr, aliases in vars(SolverNames).items()
    if not attr.startswith("_")
    for alias in aliases
)


@dataclass(frozen=True)
class SolverConfig:
    """Settings for one resolution run.

    Attributes:
        uninstall_cost: Objective weight used for initially installed
            packages in place of their size.
        timeout: Wall-clock limit for the solve call in seconds, or None
            for no limit.
        engine: python-sat solver name backing the optimiser (e.g. "g3",
            "cadical153", "m22").
    """

    uninstall_cost: int = UNINSTALL_COST
    timeout: float | None = None
    engine: str = DEFAULT_ENGINE

    def __post_init__(self) -> None:
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout!r}")
        if self.engine not in KNOWN_ENGINES:
            raise ConfigError(
                f"Unknown solver engine {self.engine!r}; "
                f"choose one of: {', '.join(sorted(KNOWN_ENGINES))}"
            )
