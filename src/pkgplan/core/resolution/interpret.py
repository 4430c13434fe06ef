"""Turning an optimal assignment into an ordered list of actions.

The plan is the difference between the assignment and the initial state:

- ``Remove(id)`` for every initial id assigned 0;
- ``Install(id)`` for every non-initial id assigned 1, except the goal.

Removals are listed before installs. That grouping is a presentation
convention, not a correctness requirement: the final state is the same in
any order. Within each group actions follow the assignment's iteration
order, which is repository order.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum

from pkgplan.core.repository.expressions import parse_package_id
from pkgplan.exceptions import ExpressionError


class ActionKind(Enum):
    INSTALL = "+"
    REMOVE = "-"


@dataclass(frozen=True)
class Action:
    """A signed package reference: install or remove one concrete id."""

    kind: ActionKind
    package_id: str

    @classmethod
    def install(cls, package_id: str) -> Action:
        return cls(ActionKind.INSTALL, package_id)

    @classmethod
    def remove(cls, package_id: str) -> Action:
        return cls(ActionKind.REMOVE, package_id)

    def __str__(self) -> str:
        return f"{self.kind.value}{self.package_id}"


def parse_action(text: str) -> Action:
    """Parse a command such as ``"+A=1"`` or ``"-B=2"``.

    Raises:
        ExpressionError: If the sign or the id is malformed.
    """
    if not isinstance(text, str) or not text:
        raise ExpressionError(f"Malformed command: {text!r}")
    try:
        kind = ActionKind(text[0])
    except ValueError:
        raise ExpressionError(f"Command must start with '+' or '-': {text!r}") from None
    parse_package_id(text[1:])
    return Action(kind, text[1:])


def interpret(
    assignment: Mapping[str, bool],
    initial: Iterable[str],
    goal_id: str,
) -> tuple[Action, ...]:
    """Diff *assignment* against *initial*; removals first, then installs."""
    initial = frozenset(initial)
    removals: list[Action] = []
    installs: list[Action] = []
    for pkg_id, installed in assignment.items():
        if pkg_id in initial:
            if not installed:
                removals.append(Action.remove(pkg_id))
        elif installed and pkg_id != goal_id:
            installs.append(Action.install(pkg_id))
    return (*removals, *installs)
