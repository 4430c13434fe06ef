"""Range expressions, goal constraints, and package-id parsing.

A range expression names a package and optionally bounds its version::

    A          any version of A
    A=1.0      exactly version 1.0
    A<2        every version ordered before "2"
    A>=1.5     every version ordered at or after "1.5"

Versions are opaque tokens compared with plain string ordering, so ``"9"``
sorts after ``"10"``. No numeric or SemVer interpretation is applied.

The operator is decoded exactly once, at parse time, into an ``Operator``
member that carries its own comparison. Resolution never looks at the raw
operator text again.
"""

from __future__ import annotations

import operator as _op
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from pkgplan.exceptions import ExpressionError

# Alphabet shared by package names and versions.
_TOKEN = r"[.+a-zA-Z0-9-]+"

_RANGE_RE = re.compile(
    rf"(?P<name>{_TOKEN})(?:(?P<op>[<>=]+)(?P<version>{_TOKEN})?)?"
)
_ID_RE = re.compile(rf"(?P<name>{_TOKEN})=(?P<version>{_TOKEN})")


# ---------------------------------------------------------------------------
# Operator: exhaustive comparison variant
# ---------------------------------------------------------------------------


class Operator(Enum):
    """Comparison operator of a range expression.

    Each member's value is its textual symbol; ``ANY`` has no symbol and
    matches every version.
    """

    ANY = ""
    EQ = "="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="

    @property
    def symbol(self) -> str:
        return self.value

    def holds(self, version: str, bound: str | None) -> bool:
        """Return True if ``version <op> bound`` under string ordering."""
        if self is Operator.ANY:
            return True
        return _COMPARATORS[self](version, bound)


_COMPARATORS: dict[Operator, Callable[[str, str | None], bool]] = {
    Operator.EQ: _op.eq,
    Operator.LT: _op.lt,
    Operator.LE: _op.le,
    Operator.GT: _op.gt,
    Operator.GE: _op.ge,
}

_SYMBOLS: dict[str, Operator] = {
    member.symbol: member for member in Operator if member is not Operator.ANY
}


# ---------------------------------------------------------------------------
# RangeExpression
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RangeExpression:
    """A package name with an optional version bound.

    Attributes:
        name: Package name the expression refers to.
        operator: Parsed comparison operator (``Operator.ANY`` if absent).
        version: Bound to compare against, or None for ``Operator.ANY``.
        raw: The literal text as authored; used as the memoisation key
            during resolution.
    """

    name: str
    operator: Operator = Operator.ANY
    version: str | None = None
    raw: str = ""

    def __post_init__(self) -> None:
        if (self.operator is Operator.ANY) != (self.version is None):
            raise ExpressionError(
                f"Operator {self.operator.name} is inconsistent with "
                f"version {self.version!r}"
            )
        if not self.raw:
            object.__setattr__(
                self, "raw", f"{self.name}{self.operator.symbol}{self.version or ''}"
            )

    def matches(self, name: str, version: str) -> bool:
        """Return True if the package ``name=version`` lies in this range."""
        return name == self.name and self.operator.holds(version, self.version)

    def __str__(self) -> str:
        return self.raw


def parse_range(text: str) -> RangeExpression:
    """Parse a range expression such as ``"A>=2.0"`` or ``"A"``.

    Args:
        text: The expression text. Surrounding whitespace is not allowed.

    Returns:
        The parsed ``RangeExpression``.

    Raises:
        ExpressionError: If the text is not a valid range expression.
    """
    if not isinstance(text, str):
        raise ExpressionError(f"Range expression must be a string, got {text!r}")
    m = _RANGE_RE.fullmatch(text)
    if not m:
        raise ExpressionError(f"Malformed range expression: {text!r}")

    symbol = m.group("op")
    if symbol is None:
        return RangeExpression(name=m.group("name"), raw=text)

    op = _SYMBOLS.get(symbol)
    if op is None:
        raise ExpressionError(f"Unknown operator {symbol!r} in {text!r}")
    version = m.group("version")
    if version is None:
        raise ExpressionError(f"Missing version after {symbol!r} in {text!r}")
    return RangeExpression(name=m.group("name"), operator=op, version=version, raw=text)


# ---------------------------------------------------------------------------
# Goal constraints
# ---------------------------------------------------------------------------


class ConstraintKind(Enum):
    """Polarity of a user goal constraint."""

    REQUIRE = "+"
    FORBID = "-"


@dataclass(frozen=True)
class Constraint:
    """A signed range expression stated by the user.

    ``REQUIRE`` means at least one matching package must end up installed;
    ``FORBID`` means no matching package may end up installed.
    """

    kind: ConstraintKind
    expression: RangeExpression

    def __str__(self) -> str:
        return f"{self.kind.value}{self.expression}"


def parse_constraint(text: str) -> Constraint:
    """Parse a ``+``/``-`` prefixed constraint such as ``"+A>=2"``.

    Raises:
        ExpressionError: If the prefix is missing or the range is malformed.
    """
    if not isinstance(text, str) or not text:
        raise ExpressionError(f"Malformed constraint: {text!r}")
    try:
        kind = ConstraintKind(text[0])
    except ValueError:
        raise ExpressionError(
            f"Constraint must start with '+' or '-': {text!r}"
        ) from None
    return Constraint(kind=kind, expression=parse_range(text[1:]))


# ---------------------------------------------------------------------------
# Package ids
# ---------------------------------------------------------------------------


def package_id(name: str, version: str) -> str:
    """Build the concrete id ``name=version``."""
    return f"{name}={version}"


def parse_package_id(text: str) -> tuple[str, str]:
    """Split a concrete id ``name=version`` into its two parts.

    Raises:
        ExpressionError: If the text is not a well-formed id.
    """
    if not isinstance(text, str):
        raise ExpressionError(f"Package id must be a string, got {text!r}")
    m = _ID_RE.fullmatch(text)
    if not m:
        raise ExpressionError(f"Malformed package id: {text!r}")
    return m.group("name"), m.group("version")


def is_valid_token(text: str) -> bool:
    """Return True if *text* is usable as a package name or version."""
    return isinstance(text, str) and re.fullmatch(_TOKEN, text) is not None
