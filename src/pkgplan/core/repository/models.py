"""Repository data model: packages, the repository index, and problems.

A ``Repository`` maps concrete ids (``name=version``) to ``Package`` records
and keeps a secondary index from package name to its versions, which the
range resolver uses to enumerate candidates. Both are fixed at construction
time; ``with_package`` returns a new repository rather than mutating.

The dependency graph may contain cycles (A depends on B depends on A).
Nothing here traverses the graph, so cycles need no special handling.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator

from pkgplan.core.repository.expressions import (
    Constraint,
    RangeExpression,
    package_id,
)
from pkgplan.exceptions import (
    DuplicatePackageError,
    InvalidPackageError,
    InvalidReferenceError,
)


# ---------------------------------------------------------------------------
# Package
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Package:
    """A single versioned package as declared in the repository.

    Attributes:
        name: Package name.
        version: Opaque version token, ordered as a plain string.
        size: Non-negative install cost.
        depends: Dependency clauses. Each clause is satisfied when at least
            one of its range expressions matches an installed package.
        conflicts: Range expressions that must not match any package
            installed alongside this one.
    """

    name: str
    version: str
    size: int = 0
    depends: tuple[tuple[RangeExpression, ...], ...] = ()
    conflicts: tuple[RangeExpression, ...] = ()

    def __post_init__(self) -> None:
        if self.size < 0:
            raise InvalidPackageError(f"Package {self.id!r} has negative size {self.size}")

    @property
    def id(self) -> str:
        """The concrete id ``name=version``."""
        return package_id(self.name, self.version)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class Repository:
    """An immutable collection of packages indexed by id and by name.

    Iteration yields packages in the order they were supplied; the
    per-name version lists follow the same order.
    """

    def __init__(self, packages: Iterable[Package] = ()) -> None:
        self._packages: dict[str, Package] = {}
        self._versions: dict[str, list[str]] = {}
        for pkg in packages:
            if pkg.id in self._packages:
                raise DuplicatePackageError(f"Package repeated in repository: {pkg.id}")
            self._packages[pkg.id] = pkg
            self._versions.setdefault(pkg.name, []).append(pkg.version)

    def __len__(self) -> int:
        return len(self._packages)

    def __iter__(self) -> Iterator[Package]:
        return iter(self._packages.values())

    def __contains__(self, pkg_id: object) -> bool:
        return pkg_id in self._packages

    def __repr__(self) -> str:
        return f"Repository({len(self)} packages)"

    @property
    def ids(self) -> list[str]:
        """All package ids in repository order."""
        return list(self._packages)

    @property
    def names(self) -> set[str]:
        """The set of distinct package names."""
        return set(self._versions)

    def get(self, pkg_id: str) -> Package | None:
        """Return the package with this id, or None if absent."""
        return self._packages.get(pkg_id)

    def __getitem__(self, pkg_id: str) -> Package:
        try:
            return self._packages[pkg_id]
        except KeyError:
            raise InvalidReferenceError(
                f"Package not in repository: {pkg_id}"
            ) from None

    def versions(self, name: str) -> list[str]:
        """Return every version of *name* in repository order (empty if unknown)."""
        return list(self._versions.get(name, ()))

    def with_package(self, pkg: Package) -> Repository:
        """Return a new repository containing every package plus *pkg*.

        Raises:
            DuplicatePackageError: If *pkg*'s id is already present.
        """
        return Repository([*self._packages.values(), pkg])


# ---------------------------------------------------------------------------
# Problem
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Problem:
    """A complete planning problem.

    Attributes:
        repository: Every package that may be installed.
        initial: Ids installed before planning. Each must exist in
            ``repository``.
        constraints: User goal constraints, in the order given.
    """

    repository: Repository
    initial: frozenset[str] = field(default_factory=frozenset)
    constraints: tuple[Constraint, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "initial", frozenset(self.initial))
        object.__setattr__(self, "constraints", tuple(self.constraints))
        missing = sorted(i for i in self.initial if i not in self.repository)
        if missing:
            raise InvalidReferenceError(
                f"Initial state references unknown packages: {', '.join(missing)}"
            )
