"""Repository expansion: rewriting every range expression into concrete ids.

After expansion each dependency clause is a set of ids of which at least
one must be installed, and each conflict set lists ids that must not be
installed next to the owning package. A clause ``[e1, e2]`` becomes
``resolve(e1) | resolve(e2)``: a disjunction of disjunctions flattens into
a single disjunction over concrete ids.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator

from pkgplan.core.repository.models import Package, Repository
from pkgplan.core.resolution.ranges import RangeResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExpandedPackage:
    """A package whose relations reference concrete ids only.

    Attributes:
        id: The concrete id ``name=version``.
        size: Install cost.
        depends: One frozenset per dependency clause. An empty frozenset is
            a clause nothing can satisfy.
        conflicts: Ids that may not coexist with this package.
    """

    id: str
    size: int
    depends: tuple[frozenset[str], ...] = ()
    conflicts: frozenset[str] = frozenset()


class ExpandedRepository:
    """An ordered, read-only mapping from id to ``ExpandedPackage``."""

    def __init__(self, packages: Iterable[ExpandedPackage]) -> None:
        self._packages: dict[str, ExpandedPackage] = {p.id: p for p in packages}

    def __len__(self) -> int:
        return len(self._packages)

    def __iter__(self) -> Iterator[ExpandedPackage]:
        return iter(self._packages.values())

    def __contains__(self, pkg_id: object) -> bool:
        return pkg_id in self._packages

    def __getitem__(self, pkg_id: str) -> ExpandedPackage:
        return self._packages[pkg_id]

    @property
    def ids(self) -> list[str]:
        """All ids in repository order."""
        return list(self._packages)


def expand_package(pkg: Package, resolver: RangeResolver) -> ExpandedPackage:
    """Resolve every dependency clause and conflict of one package."""
    return ExpandedPackage(
        id=pkg.id,
        size=pkg.size,
        depends=tuple(resolver.resolve_all(clause) for clause in pkg.depends),
        conflicts=resolver.resolve_all(pkg.conflicts),
    )


def expand(repository: Repository, resolver: RangeResolver) -> ExpandedRepository:
    """Expand every package of *repository* using *resolver*.

    The repository is only read; the result is a new structure.
    """
    expanded = ExpandedRepository(expand_package(pkg, resolver) for pkg in repository)
    logger.debug(
        "Expanded %d packages (%d distinct ranges, %d cache hits)",
        len(expanded), resolver.cache_size, resolver.hits,
    )
    return expanded
