"""Range resolution: turning range expressions into concrete package ids.

A ``RangeResolver`` belongs to exactly one resolution run. It memoises by
the literal expression text, because the same literal (``"libc>=2"``)
typically appears in the clauses of many packages. The cache is an
instance attribute, never module state, so independent runs cannot see
each other's entries.
"""

from __future__ import annotations

import logging

from pkgplan.core.repository.expressions import RangeExpression, package_id
from pkgplan.core.repository.models import Repository

logger = logging.getLogger(__name__)


class RangeResolver:
    """Memoising resolver from ``RangeExpression`` to sets of ids.

    Args:
        repository: The repository whose name -> versions index is searched.
    """

    def __init__(self, repository: Repository) -> None:
        self._repository = repository
        self._cache: dict[str, frozenset[str]] = {}
        self.hits = 0

    @property
    def cache_size(self) -> int:
        """Number of distinct literals resolved so far."""
        return len(self._cache)

    def resolve(self, expr: RangeExpression) -> frozenset[str]:
        """Return the ids of every package version that *expr* denotes.

        An unknown package name yields the empty set. That is not an error:
        a dependency clause made only of unknown names simply becomes
        unsatisfiable.
        """
        cached = self._cache.get(expr.raw)
        if cached is not None:
            self.hits += 1
            return cached

        ids = frozenset(
            package_id(expr.name, version)
            for version in self._repository.versions(expr.name)
            if expr.operator.holds(version, expr.version)
        )
        if not ids:
            logger.debug("Range %r matches no package", expr.raw)
        self._cache[expr.raw] = ids
        return ids

    def resolve_all(self, exprs: tuple[RangeExpression, ...]) -> frozenset[str]:
        """Return the union of ``resolve(e)`` over *exprs*."""
        result: set[str] = set()
        for expr in exprs:
            result |= self.resolve(expr)
        return frozenset(result)
