"""Loading repository, initial-state, and constraint documents.

Three documents describe a problem:

- **repository**: a list of package records::

      [{"name": "A", "version": "1", "size": 5,
        "depends": [["B>=2", "C"]], "conflicts": ["D<3"]}]

  ``depends`` and ``conflicts`` may be omitted or null.
- **initial**: a list of concrete ids, e.g. ``["A=1", "B=2"]``.
- **constraints**: a list of signed range expressions, e.g. ``["+A", "-B=2"]``.

Files ending in ``.yaml``/``.yml`` are read with PyYAML; anything else is
read as JSON. Every range expression is parsed here, so malformed input is
rejected before any resolution work starts.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from pkgplan.core.repository.expressions import (
    Constraint,
    RangeExpression,
    is_valid_token,
    parse_constraint,
    parse_package_id,
    parse_range,
)
from pkgplan.core.repository.models import Package, Problem, Repository
from pkgplan.exceptions import DocumentError, InvalidReferenceError

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = {".yaml", ".yml"}


def read_document(path: str | Path) -> Any:
    """Read and decode one JSON or YAML document.

    Raises:
        DocumentError: If the file cannot be read or decoded.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DocumentError(f"Cannot read {path}: {exc}") from exc

    try:
        if path.suffix.lower() in _YAML_SUFFIXES:
            return yaml.safe_load(raw)
        return json.loads(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise DocumentError(f"Cannot decode {path}: {exc}") from exc


def _require_list(data: Any, what: str) -> list[Any]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise DocumentError(f"{what} must be a list, got {type(data).__name__}")
    return data


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


def _parse_package(record: Any, index: int) -> Package:
    if not isinstance(record, dict):
        raise DocumentError(f"Package record #{index} must be a mapping")

    name = record.get("name")
    version = record.get("version")
    if not is_valid_token(name):
        raise DocumentError(f"Package record #{index} has invalid name {name!r}")
    if isinstance(version, int) and not isinstance(version, bool):
        version = str(version)
    if isinstance(version, float):
        raise DocumentError(
            f"Package record #{index} ({name}) has version {version!r}, which was read "
            "as a number; quote it to keep it exact (e.g. version: \"1.10\")"
        )
    if not is_valid_token(version):
        raise DocumentError(
            f"Package record #{index} ({name}) has invalid version {version!r}"
        )

    size = record.get("size", 0)
    if isinstance(size, bool) or not isinstance(size, int) or size < 0:
        raise DocumentError(
            f"Package {name}={version} has invalid size {size!r} "
            "(expected a non-negative integer)"
        )

    depends: list[tuple[RangeExpression, ...]] = []
    for clause in _require_list(record.get("depends"), f"depends of {name}={version}"):
        items = _require_list(clause, f"dependency clause of {name}={version}")
        depends.append(tuple(parse_range(item) for item in items))

    conflicts = tuple(
        parse_range(item)
        for item in _require_list(record.get("conflicts"), f"conflicts of {name}={version}")
    )

    return Package(
        name=name,
        version=version,
        size=size,
        depends=tuple(depends),
        conflicts=conflicts,
    )


def parse_repository(data: Any) -> Repository:
    """Build a ``Repository`` from a decoded repository document.

    Raises:
        DocumentError: If the document or a record has the wrong shape.
        ExpressionError: If a range expression is malformed.
        DuplicatePackageError: If two records share an id.
    """
    records = _require_list(data, "Repository document")
    repo = Repository(_parse_package(rec, i) for i, rec in enumerate(records))
    logger.debug("Loaded repository with %d packages", len(repo))
    return repo


def load_repository(path: str | Path) -> Repository:
    """Read a repository document from *path*."""
    return parse_repository(read_document(path))


# ---------------------------------------------------------------------------
# Initial state
# ---------------------------------------------------------------------------


def parse_initial(data: Any, repository: Repository) -> frozenset[str]:
    """Validate a decoded initial-state document against *repository*.

    Raises:
        DocumentError: If the document is not a list.
        ExpressionError: If an entry is not a ``name=version`` id.
        InvalidReferenceError: If an id is not in the repository.
    """
    initial: set[str] = set()
    for item in _require_list(data, "Initial document"):
        parse_package_id(item)
        if item not in repository:
            raise InvalidReferenceError(f"Initial package not in repository: {item}")
        initial.add(item)
    return frozenset(initial)


def load_initial(path: str | Path, repository: Repository) -> frozenset[str]:
    """Read an initial-state document from *path*."""
    return parse_initial(read_document(path), repository)


# ---------------------------------------------------------------------------
# Constraints
# ---------------------------------------------------------------------------


def parse_constraints(data: Any) -> tuple[Constraint, ...]:
    """Parse a decoded constraints document.

    Raises:
        DocumentError: If the document is not a list.
        ExpressionError: If a constraint is malformed.
    """
    return tuple(parse_constraint(item) for item in _require_list(data, "Constraints document"))


def load_constraints(path: str | Path) -> tuple[Constraint, ...]:
    """Read a constraints document from *path*."""
    return parse_constraints(read_document(path))


def load_problem(
    repository_path: str | Path,
    initial_path: str | Path,
    constraints_path: str | Path,
) -> Problem:
    """Read all three documents and assemble a ``Problem``."""
    repository = load_repository(repository_path)
    initial = load_initial(initial_path, repository)
    constraints = load_constraints(constraints_path)
    return Problem(repository=repository, initial=initial, constraints=constraints)
