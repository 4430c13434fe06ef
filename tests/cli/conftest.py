"""Shared fixtures for CLI tests.

Provides document sets for the canonical planning situations: a plain
install, a conflict that forces a removal, and contradictory goals.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterator

import pytest
from click.testing import CliRunner
from rich.logging import RichHandler


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Undo the root-logger changes made by ``pkgplan -v``."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def install_docs(write_documents: Callable[..., list[str]]) -> list[str]:
    """A single package A=1 of size 5, required by the goal."""
    return write_documents(
        [{"name": "A", "version": "1", "size": 5}],
        constraints=["+A=1"],
    )


@pytest.fixture
def conflict_docs(write_documents: Callable[..., list[str]]) -> list[str]:
    """A conflicts with the installed B; the goal requires A."""
    return write_documents(
        [
            {"name": "A", "version": "1", "size": 5, "conflicts": ["B"]},
            {"name": "B", "version": "1", "size": 2},
        ],
        initial=["B=1"],
        constraints=["+A"],
    )


@pytest.fixture
def infeasible_docs(write_documents: Callable[..., list[str]]) -> list[str]:
    """The goal both requires and forbids A."""
    return write_documents(
        [{"name": "A", "version": "1", "size": 1}],
        constraints=["+A", "-A"],
    )


@pytest.fixture
def yaml_docs(tmp_path: Path) -> list[str]:
    """The conflict situation written as YAML documents."""
    repo = tmp_path / "repository.yaml"
    repo.write_text(
        "- name: A\n"
        "  version: '1'\n"
        "  size: 5\n"
        "  conflicts: [B]\n"
        "- name: B\n"
        "  version: '1'\n"
        "  size: 2\n"
    )
    initial = tmp_path / "initial.yaml"
    initial.write_text("- B=1\n")
    constraints = tmp_path / "constraints.yml"
    constraints.write_text("- +A\n")
    return [str(repo), str(initial), str(constraints)]
