"""Tests for loading repository, initial, and constraint documents.

Covers JSON and YAML files, optional ``depends``/``conflicts``, and the
error raised for every kind of malformed document.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from pkgplan.core.repository import (
    ConstraintKind,
    Operator,
    load_problem,
    load_repository,
    parse_constraints,
    parse_initial,
    parse_repository,
)
from pkgplan.exceptions import (
    DocumentError,
    DuplicatePackageError,
    ExpressionError,
    InvalidReferenceError,
)

_REPO_DOC = [
    {"name": "A", "version": "1", "size": 5, "depends": [["B>=2", "C"]], "conflicts": ["D<3"]},
    {"name": "B", "version": "2", "size": 1},
    {"name": "C", "version": "1", "size": 10, "depends": None, "conflicts": None},
]


class TestParseRepository:
    """Tests for ``parse_repository``."""

    def test_packages_and_relations(self) -> None:
        """Records become packages with parsed range expressions."""
        repo = parse_repository(_REPO_DOC)
        a = repo["A=1"]
        assert a.size == 5
        assert [[e.raw for e in clause] for clause in a.depends] == [["B>=2", "C"]]
        assert a.depends[0][0].operator is Operator.GE
        assert [e.raw for e in a.conflicts] == ["D<3"]

    def test_missing_or_null_relations_are_empty(self) -> None:
        """Absent and null depends/conflicts are treated as empty."""
        repo = parse_repository(_REPO_DOC)
        assert repo["B=2"].depends == ()
        assert repo["C=1"].conflicts == ()

    def test_integer_version_is_stringified(self) -> None:
        """A bare integer version (common in YAML) is accepted as text."""
        repo = parse_repository([{"name": "A", "version": 2, "size": 0}])
        assert "A=2" in repo

    @pytest.mark.parametrize(
        "doc",
        [
            {"name": "A"},
            ["A=1"],
            [{"version": "1", "size": 1}],
            [{"name": "A", "size": 1}],
            [{"name": "A b", "version": "1", "size": 1}],
            [{"name": "A", "version": 1.5, "size": 1}],
            [{"name": "A", "version": "1", "size": -1}],
            [{"name": "A", "version": "1", "size": "5"}],
            [{"name": "A", "version": "1", "size": True}],
            [{"name": "A", "version": "1", "size": 1, "depends": ["B"]}],
            [{"name": "A", "version": "1", "size": 1, "conflicts": "B"}],
        ],
    )
    def test_malformed_documents_rejected(self, doc: object) -> None:
        """Wrongly shaped documents raise DocumentError."""
        with pytest.raises(DocumentError):
            parse_repository(doc)

    def test_malformed_expression_rejected(self) -> None:
        """A bad range expression in a clause raises ExpressionError."""
        with pytest.raises(ExpressionError):
            parse_repository([{"name": "A", "version": "1", "size": 1, "depends": [["B==1"]]}])

    def test_duplicate_rejected(self) -> None:
        """A repeated id raises DuplicatePackageError."""
        doc = [{"name": "A", "version": "1", "size": 1}] * 2
        with pytest.raises(DuplicatePackageError):
            parse_repository(doc)


class TestParseInitialAndConstraints:
    """Tests for ``parse_initial`` and ``parse_constraints``."""

    def test_initial_ids(self) -> None:
        """Known ids are accepted."""
        repo = parse_repository(_REPO_DOC)
        assert parse_initial(["A=1", "B=2"], repo) == frozenset({"A=1", "B=2"})

    def test_initial_unknown_id(self) -> None:
        """An id missing from the repository raises InvalidReferenceError."""
        repo = parse_repository(_REPO_DOC)
        with pytest.raises(InvalidReferenceError):
            parse_initial(["A=2"], repo)

    def test_initial_malformed_id(self) -> None:
        """A range expression is not a valid initial entry."""
        repo = parse_repository(_REPO_DOC)
        with pytest.raises(ExpressionError):
            parse_initial(["A>=1"], repo)

    def test_constraints(self) -> None:
        """Signed expressions are parsed in order."""
        constraints = parse_constraints(["+A", "-B=2"])
        assert [c.kind for c in constraints] == [ConstraintKind.REQUIRE, ConstraintKind.FORBID]
        assert constraints[1].expression.version == "2"

    def test_constraints_must_be_list(self) -> None:
        """A non-list constraints document raises DocumentError."""
        with pytest.raises(DocumentError):
            parse_constraints("+A")


class TestLoadFiles:
    """Tests for reading documents from disk."""

    def test_load_problem_json(self, tmp_path: Path) -> None:
        """Three JSON files assemble into a Problem."""
        (tmp_path / "repo.json").write_text(json.dumps(_REPO_DOC))
        (tmp_path / "initial.json").write_text(json.dumps(["B=2"]))
        (tmp_path / "constraints.json").write_text(json.dumps(["+A"]))
        problem = load_problem(
            tmp_path / "repo.json", tmp_path / "initial.json", tmp_path / "constraints.json"
        )
        assert len(problem.repository) == 3
        assert problem.initial == frozenset({"B=2"})
        assert str(problem.constraints[0]) == "+A"

    def test_load_repository_yaml(self, tmp_path: Path) -> None:
        """YAML documents are read with PyYAML."""
        path = tmp_path / "repo.yaml"
        path.write_text(
            "- name: A\n"
            "  version: '1.0'\n"
            "  size: 3\n"
            "  depends:\n"
            "    - [B]\n"
            "- name: B\n"
            "  version: '2'\n"
            "  size: 1\n"
        )
        repo = load_repository(path)
        assert repo.ids == ["A=1.0", "B=2"]

    def test_unquoted_yaml_float_version(self, tmp_path: Path) -> None:
        """An unquoted ``1.10`` reaches us as 1.1, so it is rejected with a quoting hint."""
        path = tmp_path / "repo.yaml"
        path.write_text("- {name: A, version: 1.10, size: 1}\n")
        with pytest.raises(DocumentError, match="read as a number; quote it"):
            load_repository(path)

    def test_unquoted_yaml_integer_version(self, tmp_path: Path) -> None:
        """Unquoted integer versions need no quoting."""
        path = tmp_path / "repo.yaml"
        path.write_text("- {name: A, version: 7, size: 1}\n")
        assert load_repository(path).ids == ["A=7"]

    def test_missing_file(self, tmp_path: Path) -> None:
        """An unreadable file raises DocumentError."""
        with pytest.raises(DocumentError):
            load_repository(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        """A syntax error raises DocumentError chained to the decoder error."""
        path = tmp_path / "repo.json"
        path.write_text("[{")
        with pytest.raises(DocumentError) as info:
            load_repository(path)
        assert isinstance(info.value.__cause__, json.JSONDecodeError)
