"""Tests for pseudo-Boolean formula construction.

Validates constraint shapes for dependencies, conflicts, and the goal,
deduplication of repeated relations, the substitutive objective, and the
consistency checks that reject dangling ids.
"""

from __future__ import annotations

import pytest

from pkgplan.config import UNINSTALL_COST
from pkgplan.core.resolution import (
    Comparator,
    ConstraintOrigin,
    ExpandedPackage,
    ExpandedRepository,
    Term,
    build_formula,
)
from pkgplan.core.resolution.formula import linear
from pkgplan.exceptions import FormulaError

GOAL = "@goal=1"


def _make_pkg(
    pkg_id: str,
    size: int = 0,
    depends: list[set[str]] | None = None,
    conflicts: set[str] | None = None,
) -> ExpandedPackage:
    return ExpandedPackage(
        id=pkg_id,
        size=size,
        depends=tuple(frozenset(c) for c in depends or []),
        conflicts=frozenset(conflicts or ()),
    )


def _repo(*pkgs: ExpandedPackage) -> ExpandedRepository:
    return ExpandedRepository([*pkgs, _make_pkg(GOAL)])


def _of(formula, origin: ConstraintOrigin):
    return [c for c in formula.constraints if c.origin is origin]


class TestLinear:
    """Tests for the ``linear`` constructor."""

    def test_merges_and_sorts(self) -> None:
        """Repeated variables are summed and terms are ordered by name."""
        c = linear([(1, "B"), (1, "A"), (2, "B")], Comparator.LE, 3,
                   ConstraintOrigin.CONFLICT, "A")
        assert c.terms == (Term(1, "A"), Term(3, "B"))

    def test_drops_zero_coefficients(self) -> None:
        """Terms cancelling out are removed."""
        c = linear([(1, "A"), (-1, "A")], Comparator.GE, 0,
                   ConstraintOrigin.DEPENDENCY, "A")
        assert c.terms == ()

    def test_evaluate(self) -> None:
        """Missing variables count as 0."""
        c = linear([(1, "A"), (1, "B")], Comparator.LE, 1,
                   ConstraintOrigin.CONFLICT, "A")
        assert c.evaluate({"A": True})
        assert not c.evaluate({"A": True, "B": True})
        assert c.evaluate({})

    def test_str(self) -> None:
        """Rendering lists signed coefficients."""
        c = linear([(1, "B"), (-1, "A")], Comparator.GE, 0,
                   ConstraintOrigin.DEPENDENCY, "A")
        assert str(c) == "-1*[A] +1*[B] >= 0"


class TestConstraintShapes:
    """Tests for the constraints ``build_formula`` emits."""

    def test_dependency_constraint(self) -> None:
        """A clause {B, C} of A yields x_B + x_C - x_A >= 0."""
        formula = build_formula(
            _repo(_make_pkg("A=1", depends=[{"B=1", "C=1"}]),
                  _make_pkg("B=1"), _make_pkg("C=1")),
            [], GOAL,
        )
        (dep,) = _of(formula, ConstraintOrigin.DEPENDENCY)
        assert dep.comparator is Comparator.GE
        assert dep.bound == 0
        assert set(dep.terms) == {Term(-1, "A=1"), Term(1, "B=1"), Term(1, "C=1")}
        assert dep.owner == "A=1"

    def test_empty_clause_forbids_owner(self) -> None:
        """An unsatisfiable clause becomes -x_A >= 0."""
        formula = build_formula(_repo(_make_pkg("A=1", depends=[set()])), [], GOAL)
        (dep,) = _of(formula, ConstraintOrigin.DEPENDENCY)
        assert dep.terms == (Term(-1, "A=1"),)
        assert not dep.evaluate({"A=1": True})
        assert dep.evaluate({"A=1": False})

    def test_conflict_constraint(self) -> None:
        """A conflict yields x_A + x_B <= 1."""
        formula = build_formula(
            _repo(_make_pkg("A=1", conflicts={"B=1"}), _make_pkg("B=1")), [], GOAL
        )
        (con,) = _of(formula, ConstraintOrigin.CONFLICT)
        assert con.comparator is Comparator.LE
        assert con.bound == 1
        assert con.terms == (Term(1, "A=1"), Term(1, "B=1"))

    def test_self_conflict_forbids_package(self) -> None:
        """A package conflicting with itself yields 2 x_A <= 1."""
        formula = build_formula(_repo(_make_pkg("A=1", conflicts={"A=1"})), [], GOAL)
        (con,) = _of(formula, ConstraintOrigin.CONFLICT)
        assert con.terms == (Term(2, "A=1"),)
        assert not con.evaluate({"A=1": True})

    def test_self_dependency_is_trivial(self) -> None:
        """A package depending on itself adds a trivially true constraint."""
        formula = build_formula(_repo(_make_pkg("A=1", depends=[{"A=1"}])), [], GOAL)
        (dep,) = _of(formula, ConstraintOrigin.DEPENDENCY)
        assert dep.terms == ()
        assert dep.evaluate({"A=1": True})

    def test_goal_constraint(self) -> None:
        """Exactly one goal constraint x_goal >= 1 exists."""
        formula = build_formula(_repo(_make_pkg("A=1")), [], GOAL)
        (goal,) = _of(formula, ConstraintOrigin.GOAL)
        assert goal.terms == (Term(1, GOAL),)
        assert goal.comparator is Comparator.GE
        assert goal.bound == 1

    def test_one_variable_per_package(self) -> None:
        """Variables are the repository ids in order, goal included."""
        formula = build_formula(_repo(_make_pkg("A=1"), _make_pkg("B=1")), [], GOAL)
        assert formula.variables == ("A=1", "B=1", GOAL)


class TestDeduplication:
    """Tests for duplicate-relation handling."""

    def test_symmetric_conflict_emitted_once(self) -> None:
        """A-B declared on both sides yields one constraint."""
        formula = build_formula(
            _repo(_make_pkg("A=1", conflicts={"B=1"}), _make_pkg("B=1", conflicts={"A=1"})),
            [], GOAL,
        )
        assert len(_of(formula, ConstraintOrigin.CONFLICT)) == 1

    def test_repeated_clause_emitted_once(self) -> None:
        """Two identical clauses on one package yield one constraint."""
        formula = build_formula(
            _repo(_make_pkg("A=1", depends=[{"B=1"}, {"B=1"}]), _make_pkg("B=1")),
            [], GOAL,
        )
        assert len(_of(formula, ConstraintOrigin.DEPENDENCY)) == 1

    def test_same_clause_on_different_packages_kept(self) -> None:
        """Identical clauses owned by different packages are distinct constraints."""
        formula = build_formula(
            _repo(_make_pkg("A=1", depends=[{"C=1"}]),
                  _make_pkg("B=1", depends=[{"C=1"}]), _make_pkg("C=1")),
            [], GOAL,
        )
        assert len(_of(formula, ConstraintOrigin.DEPENDENCY)) == 2


class TestObjective:
    """Tests for the minimisation objective."""

    def test_sizes_for_uninstalled(self) -> None:
        """Packages not initially installed are weighted by size."""
        formula = build_formula(_repo(_make_pkg("A=1", size=5), _make_pkg("B=1", size=3)), [], GOAL)
        assert formula.objective == (Term(5, "A=1"), Term(3, "B=1"))

    def test_uninstall_cost_substituted(self) -> None:
        """Initially installed packages get the uninstall cost instead of their size."""
        formula = build_formula(
            _repo(_make_pkg("A=1", size=5), _make_pkg("B=1", size=3)), ["A=1"], GOAL
        )
        assert Term(UNINSTALL_COST, "A=1") in formula.objective
        assert all(t.coefficient != UNINSTALL_COST + 5 for t in formula.objective)

    def test_custom_uninstall_cost(self) -> None:
        """The substituted weight is configurable."""
        formula = build_formula(
            _repo(_make_pkg("A=1", size=5)), ["A=1"], GOAL, uninstall_cost=-7
        )
        assert formula.objective == (Term(-7, "A=1"),)

    def test_zero_weights_omitted(self) -> None:
        """Zero-size packages, like the goal, contribute no term."""
        formula = build_formula(_repo(_make_pkg("A=1", size=0)), [], GOAL)
        assert formula.objective == ()

    def test_tiebreak_counts_changes(self) -> None:
        """New packages weigh +1, installed ones -1; the goal is left out."""
        formula = build_formula(
            _repo(_make_pkg("A=1", size=5), _make_pkg("B=1")), ["A=1"], GOAL
        )
        assert formula.tiebreak == (Term(-1, "A=1"), Term(1, "B=1"))

    def test_objective_value(self) -> None:
        """The objective sums the weights of installed variables."""
        formula = build_formula(
            _repo(_make_pkg("A=1", size=5), _make_pkg("B=1", size=3)), ["B=1"], GOAL
        )
        assert formula.objective_value({"A=1": True, "B=1": True}) == 5 + UNINSTALL_COST
        assert formula.objective_value({"A=1": True}) == 5

    def test_violated(self) -> None:
        """``violated`` lists broken constraints."""
        formula = build_formula(
            _repo(_make_pkg("A=1", conflicts={"B=1"}), _make_pkg("B=1")), [], GOAL
        )
        broken = formula.violated({"A=1": True, "B=1": True})
        assert {c.origin for c in broken} == {ConstraintOrigin.CONFLICT, ConstraintOrigin.GOAL}


class TestConsistencyChecks:
    """Tests for ``FormulaError`` conditions."""

    def test_missing_goal(self) -> None:
        """The goal id must be in the repository."""
        with pytest.raises(FormulaError, match="Goal"):
            build_formula(ExpandedRepository([_make_pkg("A=1")]), [], GOAL)

    def test_unknown_initial(self) -> None:
        """Every initial id must be in the repository."""
        with pytest.raises(FormulaError, match="Z=1"):
            build_formula(_repo(_make_pkg("A=1")), ["Z=1"], GOAL)

    def test_dangling_dependency(self) -> None:
        """A clause naming an unknown id is rejected."""
        with pytest.raises(FormulaError, match="Z=1"):
            build_formula(_repo(_make_pkg("A=1", depends=[{"Z=1"}])), [], GOAL)

    def test_dangling_conflict(self) -> None:
        """A conflict naming an unknown id is rejected."""
        with pytest.raises(FormulaError, match="Z=1"):
            build_formula(_repo(_make_pkg("A=1", conflicts={"Z=1"})), [], GOAL)
