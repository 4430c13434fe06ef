"""Solver adapter: optimising a pseudo-Boolean ``Formula`` with python-sat.

Linear constraints over 0/1 variables are translated to CNF and the
objective to weighted soft clauses, then handed to the RC2 MaxSAT engine
(Ignatiev, Morgado, Marques-Silva, JSAT 2019) running on top of a CDCL
oracle (Glucose3 by default).

Constraint translation. Every constraint is first normalised to::

    sum(a_i * l_i) >= k        a_i > 0, l_i literals

using ``a * x == |a| * (not x) - |a|`` for negative coefficients. Then:

- ``k <= 0``: trivially satisfied, nothing is emitted;
- every ``a_i >= k``: any single true literal suffices, a plain clause;
- every ``a_i == 1``: an at-least-``k`` cardinality encoding (``CardEnc``);
- otherwise ``FormulaError``.

Objective translation. A term ``w * x`` with ``w > 0`` becomes the soft
clause ``[-x]`` of weight ``w``; with ``w < 0`` it becomes ``[x]`` of weight
``-w`` plus a constant ``w``. Minimising violated soft weight therefore
minimises ``sum(w * x)``. A tiebreak objective, when present, is folded in
below the objective by scaling the objective weights (see ``_soft_weights``).
"""

from __future__ import annotations

import logging
import multiprocessing
import time
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Protocol, TypeVar

from pysat.card import CardEnc, EncType
from pysat.examples.rc2 import RC2
from pysat.formula import IDPool, WCNF
from pysat.solvers import Solver as _PySATSolver

from pkgplan.config import DEFAULT_ENGINE
from pkgplan.core.resolution.formula import Comparator, Formula, LinearConstraint
from pkgplan.exceptions import FormulaError, SolverError, SolverTimeoutError

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class SolveStatus(Enum):
    OPTIMAL = "optimal"
    INFEASIBLE = "infeasible"


@dataclass(frozen=True)
class SolveResult:
    """Outcome of one solve call.

    Attributes:
        status: ``OPTIMAL`` or ``INFEASIBLE``.
        assignment: Read-only id -> installed mapping covering every formula
            variable. None when infeasible.
        objective: Objective value of ``assignment``. None when infeasible.
    """

    status: SolveStatus
    assignment: Mapping[str, bool] | None = None
    objective: int | None = None

    @property
    def optimal(self) -> bool:
        return self.status is SolveStatus.OPTIMAL

    @classmethod
    def infeasible(cls) -> SolveResult:
        return cls(status=SolveStatus.INFEASIBLE)


class SolverAdapter(Protocol):
    """Anything that can optimise a ``Formula``.

    Implementations must return ``OPTIMAL`` only with an assignment that
    satisfies every constraint and minimises the objective, and
    ``INFEASIBLE`` only when no satisfying assignment exists. Engine
    failures are raised as ``SolverError``.
    """

    def solve(self, formula: Formula) -> SolveResult: ...


# ---------------------------------------------------------------------------
# CNF / WCNF encoding
# ---------------------------------------------------------------------------


@dataclass
class Encoding:
    """A formula translated for python-sat.

    Attributes:
        wcnf: Hard clauses plus weighted soft clauses.
        var_map: Formula variable -> positive SAT variable.
        offset: Constant added to the RC2 cost to recover the weighted sum.
        trivially_unsat: True if some constraint encoded to the empty clause.
    """

    wcnf: WCNF
    var_map: dict[str, int]
    offset: int = 0
    trivially_unsat: bool = False


def _normalise(
    constraint: LinearConstraint, var_map: dict[str, int]
) -> tuple[list[tuple[int, int]], int]:
    """Rewrite *constraint* as ``sum(a * lit) >= k`` with every ``a > 0``."""
    sign = 1 if constraint.comparator is Comparator.GE else -1
    k = sign * constraint.bound
    pairs: list[tuple[int, int]] = []
    for term in constraint.terms:
        try:
            var = var_map[term.variable]
        except KeyError:
            raise FormulaError(
                f"Constraint {constraint} uses undeclared variable {term.variable!r}"
            ) from None
        a = sign * term.coefficient
        if a > 0:
            pairs.append((a, var))
        else:
            pairs.append((-a, -var))
            k -= a
    return pairs, k


def encode_constraint(
    constraint: LinearConstraint, var_map: dict[str, int], pool: IDPool
) -> list[list[int]]:
    """Translate one linear constraint into CNF clauses."""
    pairs, k = _normalise(constraint, var_map)
    if k <= 0:
        return []
    if all(a >= k for a, _ in pairs):
        return [[lit for _, lit in pairs]]
    if all(a == 1 for a, _ in pairs):
        lits = [lit for _, lit in pairs]
        return CardEnc.atleast(
            lits=lits, bound=k, vpool=pool, encoding=EncType.seqcounter
        ).clauses
    raise FormulaError(f"Unsupported coefficients in constraint {constraint}")


def _soft_weights(formula: Formula) -> dict[str, int]:
    """Combine objective and tiebreak into one weight per variable.

    The objective is scaled by one more than the largest possible tiebreak
    spread, so the tiebreak never outweighs a unit of objective.
    """
    scale = sum(abs(t.coefficient) for t in formula.tiebreak) + 1
    weights: dict[str, int] = {}
    for term in formula.objective:
        weights[term.variable] = weights.get(term.variable, 0) + term.coefficient * scale
    for term in formula.tiebreak:
        weights[term.variable] = weights.get(term.variable, 0) + term.coefficient
    return weights


def encode(formula: Formula) -> Encoding:
    """Translate *formula* into a weighted CNF for RC2."""
    pool = IDPool()
    var_map = {name: pool.id(name) for name in formula.variables}
    encoding = Encoding(wcnf=WCNF(), var_map=var_map)

    for constraint in formula.constraints:
        for clause in encode_constraint(constraint, var_map, pool):
            if not clause:
                encoding.trivially_unsat = True
            encoding.wcnf.append(clause)

    for name, weight in _soft_weights(formula).items():
        try:
            var = var_map[name]
        except KeyError:
            raise FormulaError(f"Objective uses undeclared variable {name!r}") from None
        if weight > 0:
            encoding.wcnf.append([-var], weight=weight)
        elif weight < 0:
            encoding.wcnf.append([var], weight=-weight)
            encoding.offset += weight

    return encoding


# ---------------------------------------------------------------------------
# Engine call
# ---------------------------------------------------------------------------


def solve_wcnf(wcnf: WCNF, engine: str) -> list[int] | None:
    """Return an optimal model of *wcnf*, or None if its hard part is UNSAT.

    Module-level so it can be shipped to a worker process.
    """
    if not wcnf.soft:
        solver = _PySATSolver(name=engine, bootstrap_with=wcnf.hard)
        try:
            return solver.get_model() if solver.solve() else None
        finally:
            solver.delete()

    rc2 = RC2(wcnf, solver=engine)
    try:
        return rc2.compute()
    finally:
        rc2.delete()


# ---------------------------------------------------------------------------
# MaxSATSolver
# ---------------------------------------------------------------------------


class MaxSATSolver:
    """``SolverAdapter`` backed by python-sat's RC2 MaxSAT engine.

    Args:
        engine: python-sat oracle name (e.g. "g3", "cadical153").
        timeout: Optional wall-clock limit in seconds. With a limit the
            engine runs in a worker process that is terminated when the
            limit elapses, and ``SolverTimeoutError`` is raised. Without a
            limit the engine runs in the calling process.
    """

    def __init__(self, engine: str = DEFAULT_ENGINE, timeout: float | None = None) -> None:
        self._engine = engine
        self._timeout = timeout

    def solve(self, formula: Formula) -> SolveResult:
        """Optimise *formula*.

        Raises:
            FormulaError: If the formula cannot be encoded.
            SolverError: If the engine fails.
            SolverTimeoutError: If the time limit elapses.
        """
        encoding = encode(formula)
        if encoding.trivially_unsat:
            logger.debug("Formula contains an empty clause; infeasible")
            return SolveResult.infeasible()

        logger.debug(
            "Submitting %d hard / %d soft clauses over %d variables to %s",
            len(encoding.wcnf.hard), len(encoding.wcnf.soft),
            encoding.wcnf.nv, self._engine,
        )
        started = time.perf_counter()
        model = self._run(solve_wcnf, encoding.wcnf, self._engine)
        logger.debug("Engine finished in %.1f ms", (time.perf_counter() - started) * 1000)

        if model is None:
            return SolveResult.infeasible()

        true_vars = {lit for lit in model if lit > 0}
        assignment = {name: var in true_vars for name, var in encoding.var_map.items()}
        return SolveResult(
            status=SolveStatus.OPTIMAL,
            assignment=MappingProxyType(assignment),
            objective=formula.objective_value(assignment),
        )

    def _run(self, fn: Callable[..., _T], *args: Any) -> _T:
        """Call ``fn(*args)``, in a terminable worker process when timed.

        *fn* and *args* must be picklable when a timeout is set.
        """
        if self._timeout is None:
            try:
                return fn(*args)
            except Exception as exc:
                raise SolverError(f"Solver engine {self._engine!r} failed: {exc}") from exc

        pool = multiprocessing.Pool(processes=1)
        try:
            pending = pool.apply_async(fn, args)
            try:
                return pending.get(timeout=self._timeout)
            except multiprocessing.TimeoutError:
                logger.warning(
                    "Solver engine %r exceeded %ss; terminating worker",
                    self._engine, self._timeout,
                )
                raise SolverTimeoutError(
                    f"Solver engine {self._engine!r} exceeded {self._timeout}s"
                ) from None
            except Exception as exc:
                raise SolverError(f"Solver engine {self._engine!r} failed: {exc}") from exc
        finally:
            pool.terminate()
            pool.join()
