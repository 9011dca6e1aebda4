"""
Solving ECOS-form problems.

The numerical work is done by the ECOS native library through the ``ecos``
Python package. ``ecos.solve`` sets up the native workspace, solves and
releases the workspace inside one call, whatever the outcome.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

from ecosform.canonical import CanonicalForm
from ecosform.cone_convert import load_conic_problem
from ecosform.cones import Sense
from ecosform.errors import EcosFormError
from ecosform.linear import load_linear_problem
from ecosform.reorder import restore_solution


logger = logging.getLogger(__name__)


# ECOS exit flags (ecos.h)
ECOS_OPTIMAL = 0
ECOS_PINF = 1
ECOS_DINF = 2
ECOS_MAXIT = -1

DEFAULT_SOLVER_OPTS = {
    'verbose': False,
    'feastol': 1e-8,
    'abstol': 1e-8,
    'reltol': 1e-8,
    'max_iters': 100,
}


class Status(Enum):
    """Outcome of a solve."""
    NOT_SOLVED = "NotSolved"
    OPTIMAL = "Optimal"
    PRIMAL_INFEASIBLE = "Infeasible"
    DUAL_INFEASIBLE = "Unbounded"  # Dual infeasible = primal unbounded, probably
    ITERATION_LIMIT = "UserLimit"
    ERROR = "Error"

    @classmethod
    def from_exit_flag(cls, flag: int) -> "Status":
        if flag == ECOS_OPTIMAL:
            return cls.OPTIMAL
        if flag == ECOS_PINF:
            return cls.PRIMAL_INFEASIBLE
        if flag == ECOS_DINF:
            return cls.DUAL_INFEASIBLE
        if flag == ECOS_MAXIT:
            return cls.ITERATION_LIMIT
        return cls.ERROR


@dataclass
class SolveResult:
    """Solution of one ECOS call, with ``x`` in the caller's variable order."""
    status: Status
    objective_value: float
    x: np.ndarray
    canonical_x: np.ndarray
    iterations: int = 0
    solve_time: float = 0.0
    info: dict = field(default_factory=dict)


def solve_canonical(form: CanonicalForm, **solver_opts) -> SolveResult:
    """
    Solve a problem in ECOS form.

    Parameters
    ----------
    form : CanonicalForm
        Output of ``load_linear_problem`` or ``load_conic_problem``
    **solver_opts : dict
        ECOS settings (verbose, feastol, abstol, reltol, max_iters, ...),
        merged over ``DEFAULT_SOLVER_OPTS``

    Returns
    -------
    SolveResult
        The status is the only report of a failed solve; the primal vector
        ECOS returned is kept whatever the status.
    """
    import ecos

    opts = dict(DEFAULT_SOLVER_OPTS)
    opts.update(solver_opts or {})

    if form.p > 0:
        A, b = form.A, form.b
    else:
        A, b = None, None

    logger.info("Calling ECOS: n=%d, m=%d, p=%d, npos=%d, cones=%s",
                form.n, form.m, form.p, form.npos, list(form.conedims))

    t0 = time.perf_counter()
    # ECOS may write into c
    sol = ecos.solve(form.c.copy(), form.G, form.h, form.dims, A, b, **opts)
    solve_time = time.perf_counter() - t0

    info = dict(sol.get('info', {}))
    status = Status.from_exit_flag(int(info.get('exitFlag', -7)))
    canonical_x = np.asarray(sol['x'], dtype=np.float64).ravel()
    objective_value = float(np.dot(form.c, canonical_x)) * int(form.sense)

    logger.info("ECOS finished with %s after %s iterations (%.3fs)",
                status.value, info.get('iter', '?'), solve_time)

    return SolveResult(
        status=status,
        objective_value=objective_value,
        x=restore_solution(canonical_x, form.index_map),
        canonical_x=canonical_x,
        iterations=int(info.get('iter', 0)),
        solve_time=solve_time,
        info=info,
    )


class EcosModel:
    """
    Load, solve and query one problem at a time.

    Example
    -------
    >>> model = EcosModel(max_iters=200)
    >>> model.load_conic_problem(c, A, b, [(Cone.NON_NEG, [0, 1])], [(Cone.FREE, [0, 1])])
    >>> model.optimize()
    >>> model.status, model.objective_value, model.solution
    """

    def __init__(self, **solver_opts):
        self.solver_opts = dict(DEFAULT_SOLVER_OPTS)
        self.solver_opts.update(solver_opts)
        self._form: Optional[CanonicalForm] = None
        self._result: Optional[SolveResult] = None

    def load_problem(self, A, collb, colub, obj, rowlb, rowub, sense=Sense.MINIMIZE):
        """Load a linear problem, see ``load_linear_problem``."""
        form = load_linear_problem(A, collb, colub, obj, rowlb, rowub, sense)
        self._form, self._result = form, None
        return form

    def load_conic_problem(self, c, A, b, constr_cones, var_cones, sense=Sense.MINIMIZE):
        """Load a cone problem, see ``load_conic_problem``."""
        form = load_conic_problem(c, A, b, constr_cones, var_cones, sense)
        self._form, self._result = form, None
        return form

    @property
    def canonical_form(self) -> Optional[CanonicalForm]:
        return self._form

    def optimize(self) -> SolveResult:
        if self._form is None:
            raise EcosFormError("No problem loaded")
        self._result = solve_canonical(self._form, **self.solver_opts)
        return self._result

    @property
    def status(self) -> Status:
        if self._result is None:
            return Status.NOT_SOLVED
        return self._result.status

    def _solved(self) -> SolveResult:
        if self._result is None:
            raise EcosFormError("Problem has not been solved")
        return self._result

    @property
    def objective_value(self) -> float:
        return self._solved().objective_value

    @property
    def solution(self) -> np.ndarray:
        return self._solved().x
