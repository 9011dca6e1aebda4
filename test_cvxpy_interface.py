"""
Compare ECOS-form solves of CVXPY problems against CVXPY's own solve.

CVXPY's SCS problem data is already in the form

    minimize    c^T x
    subject to  b - A x ∈ K

with K described by a ConeDims object, so it loads as a cone problem with
every variable free.
"""

import numpy as np
import pytest

from ecosform import Cone, Status, dims_to_cones, load_conic_problem, solve_canonical


cp = pytest.importorskip("cvxpy")
pytest.importorskip("ecos")


def _solve_with_ecosform(problem):
    data, _, _ = problem.get_problem_data(cp.SCS)
    c, A, b = data['c'], data['A'], data['b']
    constr_cones = dims_to_cones(data['dims'], A.shape[0])
    var_cones = [(Cone.FREE, list(range(len(c))))]
    form = load_conic_problem(c, A, b, constr_cones, var_cones)
    return solve_canonical(form)


def test_lp():
    """
    minimize    x[0]
    subject to  x[0] + x[1] = 2
                x >= 0
    """
    x = cp.Variable(2)
    prob = cp.Problem(cp.Minimize(x[0]), [x[0] + x[1] == 2, x >= 0])

    result = _solve_with_ecosform(prob)
    prob.solve()

    assert result.status is Status.OPTIMAL
    assert result.objective_value == pytest.approx(prob.value, abs=1e-5)


def test_lp_ineq():
    """
    minimize    x[0]
    subject to  -x[0] - x[1] <= 0
                 x[0] - x[1] <= 0
                 x[1] <= 2
    """
    x = cp.Variable(2)
    prob = cp.Problem(cp.Minimize(x[0]),
                      [-x[0] - x[1] <= 0, x[0] - x[1] <= 0, x[1] <= 2])

    result = _solve_with_ecosform(prob)
    prob.solve()

    assert result.status is Status.OPTIMAL
    assert result.objective_value == pytest.approx(-2.0, abs=1e-5)
    assert result.objective_value == pytest.approx(prob.value, abs=1e-4)


def test_robust_ls():
    """
    minimize    t + 0.1 * ||x||_1
    subject to  ||A x - b|| <= t
    """
    rng = np.random.default_rng(1)
    m, n = 8, 4
    A = rng.standard_normal((m, n))
    b = rng.standard_normal(m)

    x = cp.Variable(n)
    t = cp.Variable()
    prob = cp.Problem(cp.Minimize(t + 0.1 * cp.norm(x, 1)),
                      [cp.norm(A @ x - b) <= t])

    result = _solve_with_ecosform(prob)
    prob.solve()

    assert result.status is Status.OPTIMAL
    assert result.objective_value == pytest.approx(prob.value, rel=1e-4, abs=1e-5)


def test_psd_problem_rejected():
    from ecosform import UnsupportedCone

    X = cp.Variable((2, 2), symmetric=True)
    prob = cp.Problem(cp.Minimize(cp.trace(X)), [X >> 0, X[0, 1] == 1])
    with pytest.raises(UnsupportedCone):
        _solve_with_ecosform(prob)
