"""
Tests for linear problems with row and column bounds.
"""

import numpy as np
import pytest

from ecosform import MismatchedLength, Sense, UnsupportedConstraint, load_linear_problem


INF = np.inf


def test_equality_and_less_than_rows():
    """
    x0 + x1 == 2
    x0 - x1 <= 5
    """
    form = load_linear_problem(
        A=[[1.0, 1.0], [1.0, -1.0]],
        collb=[-INF, -INF], colub=[INF, INF],
        obj=[1.0, 1.0],
        rowlb=[2.0, -INF], rowub=[2.0, 5.0],
        sense=Sense.MINIMIZE,
    )
    assert form.p == 1
    assert np.array_equal(form.A.toarray(), [[1.0, 1.0]])
    assert np.array_equal(form.b, [2.0])
    assert form.m == 1
    assert form.npos == 1
    assert np.array_equal(form.G.toarray(), [[1.0, -1.0]])
    assert np.array_equal(form.h, [5.0])
    assert form.ncones == 0
    assert form.conedims == ()
    assert form.index_map.is_identity


def test_greater_than_row_is_negated():
    """x0 + 2 x1 >= -3  becomes  -x0 - 2 x1 <= 3"""
    form = load_linear_problem(
        A=[[1.0, 2.0]],
        collb=[-INF, -INF], colub=[INF, INF],
        obj=[0.0, 0.0],
        rowlb=[-3.0], rowub=[INF],
        sense="min",
    )
    assert form.p == 0
    assert np.array_equal(form.G.toarray(), [[-1.0, -2.0]])
    assert np.array_equal(form.h, [3.0])


def test_variable_bounds_become_rows():
    """0 <= x0, x1 <= 4, -1 <= x2 <= 1, appended after the original rows."""
    form = load_linear_problem(
        A=[[1.0, 1.0, 1.0]],
        collb=[0.0, -INF, -1.0], colub=[INF, 4.0, 1.0],
        obj=[1.0, 1.0, 1.0],
        rowlb=[-INF], rowub=[10.0],
        sense="min",
    )
    assert form.m == 5
    assert form.npos == 5
    assert np.array_equal(form.G.toarray(), [
        [1.0, 1.0, 1.0],
        [-1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.0, 0.0, -1.0],
        [0.0, 0.0, 1.0],
    ])
    assert np.array_equal(form.h, [10.0, 0.0, 4.0, 1.0, 1.0])


def test_no_rows():
    form = load_linear_problem(A=np.zeros((0, 1)), collb=[0.0], colub=[INF],
                               obj=[1.0], rowlb=[], rowub=[], sense="min")
    assert form.m == 1
    assert np.array_equal(form.G.toarray(), [[-1.0]])
    assert np.array_equal(form.h, [0.0])
    assert form.A.shape == (0, 1)


def test_maximize_negates_objective():
    form = load_linear_problem(A=None, collb=[0.0, 0.0], colub=[1.0, 1.0],
                               obj=[1.0, -2.0], rowlb=[], rowub=[], sense="max")
    assert form.sense is Sense.MAXIMIZE
    assert np.array_equal(form.c, [-1.0, 2.0])


def test_sparse_matrix_input():
    sp = pytest.importorskip("scipy.sparse")
    A = sp.csc_matrix(np.array([[0.0, 3.0], [1.0, 0.0]]))
    form = load_linear_problem(A, [-INF, -INF], [INF, INF], [1.0, 1.0],
                               [1.0, -INF], [INF, 2.0], "min")
    assert np.array_equal(form.G.toarray(), [[0.0, -3.0], [1.0, 0.0]])
    assert np.array_equal(form.h, [-1.0, 2.0])


def test_ranged_row_rejected():
    with pytest.raises(UnsupportedConstraint):
        load_linear_problem([[1.0]], [-INF], [INF], [1.0], [0.0], [1.0], "min")


def test_free_row_rejected():
    with pytest.raises(UnsupportedConstraint):
        load_linear_problem([[1.0]], [-INF], [INF], [1.0], [-INF], [INF], "min")


def test_mismatched_lengths():
    with pytest.raises(MismatchedLength):
        load_linear_problem([[1.0, 1.0]], [0.0, 0.0], [1.0], [1.0, 1.0],
                            [0.0], [0.0], "min")
    with pytest.raises(MismatchedLength):
        load_linear_problem([[1.0, 1.0]], [0.0, 0.0], [1.0, 1.0], [1.0, 1.0],
                            [0.0, 0.0], [0.0], "min")
    with pytest.raises(MismatchedLength):
        load_linear_problem([[1.0, 1.0]], [0.0, 0.0], [1.0, 1.0], [1.0],
                            [0.0], [0.0], "min")
    with pytest.raises(MismatchedLength):
        load_linear_problem([[1.0, 1.0, 1.0]], [0.0, 0.0], [1.0, 1.0], [1.0, 1.0],
                            [0.0], [0.0], "min")


def test_unknown_sense():
    with pytest.raises(ValueError):
        load_linear_problem([[1.0]], [0.0], [1.0], [1.0], [0.0], [0.0], "sideways")
