"""
Linear problems in ECOS form.

Loads the linear programming problem::

    minimize or maximize    obj^T x
    subject to              rowlb <= A x <= rowub
                            collb <=   x <= colub

Variable bounds become extra inequality rows, every row is classified as an
equality or a ``<=`` inequality, and the objective is negated when
maximizing since ECOS always minimizes.
"""

from __future__ import annotations

import logging

import numpy as np

from ecosform.canonical import CanonicalForm, RowAccumulator, as_sparse_rows
from ecosform.cones import Sense
from ecosform.errors import MismatchedLength, UnsupportedConstraint
from ecosform.reorder import IndexMap


logger = logging.getLogger(__name__)


def _as_vector(v, name):
    v = np.asarray(v, dtype=np.float64)
    if v.ndim > 1:
        raise MismatchedLength(f"{name} must be a vector, got shape {v.shape}")
    return v.ravel()


def load_linear_problem(A, collb, colub, obj, rowlb, rowub, sense=Sense.MINIMIZE):
    """
    Convert a linear problem with row and column bounds to ECOS form.

    Parameters
    ----------
    A : array_like or sparse matrix, shape (m, n)
        Constraint matrix
    collb, colub : array_like, shape (n,)
        Variable bounds, ``-inf``/``+inf`` where absent
    obj : array_like, shape (n,)
        Objective coefficients
    rowlb, rowub : array_like, shape (m,)
        Row bounds, ``-inf``/``+inf`` where absent
    sense : Sense or str
        ``Sense.MINIMIZE`` or ``Sense.MAXIMIZE`` ("min"/"max" accepted)

    Returns
    -------
    CanonicalForm
        Inequality rows are the ``<=`` rows in their original order followed
        by one row per finite variable bound. All of them lie in the
        nonnegative orthant. The index map is the identity.

    Raises
    ------
    MismatchedLength
        If the bound vectors, objective and matrix disagree in size.
    UnsupportedConstraint
        If a row has two different finite bounds (ranged) or no finite bound.
    """
    sense = Sense.parse(sense)
    collb = _as_vector(collb, "collb")
    colub = _as_vector(colub, "colub")
    rowlb = _as_vector(rowlb, "rowlb")
    rowub = _as_vector(rowub, "rowub")
    obj = _as_vector(obj, "obj")

    nvar = collb.size
    if colub.size != nvar:
        raise MismatchedLength("Unequal lengths for column bounds")
    nrow = rowlb.size
    if rowub.size != nrow:
        raise MismatchedLength("Unequal lengths for row bounds")
    if obj.size != nvar:
        raise MismatchedLength(
            f"Objective has {obj.size} entries, expected {nvar}")
    A = as_sparse_rows(A, nrow, nvar)

    # Classify rows
    is_eq = (rowlb == rowub) & np.isfinite(rowlb)
    is_le = ~is_eq & np.isneginf(rowlb) & np.isfinite(rowub)
    is_ge = ~is_eq & np.isposinf(rowub) & np.isfinite(rowlb)
    is_ranged = ~is_eq & np.isfinite(rowlb) & np.isfinite(rowub)
    if is_ranged.any():
        raise UnsupportedConstraint(
            f"Ranged constraints unsupported (rows {np.flatnonzero(is_ranged).tolist()})")
    is_free = ~(is_eq | is_le | is_ge)
    if is_free.any():
        raise UnsupportedConstraint(
            f"Rows {np.flatnonzero(is_free).tolist()} have no finite bound")

    eq = RowAccumulator(nvar)
    eqidx = np.flatnonzero(is_eq)
    eq.add_rows(A[eqidx], rowlb[eqidx])

    # Greater-than rows have their sign flipped so only <= rows remain
    ineq = RowAccumulator(nvar)
    ineqidx = np.flatnonzero(is_le | is_ge)
    sign = np.where(is_le[ineqidx], 1.0, -1.0)
    bound = np.where(is_le[ineqidx], rowub[ineqidx], rowlb[ineqidx])
    ineq.add_rows(A[ineqidx], bound, scale=sign)

    # Turn variable bounds into constraints
    for j in range(nvar):
        if np.isfinite(collb[j]):
            ineq.add_unit_row(j, -1.0, -collb[j])
        if np.isfinite(colub[j]):
            ineq.add_unit_row(j, 1.0, colub[j])

    G, h = ineq.build()
    A_eq, b_eq = eq.build()
    c = -obj if sense is Sense.MAXIMIZE else obj.copy()

    logger.debug("Linear problem: %d variables, %d equalities, %d inequalities "
                 "(%d from variable bounds)",
                 nvar, len(eq), len(ineq), len(ineq) - ineqidx.size)

    return CanonicalForm(
        n=nvar,
        m=len(ineq),
        p=len(eq),
        npos=len(ineq),
        ncones=0,
        conedims=(),
        G=G,
        h=h,
        A=A_eq,
        b=b_eq,
        c=c,
        sense=sense,
        index_map=IndexMap.identity(nvar),
    )
