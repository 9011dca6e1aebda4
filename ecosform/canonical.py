"""
ECOS canonical form.

ECOS solves::

    minimize    c^T x
    subject to  A x = b
                h - G x in K

where K is the product of the nonnegative orthant of dimension ``npos`` and
``ncones`` second-order cones of sizes ``conedims``.  The orthant rows come
first in ``G``, followed by each cone's rows in order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np
import scipy.sparse as sp

from ecosform.cones import Sense
from ecosform.errors import MismatchedLength
from ecosform.reorder import IndexMap


@dataclass(frozen=True, eq=False)
class CanonicalForm:
    """Problem data in the layout ECOS consumes."""
    n: int                      # Number of variables
    m: int                      # Number of inequality rows, h - Gx in K
    p: int                      # Number of equality rows, Ax = b
    npos: int                   # Rows of G in the nonnegative orthant
    ncones: int                 # Number of second-order cones
    conedims: Tuple[int, ...]   # Rows of G in each second-order cone
    G: sp.csc_matrix
    h: np.ndarray
    A: sp.csc_matrix
    b: np.ndarray
    c: np.ndarray               # Always a minimization objective
    sense: Sense = Sense.MINIMIZE
    index_map: IndexMap = field(default=None)

    def __post_init__(self):
        if self.index_map is None:
            object.__setattr__(self, 'index_map', IndexMap.identity(self.n))
        object.__setattr__(self, 'conedims', tuple(int(q) for q in self.conedims))
        if self.m != self.npos + sum(self.conedims):
            raise MismatchedLength(
                f"{self.m} inequality rows but npos={self.npos}, conedims={self.conedims}")
        if self.ncones != len(self.conedims):
            raise MismatchedLength(
                f"ncones={self.ncones} but {len(self.conedims)} cone sizes given")
        if self.G.shape != (self.m, self.n) or self.h.shape != (self.m,):
            raise MismatchedLength(
                f"G is {self.G.shape} and h is {self.h.shape}, expected ({self.m}, {self.n})")
        if self.A.shape != (self.p, self.n) or self.b.shape != (self.p,):
            raise MismatchedLength(
                f"A is {self.A.shape} and b is {self.b.shape}, expected ({self.p}, {self.n})")
        if self.c.shape != (self.n,) or len(self.index_map) != self.n:
            raise MismatchedLength(
                f"Objective has shape {self.c.shape}, expected ({self.n},)")

    @property
    def dims(self):
        """Cone dimensions in the dict layout of ``ecos.solve``."""
        return {'l': self.npos, 'q': list(self.conedims), 'e': 0}


class RowAccumulator:
    """
    Append-only sparse row builder.

    Rows are collected as (row, col, value) triplets together with their
    right-hand sides and turned into a CSC matrix once, in ``build``.
    """

    def __init__(self, n):
        self.n = n
        self.nrows = 0
        self._rows = []
        self._cols = []
        self._vals = []
        self._rhs = []

    def __len__(self):
        return self.nrows

    def add_unit_row(self, col, coef, rhs=0.0):
        """Append the row ``coef * e_col`` with right-hand side ``rhs``."""
        self._rows.append(np.array([self.nrows], dtype=np.intp))
        self._cols.append(np.array([col], dtype=np.intp))
        self._vals.append(np.array([coef], dtype=np.float64))
        self._rhs.append(np.array([rhs], dtype=np.float64))
        self.nrows += 1

    def add_rows(self, block, rhs, scale=1.0):
        """
        Append ``scale * block`` with right-hand side ``scale * rhs``.

        ``scale`` is either a scalar or one factor per row of ``block``.
        """
        block = sp.coo_matrix(block)
        rhs = np.asarray(rhs, dtype=np.float64).ravel()
        if block.shape != (rhs.size, self.n):
            raise MismatchedLength(
                f"Row block has shape {block.shape}, expected ({rhs.size}, {self.n})")
        scale = np.asarray(scale, dtype=np.float64)
        row_scale = scale[block.row] if scale.ndim else scale
        self._rows.append(block.row.astype(np.intp) + self.nrows)
        self._cols.append(block.col.astype(np.intp))
        self._vals.append(row_scale * block.data.astype(np.float64))
        self._rhs.append(scale * rhs)
        self.nrows += rhs.size

    def build(self):
        """Return the accumulated ``(matrix, rhs)`` pair."""
        if self.nrows == 0:
            return sp.csc_matrix((0, self.n)), np.zeros(0)
        matrix = sp.coo_matrix(
            (np.concatenate(self._vals),
             (np.concatenate(self._rows), np.concatenate(self._cols))),
            shape=(self.nrows, self.n),
        ).tocsc()
        return matrix, np.concatenate(self._rhs)


def as_sparse_rows(A, m, n):
    """
    Return ``A`` as an ``m`` by ``n`` CSR matrix.

    ``None`` or an empty array is accepted for a problem with no rows.
    """
    if A is None or (not sp.issparse(A) and np.size(A) == 0):
        if m == 0:
            return sp.csr_matrix((0, n))
        raise MismatchedLength(f"Constraint matrix is empty, expected ({m}, {n})")
    if sp.issparse(A):
        A = sp.csr_matrix(A, dtype=np.float64)
    else:
        A = sp.csr_matrix(np.atleast_2d(np.asarray(A, dtype=np.float64)))
    if A.shape != (m, n):
        raise MismatchedLength(
            f"Constraint matrix has shape {A.shape}, expected ({m}, {n})")
    return A
