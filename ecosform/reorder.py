"""
Variable reordering between the caller's indices and ECOS's.

ECOS reads second-order cones from consecutive rows of ``h - G*x``, so the
conic loader groups the variables by cone before building ``G``.  The
bijection is kept in an ``IndexMap`` so that the solution can be returned in
the caller's order after the solve.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from ecosform.cones import Cone
from ecosform.errors import IndexOutOfRange, MismatchedLength


logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class IndexMap:
    """
    Bijection between original and canonical variable indices.

    Attributes
    ----------
    forward : ndarray of int, shape (n,)
        ``forward[i]`` is the canonical index of original variable ``i``.
    reverse : ndarray of int, shape (n,)
        ``reverse[k]`` is the original index of canonical variable ``k``.
    """
    forward: np.ndarray
    reverse: np.ndarray

    def __post_init__(self):
        forward = np.array(self.forward, dtype=np.intp).ravel()
        reverse = np.array(self.reverse, dtype=np.intp).ravel()
        if forward.shape != reverse.shape:
            raise MismatchedLength(
                f"Forward map has {forward.size} entries, reverse map has {reverse.size}")
        forward.setflags(write=False)
        reverse.setflags(write=False)
        object.__setattr__(self, 'forward', forward)
        object.__setattr__(self, 'reverse', reverse)

    def __len__(self):
        return self.forward.size

    @property
    def is_identity(self) -> bool:
        return bool(np.array_equal(self.reverse, np.arange(len(self))))

    @classmethod
    def identity(cls, n: int) -> "IndexMap":
        return cls(np.arange(n), np.arange(n))


def build_index_map(var_cones, n: int) -> IndexMap:
    """
    Order the variables by cone kind.

    The canonical order is: NonNeg and NonPos variables in the order they are
    listed, then every SOC group (each kept contiguous and in its original
    relative order, groups in the order they are listed), then Zero
    variables, then Free variables.

    Parameters
    ----------
    var_cones : list of (Cone, list of int)
        Validated variable cones; must cover ``0..n-1`` exactly once.
    n : int
        Number of variables.

    Raises
    ------
    IndexOutOfRange
        If an index is outside ``0..n-1``, appears twice, or is never listed.
    """
    seen = np.zeros(n, dtype=bool)
    buckets = {
        Cone.NON_NEG: [],
        Cone.SOC: [],
        Cone.ZERO: [],
        Cone.FREE: [],
    }

    for cone, idxs in var_cones:
        for i in idxs:
            if not 0 <= i < n:
                raise IndexOutOfRange(
                    f"Variable index {i} out of range for {n} variables")
            if seen[i]:
                raise IndexOutOfRange(
                    f"Variable index {i} assigned to more than one cone")
            seen[i] = True
        # NonPos shares the orthant segment with NonNeg
        key = Cone.NON_NEG if cone is Cone.NON_POS else cone
        buckets[key].extend(idxs)

    if not seen.all():
        missing = np.flatnonzero(~seen)
        raise IndexOutOfRange(
            f"Variables {missing.tolist()} are not assigned to any cone")

    reverse = np.array(
        buckets[Cone.NON_NEG] + buckets[Cone.SOC]
        + buckets[Cone.ZERO] + buckets[Cone.FREE],
        dtype=np.intp,
    )
    forward = np.empty(n, dtype=np.intp)
    forward[reverse] = np.arange(n)

    logger.debug("Index map: %d orthant, %d SOC, %d zero, %d free variables",
                 len(buckets[Cone.NON_NEG]), len(buckets[Cone.SOC]),
                 len(buckets[Cone.ZERO]), len(buckets[Cone.FREE]))
    return IndexMap(forward, reverse)


def restore_solution(x, index_map: IndexMap) -> np.ndarray:
    """
    Return a canonical-order solution in the caller's variable order.

    ``original[i] = x[index_map.forward[i]]``.

    Raises
    ------
    MismatchedLength
        If ``x`` does not have one entry per mapped variable.
    """
    x = np.asarray(x, dtype=np.float64).ravel()
    if x.size != len(index_map):
        raise MismatchedLength(
            f"Solution has {x.size} entries, expected {len(index_map)}")
    return x[index_map.forward]
