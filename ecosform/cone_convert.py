"""
Conversion of cone problems to ECOS format.

Conic input format:
    minimize    c^T x
    subject to  b - A*x ∈ K_1
                      x ∈ K_2

where K_1 and K_2 are specified as lists of (Cone, indices) tuples, one for
the constraint rows and one for the variables.

ECOS format:
    minimize    c^T x
    subject to  A x = b
                h - G x ∈ K

where K is the nonnegative orthant of dimension npos followed by ncones
second-order cones of sizes conedims.

Mapping:
    * Constraints (K_1)
        * Zero: stays an equality row
        * NonNeg, NonPos, SOC: rows move into h - Gx
    * Variables (K_2)
        * Free: nothing to do
        * Zero: pinned to 0 by an equality row
        * NonNeg, NonPos, SOC: one row of h - Gx per variable
"""

from __future__ import annotations

import logging

import numpy as np

from ecosform.canonical import CanonicalForm, RowAccumulator, as_sparse_rows
from ecosform.cones import Cone, Sense, validate_cones
from ecosform.errors import IndexOutOfRange, MismatchedLength, UnsupportedCone
from ecosform.reorder import build_index_map


logger = logging.getLogger(__name__)


def _dims_fields(dims):
    if isinstance(dims, dict):
        return (dims.get('f', dims.get('zero', 0)),
                dims.get('l', dims.get('nonneg', 0)),
                list(dims.get('q', dims.get('soc', []))),
                list(dims.get('s', dims.get('psd', []))),
                dims.get('ep', dims.get('exp', 0)),
                dims.get('ed', 0),
                list(dims.get('p', [])))
    return (getattr(dims, 'zero', 0),
            getattr(dims, 'nonneg', 0),
            list(getattr(dims, 'soc', [])),
            list(getattr(dims, 'psd', [])),
            getattr(dims, 'exp', 0),
            0,
            list(getattr(dims, 'p3d', [])))


def dims_to_cones(dims, m):
    """
    Build a constraint cone list from a solver ``dims`` description.

    ``dims`` is either a dict in the SCS/ECOS key layout (``f``, ``l``,
    ``q``, ``s``, ``ep``, ``ed``, long names also accepted) or an object with
    CVXPY ``ConeDims`` attributes.  Blocks are laid out in that key order
    and must cover exactly ``m`` rows.

    PSD and exponential blocks come back under their own kinds, so that
    ``load_conic_problem`` rejects them with ``UnsupportedCone``.  A zero SOC
    size is passed through and rejected there as an empty index set.

    For example ``{"f": 2, "l": 3, "q": [4, 3]}`` with ``m=12`` gives Zero
    rows 0-1, NonNeg rows 2-4 and SOC groups 5-8 and 9-11.
    """
    n_zero, n_nonneg, soc_sizes, psd_sizes, n_exp, n_exp_dual, pow_sizes = \
        _dims_fields(dims)
    if pow_sizes:
        raise UnsupportedCone('PowerCone', "Power cones not supported")

    blocks = [(Cone.ZERO, n_zero), (Cone.NON_NEG, n_nonneg)]
    blocks += [(Cone.SOC, k) for k in soc_sizes]
    # Symmetric k x k blocks are stored as their k(k+1)/2 triangle entries
    blocks += [(Cone.SDP, k * (k + 1) // 2) for k in psd_sizes]
    blocks += [(Cone.EXP_PRIMAL, 3)] * n_exp
    blocks += [(Cone.EXP_DUAL, 3)] * n_exp_dual

    cones = []
    row = 0
    for cone, size in blocks:
        if size == 0 and cone in (Cone.ZERO, Cone.NON_NEG):
            continue
        cones.append((cone, list(range(row, row + size))))
        row += size

    if row != m:
        raise MismatchedLength(f"Cone dimensions cover {row} rows, but m={m}")
    return cones


def _rows(idxs):
    return np.asarray(idxs, dtype=np.intp)


def _check_rows(constr_cones, num_rows):
    seen = np.zeros(num_rows, dtype=bool)
    for _, idxs in constr_cones:
        for i in idxs:
            if not 0 <= i < num_rows:
                raise IndexOutOfRange(
                    f"Constraint row {i} out of range for {num_rows} rows")
            if seen[i]:
                raise IndexOutOfRange(
                    f"Constraint row {i} assigned to more than one cone")
            seen[i] = True


def load_conic_problem(c, A, b, constr_cones, var_cones, sense=Sense.MINIMIZE):
    """
    Convert a cone problem to ECOS form.

    Parameters
    ----------
    c : array_like, shape (n,)
        Linear objective coefficients
    A : array_like or sparse matrix, shape (m, n)
        Constraint matrix
    b : array_like, shape (m,)
        Constraint RHS
    constr_cones : list of (cone, indices)
        Cones for b - A*x. Rows not listed are treated as equalities.
    var_cones : list of (cone, indices)
        Cones for x. Every variable must be listed exactly once.
    sense : Sense or str
        Objective sense; ``c`` is negated when maximizing.

    Returns
    -------
    CanonicalForm
        Variables are in canonical order; ``index_map`` restores the
        caller's order.

    Raises
    ------
    UnsupportedCone
        Cone kind without an ECOS representation.
    UnsupportedConstraint
        Constraint tagged Free.
    IndexOutOfRange
        Malformed variable or row index sets.
    MismatchedLength
        ``c``, ``A`` and ``b`` disagree in size.
    """
    sense = Sense.parse(sense)
    constr_cones, var_cones = validate_cones(constr_cones, var_cones)

    c = np.asarray(c, dtype=np.float64).ravel()
    b = np.asarray(b, dtype=np.float64).ravel()
    num_vars = c.size
    num_rows = b.size
    A = as_sparse_rows(A, num_rows, num_vars)
    _check_rows(constr_cones, num_rows)

    index_map = build_index_map(var_cones, num_vars)
    fwd_map = index_map.forward

    # Rearrange data into the internal ordering
    ecos_c = c[index_map.reverse]
    ecos_A = A[:, index_map.reverse]

    ###################################################################
    # PHASE ONE  -  x ∈ Zero, fix at 0 with an equality row

    pinned = RowAccumulator(num_vars)
    for cone, idxs in var_cones:
        if cone is Cone.ZERO:
            for j in idxs:
                pinned.add_unit_row(fwd_map[j], 1.0, 0.0)

    ###################################################################
    # PHASE TWO  -  x ∈ NonNeg / NonPos, one row of G each

    G = RowAccumulator(num_vars)
    for cone, idxs in var_cones:
        if cone is Cone.NON_NEG:
            for j in idxs:
                G.add_unit_row(fwd_map[j], -1.0)
        elif cone is Cone.NON_POS:
            for j in idxs:
                G.add_unit_row(fwd_map[j], +1.0)

    ###################################################################
    # PHASE THREE  -  b - Ax ∈ NonNeg / NonPos

    rows_to_remove = []
    for cone, idxs in constr_cones:
        if cone is Cone.NON_NEG:
            # b - a'x >= 0 maps to a row of h - Gx as is
            G.add_rows(ecos_A[_rows(idxs)], b[_rows(idxs)])
        elif cone is Cone.NON_POS:
            # b - a'x <= 0, flip sign first
            G.add_rows(ecos_A[_rows(idxs)], b[_rows(idxs)], scale=-1.0)
        else:
            continue
        rows_to_remove.extend(idxs)
    num_pos_orth = len(G)

    ###################################################################
    # PHASE FOUR  -  x ∈ SOC and b - Ax ∈ SOC

    # (y, x) ∈ SOC  -->  0 - Ix ∈ Q
    soc_conedims = []
    for cone, idxs in var_cones:
        if cone is Cone.SOC:
            for j in idxs:
                G.add_unit_row(fwd_map[j], -1.0)
            soc_conedims.append(len(idxs))

    for cone, idxs in constr_cones:
        if cone is Cone.SOC:
            G.add_rows(ecos_A[_rows(idxs)], b[_rows(idxs)])
            soc_conedims.append(len(idxs))
            rows_to_remove.extend(idxs)

    # Remaining rows of A stay equalities, followed by the pinned variables
    keep = np.ones(num_rows, dtype=bool)
    keep[rows_to_remove] = False
    rows_to_keep = np.flatnonzero(keep)
    eq = RowAccumulator(num_vars)
    eq.add_rows(ecos_A[rows_to_keep], b[rows_to_keep])
    eq.add_rows(*pinned.build())

    G_mat, h = G.build()
    A_mat, b_eq = eq.build()
    if sense is Sense.MAXIMIZE:
        ecos_c = -ecos_c

    logger.debug("Conic problem: %d variables, %d equalities, %d orthant rows, "
                 "SOC dims %s", num_vars, len(eq), num_pos_orth, soc_conedims)

    return CanonicalForm(
        n=num_vars,
        m=len(G),
        p=len(eq),
        npos=num_pos_orth,
        ncones=len(soc_conedims),
        conedims=tuple(soc_conedims),
        G=G_mat,
        h=h,
        A=A_mat,
        b=b_eq,
        c=ecos_c,
        sense=sense,
        index_map=index_map,
    )
