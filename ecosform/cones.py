"""
Cone kinds and the validator that runs before any reformulation.

A cone list is a list of ``(cone, indices)`` tuples, the same layout the
conic interface uses for both variables and constraint rows::

    var_cones = [(Cone.NON_NEG, [0, 1]), (Cone.SOC, [2, 3, 4])]
    constr_cones = [(Cone.ZERO, [0]), (Cone.NON_NEG, [1, 2])]

Only Free, Zero, NonNeg, NonPos and SOC have an ECOS representation; the
other kinds exist so that they can be named in an error.
"""

from __future__ import annotations

import logging
import operator
from enum import IntEnum

from ecosform.errors import IndexOutOfRange, UnsupportedCone, UnsupportedConstraint


logger = logging.getLogger(__name__)


class Cone(IntEnum):
    """Cone types for cone constraints."""
    ZERO = 0         # { x : x = 0 }
    NON_NEG = 1      # { x : x >= 0 }
    NON_POS = 2      # { x : x <= 0 }
    SOC = 3          # { (p, x) : ||x||_2 <= p }
    SDP = 4          # { X : X >= 0 } (PSD matrix)
    EXP_PRIMAL = 5   # { (x, y, z) : y > 0, y e^(x/y) <= z }
    EXP_DUAL = 6     # { (u, v, w) : u < 0, -u e^(v/u) <= ew }
    FREE = 7         # R^n
    SOC_ROTATED = 8  # { (p, q, x) : ||x||_2^2 <= 2pq, p, q >= 0 }

    @classmethod
    def parse(cls, cone) -> "Cone":
        """
        Convert a cone given as a member, an integer or a name.

        Names are matched case-insensitively with underscores and a leading
        colon ignored, so ``"NonNeg"``, ``"NON_NEG"`` and ``":NonNeg"`` are
        all ``Cone.NON_NEG``.
        """
        if isinstance(cone, cls):
            return cone
        if isinstance(cone, str):
            key = cone.strip().lstrip(':').replace('_', '').lower()
            try:
                return _CONE_NAMES[key]
            except KeyError:
                raise UnsupportedCone(cone) from None
        try:
            return cls(int(cone))
        except (TypeError, ValueError):
            raise UnsupportedCone(cone) from None


_CONE_NAMES = {
    'zero': Cone.ZERO,
    'nonneg': Cone.NON_NEG,
    'nonpos': Cone.NON_POS,
    'soc': Cone.SOC,
    'sdp': Cone.SDP,
    'psd': Cone.SDP,
    'expprimal': Cone.EXP_PRIMAL,
    'expdual': Cone.EXP_DUAL,
    'free': Cone.FREE,
    'socrotated': Cone.SOC_ROTATED,
}

SUPPORTED_CONES = frozenset({
    Cone.FREE,
    Cone.ZERO,
    Cone.NON_NEG,
    Cone.NON_POS,
    Cone.SOC,
})


class Sense(IntEnum):
    """Objective sense. ECOS always minimizes."""
    MINIMIZE = 1
    MAXIMIZE = -1

    @classmethod
    def parse(cls, sense) -> "Sense":
        if isinstance(sense, cls):
            return sense
        s = str(sense or "").strip().lstrip(':').lower()
        if s in {"min", "minimize"}:
            return cls.MINIMIZE
        if s in {"max", "maximize"}:
            return cls.MAXIMIZE
        raise ValueError(f"Unknown objective sense: {sense!r}")


def _as_index(i):
    try:
        return operator.index(i)
    except TypeError:
        pass
    # Integral floats such as 2.0 are accepted, 1.7 is not
    try:
        value = float(i)
    except (TypeError, ValueError):
        raise IndexOutOfRange(f"Index {i!r} is not an integer") from None
    if not value.is_integer():
        raise IndexOutOfRange(f"Index {i!r} is not an integer")
    return int(value)


def normalize_cones(cones):
    """Return ``cones`` as a list of ``(Cone, list of int)`` tuples."""
    return [(Cone.parse(cone), [_as_index(i) for i in indices])
            for cone, indices in cones]


def validate_cones(constr_cones, var_cones):
    """
    Check both cone lists before anything is built.

    Parameters
    ----------
    constr_cones : list of (cone, indices)
        Cones for the constraint rows ``b - A*x``.
    var_cones : list of (cone, indices)
        Cones for the variables ``x``.

    Returns
    -------
    tuple of list
        Both lists with every cone parsed into a ``Cone`` member and every
        index as an ``int``.

    Raises
    ------
    UnsupportedCone
        If any entry uses a kind without an ECOS representation.
    UnsupportedConstraint
        If a constraint entry is tagged Free.
    IndexOutOfRange
        If an index is not an integer or an SOC entry lists no indices.
    """
    constr_cones = [(Cone.parse(cone), idxs) for cone, idxs in constr_cones]
    var_cones = [(Cone.parse(cone), idxs) for cone, idxs in var_cones]

    for cone, _ in constr_cones + var_cones:
        if cone not in SUPPORTED_CONES:
            raise UnsupportedCone(cone)

    for cone, idxs in constr_cones:
        if cone is Cone.FREE:
            raise UnsupportedConstraint(
                f"Free cone constraints not handled (rows {list(idxs)})")

    constr_cones = normalize_cones(constr_cones)
    var_cones = normalize_cones(var_cones)

    # ECOS needs every second-order cone to have at least one row
    for cone, idxs in constr_cones + var_cones:
        if cone is Cone.SOC and not idxs:
            raise IndexOutOfRange("Second-order cone with an empty index set")

    logger.debug("Validated %d constraint cones and %d variable cones",
                 len(constr_cones), len(var_cones))
    return constr_cones, var_cones
