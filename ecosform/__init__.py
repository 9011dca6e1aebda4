"""
ecosform - Cone and linear problems in ECOS form

Reformulates problems into the input of the ECOS second-order-cone solver:

    minimize    c^T x
    subject to  A x = b
                h - G x ∈ K

Example usage:
    from ecosform import Cone, load_conic_problem, solve_canonical

    # minimize y  s.t.  (y, x) ∈ SOC, x = 1
    form = load_conic_problem(c=[1, 0], A=[[0, 1]], b=[1],
                              constr_cones=[(Cone.ZERO, [0])],
                              var_cones=[(Cone.SOC, [0, 1])])
    result = solve_canonical(form)

    # Linear problem with row and column bounds
    from ecosform import EcosModel
    model = EcosModel()
    model.load_problem(A, collb, colub, obj, rowlb, rowub, "max")
    model.optimize()
"""

from __future__ import annotations

import logging


__version__ = "0.1.0"

from ecosform.canonical import CanonicalForm
from ecosform.cone_convert import dims_to_cones, load_conic_problem
from ecosform.cones import Cone, Sense, validate_cones
from ecosform.errors import (
    EcosFormError,
    IndexOutOfRange,
    MismatchedLength,
    UnsupportedCone,
    UnsupportedConstraint,
)
from ecosform.linear import load_linear_problem
from ecosform.reorder import IndexMap, build_index_map, restore_solution
from ecosform.solver import EcosModel, SolveResult, Status, solve_canonical


logging.getLogger(__name__).addHandler(logging.NullHandler())


__all__ = [
    "__version__",
    # Problem data
    "CanonicalForm",
    "Cone",
    "IndexMap",
    "Sense",
    # Reformulation
    "build_index_map",
    "dims_to_cones",
    "load_conic_problem",
    "load_linear_problem",
    "restore_solution",
    "validate_cones",
    # Solving
    "EcosModel",
    "SolveResult",
    "Status",
    "solve_canonical",
    # Errors
    "EcosFormError",
    "IndexOutOfRange",
    "MismatchedLength",
    "UnsupportedCone",
    "UnsupportedConstraint",
]
