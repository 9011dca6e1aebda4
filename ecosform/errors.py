"""
Exceptions raised while formulating a problem for ECOS.

All of them are detected while a problem is being loaded; nothing is
returned when one is raised. A solver that cannot find a solution reports a
status instead of raising.
"""


class EcosFormError(ValueError):
    """Base class for formulation errors."""
    pass


class MismatchedLength(EcosFormError):
    """Dimensions of two inputs disagree."""
    pass


class UnsupportedConstraint(EcosFormError):
    """Constraint that has no representation in ECOS form (ranged or free)."""
    pass


class UnsupportedCone(EcosFormError):
    """Cone kind outside Free, Zero, NonNeg, NonPos and SOC."""

    def __init__(self, cone, message=None):
        self.cone = cone
        if message is None:
            name = getattr(cone, 'name', None) or repr(cone)
            message = f"Cone type {name} not supported"
        super().__init__(message)


class IndexOutOfRange(EcosFormError):
    """Cone index set references a missing, repeated or out-of-bounds index."""
    pass
