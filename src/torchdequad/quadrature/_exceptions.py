"""Warnings for double-exponential quadrature."""


class QuadratureWarning(UserWarning):
    """Warning for quadrature issues (e.g., unmet tolerance)."""

    pass
