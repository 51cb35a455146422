"""
Double-exponential quadrature module.

Function-based integration (evaluates callable):
    quad, quad_info, tanh_sinh

Transform selection:
    Mode, TransformParams, select_transform, exp_sinh_offset

Precision profiles:
    PrecisionProfile, PRECISE, FAST

Exceptions:
    QuadratureWarning
"""

from torchdequad.quadrature._double_exponential import double_exponential
from torchdequad.quadrature._exceptions import QuadratureWarning
from torchdequad.quadrature._exp_sinh_offset import exp_sinh_offset
from torchdequad.quadrature._integrand import Integrand
from torchdequad.quadrature._mode import (
    Mode,
    TransformParams,
    select_transform,
)
from torchdequad.quadrature._precision import (
    FAST,
    PRECISE,
    PRECISION_PROFILES,
    PrecisionProfile,
    resolve_precision,
)
from torchdequad.quadrature._quad import quad, quad_info, tanh_sinh

__all__ = [
    # Function-based
    "quad",
    "quad_info",
    "tanh_sinh",
    # Engine
    "double_exponential",
    "Integrand",
    # Transform selection
    "Mode",
    "TransformParams",
    "select_transform",
    "exp_sinh_offset",
    # Precision profiles
    "PrecisionProfile",
    "PRECISE",
    "FAST",
    "PRECISION_PROFILES",
    "resolve_precision",
    # Exceptions
    "QuadratureWarning",
]
