"""torchdequad: double-exponential quadrature for PyTorch."""

import logging

from . import quadrature
from .quadrature import quad, quad_info, tanh_sinh

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "quad",
    "quad_info",
    "quadrature",
    "tanh_sinh",
]

__version__ = "0.1.0"
