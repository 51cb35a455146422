"""Double-exponential quadrature over finite and infinite intervals."""

import math
import operator
import warnings
from typing import Callable, Tuple, Union

import torch
from torch import Tensor

from torchdequad.quadrature._double_exponential import double_exponential
from torchdequad.quadrature._exceptions import QuadratureWarning
from torchdequad.quadrature._integrand import Integrand
from torchdequad.quadrature._mode import select_transform
from torchdequad.quadrature._precision import (
    PrecisionProfile,
    resolve_precision,
)


def quad(
    f: Callable[[Tensor], Union[Tensor, float]],
    a: Union[float, Tensor],
    b: Union[float, Tensor],
    *,
    n: int = 6,
    eps: float = 1e-9,
    precision: Union[str, PrecisionProfile] = "precise",
    optimize_offset: bool = True,
) -> Tensor:
    """
    Compute a definite integral using double-exponential quadrature.

    Selects tanh-sinh for finite ``[a, b]``, exp-sinh when exactly one
    bound is infinite and sinh-sinh when both are, then refines by halving
    the step until successive levels agree to ``eps`` or ``n`` is reached.

    Parameters
    ----------
    f : callable
        Integrand. Receives a 0-d tensor and returns a 0-d tensor or a
        number. Non-finite values are discarded.
    a, b : float or Tensor
        Integration bounds (scalars only). Either may be infinite and
        ``a`` may exceed ``b``.
    n : int
        Highest refinement level. Values from 2 to 7 are typical; 6 is the
        default.
    eps : float
        Relative error tolerance. Must be positive.
    precision : str or PrecisionProfile
        ``"precise"`` or ``"fast"``, or a custom profile.
    optimize_offset : bool
        Search for a better exp-sinh offset on one-sided infinite
        intervals.

    Returns
    -------
    Tensor
        Integral approximation. Non-finite for divergent integrals.

    Warns
    -----
    QuadratureWarning
        If the last two levels did not agree to the requested tolerance.

    Notes
    -----
    Differentiable with respect to parameters captured in f's closure.
    Gradients through the integration limits are not supported.

    Examples
    --------
    >>> quad(torch.arccos, 0, 1)  # approximately 1.0
    >>> quad(lambda x: torch.exp(-x / 5), 0, math.inf)  # approximately 5.0
    >>> quad(lambda x: torch.cosh(x) ** -2, -math.inf, math.inf)  # 2.0
    """
    result, error, info = quad_info(
        f,
        a,
        b,
        n=n,
        eps=eps,
        precision=precision,
        optimize_offset=optimize_offset,
    )

    _warn_unconverged(error, info)

    return result


def quad_info(
    f: Callable[[Tensor], Union[Tensor, float]],
    a: Union[float, Tensor],
    b: Union[float, Tensor],
    *,
    n: int = 6,
    eps: float = 1e-9,
    precision: Union[str, PrecisionProfile] = "precise",
    optimize_offset: bool = True,
) -> Tuple[Tensor, Tensor, dict]:
    """
    Like quad, but returns the error estimate and an info dict.

    Returns
    -------
    result : Tensor
        Integral approximation.
    error : Tensor
        Estimated relative error.
    info : dict
        Information dict with keys:
        - "neval": Number of function evaluations
        - "nlevels": Number of refinement levels performed
        - "nonfinite": Number of discarded non-finite samples
        - "converged": Whether tolerance was achieved
        - "mode": "tanh_sinh", "exp_sinh" or "sinh_sinh"
        - "offset": Transform scale/offset d
        - "truncated": Number of sweeps stopped by the iteration cap
    """
    n, eps, profile = _check_arguments(n, eps, precision)
    integrand, a_tensor, b_tensor = _prepare(f, a, b)

    params = select_transform(
        integrand,
        a_tensor,
        b_tensor,
        eps,
        optimize_offset=optimize_offset,
    )

    return double_exponential(
        integrand, params, n=n, eps=eps, precision=profile
    )


def tanh_sinh(
    f: Callable[[Tensor], Union[Tensor, float]],
    a: Union[float, Tensor],
    b: Union[float, Tensor],
    *,
    n: int = 6,
    eps: float = 1e-9,
    precision: Union[str, PrecisionProfile] = "precise",
) -> Tensor:
    """
    Compute a definite integral over a finite interval using tanh-sinh.

    Handles integrable endpoint singularities such as ``log(x)`` or
    ``1/sqrt(x)`` at ``x = 0``.

    Raises
    ------
    ValueError
        If either bound is infinite.

    Examples
    --------
    >>> tanh_sinh(lambda x: 1 / torch.sqrt(x), 0, 1)  # approximately 2.0
    """
    n, eps, profile = _check_arguments(n, eps, precision)
    integrand, a_tensor, b_tensor = _prepare(f, a, b)

    if not (torch.isfinite(a_tensor) and torch.isfinite(b_tensor)):
        raise ValueError(
            f"tanh_sinh requires finite bounds, got [{a_tensor.item()}, "
            f"{b_tensor.item()}]. Use quad for infinite intervals"
        )

    params = select_transform(integrand, a_tensor, b_tensor, eps)

    result, error, info = double_exponential(
        integrand, params, n=n, eps=eps, precision=profile
    )
    _warn_unconverged(error, info)

    return result


def _check_arguments(
    n: int,
    eps: float,
    precision: Union[str, PrecisionProfile],
) -> Tuple[int, float, PrecisionProfile]:
    if isinstance(n, bool):
        raise TypeError(f"n must be an integer, got {n!r}")
    n = operator.index(n)

    eps = float(eps)
    if not math.isfinite(eps) or eps <= 0:
        raise ValueError(f"eps must be positive and finite, got {eps}")

    return n, eps, resolve_precision(precision)


def _prepare(
    f: Callable[[Tensor], Union[Tensor, float]],
    a: Union[float, Tensor],
    b: Union[float, Tensor],
) -> Tuple[Integrand, Tensor, Tensor]:
    # Infer dtype and device
    if isinstance(a, Tensor):
        dtype = a.dtype
        device = a.device
    elif isinstance(b, Tensor):
        dtype = b.dtype
        device = b.device
    else:
        dtype = torch.float64
        device = torch.device("cpu")

    if not dtype.is_floating_point:
        dtype = torch.float64

    a_val = float(a.detach().item()) if isinstance(a, Tensor) else float(a)
    b_val = float(b.detach().item()) if isinstance(b, Tensor) else float(b)

    if math.isnan(a_val) or math.isnan(b_val):
        raise ValueError(f"Bounds must not be NaN, got [{a_val}, {b_val}]")

    a_tensor = torch.tensor(a_val, dtype=dtype, device=device)
    b_tensor = torch.tensor(b_val, dtype=dtype, device=device)

    return Integrand(f, dtype, device), a_tensor, b_tensor


def _warn_unconverged(error: Tensor, info: dict) -> None:
    if not info["converged"]:
        warnings.warn(
            f"Quadrature did not converge after {info['nlevels']} levels. "
            f"Relative error estimate: {error.item():.2e}",
            QuadratureWarning,
        )
