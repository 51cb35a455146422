"""Level-doubling double-exponential quadrature engine."""

import logging
import warnings
from typing import Tuple

import torch
from torch import Tensor

from torchdequad.quadrature._exceptions import QuadratureWarning
from torchdequad.quadrature._integrand import Integrand
from torchdequad.quadrature._mode import Mode, TransformParams
from torchdequad.quadrature._precision import PrecisionProfile

logger = logging.getLogger(__name__)

# Sweep cap at level 0; doubled at every level. A sweep at level k
# naturally ends after roughly 3.5 * 2**k steps.
_SWEEP_LIMIT = 32


def _tanh_sinh_sweep(
    f: Integrand,
    params: TransformParams,
    t: Tensor,
    eh: Tensor,
    eps: float,
    limit: int,
) -> Tuple[Tensor, bool]:
    a, b, d = params.a, params.b, params.d

    p = f.zero()
    fp = f.zero()
    fm = f.zero()

    for _ in range(limit):
        u = torch.exp(1 / t - t)  # 1 / exp(sinh(j*h))**2
        r = 2 * u / (1 + u)  # 1 - tanh(sinh(j*h))
        w = (t + 1 / t) * r / (1 + u)  # cosh(j*h) / cosh(sinh(j*h))**2
        x = d * r

        # at the endpoints to machine precision, reuse the last sample
        if a + x > a:
            fp = f.sample(a + x, fp)
        if b - x < b:
            fm = f.sample(b - x, fm)

        q = w * (fp + fm)
        p = p + q
        t = t * eh

        if not torch.abs(q) > eps * torch.abs(p):
            return p, False

    return p, True


def _sinh_sweep(
    f: Integrand,
    params: TransformParams,
    t: Tensor,
    eh: Tensor,
    eps: float,
    limit: int,
) -> Tuple[Tensor, bool]:
    c, d = params.c, params.d
    exp_sinh = params.mode is Mode.EXP_SINH

    p = f.zero()
    t = t / 2

    for _ in range(limit):
        r = torch.exp(t - 0.25 / t)  # exp(sinh(j*h))
        w = r
        q = f.zero()

        if exp_sinh:
            x = c + d / r
            if x == c:
                # reached the finite endpoint
                return p, False
            y = f.evaluate(x)
            if y is not None:
                q = q + y / w
        else:
            r = (r - 1 / r) / 2  # sinh(sinh(j*h))
            w = (w + 1 / w) / 2  # cosh(sinh(j*h))
            y = f.evaluate(c - d * r)
            if y is not None:
                q = q + y * w

        y = f.evaluate(c + d * r)
        if y is not None:
            q = q + y * w

        q = q * (t + 0.25 / t)  # cosh(j*h)
        p = p + q
        t = t * eh

        if not torch.abs(q) > eps * torch.abs(p):
            return p, False

    return p, True


def double_exponential(
    f: Integrand,
    params: TransformParams,
    *,
    n: int,
    eps: float,
    precision: PrecisionProfile,
) -> Tuple[Tensor, Tensor, dict]:
    """
    Run the level-doubling refinement for an already selected transform.

    Level ``k`` halves the step ``h`` and adds the samples at the odd
    multiples of the new step. Levels stop once the change between
    successive estimates drops below ``fudge1 * eps`` relative to the
    running sum, or after level ``n``.

    Parameters
    ----------
    f : Integrand
        Wrapped integrand.
    params : TransformParams
        Output of :func:`select_transform`.
    n : int
        Highest refinement level (at most ``n + 1`` levels are run).
    eps : float
        Relative tolerance.
    precision : PrecisionProfile
        Tolerance scaling.

    Returns
    -------
    value : Tensor
        Integral estimate.
    error : Tensor
        Estimated relative error.
    info : dict
        Diagnostics with keys ``"neval"``, ``"nlevels"``, ``"nonfinite"``,
        ``"converged"``, ``"mode"``, ``"offset"`` and ``"truncated"``.
    """
    tol = precision.fudge1 * eps

    if params.mode is Mode.TANH_SINH:
        sweep = _tanh_sinh_sweep
    elif params.mode in (Mode.EXP_SINH, Mode.SINH_SINH):
        sweep = _sinh_sweep
    else:
        raise ValueError(f"Unknown mode: {params.mode}")

    s = f.sample(params.v)
    h = 2.0
    k = 0
    truncated = 0

    while True:
        h /= 2
        eh = torch.exp(torch.tensor(h, dtype=f.dtype, device=f.device))
        t = eh
        if k > 0:
            # only odd multiples of h are new at this level
            eh = eh * eh

        p, capped = sweep(f, params, t, eh, eps, _SWEEP_LIMIT << k)
        if capped:
            truncated += 1
            warnings.warn(
                f"Sweep at level {k} stopped after {_SWEEP_LIMIT << k} "
                f"steps without its terms vanishing",
                QuadratureWarning,
            )

        v = s - p
        s = s + p
        k += 1

        logger.debug(
            "level %d: h=%g, sum=%.17g, delta=%.3g",
            k - 1,
            h,
            s.item(),
            v.item(),
        )

        if not (torch.abs(v) > tol * torch.abs(s) and k <= n):
            break

    error = (
        torch.abs(v) / (precision.fudge2 * torch.abs(s) + eps)
    ).detach()
    value = params.sign * params.d * s * h

    info = {
        "neval": f.neval,
        "nlevels": k,
        "nonfinite": f.nonfinite,
        "converged": bool(torch.abs(v) <= tol * torch.abs(s)),
        "mode": params.mode.value,
        "offset": params.d.item(),
        "truncated": truncated,
    }

    return value, error, info
