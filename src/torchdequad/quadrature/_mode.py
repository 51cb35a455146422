"""Transform selection from the integration bounds."""

import enum
import logging
from typing import NamedTuple

import torch
from torch import Tensor

from torchdequad.quadrature._exp_sinh_offset import exp_sinh_offset
from torchdequad.quadrature._integrand import Integrand

logger = logging.getLogger(__name__)


class Mode(enum.Enum):
    """Double-exponential transform family."""

    TANH_SINH = "tanh_sinh"  # [a, b]
    EXP_SINH = "exp_sinh"  # [a, inf) or (-inf, b]
    SINH_SINH = "sinh_sinh"  # (-inf, inf)


class TransformParams(NamedTuple):
    """Parameters of the selected transform.

    Parameters
    ----------
    mode : Mode
        Transform family.
    a, b : Tensor
        Ordered bounds (``a <= b``).
    c : Tensor
        Centre: midpoint for tanh-sinh, the finite endpoint for exp-sinh,
        zero for sinh-sinh.
    d : Tensor
        Half-width for tanh-sinh, signed offset for exp-sinh, one for
        sinh-sinh.
    sign : float
        Orientation applied to the final value.
    v : Tensor
        Abscissa of the initial centre sample.
    """

    mode: Mode
    a: Tensor
    b: Tensor
    c: Tensor
    d: Tensor
    sign: float
    v: Tensor


def select_transform(
    f: Integrand,
    a: Tensor,
    b: Tensor,
    eps: float,
    *,
    optimize_offset: bool = True,
) -> TransformParams:
    """
    Classify ``[a, b]`` and derive the transform parameters.

    Reversed bounds are swapped and recorded in ``sign``. A one-sided
    infinite interval uses exp-sinh anchored at its finite endpoint, with
    the offset chosen by :func:`exp_sinh_offset` unless ``optimize_offset``
    is false.
    """
    sign = 1.0
    if b < a:
        a, b = b, a
        sign = -1.0

    zero = torch.zeros((), dtype=a.dtype, device=a.device)
    one = torch.ones((), dtype=a.dtype, device=a.device)

    a_finite = bool(torch.isfinite(a))
    b_finite = bool(torch.isfinite(b))

    if a_finite and b_finite:
        mode = Mode.TANH_SINH
        c = (a + b) / 2
        d = (b - a) / 2
        v = c
    elif a_finite:
        mode = Mode.EXP_SINH
        offset = 1.0
        if optimize_offset:
            offset = exp_sinh_offset(f, a, eps, offset)
        c = a
        d = one * offset
        v = a + d
    elif b_finite:
        mode = Mode.EXP_SINH
        offset = -1.0
        if optimize_offset:
            offset = exp_sinh_offset(f, b, eps, offset)
        sign = -sign
        c = b
        d = one * offset
        v = b + d
    else:
        mode = Mode.SINH_SINH
        c = zero
        d = one
        v = zero

    logger.debug(
        "selected %s on [%g, %g] with c=%g, d=%g",
        mode.value,
        a.item(),
        b.item(),
        c.item(),
        d.item(),
    )

    return TransformParams(mode=mode, a=a, b=b, c=c, d=d, sign=sign, v=v)
