"""Offset search for the exp-sinh transform near a finite endpoint."""

import logging
from typing import Callable, Union

import torch
from torch import Tensor

from torchdequad.quadrature._integrand import Integrand

logger = logging.getLogger(__name__)

# |h2| at or below this (about 2**-16) means the default offset is adequate.
_PROBE_THRESHOLD = 1e-5

# Exponent half-width of the search; r ranges over 2**2 .. 2**33.
_SEARCH_WIDTH = 32


def exp_sinh_offset(
    f: Callable[[Tensor], Union[Tensor, float]],
    a: Union[float, Tensor],
    eps: float,
    d: float,
) -> float:
    """
    Choose the exp-sinh offset ``d`` for an integral over ``[a, a + d*inf)``.

    The exp-sinh rule samples ``f`` at ``a + d/r`` and ``a + d*r``. When the
    integrand varies rapidly near ``a`` or decays on a scale far from
    ``|d|``, the default offset wastes levels or overflows. The search
    compares ``f(a + d/r)`` with ``r**2 * f(a + d*r)`` over ``r = 2**k`` and
    bisects on ``k`` for the point where the two sides balance.

    Parameters
    ----------
    f : callable
        Integrand.
    a : float or Tensor
        Finite endpoint.
    eps : float
        Relative tolerance. A search whose accumulated ``|h|`` does not
        exceed ``eps`` is treated as noise.
    d : float
        Initial signed offset, ``1`` for ``[a, inf)`` and ``-1`` for
        ``(-inf, a]``.

    Returns
    -------
    float
        Adjusted offset with the sign of ``d``. Returns ``d`` unchanged when
        no significant sign change of ``h`` is found.

    Examples
    --------
    >>> exp_sinh_offset(lambda x: torch.exp(-x / 1000), 0.0, 1e-9, 1.0)
    16384.0
    """
    if not isinstance(f, Integrand):
        if isinstance(a, Tensor):
            f = Integrand(f, a.dtype, a.device)
        else:
            f = Integrand(f, torch.float64, torch.device("cpu"))

    a = torch.as_tensor(a, dtype=f.dtype, device=f.device)

    with torch.no_grad():
        return _search(f, a, eps, d)


def _search(f: Integrand, a: Tensor, eps: float, d: float) -> float:
    h2 = f(a + d / 2) - f(a + d * 2) * 4
    if not torch.isfinite(h2) or torch.abs(h2) <= _PROBE_THRESHOLD:
        return d

    i, j = 1, _SEARCH_WIDTH

    # largest j for which both sides are finite
    while True:
        j //= 2
        r = float(1 << (i + j))
        fl = f(a + d / r)
        fr = f(a + d * r) * r * r
        h = fl - fr
        if j <= 1 or torch.isfinite(h):
            break

    if j <= 1 or not torch.isfinite(h):
        return d
    if torch.sign(h) == torch.sign(h2):
        return d

    last_fl, last_fr, last_r = fl, fr, 2.0
    s = 0.0

    while j > 1:
        j //= 2
        r = float(1 << (i + j))
        fl = f(a + d / r)
        fr = f(a + d * r) * r * r
        h = fl - fr
        if not torch.isfinite(h):
            continue

        s += torch.abs(h).item()
        if torch.sign(h) == torch.sign(h2):
            i += j
        else:
            last_fl, last_fr, last_r = fl, fr, r

    if s <= eps:
        return d

    r = last_r
    if last_fl - last_fr != 0:
        r /= 2

    if torch.abs(last_fl) < torch.abs(last_fr):
        adjusted = d / r
    else:
        adjusted = d * r

    logger.debug(
        "exp-sinh offset at %g moved from %g to %g", a.item(), d, adjusted
    )

    return adjusted
