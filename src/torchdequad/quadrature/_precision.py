"""Precision profiles for the level-doubling tolerance tests."""

from typing import Dict, NamedTuple, Union


class PrecisionProfile(NamedTuple):
    """Tolerance scaling for the outer refinement loop.

    Parameters
    ----------
    fudge1 : float
        Multiplier on ``eps`` for the level-termination test
        ``|v| <= fudge1 * eps * |s|``.
    fudge2 : float
        Multiplier on ``|s|`` in the relative error estimate
        ``|v| / (fudge2 * |s| + eps)``.
    """

    fudge1: float
    fudge2: float


PRECISE = PrecisionProfile(fudge1=10.0, fudge2=1.0)

# Fewer levels at a modest loss of accuracy.
FAST = PrecisionProfile(fudge1=160.0, fudge2=16.0)

PRECISION_PROFILES: Dict[str, PrecisionProfile] = {
    "precise": PRECISE,
    "fast": FAST,
}


def resolve_precision(
    precision: Union[str, PrecisionProfile],
) -> PrecisionProfile:
    """Return the profile named by ``precision`` or validate a given one."""
    if isinstance(precision, str):
        key = precision.lower()
        if key not in PRECISION_PROFILES:
            raise ValueError(
                f"Unknown precision: {precision!r}. "
                f"Expected one of {sorted(PRECISION_PROFILES)}"
            )
        return PRECISION_PROFILES[key]

    if not isinstance(precision, PrecisionProfile):
        raise TypeError(
            f"precision must be a str or PrecisionProfile, "
            f"got {type(precision).__name__}"
        )

    if precision.fudge1 <= 0 or precision.fudge2 <= 0:
        raise ValueError(
            f"fudge factors must be positive, got {tuple(precision)}"
        )

    return precision
