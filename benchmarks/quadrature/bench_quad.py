"""Benchmarks for double-exponential quadrature.

Compares the precise and fast precision profiles and the exp-sinh offset
search on the three transform families.
"""

from __future__ import annotations

import math
import time
from typing import Any, Callable

import numpy as np
import torch

from torchdequad.quadrature import quad_info


def benchmark(
    func: Callable,
    *args: Any,
    warmup: int = 3,
    iterations: int = 10,
    **kwargs: Any,
) -> dict[str, float]:
    """Run a simple benchmark on a function.

    Returns
    -------
    dict
        Dictionary with timing statistics:
        - 'mean': Mean time in seconds
        - 'std': Standard deviation in seconds
        - 'min': Minimum time in seconds
        - 'max': Maximum time in seconds
    """
    for _ in range(warmup):
        func(*args, **kwargs)

    times = []
    for _ in range(iterations):
        start = time.perf_counter()
        func(*args, **kwargs)
        times.append(time.perf_counter() - start)

    return {
        "mean": np.mean(times),
        "std": np.std(times),
        "min": np.min(times),
        "max": np.max(times),
    }


def format_time(seconds: float) -> str:
    """Format time in appropriate units."""
    if seconds < 1e-3:
        return f"{seconds * 1e6:.3f}us"
    elif seconds < 1:
        return f"{seconds * 1e3:.3f}ms"
    else:
        return f"{seconds:.3f}s"


CASES = {
    "arccos on [0, 1]": (torch.arccos, 0.0, 1.0, 1.0),
    "exp(-x/5) on [0, inf)": (
        lambda x: torch.exp(-x / 5),
        0.0,
        math.inf,
        5.0,
    ),
    "sech^2 on (-inf, inf)": (
        lambda x: torch.cosh(x) ** -2,
        -math.inf,
        math.inf,
        2.0,
    ),
    "exp(-x/1000) on [0, inf)": (
        lambda x: torch.exp(-x / 1000),
        0.0,
        math.inf,
        1000.0,
    ),
}


class BenchQuad:
    """Benchmarks for quad_info."""

    def __init__(self, warmup: int = 3, iterations: int = 10):
        self.warmup = warmup
        self.iterations = iterations

    def _report(self, name: str, **kwargs: Any) -> None:
        f, a, b, exact = CASES[name]
        result, error, info = quad_info(f, a, b, **kwargs)
        times = benchmark(
            quad_info,
            f,
            a,
            b,
            warmup=self.warmup,
            iterations=self.iterations,
            **kwargs,
        )
        options = ", ".join(f"{k}={v}" for k, v in kwargs.items())
        print(
            f"  {options or 'defaults'}: "
            f"{format_time(times['mean'])} +/- {format_time(times['std'])}, "
            f"levels={info['nlevels']}, neval={info['neval']}, "
            f"err={error.item():.1e}, "
            f"actual={abs(result.item() - exact) / abs(exact):.1e}"
        )

    def run_all(self) -> None:
        for name in CASES:
            print(f"\n{name}")
            print("-" * len(name))
            self._report(name, precision="precise")
            self._report(name, precision="fast")
            if math.isinf(CASES[name][2]) and not math.isinf(CASES[name][1]):
                self._report(name, optimize_offset=False)


if __name__ == "__main__":
    bench = BenchQuad(warmup=3, iterations=10)
    bench.run_all()
