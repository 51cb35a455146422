from typing import Callable, Optional, Union

import torch
from torch import Tensor


class Integrand:
    """Counting wrapper around a scalar integrand.

    Evaluates ``f`` at 0-d tensors and converts the result to a tensor of
    the working dtype. Non-finite samples are counted and discarded by
    ``evaluate`` and ``sample``.
    """

    def __init__(
        self,
        f: Callable[[Tensor], Union[Tensor, float]],
        dtype: torch.dtype,
        device: torch.device,
    ):
        self.f = f
        self.dtype = dtype
        self.device = device
        self.neval = 0
        self.nonfinite = 0

    def __call__(self, x: Tensor) -> Tensor:
        self.neval += 1
        return torch.as_tensor(self.f(x), dtype=self.dtype, device=self.device)

    def evaluate(self, x: Tensor) -> Optional[Tensor]:
        """Return ``f(x)``, or None if it is not finite."""
        y = self(x)
        if torch.isfinite(y):
            return y
        self.nonfinite += 1
        return None

    def sample(self, x: Tensor, previous: Optional[Tensor] = None) -> Tensor:
        """Return ``f(x)``, falling back to ``previous`` (or zero)."""
        y = self.evaluate(x)
        if y is not None:
            return y
        if previous is None:
            return self.zero()
        return previous

    def zero(self) -> Tensor:
        return torch.zeros((), dtype=self.dtype, device=self.device)
