import math

import pytest
import torch

import torchdequad.quadrature._double_exponential as engine
from torchdequad.quadrature import (
    FAST,
    PRECISE,
    Integrand,
    QuadratureWarning,
    double_exponential,
    select_transform,
)


def _run(f, a, b, *, n=6, eps=1e-9, precision=PRECISE):
    integrand = Integrand(f, torch.float64, torch.device("cpu"))
    params = select_transform(
        integrand,
        torch.tensor(a, dtype=torch.float64),
        torch.tensor(b, dtype=torch.float64),
        eps,
    )
    return double_exponential(
        integrand, params, n=n, eps=eps, precision=precision
    )


class TestIntegrand:
    def test_sample_returns_finite_value(self):
        integrand = Integrand(torch.exp, torch.float64, torch.device("cpu"))

        y = integrand.sample(torch.tensor(0.0, dtype=torch.float64))

        assert y.item() == 1.0
        assert integrand.neval == 1
        assert integrand.nonfinite == 0

    def test_sample_carries_previous_value(self):
        integrand = Integrand(
            lambda x: torch.full_like(x, math.nan),
            torch.float64,
            torch.device("cpu"),
        )
        previous = torch.tensor(3.0, dtype=torch.float64)

        y = integrand.sample(torch.tensor(0.0, dtype=torch.float64), previous)

        assert y is previous
        assert integrand.nonfinite == 1

    def test_sample_without_previous_is_zero(self):
        integrand = Integrand(
            lambda x: 1 / torch.zeros_like(x),
            torch.float64,
            torch.device("cpu"),
        )

        y = integrand.sample(torch.tensor(0.0, dtype=torch.float64))

        assert y.item() == 0.0
        assert y.dtype == torch.float64

    def test_python_float_results_are_converted(self):
        integrand = Integrand(
            lambda x: math.cos(x), torch.float64, torch.device("cpu")
        )

        y = integrand(torch.tensor(0.0, dtype=torch.float64))

        assert isinstance(y, torch.Tensor)
        assert y.item() == 1.0

    def test_evaluate_discards_non_finite(self):
        integrand = Integrand(
            lambda x: torch.full_like(x, -math.inf),
            torch.float64,
            torch.device("cpu"),
        )

        assert integrand.evaluate(torch.tensor(1.0)) is None
        assert integrand.nonfinite == 1


class TestDoubleExponential:
    def test_info_keys(self):
        _, _, info = _run(torch.arccos, 0.0, 1.0)

        assert set(info) == {
            "neval",
            "nlevels",
            "nonfinite",
            "converged",
            "mode",
            "offset",
            "truncated",
        }
        assert info["mode"] == "tanh_sinh"
        assert info["offset"] == 0.5
        assert info["truncated"] == 0

    @pytest.mark.parametrize(
        "a, b, mode",
        [
            (0.0, 1.0, "tanh_sinh"),
            (0.0, math.inf, "exp_sinh"),
            (-math.inf, math.inf, "sinh_sinh"),
        ],
    )
    def test_mode_reported(self, a, b, mode):
        _, _, info = _run(lambda x: torch.exp(-(x**2)), a, b)

        assert info["mode"] == mode

    def test_level_cap(self):
        """At most n + 1 levels are run"""
        _, _, info = _run(torch.arccos, 0.0, 1.0, n=2, eps=1e-15)

        assert info["nlevels"] == 3
        assert not info["converged"]

    def test_negative_level_cap_runs_one_level(self):
        _, _, info = _run(torch.arccos, 0.0, 1.0, n=-1)

        assert info["nlevels"] == 1

    def test_error_estimate_is_non_negative(self):
        _, error, _ = _run(torch.arccos, 0.0, 1.0)

        assert error.item() >= 0.0

    def test_converged_error_within_tolerance(self):
        """Converged runs report err <= fudge1 * eps / fudge2"""
        eps = 1e-9
        _, error, info = _run(torch.arccos, 0.0, 1.0, eps=eps)

        assert info["converged"]
        assert error.item() <= PRECISE.fudge1 * eps

    def test_fast_profile_uses_no_more_levels(self):
        _, _, precise = _run(torch.arccos, 0.0, 1.0, precision=PRECISE)
        _, _, fast = _run(torch.arccos, 0.0, 1.0, precision=FAST)

        assert fast["nlevels"] <= precise["nlevels"]

    def test_odd_integrand_stops_after_first_level(self):
        """Symmetric sinh-sinh samples cancel exactly"""
        result, _, info = _run(
            lambda x: x * torch.exp(-(x**2)), -math.inf, math.inf
        )

        assert result.item() == 0.0
        assert info["nlevels"] == 1

    def test_non_finite_center_sample_is_zero(self):
        """sin(x)/x is 0/0 at the midpoint of [-1, 1]"""
        result, _, info = _run(lambda x: torch.sin(x) / x, -1.0, 1.0)

        assert info["nonfinite"] >= 1
        assert torch.isfinite(result)

    def test_sweep_cap_warns(self, monkeypatch):
        monkeypatch.setattr(engine, "_SWEEP_LIMIT", 1)

        with pytest.warns(QuadratureWarning, match="Sweep at level 0"):
            result, _, info = _run(torch.arccos, 0.0, 1.0, n=2)

        assert info["truncated"] >= 1
        assert torch.isfinite(result)

    def test_debug_logging(self, caplog):
        with caplog.at_level("DEBUG", logger="torchdequad"):
            _run(torch.arccos, 0.0, 1.0, n=2)

        messages = [record.getMessage() for record in caplog.records]
        assert any("level 0" in message for message in messages)
