"""
Distributional checks on simulated GBM returns.

[T1] log(1 + R) ~ N((r - q - σ²/2)dt, σ²dt)
[T1] Risk-neutral martingale: E[1 + R] = exp((r - q)dt)
"""

import numpy as np
import pytest
from scipy import stats

from glwb_pricing.config.tolerances import GBM_MOMENT_TOLERANCE
from glwb_pricing.simulation.gbm import GBMParams, generate_return_matrix

N_PATHS = 50_000


@pytest.fixture(scope="module")
def params() -> GBMParams:
    return GBMParams(rate=0.04, volatility=0.20, dividend=0.01)


@pytest.fixture(scope="module")
def annual_returns(params: GBMParams) -> np.ndarray:
    return generate_return_matrix(params, 1.0, N_PATHS, 1, seed=2024)[:, 0]


class TestLogReturnMoments:
    def test_mean(self, params: GBMParams, annual_returns: np.ndarray) -> None:
        assert np.mean(np.log1p(annual_returns)) == pytest.approx(params.drift, abs=GBM_MOMENT_TOLERANCE)

    def test_std(self, params: GBMParams, annual_returns: np.ndarray) -> None:
        assert np.std(np.log1p(annual_returns), ddof=1) == pytest.approx(
            params.volatility, abs=GBM_MOMENT_TOLERANCE
        )

    def test_monthly_std_scales_with_sqrt_dt(self, params: GBMParams) -> None:
        dt = 1 / 12
        returns = generate_return_matrix(params, dt, N_PATHS, 1, seed=5)[:, 0]

        assert np.std(np.log1p(returns), ddof=1) == pytest.approx(
            params.volatility * np.sqrt(dt), abs=GBM_MOMENT_TOLERANCE
        )


class TestRiskNeutrality:
    def test_martingale(self, params: GBMParams, annual_returns: np.ndarray) -> None:
        expected = np.exp(params.rate - params.dividend)
        assert np.mean(1.0 + annual_returns) == pytest.approx(expected, abs=GBM_MOMENT_TOLERANCE)

    def test_antithetic_reduces_mean_error(self, params: GBMParams) -> None:
        plain = generate_return_matrix(params, 1.0, 2_000, 1, seed=11)
        anti = generate_return_matrix(params, 1.0, 2_000, 1, seed=11, antithetic=True)

        # Antithetic log-returns average exactly to the drift
        assert np.mean(np.log1p(anti)) == pytest.approx(params.drift, abs=1e-12)
        assert abs(np.mean(np.log1p(anti)) - params.drift) <= abs(np.mean(np.log1p(plain)) - params.drift)


class TestNormality:
    def test_log_returns_are_normal(self, params: GBMParams, annual_returns: np.ndarray) -> None:
        z = (np.log1p(annual_returns) - params.drift) / params.volatility
        _, p_value = stats.kstest(z, "norm")
        assert p_value > 1e-3

    def test_skewness_near_zero(self, annual_returns: np.ndarray) -> None:
        assert abs(stats.skew(np.log1p(annual_returns))) < 0.05
