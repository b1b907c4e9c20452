"""
Geometric Brownian Motion (GBM) account-value returns.

Produces periodic risk-neutral returns for the separate account backing a
GLWB rider:
- Exact log-normal step returns
- Seedable from an int or a numpy SeedSequence (per-path sub-streams)
- Antithetic variates for batch generation

[T1] GBM SDE: dS = (r - q)S dt + σS dW
[T1] Step return: R = exp((r - q - σ²/2)dt + σ√dt * Z) - 1

See: Glasserman (2003) "Monte Carlo Methods in Financial Engineering"
"""

from dataclasses import dataclass
from typing import Protocol

import numpy as np

SeedLike = int | np.random.SeedSequence | None


class MarketPathGenerator(Protocol):
    """Protocol for market return generators."""

    def generate(
        self,
        rate: float,
        volatility: float,
        dt: float,
        n_steps: int,
        seed: SeedLike,
    ) -> np.ndarray:
        """Return ``n_steps`` periodic simple returns."""
        ...


@dataclass(frozen=True)
class GBMParams:
    """
    Parameters for GBM return simulation.

    Attributes
    ----------
    rate : float
        Risk-free rate (annualized, decimal)
    volatility : float
        Volatility (annualized, decimal)
    dividend : float
        Dividend yield / fund drag (annualized, decimal)
    """

    rate: float
    volatility: float
    dividend: float = 0.0

    def __post_init__(self) -> None:
        """Validate parameters."""
        if self.volatility < 0:
            raise ValueError(f"CRITICAL: volatility must be >= 0, got {self.volatility}")
        if self.dividend < 0:
            raise ValueError(f"CRITICAL: dividend must be >= 0, got {self.dividend}")

    @property
    def drift(self) -> float:
        """Risk-neutral log drift: r - q - σ²/2."""
        return self.rate - self.dividend - 0.5 * self.volatility**2


def _validate_grid(dt: float, n_steps: int) -> None:
    if dt <= 0:
        raise ValueError(f"CRITICAL: dt must be > 0, got {dt}")
    if n_steps < 0:
        raise ValueError(f"CRITICAL: n_steps must be >= 0, got {n_steps}")


def generate_gbm_returns(
    params: GBMParams,
    dt: float,
    n_steps: int,
    seed: SeedLike = None,
) -> np.ndarray:
    """
    Generate one sequence of periodic GBM returns.

    Parameters
    ----------
    params : GBMParams
        Rate, volatility and dividend
    dt : float
        Step size in years
    n_steps : int
        Number of steps
    seed : int or SeedSequence, optional
        Seed for ``np.random.default_rng``

    Returns
    -------
    np.ndarray
        Simple returns, shape (n_steps,). Always > -1.

    Examples
    --------
    >>> returns = generate_gbm_returns(GBMParams(rate=0.04, volatility=0.15), 1.0, 30, seed=42)
    >>> returns.shape
    (30,)
    """
    _validate_grid(dt, n_steps)
    rng = np.random.default_rng(seed)
    z = rng.standard_normal(n_steps)
    log_returns = params.drift * dt + params.volatility * np.sqrt(dt) * z
    return np.expm1(log_returns)


def generate_return_matrix(
    params: GBMParams,
    dt: float,
    n_paths: int,
    n_steps: int,
    seed: SeedLike = None,
    antithetic: bool = False,
) -> np.ndarray:
    """
    Generate a batch of GBM return sequences.

    Parameters
    ----------
    params : GBMParams
        Rate, volatility and dividend
    dt : float
        Step size in years
    n_paths : int
        Number of sequences
    n_steps : int
        Steps per sequence
    seed : int or SeedSequence, optional
        Seed for ``np.random.default_rng``
    antithetic : bool, default False
        Pair every normal draw Z with -Z (n_paths must be even)

    Returns
    -------
    np.ndarray
        Simple returns, shape (n_paths, n_steps)
    """
    _validate_grid(dt, n_steps)
    if n_paths <= 0:
        raise ValueError(f"CRITICAL: n_paths must be > 0, got {n_paths}")
    if antithetic and n_paths % 2 != 0:
        raise ValueError(f"CRITICAL: n_paths must be even for antithetic, got {n_paths}")

    rng = np.random.default_rng(seed)

    if antithetic:
        half = rng.standard_normal((n_paths // 2, n_steps))
        z = np.concatenate([half, -half], axis=0)
    else:
        z = rng.standard_normal((n_paths, n_steps))

    log_returns = params.drift * dt + params.volatility * np.sqrt(dt) * z
    return np.expm1(log_returns)


class GBMReturnGenerator:
    """
    Default market path generator for the GLWB simulator.

    Parameters
    ----------
    dividend : float
        Fund drag applied to every generated sequence
    """

    def __init__(self, dividend: float = 0.0):
        if dividend < 0:
            raise ValueError(f"CRITICAL: dividend must be >= 0, got {dividend}")
        self.dividend = dividend

    def generate(
        self,
        rate: float,
        volatility: float,
        dt: float,
        n_steps: int,
        seed: SeedLike,
    ) -> np.ndarray:
        """Return ``n_steps`` periodic GBM returns for one path."""
        params = GBMParams(rate=rate, volatility=volatility, dividend=self.dividend)
        return generate_gbm_returns(params, dt, n_steps, seed)
