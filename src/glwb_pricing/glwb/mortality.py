"""
Mortality capability for GLWB simulation.

A mortality model is any callable ``age -> qx``. The default is a
Gompertz-Makeham curve with separate male/female parameters, roughly matching
the shape of SOA 2012 IAM annuitant mortality at retirement ages. Tabular
models from :mod:`glwb_pricing.loaders.mortality` satisfy the same protocol.

Theory
------
[T1] Gompertz-Makeham force: μ(x) = A + B·exp(C·(x - x0))
[T1] qx = 1 - exp(-μ(x + ½)), with qx = 1 at the terminal age
[T1] Sub-annual conversion (constant force): q_dt = 1 - (1 - qx)^dt
[T1] npx = Π_{k=0}^{n-1} (1 - q_{x+k})
[T1] Curtate life expectancy: e_x = Σ_{k≥1} kpx
"""

import math
from dataclasses import dataclass
from typing import Callable, Literal, Protocol

import numpy as np

from glwb_pricing.config.settings import SETTINGS

TERMINAL_AGE = SETTINGS.mortality.terminal_age


class MortalityModel(Protocol):
    """Protocol for annual mortality rates."""

    def __call__(self, age: int) -> float:
        """Probability of death between ``age`` and ``age + 1``."""
        ...


@dataclass(frozen=True)
class GompertzMakehamMortality:
    """
    Gompertz-Makeham annual mortality.

    Attributes
    ----------
    a : float
        Age-independent (Makeham) hazard
    b : float
        Gompertz hazard at ``x0``
    c : float
        Gompertz aging rate
    x0 : float
        Reference age
    terminal_age : int
        Age at which death is certain
    """

    a: float
    b: float
    c: float
    x0: float = 25.0
    terminal_age: int = TERMINAL_AGE

    def __post_init__(self) -> None:
        """Validate parameters."""
        if self.a < 0:
            raise ValueError(f"Makeham term a must be >= 0, got {self.a}")
        if self.b <= 0:
            raise ValueError(f"Gompertz term b must be > 0, got {self.b}")
        if self.c <= 0:
            raise ValueError(f"Aging rate c must be > 0, got {self.c}")
        if self.terminal_age <= 0:
            raise ValueError(f"terminal_age must be > 0, got {self.terminal_age}")

    def force(self, age: float) -> float:
        """Force of mortality μ(age)."""
        return self.a + self.b * math.exp(self.c * (age - self.x0))

    def __call__(self, age: int) -> float:
        if age < 0:
            raise ValueError(f"Age cannot be negative, got {age}")
        if age >= self.terminal_age:
            return 1.0
        return min(-math.expm1(-self.force(age + 0.5)), 1.0)


@dataclass(frozen=True)
class ConstantMortality:
    """Flat annual mortality, useful for tests and stress runs."""

    qx: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.qx <= 1.0:
            raise ValueError(f"qx must be in [0, 1], got {self.qx}")

    def __call__(self, age: int) -> float:
        return self.qx


# Calibrated so qx(65) ≈ 0.0176 male / 0.0149 female [T2: SOA 2012 IAM shape]
_GM_PARAMS: dict[str, tuple[float, float, float]] = {
    "male": (0.0005, 0.00020, 0.11),
    "female": (0.0004, 0.00017, 0.11),
}


def default_mortality(
    gender: Literal["male", "female"] = "male",
) -> GompertzMakehamMortality:
    """
    Default gender-specific mortality curve.

    Examples
    --------
    >>> qx = default_mortality("male")
    >>> qx(65) > default_mortality("female")(65)
    True
    """
    if gender not in _GM_PARAMS:
        raise ValueError(f"Gender must be 'male' or 'female', got {gender}")
    a, b, c = _GM_PARAMS[gender]
    return GompertzMakehamMortality(a=a, b=b, c=c)


def constant_mortality(qx: float) -> ConstantMortality:
    """Mortality model returning ``qx`` at every age."""
    return ConstantMortality(qx)


def zero_mortality() -> ConstantMortality:
    """Immortal policyholder (horizon is bounded by ``max_age`` alone)."""
    return ConstantMortality(0.0)


def step_qx(qx_annual: float, dt: float) -> float:
    """
    Convert an annual death probability to a step of ``dt`` years.

    [T1] q_dt = 1 - (1 - qx)^dt

    Examples
    --------
    >>> round(step_qx(0.12, 1 / 12), 6)
    0.010596
    """
    if not 0.0 <= qx_annual <= 1.0:
        raise ValueError(f"qx must be in [0, 1], got {qx_annual}")
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")
    return 1.0 - (1.0 - qx_annual) ** dt


def survival_probability(age: int, n_years: int, qx_fn: Callable[[int], float]) -> float:
    """
    Probability of surviving ``n_years`` from ``age``.

    [T1] npx = Π_{k=0}^{n-1} (1 - q_{x+k})
    """
    if n_years < 0:
        raise ValueError(f"n_years cannot be negative, got {n_years}")
    survival = 1.0
    for k in range(n_years):
        survival *= 1.0 - step_qx(qx_fn(age + k), 1.0)
        if survival <= 0:
            return 0.0
    return survival


def survival_curve(age: int, n_years: int, qx_fn: Callable[[int], float]) -> np.ndarray:
    """kpx for k = 0..n_years (first entry is 1)."""
    if n_years < 0:
        raise ValueError(f"n_years cannot be negative, got {n_years}")
    px = np.array([1.0 - qx_fn(age + k) for k in range(n_years)])
    return np.concatenate([[1.0], np.cumprod(px)])


def life_expectancy(
    age: int,
    qx_fn: Callable[[int], float],
    max_age: int = TERMINAL_AGE,
) -> float:
    """
    Curtate life expectancy at ``age``.

    [T1] e_x = Σ_{k=1}^{max_age - age} kpx, which is 0 at ``max_age``.
    """
    if age >= max_age:
        return 0.0
    return float(survival_curve(age, max_age - age, qx_fn)[1:].sum())
