"""
Rollup and Ratchet Mechanics.

Implements GWB growth mechanisms:
- Simple rollup: GWB(t) = base × (1 + r × min(t, cap))
- Compound rollup: GWB(t) = base × (1 + r)^min(t, cap)
- Ratchet: GWB(t) = max(GWB(t-1), AV(t)), at anniversaries only

Theory
------
[T1] Simple rollup: Linear growth from base, stops accruing after cap years
[T1] Compound rollup: Exponential growth from base, stops after cap years
[T1] Ratchet: Lock in gains, never decrease

For rate > 0 and 0 < t, compound >= simple (Bernoulli's inequality), with
equality at t = 1.
"""

import math
from typing import Protocol

import numpy as np

from glwb_pricing.config.tolerances import ANNIVERSARY_TOLERANCE


def _validate_rollup_inputs(base: float, rate: float, years: float, cap_years: float) -> None:
    if base < 0:
        raise ValueError(f"Base cannot be negative, got {base}")
    if rate < 0:
        raise ValueError(f"Rate cannot be negative, got {rate}")
    if years < 0:
        raise ValueError(f"Years cannot be negative, got {years}")
    if cap_years < 0:
        raise ValueError(f"Cap years cannot be negative, got {cap_years}")


def simple_rollup(base: float, rate: float, years: float, cap_years: float) -> float:
    """
    Simple interest rollup, capped in years.

    [T1] GWB(t) = base × (1 + rate × min(years, cap_years))

    Examples
    --------
    >>> simple_rollup(100_000, 0.05, 5, 10)
    125000.0
    """
    _validate_rollup_inputs(base, rate, years, cap_years)
    return base * (1 + rate * min(years, cap_years))


def compound_rollup(base: float, rate: float, years: float, cap_years: float) -> float:
    """
    Compound interest rollup, capped in years.

    [T1] GWB(t) = base × (1 + rate)^min(years, cap_years)

    Examples
    --------
    >>> round(compound_rollup(100_000, 0.05, 15, 10), 2)
    162889.46
    """
    _validate_rollup_inputs(base, rate, years, cap_years)
    return base * (1 + rate) ** min(years, cap_years)


def apply_ratchet(gwb: float, av: float) -> float:
    """
    Step the GWB up to the account value.

    [T1] GWB_new = max(GWB, AV). Idempotent for a fixed AV.
    """
    if gwb < 0:
        raise ValueError(f"GWB cannot be negative, got {gwb}")
    if av < 0:
        raise ValueError(f"AV cannot be negative, got {av}")
    return max(gwb, av)


def is_anniversary(years_since_issue: float, dt: float) -> bool:
    """
    Check whether a step of size ``dt`` crosses a policy anniversary.

    An anniversary is crossed iff floor(t + dt) > floor(t). A small tolerance
    absorbs float drift from summing sub-annual steps (12 × 1/12 must land on
    year 1).

    Examples
    --------
    >>> is_anniversary(0.0, 1.0)
    True
    >>> is_anniversary(0.25, 0.25)
    False
    """
    before = math.floor(years_since_issue + ANNIVERSARY_TOLERANCE)
    after = math.floor(years_since_issue + dt + ANNIVERSARY_TOLERANCE)
    return after > before


class RollupMechanic(Protocol):
    """Protocol for rollup calculation."""

    def calculate(self, base: float, years: float, rate: float, cap_years: float) -> float:
        """
        Calculate rolled-up value.

        Parameters
        ----------
        base : float
            Rollup base (initial premium)
        years : float
            Years since issue
        rate : float
            Annual rollup rate (e.g., 0.05 for 5%)
        cap_years : float
            Years after which rollup stops accruing

        Returns
        -------
        float
            Rolled-up value
        """
        ...


class SimpleRollup:
    """
    Simple interest rollup.

    Examples
    --------
    >>> SimpleRollup().calculate(100_000, 5, 0.05, 10)
    125000.0
    """

    def calculate(self, base: float, years: float, rate: float, cap_years: float) -> float:
        """[T1] GWB(t) = base × (1 + rate × min(years, cap))"""
        return simple_rollup(base, rate, years, cap_years)


class CompoundRollup:
    """
    Compound interest rollup.

    Examples
    --------
    >>> round(CompoundRollup().calculate(100_000, 5, 0.05, 10), 2)
    127628.16
    """

    def calculate(self, base: float, years: float, rate: float, cap_years: float) -> float:
        """[T1] GWB(t) = base × (1 + rate)^min(years, cap)"""
        return compound_rollup(base, rate, years, cap_years)


class NoRollup:
    """Rollup mechanic for riders without a rollup credit."""

    def calculate(self, base: float, years: float, rate: float, cap_years: float) -> float:
        """GWB(t) = base."""
        _validate_rollup_inputs(base, rate, years, cap_years)
        return base


class RatchetMechanic:
    """
    Ratchet (step-up) to high water mark.

    [T1] GWB(t) = max(GWB(t-1), AV(t))

    Examples
    --------
    >>> ratchet = RatchetMechanic()
    >>> ratchet.apply_ratchet(100_000, 120_000)
    120000
    >>> ratchet.apply_ratchet(100_000, 80_000)
    100000
    """

    def apply_ratchet(self, gwb: float, av: float) -> float:
        """[T1] GWB_new = max(GWB, AV)"""
        return apply_ratchet(gwb, av)

    def apply_ratchet_path(
        self,
        gwb_start: float,
        av_path: np.ndarray,
        ratchet_frequency: int = 1,
    ) -> np.ndarray:
        """
        Apply ratchet along a path of anniversary account values.

        Parameters
        ----------
        gwb_start : float
            Starting GWB value
        av_path : ndarray
            Account values observed at each anniversary
        ratchet_frequency : int
            Ratchet every ``ratchet_frequency`` anniversaries

        Returns
        -------
        ndarray
            GWB path after ratchets (non-decreasing)
        """
        if gwb_start < 0:
            raise ValueError(f"GWB cannot be negative, got {gwb_start}")
        if ratchet_frequency < 1:
            raise ValueError(f"Ratchet frequency must be >= 1, got {ratchet_frequency}")

        gwb_path = np.zeros(len(av_path))
        gwb = gwb_start

        for t, av in enumerate(av_path):
            if (t + 1) % ratchet_frequency == 0:
                gwb = apply_ratchet(gwb, float(av))
            gwb_path[t] = gwb

        return gwb_path


def rollup_comparison(
    base: float,
    rate: float,
    years: int,
    cap_years: float | None = None,
) -> list[dict[str, float]]:
    """
    Year-by-year simple vs compound rollup table.

    Parameters
    ----------
    base : float
        Rollup base
    rate : float
        Annual rollup rate
    years : int
        Last year to tabulate (inclusive)
    cap_years : float, optional
        Rollup cap; defaults to no cap within the table

    Returns
    -------
    list of dict
        One row per year 0..years with keys ``year``, ``simple``,
        ``compound`` and ``difference``

    Examples
    --------
    >>> rows = rollup_comparison(100_000, 0.05, 10)
    >>> round(rows[-1]["difference"], 2)
    12889.46
    """
    if years < 0:
        raise ValueError(f"Years cannot be negative, got {years}")
    cap = float(years) if cap_years is None else cap_years

    rows = []
    for year in range(years + 1):
        simple = simple_rollup(base, rate, year, cap)
        compound = compound_rollup(base, rate, year, cap)
        rows.append(
            {
                "year": float(year),
                "simple": simple,
                "compound": compound,
                "difference": compound - simple,
            }
        )
    return rows
