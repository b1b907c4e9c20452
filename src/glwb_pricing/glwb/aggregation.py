"""
Monte Carlo aggregation for GLWB path results.

Per-path outcomes are collected into :class:`PathBatch` blocks keyed by the
index of their first path. Blocks combine by concatenation in path order, so
any chunking of the paths (sequential, or spread over worker processes)
reduces to the same arrays and therefore the same statistics, bit for bit.

Theory
------
[T1] price = mean(PV shortfall_i) / premium
[T1] SE = std(PV shortfall_i / premium, ddof=1) / √N
[T1] P(ruin) = mean(ruin_i), where ruin_i is an indicator (stochastic
     decrements) or the in-force probability at ruin (expected decrements)
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class PathResult:
    """
    Outcome of one simulated policy lifetime.

    Amounts are in dollars, discounted to issue at the risk-free rate and
    weighted by the in-force probability of the path.

    Attributes
    ----------
    pv_shortfall : float
        PV of guaranteed withdrawals the insurer funds after AV is exhausted
    pv_fees : float
        PV of rider fees collected
    pv_expenses : float
        PV of expenses (including acquisition), 0 without an expense model
    ruin : float
        Ruin indicator, or in-force probability at ruin
    ruin_time : float
        Years from issue to ruin, NaN if the AV never ran out
    lapse : float
        Lapse indicator, or total probability of lapse
    lapse_by_year : ndarray, optional
        Lapse weight per policy year (index 0 = year 1); None without a
        lapse model
    utilization_sum : float
        Σ weight × utilization over withdrawal steps
    utilization_weight : float
        Σ weight over withdrawal steps
    death_year : int
        Policy year of death (stochastic decrements only), -1 otherwise
    final_av : float
        Account value when the path stopped
    final_gwb : float
        GWB when the path stopped
    """

    pv_shortfall: float
    pv_fees: float
    pv_expenses: float
    ruin: float
    ruin_time: float
    lapse: float
    lapse_by_year: Optional[np.ndarray]
    utilization_sum: float
    utilization_weight: float
    death_year: int
    final_av: float
    final_gwb: float


@dataclass(frozen=True)
class PathBatch:
    """Per-path outcomes for a contiguous block of paths, in path order."""

    start: int
    pv_shortfall: np.ndarray
    pv_fees: np.ndarray
    pv_expenses: np.ndarray
    ruin: np.ndarray
    ruin_time: np.ndarray
    lapse: np.ndarray
    utilization_sum: np.ndarray
    utilization_weight: np.ndarray
    lapse_by_year: Optional[np.ndarray] = field(default=None)

    @property
    def n_paths(self) -> int:
        return len(self.pv_shortfall)

    @classmethod
    def from_paths(cls, start: int, paths: Sequence[PathResult]) -> "PathBatch":
        """Stack path results that start at path index ``start``."""
        if not paths:
            raise ValueError("Cannot build a batch from zero paths")
        lapse_rows = [p.lapse_by_year for p in paths]
        if any(row is None for row in lapse_rows):
            lapse_by_year = None
        else:
            lapse_by_year = np.vstack(lapse_rows)
        return cls(
            start=start,
            pv_shortfall=np.array([p.pv_shortfall for p in paths]),
            pv_fees=np.array([p.pv_fees for p in paths]),
            pv_expenses=np.array([p.pv_expenses for p in paths]),
            ruin=np.array([p.ruin for p in paths]),
            ruin_time=np.array([p.ruin_time for p in paths]),
            lapse=np.array([p.lapse for p in paths]),
            utilization_sum=np.array([p.utilization_sum for p in paths]),
            utilization_weight=np.array([p.utilization_weight for p in paths]),
            lapse_by_year=lapse_by_year,
        )


def combine_batches(batches: Sequence[PathBatch]) -> PathBatch:
    """
    Merge batches into one, ordered by starting path index.

    Batches may arrive in any order but must tile a contiguous range of
    paths without gaps or overlaps.
    """
    if not batches:
        raise ValueError("Cannot combine zero batches")
    ordered = sorted(batches, key=lambda b: b.start)

    expected = ordered[0].start
    for batch in ordered:
        if batch.start != expected:
            raise ValueError(f"Batch starting at path {batch.start} expected at {expected}")
        expected += batch.n_paths

    has_lapse = ordered[0].lapse_by_year is not None
    if any((b.lapse_by_year is not None) != has_lapse for b in ordered):
        raise ValueError("Cannot combine batches with and without lapse tracking")

    def cat(name: str) -> np.ndarray:
        return np.concatenate([getattr(b, name) for b in ordered])

    return PathBatch(
        start=ordered[0].start,
        pv_shortfall=cat("pv_shortfall"),
        pv_fees=cat("pv_fees"),
        pv_expenses=cat("pv_expenses"),
        ruin=cat("ruin"),
        ruin_time=cat("ruin_time"),
        lapse=cat("lapse"),
        utilization_sum=cat("utilization_sum"),
        utilization_weight=cat("utilization_weight"),
        lapse_by_year=np.vstack([b.lapse_by_year for b in ordered]) if has_lapse else None,
    )


@dataclass(frozen=True)
class MonteCarloSummary:
    """Statistics reduced from a complete :class:`PathBatch`."""

    price: float
    standard_error: float
    mean_payoff: float
    std_payoff: float
    fee_value: float
    prob_ruin: float
    mean_ruin_year: Optional[float]
    prob_lapse: float
    mean_lapse_year: Optional[float]
    lapse_year_histogram: Optional[np.ndarray]
    avg_utilization: Optional[float]
    mean_expenses_pv: float
    n_paths: int


def _weighted_mean(values: np.ndarray, weights: np.ndarray) -> Optional[float]:
    total = float(np.sum(weights))
    if total <= 0:
        return None
    return float(np.sum(values * weights) / total)


def summarize(batch: PathBatch, premium: float) -> MonteCarloSummary:
    """
    Reduce per-path outcomes to price and diagnostics.

    Parameters
    ----------
    batch : PathBatch
        All simulated paths
    premium : float
        Premium used to express price per unit premium

    Returns
    -------
    MonteCarloSummary
        Aggregated statistics
    """
    if premium <= 0:
        raise ValueError(f"Premium must be positive, got {premium}")

    n = batch.n_paths
    payoffs = batch.pv_shortfall
    contributions = payoffs / premium

    mean_payoff = float(np.mean(payoffs))
    if n > 1:
        std_payoff = float(np.std(payoffs, ddof=1))
        standard_error = float(np.std(contributions, ddof=1) / math.sqrt(n))
    else:
        std_payoff = 0.0
        standard_error = 0.0

    ruined = ~np.isnan(batch.ruin_time)
    mean_ruin_year = _weighted_mean(batch.ruin_time[ruined], batch.ruin[ruined])

    if batch.lapse_by_year is not None:
        histogram = batch.lapse_by_year.sum(axis=0)
        policy_years = np.arange(1, len(histogram) + 1)
        mean_lapse_year = _weighted_mean(policy_years, histogram)
    else:
        histogram = None
        mean_lapse_year = None

    utilization_weight = float(np.sum(batch.utilization_weight))
    avg_utilization = (
        float(np.sum(batch.utilization_sum)) / utilization_weight
        if utilization_weight > 0
        else None
    )

    return MonteCarloSummary(
        price=float(np.mean(contributions)),
        standard_error=standard_error,
        mean_payoff=mean_payoff,
        std_payoff=std_payoff,
        fee_value=float(np.mean(batch.pv_fees)) / premium,
        prob_ruin=float(np.mean(batch.ruin)),
        mean_ruin_year=mean_ruin_year,
        prob_lapse=float(np.mean(batch.lapse)),
        mean_lapse_year=mean_lapse_year,
        lapse_year_histogram=histogram,
        avg_utilization=avg_utilization,
        mean_expenses_pv=float(np.mean(batch.pv_expenses)),
        n_paths=n,
    )
