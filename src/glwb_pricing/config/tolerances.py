"""
Centralized tolerance framework for GLWB simulation and tests.

Tolerance Tiers:
    Tier 1 (Analytical): Deterministic state-machine arithmetic
    Tier 3 (Stochastic): CLT-derived, path-dependent Monte Carlo estimates
    Tier 4 (Integration): End-to-end pricing comparisons

References:
    [T1] Higham (2002) "Accuracy and Stability of Numerical Algorithms"
    [T1] Glasserman (2003) Ch. 3-4 - Monte Carlo error bounds
"""

import numpy as np
from typing import Final

# =============================================================================
# Tier 1: Analytical Tolerances (Deterministic)
# =============================================================================

#: Invariant checks (AV >= 0, GWB monotone under ratchet, rates in [0, 1])
#: Tolerance: ~1e-10 allows for float64 accumulation errors
ANTI_PATTERN_TOLERANCE: Final[float] = 1e-10

#: Rollup / ratchet / withdrawal arithmetic on dollar amounts
STATE_MACHINE_TOLERANCE: Final[float] = 1e-8

#: Anniversary detection: step sums like 12 * (1/12) must land on the integer
ANNIVERSARY_TOLERANCE: Final[float] = 1e-9


# =============================================================================
# Tier 3: Stochastic Tolerances (CLT-Derived)
# =============================================================================


def mc_tolerance(n_paths: int, sigma: float = 0.20, confidence: float = 3.0) -> float:
    """
    Calculate CLT-derived Monte Carlo tolerance.

    [T1] Standard error of MC estimate is σ/√N.
    3σ gives 99.7% confidence interval.

    Parameters
    ----------
    n_paths : int
        Number of Monte Carlo paths
    sigma : float
        Estimated standard deviation of the per-path payoff
    confidence : float
        Number of standard deviations (default 3 for 99.7% CI)

    Returns
    -------
    float
        Tolerance for comparing two MC estimates or MC vs analytical

    Examples
    --------
    >>> round(mc_tolerance(10_000), 4)
    0.006
    """
    if n_paths <= 0:
        raise ValueError(f"CRITICAL: n_paths must be positive, got {n_paths}")
    return confidence * sigma / np.sqrt(n_paths)


#: MC tolerance for 10,000 paths: 3 * 0.20 / sqrt(10000) ≈ 0.006
MC_10K_TOLERANCE: Final[float] = 0.006

#: GBM moment checks (mean / variance of log returns) at 50k paths
GBM_MOMENT_TOLERANCE: Final[float] = 0.02

#: Simulator warns when standard_error / price exceeds this ratio
MC_STANDARD_ERROR_WARNING_RATIO: Final[float] = 0.10


# =============================================================================
# Tier 4: Integration Tolerances
# =============================================================================

#: Fair-fee search convergence on the fee rate
FAIR_FEE_TOLERANCE: Final[float] = 1e-4


# =============================================================================
# Tolerance Registry (For Dynamic Access)
# =============================================================================

TOLERANCE_REGISTRY: dict[str, float] = {
    # Tier 1: Analytical
    "anti_pattern": ANTI_PATTERN_TOLERANCE,
    "state_machine": STATE_MACHINE_TOLERANCE,
    "anniversary": ANNIVERSARY_TOLERANCE,
    # Tier 3: Stochastic
    "mc_10k": MC_10K_TOLERANCE,
    "gbm_moment": GBM_MOMENT_TOLERANCE,
    "mc_se_warning": MC_STANDARD_ERROR_WARNING_RATIO,
    # Tier 4: Integration
    "fair_fee": FAIR_FEE_TOLERANCE,
}


def get_tolerance(name: str) -> float:
    """
    Get tolerance by name from registry.

    Parameters
    ----------
    name : str
        Tolerance name (see TOLERANCE_REGISTRY keys)

    Returns
    -------
    float
        Tolerance value

    Raises
    ------
    KeyError
        If tolerance name not found
    """
    if name not in TOLERANCE_REGISTRY:
        available = ", ".join(sorted(TOLERANCE_REGISTRY.keys()))
        raise KeyError(f"Unknown tolerance '{name}'. Available: {available}")
    return TOLERANCE_REGISTRY[name]
