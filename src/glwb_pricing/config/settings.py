"""
Frozen configuration defaults for GLWB simulation.

All configuration is immutable (frozen dataclasses) to ensure reproducibility.
Pricing calls take explicit configuration records; the values here only seed
their defaults.
"""

from dataclasses import dataclass

from glwb_pricing.config.tolerances import FAIR_FEE_TOLERANCE, MC_STANDARD_ERROR_WARNING_RATIO

# =============================================================================
# Simulation Configuration
# =============================================================================


@dataclass(frozen=True)
class SimulationDefaults:
    """
    Immutable Monte Carlo defaults. [T3: Assumptions]

    Attributes
    ----------
    mc_paths : int
        Number of simulated policy lifetimes
    mc_seed : int
        Random seed for reproducibility
    steps_per_year : int
        Time steps per policy year (1 = annual)
    chunk_size : int
        Paths per work unit when running in parallel
    """

    mc_paths: int = 10_000
    mc_seed: int = 42
    steps_per_year: int = 1
    chunk_size: int = 1_000

    # Warn when SE / price exceeds this ratio
    se_warning_ratio: float = MC_STANDARD_ERROR_WARNING_RATIO


# =============================================================================
# Mortality Configuration
# =============================================================================


@dataclass(frozen=True)
class MortalityDefaults:
    """
    Immutable mortality defaults. [T2: SOA 2012 IAM shape]

    Attributes
    ----------
    max_age : int
        Age at which simulated lifetimes are truncated
    terminal_age : int
        Age at which qx = 1.0
    gender : str
        Gender used when none is supplied
    """

    max_age: int = 100
    terminal_age: int = 120
    gender: str = "male"


# =============================================================================
# GLWB Product Configuration
# =============================================================================


@dataclass(frozen=True)
class GLWBProductDefaults:
    """
    Immutable GLWB rider defaults. [T2: Typical market product]
    """

    rollup_rate: float = 0.05
    rollup_cap_years: int = 10
    withdrawal_rate: float = 0.05
    max_withdrawal_rate: float = 0.20
    fee_rate: float = 0.01

    # Bisection bracket for fair-fee search
    fair_fee_low: float = 0.001
    fair_fee_high: float = 0.03
    fair_fee_tolerance: float = FAIR_FEE_TOLERANCE
    fair_fee_max_iter: int = 50


# =============================================================================
# Master Settings
# =============================================================================


@dataclass(frozen=True)
class Settings:
    """
    Master settings container.

    Usage
    -----
    >>> from glwb_pricing.config.settings import SETTINGS
    >>> SETTINGS.simulation.mc_seed
    42
    """

    simulation: SimulationDefaults = SimulationDefaults()
    mortality: MortalityDefaults = MortalityDefaults()
    product: GLWBProductDefaults = GLWBProductDefaults()


# Singleton instance - import this
SETTINGS = Settings()
