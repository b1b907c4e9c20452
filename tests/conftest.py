"""
Centralized pytest fixtures for the glwb-pricing test suite.

Fixture Categories:
1. Tolerance tiers - shared precision settings
2. Rider configurations - standard GWBConfig records
3. Simulator configurations - small, seeded Monte Carlo runs
4. Behavioral models - default lapse, withdrawal and expense models
"""

from dataclasses import dataclass

import pytest

from glwb_pricing.behavioral import (
    DynamicLapseModel,
    ExpenseConfig,
    LapseConfig,
    PolicyExpenseModel,
    SimpleWithdrawalModel,
    WithdrawalConfig,
)
from glwb_pricing.config.tolerances import (
    ANTI_PATTERN_TOLERANCE,
    MC_10K_TOLERANCE,
    STATE_MACHINE_TOLERANCE,
)
from glwb_pricing.glwb.gwb_tracker import GWBConfig, RollupType
from glwb_pricing.glwb.path_sim import SimulatorConfig

# =============================================================================
# TOLERANCE TIERS
# =============================================================================


@dataclass(frozen=True)
class ToleranceTiers:
    """
    Tiered tolerance framework for different test types.

    Derived from precision requirements, not ad hoc.
    """

    # Invariant checks: very tight
    anti_pattern: float = ANTI_PATTERN_TOLERANCE

    # Dollar arithmetic in the state machine
    state_machine: float = STATE_MACHINE_TOLERANCE

    # Monte Carlo estimates at 10k paths
    mc_10k_paths: float = MC_10K_TOLERANCE


TOLERANCES = ToleranceTiers()


@pytest.fixture(scope="session")
def tolerances() -> ToleranceTiers:
    """Provide tiered tolerance settings for all tests."""
    return TOLERANCES


# =============================================================================
# RIDER CONFIGURATIONS
# =============================================================================

STANDARD_PREMIUM = 100_000.0
STANDARD_SEED = 42


@pytest.fixture
def premium() -> float:
    """Standard single premium."""
    return STANDARD_PREMIUM


@pytest.fixture
def gwb_config() -> GWBConfig:
    """Typical rider: 5% compound rollup for 10 years, 5% withdrawals, 1% fee."""
    return GWBConfig(
        rollup_type=RollupType.COMPOUND,
        rollup_rate=0.05,
        rollup_cap_years=10,
        ratchet_enabled=True,
        withdrawal_rate=0.05,
        fee_rate=0.01,
    )


@pytest.fixture
def frictionless_config() -> GWBConfig:
    """Rider with no rollup, no ratchet and no fee for exact arithmetic."""
    return GWBConfig(
        rollup_type=RollupType.NONE,
        rollup_rate=0.0,
        ratchet_enabled=False,
        withdrawal_rate=0.05,
        fee_rate=0.0,
    )


# =============================================================================
# SIMULATOR CONFIGURATIONS
# =============================================================================


@pytest.fixture
def small_sim_config() -> SimulatorConfig:
    """Seeded 500-path annual simulation, fast enough for unit tests."""
    return SimulatorConfig(
        risk_free_rate=0.04,
        volatility=0.18,
        n_paths=500,
        steps_per_year=1,
        max_age=100,
        seed=STANDARD_SEED,
    )


# =============================================================================
# BEHAVIORAL MODELS
# =============================================================================


@pytest.fixture
def lapse_model() -> DynamicLapseModel:
    """Dynamic lapse with default assumptions."""
    return DynamicLapseModel(LapseConfig())


@pytest.fixture
def withdrawal_model() -> SimpleWithdrawalModel:
    """Parametric utilization with default assumptions."""
    return SimpleWithdrawalModel(WithdrawalConfig())


@pytest.fixture
def expense_model() -> PolicyExpenseModel:
    """Per-policy plus % of AV expenses with default assumptions."""
    return PolicyExpenseModel(ExpenseConfig())
