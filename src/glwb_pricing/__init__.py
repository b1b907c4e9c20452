"""
glwb-pricing: Monte Carlo pricing of Guaranteed Lifetime Withdrawal Benefits.

Quick Start
-----------
>>> from glwb_pricing import GWBConfig, SimulatorConfig, price
>>> result = price(
...     GWBConfig(withdrawal_rate=0.05, fee_rate=0.01),
...     SimulatorConfig(risk_free_rate=0.04, volatility=0.18, n_paths=1_000),
...     premium=100_000,
...     issue_age=65,
... )
>>> low, high = result.confidence_interval(0.95)

Version: 0.1.0
"""

__version__ = "0.1.0"

# =============================================================================
# GLWB Engine - Primary API
# =============================================================================
from glwb_pricing.glwb.gwb_tracker import (
    FeeBasis,
    GWBConfig,
    GWBState,
    GWBTracker,
    RollupType,
    StepResult,
    step,
)
from glwb_pricing.glwb.path_sim import (
    DecrementMode,
    GLWBPathSimulator,
    GLWBPriceResult,
    SimulatorConfig,
    glwb_price,
    price,
)
from glwb_pricing.glwb.rollup import apply_ratchet, compound_rollup, simple_rollup

# =============================================================================
# Mortality
# =============================================================================
from glwb_pricing.glwb.mortality import (
    default_mortality,
    life_expectancy,
    step_qx,
    survival_probability,
)
from glwb_pricing.loaders.mortality import MortalityLoader, MortalityTable

# =============================================================================
# Behavioral Models
# =============================================================================
from glwb_pricing.behavioral import (
    BehaviorContext,
    DynamicLapseModel,
    ExpenseConfig,
    LapseConfig,
    PolicyExpenseModel,
    SimpleWithdrawalModel,
    SOADynamicLapseModel,
    SOALapseConfig,
    SOAWithdrawalConfig,
    SOAWithdrawalModel,
    WithdrawalConfig,
    survival_from_lapses,
)

# =============================================================================
# Market and Configuration
# =============================================================================
from glwb_pricing.simulation.gbm import GBMParams, GBMReturnGenerator
from glwb_pricing.config.settings import SETTINGS

__all__ = [
    # Version
    "__version__",
    # Engine
    "GWBConfig",
    "GWBState",
    "GWBTracker",
    "RollupType",
    "FeeBasis",
    "StepResult",
    "step",
    "simple_rollup",
    "compound_rollup",
    "apply_ratchet",
    "DecrementMode",
    "SimulatorConfig",
    "GLWBPathSimulator",
    "GLWBPriceResult",
    "glwb_price",
    "price",
    # Mortality
    "default_mortality",
    "step_qx",
    "survival_probability",
    "life_expectancy",
    "MortalityLoader",
    "MortalityTable",
    # Behavioral
    "BehaviorContext",
    "LapseConfig",
    "DynamicLapseModel",
    "SOALapseConfig",
    "SOADynamicLapseModel",
    "WithdrawalConfig",
    "SimpleWithdrawalModel",
    "SOAWithdrawalConfig",
    "SOAWithdrawalModel",
    "ExpenseConfig",
    "PolicyExpenseModel",
    "survival_from_lapses",
    # Market / config
    "GBMParams",
    "GBMReturnGenerator",
    "SETTINGS",
]
