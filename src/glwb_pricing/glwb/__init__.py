"""
GLWB (Guaranteed Lifetime Withdrawal Benefit) pricing.

Implements path-dependent pricing for GLWB riders:
- GWB state machine (rollup, ratchet, fee, excess withdrawals)
- Mortality capability and survival queries
- Path-dependent Monte Carlo with optional behavioral models
"""

from .aggregation import (
    MonteCarloSummary,
    PathBatch,
    PathResult,
    combine_batches,
    summarize,
)
from .gwb_tracker import (
    FeeBasis,
    GWBConfig,
    GWBState,
    GWBTracker,
    RollupType,
    StepResult,
    benefit_moneyness,
    calculate_rollup,
    excess_withdrawal_gwb,
    is_ruined,
    max_withdrawal,
    step,
    withdrawal_base,
)
from .mortality import (
    ConstantMortality,
    GompertzMakehamMortality,
    MortalityModel,
    constant_mortality,
    default_mortality,
    life_expectancy,
    step_qx,
    survival_curve,
    survival_probability,
    zero_mortality,
)
from .path_sim import (
    DecrementMode,
    GLWBPathSimulator,
    GLWBPriceResult,
    SimulatorConfig,
    glwb_price,
    price,
)
from .rollup import (
    CompoundRollup,
    NoRollup,
    RatchetMechanic,
    SimpleRollup,
    apply_ratchet,
    compound_rollup,
    is_anniversary,
    rollup_comparison,
    simple_rollup,
)

__all__ = [
    # State machine
    "GWBTracker",
    "GWBState",
    "GWBConfig",
    "RollupType",
    "FeeBasis",
    "StepResult",
    "step",
    "calculate_rollup",
    "max_withdrawal",
    "withdrawal_base",
    "excess_withdrawal_gwb",
    "is_ruined",
    "benefit_moneyness",
    # Rollup mechanics
    "simple_rollup",
    "compound_rollup",
    "apply_ratchet",
    "is_anniversary",
    "rollup_comparison",
    "SimpleRollup",
    "CompoundRollup",
    "NoRollup",
    "RatchetMechanic",
    # Mortality
    "MortalityModel",
    "GompertzMakehamMortality",
    "ConstantMortality",
    "default_mortality",
    "constant_mortality",
    "zero_mortality",
    "step_qx",
    "survival_probability",
    "survival_curve",
    "life_expectancy",
    # Simulation
    "DecrementMode",
    "SimulatorConfig",
    "GLWBPathSimulator",
    "GLWBPriceResult",
    "glwb_price",
    "price",
    # Aggregation
    "PathResult",
    "PathBatch",
    "MonteCarloSummary",
    "combine_batches",
    "summarize",
]
