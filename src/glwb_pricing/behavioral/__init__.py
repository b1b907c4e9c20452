"""
Policyholder behavior models for GLWB pricing.

- Dynamic lapse (moneyness, surrender charge, SOA 2006 duration curve)
- GLWB withdrawal utilization (parametric and SOA 2018 calibrated)
- Per-policy and % of AV expenses

Every model exposes ``evaluate(BehaviorContext) -> float`` so the simulator
can hold it as an optional capability.
"""

from .base import (
    BehaviorContext,
    ExpenseModel,
    LapseModel,
    WithdrawalModel,
)
from .dynamic_lapse import (
    DynamicLapseModel,
    LapseConfig,
    LapseResult,
    SOADynamicLapseModel,
    SOALapseConfig,
    SOALapseResult,
    is_itm,
    lapse_probability,
    moneyness_from_state,
    survival_from_lapses,
)
from .withdrawal import (
    SimpleWithdrawalModel,
    SOAWithdrawalConfig,
    SOAWithdrawalModel,
    SOAWithdrawalResult,
    WithdrawalConfig,
    WithdrawalResult,
)
from .expenses import (
    ExpenseConfig,
    ExpenseResult,
    PolicyExpenseModel,
)
from .soa_benchmarks import (
    SOA_2006_AVERAGE_FULL_SURRENDER,
    SOA_2006_FULL_SURRENDER_BY_AGE,
    SOA_2006_SC_CLIFF_EFFECT,
    SOA_2006_SC_CLIFF_MULTIPLIER,
    SOA_2006_SURRENDER_BY_DURATION_7YR_SC,
    SOA_2018_GLWB_UTILIZATION_BY_AGE,
    SOA_2018_GLWB_UTILIZATION_BY_DURATION,
    SOA_2018_ITM_SENSITIVITY,
    SOA_2018_REFERENCE_AGE,
)
from .calibration import (
    combined_utilization,
    get_itm_sensitivity_factor,
    get_itm_sensitivity_factor_continuous,
    get_sc_cliff_multiplier,
    interpolate_surrender_by_age,
    interpolate_surrender_by_duration,
    interpolate_utilization_by_age,
    interpolate_utilization_by_duration,
)

__all__ = [
    # Capabilities
    "BehaviorContext",
    "LapseModel",
    "WithdrawalModel",
    "ExpenseModel",
    # Dynamic lapse
    "DynamicLapseModel",
    "LapseConfig",
    "LapseResult",
    "SOADynamicLapseModel",
    "SOALapseConfig",
    "SOALapseResult",
    "survival_from_lapses",
    "lapse_probability",
    "moneyness_from_state",
    "is_itm",
    # Withdrawal
    "SimpleWithdrawalModel",
    "WithdrawalConfig",
    "WithdrawalResult",
    "SOAWithdrawalModel",
    "SOAWithdrawalConfig",
    "SOAWithdrawalResult",
    # Expenses
    "PolicyExpenseModel",
    "ExpenseConfig",
    "ExpenseResult",
    # SOA benchmark data
    "SOA_2006_SURRENDER_BY_DURATION_7YR_SC",
    "SOA_2006_SC_CLIFF_EFFECT",
    "SOA_2006_SC_CLIFF_MULTIPLIER",
    "SOA_2006_FULL_SURRENDER_BY_AGE",
    "SOA_2006_AVERAGE_FULL_SURRENDER",
    "SOA_2018_GLWB_UTILIZATION_BY_DURATION",
    "SOA_2018_GLWB_UTILIZATION_BY_AGE",
    "SOA_2018_ITM_SENSITIVITY",
    "SOA_2018_REFERENCE_AGE",
    # Calibration utilities
    "interpolate_surrender_by_duration",
    "get_sc_cliff_multiplier",
    "interpolate_surrender_by_age",
    "interpolate_utilization_by_duration",
    "interpolate_utilization_by_age",
    "get_itm_sensitivity_factor",
    "get_itm_sensitivity_factor_continuous",
    "combined_utilization",
]
