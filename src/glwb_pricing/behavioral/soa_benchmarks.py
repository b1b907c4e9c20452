"""
SOA Experience Tables for Policyholder Behavior.

[T2] Empirical rates from public SOA research, used by the SOA-calibrated
lapse and withdrawal models.

Data Sources
------------
1. SOA 2006 Deferred Annuity Persistency Study
   - Surrender rates by duration, position in the surrender charge period
     and owner age
2. SOA 2018 VA GLB Utilization Study
   - GLWB utilization by duration, attained age and degree of moneyness

All rates are decimals (0.05 = 5%). Age keys are midpoints of age bands.
"""

from typing import Dict, Final

# =============================================================================
# SOA 2006 Deferred Annuity Persistency Study
# =============================================================================

# Surrender rates by contract year, 7-year surrender charge schedule.
# Year 8 is the first post-charge year (the cliff).
SOA_2006_SURRENDER_BY_DURATION_7YR_SC: Final[Dict[int, float]] = {
    1: 0.014,
    2: 0.023,
    3: 0.028,
    4: 0.032,
    5: 0.037,
    6: 0.043,
    7: 0.053,
    8: 0.112,
    9: 0.082,
    10: 0.077,
    11: 0.067,
}

# Surrender rates by position relative to the end of the charge period
SOA_2006_SC_CLIFF_EFFECT: Final[Dict[str, float]] = {
    'years_remaining_3plus': 0.026,
    'years_remaining_2': 0.049,
    'years_remaining_1': 0.058,
    'at_expiration': 0.144,
    'post_sc_year_1': 0.111,
    'post_sc_year_2': 0.098,
    'post_sc_year_3plus': 0.086,
}

# Cliff multiplier: rate at expiration / rate in the final charge year ≈ 2.48
SOA_2006_SC_CLIFF_MULTIPLIER: Final[float] = (
    SOA_2006_SC_CLIFF_EFFECT['at_expiration'] / SOA_2006_SC_CLIFF_EFFECT['years_remaining_1']
)

# Full surrender rates by owner age (roughly flat near 5%)
SOA_2006_FULL_SURRENDER_BY_AGE: Final[Dict[int, float]] = {
    35: 0.053,
    45: 0.052,
    52: 0.052,
    57: 0.052,
    62: 0.060,
    67: 0.058,
    72: 0.054,
    80: 0.049,
    87: 0.052,
}

# Average full surrender rate across ages
SOA_2006_AVERAGE_FULL_SURRENDER: Final[float] = 0.052


# =============================================================================
# SOA 2018 VA GLB Utilization Study
# =============================================================================

# GLWB utilization by contract year; ramps from 11% to 54%
SOA_2018_GLWB_UTILIZATION_BY_DURATION: Final[Dict[int, float]] = {
    1: 0.111,
    2: 0.177,
    3: 0.199,
    4: 0.205,
    5: 0.215,
    6: 0.233,
    7: 0.256,
    8: 0.365,
    9: 0.459,
    10: 0.518,
    11: 0.536,
}

# GLWB utilization by attained age (2008 issue cohort)
SOA_2018_GLWB_UTILIZATION_BY_AGE: Final[Dict[int, float]] = {
    55: 0.05,
    62: 0.16,
    67: 0.32,
    72: 0.59,
    77: 0.65,
    82: 0.63,
}

# Reference age for the multiplicative age adjustment
SOA_2018_REFERENCE_AGE: Final[int] = 67

# Utilization multipliers by benefit base / contract value bucket
SOA_2018_ITM_SENSITIVITY: Final[Dict[str, float]] = {
    'not_itm': 1.00,
    'itm_100_125': 1.39,
    'itm_125_150': 1.79,
    'itm_150_plus': 2.11,
}
