"""
Lookup and interpolation over the SOA experience tables.

[T2] Provides:
1. Surrender rates by contract duration (scaled to any charge length)
2. Surrender charge cliff multipliers
3. Surrender rates by owner age
4. GLWB utilization by duration and age
5. ITM sensitivity factors (bucketed and continuous)

See Also
--------
glwb_pricing.behavioral.soa_benchmarks : Source data tables
"""

import numpy as np

from glwb_pricing.behavioral.soa_benchmarks import (
    SOA_2006_FULL_SURRENDER_BY_AGE,
    SOA_2006_SC_CLIFF_EFFECT,
    SOA_2006_SURRENDER_BY_DURATION_7YR_SC,
    SOA_2018_GLWB_UTILIZATION_BY_AGE,
    SOA_2018_GLWB_UTILIZATION_BY_DURATION,
    SOA_2018_ITM_SENSITIVITY,
    SOA_2018_REFERENCE_AGE,
)


def _interpolate(x: float, points: dict) -> float:
    """Piecewise-linear lookup, flat beyond the end points."""
    keys = sorted(points)
    return float(np.interp(x, keys, [points[k] for k in keys]))


# =============================================================================
# Surrender Rate Functions (SOA 2006)
# =============================================================================


def interpolate_surrender_by_duration(
    duration: int,
    sc_length: int = 7,
) -> float:
    """
    Surrender rate for a contract year.

    [T2] The 7-year schedule is used directly. Other charge lengths are
    rescaled so the cliff lands in the first post-charge year.

    Parameters
    ----------
    duration : int
        Contract year (1 = first year)
    sc_length : int
        Surrender charge period length in years

    Returns
    -------
    float
        Annual surrender rate

    Examples
    --------
    >>> interpolate_surrender_by_duration(1)
    0.014
    >>> interpolate_surrender_by_duration(8)
    0.112
    >>> interpolate_surrender_by_duration(11, sc_length=10)
    0.112
    """
    if duration <= 0:
        raise ValueError(f"Duration must be positive, got {duration}")
    if sc_length <= 0:
        raise ValueError(f"Surrender charge length must be positive, got {sc_length}")

    if duration <= sc_length:
        equivalent = duration if sc_length == 7 else 1 + (duration - 1) * 6 / max(sc_length - 1, 1)
    else:
        equivalent = 7 + (duration - sc_length)
    return _interpolate(min(equivalent, 11), SOA_2006_SURRENDER_BY_DURATION_7YR_SC)


def get_sc_cliff_multiplier(years_to_sc_end: int) -> float:
    """
    Surrender multiplier by position relative to the end of the charge.

    Parameters
    ----------
    years_to_sc_end : int
        Positive: charge years remaining. Zero: charge just expired.
        Negative: years since the charge expired.

    Returns
    -------
    float
        Multiplier relative to the 3+ years remaining rate

    Examples
    --------
    >>> get_sc_cliff_multiplier(3)
    1.0
    """
    base_rate = SOA_2006_SC_CLIFF_EFFECT['years_remaining_3plus']
    if years_to_sc_end >= 3:
        return 1.0
    if years_to_sc_end == 2:
        return SOA_2006_SC_CLIFF_EFFECT['years_remaining_2'] / base_rate
    if years_to_sc_end == 1:
        return SOA_2006_SC_CLIFF_EFFECT['years_remaining_1'] / base_rate
    if years_to_sc_end == 0:
        return SOA_2006_SC_CLIFF_EFFECT['at_expiration'] / base_rate
    if years_to_sc_end == -1:
        return SOA_2006_SC_CLIFF_EFFECT['post_sc_year_1'] / base_rate
    if years_to_sc_end == -2:
        return SOA_2006_SC_CLIFF_EFFECT['post_sc_year_2'] / base_rate
    return SOA_2006_SC_CLIFF_EFFECT['post_sc_year_3plus'] / base_rate


def interpolate_surrender_by_age(age: int) -> float:
    """
    Full surrender rate by owner age.

    Examples
    --------
    >>> interpolate_surrender_by_age(67)
    0.058
    """
    return _interpolate(age, SOA_2006_FULL_SURRENDER_BY_AGE)


# =============================================================================
# GLWB Utilization Functions (SOA 2018)
# =============================================================================


def interpolate_utilization_by_duration(duration: int) -> float:
    """
    GLWB utilization for a contract year.

    Examples
    --------
    >>> interpolate_utilization_by_duration(1)
    0.111
    >>> interpolate_utilization_by_duration(25)
    0.536
    """
    if duration <= 0:
        raise ValueError(f"Duration must be positive, got {duration}")
    return _interpolate(duration, SOA_2018_GLWB_UTILIZATION_BY_DURATION)


def interpolate_utilization_by_age(age: int) -> float:
    """
    GLWB utilization by attained age.

    Examples
    --------
    >>> interpolate_utilization_by_age(72)
    0.59
    """
    return _interpolate(age, SOA_2018_GLWB_UTILIZATION_BY_AGE)


def get_itm_sensitivity_factor(moneyness: float) -> float:
    """
    Bucketed ITM utilization multiplier.

    Parameters
    ----------
    moneyness : float
        GWB / AV ratio (>1 means ITM guarantee)

    Examples
    --------
    >>> get_itm_sensitivity_factor(0.9)
    1.0
    >>> get_itm_sensitivity_factor(1.6)
    2.11
    """
    if moneyness <= 1.0:
        return SOA_2018_ITM_SENSITIVITY['not_itm']
    if moneyness <= 1.25:
        return SOA_2018_ITM_SENSITIVITY['itm_100_125']
    if moneyness <= 1.50:
        return SOA_2018_ITM_SENSITIVITY['itm_125_150']
    return SOA_2018_ITM_SENSITIVITY['itm_150_plus']


def get_itm_sensitivity_factor_continuous(moneyness: float) -> float:
    """
    ITM multiplier interpolated between bucket midpoints.

    Non-decreasing in moneyness, 1.0 at or below ATM, 2.11 at 1.75 and above.
    """
    points = {
        1.00: SOA_2018_ITM_SENSITIVITY['not_itm'],
        1.125: SOA_2018_ITM_SENSITIVITY['itm_100_125'],
        1.375: SOA_2018_ITM_SENSITIVITY['itm_125_150'],
        1.75: SOA_2018_ITM_SENSITIVITY['itm_150_plus'],
    }
    return _interpolate(moneyness, points)


def combined_utilization(
    duration: int,
    age: int,
    moneyness: float = 1.0,
    continuous_itm: bool = True,
) -> float:
    """
    Combine duration, age and ITM effects multiplicatively.

    [T2] util = util_duration × (util_age / util_age(67)) × itm_factor,
    capped at 1.0.

    Examples
    --------
    >>> round(combined_utilization(duration=5, age=67, moneyness=1.0), 3)
    0.215
    """
    util_duration = interpolate_utilization_by_duration(duration)
    age_adjustment = interpolate_utilization_by_age(age) / interpolate_utilization_by_age(
        SOA_2018_REFERENCE_AGE
    )
    if continuous_itm:
        itm_factor = get_itm_sensitivity_factor_continuous(moneyness)
    else:
        itm_factor = get_itm_sensitivity_factor(moneyness)
    return min(util_duration * age_adjustment * itm_factor, 1.0)
