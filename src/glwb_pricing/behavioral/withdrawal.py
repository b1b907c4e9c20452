"""
GLWB Withdrawal Utilization Models.

Models how much of the contractual maximum a policyholder actually takes.

Theory
------
[T1] Utilization rate = Actual Withdrawal / Maximum Allowed Withdrawal

Empirical patterns (LIMRA/SOA studies):
- Utilization rises with policy duration
- Utilization rises with attained age
- Deeper in-the-money guarantees are used more

[T2] SOA 2018 calibration:
- Duration curve (11% year 1 → 54% year 11+)
- Age curve relative to age 67
- ITM sensitivity factors (deep ITM → 2.1x)

Utilization is always clamped to [min_utilization, max_utilization] ⊆ [0, 1].
"""

import math
from dataclasses import dataclass

import numpy as np

from glwb_pricing.behavioral.base import BehaviorContext
from glwb_pricing.behavioral.calibration import (
    get_itm_sensitivity_factor,
    get_itm_sensitivity_factor_continuous,
    interpolate_utilization_by_age,
    interpolate_utilization_by_duration,
)
from glwb_pricing.behavioral.soa_benchmarks import SOA_2018_REFERENCE_AGE


def _validate_utilization_bounds(base: float, low: float, high: float) -> None:
    if not 0.0 <= low <= high <= 1.0:
        raise ValueError(
            f"Utilization bounds must satisfy 0 <= min <= max <= 1, got [{low}, {high}]"
        )
    if not 0.0 <= base <= 1.0:
        raise ValueError(f"Base utilization must be in [0, 1], got {base}")


def _clamp(utilization: float, low: float, high: float) -> float:
    if math.isnan(utilization):
        return low
    return float(np.clip(utilization, low, high))


@dataclass(frozen=True)
class WithdrawalConfig:
    """
    Withdrawal behavior assumptions.

    Attributes
    ----------
    base_utilization : float
        Utilization for a mature, at-the-money policy at the reference age
    age_sensitivity : float
        Added utilization per year of age over ``reference_age``
    min_utilization : float
        Floor on utilization
    max_utilization : float
        Cap on utilization (<= 1.0)
    reference_age : int
        Age at which the age adjustment is zero
    ramp_start : float
        Fraction of utilization in the first policy year
    ramp_years : int
        Policy years to reach full utilization
    itm_sensitivity : float
        Exponent on GWB/AV when the guarantee is in-the-money
    """

    base_utilization: float = 0.70
    age_sensitivity: float = 0.01
    min_utilization: float = 0.30
    max_utilization: float = 1.00
    reference_age: int = 65
    ramp_start: float = 0.70
    ramp_years: int = 3
    itm_sensitivity: float = 1.0

    def __post_init__(self) -> None:
        """Validate ranges."""
        _validate_utilization_bounds(self.base_utilization, self.min_utilization, self.max_utilization)
        if self.age_sensitivity < 0:
            raise ValueError(f"age_sensitivity must be >= 0, got {self.age_sensitivity}")
        if not 0.0 <= self.ramp_start <= 1.0:
            raise ValueError(f"ramp_start must be in [0, 1], got {self.ramp_start}")
        if self.ramp_years < 0:
            raise ValueError(f"ramp_years must be >= 0, got {self.ramp_years}")
        if self.itm_sensitivity < 0:
            raise ValueError(f"itm_sensitivity must be >= 0, got {self.itm_sensitivity}")


@dataclass(frozen=True)
class WithdrawalResult:
    """
    Result of withdrawal calculation.

    Attributes
    ----------
    withdrawal_amount : float
        Expected annual withdrawal amount
    utilization_rate : float
        Actual / Maximum ratio
    max_allowed : float
        Maximum allowed annual withdrawal
    """

    withdrawal_amount: float
    utilization_rate: float
    max_allowed: float


class SimpleWithdrawalModel:
    """
    Parametric GLWB withdrawal utilization model.

    Examples
    --------
    >>> model = SimpleWithdrawalModel(WithdrawalConfig())
    >>> result = model.calculate_withdrawal(
    ...     gwb=100_000, av=100_000, withdrawal_rate=0.05, duration=5, age=70
    ... )
    >>> round(result.utilization_rate, 2)
    0.75
    """

    def __init__(self, config: WithdrawalConfig):
        self.config = config

    def duration_factor(self, duration: int) -> float:
        """Linear ramp from ``ramp_start`` in year 1 to 1.0 after ``ramp_years``."""
        c = self.config
        if c.ramp_years == 0:
            return 1.0
        progress = min((duration - 1) / c.ramp_years, 1.0)
        return c.ramp_start + (1.0 - c.ramp_start) * progress

    def itm_factor(self, gwb: float, av: float) -> float:
        """(GWB/AV)^sensitivity when in-the-money, else 1."""
        if gwb <= av:
            return 1.0
        if av <= 0:
            return math.inf
        return (gwb / av) ** self.config.itm_sensitivity

    def calculate_utilization(self, gwb: float, av: float, duration: int, age: int) -> float:
        """
        Utilization rate from age, duration and moneyness.

        [T2] util = (base + age_sens × max(0, age - ref)) × ramp × itm
        """
        c = self.config
        utilization = c.base_utilization + c.age_sensitivity * max(0, age - c.reference_age)
        utilization *= self.duration_factor(duration)
        if utilization > 0:
            utilization *= self.itm_factor(gwb, av)
        return _clamp(utilization, c.min_utilization, c.max_utilization)

    def calculate_withdrawal(
        self,
        gwb: float,
        av: float,
        withdrawal_rate: float,
        duration: int,
        age: int,
    ) -> WithdrawalResult:
        """
        Calculate expected annual withdrawal.

        [T1] Withdrawal = GWB × withdrawal_rate × utilization_rate

        Parameters
        ----------
        gwb : float
            Guaranteed Withdrawal Benefit value
        av : float
            Current account value
        withdrawal_rate : float
            Contract withdrawal rate (e.g., 0.05 for 5%)
        duration : int
            Policy year (1 = first year)
        age : int
            Attained age

        Returns
        -------
        WithdrawalResult
            Calculated withdrawal with diagnostics
        """
        if gwb < 0:
            raise ValueError(f"GWB cannot be negative, got {gwb}")
        if av < 0:
            raise ValueError(f"Account value cannot be negative, got {av}")
        if withdrawal_rate < 0 or withdrawal_rate > 1:
            raise ValueError(f"Withdrawal rate must be in [0, 1], got {withdrawal_rate}")
        if duration <= 0:
            raise ValueError(f"Duration must be positive, got {duration}")

        max_allowed = gwb * withdrawal_rate
        utilization = self.calculate_utilization(gwb, av, duration, age)

        return WithdrawalResult(
            withdrawal_amount=max_allowed * utilization,
            utilization_rate=utilization,
            max_allowed=max_allowed,
        )

    def evaluate(self, context: BehaviorContext) -> float:
        """Utilization for a policy snapshot."""
        return self.calculate_utilization(context.gwb, context.av, context.duration, context.age)


# =============================================================================
# SOA-Calibrated Withdrawal Model
# =============================================================================


@dataclass(frozen=True)
class SOAWithdrawalConfig:
    """
    SOA-calibrated withdrawal utilization assumptions.

    [T2] Based on SOA 2018 VA GLB Utilization Study.

    Attributes
    ----------
    use_duration_curve : bool
        Use the SOA duration curve (else ``flat_utilization``)
    use_age_curve : bool
        Scale by the SOA age curve relative to age 67
    use_itm_sensitivity : bool
        Apply ITM sensitivity factors
    use_continuous_itm : bool
        Interpolate ITM factors between bucket midpoints
    flat_utilization : float
        Utilization used when the duration curve is disabled
    min_utilization : float
        Floor on utilization rate
    max_utilization : float
        Cap on utilization rate (<= 1.0)
    """

    use_duration_curve: bool = True
    use_age_curve: bool = True
    use_itm_sensitivity: bool = True
    use_continuous_itm: bool = True
    flat_utilization: float = 0.50
    min_utilization: float = 0.03
    max_utilization: float = 1.00

    def __post_init__(self) -> None:
        """Validate ranges."""
        _validate_utilization_bounds(self.flat_utilization, self.min_utilization, self.max_utilization)


@dataclass(frozen=True)
class SOAWithdrawalResult:
    """
    Result of SOA-calibrated withdrawal calculation.

    Attributes
    ----------
    withdrawal_amount : float
        Expected annual withdrawal amount
    utilization_rate : float
        Combined utilization rate
    max_allowed : float
        Maximum allowed annual withdrawal
    duration_utilization : float
        Utilization from the duration curve
    age_factor : float
        Age curve relative to the reference age
    itm_factor : float
        ITM sensitivity multiplier applied
    moneyness : float
        GWB/AV ratio used for the ITM factor
    """

    withdrawal_amount: float
    utilization_rate: float
    max_allowed: float
    duration_utilization: float
    age_factor: float
    itm_factor: float
    moneyness: float


class SOAWithdrawalModel:
    """
    SOA-calibrated GLWB withdrawal utilization model.

    Examples
    --------
    >>> model = SOAWithdrawalModel(SOAWithdrawalConfig())
    >>> result = model.calculate_withdrawal(
    ...     gwb=150_000, av=100_000, withdrawal_rate=0.05, duration=5, age=67
    ... )
    >>> result.itm_factor > 1.0
    True
    """

    def __init__(self, config: SOAWithdrawalConfig):
        self.config = config

    def calculate_withdrawal(
        self,
        gwb: float,
        av: float,
        withdrawal_rate: float,
        duration: int,
        age: int,
    ) -> SOAWithdrawalResult:
        """
        Calculate SOA-calibrated withdrawal.

        [T2] util = util_duration × age_factor × itm_factor

        Parameters
        ----------
        gwb : float
            Guaranteed Withdrawal Benefit value
        av : float
            Current account value
        withdrawal_rate : float
            Contract withdrawal rate
        duration : int
            Policy year (1 = first year)
        age : int
            Attained age

        Returns
        -------
        SOAWithdrawalResult
            Detailed withdrawal calculation results
        """
        if gwb < 0:
            raise ValueError(f"GWB cannot be negative, got {gwb}")
        if av < 0:
            raise ValueError(f"Account value cannot be negative, got {av}")
        if withdrawal_rate < 0 or withdrawal_rate > 1:
            raise ValueError(f"Withdrawal rate must be in [0, 1], got {withdrawal_rate}")
        if duration <= 0:
            raise ValueError(f"Duration must be positive, got {duration}")

        c = self.config
        max_allowed = gwb * withdrawal_rate

        if c.use_duration_curve:
            duration_util = interpolate_utilization_by_duration(duration)
        else:
            duration_util = c.flat_utilization

        if c.use_age_curve:
            age_factor = interpolate_utilization_by_age(age) / interpolate_utilization_by_age(
                SOA_2018_REFERENCE_AGE
            )
        else:
            age_factor = 1.0

        if av > 0:
            moneyness = gwb / av
        else:
            moneyness = math.inf if gwb > 0 else 1.0

        if c.use_itm_sensitivity:
            if c.use_continuous_itm:
                itm_factor = get_itm_sensitivity_factor_continuous(moneyness)
            else:
                itm_factor = get_itm_sensitivity_factor(moneyness)
        else:
            itm_factor = 1.0

        utilization = _clamp(
            duration_util * age_factor * itm_factor,
            c.min_utilization,
            c.max_utilization,
        )

        return SOAWithdrawalResult(
            withdrawal_amount=max_allowed * utilization,
            utilization_rate=utilization,
            max_allowed=max_allowed,
            duration_utilization=duration_util,
            age_factor=age_factor,
            itm_factor=itm_factor,
            moneyness=moneyness,
        )

    def evaluate(self, context: BehaviorContext) -> float:
        """Utilization for a policy snapshot."""
        return self.calculate_withdrawal(
            context.gwb,
            context.av,
            context.withdrawal_rate,
            context.duration,
            context.age,
        ).utilization_rate
