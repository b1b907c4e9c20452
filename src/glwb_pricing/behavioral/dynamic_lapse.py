"""
Dynamic Lapse Models.

Moneyness-based full-surrender rates for GLWB contracts.
In-the-money guarantees → lower lapse rates (rational behavior).

Theory
------
[T1] Base lapse rate adjusted by moneyness:
    lapse_rate = base × sc_factor × (AV / GWB)^sensitivity

where moneyness = AV / GWB
- moneyness < 1: ITM guarantee → lower lapse
- moneyness > 1: OTM guarantee → higher lapse
- moneyness = 1: ATM → base lapse (outside the charge period)

[T2] Surrender charge effects:
- Lapse suppressed while a surrender charge applies
- Cliff multiplier in the first year after the charge expires

[T2] SOA 2006 calibration replaces the flat base with a duration curve
(1.4% year 1 → 11.2% in the first post-charge year) and adds an optional age
factor.

Rates are always clamped to the configured [min_lapse, max_lapse] ⊆ [0, 1].
"""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from glwb_pricing.behavioral.base import BehaviorContext
from glwb_pricing.behavioral.calibration import (
    get_sc_cliff_multiplier,
    interpolate_surrender_by_age,
    interpolate_surrender_by_duration,
)
from glwb_pricing.behavioral.soa_benchmarks import (
    SOA_2006_AVERAGE_FULL_SURRENDER,
    SOA_2006_SC_CLIFF_EFFECT,
    SOA_2006_SC_CLIFF_MULTIPLIER,
)

if TYPE_CHECKING:
    from glwb_pricing.glwb.gwb_tracker import GWBState


def _validate_bounds(name: str, base: float, low: float, high: float) -> None:
    if not 0.0 <= low <= high <= 1.0:
        raise ValueError(f"{name} bounds must satisfy 0 <= min <= max <= 1, got [{low}, {high}]")
    if not 0.0 <= base <= 1.0:
        raise ValueError(f"{name} base rate must be in [0, 1], got {base}")


@dataclass(frozen=True)
class LapseConfig:
    """
    Lapse rate assumptions.

    Attributes
    ----------
    base_annual_lapse : float
        Base annual lapse rate after the surrender charge period
    min_lapse : float
        Floor on dynamic lapse rate
    max_lapse : float
        Cap on dynamic lapse rate
    sensitivity : float
        Exponent on moneyness (0 = static lapse)
    surrender_charge_years : int
        Length of the surrender charge period
    sc_suppression : float
        Multiplier on the base rate while a charge applies
    cliff_multiplier : float
        Multiplier in the first policy year after the charge expires
    """

    base_annual_lapse: float = 0.05
    min_lapse: float = 0.01
    max_lapse: float = 0.25
    sensitivity: float = 1.0
    surrender_charge_years: int = 7
    sc_suppression: float = 0.2
    cliff_multiplier: float = SOA_2006_SC_CLIFF_MULTIPLIER

    def __post_init__(self) -> None:
        """Validate ranges."""
        _validate_bounds("Lapse", self.base_annual_lapse, self.min_lapse, self.max_lapse)
        if self.sensitivity < 0:
            raise ValueError(f"sensitivity must be >= 0, got {self.sensitivity}")
        if self.surrender_charge_years < 0:
            raise ValueError(
                f"surrender_charge_years must be >= 0, got {self.surrender_charge_years}"
            )
        if not 0.0 <= self.sc_suppression <= 1.0:
            raise ValueError(f"sc_suppression must be in [0, 1], got {self.sc_suppression}")
        if self.cliff_multiplier < 1.0:
            raise ValueError(f"cliff_multiplier must be >= 1, got {self.cliff_multiplier}")


@dataclass(frozen=True)
class LapseResult:
    """
    Result of lapse calculation.

    Attributes
    ----------
    lapse_rate : float
        Calculated lapse rate
    moneyness : float
        AV/GWB ratio used
    adjustment_factor : float
        Moneyness multiplier applied to the base
    sc_factor : float
        Surrender charge multiplier (suppression or cliff)
    """

    lapse_rate: float
    moneyness: float
    adjustment_factor: float
    sc_factor: float = 1.0


def _moneyness_factor(gwb: float, av: float, sensitivity: float) -> tuple[float, float]:
    """(moneyness, factor); zero GWB is deeply out-of-the-money."""
    if gwb <= 0:
        return math.inf, math.inf
    moneyness = av / gwb
    return moneyness, moneyness**sensitivity


def _clamp(rate: float, low: float, high: float) -> float:
    if math.isnan(rate):
        return low
    return float(np.clip(rate, low, high))


class DynamicLapseModel:
    """
    Dynamic lapse model with moneyness and surrender charge adjustment.

    Examples
    --------
    >>> model = DynamicLapseModel(LapseConfig())
    >>> result = model.calculate_lapse(gwb=110_000, av=100_000, duration=10)  # ITM
    >>> result.lapse_rate < 0.05
    True
    """

    def __init__(self, config: LapseConfig):
        """
        Parameters
        ----------
        config : LapseConfig
            Lapse rate assumptions
        """
        self.config = config

    def surrender_charge_factor(self, duration: int) -> float:
        """Suppression during the charge, cliff in the first year after."""
        sc_years = self.config.surrender_charge_years
        if duration <= sc_years:
            return self.config.sc_suppression
        if duration == sc_years + 1:
            return self.config.cliff_multiplier
        return 1.0

    def calculate_lapse(
        self,
        gwb: float,
        av: float,
        duration: int,
    ) -> LapseResult:
        """
        Calculate dynamic lapse rate.

        [T1] lapse_rate = base × sc_factor × (AV/GWB)^sensitivity

        Parameters
        ----------
        gwb : float
            Guaranteed Withdrawal Benefit value
        av : float
            Current account value
        duration : int
            Policy year (1 = first year)

        Returns
        -------
        LapseResult
            Calculated lapse rate with diagnostics
        """
        if av < 0:
            raise ValueError(f"Account value cannot be negative, got {av}")
        if gwb < 0:
            raise ValueError(f"GWB cannot be negative, got {gwb}")
        if duration <= 0:
            raise ValueError(f"Duration must be positive, got {duration}")

        moneyness, adjustment_factor = _moneyness_factor(gwb, av, self.config.sensitivity)
        sc_factor = self.surrender_charge_factor(duration)

        base_rate = self.config.base_annual_lapse * sc_factor
        if base_rate == 0:
            lapse_rate = 0.0
        else:
            lapse_rate = base_rate * adjustment_factor

        return LapseResult(
            lapse_rate=_clamp(lapse_rate, self.config.min_lapse, self.config.max_lapse),
            moneyness=moneyness,
            adjustment_factor=adjustment_factor,
            sc_factor=sc_factor,
        )

    def evaluate(self, context: BehaviorContext) -> float:
        """Annual lapse rate for a policy snapshot."""
        return self.calculate_lapse(context.gwb, context.av, context.duration).lapse_rate

    def calculate_path_lapses(
        self,
        gwb_path: np.ndarray,
        av_path: np.ndarray,
        start_duration: int = 1,
    ) -> np.ndarray:
        """
        Calculate lapse rates along a path of anniversary values.

        Parameters
        ----------
        gwb_path : ndarray
            GWB at the start of each policy year
        av_path : ndarray
            AV at the start of each policy year
        start_duration : int
            Policy year of the first entry

        Returns
        -------
        ndarray
            Annual lapse rates (shape: [n_years])
        """
        if len(gwb_path) != len(av_path):
            raise ValueError(
                f"Path lengths must match: gwb={len(gwb_path)}, av={len(av_path)}"
            )
        return np.array([
            self.calculate_lapse(float(g), float(a), start_duration + t).lapse_rate
            for t, (g, a) in enumerate(zip(gwb_path, av_path))
        ])


# =============================================================================
# SOA-Calibrated Lapse Model
# =============================================================================


@dataclass(frozen=True)
class SOALapseConfig:
    """
    SOA-calibrated lapse rate assumptions.

    [T2] Based on SOA 2006 Deferred Annuity Persistency Study.

    Attributes
    ----------
    surrender_charge_length : int
        Length of surrender charge period in years
    use_duration_curve : bool
        Use the SOA duration curve (which already contains the cliff)
    use_sc_cliff_effect : bool
        Without the duration curve, scale ``base_rate`` by the SOA position
        multipliers around the end of the charge
    use_age_adjustment : bool
        Scale by the SOA age curve relative to its average
    base_rate : float
        Flat rate used when the duration curve is disabled
    moneyness_sensitivity : float
        Exponent on AV/GWB
    min_lapse : float
        Floor on lapse rate
    max_lapse : float
        Cap on lapse rate
    """

    surrender_charge_length: int = 7
    use_duration_curve: bool = True
    use_sc_cliff_effect: bool = True
    use_age_adjustment: bool = False
    base_rate: float = SOA_2006_SC_CLIFF_EFFECT['years_remaining_3plus']
    moneyness_sensitivity: float = 1.0
    min_lapse: float = 0.005
    max_lapse: float = 0.25

    def __post_init__(self) -> None:
        """Validate ranges."""
        _validate_bounds("Lapse", self.base_rate, self.min_lapse, self.max_lapse)
        if self.surrender_charge_length <= 0:
            raise ValueError(
                f"surrender_charge_length must be positive, got {self.surrender_charge_length}"
            )
        if self.moneyness_sensitivity < 0:
            raise ValueError(
                f"moneyness_sensitivity must be >= 0, got {self.moneyness_sensitivity}"
            )


@dataclass(frozen=True)
class SOALapseResult:
    """
    Result of SOA-calibrated lapse calculation.

    Attributes
    ----------
    lapse_rate : float
        Final lapse rate
    base_rate : float
        Duration-curve (or flat) base rate
    sc_cliff_factor : float
        Surrender charge position multiplier applied
    moneyness : float
        AV/GWB ratio
    moneyness_factor : float
        Multiplier from moneyness
    age_factor : float
        Multiplier from age (1.0 if disabled)
    """

    lapse_rate: float
    base_rate: float
    sc_cliff_factor: float
    moneyness: float
    moneyness_factor: float
    age_factor: float


class SOADynamicLapseModel:
    """
    SOA-calibrated dynamic lapse model.

    Examples
    --------
    >>> model = SOADynamicLapseModel(SOALapseConfig())
    >>> model.calculate_lapse(gwb=100_000, av=100_000, duration=8).base_rate
    0.112
    """

    def __init__(self, config: SOALapseConfig):
        self.config = config

    def calculate_lapse(
        self,
        gwb: float,
        av: float,
        duration: int,
        age: int | None = None,
    ) -> SOALapseResult:
        """
        Calculate SOA-calibrated lapse rate.

        [T2] lapse_rate = base_rate × sc_cliff × moneyness_factor × age_factor

        Parameters
        ----------
        gwb : float
            Guaranteed Withdrawal Benefit value
        av : float
            Current account value
        duration : int
            Policy year (1 = first year)
        age : int, optional
            Attained age (for age adjustment)

        Returns
        -------
        SOALapseResult
            Detailed lapse calculation results
        """
        if av < 0:
            raise ValueError(f"Account value cannot be negative, got {av}")
        if gwb < 0:
            raise ValueError(f"GWB cannot be negative, got {gwb}")
        if duration <= 0:
            raise ValueError(f"Duration must be positive, got {duration}")

        c = self.config

        # 1. Base rate
        if c.use_duration_curve:
            base_rate = interpolate_surrender_by_duration(duration, c.surrender_charge_length)
            sc_cliff_factor = 1.0
        else:
            base_rate = c.base_rate
            # Position relative to charge end: 0 in the first post-charge year
            years_to_sc_end = c.surrender_charge_length + 1 - duration
            sc_cliff_factor = get_sc_cliff_multiplier(years_to_sc_end) if c.use_sc_cliff_effect else 1.0

        # 2. Moneyness
        moneyness, moneyness_factor = _moneyness_factor(gwb, av, c.moneyness_sensitivity)

        # 3. Age
        if c.use_age_adjustment and age is not None:
            age_factor = interpolate_surrender_by_age(age) / SOA_2006_AVERAGE_FULL_SURRENDER
        else:
            age_factor = 1.0

        lapse_rate = base_rate * sc_cliff_factor * moneyness_factor * age_factor

        return SOALapseResult(
            lapse_rate=_clamp(lapse_rate, c.min_lapse, c.max_lapse),
            base_rate=base_rate,
            sc_cliff_factor=sc_cliff_factor,
            moneyness=moneyness,
            moneyness_factor=moneyness_factor,
            age_factor=age_factor,
        )

    def evaluate(self, context: BehaviorContext) -> float:
        """Annual lapse rate for a policy snapshot."""
        return self.calculate_lapse(
            context.gwb, context.av, context.duration, context.age
        ).lapse_rate


# =============================================================================
# Lapse Utilities
# =============================================================================


def survival_from_lapses(lapse_rates: np.ndarray, dt: float = 1.0) -> np.ndarray:
    """
    Cumulative persistency implied by a sequence of lapse rates.

    [T1] survival_t = Π_{s<=t} (1 - lapse_s × dt), floored at 0

    Parameters
    ----------
    lapse_rates : array-like
        Annual lapse rates for consecutive periods
    dt : float
        Period length in years

    Returns
    -------
    ndarray
        Persistency at the end of each period (same length as the input)

    Examples
    --------
    >>> survival_from_lapses([0.1, 0.1])
    array([0.9 , 0.81])
    """
    rates = np.asarray(lapse_rates, dtype=float)
    if np.any(rates < 0):
        raise ValueError("Lapse rates cannot be negative")
    return np.cumprod(np.clip(1.0 - rates * dt, 0.0, 1.0))


def lapse_probability(annual_rate: float, dt: float) -> float:
    """
    Probability of lapsing within a step of ``dt`` years.

    [T1] q_dt = 1 - (1 - annual_rate)^dt
    """
    if not 0.0 <= annual_rate <= 1.0:
        raise ValueError(f"Annual lapse rate must be in [0, 1], got {annual_rate}")
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")
    return 1.0 - (1.0 - annual_rate) ** dt


def moneyness_from_state(state: "GWBState") -> float:
    """AV / GWB of a guarantee state; inf for a zero GWB."""
    if state.gwb <= 0:
        return math.inf
    return state.av / state.gwb


def is_itm(state: "GWBState") -> bool:
    """Guarantee is in-the-money when GWB exceeds AV."""
    return state.gwb > state.av
