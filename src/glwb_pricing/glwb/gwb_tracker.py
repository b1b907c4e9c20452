"""
GWB (Guaranteed Withdrawal Base) State Machine.

Tracks the Guaranteed Withdrawal Base and account value of one policy through:
- Rollup (simple or compound, capped in years, pre-withdrawal only)
- Market growth and rider fee
- Contractual and excess withdrawals
- Ratchet (step-up to AV at anniversaries)

Theory
------
[T1] GWB is the base for the maximum allowed withdrawal:
    Max Withdrawal (per step) = GWB × withdrawal_rate × dt

[T1] Transition order for one step of size dt:
    1. Rollup observed at years_since_issue BEFORE the time advance
    2. AV grows by the market return
    3. Fee = fee_rate × basis × dt comes out of AV (floored at 0)
    4. Withdrawal; excess over the maximum haircuts the GWB
    5. Withdrawal phase flag / cumulative withdrawals updated
    6. years_since_issue += dt
    7. Ratchet on anniversaries using the post-withdrawal AV

[T2] Excess withdrawal haircut (pro-rata):
    GWB_new = GWB × (1 - excess / AV_avail)
    where excess = min(requested, AV) - max withdrawal and AV_avail is the AV
    left after the contractual portion. Zero when excess = 0, strictly
    increasing in excess, and never more than the whole GWB. A request the AV
    cannot cover beyond the maximum is not an excess withdrawal.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

import numpy as np

from glwb_pricing.config.tolerances import ANNIVERSARY_TOLERANCE

from .rollup import CompoundRollup, NoRollup, RollupMechanic, SimpleRollup, is_anniversary


class RollupType(Enum):
    """Type of rollup applied to GWB."""
    SIMPLE = "simple"
    COMPOUND = "compound"
    NONE = "none"


class FeeBasis(Enum):
    """Amount the rider fee is charged against."""
    GWB = "gwb"
    ACCOUNT_VALUE = "av"


MAX_WITHDRAWAL_RATE = 0.20


@dataclass(frozen=True)
class GWBState:
    """
    Current state of one policy's guarantee.

    Attributes
    ----------
    gwb : float
        Current GWB value
    av : float
        Current account value (0 means ruin)
    initial_premium : float
        Original premium
    rollup_base : float
        Base for rollup calculation
    high_water_mark : float
        Highest anniversary AV observed
    years_since_issue : float
        Time since contract issue
    withdrawal_phase_started : bool
        Whether withdrawals have begun (one-way)
    total_withdrawals : float
        Cumulative withdrawals taken from AV
    """

    gwb: float
    av: float
    initial_premium: float
    rollup_base: float
    high_water_mark: float
    years_since_issue: float
    withdrawal_phase_started: bool
    total_withdrawals: float = 0.0

    def __post_init__(self) -> None:
        """Validate state invariants."""
        if self.gwb < 0:
            raise ValueError(f"GWB cannot be negative, got {self.gwb}")
        if self.av < 0:
            raise ValueError(f"AV cannot be negative, got {self.av}")
        if self.years_since_issue < 0:
            raise ValueError(f"years_since_issue cannot be negative, got {self.years_since_issue}")
        if self.total_withdrawals < 0:
            raise ValueError(f"total_withdrawals cannot be negative, got {self.total_withdrawals}")

    @classmethod
    def from_premium(cls, premium: float) -> "GWBState":
        """
        Create the state at contract issue.

        [T1] At issue: GWB = AV = rollup base = high water mark = premium
        """
        if premium <= 0:
            raise ValueError(f"Initial premium must be positive, got {premium}")
        return cls(
            gwb=premium,
            av=premium,
            initial_premium=premium,
            rollup_base=premium,
            high_water_mark=premium,
            years_since_issue=0.0,
            withdrawal_phase_started=False,
            total_withdrawals=0.0,
        )


@dataclass(frozen=True)
class GWBConfig:
    """
    Configuration for GWB mechanics.

    Attributes
    ----------
    rollup_type : RollupType
        Simple, compound, or none (strings "simple"/"compound"/"none" accepted)
    rollup_rate : float
        Annual rollup rate (e.g., 0.05 for 5%)
    rollup_cap_years : int
        Maximum policy years rollup accrues (e.g., 10)
    ratchet_enabled : bool
        Whether anniversary step-ups apply
    ratchet_frequency : int
        Anniversaries between ratchet opportunities
    withdrawal_rate : float
        Guaranteed annual withdrawal rate, in (0, 0.20]
    fee_rate : float
        Annual rider fee as % of the fee basis
    fee_basis : FeeBasis
        GWB or account value (strings "gwb"/"av" accepted)
    """

    rollup_type: RollupType = RollupType.COMPOUND
    rollup_rate: float = 0.05
    rollup_cap_years: int = 10
    ratchet_enabled: bool = True
    ratchet_frequency: int = 1
    withdrawal_rate: float = 0.05
    fee_rate: float = 0.01
    fee_basis: FeeBasis = FeeBasis.GWB

    def __post_init__(self) -> None:
        """Normalize enum fields and validate ranges."""
        # Frozen dataclass workaround: use object.__setattr__
        if not isinstance(self.rollup_type, RollupType):
            object.__setattr__(self, "rollup_type", RollupType(self.rollup_type))
        if not isinstance(self.fee_basis, FeeBasis):
            object.__setattr__(self, "fee_basis", FeeBasis(self.fee_basis))

        if self.rollup_rate < 0:
            raise ValueError(f"rollup_rate must be >= 0, got {self.rollup_rate}")
        if self.rollup_cap_years < 0:
            raise ValueError(f"rollup_cap_years must be >= 0, got {self.rollup_cap_years}")
        if self.ratchet_frequency < 1:
            raise ValueError(f"ratchet_frequency must be >= 1, got {self.ratchet_frequency}")
        if not 0 < self.withdrawal_rate <= MAX_WITHDRAWAL_RATE:
            raise ValueError(
                f"withdrawal_rate must be in (0, {MAX_WITHDRAWAL_RATE}], got {self.withdrawal_rate}"
            )
        if self.fee_rate < 0:
            raise ValueError(f"fee_rate must be >= 0, got {self.fee_rate}")


@dataclass(frozen=True)
class StepResult:
    """
    Result of stepping GWB forward.

    Attributes
    ----------
    new_state : GWBState
        Updated state after step
    rollup_applied : float
        Amount of rollup added to GWB
    ratchet_applied : bool
        Whether the ratchet stepped GWB up
    fee_charged : float
        Fee actually deducted from AV
    withdrawal_taken : float
        Withdrawal actually paid out of AV
    excess_withdrawal : float
        Amount taken above the contractual maximum
    gwb_reduction : float
        GWB removed by the excess-withdrawal haircut
    """

    new_state: GWBState
    rollup_applied: float
    ratchet_applied: bool
    fee_charged: float
    withdrawal_taken: float
    excess_withdrawal: float
    gwb_reduction: float = 0.0


def _rollup_mechanic(rollup_type: RollupType) -> RollupMechanic:
    if rollup_type == RollupType.SIMPLE:
        return SimpleRollup()
    if rollup_type == RollupType.COMPOUND:
        return CompoundRollup()
    return NoRollup()


def calculate_rollup(state: GWBState, config: GWBConfig) -> float:
    """
    Rolled-up GWB implied by the state's current policy year.

    Uses ``years_since_issue`` as observed now, so a state at issue rolls up
    to exactly the rollup base.
    """
    return _rollup_mechanic(config.rollup_type).calculate(
        state.rollup_base,
        state.years_since_issue,
        config.rollup_rate,
        config.rollup_cap_years,
    )


def withdrawal_base(state: GWBState, config: GWBConfig) -> float:
    """
    GWB on which the current step's contractual maximum is set.

    Before the withdrawal phase the pending rollup is included, so the first
    withdrawal after deferral is sized on the rolled-up base.
    """
    if state.withdrawal_phase_started:
        return state.gwb
    return max(state.gwb, calculate_rollup(state, config))


def max_withdrawal(gwb: float, config: GWBConfig, dt: float = 1.0) -> float:
    """[T1] Contractual maximum for a step: GWB × withdrawal_rate × dt"""
    return gwb * config.withdrawal_rate * dt


def excess_withdrawal_gwb(gwb: float, av_available: float, excess: float) -> float:
    """
    GWB after an excess withdrawal.

    [T2] Pro-rata haircut: GWB × (1 - excess / av_available), floored at 0.
    Excess is measured on the amount actually taken, so av_available > 0
    whenever excess > 0.

    Parameters
    ----------
    gwb : float
        GWB before the haircut
    av_available : float
        AV remaining after the contractual portion of the withdrawal
    excess : float
        Amount taken above the contractual maximum

    Returns
    -------
    float
        Reduced GWB
    """
    if excess <= 0:
        return gwb
    if av_available <= 0:
        return 0.0
    ratio = min(excess / av_available, 1.0)
    return gwb * (1.0 - ratio)


def step(
    state: GWBState,
    config: GWBConfig,
    market_return: float,
    requested_withdrawal: float = 0.0,
    dt: float = 1.0,
) -> StepResult:
    """
    Advance one policy by one time step.

    Parameters
    ----------
    state : GWBState
        Current state
    config : GWBConfig
        Rider mechanics
    market_return : float
        Simple AV return over the step (e.g., -0.10 for -10%)
    requested_withdrawal : float
        Amount the policyholder asks to withdraw this step
    dt : float
        Time step in years

    Returns
    -------
    StepResult
        Updated state with step diagnostics

    Examples
    --------
    >>> state = GWBState.from_premium(100_000)
    >>> result = step(state, GWBConfig(fee_rate=0.0), market_return=0.0)
    >>> result.new_state.gwb
    100000.0
    """
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")
    if requested_withdrawal < 0:
        raise ValueError(f"Withdrawal cannot be negative, got {requested_withdrawal}")

    gwb = state.gwb
    rollup_applied = 0.0
    ratchet_applied = False

    # 1. Rollup (pre-advance policy year, pre-withdrawal phase only)
    rolled_up = withdrawal_base(state, config)
    if rolled_up > gwb:
        rollup_applied = rolled_up - gwb
        gwb = rolled_up

    # 2. Market return
    av = max(0.0, state.av * (1 + market_return))

    # 3. Rider fee
    basis = gwb if config.fee_basis == FeeBasis.GWB else av
    fee = min(config.fee_rate * basis * dt, av)
    av -= fee

    # 4. Withdrawal
    allowed = max_withdrawal(gwb, config, dt)
    taken = min(requested_withdrawal, av)
    excess = max(taken - allowed, 0.0)
    gwb_before_haircut = gwb
    if excess > 0:
        gwb = excess_withdrawal_gwb(gwb, av - allowed, excess)
    av -= taken

    # 5. Withdrawal phase (one-way)
    withdrawal_phase = state.withdrawal_phase_started or requested_withdrawal > 0

    # 6. Time advance
    years = state.years_since_issue + dt

    # 7. Ratchet on anniversary
    high_water_mark = state.high_water_mark
    if config.ratchet_enabled and is_anniversary(state.years_since_issue, dt):
        anniversary = math.floor(years + ANNIVERSARY_TOLERANCE)
        if anniversary % config.ratchet_frequency == 0:
            high_water_mark = max(high_water_mark, av)
            if av > gwb:
                ratchet_applied = True
                gwb = av

    new_state = replace(
        state,
        gwb=gwb,
        av=av,
        high_water_mark=high_water_mark,
        years_since_issue=years,
        withdrawal_phase_started=withdrawal_phase,
        total_withdrawals=state.total_withdrawals + taken,
    )

    return StepResult(
        new_state=new_state,
        rollup_applied=rollup_applied,
        ratchet_applied=ratchet_applied,
        fee_charged=fee,
        withdrawal_taken=taken,
        excess_withdrawal=excess,
        gwb_reduction=gwb_before_haircut - gwb if excess > 0 else 0.0,
    )


def is_ruined(state: GWBState) -> bool:
    """Account value exhausted while the guarantee is still owed."""
    return state.av <= 0 and state.gwb > 0


def benefit_moneyness(state: GWBState) -> float:
    """
    GWB / AV: above 1 the guarantee is in-the-money.

    Returns inf when AV is exhausted with a positive GWB, and 0 for a
    zero GWB.
    """
    if state.gwb <= 0:
        return 0.0
    if state.av <= 0:
        return math.inf
    return state.gwb / state.av


class GWBTracker:
    """
    Tracks one policy's GWB through time.

    [T1] GWB determines guaranteed withdrawal amount.
    [T1] GWB grows via rollup until withdrawals begin.
    [T1] Ratchet locks in AV gains at anniversaries.

    Examples
    --------
    >>> config = GWBConfig(rollup_rate=0.05)
    >>> tracker = GWBTracker(config, initial_premium=100_000)
    >>> state = tracker.initial_state()
    >>> result = tracker.step(state, av_return=-0.10, dt=1.0)
    """

    def __init__(self, config: GWBConfig, initial_premium: float):
        """
        Initialize GWB tracker.

        Parameters
        ----------
        config : GWBConfig
            GWB mechanics configuration
        initial_premium : float
            Initial premium amount
        """
        if initial_premium <= 0:
            raise ValueError(f"Initial premium must be positive, got {initial_premium}")

        self.config = config
        self.initial_premium = initial_premium

    def initial_state(self) -> GWBState:
        """Create initial GWB state at contract issue."""
        return GWBState.from_premium(self.initial_premium)

    def step(
        self,
        state: GWBState,
        av_return: float,
        dt: float = 1.0,
        withdrawal: float = 0.0,
    ) -> StepResult:
        """Step the state forward; see :func:`step`."""
        return step(state, self.config, av_return, withdrawal, dt)

    def calculate_max_withdrawal(self, state: GWBState, dt: float = 1.0) -> float:
        """
        Calculate maximum allowed withdrawal for a step.

        [T1] Max Withdrawal = GWB × withdrawal_rate × dt, on the rolled-up GWB
        while the withdrawal phase has not started.
        """
        return max_withdrawal(withdrawal_base(state, self.config), self.config, dt)

    def simulate_path(
        self,
        av_returns: np.ndarray,
        withdrawals: Optional[np.ndarray] = None,
        dt: float = 1.0,
    ) -> tuple[list[GWBState], list[StepResult]]:
        """
        Simulate GWB evolution along a deterministic path of returns.

        Parameters
        ----------
        av_returns : ndarray
            AV return for each period
        withdrawals : ndarray, optional
            Withdrawal amounts; NaN entries (and the default) take the
            contractual maximum for that step
        dt : float
            Time step in years

        Returns
        -------
        tuple[list[GWBState], list[StepResult]]
            States (including the initial state) and step results
        """
        n_steps = len(av_returns)
        if withdrawals is None:
            withdrawals = np.full(n_steps, np.nan)
        if len(withdrawals) != n_steps:
            raise ValueError(
                f"withdrawals length {len(withdrawals)} != returns length {n_steps}"
            )

        states = [self.initial_state()]
        results = []

        for t in range(n_steps):
            state = states[-1]
            if np.isnan(withdrawals[t]):
                withdrawal = self.calculate_max_withdrawal(state, dt)
            else:
                withdrawal = float(withdrawals[t])

            result = self.step(state, float(av_returns[t]), dt, withdrawal)
            states.append(result.new_state)
            results.append(result)

        return states, results

    def calculate_guarantee_payoff(self, state: GWBState, dt: float = 1.0) -> float:
        """
        Insurer-funded withdrawal for one step.

        [T1] When AV = 0 the insurer pays the guaranteed withdrawal
        until the policyholder dies.
        """
        if is_ruined(state):
            return self.calculate_max_withdrawal(state, dt)
        return 0.0
