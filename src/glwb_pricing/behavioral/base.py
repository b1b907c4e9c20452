"""
Behavioral model capabilities consumed by the GLWB simulator.

Each capability is a small protocol with a single ``evaluate`` method taking a
:class:`BehaviorContext`. The simulator holds each model as ``Optional`` and
falls back to contractual behavior when a model is absent.
"""

import math
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class BehaviorContext:
    """
    Policy snapshot handed to behavioral models.

    Attributes
    ----------
    gwb : float
        Current guaranteed withdrawal base
    av : float
        Current account value
    duration : int
        Policy year, 1 for the first year
    age : int
        Attained age
    withdrawal_rate : float
        Contractual annual withdrawal rate
    years_since_first_withdrawal : int
        Completed years of withdrawals (0 before/at the first)
    """

    gwb: float
    av: float
    duration: int
    age: int
    withdrawal_rate: float = 0.05
    years_since_first_withdrawal: int = 0

    def __post_init__(self) -> None:
        if self.gwb < 0:
            raise ValueError(f"GWB cannot be negative, got {self.gwb}")
        if self.av < 0:
            raise ValueError(f"Account value cannot be negative, got {self.av}")
        if self.duration <= 0:
            raise ValueError(f"Duration must be positive, got {self.duration}")

    @property
    def moneyness(self) -> float:
        """AV / GWB; inf for a zero GWB (deeply out-of-the-money guarantee)."""
        if self.gwb <= 0:
            return math.inf
        return self.av / self.gwb

    @property
    def itm_ratio(self) -> float:
        """GWB / AV; inf for an exhausted AV."""
        if self.av <= 0:
            return math.inf if self.gwb > 0 else 1.0
        return self.gwb / self.av


class LapseModel(Protocol):
    """Annual full-surrender rate in [0, 1]."""

    def evaluate(self, context: BehaviorContext) -> float:
        ...


class WithdrawalModel(Protocol):
    """Utilization of the contractual maximum, in [0, 1]."""

    def evaluate(self, context: BehaviorContext) -> float:
        ...


class ExpenseModel(Protocol):
    """Annual maintenance expense in dollars, >= 0."""

    def evaluate(self, context: BehaviorContext) -> float:
        ...

    def acquisition_cost(self, premium: float) -> float:
        ...
