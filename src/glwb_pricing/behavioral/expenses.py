"""
Policy expense model.

Models maintenance and acquisition expenses charged against the account:
- Per-policy fixed expense, inflated annually
- Percentage of AV expense
- One-time acquisition cost at issue

Theory
------
[T1] Period expense = per_policy × (1 + inflation)^year × dt + AV × pct × dt

[T1] PV of expenses = Σ_t expense(t) × survival(t) × e^(-r t dt)
"""

from dataclasses import dataclass

import numpy as np

from glwb_pricing.behavioral.base import BehaviorContext


@dataclass(frozen=True)
class ExpenseConfig:
    """
    Expense assumptions.

    Attributes
    ----------
    per_policy_annual : float
        Fixed annual per-policy expense in dollars
    pct_of_av_annual : float
        Annual charge as a fraction of AV (0.015 = 1.5%)
    acquisition_pct : float
        One-time acquisition cost as a fraction of premium
    inflation_rate : float
        Annual inflation applied to the per-policy expense
    """

    per_policy_annual: float = 100.0
    pct_of_av_annual: float = 0.015
    acquisition_pct: float = 0.03
    inflation_rate: float = 0.025

    def __post_init__(self) -> None:
        """Validate that every charge is non-negative."""
        if self.per_policy_annual < 0:
            raise ValueError(f"per_policy_annual must be >= 0, got {self.per_policy_annual}")
        if not 0.0 <= self.pct_of_av_annual <= 1.0:
            raise ValueError(f"pct_of_av_annual must be in [0, 1], got {self.pct_of_av_annual}")
        if not 0.0 <= self.acquisition_pct <= 1.0:
            raise ValueError(f"acquisition_pct must be in [0, 1], got {self.acquisition_pct}")
        if self.inflation_rate < 0:
            raise ValueError(f"inflation_rate must be >= 0, got {self.inflation_rate}")


@dataclass(frozen=True)
class ExpenseResult:
    """
    Result of expense calculation.

    Attributes
    ----------
    total_expense : float
        Total expense for the period
    per_policy_component : float
        Fixed per-policy portion (inflated)
    av_component : float
        Percentage-of-AV portion
    """

    total_expense: float
    per_policy_component: float
    av_component: float


class PolicyExpenseModel:
    """
    Per-policy plus percentage-of-AV expense model.

    Examples
    --------
    >>> model = PolicyExpenseModel(ExpenseConfig())
    >>> model.calculate_period_expense(av=100_000).total_expense
    1600.0
    """

    def __init__(self, config: ExpenseConfig):
        self.config = config

    def calculate_period_expense(
        self,
        av: float,
        period_years: float = 1.0,
        years_from_issue: int = 0,
    ) -> ExpenseResult:
        """
        Calculate expense for a period.

        Parameters
        ----------
        av : float
            Account value
        period_years : float
            Length of the period in years
        years_from_issue : int
            Completed policy years, drives inflation

        Returns
        -------
        ExpenseResult
            Calculated expenses with breakdown
        """
        if av < 0:
            raise ValueError(f"Account value cannot be negative, got {av}")
        if period_years <= 0:
            raise ValueError(f"Period must be positive, got {period_years}")
        if years_from_issue < 0:
            raise ValueError(f"years_from_issue must be >= 0, got {years_from_issue}")

        c = self.config
        inflation_factor = (1 + c.inflation_rate) ** years_from_issue
        per_policy_expense = c.per_policy_annual * inflation_factor * period_years
        av_expense = av * c.pct_of_av_annual * period_years

        return ExpenseResult(
            total_expense=per_policy_expense + av_expense,
            per_policy_component=per_policy_expense,
            av_component=av_expense,
        )

    def acquisition_cost(self, premium: float) -> float:
        """
        One-time acquisition cost.

        [T1] Acquisition cost = premium × acquisition_pct
        """
        if premium < 0:
            raise ValueError(f"Premium cannot be negative, got {premium}")
        return premium * self.config.acquisition_pct

    def evaluate(self, context: BehaviorContext) -> float:
        """Annual expense for a policy snapshot (policy year 1 is uninflated)."""
        return self.calculate_period_expense(
            av=context.av,
            period_years=1.0,
            years_from_issue=context.duration - 1,
        ).total_expense

    def calculate_path_expenses(self, av_path: np.ndarray, dt: float = 1.0) -> np.ndarray:
        """Expense at each step of an AV path."""
        av_path = np.asarray(av_path, dtype=float)
        expenses = np.zeros(len(av_path))
        for t, av in enumerate(av_path):
            expenses[t] = self.calculate_period_expense(
                av=av,
                period_years=dt,
                years_from_issue=int(t * dt + 1e-9),
            ).total_expense
        return expenses

    def calculate_pv_expenses(
        self,
        av_path: np.ndarray,
        survival_probs: np.ndarray,
        discount_rate: float,
        dt: float = 1.0,
        include_acquisition: bool = False,
        premium: float | None = None,
    ) -> float:
        """
        Present value of expenses along a path.

        [T1] PV = Σ_t expense(t) × survival(t) × e^(-r × t × dt)

        Parameters
        ----------
        av_path : ndarray
            Account values at the start of each step
        survival_probs : ndarray
            Cumulative survival to the start of each step
        discount_rate : float
            Continuously compounded discount rate
        dt : float
            Time step in years
        include_acquisition : bool
            Add the acquisition cost at t=0
        premium : float, optional
            Required when ``include_acquisition`` is True

        Returns
        -------
        float
            Present value of expenses
        """
        if len(av_path) != len(survival_probs):
            raise ValueError(
                f"Path lengths must match: av={len(av_path)}, survival={len(survival_probs)}"
            )

        expenses = self.calculate_path_expenses(av_path, dt)
        times = np.arange(len(expenses)) * dt
        pv = float(np.sum(expenses * np.asarray(survival_probs) * np.exp(-discount_rate * times)))

        if include_acquisition:
            if premium is None:
                raise ValueError("Premium required when include_acquisition=True")
            pv += self.acquisition_cost(premium)

        return pv

    def expense_ratio(self, av: float, years_from_issue: int = 0) -> float:
        """
        Annual expense as a fraction of AV.

        Examples
        --------
        >>> PolicyExpenseModel(ExpenseConfig()).expense_ratio(100_000)
        0.016
        """
        if av <= 0:
            raise ValueError(f"Account value must be positive, got {av}")
        return self.calculate_period_expense(av, 1.0, years_from_issue).total_expense / av
