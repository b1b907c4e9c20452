"""
GLWB Path-Dependent Monte Carlo.

Simulates GLWB guarantee costs with path-dependent Monte Carlo.
Each path requires:
- AV evolution (GBM returns, rider fee, expenses)
- GWB tracking (rollup, ratchet, excess withdrawals)
- Mortality, lapse and withdrawal decrements
- Shortfall cash flows once the AV is exhausted

Theory
------
[T1] GLWB value = E[PV(insurer payments when AV exhausted)]

The insurer pays when:
1. Account value is exhausted (AV = 0)
2. Policyholder is still alive and in force
3. Guaranteed withdrawals continue until death

[T1] Fair fee: the rider fee at which PV(fees) = PV(guarantee cost)

Reproducibility
---------------
Path i draws only from child i of ``SeedSequence(seed)``; each child spawns
one stream for market returns and one for decrements. Results therefore do
not depend on how paths are split across worker processes.

See: Bauer, Kling & Russ (2008) "A Universal Pricing Framework for
Guaranteed Minimum Benefits in Variable Annuities"
"""

import logging
import math
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Literal, Optional

import numpy as np
from scipy import stats

from glwb_pricing.behavioral.base import (
    BehaviorContext,
    ExpenseModel,
    LapseModel,
    WithdrawalModel,
)
from glwb_pricing.behavioral.dynamic_lapse import lapse_probability
from glwb_pricing.config.settings import SETTINGS
from glwb_pricing.simulation.gbm import GBMReturnGenerator, MarketPathGenerator

from .aggregation import PathBatch, PathResult, combine_batches, summarize
from .gwb_tracker import GWBConfig, GWBState, is_ruined, max_withdrawal, step, withdrawal_base
from .mortality import TERMINAL_AGE, MortalityModel, default_mortality, step_qx

logger = logging.getLogger(__name__)


class DecrementMode(Enum):
    """How mortality and lapse decrements are applied along a path."""
    STOCHASTIC = "stochastic"
    EXPECTED = "expected"


@dataclass(frozen=True)
class SimulatorConfig:
    """
    Monte Carlo configuration.

    Attributes
    ----------
    risk_free_rate : float
        Continuously compounded risk-free rate (drift and discounting)
    volatility : float
        Annual volatility of the separate account
    n_paths : int
        Number of simulated policy lifetimes
    steps_per_year : int
        Time steps per policy year (1 = annual, 12 = monthly)
    max_age : int
        Age at which simulation stops (<= terminal age 120)
    seed : int, optional
        Root seed; None draws fresh OS entropy
    n_workers : int
        Worker processes; 1 runs in-process
    decrement_mode : DecrementMode
        Random death/lapse draws, or in-force weights
        (strings "stochastic"/"expected" accepted)
    chunk_size : int
        Paths per work unit when ``n_workers > 1``
    """

    risk_free_rate: float
    volatility: float
    n_paths: int = SETTINGS.simulation.mc_paths
    steps_per_year: int = SETTINGS.simulation.steps_per_year
    max_age: int = SETTINGS.mortality.max_age
    seed: Optional[int] = SETTINGS.simulation.mc_seed
    n_workers: int = 1
    decrement_mode: DecrementMode = DecrementMode.STOCHASTIC
    chunk_size: int = SETTINGS.simulation.chunk_size

    def __post_init__(self) -> None:
        """Normalize enum fields and validate ranges."""
        if not isinstance(self.decrement_mode, DecrementMode):
            object.__setattr__(self, "decrement_mode", DecrementMode(self.decrement_mode))

        if self.risk_free_rate < 0:
            raise ValueError(f"CRITICAL: risk_free_rate must be >= 0, got {self.risk_free_rate}")
        if self.volatility <= 0:
            raise ValueError(f"CRITICAL: volatility must be > 0, got {self.volatility}")
        if self.n_paths <= 0:
            raise ValueError(f"n_paths must be > 0, got {self.n_paths}")
        if self.steps_per_year < 1:
            raise ValueError(f"steps_per_year must be >= 1, got {self.steps_per_year}")
        if not 0 < self.max_age <= TERMINAL_AGE:
            raise ValueError(f"max_age must be in (0, {TERMINAL_AGE}], got {self.max_age}")
        if self.n_workers < 1:
            raise ValueError(f"n_workers must be >= 1, got {self.n_workers}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")

    @property
    def dt(self) -> float:
        return 1.0 / self.steps_per_year


@dataclass(frozen=True)
class GLWBPriceResult:
    """
    Result of GLWB pricing.

    Optional fields are None when the corresponding behavioral model was not
    configured.

    Attributes
    ----------
    price : float
        Guarantee cost per unit premium
    standard_error : float
        Standard error of ``price``
    prob_ruin : float
        Probability the AV is exhausted while in force
    prob_lapse : float
        Probability of lapse (0 without a lapse model)
    n_paths : int
        Number of paths simulated
    mean_payoff : float
        Average discounted shortfall in dollars
    std_payoff : float
        Sample std dev of discounted shortfall in dollars
    fee_value : float
        PV of rider fees per unit premium
    mean_ruin_year : float, optional
        Average time of ruin in years, None if no path was ruined
    mean_lapse_year : float, optional
        Average policy year of lapse, None if no lapse occurred
    avg_utilization : float, optional
        Average withdrawal utilization (withdrawal model only)
    total_expenses_pv : float, optional
        Average PV of expenses in dollars (expense model only)
    lapse_year_histogram : ndarray, optional
        Lapses per policy year, index 0 = year 1 (lapse model only)
    payoffs : ndarray
        Per-path discounted shortfall in dollars
    """

    price: float
    standard_error: float
    prob_ruin: float
    prob_lapse: float
    n_paths: int
    mean_payoff: float
    std_payoff: float
    fee_value: float
    mean_ruin_year: Optional[float] = None
    mean_lapse_year: Optional[float] = None
    avg_utilization: Optional[float] = None
    total_expenses_pv: Optional[float] = None
    lapse_year_histogram: Optional[np.ndarray] = field(default=None, repr=False, compare=False)
    payoffs: np.ndarray = field(default_factory=lambda: np.zeros(0), repr=False, compare=False)

    def confidence_interval(self, level: float = 0.95) -> tuple[float, float]:
        """
        Normal-approximation confidence interval for ``price``.

        [T1] price ± z_{(1+level)/2} × SE
        """
        if not 0 < level < 1:
            raise ValueError(f"level must be in (0, 1), got {level}")
        z = stats.norm.ppf(0.5 + level / 2)
        half_width = z * self.standard_error
        return self.price - half_width, self.price + half_width


def _validate_policy(premium: float, issue_age: int, deferral_years: int, max_age: int) -> None:
    if premium <= 0:
        raise ValueError(f"Premium must be positive, got {premium}")
    if isinstance(issue_age, bool) or not isinstance(issue_age, (int, np.integer)):
        raise ValueError(f"issue_age must be an integer, got {issue_age!r}")
    if not 0 < issue_age < max_age:
        raise ValueError(f"issue_age must be in (0, {max_age}), got {issue_age}")
    if isinstance(deferral_years, bool) or not isinstance(deferral_years, (int, np.integer)):
        raise ValueError(f"deferral_years must be an integer, got {deferral_years!r}")
    if deferral_years < 0:
        raise ValueError(f"deferral_years must be >= 0, got {deferral_years}")


class GLWBPathSimulator:
    """
    Path-dependent Monte Carlo for GLWB pricing.

    [T1] GLWB guarantee value = E[PV(payments when AV = 0)]

    Behavioral models are optional. Without a withdrawal model the
    policyholder takes the full contractual maximum once the deferral period
    ends; without a lapse model nobody lapses; without an expense model only
    the rider fee is charged.

    Parameters
    ----------
    gwb_config : GWBConfig
        Rider mechanics
    simulator_config : SimulatorConfig
        Market, horizon and Monte Carlo settings
    mortality : MortalityModel, optional
        ``age -> qx``; defaults to the Gompertz-Makeham curve for ``gender``
    gender : {"male", "female"}
        Used only for the default mortality
    lapse_model, withdrawal_model, expense_model : optional
        Behavioral capabilities
    market : MarketPathGenerator, optional
        Defaults to :class:`GBMReturnGenerator`

    Examples
    --------
    >>> sim = GLWBPathSimulator(
    ...     GWBConfig(withdrawal_rate=0.05),
    ...     SimulatorConfig(risk_free_rate=0.04, volatility=0.18, n_paths=1_000),
    ... )
    >>> result = sim.price(premium=100_000, issue_age=65)
    >>> 0.0 <= result.prob_ruin <= 1.0
    True
    """

    def __init__(
        self,
        gwb_config: GWBConfig,
        simulator_config: SimulatorConfig,
        *,
        mortality: Optional[MortalityModel] = None,
        gender: Literal["male", "female"] = SETTINGS.mortality.gender,
        lapse_model: Optional[LapseModel] = None,
        withdrawal_model: Optional[WithdrawalModel] = None,
        expense_model: Optional[ExpenseModel] = None,
        market: Optional[MarketPathGenerator] = None,
    ):
        self.gwb_config = gwb_config
        self.config = simulator_config
        self.mortality = mortality if mortality is not None else default_mortality(gender)
        self.lapse_model = lapse_model
        self.withdrawal_model = withdrawal_model
        self.expense_model = expense_model
        self.market = market if market is not None else GBMReturnGenerator()

    @property
    def has_lapse_model(self) -> bool:
        return self.lapse_model is not None

    @property
    def has_withdrawal_model(self) -> bool:
        return self.withdrawal_model is not None

    @property
    def has_expense_model(self) -> bool:
        return self.expense_model is not None

    @property
    def has_behavioral_models(self) -> bool:
        return self.has_lapse_model or self.has_withdrawal_model or self.has_expense_model

    def with_changes(
        self,
        gwb_config: Optional[GWBConfig] = None,
        simulator_config: Optional[SimulatorConfig] = None,
    ) -> "GLWBPathSimulator":
        """Copy of this simulator with replaced configuration records."""
        return GLWBPathSimulator(
            gwb_config or self.gwb_config,
            simulator_config or self.config,
            mortality=self.mortality,
            lapse_model=self.lapse_model,
            withdrawal_model=self.withdrawal_model,
            expense_model=self.expense_model,
            market=self.market,
        )

    def _with_fixed_seed(self) -> "GLWBPathSimulator":
        """Copy whose repeated pricing calls share one set of random numbers."""
        if self.config.seed is not None:
            return self
        seed = np.random.SeedSequence().entropy
        logger.debug("Pinned seed %d for repeated pricing", seed)
        return self.with_changes(simulator_config=replace(self.config, seed=seed))

    # -------------------------------------------------------------------------
    # Single path
    # -------------------------------------------------------------------------

    def simulate_path(
        self,
        premium: float,
        issue_age: int,
        path_index: int = 0,
        deferral_years: int = 0,
    ) -> PathResult:
        """
        Simulate one path exactly as :meth:`price` would for ``path_index``.

        Parameters
        ----------
        premium : float
            Single premium
        issue_age : int
            Age at issue
        path_index : int
            Index of the path within a run seeded with ``config.seed``
        deferral_years : int
            Years before withdrawals begin

        Returns
        -------
        PathResult
            Path diagnostics
        """
        _validate_policy(premium, issue_age, deferral_years, self.config.max_age)
        if path_index < 0:
            raise ValueError(f"path_index must be >= 0, got {path_index}")
        seed = np.random.SeedSequence(self.config.seed, spawn_key=(path_index,))
        return self._simulate_path(premium, issue_age, deferral_years, seed)

    def _context(self, state: GWBState, duration: int, age: int, first_withdrawal_year: int) -> BehaviorContext:
        return BehaviorContext(
            gwb=state.gwb,
            av=state.av,
            duration=duration,
            age=age,
            withdrawal_rate=self.gwb_config.withdrawal_rate,
            years_since_first_withdrawal=max(duration - 1 - first_withdrawal_year, 0)
            if first_withdrawal_year >= 0
            else 0,
        )

    def _simulate_path(
        self,
        premium: float,
        issue_age: int,
        deferral_years: int,
        seed: np.random.SeedSequence,
    ) -> PathResult:
        cfg = self.config
        gwb_config = self.gwb_config
        spy = cfg.steps_per_year
        dt = cfg.dt
        r = cfg.risk_free_rate
        n_years = cfg.max_age - issue_age
        n_steps = n_years * spy
        first_withdrawal_step = deferral_years * spy
        expected = cfg.decrement_mode == DecrementMode.EXPECTED

        market_seed, decrement_seed = seed.spawn(2)
        returns = self.market.generate(r, cfg.volatility, dt, n_steps, market_seed)
        rng = np.random.default_rng(decrement_seed)

        state = GWBState.from_premium(premium)
        weight = 1.0
        pv_shortfall = 0.0
        pv_fees = 0.0
        pv_expenses = 0.0
        ruin = 0.0
        ruin_time = math.nan
        lapse = 0.0
        lapse_by_year = np.zeros(n_years) if self.lapse_model is not None else None
        utilization_sum = 0.0
        utilization_weight = 0.0
        death_year = -1
        first_withdrawal_year = -1
        q_step = 0.0

        if self.expense_model is not None:
            pv_expenses += self.expense_model.acquisition_cost(premium)

        for k in range(n_steps):
            year_index = k // spy
            duration = year_index + 1
            age = issue_age + year_index
            year_start = k % spy == 0

            # Mortality
            if year_start:
                q_step = step_qx(self.mortality(age), dt)
            if expected:
                weight *= 1.0 - q_step
                if weight <= 0.0:
                    break
            elif rng.random() < q_step:
                death_year = duration
                break

            # Lapse, decided once per policy year while AV remains
            if self.lapse_model is not None and year_start and state.av > 0:
                rate = self.lapse_model.evaluate(
                    self._context(state, duration, age, first_withdrawal_year)
                )
                p_lapse = lapse_probability(rate, 1.0)
                if expected:
                    lapsed = weight * p_lapse
                    lapse += lapsed
                    lapse_by_year[year_index] += lapsed
                    weight -= lapsed
                    if weight <= 0.0:
                        break
                elif rng.random() < p_lapse:
                    lapse = 1.0
                    lapse_by_year[year_index] = 1.0
                    break

            # Expenses come out of AV ahead of the rider mechanics
            if self.expense_model is not None and state.av > 0:
                annual_expense = self.expense_model.evaluate(
                    self._context(state, duration, age, first_withdrawal_year)
                )
                charge = min(annual_expense * dt, state.av)
                state = replace(state, av=state.av - charge)
                pv_expenses += weight * charge * math.exp(-r * k * dt)

            # Requested withdrawal
            allowed = max_withdrawal(withdrawal_base(state, gwb_config), gwb_config, dt)
            if k < first_withdrawal_step:
                requested = 0.0
            elif self.withdrawal_model is not None:
                utilization = self.withdrawal_model.evaluate(
                    self._context(state, duration, age, first_withdrawal_year)
                )
                requested = utilization * allowed
                utilization_sum += weight * utilization
                utilization_weight += weight
            else:
                requested = allowed
            if requested > 0 and first_withdrawal_year < 0:
                first_withdrawal_year = year_index

            result = step(state, gwb_config, float(returns[k]), requested, dt)
            state = result.new_state
            discount = math.exp(-r * (k + 1) * dt)

            pv_fees += weight * result.fee_charged * discount
            shortfall = max(min(requested, allowed) - result.withdrawal_taken, 0.0)
            if shortfall > 0:
                pv_shortfall += weight * shortfall * discount

            if math.isnan(ruin_time) and is_ruined(state):
                ruin = weight
                ruin_time = (k + 1) * dt

        return PathResult(
            pv_shortfall=pv_shortfall,
            pv_fees=pv_fees,
            pv_expenses=pv_expenses,
            ruin=ruin,
            ruin_time=ruin_time,
            lapse=lapse,
            lapse_by_year=lapse_by_year,
            utilization_sum=utilization_sum,
            utilization_weight=utilization_weight,
            death_year=death_year,
            final_av=state.av,
            final_gwb=state.gwb,
        )

    def _simulate_block(
        self,
        premium: float,
        issue_age: int,
        deferral_years: int,
        start: int,
        seeds: list[np.random.SeedSequence],
    ) -> PathBatch:
        paths = [self._simulate_path(premium, issue_age, deferral_years, s) for s in seeds]
        return PathBatch.from_paths(start, paths)

    # -------------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------------

    def simulate(self, premium: float, issue_age: int, deferral_years: int = 0) -> PathBatch:
        """
        Simulate every path and return the per-path outcomes in path order.
        """
        _validate_policy(premium, issue_age, deferral_years, self.config.max_age)
        cfg = self.config
        seeds = np.random.SeedSequence(cfg.seed).spawn(cfg.n_paths)

        if cfg.n_workers == 1 or cfg.n_paths <= cfg.chunk_size:
            return self._simulate_block(premium, issue_age, deferral_years, 0, seeds)

        starts = range(0, cfg.n_paths, cfg.chunk_size)
        batches = []
        with ProcessPoolExecutor(max_workers=cfg.n_workers) as executor:
            futures = {
                executor.submit(
                    _simulate_chunk,
                    self,
                    premium,
                    issue_age,
                    deferral_years,
                    start,
                    seeds[start:start + cfg.chunk_size],
                ): start
                for start in starts
            }
            for future in as_completed(futures):
                batches.append(future.result())
                logger.debug("Finished path chunk starting at %d", futures[future])

        return combine_batches(batches)

    def price(self, premium: float, issue_age: int, deferral_years: int = 0) -> GLWBPriceResult:
        """
        Price the GLWB guarantee.

        [T1] Price = E[PV(insurer payments when AV = 0)] / premium

        Parameters
        ----------
        premium : float
            Single premium (> 0)
        issue_age : int
            Age at issue, a positive integer below ``max_age``
        deferral_years : int
            Years before withdrawals begin; rollup accrues meanwhile

        Returns
        -------
        GLWBPriceResult
            Price, standard error and diagnostics
        """
        cfg = self.config
        logger.debug(
            "Pricing GLWB: premium=%s issue_age=%s deferral=%s r=%s vol=%s paths=%d "
            "steps/yr=%d max_age=%d mode=%s workers=%d lapse=%s withdrawal=%s expense=%s",
            premium,
            issue_age,
            deferral_years,
            cfg.risk_free_rate,
            cfg.volatility,
            cfg.n_paths,
            cfg.steps_per_year,
            cfg.max_age,
            cfg.decrement_mode.value,
            cfg.n_workers,
            self.has_lapse_model,
            self.has_withdrawal_model,
            self.has_expense_model,
        )

        batch = self.simulate(premium, issue_age, deferral_years)
        summary = summarize(batch, premium)

        if self.has_withdrawal_model:
            avg_utilization = summary.avg_utilization if summary.avg_utilization is not None else 0.0
        else:
            avg_utilization = None

        result = GLWBPriceResult(
            price=summary.price,
            standard_error=summary.standard_error,
            prob_ruin=summary.prob_ruin,
            prob_lapse=summary.prob_lapse,
            n_paths=summary.n_paths,
            mean_payoff=summary.mean_payoff,
            std_payoff=summary.std_payoff,
            fee_value=summary.fee_value,
            mean_ruin_year=summary.mean_ruin_year,
            mean_lapse_year=summary.mean_lapse_year,
            avg_utilization=avg_utilization,
            total_expenses_pv=summary.mean_expenses_pv if self.has_expense_model else None,
            lapse_year_histogram=summary.lapse_year_histogram,
            payoffs=batch.pv_shortfall,
        )

        logger.info(
            "GLWB price=%.6f se=%.6f prob_ruin=%.4f prob_lapse=%.4f (n_paths=%d)",
            result.price,
            result.standard_error,
            result.prob_ruin,
            result.prob_lapse,
            result.n_paths,
        )
        if result.price > 0 and result.standard_error / result.price > SETTINGS.simulation.se_warning_ratio:
            logger.warning(
                "Monte Carlo standard error is %.1f%% of price; increase n_paths (currently %d)",
                100 * result.standard_error / result.price,
                result.n_paths,
            )
        return result

    # -------------------------------------------------------------------------
    # Fee solving and sensitivities
    # -------------------------------------------------------------------------

    def calculate_fair_fee(
        self,
        premium: float,
        issue_age: int,
        deferral_years: int = 0,
        fee_bounds: tuple[float, float] = (
            SETTINGS.product.fair_fee_low,
            SETTINGS.product.fair_fee_high,
        ),
        tolerance: float = SETTINGS.product.fair_fee_tolerance,
        max_iterations: int = SETTINGS.product.fair_fee_max_iter,
    ) -> float:
        """
        Rider fee at which PV(fees) equals PV(guarantee cost).

        Bisection on ``fee_rate`` with every trial priced on the same random
        numbers, so the net value is a smooth function of the fee. An unseeded
        configuration gets one fresh seed for the whole search.

        Parameters
        ----------
        premium : float
            Single premium
        issue_age : int
            Age at issue
        deferral_years : int
            Years before withdrawals begin
        fee_bounds : tuple
            (low, high) bracket for the annual fee rate
        tolerance : float
            Stop once the bracket is narrower than this
        max_iterations : int
            Maximum bisection steps

        Returns
        -------
        float
            Fair annual fee rate. A bracket end is returned when the root lies
            outside the bracket.
        """
        low, high = fee_bounds
        if not 0 <= low < high:
            raise ValueError(f"fee_bounds must satisfy 0 <= low < high, got {fee_bounds}")
        if tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {tolerance}")
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")

        base = self._with_fixed_seed()

        def net_value(fee: float) -> float:
            sim = base.with_changes(gwb_config=replace(base.gwb_config, fee_rate=fee))
            result = sim.price(premium, issue_age, deferral_years)
            return result.fee_value - result.price

        net_low = net_value(low)
        if net_low >= 0:
            logger.warning("Fees at the lower bound %.4f already cover the guarantee", low)
            return low
        net_high = net_value(high)
        if net_high <= 0:
            logger.warning("Fees at the upper bound %.4f do not cover the guarantee", high)
            return high

        for iteration in range(max_iterations):
            mid = 0.5 * (low + high)
            net_mid = net_value(mid)
            logger.debug("Fair fee iteration %d: fee=%.6f net=%.6f", iteration, mid, net_mid)
            if net_mid < 0:
                low = mid
            else:
                high = mid
            if high - low < tolerance:
                return 0.5 * (low + high)

        logger.warning(
            "Fair fee search did not converge in %d iterations (bracket [%.6f, %.6f])",
            max_iterations,
            low,
            high,
        )
        return 0.5 * (low + high)

    def sensitivity_analysis(
        self,
        premium: float,
        issue_age: int,
        deferral_years: int = 0,
        vol_bump: float = 0.10,
        rate_bump: float = 0.01,
        age_bump: int = 5,
    ) -> dict:
        """
        Bump-and-reprice sensitivities of the guarantee cost.

        All bumps share the base run's random numbers; an unseeded
        configuration gets one fresh seed for the whole analysis.

        Parameters
        ----------
        premium : float
            Single premium
        issue_age : int
            Age at issue
        deferral_years : int
            Years before withdrawals begin
        vol_bump : float
            Relative volatility bump (0.10 = ±10%)
        rate_bump : float
            Absolute rate bump; the down bump is floored at a zero rate
        age_bump : int
            Issue-age increment

        Returns
        -------
        dict
            base_price, sigma_sensitivity, rate_sensitivity, age_sensitivity,
            prob_ruin
        """
        sim = self._with_fixed_seed()
        cfg = sim.config
        base = sim.price(premium, issue_age, deferral_years)

        def price_with(**changes) -> float:
            bumped = sim.with_changes(simulator_config=replace(cfg, **changes))
            return bumped.price(premium, issue_age, deferral_years).price

        sigma = cfg.volatility
        up_sigma = price_with(volatility=sigma * (1 + vol_bump))
        down_sigma = price_with(volatility=sigma * (1 - vol_bump))
        sigma_sens = (up_sigma - down_sigma) / (2 * vol_bump * sigma)

        r = cfg.risk_free_rate
        r_down = max(r - rate_bump, 0.0)
        up_r = price_with(risk_free_rate=r + rate_bump)
        down_r = price_with(risk_free_rate=r_down)
        rate_sens = (up_r - down_r) / (r + rate_bump - r_down)

        if issue_age + age_bump < cfg.max_age:
            older = sim.price(premium, issue_age + age_bump, deferral_years)
            age_sens = (older.price - base.price) / age_bump
        else:
            age_sens = 0.0

        return {
            "base_price": base.price,
            "sigma_sensitivity": sigma_sens,
            "rate_sensitivity": rate_sens,
            "age_sensitivity": age_sens,
            "prob_ruin": base.prob_ruin,
        }


def _simulate_chunk(
    simulator: GLWBPathSimulator,
    premium: float,
    issue_age: int,
    deferral_years: int,
    start: int,
    seeds: list[np.random.SeedSequence],
) -> PathBatch:
    """Worker entry point: simulate one contiguous block of paths."""
    return simulator._simulate_block(premium, issue_age, deferral_years, start, seeds)


def glwb_price(
    simulator: GLWBPathSimulator,
    premium: float,
    issue_age: int,
    deferral_years: int = 0,
) -> GLWBPriceResult:
    """Price a GLWB with a configured simulator."""
    return simulator.price(premium, issue_age, deferral_years)


def price(
    config: GWBConfig,
    simulator_config: SimulatorConfig,
    premium: float,
    issue_age: int,
    deferral_years: int = 0,
    *,
    mortality: Optional[MortalityModel] = None,
    gender: Literal["male", "female"] = SETTINGS.mortality.gender,
    lapse_model: Optional[LapseModel] = None,
    withdrawal_model: Optional[WithdrawalModel] = None,
    expense_model: Optional[ExpenseModel] = None,
    market: Optional[MarketPathGenerator] = None,
) -> GLWBPriceResult:
    """
    Price a GLWB guarantee from explicit configuration records.

    Examples
    --------
    >>> result = price(
    ...     GWBConfig(),
    ...     SimulatorConfig(risk_free_rate=0.04, volatility=0.18, n_paths=500, seed=7),
    ...     premium=100_000,
    ...     issue_age=65,
    ... )
    >>> result.n_paths
    500
    """
    simulator = GLWBPathSimulator(
        config,
        simulator_config,
        mortality=mortality,
        gender=gender,
        lapse_model=lapse_model,
        withdrawal_model=withdrawal_model,
        expense_model=expense_model,
        market=market,
    )
    return glwb_price(simulator, premium, issue_age, deferral_years)
