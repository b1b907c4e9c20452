"""
End-to-end GLWB pricing workflows.

Exercises the full stack: GBM market, mortality, behavioral models, the
state machine, parallel execution and aggregation.
"""

from dataclasses import replace

import numpy as np
import pytest

from glwb_pricing import (
    DynamicLapseModel,
    ExpenseConfig,
    GLWBPathSimulator,
    GWBConfig,
    LapseConfig,
    PolicyExpenseModel,
    SimpleWithdrawalModel,
    SimulatorConfig,
    SOADynamicLapseModel,
    SOALapseConfig,
    SOAWithdrawalConfig,
    SOAWithdrawalModel,
    WithdrawalConfig,
)
from glwb_pricing.glwb.path_sim import DecrementMode

PREMIUM = 100_000.0


def full_stack(gwb_config: GWBConfig, sim_config: SimulatorConfig) -> GLWBPathSimulator:
    return GLWBPathSimulator(
        gwb_config,
        sim_config,
        lapse_model=DynamicLapseModel(LapseConfig()),
        withdrawal_model=SimpleWithdrawalModel(WithdrawalConfig()),
        expense_model=PolicyExpenseModel(ExpenseConfig()),
    )


class TestReproducibility:
    def test_full_stack_same_seed(self, gwb_config: GWBConfig) -> None:
        config = SimulatorConfig(0.04, 0.18, n_paths=300, max_age=95, seed=123)

        first = full_stack(gwb_config, config).price(PREMIUM, 65)
        second = full_stack(gwb_config, config).price(PREMIUM, 65)

        np.testing.assert_array_equal(first.payoffs, second.payoffs)
        np.testing.assert_array_equal(first.lapse_year_histogram, second.lapse_year_histogram)
        assert first.avg_utilization == second.avg_utilization

    def test_different_seeds_differ(self, gwb_config: GWBConfig) -> None:
        a = GLWBPathSimulator(gwb_config, SimulatorConfig(0.04, 0.25, n_paths=300, seed=1)).price(PREMIUM, 65)
        b = GLWBPathSimulator(gwb_config, SimulatorConfig(0.04, 0.25, n_paths=300, seed=2)).price(PREMIUM, 65)

        assert not np.array_equal(a.payoffs, b.payoffs)


class TestParallelExecution:
    """Worker processes must reproduce the sequential run bit for bit."""

    @pytest.mark.slow
    def test_parallel_matches_sequential(self, gwb_config: GWBConfig) -> None:
        sequential = SimulatorConfig(0.04, 0.20, n_paths=240, max_age=95, seed=9)
        parallel = SimulatorConfig(
            0.04, 0.20, n_paths=240, max_age=95, seed=9, n_workers=2, chunk_size=50
        )

        seq = full_stack(gwb_config, sequential).price(PREMIUM, 65)
        par = full_stack(gwb_config, parallel).price(PREMIUM, 65)

        np.testing.assert_array_equal(seq.payoffs, par.payoffs)
        np.testing.assert_array_equal(seq.lapse_year_histogram, par.lapse_year_histogram)
        assert seq.price == par.price
        assert seq.standard_error == par.standard_error
        assert seq.prob_ruin == par.prob_ruin
        assert seq.total_expenses_pv == par.total_expenses_pv

    @pytest.mark.slow
    def test_parallel_expected_mode(self, gwb_config: GWBConfig) -> None:
        base = dict(risk_free_rate=0.04, volatility=0.20, n_paths=120, max_age=95, seed=4,
                    decrement_mode=DecrementMode.EXPECTED)

        seq = full_stack(gwb_config, SimulatorConfig(**base)).price(PREMIUM, 65)
        par = full_stack(gwb_config, SimulatorConfig(**base, n_workers=3, chunk_size=25)).price(PREMIUM, 65)

        np.testing.assert_array_equal(seq.payoffs, par.payoffs)


class TestEconomicMonotonicity:
    """Common random numbers make comparative statics stable at small path counts."""

    def test_volatility_increases_cost(self, gwb_config: GWBConfig) -> None:
        low = GLWBPathSimulator(gwb_config, SimulatorConfig(0.04, 0.10, n_paths=1_000, seed=42))
        high = GLWBPathSimulator(gwb_config, SimulatorConfig(0.04, 0.30, n_paths=1_000, seed=42))

        low_result = low.price(PREMIUM, 65)
        high_result = high.price(PREMIUM, 65)

        assert high_result.price > low_result.price
        assert high_result.prob_ruin > low_result.prob_ruin

    def test_withdrawal_rate_increases_cost(self) -> None:
        config = SimulatorConfig(0.04, 0.18, n_paths=1_000, seed=42)
        modest = GLWBPathSimulator(GWBConfig(withdrawal_rate=0.04), config).price(PREMIUM, 65)
        rich = GLWBPathSimulator(GWBConfig(withdrawal_rate=0.07), config).price(PREMIUM, 65)

        assert rich.price > modest.price

    def test_deferral_with_rollup_changes_cost(self, gwb_config: GWBConfig) -> None:
        config = SimulatorConfig(0.04, 0.18, n_paths=500, seed=42)
        sim = GLWBPathSimulator(gwb_config, config)

        immediate = sim.price(PREMIUM, 60)
        deferred = sim.price(PREMIUM, 60, deferral_years=10)

        assert immediate.price != deferred.price
        assert deferred.prob_ruin >= 0.0


class TestBehavioralStack:
    def test_fields_populated(self, gwb_config: GWBConfig) -> None:
        config = SimulatorConfig(0.04, 0.18, n_paths=400, max_age=95, seed=8)
        result = full_stack(gwb_config, config).price(PREMIUM, 65)

        assert 0.30 <= result.avg_utilization <= 1.0
        assert result.total_expenses_pv > PREMIUM * 0.03
        assert 0.0 < result.prob_lapse < 1.0
        assert 1.0 <= result.mean_lapse_year <= 30.0
        assert len(result.lapse_year_histogram) == 95 - 65
        assert result.lapse_year_histogram.sum() == pytest.approx(result.prob_lapse * 400)

    def test_soa_models(self, gwb_config: GWBConfig) -> None:
        config = SimulatorConfig(0.04, 0.18, n_paths=300, max_age=95, seed=8)
        sim = GLWBPathSimulator(
            gwb_config,
            config,
            lapse_model=SOADynamicLapseModel(SOALapseConfig()),
            withdrawal_model=SOAWithdrawalModel(SOAWithdrawalConfig()),
        )
        result = sim.price(PREMIUM, 67)

        assert 0.0 <= result.avg_utilization <= 1.0
        assert result.total_expenses_pv is None
        assert result.price >= 0.0

    def test_lapses_reduce_cost(self, gwb_config: GWBConfig) -> None:
        config = SimulatorConfig(0.04, 0.25, n_paths=500, seed=42, decrement_mode="expected")
        without = GLWBPathSimulator(gwb_config, config).price(PREMIUM, 65)
        with_lapse = GLWBPathSimulator(
            gwb_config, config, lapse_model=DynamicLapseModel(LapseConfig())
        ).price(PREMIUM, 65)

        assert with_lapse.price < without.price


class TestDecrementModes:
    @pytest.mark.slow
    def test_expected_and_stochastic_agree(self, gwb_config: GWBConfig) -> None:
        stochastic = GLWBPathSimulator(
            gwb_config, SimulatorConfig(0.04, 0.20, n_paths=3_000, seed=21)
        ).price(PREMIUM, 65)
        expected = GLWBPathSimulator(
            gwb_config, SimulatorConfig(0.04, 0.20, n_paths=3_000, seed=21, decrement_mode="expected")
        ).price(PREMIUM, 65)

        combined_se = np.hypot(stochastic.standard_error, expected.standard_error)
        assert abs(stochastic.price - expected.price) < 4 * combined_se

    def test_expected_mode_has_lower_error(self, gwb_config: GWBConfig) -> None:
        stochastic = GLWBPathSimulator(
            gwb_config, SimulatorConfig(0.04, 0.20, n_paths=1_000, seed=21)
        ).price(PREMIUM, 65)
        expected = GLWBPathSimulator(
            gwb_config, SimulatorConfig(0.04, 0.20, n_paths=1_000, seed=21, decrement_mode="expected")
        ).price(PREMIUM, 65)

        assert expected.standard_error < stochastic.standard_error


class TestFairFee:
    @pytest.mark.slow
    def test_fair_fee_balances_legs(self, gwb_config: GWBConfig) -> None:
        config = SimulatorConfig(0.04, 0.18, n_paths=500, max_age=95, seed=17, decrement_mode="expected")
        sim = GLWBPathSimulator(gwb_config, config)

        fee = sim.calculate_fair_fee(PREMIUM, 65, fee_bounds=(0.0, 0.05))

        assert 0.0 < fee < 0.05
        repriced = sim.with_changes(gwb_config=replace(gwb_config, fee_rate=fee)).price(PREMIUM, 65)
        assert abs(repriced.fee_value - repriced.price) < 0.02
