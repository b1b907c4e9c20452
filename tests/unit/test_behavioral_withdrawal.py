"""
Tests for GLWB Withdrawal Utilization Model.

[T1] Withdrawal = GWB × withdrawal_rate × utilization
[T2] util = (base + age_sens × max(0, age - ref)) × ramp × itm
"""

import pytest

from glwb_pricing.behavioral.base import BehaviorContext
from glwb_pricing.behavioral.withdrawal import SimpleWithdrawalModel, WithdrawalConfig


class TestWithdrawalConfig:
    def test_default_values(self) -> None:
        config = WithdrawalConfig()

        assert config.base_utilization == 0.70
        assert config.min_utilization == 0.30
        assert config.max_utilization == 1.00
        assert config.reference_age == 65

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"min_utilization": 0.8, "max_utilization": 0.5},
            {"max_utilization": 1.2},
            {"base_utilization": 1.2},
            {"age_sensitivity": -0.01},
            {"ramp_start": 1.5},
            {"ramp_years": -1},
            {"itm_sensitivity": -1.0},
        ],
    )
    def test_invalid_values_raise(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            WithdrawalConfig(**kwargs)


class TestSimpleWithdrawalModel:
    @pytest.fixture
    def model(self) -> SimpleWithdrawalModel:
        return SimpleWithdrawalModel(WithdrawalConfig())

    def test_mature_atm_at_reference_age(self, model: SimpleWithdrawalModel) -> None:
        assert model.calculate_utilization(100_000, 100_000, duration=5, age=65) == pytest.approx(0.70)

    def test_age_increases_utilization(self, model: SimpleWithdrawalModel) -> None:
        """[T2] Older policyholders use more of their benefit."""
        assert model.calculate_utilization(100_000, 100_000, duration=5, age=70) == pytest.approx(0.75)

    def test_younger_than_reference_not_penalized(self, model: SimpleWithdrawalModel) -> None:
        assert model.calculate_utilization(100_000, 100_000, duration=5, age=55) == pytest.approx(0.70)

    @pytest.mark.parametrize(
        "duration,factor",
        [(1, 0.70), (2, 0.80), (3, 0.90), (4, 1.0), (20, 1.0)],
    )
    def test_duration_ramp(self, model: SimpleWithdrawalModel, duration: int, factor: float) -> None:
        assert model.duration_factor(duration) == pytest.approx(factor)

    def test_no_ramp(self) -> None:
        model = SimpleWithdrawalModel(WithdrawalConfig(ramp_years=0))
        assert model.duration_factor(1) == 1.0

    def test_itm_increases_utilization(self, model: SimpleWithdrawalModel) -> None:
        utilization = model.calculate_utilization(120_000, 100_000, duration=5, age=65)
        assert utilization == pytest.approx(0.84)

    def test_otm_has_no_itm_factor(self, model: SimpleWithdrawalModel) -> None:
        assert model.itm_factor(100_000, 150_000) == 1.0

    def test_capped_at_max(self, model: SimpleWithdrawalModel) -> None:
        assert model.calculate_utilization(200_000, 100_000, duration=5, age=65) == 1.0

    def test_exhausted_av_is_full_utilization(self, model: SimpleWithdrawalModel) -> None:
        assert model.calculate_utilization(100_000, 0.0, duration=5, age=65) == 1.0

    def test_floor_applies(self) -> None:
        model = SimpleWithdrawalModel(WithdrawalConfig(base_utilization=0.2))
        assert model.calculate_utilization(100_000, 100_000, duration=1, age=65) == 0.30

    def test_zero_base_with_exhausted_av_is_not_nan(self) -> None:
        config = WithdrawalConfig(base_utilization=0.0, age_sensitivity=0.0, min_utilization=0.0)
        model = SimpleWithdrawalModel(config)

        assert model.calculate_utilization(100_000, 0.0, duration=5, age=65) == 0.0

    def test_withdrawal_amount(self, model: SimpleWithdrawalModel) -> None:
        result = model.calculate_withdrawal(
            gwb=100_000, av=100_000, withdrawal_rate=0.05, duration=5, age=70
        )

        assert result.max_allowed == pytest.approx(5_000)
        assert result.utilization_rate == pytest.approx(0.75)
        assert result.withdrawal_amount == pytest.approx(3_750)

    def test_withdrawal_never_exceeds_max(self, model: SimpleWithdrawalModel) -> None:
        result = model.calculate_withdrawal(
            gwb=300_000, av=50_000, withdrawal_rate=0.06, duration=15, age=90
        )
        assert result.withdrawal_amount <= result.max_allowed

    @pytest.mark.parametrize(
        "kwargs,match",
        [
            ({"gwb": -1.0}, "GWB"),
            ({"av": -1.0}, "Account value"),
            ({"withdrawal_rate": 1.5}, "Withdrawal rate"),
            ({"duration": 0}, "Duration"),
        ],
    )
    def test_invalid_inputs_raise(
        self, model: SimpleWithdrawalModel, kwargs: dict, match: str
    ) -> None:
        args = {"gwb": 100_000, "av": 100_000, "withdrawal_rate": 0.05, "duration": 5, "age": 70}
        args.update(kwargs)
        with pytest.raises(ValueError, match=match):
            model.calculate_withdrawal(**args)

    def test_evaluate(self, model: SimpleWithdrawalModel) -> None:
        context = BehaviorContext(gwb=100_000, av=100_000, duration=5, age=70)
        assert model.evaluate(context) == pytest.approx(0.75)
