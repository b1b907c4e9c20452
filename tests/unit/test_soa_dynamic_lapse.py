"""
Tests for the SOA-calibrated dynamic lapse model.

[T2] SOA 2006 Deferred Annuity Persistency Study:
- Duration curve with the cliff in the first post-charge year
- Age curve relative to the study average
"""

import pytest

from glwb_pricing.behavioral.base import BehaviorContext
from glwb_pricing.behavioral.dynamic_lapse import SOADynamicLapseModel, SOALapseConfig
from glwb_pricing.behavioral.soa_benchmarks import (
    SOA_2006_AVERAGE_FULL_SURRENDER,
    SOA_2006_SC_CLIFF_EFFECT,
)


@pytest.fixture
def model() -> SOADynamicLapseModel:
    return SOADynamicLapseModel(SOALapseConfig())


class TestSOALapseConfig:
    def test_defaults(self) -> None:
        config = SOALapseConfig()

        assert config.surrender_charge_length == 7
        assert config.use_duration_curve
        assert not config.use_age_adjustment
        assert config.base_rate == SOA_2006_SC_CLIFF_EFFECT["years_remaining_3plus"]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"surrender_charge_length": 0},
            {"moneyness_sensitivity": -0.5},
            {"min_lapse": 0.5, "max_lapse": 0.1},
            {"base_rate": 1.5},
        ],
    )
    def test_invalid_values_raise(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            SOALapseConfig(**kwargs)


class TestDurationCurve:
    """[T2] Base rate follows the SOA duration curve."""

    def test_first_year(self, model: SOADynamicLapseModel) -> None:
        result = model.calculate_lapse(gwb=100_000, av=100_000, duration=1)

        assert result.base_rate == pytest.approx(0.014)
        assert result.lapse_rate == pytest.approx(0.014)

    def test_cliff_year(self, model: SOADynamicLapseModel) -> None:
        result = model.calculate_lapse(gwb=100_000, av=100_000, duration=8)

        assert result.base_rate == pytest.approx(0.112)
        assert result.sc_cliff_factor == 1.0

    def test_cliff_is_the_peak(self, model: SOADynamicLapseModel) -> None:
        rates = [model.calculate_lapse(100_000, 100_000, d).lapse_rate for d in range(1, 15)]
        assert max(rates) == rates[7]

    def test_flat_after_curve_ends(self, model: SOADynamicLapseModel) -> None:
        assert model.calculate_lapse(100_000, 100_000, 15).base_rate == pytest.approx(0.067)

    def test_rescaled_charge_length(self) -> None:
        model = SOADynamicLapseModel(SOALapseConfig(surrender_charge_length=10))

        assert model.calculate_lapse(100_000, 100_000, 11).base_rate == pytest.approx(0.112)


class TestFlatBaseWithCliff:
    """Duration curve disabled: flat base scaled by position multipliers."""

    @pytest.fixture
    def flat_model(self) -> SOADynamicLapseModel:
        return SOADynamicLapseModel(SOALapseConfig(use_duration_curve=False))

    def test_early_years_use_flat_base(self, flat_model: SOADynamicLapseModel) -> None:
        result = flat_model.calculate_lapse(100_000, 100_000, 1)

        assert result.sc_cliff_factor == 1.0
        assert result.lapse_rate == pytest.approx(0.026)

    def test_first_post_charge_year(self, flat_model: SOADynamicLapseModel) -> None:
        result = flat_model.calculate_lapse(100_000, 100_000, 8)
        assert result.lapse_rate == pytest.approx(SOA_2006_SC_CLIFF_EFFECT["at_expiration"])

    def test_cliff_effect_disabled(self) -> None:
        model = SOADynamicLapseModel(
            SOALapseConfig(use_duration_curve=False, use_sc_cliff_effect=False)
        )
        assert model.calculate_lapse(100_000, 100_000, 8).sc_cliff_factor == 1.0


class TestMoneynessAndAge:
    def test_itm_lowers_lapse(self, model: SOADynamicLapseModel) -> None:
        result = model.calculate_lapse(gwb=125_000, av=100_000, duration=8)

        assert result.moneyness == pytest.approx(0.8)
        assert result.lapse_rate == pytest.approx(0.112 * 0.8)

    def test_zero_gwb_capped(self, model: SOADynamicLapseModel) -> None:
        assert model.calculate_lapse(gwb=0.0, av=100_000, duration=8).lapse_rate == 0.25

    def test_exhausted_av_floored(self, model: SOADynamicLapseModel) -> None:
        assert model.calculate_lapse(gwb=100_000, av=0.0, duration=8).lapse_rate == 0.005

    def test_age_adjustment(self) -> None:
        model = SOADynamicLapseModel(SOALapseConfig(use_age_adjustment=True))
        result = model.calculate_lapse(100_000, 100_000, 8, age=67)

        assert result.age_factor == pytest.approx(0.058 / SOA_2006_AVERAGE_FULL_SURRENDER)

    def test_age_ignored_when_disabled(self, model: SOADynamicLapseModel) -> None:
        assert model.calculate_lapse(100_000, 100_000, 8, age=67).age_factor == 1.0

    def test_age_missing_is_neutral(self) -> None:
        model = SOADynamicLapseModel(SOALapseConfig(use_age_adjustment=True))
        assert model.calculate_lapse(100_000, 100_000, 8).age_factor == 1.0

    def test_invalid_duration_raises(self, model: SOADynamicLapseModel) -> None:
        with pytest.raises(ValueError, match="Duration"):
            model.calculate_lapse(100_000, 100_000, 0)

    def test_evaluate(self, model: SOADynamicLapseModel) -> None:
        context = BehaviorContext(gwb=100_000, av=100_000, duration=8, age=70)
        assert model.evaluate(context) == pytest.approx(0.112)
