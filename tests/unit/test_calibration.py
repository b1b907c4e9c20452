"""
Tests for SOA experience table lookups.

[T2] Piecewise-linear interpolation, flat beyond the table end points.
"""

import numpy as np
import pytest

from glwb_pricing.behavioral.calibration import (
    combined_utilization,
    get_itm_sensitivity_factor,
    get_itm_sensitivity_factor_continuous,
    get_sc_cliff_multiplier,
    interpolate_surrender_by_age,
    interpolate_surrender_by_duration,
    interpolate_utilization_by_age,
    interpolate_utilization_by_duration,
)
from glwb_pricing.behavioral.soa_benchmarks import SOA_2006_SC_CLIFF_EFFECT


class TestSurrenderByDuration:
    @pytest.mark.parametrize(
        "duration,expected",
        [(1, 0.014), (7, 0.053), (8, 0.112), (11, 0.067), (20, 0.067)],
    )
    def test_seven_year_schedule(self, duration: int, expected: float) -> None:
        assert interpolate_surrender_by_duration(duration) == pytest.approx(expected)

    def test_longer_charge_moves_cliff(self) -> None:
        assert interpolate_surrender_by_duration(11, sc_length=10) == pytest.approx(0.112)
        assert interpolate_surrender_by_duration(10, sc_length=10) == pytest.approx(0.053)

    def test_shorter_charge_moves_cliff(self) -> None:
        assert interpolate_surrender_by_duration(4, sc_length=4) == pytest.approx(0.053)
        assert interpolate_surrender_by_duration(5, sc_length=4) == pytest.approx(0.112)

    def test_first_year_independent_of_charge_length(self) -> None:
        for sc_length in (3, 7, 10):
            assert interpolate_surrender_by_duration(1, sc_length) == pytest.approx(0.014)

    def test_invalid_inputs_raise(self) -> None:
        with pytest.raises(ValueError, match="Duration"):
            interpolate_surrender_by_duration(0)
        with pytest.raises(ValueError, match="Surrender charge length"):
            interpolate_surrender_by_duration(1, sc_length=0)


class TestCliffMultiplier:
    base = SOA_2006_SC_CLIFF_EFFECT["years_remaining_3plus"]

    def test_far_from_expiry(self) -> None:
        assert get_sc_cliff_multiplier(5) == 1.0

    @pytest.mark.parametrize(
        "position,key",
        [
            (2, "years_remaining_2"),
            (1, "years_remaining_1"),
            (0, "at_expiration"),
            (-1, "post_sc_year_1"),
            (-2, "post_sc_year_2"),
            (-6, "post_sc_year_3plus"),
        ],
    )
    def test_positions(self, position: int, key: str) -> None:
        assert get_sc_cliff_multiplier(position) == pytest.approx(
            SOA_2006_SC_CLIFF_EFFECT[key] / self.base
        )

    def test_peak_at_expiration(self) -> None:
        values = [get_sc_cliff_multiplier(p) for p in range(-5, 6)]
        assert max(values) == get_sc_cliff_multiplier(0)


class TestSurrenderByAge:
    def test_table_point(self) -> None:
        assert interpolate_surrender_by_age(67) == pytest.approx(0.058)

    def test_between_points(self) -> None:
        assert interpolate_surrender_by_age(64.5) == pytest.approx(0.059)

    def test_flat_beyond_ends(self) -> None:
        assert interpolate_surrender_by_age(25) == pytest.approx(0.053)
        assert interpolate_surrender_by_age(100) == pytest.approx(0.052)


class TestUtilization:
    def test_by_duration(self) -> None:
        assert interpolate_utilization_by_duration(1) == pytest.approx(0.111)
        assert interpolate_utilization_by_duration(25) == pytest.approx(0.536)

    def test_by_duration_invalid(self) -> None:
        with pytest.raises(ValueError):
            interpolate_utilization_by_duration(0)

    def test_by_age(self) -> None:
        assert interpolate_utilization_by_age(72) == pytest.approx(0.59)
        assert interpolate_utilization_by_age(69.5) == pytest.approx(0.455)
        assert interpolate_utilization_by_age(40) == pytest.approx(0.05)

    def test_combined_reference_case(self) -> None:
        assert combined_utilization(duration=5, age=67, moneyness=1.0) == pytest.approx(0.215)

    def test_combined_capped(self) -> None:
        assert combined_utilization(duration=11, age=77, moneyness=2.0) == 1.0

    def test_combined_bucketed_itm(self) -> None:
        value = combined_utilization(duration=5, age=67, moneyness=1.3, continuous_itm=False)
        assert value == pytest.approx(0.215 * 1.79)


class TestITMSensitivity:
    @pytest.mark.parametrize(
        "moneyness,expected",
        [(0.9, 1.0), (1.0, 1.0), (1.1, 1.39), (1.25, 1.39), (1.3, 1.79), (1.6, 2.11)],
    )
    def test_buckets(self, moneyness: float, expected: float) -> None:
        assert get_itm_sensitivity_factor(moneyness) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "moneyness,expected",
        [(0.5, 1.0), (1.0, 1.0), (1.125, 1.39), (1.375, 1.79), (1.75, 2.11), (3.0, 2.11)],
    )
    def test_continuous_anchor_points(self, moneyness: float, expected: float) -> None:
        assert get_itm_sensitivity_factor_continuous(moneyness) == pytest.approx(expected)

    def test_continuous_is_monotone(self) -> None:
        grid = np.linspace(0.5, 2.5, 81)
        values = [get_itm_sensitivity_factor_continuous(m) for m in grid]
        assert np.all(np.diff(values) >= 0)
