"""
Tests for the tolerance framework and immutable settings.
"""

import dataclasses

import pytest

from glwb_pricing.config.settings import SETTINGS
from glwb_pricing.config.tolerances import (
    ANTI_PATTERN_TOLERANCE,
    MC_10K_TOLERANCE,
    STATE_MACHINE_TOLERANCE,
    TOLERANCE_REGISTRY,
    get_tolerance,
    mc_tolerance,
)


class TestMCTolerance:
    def test_ten_thousand_paths(self) -> None:
        assert mc_tolerance(10_000) == pytest.approx(MC_10K_TOLERANCE)

    def test_shrinks_with_sqrt_n(self) -> None:
        assert mc_tolerance(40_000) == pytest.approx(mc_tolerance(10_000) / 2)

    def test_custom_sigma_and_confidence(self) -> None:
        assert mc_tolerance(100, sigma=1.0, confidence=2.0) == pytest.approx(0.2)

    def test_non_positive_paths_raise(self) -> None:
        with pytest.raises(ValueError, match="CRITICAL"):
            mc_tolerance(0)


class TestRegistry:
    def test_tiers_ordered(self) -> None:
        assert ANTI_PATTERN_TOLERANCE < STATE_MACHINE_TOLERANCE < MC_10K_TOLERANCE

    def test_lookup(self) -> None:
        assert get_tolerance("state_machine") == STATE_MACHINE_TOLERANCE

    def test_all_positive(self) -> None:
        assert all(value > 0 for value in TOLERANCE_REGISTRY.values())

    def test_unknown_name_lists_available(self) -> None:
        with pytest.raises(KeyError, match="Available"):
            get_tolerance("does_not_exist")


class TestSettings:
    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            SETTINGS.simulation.mc_paths = 1  # type: ignore[misc]

    def test_fair_fee_bracket(self) -> None:
        assert 0 < SETTINGS.product.fair_fee_low < SETTINGS.product.fair_fee_high

    def test_simulation_defaults(self) -> None:
        assert SETTINGS.simulation.mc_paths > 0
        assert SETTINGS.simulation.steps_per_year >= 1
        assert SETTINGS.simulation.chunk_size > 0
