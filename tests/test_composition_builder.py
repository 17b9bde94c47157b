"""
Unit tests for DoughCompositionBuilder.

Tests:
1. Order independence and water-quality averaging
2. Ingredient conversions (sugar equivalents, water/salt carried by other ingredients)
3. Fail-fast validation (DoughError)
"""

from __future__ import annotations

import pytest

from core.composition import DoughComposition, DoughCompositionBuilder, DoughError
from physics.ingredient_factors import CHLORINE_DIOXIDE_MAX, MINIMUM_INHIBITORY_PRESSURE, SUGAR_MAX
from properties.ingredients import Atmosphere, FatType, SugarType, YeastType


# ============================================================================
# Test 1: Order independence
# ============================================================================


def test_water_sources_order_independent():
    """The resulting water quality does not depend on the order of additions."""
    a = DoughCompositionBuilder().add_water(0.3, ph=7.0, fixed_residue=200.0).add_water(0.3, ph=6.0).build()
    b = DoughCompositionBuilder().add_water(0.3, ph=6.0).add_water(0.3, ph=7.0, fixed_residue=200.0).build()

    assert a == b
    assert a.water == pytest.approx(0.6)
    assert a.water_ph == pytest.approx(6.5)
    assert a.water_fixed_residue == pytest.approx(100.0)


def test_salt_and_fat_order_independent():
    a = DoughCompositionBuilder().add_salt(0.01).add_fat(0.04, FatType.BUTTER, salt_content=0.02).add_water(0.6).build()
    b = DoughCompositionBuilder().add_water(0.6).add_fat(0.04, FatType.BUTTER, salt_content=0.02).add_salt(0.01).build()

    assert a == b
    assert a.salt == pytest.approx(0.01 + 0.04 * 0.02)


def test_empty_builder_defaults():
    composition = DoughCompositionBuilder().build()
    assert isinstance(composition, DoughComposition)
    assert composition.water == 0.0
    assert composition.yeast == 0.0
    assert composition.total_fraction == 1.0


# ============================================================================
# Test 2: Conversions
# ============================================================================


def test_sugar_converted_to_glucose_equivalent():
    composition = DoughCompositionBuilder().add_sugar(0.01, SugarType.SUCROSE, carbohydrate=0.5).build()
    assert composition.sugar == pytest.approx(0.01 * (0.38 / 0.41) * 0.5)
    assert composition.sugar_type is SugarType.SUCROSE


def test_sugar_water_content_added_to_water():
    composition = DoughCompositionBuilder().add_water(0.5).add_sugar(0.02, SugarType.GLUCOSE, water_content=0.2).build()
    assert composition.water == pytest.approx(0.5 + 0.02 * 0.2)


def test_fat_content_and_carried_water():
    composition = DoughCompositionBuilder().add_fat(0.05, FatType.BUTTER, fat_content=0.82, water_content=0.16).build()
    assert composition.fat == pytest.approx(0.05 * 0.82)
    assert composition.water == pytest.approx(0.05 * 0.16)
    assert composition.fat_type is FatType.BUTTER


def test_with_yeast_fraction_returns_new_composition():
    composition = DoughCompositionBuilder().add_water(0.6).with_yeast(YeastType.INSTANT_DRY).build()
    solved = composition.with_yeast_fraction(0.01)
    assert composition.yeast == 0.0
    assert solved.yeast == 0.01
    assert solved.yeast_type is YeastType.INSTANT_DRY
    assert solved.total_fraction == pytest.approx(1.61)


# ============================================================================
# Test 3: Validation
# ============================================================================


def test_dough_error_is_value_error():
    assert issubclass(DoughError, ValueError)


def test_negative_water_rejected():
    with pytest.raises(DoughError, match="Water quantity"):
        DoughCompositionBuilder().add_water(-0.1)


@pytest.mark.parametrize("chlorine_dioxide", [-0.1, CHLORINE_DIOXIDE_MAX])
def test_chlorine_dioxide_out_of_range(chlorine_dioxide):
    with pytest.raises(DoughError, match="Chlorine dioxide"):
        DoughCompositionBuilder().add_water(0.6, chlorine_dioxide=chlorine_dioxide)


def test_fixed_residue_out_of_range():
    with pytest.raises(DoughError, match="Fixed residue"):
        DoughCompositionBuilder().add_water(0.6, fixed_residue=1500.0)


@pytest.mark.parametrize("ph", [-0.1, 14.1])
def test_water_ph_out_of_range(ph):
    with pytest.raises(DoughError, match="pH"):
        DoughCompositionBuilder().add_water(0.6, ph=ph)


def test_sugar_beyond_osmotic_limit():
    with pytest.raises(DoughError, match="Sugar must be in"):
        DoughCompositionBuilder().add_sugar(SUGAR_MAX)


def test_sugar_added_twice():
    """One sugar ingredient per dough; the rejected call leaves the first one untouched."""
    builder = DoughCompositionBuilder().add_water(0.6).add_sugar(0.01, SugarType.GLUCOSE, water_content=0.2)
    with pytest.raises(DoughError, match="Sugar was already set"):
        builder.add_sugar(0.02, SugarType.SUCROSE, water_content=0.5)

    composition = builder.build()
    assert composition.sugar_type is SugarType.GLUCOSE
    assert composition.sugar == pytest.approx(0.01)
    assert composition.water == pytest.approx(0.602)


def test_fat_added_twice():
    builder = DoughCompositionBuilder().add_fat(0.02, salt_content=0.1)
    with pytest.raises(DoughError, match="Fat was already set"):
        builder.add_fat(0.02, salt_content=0.1)
    assert builder.build().salt == pytest.approx(0.002)


def test_salt_and_water_accumulate():
    composition = DoughCompositionBuilder().add_water(0.3).add_water(0.3).add_salt(0.01).add_salt(0.015).build()
    assert composition.water == pytest.approx(0.6)
    assert composition.salt == pytest.approx(0.025)


def test_negative_salt_rejected():
    with pytest.raises(DoughError, match="Salt"):
        DoughCompositionBuilder().add_salt(-0.01)


@pytest.mark.parametrize("raw_yeast", [0.0, 1.5])
def test_raw_yeast_out_of_range(raw_yeast):
    with pytest.raises(DoughError, match="Raw yeast"):
        DoughCompositionBuilder().with_yeast(YeastType.FRESH, raw_yeast)


def test_pressure_above_minimum_inhibitory_pressure():
    with pytest.raises(DoughError, match="Atmospheric pressure"):
        DoughCompositionBuilder().with_atmosphere(Atmosphere(pressure=MINIMUM_INHIBITORY_PRESSURE))


def test_invalid_relative_humidity():
    with pytest.raises(ValueError, match="Relative humidity"):
        Atmosphere(relative_humidity=1.5)
