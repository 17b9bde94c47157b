"""
Unit tests for the ingredient correction factors.

Tests:
1. Boundary values of each factor
2. Composite pH and the Rosso pH bell
3. Composite factor with the hydration gate
"""

from __future__ import annotations

import pytest

from core.composition import DoughCompositionBuilder
from physics.ingredient_factors import (
    CHLORINE_DIOXIDE_MAX,
    HYDRATION_MAX,
    HYDRATION_MIN,
    MINIMUM_INHIBITORY_PRESSURE,
    SALT_MAX,
    SUGAR_FACTOR_MAX,
    IngredientFactors,
    chlorine_dioxide_factor,
    dough_ph,
    hydration_factor,
    ingredient_factors,
    ph_factor,
    pressure_factor,
    salinity,
    salt_factor,
    sugar_factor,
)
from properties.ingredients import STANDARD_ATMOSPHERE, FatType
from properties.yeast_models import YeastModel


# ============================================================================
# Test 1: Factor boundaries
# ============================================================================


def test_sugar_factor_branches():
    """Capped at 1 for little sugar, logarithmic decay above 3 %, zero at the limit."""
    assert sugar_factor(0.0) == 1.0
    assert sugar_factor(0.02) == 1.0
    assert sugar_factor(0.1) == pytest.approx(0.612542, abs=1e-5)
    assert sugar_factor(SUGAR_FACTOR_MAX) == 0.0
    assert sugar_factor(SUGAR_FACTOR_MAX * (1.0 - 1e-9)) == pytest.approx(0.0, abs=1e-6)
    assert sugar_factor(0.9) == 0.0


def test_salinity_in_grams_per_litre():
    assert salinity(0.02, 0.6) == pytest.approx(33.3333, rel=1e-5)
    assert salinity(0.0, 0.6) == 0.0


def test_salt_factor_bounds():
    assert salt_factor(0.0, 0.6) == 1.0
    assert salt_factor(SALT_MAX * 0.6 / 1000.0, 0.6) == pytest.approx(0.0, abs=1e-12)
    assert salt_factor(1.0, 0.6) == 0.0


def test_salt_factor_without_water_is_zero():
    assert salt_factor(0.02, 0.0) == 0.0


def test_hydration_bounds_and_peak():
    """Roots of the hydration polynomial and its value at 60 %."""
    assert HYDRATION_MIN == pytest.approx(0.2023, abs=1e-4)
    assert HYDRATION_MAX == pytest.approx(1.0217, abs=1e-4)
    assert hydration_factor(HYDRATION_MIN) == pytest.approx(0.0, abs=1e-9)
    assert hydration_factor(HYDRATION_MAX) == 0.0
    assert hydration_factor(0.1) == 0.0
    assert hydration_factor(0.6) == pytest.approx(1.048, abs=1e-9)
    assert hydration_factor(0.612) == pytest.approx(1.0489, abs=1e-4)


def test_chlorine_dioxide_factor_half_maximum():
    assert chlorine_dioxide_factor(0.0) == 1.0
    assert chlorine_dioxide_factor(CHLORINE_DIOXIDE_MAX / 2.0) == pytest.approx(0.8125)


def test_pressure_factor():
    """≈1 at sea level, ≈0.986 at 10 000 atm, zero at the minimum inhibitory pressure."""
    assert pressure_factor(STANDARD_ATMOSPHERE) == pytest.approx(1.0, abs=1e-6)
    assert pressure_factor(10000.0 * STANDARD_ATMOSPHERE) == pytest.approx(0.986037, abs=1e-5)
    assert pressure_factor(MINIMUM_INHIBITORY_PRESSURE) == 0.0
    assert pressure_factor(MINIMUM_INHIBITORY_PRESSURE * 0.999) == pytest.approx(0.0, abs=1e-2)


# ============================================================================
# Test 2: pH
# ============================================================================


def test_dough_ph_weighted_average():
    assert dough_ph(0.6, 7.0, 0.0, False) == pytest.approx(6.625)
    assert dough_ph(0.6, 7.0, 0.1, False) == pytest.approx(6.625)
    assert dough_ph(0.6, 7.0, 0.1, True) == pytest.approx((6.4 + 4.2 + 0.625) / 1.7)


def test_ph_factor_without_bounds_is_one(reference_model):
    assert not reference_model.has_ph_bounds
    assert ph_factor(reference_model, 2.0) == 1.0


def test_ph_factor_bell():
    model = YeastModel("acidophile", 5.0, 30.0, 40.0, 0.5, ph_min=3.0, ph_opt=5.0, ph_max=8.0)
    assert ph_factor(model, 5.0) == pytest.approx(1.0)
    assert 0.0 < ph_factor(model, 6.5) < 1.0
    assert ph_factor(model, 2.9) == 0.0
    assert ph_factor(model, 8.1) == 0.0


def test_partial_ph_bounds_rejected():
    with pytest.raises(ValueError, match="all together"):
        YeastModel("broken", 5.0, 30.0, 40.0, 0.5, ph_min=3.0)


# ============================================================================
# Test 3: Composite factor
# ============================================================================


def test_composite_is_one_for_plain_dough(plain_composition, reference_model):
    """Flour and water only: the hydration factor gates but does not scale."""
    factors = ingredient_factors(plain_composition, reference_model)
    assert factors.hydration == pytest.approx(1.048)
    assert factors.composite == pytest.approx(1.0, abs=1e-6)


def test_composite_product_of_factors(reference_model):
    composition = (
        DoughCompositionBuilder()
        .add_water(0.6, chlorine_dioxide=CHLORINE_DIOXIDE_MAX / 2.0)
        .add_salt(0.02)
        .add_fat(0.03, FatType.BUTTER)
        .build()
    )
    factors = ingredient_factors(composition, reference_model)
    expected = factors.sugar * factors.salt * factors.chlorine_dioxide * factors.ph * factors.pressure
    assert factors.composite == pytest.approx(expected)
    assert factors.chlorine_dioxide == pytest.approx(0.8125)
    assert factors.salt == pytest.approx(1.0 - 1000.0 * 0.02 / 0.6 / SALT_MAX)


def test_hydration_gate_zeroes_composite():
    factors = IngredientFactors(sugar=1.0, salt=1.0, hydration=0.0, chlorine_dioxide=1.0, ph=1.0, pressure=1.0)
    assert factors.composite == 0.0
    assert factors.zero_factors() == ["hydration"]
