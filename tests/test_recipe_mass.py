"""
Tests for the mass balance and recipe creation.

Tests:
1. Damped fixed point reaches the target weight
2. Clamping of ingredients already carried by others
3. Water temperature and round trip back to fractions
4. create_recipe end to end
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

import pytest

from core.composition import DoughCompositionBuilder, DoughError
from core.types import LeaveningStage, Procedure, Recipe, RecipeMassConfig
from driver.pizza import create_recipe
from properties.ingredients import FatType, SugarType, YeastType
from solvers.leavening import YeastError
from solvers.recipe_mass import (
    build_recipe,
    recipe_fractions,
    solve_masses,
    water_temperature,
)


@pytest.fixture
def full_composition():
    return (
        DoughCompositionBuilder()
        .add_water(0.62)
        .add_sugar(0.01, SugarType.SUCROSE)
        .add_fat(0.03, FatType.OLIVE_OIL)
        .add_salt(0.025)
        .with_yeast(YeastType.INSTANT_DRY)
        .build()
        .with_yeast_fraction(0.01)
    )


# ============================================================================
# Test 1: Fixed point
# ============================================================================


@pytest.mark.parametrize("weight", [250.0, 740.0, 5000.0])
def test_total_weight_within_tolerance(full_composition, weight):
    recipe = build_recipe(solve_masses(full_composition, weight))
    assert abs(recipe.dough_weight - weight) <= 0.01
    for name in ("flour", "water", "sugar", "fat", "salt", "yeast"):
        assert getattr(recipe, name) >= 0.0


def test_plain_recipe_masses(plain_composition):
    composition = plain_composition.with_yeast_fraction(0.02)
    recipe = build_recipe(solve_masses(composition, 1620.0))
    assert recipe.flour == pytest.approx(1000.0, abs=0.01)
    assert recipe.water == pytest.approx(600.0, abs=0.01)
    assert recipe.yeast == pytest.approx(20.0, abs=0.01)


def test_dry_yeast_scaled_by_type_factor(plain_composition):
    fresh = plain_composition.with_yeast_fraction(0.03)
    instant = DoughCompositionBuilder().add_water(0.6).with_yeast(YeastType.INSTANT_DRY).build().with_yeast_fraction(0.03)
    fresh_recipe = build_recipe(solve_masses(fresh, 1000.0))
    instant_recipe = build_recipe(solve_masses(instant, 1000.0))
    assert instant_recipe.yeast < fresh_recipe.yeast
    assert instant_recipe.yeast == pytest.approx(instant_recipe.flour * 0.03 / 3.125, rel=1e-9)


def test_invalid_target_weight(full_composition):
    with pytest.raises(DoughError, match="Target dough weight"):
        solve_masses(full_composition, 0.0)


def test_iteration_bound():
    """An exhausted iteration budget is a DoughError, not a silent result."""
    composition = (
        DoughCompositionBuilder()
        .add_water(0.05)
        .with_correct_for_humidity()
        .build()
    )
    with pytest.raises(DoughError, match="did not converge"):
        solve_masses(composition, 1000.0, RecipeMassConfig(damping=0.01, max_iterations=2))


# ============================================================================
# Test 2: Clamping
# ============================================================================


def test_water_already_present_is_clamped(caplog):
    """Flour humidity exceeds the requested water: water is clamped and reported."""
    composition = DoughCompositionBuilder().add_water(0.05).with_correct_for_humidity().build()

    with caplog.at_level(logging.WARNING, logger="solvers.recipe_mass"):
        recipe = build_recipe(solve_masses(composition, 1000.0))

    assert recipe.water == 0.0
    assert abs(recipe.dough_weight - 1000.0) <= 0.01
    assert "Water is already present, excess quantity is" in caplog.text


def test_humidity_correction_reduces_water():
    plain = DoughCompositionBuilder().add_water(0.6).build()
    corrected = DoughCompositionBuilder().add_water(0.6).with_correct_for_humidity().build()
    assert build_recipe(solve_masses(corrected, 1000.0)).water < build_recipe(solve_masses(plain, 1000.0)).water


# ============================================================================
# Test 3: Water temperature and round trip
# ============================================================================


def test_water_temperature_sensible_heat_balance(plain_composition):
    recipe = Recipe(flour=500.0, water=300.0, sugar=0.0, fat=0.0, salt=0.0, yeast=0.0)
    assert water_temperature(recipe, plain_composition, 20.0, 26.0) == pytest.approx(30.204, abs=1e-3)
    assert water_temperature(recipe, plain_composition, 24.0, 24.0) == pytest.approx(24.0)


def test_water_temperature_without_water(plain_composition):
    recipe = Recipe(flour=500.0, water=0.0, sugar=0.0, fat=0.0, salt=0.0, yeast=0.0)
    assert water_temperature(recipe, plain_composition, 20.0, 26.0) is None


def test_round_trip_fractions(full_composition):
    recipe = build_recipe(solve_masses(full_composition, 740.0))
    fractions = recipe_fractions(recipe, full_composition)
    assert fractions["water"] == pytest.approx(full_composition.water, rel=1e-9)
    assert fractions["sugar"] == pytest.approx(full_composition.sugar, rel=1e-9)
    assert fractions["fat"] == pytest.approx(full_composition.fat, rel=1e-9)
    assert fractions["salt"] == pytest.approx(full_composition.salt, rel=1e-9)
    assert fractions["yeast"] == pytest.approx(full_composition.yeast, rel=1e-9)


# ============================================================================
# Test 4: create_recipe
# ============================================================================


def test_create_recipe_reference(plain_composition, single_stage_procedure, reference_model):
    recipe = create_recipe(plain_composition, single_stage_procedure, 1000.0, yeast_model=reference_model)
    assert abs(recipe.dough_weight - 1000.0) <= 0.01
    assert recipe.yeast / recipe.flour == pytest.approx(0.02518, abs=3e-5)
    assert recipe.water / recipe.flour == pytest.approx(0.6, rel=1e-9)
    assert recipe.schedule is None
    assert recipe.water_temperature is None


def test_create_recipe_attaches_schedule_and_temperatures(plain_composition, reference_model):
    procedure = Procedure(
        stages=(LeaveningStage(35.0, timedelta(hours=5)),),
        target_volume_expansion_ratio=2.0,
        target_stage=0,
        seasoning=timedelta(minutes=15),
        time_to_bake=datetime(2026, 10, 20, 20, 0),
    )
    recipe = create_recipe(
        plain_composition,
        procedure,
        740.0,
        yeast_model=reference_model,
        ingredients_temperature=20.0,
        dough_temperature=26.0,
    )
    assert recipe.schedule is not None
    assert recipe.schedule.seasoning == (datetime(2026, 10, 20, 19, 45), datetime(2026, 10, 20, 20, 0))
    assert recipe.dough_temperature == 26.0
    assert recipe.water_temperature > 26.0


def test_create_recipe_thermal_shock_warning(plain_composition, single_stage_procedure, reference_model, caplog):
    with caplog.at_level(logging.WARNING, logger="driver.pizza"):
        create_recipe(
            plain_composition,
            single_stage_procedure,
            740.0,
            yeast_model=reference_model,
            ingredients_temperature=5.0,
            dough_temperature=40.0,
        )
    assert "thermal shock" in caplog.text


def test_create_recipe_rejects_stage_at_yeast_bound(plain_composition, reference_model):
    """A stage exactly at Tmax surfaces as the solver's YeastError with the stage index."""
    procedure = Procedure(
        stages=(LeaveningStage(reference_model.temperature_max, timedelta(hours=5)),),
        target_volume_expansion_ratio=2.0,
        target_stage=0,
    )
    with pytest.raises(YeastError, match="adverse environment in stage 0") as excinfo:
        create_recipe(plain_composition, procedure, 740.0, yeast_model=reference_model)
    assert excinfo.value.stage == 0
