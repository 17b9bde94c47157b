"""
Library entry points: recipe creation and baking instructions.

Responsibilities:
- create_recipe: solve the yeast fraction, run the mass balance, then add
  water temperature and schedule.
- bake_recipe: baking temperature and duration for a recipe.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from core.composition import DoughComposition
from core.schedule import build_schedule
from core.types import (
    BakingConfig,
    BakingInstructions,
    LeaveningConfig,
    Procedure,
    Recipe,
    RecipeMassConfig,
)
from properties.oven import BakingInstruments
from properties.yeast_db import reference_yeast
from properties.yeast_models import YeastModel
from solvers.baking import solve_baking
from solvers.leavening import solve_yeast
from solvers.recipe_mass import build_recipe, solve_masses, water_temperature

logger = logging.getLogger(__name__)


def create_recipe(
    composition: DoughComposition,
    procedure: Procedure,
    target_dough_weight: float,
    *,
    yeast_model: Optional[YeastModel] = None,
    ingredients_temperature: Optional[float] = None,
    dough_temperature: Optional[float] = None,
    leavening_config: Optional[LeaveningConfig] = None,
    mass_config: Optional[RecipeMassConfig] = None,
) -> Recipe:
    """
    Absolute ingredient masses reaching the procedure's target expansion.

    Raises:
        YeastError: a stage lies at or outside the yeast's temperature range,
            or no yeast fraction satisfies the procedure
        DoughError: invalid target weight or mass balance failure
    """
    model = yeast_model or reference_yeast()

    leavening = solve_yeast(composition, procedure, model, leavening_config)
    composition = composition.with_yeast_fraction(leavening.yeast)

    masses = solve_masses(composition, target_dough_weight, mass_config)
    recipe = build_recipe(masses)

    if ingredients_temperature is not None and dough_temperature is not None:
        temperature = water_temperature(recipe, composition, ingredients_temperature, dough_temperature)
        if temperature is not None and temperature >= model.temperature_max:
            logger.warning(
                "Water temperature (%.1f °C) is greater than maximum temperature sustainable by the "
                "yeast (%.1f °C): be aware of thermal shock!",
                temperature,
                model.temperature_max,
            )
        recipe = replace(recipe, water_temperature=temperature, dough_temperature=dough_temperature)
    elif dough_temperature is not None:
        recipe = replace(recipe, dough_temperature=dough_temperature)

    if procedure.time_to_bake is not None:
        recipe = replace(recipe, schedule=build_schedule(procedure))

    logger.info(
        "Recipe for %.1f g: flour %.1f, water %.1f, sugar %.2f, fat %.2f, salt %.2f, yeast %.2f g",
        recipe.dough_weight,
        recipe.flour,
        recipe.water,
        recipe.sugar,
        recipe.fat,
        recipe.salt,
        recipe.yeast,
    )
    return recipe


def bake_recipe(
    recipe: Recipe,
    target_height: float,
    instruments: BakingInstruments,
    *,
    config: Optional[BakingConfig] = None,
) -> BakingInstructions:
    """
    Raises:
        OvenError: the baking temperature or duration is not feasible
    """
    return solve_baking(recipe, target_height, instruments, config).instructions
