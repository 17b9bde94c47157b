"""
Mass balance: absolute ingredient masses from flour-relative fractions.

Successive approximation on the flour mass:
- seed flour = W / total_fraction
- compute every other ingredient from flour and the composition fractions,
  removing what other ingredients already carry when correcting for them
- flour += damping * (W - sum) until |W - sum| <= mass tolerance

Water, fat and salt can come out negative when other ingredients already
supply more than requested; they are clamped to zero and reported.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from core.composition import DoughComposition, DoughError
from core.types import Recipe, RecipeMassConfig
from properties.ingredients import (
    SPECIFIC_HEAT_FLOUR,
    SPECIFIC_HEAT_SALT,
    SPECIFIC_HEAT_SUGAR,
    SPECIFIC_HEAT_WATER,
    SPECIFIC_HEAT_YEAST,
    FatType,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class IngredientMasses:
    """Raw (unclamped) masses of one fixed-point pass [g]."""

    flour: float
    water: float
    sugar: float
    fat: float
    salt: float
    yeast: float

    def clamped_total(self) -> float:
        return (
            self.flour
            + max(self.water, 0.0)
            + self.sugar
            + max(self.fat, 0.0)
            + max(self.salt, 0.0)
            + self.yeast
        )


def ingredient_masses(flour: float, composition: DoughComposition) -> IngredientMasses:
    c = composition
    correct = c.correct_for_ingredients

    fat = 0.0
    if c.fat > 0.0:
        fat = (flour * c.fat - (flour * c.flour.fat if correct else 0.0)) / c.fat_content

    salt = flour * c.salt
    if correct:
        salt -= flour * c.flour.salt + max(fat, 0.0) * c.fat_salt_content

    sugar = 0.0
    if c.sugar > 0.0 and c.sugar_type is not None:
        sugar = flour * c.sugar / (c.sugar_type.factor * c.sugar_carbohydrate)

    water = flour * c.water
    if correct:
        water -= sugar * c.sugar_water_content + max(fat, 0.0) * c.fat_water_content
    if c.correct_for_humidity:
        water -= flour * c.flour.estimated_humidity(c.atmosphere.relative_humidity)

    yeast = flour * c.yeast / (c.raw_yeast * c.yeast_type.factor)
    return IngredientMasses(flour, water, sugar, fat, salt, yeast)


def solve_masses(
    composition: DoughComposition,
    target_dough_weight: float,
    config: Optional[RecipeMassConfig] = None,
) -> IngredientMasses:
    """
    Damped fixed point on the flour mass.

    Raises:
        DoughError: invalid target weight or no convergence within max_iterations
    """
    cfg = config or RecipeMassConfig()
    if not target_dough_weight > 0.0:
        raise DoughError(f"Target dough weight must be positive, got {target_dough_weight}")

    flour = target_dough_weight / composition.total_fraction
    for n_iter in range(cfg.max_iterations):
        masses = ingredient_masses(flour, composition)
        difference = target_dough_weight - masses.clamped_total()
        if abs(difference) <= cfg.mass_tolerance:
            logger.debug("Mass balance converged in %d iterations (residual %.3e g)", n_iter, difference)
            return masses
        flour += cfg.damping * difference

    raise DoughError(
        f"Mass balance did not converge in {cfg.max_iterations} iterations "
        f"(target {target_dough_weight} g, last residual {difference:.4g} g)"
    )


def build_recipe(masses: IngredientMasses) -> Recipe:
    """Clamp negative contributions to zero, warning about the excess."""
    for name in ("water", "fat", "salt"):
        value = getattr(masses, name)
        if value < 0.0:
            logger.warning(
                "%s is already present, excess quantity is %.1f g", name.capitalize(), -value
            )
    return Recipe(
        flour=masses.flour,
        water=max(masses.water, 0.0),
        sugar=masses.sugar,
        fat=max(masses.fat, 0.0),
        salt=max(masses.salt, 0.0),
        yeast=masses.yeast,
    )


def water_temperature(
    recipe: Recipe,
    composition: DoughComposition,
    ingredients_temperature: float,
    dough_temperature: float,
) -> Optional[float]:
    """
    Water temperature [°C] giving `dough_temperature` once mixed with the other
    ingredients at `ingredients_temperature` (sensible-heat balance).

    Returns None when the recipe has no water to adjust.
    """
    if recipe.water <= 0.0:
        return None
    fat_type = composition.fat_type or FatType.OLIVE_OIL
    others = (
        recipe.flour * SPECIFIC_HEAT_FLOUR
        + recipe.sugar * SPECIFIC_HEAT_SUGAR
        + recipe.fat * fat_type.specific_heat
        + recipe.salt * SPECIFIC_HEAT_SALT
        + recipe.yeast * SPECIFIC_HEAT_YEAST
    )
    water = recipe.water * SPECIFIC_HEAT_WATER
    return ((others + water) * dough_temperature - others * ingredients_temperature) / water


def recipe_fractions(recipe: Recipe, composition: DoughComposition) -> Dict[str, float]:
    """
    Map the recipe masses back to flour-relative fractions (inverse of the mass balance
    when no ingredient correction is active).
    """
    flour = recipe.flour
    sugar = 0.0
    if composition.sugar_type is not None:
        sugar = recipe.sugar * composition.sugar_type.factor * composition.sugar_carbohydrate / flour
    return {
        "water": recipe.water / flour,
        "sugar": sugar,
        "fat": recipe.fat * composition.fat_content / flour,
        "salt": recipe.salt / flour,
        "yeast": recipe.yeast * composition.raw_yeast * composition.yeast_type.factor / flour,
    }
