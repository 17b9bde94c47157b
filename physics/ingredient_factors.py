"""
Ingredient correction factors of the maximum specific growth rate.

Each factor is a pure function returning a multiplier in [0, 1] (the hydration
factor peaks slightly above 1). The composite factor is the product of the
sugar, salt, chlorine dioxide, pH and pressure factors; hydration acts as a
gate that turns the composite to zero outside the viable water content.

Conventions:
- sugar, salt, water, fat are fractions relative to flour mass
- chlorine dioxide in mg/l, pressure in hPa, salinity in g/l

References:
- Stratford et al. 2018, osmotic and salt tolerance of Saccharomyces cerevisiae
- Rosso et al. 1995, cardinal pH model
- Arao et al. 2005, growth under high hydrostatic pressure
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from properties.ingredients import BUTTER_PH, FLOUR_PH, MW_GLUCOSE, MW_SODIUM_CHLORIDE, poly_eval
from properties.yeast_models import YeastModel

if TYPE_CHECKING:
    from core.composition import DoughComposition

# sugar: polynomial below the threshold, logarithmic decay above
SUGAR_THRESHOLD = 0.03
SUGAR_LOG_INTERCEPT = -0.3154
SUGAR_LOG_SLOPE = -0.403
SUGAR_FACTOR_MAX = math.exp(SUGAR_LOG_INTERCEPT / -SUGAR_LOG_SLOPE)
# osmotic tolerance: 3.21 mol/l of glucose, expressed as mass fraction
SUGAR_MAX = 3.21 * MW_GLUCOSE / 1000.0

# salt: maximum salinity tolerated (2.5 mol/l of NaCl) [g/l]
SALT_MAX = 2.5 * MW_SODIUM_CHLORIDE

# hydration: roots of -1.292 + 7.65 h - 6.25 h^2
_HYDRATION_COEFFICIENTS = (-1.292, 7.65, -6.25)
_HYDRATION_DISCRIMINANT = math.sqrt(7.65 ** 2 - 4.0 * 6.25 * 1.292)
HYDRATION_MIN = (7.65 - _HYDRATION_DISCRIMINANT) / (2.0 * 6.25)
HYDRATION_MAX = (7.65 + _HYDRATION_DISCRIMINANT) / (2.0 * 6.25)

# chlorine dioxide [mg/l]
CHLORINE_DIOXIDE_MAX = 1.0 / 0.0931
CHLORINE_DIOXIDE_SLOPE = 0.375

# pressure: 1 - K (p / 1e8)^M [p in hPa]
PRESSURE_FACTOR_K = 1.46
PRESSURE_FACTOR_M = 2.031
PRESSURE_REFERENCE = 1.0e8
MINIMUM_INHIBITORY_PRESSURE = PRESSURE_REFERENCE * (1.0 / PRESSURE_FACTOR_K) ** (1.0 / PRESSURE_FACTOR_M)


def sugar_factor(sugar: float) -> float:
    """Correction for the glucose-equivalent sugar fraction."""
    if sugar < SUGAR_THRESHOLD:
        return min(1.0 + (4.9 - 50.0 * sugar) * sugar, 1.0)
    if sugar < SUGAR_FACTOR_MAX:
        return SUGAR_LOG_INTERCEPT + SUGAR_LOG_SLOPE * math.log(sugar)
    return 0.0


def salinity(salt: float, water: float) -> float:
    """Salt concentration in the dough water [g/l]."""
    if salt <= 0.0:
        return 0.0
    if water <= 0.0:
        return math.inf
    return 1000.0 * salt / water


def salt_factor(salt: float, water: float) -> float:
    """Linear decay reaching zero at SALT_MAX."""
    return max(1.0 - salinity(salt, water) / SALT_MAX, 0.0)


def hydration_factor(hydration: float) -> float:
    """Zero at both hydration bounds, maximum near their midpoint."""
    if HYDRATION_MIN <= hydration < HYDRATION_MAX:
        return max(poly_eval(_HYDRATION_COEFFICIENTS, hydration), 0.0)
    return 0.0


def chlorine_dioxide_factor(chlorine_dioxide: float) -> float:
    return max(1.0 - CHLORINE_DIOXIDE_SLOPE * chlorine_dioxide / CHLORINE_DIOXIDE_MAX, 0.0)


def dough_ph(water: float, water_ph: float, fat: float, fat_has_ph: bool) -> float:
    """Weighted average of flour, water and (when it carries one) fat pH."""
    fat_weight = fat if fat_has_ph else 0.0
    return (FLOUR_PH + water_ph * water + BUTTER_PH * fat_weight) / (1.0 + water + fat_weight)


def ph_factor(model: YeastModel, ph: float) -> float:
    """Rosso cardinal pH bell; 1 for strains without pH bounds."""
    if not model.has_ph_bounds:
        return 1.0
    if ph < model.ph_min or ph > model.ph_max:
        return 0.0
    tmp = (ph - model.ph_min) * (ph - model.ph_max)
    return tmp / (tmp - (ph - model.ph_opt) ** 2)


def pressure_factor(pressure: float) -> float:
    """Power-law decay with pressure, zero at or above the minimum inhibitory pressure."""
    if pressure >= MINIMUM_INHIBITORY_PRESSURE:
        return 0.0
    return 1.0 - PRESSURE_FACTOR_K * (pressure / PRESSURE_REFERENCE) ** PRESSURE_FACTOR_M


@dataclass(frozen=True, slots=True)
class IngredientFactors:
    """Breakdown of the composite correction factor."""

    sugar: float
    salt: float
    hydration: float
    chlorine_dioxide: float
    ph: float
    pressure: float

    @property
    def composite(self) -> float:
        if self.hydration <= 0.0:
            return 0.0
        return self.sugar * self.salt * self.chlorine_dioxide * self.ph * self.pressure

    def zero_factors(self) -> list[str]:
        """Names of the factors that prevent any growth."""
        return [
            name
            for name in ("sugar", "salt", "hydration", "chlorine_dioxide", "ph", "pressure")
            if getattr(self, name) <= 0.0
        ]


def ingredient_factors(composition: "DoughComposition", model: YeastModel) -> IngredientFactors:
    ph = dough_ph(
        composition.water,
        composition.water_ph,
        composition.fat,
        composition.fat_type is not None and composition.fat_type.has_ph,
    )
    return IngredientFactors(
        sugar=sugar_factor(composition.sugar),
        salt=salt_factor(composition.salt, composition.water),
        hydration=hydration_factor(composition.water),
        chlorine_dioxide=chlorine_dioxide_factor(composition.water_chlorine_dioxide),
        ph=ph_factor(model, ph),
        pressure=pressure_factor(composition.atmosphere.pressure),
    )
