"""
Dough composition: ingredient fractions relative to flour mass.

Responsibilities:
- DoughCompositionBuilder validates each addition against its physical range.
- build() produces an immutable DoughComposition; water quality (chlorine
  dioxide, fixed residue, pH) is the water-mass-weighted average of every
  water source, so the result does not depend on the order of additions.
- The yeast fraction is solved later and attached with with_yeast_fraction().
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from physics.ingredient_factors import (
    CHLORINE_DIOXIDE_MAX,
    MINIMUM_INHIBITORY_PRESSURE,
    SUGAR_MAX,
)
from properties.ingredients import (
    PURE_WATER_PH,
    Atmosphere,
    FatType,
    Flour,
    SugarType,
    YeastType,
)

WATER_FIXED_RESIDUE_MAX = 1500.0  # mg/l


class DoughError(ValueError):
    """Raised when an ingredient quantity or property is out of its valid range."""


@dataclass(frozen=True, slots=True)
class WaterSource:
    """One contribution to the dough water."""

    quantity: float
    chlorine_dioxide: float = 0.0
    fixed_residue: float = 0.0
    ph: float = PURE_WATER_PH


@dataclass(frozen=True, slots=True)
class DoughComposition:
    """
    Fractions relative to flour mass.

    - water: total water, including water carried by sugar and fat
    - sugar: glucose-equivalent fermentable sugar
    - fat: pure fat; fat_* describe the fat ingredient
    - salt: total salt, including salt carried by fat
    - yeast: fresh-yeast equivalent fraction (0 until solved)
    """

    water: float = 0.0
    water_chlorine_dioxide: float = 0.0
    water_fixed_residue: float = 0.0
    water_ph: float = PURE_WATER_PH
    sugar: float = 0.0
    sugar_type: Optional[SugarType] = None
    sugar_carbohydrate: float = 1.0
    sugar_water_content: float = 0.0
    fat: float = 0.0
    fat_type: Optional[FatType] = None
    fat_content: float = 1.0
    fat_water_content: float = 0.0
    fat_salt_content: float = 0.0
    fat_density: float = 0.913
    salt: float = 0.0
    yeast: float = 0.0
    yeast_type: YeastType = YeastType.FRESH
    raw_yeast: float = 1.0
    flour: Flour = field(default_factory=Flour)
    atmosphere: Atmosphere = field(default_factory=Atmosphere)
    correct_for_ingredients: bool = False
    correct_for_humidity: bool = False

    def __post_init__(self) -> None:
        for name in ("water", "sugar", "fat", "salt", "yeast"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0.0:
                raise DoughError(f"{name} fraction must be finite and non-negative, got {value}")

    @property
    def total_fraction(self) -> float:
        return 1.0 + self.water + self.sugar + self.fat + self.salt + self.yeast

    def with_yeast_fraction(self, yeast: float) -> "DoughComposition":
        return replace(self, yeast=yeast)


class DoughCompositionBuilder:
    """Accumulates ingredient additions; every method returns the builder."""

    def __init__(self) -> None:
        self._water: List[WaterSource] = []
        self._sugar: Optional[Tuple[SugarType, float, float, float]] = None
        self._fat: Optional[Tuple[FatType, float, float, float, float, float]] = None
        self._salt = 0.0
        self._yeast_type = YeastType.FRESH
        self._raw_yeast = 1.0
        self._flour = Flour()
        self._atmosphere = Atmosphere()
        self._correct_for_ingredients = False
        self._correct_for_humidity = False

    def add_water(
        self,
        quantity: float,
        *,
        chlorine_dioxide: float = 0.0,
        fixed_residue: float = 0.0,
        ph: float = PURE_WATER_PH,
    ) -> "DoughCompositionBuilder":
        """
        Add water.

        Args:
            quantity: Fraction relative to flour
            chlorine_dioxide: Chlorine dioxide [mg/l], in [0, CHLORINE_DIOXIDE_MAX)
            fixed_residue: Fixed residue [mg/l], in [0, 1500)
            ph: Water pH, in [0, 14]
        """
        if quantity < 0.0:
            raise DoughError(f"Water quantity must be non-negative, got {quantity}")
        if not 0.0 <= chlorine_dioxide < CHLORINE_DIOXIDE_MAX:
            raise DoughError(
                f"Chlorine dioxide must be in [0, {CHLORINE_DIOXIDE_MAX:.4f}) mg/l, got {chlorine_dioxide}"
            )
        if not 0.0 <= fixed_residue < WATER_FIXED_RESIDUE_MAX:
            raise DoughError(
                f"Fixed residue must be in [0, {WATER_FIXED_RESIDUE_MAX}) mg/l, got {fixed_residue}"
            )
        if not 0.0 <= ph <= 14.0:
            raise DoughError(f"pH must be in [0, 14], got {ph}")
        self._water.append(WaterSource(quantity, chlorine_dioxide, fixed_residue, ph))
        return self

    def add_sugar(
        self,
        quantity: float,
        sugar_type: SugarType = SugarType.SUCROSE,
        *,
        carbohydrate: float = 1.0,
        water_content: float = 0.0,
    ) -> "DoughCompositionBuilder":
        """
        Add the dough's sugar ingredient.

        A dough takes one sugar ingredient: its type, carbohydrate and water
        contents describe that ingredient, so a second call raises DoughError
        instead of merging two different sugars. Water and salt additions do
        accumulate.

        Args:
            quantity: Fraction of the sugar ingredient relative to flour, in [0, SUGAR_MAX)
            carbohydrate: Carbohydrate fraction of the ingredient, in (0, 1]
            water_content: Water fraction of the ingredient, in [0, 1); added to the dough water
        """
        if self._sugar is not None:
            raise DoughError("Sugar was already set")
        if not 0.0 <= quantity < SUGAR_MAX:
            raise DoughError(f"Sugar must be in [0, {SUGAR_MAX:.4f}), got {quantity}")
        if not 0.0 < carbohydrate <= 1.0:
            raise DoughError(f"Sugar carbohydrate content must be in (0, 1], got {carbohydrate}")
        if not 0.0 <= water_content < 1.0:
            raise DoughError(f"Sugar water content must be in [0, 1), got {water_content}")
        self._sugar = (sugar_type, quantity, carbohydrate, water_content)
        if water_content > 0.0:
            self.add_water(quantity * water_content)
        return self

    def add_fat(
        self,
        quantity: float,
        fat_type: FatType = FatType.OLIVE_OIL,
        *,
        fat_content: float = 1.0,
        water_content: float = 0.0,
        salt_content: float = 0.0,
        density: float = 0.913,
    ) -> "DoughCompositionBuilder":
        """
        Add the dough's fat ingredient; a second call raises DoughError.

        Contents are fractions of the fat ingredient and density is in kg/l. The
        water and salt carried by the fat are added to the dough water and salt.
        """
        if self._fat is not None:
            raise DoughError("Fat was already set")
        if quantity < 0.0:
            raise DoughError(f"Fat must be non-negative, got {quantity}")
        if not 0.0 < fat_content <= 1.0:
            raise DoughError(f"Fat content must be in (0, 1], got {fat_content}")
        if not 0.0 <= water_content < 1.0 or not 0.0 <= salt_content < 1.0:
            raise DoughError(
                f"Fat water/salt contents must be in [0, 1), got {water_content}/{salt_content}"
            )
        if density <= 0.0:
            raise DoughError(f"Fat density must be positive, got {density}")
        self._fat = (fat_type, quantity, fat_content, water_content, salt_content, density)
        if water_content > 0.0:
            self.add_water(quantity * water_content)
        if salt_content > 0.0:
            self.add_salt(quantity * salt_content)
        return self

    def add_salt(self, quantity: float) -> "DoughCompositionBuilder":
        if quantity < 0.0:
            raise DoughError(f"Salt must be non-negative, got {quantity}")
        self._salt += quantity
        return self

    def with_yeast(self, yeast_type: YeastType, raw_yeast: float = 1.0) -> "DoughCompositionBuilder":
        """Set the yeast presentation and the fraction of it that is yeast."""
        if not 0.0 < raw_yeast <= 1.0:
            raise DoughError(f"Raw yeast content must be in (0, 1], got {raw_yeast}")
        self._yeast_type = yeast_type
        self._raw_yeast = raw_yeast
        return self

    def with_flour(self, flour: Flour) -> "DoughCompositionBuilder":
        self._flour = flour
        return self

    def with_atmosphere(self, atmosphere: Atmosphere) -> "DoughCompositionBuilder":
        if atmosphere.pressure >= MINIMUM_INHIBITORY_PRESSURE:
            raise DoughError(
                f"Atmospheric pressure must be below {MINIMUM_INHIBITORY_PRESSURE:.1f} hPa, "
                f"got {atmosphere.pressure}"
            )
        self._atmosphere = atmosphere
        return self

    def with_correct_for_ingredients(self, correct: bool = True) -> "DoughCompositionBuilder":
        self._correct_for_ingredients = correct
        return self

    def with_correct_for_humidity(self, correct: bool = True) -> "DoughCompositionBuilder":
        self._correct_for_humidity = correct
        return self

    def build(self) -> DoughComposition:
        water = sum(w.quantity for w in self._water)
        if water > 0.0:
            chlorine_dioxide = sum(w.quantity * w.chlorine_dioxide for w in self._water) / water
            fixed_residue = sum(w.quantity * w.fixed_residue for w in self._water) / water
            ph = sum(w.quantity * w.ph for w in self._water) / water
        else:
            chlorine_dioxide, fixed_residue, ph = 0.0, 0.0, PURE_WATER_PH

        kwargs = {}
        if self._sugar is not None:
            sugar_type, quantity, carbohydrate, water_content = self._sugar
            kwargs.update(
                sugar=sugar_type.factor * quantity * carbohydrate,
                sugar_type=sugar_type,
                sugar_carbohydrate=carbohydrate,
                sugar_water_content=water_content,
            )
        if self._fat is not None:
            fat_type, quantity, fat_content, water_content, salt_content, density = self._fat
            kwargs.update(
                fat=quantity * fat_content,
                fat_type=fat_type,
                fat_content=fat_content,
                fat_water_content=water_content,
                fat_salt_content=salt_content,
                fat_density=density,
            )

        return DoughComposition(
            water=water,
            water_chlorine_dioxide=chlorine_dioxide,
            water_fixed_residue=fixed_residue,
            water_ph=ph,
            salt=self._salt,
            yeast_type=self._yeast_type,
            raw_yeast=self._raw_yeast,
            flour=self._flour,
            atmosphere=self._atmosphere,
            correct_for_ingredients=self._correct_for_ingredients,
            correct_for_humidity=self._correct_for_humidity,
            **kwargs,
        )
