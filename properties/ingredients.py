"""
Ingredient property tables.

Conventions:
- Fractions are mass fractions in [0, 1] unless stated otherwise.
- Specific heats are in J/(kg K), temperatures in °C, pressures in hPa.
- Sugar factors are relative to glucose, yeast factors relative to fresh yeast.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

ABSOLUTE_ZERO = 273.15
STANDARD_ATMOSPHERE = 1013.25  # hPa

# molecular weights [g/mol]
MW_CARBON = 12.0107
MW_HYDROGEN = 1.00784
MW_OXYGEN = 15.9994
MW_GLUCOSE = 6.0 * MW_CARBON + 12.0 * MW_HYDROGEN + 6.0 * MW_OXYGEN
MW_DISACCHARIDE = 12.0 * MW_CARBON + 22.0 * MW_HYDROGEN + 11.0 * MW_OXYGEN
MW_SODIUM_CHLORIDE = 58.4428

SPECIFIC_HEAT_WATER = 4186.0
SPECIFIC_HEAT_FLOUR = 1760.0
SPECIFIC_HEAT_SUGAR = 1244.0
SPECIFIC_HEAT_SALT = 880.0
SPECIFIC_HEAT_YEAST = 3400.0

FLOUR_PH = 6.4
BUTTER_PH = 6.25
PURE_WATER_PH = 5.4


class YeastType(Enum):
    """Commercial yeast presentation: (factor w.r.t. fresh yeast, moisture content)."""

    FRESH = (1.0, 0.7)
    ACTIVE_DRY = (2.4, 0.08)
    INSTANT_DRY = (3.125, 0.05)

    def __init__(self, factor: float, moisture_content: float) -> None:
        self.factor = factor
        self.moisture_content = moisture_content


class SugarType(Enum):
    """Fermentable sugars: (fermentable factor w.r.t. glucose, molecular weight)."""

    GLUCOSE = (0.41 / 0.41, MW_GLUCOSE)
    MALTOSE = (0.40 / 0.41, MW_DISACCHARIDE)
    SUCROSE = (0.38 / 0.41, MW_DISACCHARIDE)
    LACTOSE = (0.28 / 0.41, MW_GLUCOSE)

    def __init__(self, factor: float, molecular_weight: float) -> None:
        self.factor = factor
        self.molecular_weight = molecular_weight


class FatType(Enum):
    """Fats: (specific heat [J/(kg K)], contributes its own pH)."""

    OLIVE_OIL = (1970.0, False)
    SUNFLOWER_OIL = (2020.0, False)
    SEED_OIL = (2000.0, False)
    LARD = (2090.0, False)
    BUTTER = (2720.0, True)

    def __init__(self, specific_heat: float, has_ph: bool) -> None:
        self.specific_heat = specific_heat
        self.has_ph = has_ph


@dataclass(frozen=True, slots=True)
class Flour:
    """Flour composition (mass fractions)."""

    strength: float = 300.0
    protein: float = 0.125
    fat: float = 0.015
    carbohydrate: float = 0.72
    fiber: float = 0.03
    ash: float = 0.006
    salt: float = 0.0

    def __post_init__(self) -> None:
        for name in ("protein", "fat", "carbohydrate", "fiber", "ash", "salt"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Flour {name} must be in [0, 1], got {value}")
        if self.strength < 0.0:
            raise ValueError(f"Flour strength must be non-negative, got {self.strength}")

    @staticmethod
    def estimated_humidity(relative_humidity: float) -> float:
        """Equilibrium moisture of flour stored at the given relative humidity [0, 1]."""
        return 0.121 + 0.000044 * math.exp(8.16 * relative_humidity)


@dataclass(frozen=True, slots=True)
class Atmosphere:
    pressure: float = STANDARD_ATMOSPHERE
    relative_humidity: float = 0.55

    def __post_init__(self) -> None:
        if self.pressure <= 0.0:
            raise ValueError(f"Atmospheric pressure must be positive, got {self.pressure} hPa")
        if not 0.0 <= self.relative_humidity <= 1.0:
            raise ValueError(
                f"Relative humidity must be in [0, 1], got {self.relative_humidity}"
            )


# boiling temperature of pure water as a function of pressure [hPa] → [°C]
BOILING_TEMPERATURE_COEFFICIENTS = (
    19.46, 0.36395, -1.27769e-3, 3.21349e-6, -5.12207e-9, 4.92425e-12, -2.59915e-15, 5.7739e-19,
)
# boiling point elevation of brine: (B + A S) S, S salt mass fraction in water
BOILING_ELEVATION_A_COEFFICIENTS = (17.95, 0.2823, -0.0004584)
BOILING_ELEVATION_B_COEFFICIENTS = (6.56, 0.05267, 0.0001536)


def poly_eval(coeffs, x: float) -> float:
    """Evaluate sum(c_i * x**i) (Horner)."""
    result = 0.0
    for c in reversed(coeffs):
        result = result * x + c
    return result


def water_boiling_temperature(salinity: float, pressure: float = STANDARD_ATMOSPHERE) -> float:
    """Boiling temperature [°C] of water with salt mass fraction `salinity` at `pressure` [hPa]."""
    temperature = poly_eval(BOILING_TEMPERATURE_COEFFICIENTS, pressure)
    a = poly_eval(BOILING_ELEVATION_A_COEFFICIENTS, temperature)
    b = poly_eval(BOILING_ELEVATION_B_COEFFICIENTS, temperature)
    return temperature + (b + a * salinity) * salinity
