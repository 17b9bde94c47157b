"""
Thermophysical properties of the pizza layers.

Conventions:
- Conductivity W/(m K), density kg/m^3, specific heat J/(kg K).
- Moisture content on dry basis [kg water / kg solid].
- Moisture diffusivities are evaluated at the oven temperature in K and depend
  on the convective regime (fits of drying experiments).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

from properties.ingredients import ABSOLUTE_ZERO, poly_eval
from properties.oven import OvenType

STEFAN_BOLTZMANN = 5.670374419e-8  # W/(m^2 K^4)
LATENT_HEAT_VAPORIZATION = 2256.9e3  # J/kg
FOOD_EMISSIVITY = 0.9
WATER_AIR_MOLAR_MASS_RATIO = 0.62198

SURFACE_HUMIDITY_COEFFICIENTS = (0.1837, -0.0014607, 4.477e-6)


@dataclass(frozen=True, slots=True)
class LayerProperties:
    name: str
    conductivity: float
    density: float
    specific_heat: float
    initial_moisture: float
    moisture_diffusivity: Callable[[float, OvenType], float]

    @property
    def volumetric_heat_capacity(self) -> float:
        return self.density * self.specific_heat


def _cheese_moisture_diffusivity(temperature: float, oven_type: OvenType) -> float:
    return 7.0e-11


def _sauce_moisture_diffusivity(temperature: float, oven_type: OvenType) -> float:
    t_abs = temperature + ABSOLUTE_ZERO
    if oven_type.is_forced:
        return 9.9646e-10 * math.exp(-605.93 / t_abs)
    return 1.7738e-10 * math.exp(-1212.71 / t_abs)


def _dough_moisture_diffusivity(temperature: float, oven_type: OvenType) -> float:
    t_abs = temperature + ABSOLUTE_ZERO
    if oven_type.is_forced:
        return 7.0582e-8 * math.exp(-1890.68 / t_abs)
    return 1.4596e-9 * math.exp(-420.34 / t_abs)


CHEESE = LayerProperties("cheese", 0.380, 1140.0, 2864.0, 0.826, _cheese_moisture_diffusivity)
SAUCE = LayerProperties("sauce", 0.546, 1073.0, 2930.0, 3.73, _sauce_moisture_diffusivity)
DOUGH = LayerProperties("dough", 0.416, 862.0, 3770.0, 0.65, _dough_moisture_diffusivity)


def surface_humidity_ratio(temperature: float) -> float:
    """Humidity ratio at the pizza surface for the given oven temperature [°C]."""
    return max(poly_eval(SURFACE_HUMIDITY_COEFFICIENTS, temperature), 0.0)


def saturation_vapor_pressure(temperature: float) -> float:
    """Arden Buck saturation vapor pressure over water [hPa]."""
    return 6.1121 * math.exp((18.678 - temperature / 234.5) * (temperature / (257.14 + temperature)))


def ambient_humidity_ratio(temperature: float, relative_humidity: float, pressure: float) -> float:
    """Humidity ratio of air at `temperature` [°C], relative humidity [0, 1], pressure [hPa]."""
    vapor = relative_humidity * saturation_vapor_pressure(temperature)
    return WATER_AIR_MOLAR_MASS_RATIO * vapor / (pressure - vapor)
