"""
Oven and baking-pan properties.

Conventions:
- Temperatures in °C (converted to K only where stated).
- Heat-transfer coefficients in W/(m^2 K), specific heats in J/(kg K).
- Pan dimensions in cm, pan thickness in m, areas in cm^2.

The convective coefficients are empirical fits of the oven heat-transfer
coefficient as a function of the oven air temperature.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple, Union

from properties.ingredients import ABSOLUTE_ZERO, Atmosphere, poly_eval


class OvenType(Enum):
    """Convective regime: coefficients of h(T) = c0 + c1 T + c2 T^2."""

    NATURAL_CONVECTION = (8066.6, -76.01, 0.19536)
    FORCED_CONVECTION = (1697.7, -9.66, 0.02544)

    def __init__(self, c0: float, c1: float, c2: float) -> None:
        self.coefficients = (c0, c1, c2)

    def heat_transfer_coefficient(self, temperature: float) -> float:
        """Oven convective coefficient at the oven air temperature [°C]."""
        return poly_eval(self.coefficients, temperature)

    @property
    def is_forced(self) -> bool:
        return self is OvenType.FORCED_CONVECTION


def air_specific_heat(temperature: float) -> float:
    t_abs = temperature + ABSOLUTE_ZERO
    return 1002.5 + 275.0e-6 * (t_abs - 200.0) ** 2


class BakingPanMaterial(Enum):
    """(specific heat [J/(kg K)], conductivity [W/(m K)], density [kg/m^3], emissivity)."""

    CAST_IRON = (560.548, 52.0, 7200.0, 0.80)
    ALUMINIUM = (896.9, 237.0, 2700.0, 0.20)
    STAINLESS_STEEL_304 = (500.0, 16.2, 8000.0, 0.60)
    STAINLESS_STEEL_316 = (500.0, 16.3, 8000.0, 0.60)
    CERAMIC = (850.0, 1.5, 2400.0, 0.90)
    CLAY = (920.0, 1.0, 1800.0, 0.90)
    CORDIERITE_STONE = (800.0, 3.0, 2000.0, 0.90)

    def __init__(self, specific_heat: float, conductivity: float, density: float, emissivity: float):
        self.specific_heat = specific_heat
        self.conductivity = conductivity
        self.density = density
        self.emissivity = emissivity


@dataclass(frozen=True, slots=True)
class CircularBakingPan:
    diameter: float  # cm
    material: BakingPanMaterial = BakingPanMaterial.ALUMINIUM
    thickness: float = 0.002  # m

    def __post_init__(self) -> None:
        if self.diameter <= 0.0:
            raise ValueError(f"Pan diameter must be positive, got {self.diameter}")
        if self.thickness <= 0.0:
            raise ValueError(f"Pan thickness must be positive, got {self.thickness}")

    @property
    def area(self) -> float:
        return math.pi * self.diameter ** 2 / 4.0


@dataclass(frozen=True, slots=True)
class RectangularBakingPan:
    width: float  # cm
    length: float  # cm
    material: BakingPanMaterial = BakingPanMaterial.ALUMINIUM
    thickness: float = 0.002  # m

    def __post_init__(self) -> None:
        if self.width <= 0.0 or self.length <= 0.0:
            raise ValueError(f"Pan sides must be positive, got {self.width} x {self.length}")
        if self.thickness <= 0.0:
            raise ValueError(f"Pan thickness must be positive, got {self.thickness}")

    @property
    def area(self) -> float:
        return self.width * self.length


BakingPan = Union[CircularBakingPan, RectangularBakingPan]


@dataclass(frozen=True, slots=True)
class BakingInstruments:
    """
    Oven, pans, and the conditions around the pizza.

    - cheese_thickness / sauce_thickness: topping layers [m]
    - preheated_pan: pan starts at the baking temperature instead of ambient
    - top_heater / bottom_heater: which heating elements radiate onto the pizza
    """

    oven_type: OvenType
    baking_pans: Tuple[BakingPan, ...]
    ambient_temperature: float = 20.0
    atmosphere: Atmosphere = field(default_factory=Atmosphere)
    cheese_thickness: float = 0.002
    sauce_thickness: float = 0.0015
    preheated_pan: bool = False
    top_heater: bool = True
    bottom_heater: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "baking_pans", tuple(self.baking_pans))
        if not self.baking_pans:
            raise ValueError("Missing baking pans")
        if not (self.top_heater or self.bottom_heater):
            raise ValueError("At least one of the top and bottom heaters must be on")
        if self.cheese_thickness <= 0.0 or self.sauce_thickness <= 0.0:
            raise ValueError(
                f"Topping thicknesses must be positive, got cheese={self.cheese_thickness}, "
                f"sauce={self.sauce_thickness}"
            )

    @property
    def total_area(self) -> float:
        return sum(pan.area for pan in self.baking_pans)
