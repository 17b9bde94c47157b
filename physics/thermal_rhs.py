"""
Transient 1-D heat conduction and moisture diffusion through the pizza stack.

Conventions:
- Nodes bottom → top as in core.layout; segments join consecutive nodes.
- Node heat capacity C_i [J/(m^2 K)] is half of each adjacent segment's ρ c L;
  the pan node is lumped and carries its whole ρ c L.
- Heat balance: C_i dT_i/dt = Σ_seg G (T_j - T_i) + q_i, with G = k / L.
- Moisture balance: M_i dX_i/dt = Σ_seg (ρ D / L) (X_j - X_i) - J δ_top,
  with M_i the dry mass per unit area attached to node i. No moisture crosses the pan.
- Bottom (pan): convection h(T_bottom) and radiation from the bottom heater.
- Top (cheese): convection h(T_top), radiation from the top heater, and
  evaporation J [kg/(m^2 s)] removing latent heat Lv J. J = K_m (H_s - H_a) a,
  with K_m = h / cp_air (Lewis analogy) and a the fraction of the initial surface moisture still present.
- Radiation uses absolute temperatures and is dropped on the side of a heater that is off.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from core.layout import DOUGH_SUBLAYERS, ThermalLayout
from core.types import FloatArray, ThermalState
from properties.food_thermal import (
    CHEESE,
    DOUGH,
    FOOD_EMISSIVITY,
    LATENT_HEAT_VAPORIZATION,
    SAUCE,
    STEFAN_BOLTZMANN,
    ambient_humidity_ratio,
    surface_humidity_ratio,
)
from properties.ingredients import ABSOLUTE_ZERO, Atmosphere
from properties.oven import BakingPanMaterial, OvenType, air_specific_heat

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StackGeometry:
    """Layer thicknesses [m] and pan material."""

    dough_thickness: float
    sauce_thickness: float
    cheese_thickness: float
    pan_thickness: float
    pan_material: BakingPanMaterial
    dough_moisture: float = DOUGH.initial_moisture

    def __post_init__(self) -> None:
        for name in ("dough_thickness", "sauce_thickness", "cheese_thickness", "pan_thickness"):
            value = getattr(self, name)
            if not np.isfinite(value) or value <= 0.0:
                raise ValueError(f"{name} must be finite and positive, got {value}")
        if self.dough_moisture < 0.0:
            raise ValueError(f"dough_moisture must be non-negative, got {self.dough_moisture}")


@dataclass(frozen=True, slots=True)
class OvenConditions:
    """
    Boundary conditions fixed for one bake.

    A heater that is off no longer radiates onto its side of the stack; the
    oven air keeps exchanging heat by convection on both sides.
    """

    oven_type: OvenType
    top_temperature: float
    bottom_temperature: float
    ambient_temperature: float = 20.0
    atmosphere: Atmosphere = field(default_factory=Atmosphere)
    top_heater: bool = True
    bottom_heater: bool = True


class ThermalModel:
    """
    Right-hand side of the pizza stack ODE.

    All coefficients are computed at construction; compute_derivatives() is a
    pure function of (t, y).
    """

    def __init__(
        self,
        geometry: StackGeometry,
        conditions: OvenConditions,
        layout: Optional[ThermalLayout] = None,
    ):
        self.geometry = geometry
        self.conditions = conditions
        self.layout = layout or ThermalLayout()
        if self.layout.n_nodes != DOUGH_SUBLAYERS + 5:
            raise ValueError(f"Layout with {self.layout.n_nodes} nodes does not match the pizza stack")

        oven_type = conditions.oven_type
        baking = conditions.top_temperature

        # segment list (bottom → top): (layer, length)
        dough_step = geometry.dough_thickness / DOUGH_SUBLAYERS
        segments = [(DOUGH, dough_step)] * DOUGH_SUBLAYERS + [
            (SAUCE, geometry.sauce_thickness / 2.0),
            (SAUCE, geometry.sauce_thickness / 2.0),
            (CHEESE, geometry.cheese_thickness),
        ]

        n = self.layout.n_nodes
        pan = geometry.pan_material
        heat_conductance = np.empty(n - 1)
        mass_conductance = np.zeros(n - 1)
        heat_capacity = np.zeros(n)
        dry_mass = np.zeros(n)

        # pan ↔ dough bottom: conduction through half the pan
        heat_conductance[0] = 2.0 * pan.conductivity / geometry.pan_thickness
        heat_capacity[0] = pan.density * pan.specific_heat * geometry.pan_thickness

        for s, (layer, length) in enumerate(segments, start=1):
            heat_conductance[s] = layer.conductivity / length
            mass_conductance[s] = layer.density * layer.moisture_diffusivity(baking, oven_type) / length
            half_capacity = 0.5 * layer.volumetric_heat_capacity * length
            half_mass = 0.5 * layer.density * length
            heat_capacity[s] += half_capacity
            heat_capacity[s + 1] += half_capacity
            dry_mass[s] += half_mass
            dry_mass[s + 1] += half_mass

        self.heat_conductance = heat_conductance
        self.mass_conductance = mass_conductance
        self.heat_capacity = heat_capacity
        self.dry_mass = dry_mass

        self.h_top = oven_type.heat_transfer_coefficient(conditions.top_temperature)
        self.h_bottom = oven_type.heat_transfer_coefficient(conditions.bottom_temperature)
        if self.h_top <= 0.0 or self.h_bottom <= 0.0:
            raise ValueError(
                f"Non-positive heat-transfer coefficient (top {self.h_top:.3g}, bottom {self.h_bottom:.3g}) "
                f"for {oven_type.name} at {conditions.top_temperature}/{conditions.bottom_temperature} °C"
            )
        self.bottom_radiation = STEFAN_BOLTZMANN * pan.emissivity if conditions.bottom_heater else 0.0
        self.top_radiation = STEFAN_BOLTZMANN * FOOD_EMISSIVITY if conditions.top_heater else 0.0
        self.top_abs4 = (conditions.top_temperature + ABSOLUTE_ZERO) ** 4
        self.bottom_abs4 = (conditions.bottom_temperature + ABSOLUTE_ZERO) ** 4

        self.mass_transfer = self.h_top / air_specific_heat(conditions.top_temperature)
        humidity_gap = surface_humidity_ratio(baking) - ambient_humidity_ratio(
            conditions.ambient_temperature,
            conditions.atmosphere.relative_humidity,
            conditions.atmosphere.pressure,
        )
        self.humidity_gap = max(humidity_gap, 0.0)

        self.initial_moisture = self._initial_moisture()

        logger.debug(
            "Thermal model: h_top=%.4g h_bottom=%.4g K_m=%.4g ΔH=%.4g",
            self.h_top,
            self.h_bottom,
            self.mass_transfer,
            self.humidity_gap,
        )

    def _initial_moisture(self) -> FloatArray:
        """Layer moisture on each node; interface nodes take the mean of both layers."""
        dough = self.geometry.dough_moisture
        sauce = SAUCE.initial_moisture
        cheese = CHEESE.initial_moisture
        values = [0.0] + [dough] * DOUGH_SUBLAYERS + [
            0.5 * (dough + sauce),
            sauce,
            0.5 * (sauce + cheese),
            cheese,
        ]
        return np.asarray(values, dtype=np.float64)

    def initial_state(self, preheated_pan: bool = False) -> ThermalState:
        n = self.layout.n_nodes
        temperature = np.full(n, self.conditions.ambient_temperature, dtype=np.float64)
        if preheated_pan:
            temperature[self.layout.pan] = self.conditions.bottom_temperature
        return ThermalState(temperature, self.initial_moisture.copy(), 0.0)

    def evaporation_rate(self, surface_moisture: float) -> float:
        """Evaporation flux at the top surface [kg/(m^2 s)]."""
        reference = self.initial_moisture[self.layout.top]
        if reference <= 0.0:
            return 0.0
        availability = min(max(surface_moisture / reference, 0.0), 1.0)
        return self.mass_transfer * self.humidity_gap * availability

    def compute_derivatives(self, t: float, y: FloatArray) -> FloatArray:
        layout = self.layout
        temperature, moisture = layout.split(np.asarray(y, dtype=np.float64))
        pan = layout.pan
        top = layout.top

        # conduction between neighbours (positive flux from node i+1 into node i)
        flux = self.heat_conductance * (temperature[1:] - temperature[:-1])
        q = np.zeros_like(temperature)
        q[:-1] += flux
        q[1:] -= flux

        t_pan = temperature[pan]
        q[pan] += self.h_bottom * (self.conditions.bottom_temperature - t_pan)
        q[pan] += self.bottom_radiation * (self.bottom_abs4 - (t_pan + ABSOLUTE_ZERO) ** 4)

        t_top = temperature[top]
        evaporation = self.evaporation_rate(moisture[top])
        q[top] += self.h_top * (self.conditions.top_temperature - t_top)
        q[top] += self.top_radiation * (self.top_abs4 - (t_top + ABSOLUTE_ZERO) ** 4)
        q[top] -= LATENT_HEAT_VAPORIZATION * evaporation

        mass_flux = self.mass_conductance * (moisture[1:] - moisture[:-1])
        m = np.zeros_like(moisture)
        m[:-1] += mass_flux
        m[1:] -= mass_flux
        m[top] -= evaporation

        dydt = np.empty(layout.size, dtype=np.float64)
        d_temperature, d_moisture = layout.split(dydt)
        d_temperature[:] = q / self.heat_capacity
        np.divide(m, self.dry_mass, out=d_moisture, where=self.dry_mass > 0.0)
        d_moisture[self.dry_mass <= 0.0] = 0.0
        return dydt

    def minimum_food_temperature(self, state: ThermalState) -> float:
        return float(np.min(state.temperature[self.layout.food]))
