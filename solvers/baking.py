"""
Baking solver: oven temperature from the target height, then baking duration.

Responsibilities:
- Derive the initial dough height from the recipe and the pan area, and the
  oven set point from the height ratio through the ideal-gas law at constant
  pressure: (T_bake + 273.15) = ratio * (T_dough + 273.15).
- Refuse set points that can never cook the pizza; warn below the Maillard threshold.
- Root-find the duration at which the coldest food node reaches the doneness
  temperature; every evaluation re-integrates the stack from its initial state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, List, Optional

from core.types import BakingConfig, BakingInstructions, Recipe
from physics.thermal_rhs import OvenConditions, StackGeometry, ThermalModel
from properties.food_thermal import DOUGH
from properties.ingredients import ABSOLUTE_ZERO, water_boiling_temperature
from properties.oven import BakingInstruments, BakingPan
from solvers.bracketing import solve_bracketed
from solvers.root_types import NoBracketingError, RootDiagnostics, TooManyEvaluationsError
from solvers.timestepper import integrate_stack

logger = logging.getLogger(__name__)


class OvenError(RuntimeError):
    """Raised when the pizza cannot be baked with the requested parameters."""


@dataclass(slots=True)
class BakingResult:
    instructions: BakingInstructions
    height_ratio: float
    dough_thickness: float
    diags: List[RootDiagnostics]


def dough_thickness(recipe: Recipe, instruments: BakingInstruments) -> float:
    """Initial dough thickness [m] spread over all the pans."""
    area_m2 = instruments.total_area * 1.0e-4
    mass_kg = recipe.dough_weight * 1.0e-3
    return mass_kg / (DOUGH.density * area_m2)


def dough_moisture(recipe: Recipe) -> float:
    """Dry-basis moisture of the dough."""
    solids = recipe.dough_weight - recipe.water
    if solids <= 0.0:
        raise OvenError("Recipe has no solid ingredients")
    return recipe.water / solids


def baking_temperature(height_ratio: float, dough_temperature: float) -> float:
    """Oven temperature [°C] expanding the dough gas by `height_ratio`."""
    if height_ratio <= 0.0:
        raise ValueError(f"Height ratio must be positive, got {height_ratio}")
    return height_ratio * (dough_temperature + ABSOLUTE_ZERO) - ABSOLUTE_ZERO


def check_baking_temperature(
    temperature: float,
    recipe: Recipe,
    instruments: BakingInstruments,
    config: BakingConfig,
) -> None:
    """
    Raises:
        OvenError: the set point cannot bring the pizza to the doneness temperature
    """
    salinity = recipe.salt / recipe.water if recipe.water > 0.0 else 0.0
    boiling = water_boiling_temperature(salinity, instruments.atmosphere.pressure)
    if temperature <= config.doneness_temperature:
        raise OvenError(
            f"Baking temperature {temperature:.1f} °C can never bring the pizza to "
            f"{config.doneness_temperature:.1f} °C"
        )
    if temperature <= boiling:
        raise OvenError(
            f"Baking temperature {temperature:.1f} °C must be greater than water boiling "
            f"temperature ({boiling:.1f} °C)"
        )
    if temperature < config.maillard_temperature:
        logger.warning(
            "Baking temperature %.1f °C is below the Maillard reaction threshold (%.1f °C): "
            "the crust will not brown",
            temperature,
            config.maillard_temperature,
        )


def doneness_difference(
    model: ThermalModel,
    config: BakingConfig,
    preheated_pan: bool = False,
) -> Callable[[float], float]:
    """Return g(duration) = minimum food temperature after `duration` s - doneness."""
    state0 = model.initial_state(preheated_pan)

    def g(duration: float) -> float:
        result = integrate_stack(model, state0, duration, config.thermal)
        return model.minimum_food_temperature(result.state) - config.doneness_temperature

    return g


def solve_baking_duration(
    model: ThermalModel,
    config: BakingConfig,
    preheated_pan: bool = False,
) -> tuple[float, RootDiagnostics]:
    g = doneness_difference(model, config, preheated_pan)
    try:
        result = solve_bracketed(
            g,
            0.0,
            config.max_baking_time,
            xtol=config.duration_tolerance,
            max_iterations=config.max_iterations,
            name="baking duration",
        )
    except NoBracketingError as exc:
        raise OvenError(
            f"Doneness temperature {config.doneness_temperature:.1f} °C is not reachable within "
            f"{config.max_baking_time:.0f} s (coldest node at {exc.values[1] + config.doneness_temperature:.1f} °C)"
        ) from exc
    except TooManyEvaluationsError as exc:
        raise OvenError(
            f"Baking duration solver did not converge in {config.max_iterations} iterations, "
            "try increasing maximum number of evaluations"
        ) from exc
    return result.x, result.diag


def build_thermal_model(
    pan: BakingPan,
    thickness: float,
    moisture: float,
    temperature: float,
    instruments: BakingInstruments,
) -> ThermalModel:
    geometry = StackGeometry(
        dough_thickness=thickness,
        sauce_thickness=instruments.sauce_thickness,
        cheese_thickness=instruments.cheese_thickness,
        pan_thickness=pan.thickness,
        pan_material=pan.material,
        dough_moisture=moisture,
    )
    conditions = OvenConditions(
        oven_type=instruments.oven_type,
        top_temperature=temperature,
        bottom_temperature=temperature,
        ambient_temperature=instruments.ambient_temperature,
        atmosphere=instruments.atmosphere,
        top_heater=instruments.top_heater,
        bottom_heater=instruments.bottom_heater,
    )
    return ThermalModel(geometry, conditions)


def solve_baking(
    recipe: Recipe,
    target_height: float,
    instruments: BakingInstruments,
    config: Optional[BakingConfig] = None,
) -> BakingResult:
    """
    Baking temperature and duration for `recipe` rising to `target_height` [cm].

    With several pans the longest duration wins, so that every pizza is done.
    """
    cfg = config or BakingConfig()
    if target_height <= 0.0:
        raise ValueError(f"Target height must be positive, got {target_height}")

    thickness = dough_thickness(recipe, instruments)
    height_ratio = target_height / (thickness * 100.0)
    dough_temperature = (
        recipe.dough_temperature
        if recipe.dough_temperature is not None
        else instruments.ambient_temperature
    )
    temperature = baking_temperature(height_ratio, dough_temperature)
    check_baking_temperature(temperature, recipe, instruments, cfg)

    moisture = dough_moisture(recipe)
    duration = 0.0
    diags: List[RootDiagnostics] = []
    seen = set()
    for pan in instruments.baking_pans:
        # pans of equal material and thickness bake identically
        key = (pan.material, pan.thickness)
        if key in seen:
            continue
        seen.add(key)
        model = build_thermal_model(pan, thickness, moisture, temperature, instruments)
        pan_duration, diag = solve_baking_duration(model, cfg, instruments.preheated_pan)
        diags.append(diag)
        duration = max(duration, pan_duration)

    instructions = BakingInstructions(
        baking_temperature=temperature,
        baking_duration=timedelta(seconds=duration),
    )
    logger.info(
        "Bake at %.1f °C for %.1f s (height ratio %.3f, dough %.2f mm)",
        temperature,
        duration,
        height_ratio,
        thickness * 1.0e3,
    )
    return BakingResult(instructions, height_ratio, thickness, diags)
