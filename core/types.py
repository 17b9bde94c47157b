"""
Strongly typed containers for procedures, recipes, thermal state, and solver configs.

Global conventions (law of the land):
- Temperatures in °C; absolute temperatures only inside radiation/ideal-gas terms.
- Leavening durations are datetime.timedelta; the growth model consumes hours.
- Masses in grams; fractions relative to flour mass.
- Thermal nodes ordered bottom → top: pan, dough (5), sauce mid, sauce/cheese, cheese top.
- ThermalState.temperature.shape == ThermalState.moisture.shape == (n_nodes,)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray

FloatArray = NDArray[np.float64]

logger = logging.getLogger(__name__)

ONE_HOUR = timedelta(hours=1)


def hours(duration: timedelta) -> float:
    return duration / ONE_HOUR


# -----------------------------------------------------------------------------
# Leavening procedure
# -----------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class LeaveningStage:
    """One leavening stage held at constant temperature."""

    temperature: float
    duration: timedelta
    after_stage_work: timedelta = timedelta(0)

    def __post_init__(self) -> None:
        if not np.isfinite(self.temperature):
            raise ValueError(f"Stage temperature must be finite, got {self.temperature}")
        if self.duration <= timedelta(0):
            raise ValueError(f"Stage duration must be positive, got {self.duration}")
        if self.after_stage_work < timedelta(0):
            raise ValueError(f"After-stage work must be non-negative, got {self.after_stage_work}")


@dataclass(frozen=True, slots=True)
class StretchAndFoldStage:
    """Stretch & fold performed `lapse` after the previous one (or after dough making)."""

    lapse: timedelta

    def __post_init__(self) -> None:
        if self.lapse <= timedelta(0):
            raise ValueError(f"Stretch & fold lapse must be positive, got {self.lapse}")


@dataclass(frozen=True, slots=True)
class Procedure:
    """
    Leavening schedule and its timing anchors.

    Attributes
    ----------
    stages : tuple of LeaveningStage
        Ordered leavening stages (at least one).
    target_volume_expansion_ratio : float
        ΔV/V that must be reached at the end of stage `target_stage`.
    target_stage : int
        Index in [0, len(stages)).
    stretch_and_fold : tuple of StretchAndFoldStage
        Optional stretch & fold sequence.
    dough_making, seasoning : timedelta
        Durations of the work before the first stage and after the last one.
    time_to_bake : datetime, optional
        Wall-clock instant the pizza enters the oven (anchors the schedule).
    """

    stages: Tuple[LeaveningStage, ...]
    target_volume_expansion_ratio: float
    target_stage: int
    stretch_and_fold: Tuple[StretchAndFoldStage, ...] = ()
    dough_making: timedelta = timedelta(0)
    seasoning: timedelta = timedelta(0)
    time_to_bake: Optional[datetime] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "stages", tuple(self.stages))
        object.__setattr__(self, "stretch_and_fold", tuple(self.stretch_and_fold))
        if not self.stages:
            raise ValueError("Procedure requires at least one leavening stage")
        if not 0 <= self.target_stage < len(self.stages):
            raise ValueError(
                f"target_stage must be in [0, {len(self.stages)}), got {self.target_stage}"
            )
        if not self.target_volume_expansion_ratio > 0.0:
            raise ValueError(
                f"Target volume expansion ratio must be positive, got {self.target_volume_expansion_ratio}"
            )
        if self.dough_making < timedelta(0) or self.seasoning < timedelta(0):
            raise ValueError("Dough making and seasoning durations must be non-negative")

        if self.stretch_and_fold:
            folds = self.total_stretch_and_fold()
            leavening = self.total_leavening()
            if folds > leavening:
                logger.warning(
                    "Duration of overall stretch & fold phases is longer than duration of leavening stages by %.2f hrs",
                    hours(folds - leavening),
                )

    def total_leavening(self) -> timedelta:
        return sum((s.duration for s in self.stages), timedelta(0))

    def total_stretch_and_fold(self) -> timedelta:
        return sum((s.lapse for s in self.stretch_and_fold), timedelta(0))


# -----------------------------------------------------------------------------
# Recipe and schedule
# -----------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Schedule:
    """Wall-clock instants obtained by backward scheduling from the time to bake."""

    dough_making: Tuple[datetime, datetime]
    stages: Tuple[Tuple[datetime, datetime], ...]
    stretch_and_fold: Tuple[datetime, ...]
    seasoning: Tuple[datetime, datetime]


@dataclass(frozen=True, slots=True)
class Recipe:
    """Absolute ingredient masses [g]."""

    flour: float
    water: float
    sugar: float
    fat: float
    salt: float
    yeast: float
    water_temperature: Optional[float] = None
    dough_temperature: Optional[float] = None
    schedule: Optional[Schedule] = None

    def __post_init__(self) -> None:
        for name in ("flour", "water", "sugar", "fat", "salt", "yeast"):
            value = getattr(self, name)
            if not np.isfinite(value) or value < 0.0:
                raise ValueError(f"Recipe {name} mass must be finite and non-negative, got {value}")

    @property
    def dough_weight(self) -> float:
        return self.flour + self.water + self.sugar + self.fat + self.salt + self.yeast


@dataclass(frozen=True, slots=True)
class BakingInstructions:
    baking_temperature: float
    baking_duration: timedelta


# -----------------------------------------------------------------------------
# Thermal state
# -----------------------------------------------------------------------------
@dataclass(slots=True)
class ThermalState:
    """Per-node temperature [°C] and moisture content [kg water / kg solid]."""

    temperature: FloatArray
    moisture: FloatArray
    time: float = 0.0

    def __post_init__(self) -> None:
        self.temperature = np.asarray(self.temperature, dtype=np.float64)
        self.moisture = np.asarray(self.moisture, dtype=np.float64)
        if self.temperature.ndim != 1 or self.temperature.shape != self.moisture.shape:
            raise ValueError(
                f"temperature and moisture must be 1-D arrays of equal length, got "
                f"{self.temperature.shape} and {self.moisture.shape}"
            )

    @property
    def n_nodes(self) -> int:
        return int(self.temperature.shape[0])

    def copy(self) -> "ThermalState":
        return ThermalState(self.temperature.copy(), self.moisture.copy(), self.time)


# -----------------------------------------------------------------------------
# Solver configuration
# -----------------------------------------------------------------------------
@dataclass(slots=True)
class LeaveningConfig:
    """Bracketing solve of the yeast fraction."""

    yeast_min: float = 0.0
    yeast_max: float = 0.2
    tolerance: float = 1.0e-5
    max_iterations: int = 100

    def __post_init__(self) -> None:
        if not 0.0 <= self.yeast_min < self.yeast_max <= 1.0:
            raise ValueError(
                f"Yeast bracket must satisfy 0 <= min < max <= 1, got [{self.yeast_min}, {self.yeast_max}]"
            )
        if self.tolerance <= 0.0 or self.max_iterations <= 0:
            raise ValueError("tolerance and max_iterations must be positive")


@dataclass(slots=True)
class RecipeMassConfig:
    """Damped fixed point from fractions to masses."""

    damping: float = 0.6
    mass_tolerance: float = 0.01
    max_iterations: int = 1000

    def __post_init__(self) -> None:
        if not 0.0 < self.damping <= 1.0:
            raise ValueError(f"damping must be in (0, 1], got {self.damping}")
        if self.mass_tolerance <= 0.0 or self.max_iterations <= 0:
            raise ValueError("mass_tolerance and max_iterations must be positive")


@dataclass(slots=True)
class ThermalConfig:
    """ODE integration of the pizza stack."""

    method: str = "LSODA"
    rtol: float = 1.0e-6
    atol: float = 1.0e-8
    max_steps: int = 200000
    first_step: Optional[float] = None

    def __post_init__(self) -> None:
        if self.rtol <= 0.0 or self.atol <= 0.0:
            raise ValueError("rtol and atol must be positive")
        if self.max_steps <= 0:
            raise ValueError(f"max_steps must be positive, got {self.max_steps}")


@dataclass(slots=True)
class BakingConfig:
    """Baking temperature and duration solve."""

    doneness_temperature: float = 73.9
    maillard_temperature: float = 140.0
    max_baking_time: float = 3600.0  # s
    duration_tolerance: float = 0.01  # s
    max_iterations: int = 100
    thermal: ThermalConfig = field(default_factory=ThermalConfig)

    def __post_init__(self) -> None:
        if self.max_baking_time <= 0.0:
            raise ValueError(f"max_baking_time must be positive, got {self.max_baking_time}")
        if self.duration_tolerance <= 0.0 or self.max_iterations <= 0:
            raise ValueError("duration_tolerance and max_iterations must be positive")
