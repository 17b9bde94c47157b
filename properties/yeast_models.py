"""
Yeast strain records for the cardinal-temperature growth model.

A strain differs from another only by its constants; the growth computation
lives in physics.growth and operates on these records.

References:
- Rosso et al.: cardinal temperature model with inflection (CTMI)
- Salvadó et al. 2011, temperature adaptation within the genus Saccharomyces
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class YeastModel:
    """
    Cardinal parameters of one microorganism.

    - temperature_min / temperature_opt / temperature_max: cardinal temperatures [°C]
    - max_specific_growth_rate: growth rate at the optimum temperature [1/h]
    - ph_min / ph_opt / ph_max: optional cardinal pH values
    """

    name: str
    temperature_min: float
    temperature_opt: float
    temperature_max: float
    max_specific_growth_rate: float
    ph_min: Optional[float] = None
    ph_opt: Optional[float] = None
    ph_max: Optional[float] = None

    def __post_init__(self) -> None:
        if not (self.temperature_min < self.temperature_opt < self.temperature_max):
            raise ValueError(
                f"Cardinal temperatures of {self.name} must satisfy Tmin < Topt < Tmax, got "
                f"{self.temperature_min}, {self.temperature_opt}, {self.temperature_max}"
            )
        if self.max_specific_growth_rate <= 0.0:
            raise ValueError(
                f"Invalid max_specific_growth_rate={self.max_specific_growth_rate} for {self.name}"
            )
        ph = (self.ph_min, self.ph_opt, self.ph_max)
        if any(v is not None for v in ph):
            if any(v is None for v in ph):
                raise ValueError(f"pH bounds of {self.name} must be given all together or not at all")
            if not (0.0 <= self.ph_min < self.ph_opt < self.ph_max <= 14.0):
                raise ValueError(
                    f"Cardinal pH of {self.name} must satisfy 0 <= pHmin < pHopt < pHmax <= 14, got "
                    f"{self.ph_min}, {self.ph_opt}, {self.ph_max}"
                )

    @property
    def has_ph_bounds(self) -> bool:
        return self.ph_opt is not None
