"""
Growth kinetics of the leavening microorganism.

Conventions:
- Time and lag in hours, temperature in °C, growth rate in 1/h.
- `yeast` is the fresh-yeast equivalent mass fraction relative to flour.
- The returned volume expansion ratio is ΔV/V attributable to fermentation gas.

Secondary model: Rosso cardinal temperature model (zero outside ]Tmin, Tmax[).
Primary model: modified Gompertz (Zwietering) with asymptote alpha and lag λ.
"""

from __future__ import annotations

import math

from properties.yeast_models import YeastModel

# lag phase: λ = LAG_COEFFICIENT * y^LAG_EXPONENT [h]
LAG_COEFFICIENT = 0.0068
LAG_EXPONENT = -0.937

# asymptote: quadratic in y up to the vertex, constant above
ALPHA_SLOPE = 24546.0
ALPHA_ROOT = 0.022
ALPHA_VERTEX = ALPHA_ROOT / 2.0
ALPHA_MAX = 2.97

_EXP_LIMIT = 700.0


def maximum_specific_growth_rate(model: YeastModel, temperature: float) -> float:
    """Rosso secondary model: maximum specific growth rate at `temperature` [1/h]."""
    t_min = model.temperature_min
    t_opt = model.temperature_opt
    t_max = model.temperature_max
    if temperature <= t_min or temperature >= t_max:
        return 0.0

    d = (temperature - t_max) * (temperature - t_min) ** 2
    e = (t_opt - t_min) * (
        (t_opt - t_min) * (temperature - t_opt)
        - (t_opt - t_max) * (t_opt + t_min - 2.0 * temperature)
    )
    return model.max_specific_growth_rate * d / e


def lag_phase(yeast: float) -> float:
    """Duration of the lag phase [h] for the given yeast fraction (yeast > 0)."""
    if yeast <= 0.0:
        raise ValueError(f"Lag phase requires a positive yeast fraction, got {yeast}")
    return LAG_COEFFICIENT * yeast ** LAG_EXPONENT


def growth_asymptote(yeast: float) -> float:
    """Maximum reachable volume expansion ratio for the given yeast fraction."""
    if yeast <= 0.0:
        return 0.0
    if yeast < ALPHA_VERTEX:
        return ALPHA_SLOPE * (ALPHA_ROOT - yeast) * yeast
    return ALPHA_MAX


def volume_expansion_ratio(
    model: YeastModel,
    time: float,
    lag: float,
    alpha: float,
    temperature: float,
    correction_factor: float,
) -> float:
    """
    Modified Gompertz volume expansion ratio.

    ratio = alpha * exp(-exp(mu * e * (lag - time) / alpha + 1))

    Returns 0 when `time <= 0`, `alpha <= 0` or the corrected rate vanishes.
    """
    if time <= 0.0 or alpha <= 0.0:
        return 0.0
    mu = maximum_specific_growth_rate(model, temperature) * correction_factor
    if mu <= 0.0:
        return 0.0
    exponent = mu * math.e * (lag - time) / alpha + 1.0
    if exponent > _EXP_LIMIT:
        # still in the lag phase: exp(-exp(z)) underflows to zero
        return 0.0
    return alpha * math.exp(-math.exp(exponent))


def yeast_volume_expansion_ratio(
    model: YeastModel,
    yeast: float,
    time: float,
    temperature: float,
    correction_factor: float,
) -> float:
    """Volume expansion ratio with lag and asymptote derived from the yeast fraction."""
    alpha = growth_asymptote(yeast)
    if alpha <= 0.0:
        return 0.0
    return volume_expansion_ratio(model, time, lag_phase(yeast), alpha, temperature, correction_factor)
