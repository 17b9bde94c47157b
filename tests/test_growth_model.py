"""
Unit tests for the growth kinetics (Rosso secondary model + modified Gompertz).

Tests:
1. Maximum specific growth rate at and around the cardinal temperatures
2. Lag phase and asymptote as functions of the yeast fraction
3. Volume expansion ratio guards (no time, no asymptote, lag underflow)
"""

from __future__ import annotations

import math

import pytest

from physics.growth import (
    ALPHA_MAX,
    ALPHA_VERTEX,
    growth_asymptote,
    lag_phase,
    maximum_specific_growth_rate,
    volume_expansion_ratio,
    yeast_volume_expansion_ratio,
)


# ============================================================================
# Test 1: Maximum specific growth rate
# ============================================================================


def test_rate_at_optimum_equals_strain_maximum(reference_model):
    """At Topt the Rosso model returns the strain's maximum growth rate."""
    rate = maximum_specific_growth_rate(reference_model, reference_model.temperature_opt)
    assert rate == pytest.approx(reference_model.max_specific_growth_rate, rel=1e-12)


def test_rate_reference_values(reference_model):
    """Reference strain rates at 35 °C and 25 °C."""
    assert maximum_specific_growth_rate(reference_model, 35.0) == pytest.approx(0.440139, abs=1e-5)
    assert maximum_specific_growth_rate(reference_model, 25.0) == pytest.approx(0.369922, abs=1e-5)


@pytest.mark.parametrize("offset", [0.0, 1.0, 10.0])
def test_rate_zero_outside_cardinal_range(reference_model, offset):
    """No growth at or beyond Tmin and Tmax."""
    assert maximum_specific_growth_rate(reference_model, reference_model.temperature_min - offset) == 0.0
    assert maximum_specific_growth_rate(reference_model, reference_model.temperature_max + offset) == 0.0


def test_rate_positive_inside_range(reference_model):
    for temperature in (5.0, 15.0, 30.0, 40.0, 45.0):
        assert maximum_specific_growth_rate(reference_model, temperature) > 0.0


# ============================================================================
# Test 2: Lag phase and asymptote
# ============================================================================


def test_lag_phase_decreases_with_yeast():
    """More yeast, shorter lag."""
    assert lag_phase(0.005) > lag_phase(0.01) > lag_phase(0.05)
    assert lag_phase(1.0) == pytest.approx(0.0068)


@pytest.mark.parametrize("yeast", [0.0, -0.01])
def test_lag_phase_requires_positive_yeast(yeast):
    with pytest.raises(ValueError, match="positive yeast fraction"):
        lag_phase(yeast)


def test_asymptote_continuous_at_vertex():
    """The quadratic branch meets the plateau at y = 0.011."""
    assert growth_asymptote(ALPHA_VERTEX - 1e-9) == pytest.approx(ALPHA_MAX, abs=1e-3)
    assert growth_asymptote(ALPHA_VERTEX) == ALPHA_MAX
    assert growth_asymptote(0.1) == ALPHA_MAX


def test_asymptote_zero_without_yeast():
    assert growth_asymptote(0.0) == 0.0


# ============================================================================
# Test 3: Volume expansion ratio
# ============================================================================


def test_ratio_zero_without_time_or_asymptote(reference_model):
    assert volume_expansion_ratio(reference_model, 0.0, 0.2, 2.97, 35.0, 1.0) == 0.0
    assert volume_expansion_ratio(reference_model, 5.0, 0.2, 0.0, 35.0, 1.0) == 0.0


def test_ratio_zero_when_rate_vanishes(reference_model):
    """Zero correction factor or temperature outside the range gives no growth."""
    assert volume_expansion_ratio(reference_model, 5.0, 0.2, 2.97, 35.0, 0.0) == 0.0
    assert volume_expansion_ratio(reference_model, 5.0, 0.2, 2.97, 50.0, 1.0) == 0.0


def test_ratio_deep_in_lag_does_not_overflow(reference_model):
    """A huge lag makes the inner exponent overflow; the ratio is simply 0."""
    assert volume_expansion_ratio(reference_model, 1.0, 1.0e6, 2.97, 35.0, 1.0) == 0.0


def test_ratio_increases_with_time_towards_asymptote(reference_model):
    values = [
        yeast_volume_expansion_ratio(reference_model, 0.02, t, 35.0, 1.0)
        for t in (0.5, 2.0, 5.0, 20.0, 200.0)
    ]
    assert all(a < b for a, b in zip(values, values[1:]))
    assert values[-1] == pytest.approx(ALPHA_MAX, rel=1e-6)


def test_ratio_reference_single_stage(reference_model):
    """y = 0.02518 gives ΔV/V ≈ 2 after 5 h at 35 °C."""
    ratio = yeast_volume_expansion_ratio(reference_model, 0.02518, 5.0, 35.0, 1.0)
    assert ratio == pytest.approx(2.0, abs=2e-3)
    assert math.isfinite(ratio)
