from __future__ import annotations

from datetime import timedelta

import pytest

from core.composition import DoughCompositionBuilder
from core.types import LeaveningStage, Procedure
from properties.yeast_db import reference_yeast


@pytest.fixture
def reference_model():
    return reference_yeast()


@pytest.fixture
def plain_composition():
    """Flour and water only (hydration 0.6)."""
    return DoughCompositionBuilder().add_water(0.6).build()


@pytest.fixture
def single_stage_procedure():
    """One 5 h stage at 35 °C reaching ΔV/V = 2."""
    return Procedure(
        stages=(LeaveningStage(35.0, timedelta(hours=5)),),
        target_volume_expansion_ratio=2.0,
        target_stage=0,
    )
