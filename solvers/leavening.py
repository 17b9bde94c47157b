"""
Multi-stage leavening solver: yeast fraction needed to reach a target expansion.

Responsibilities:
- Replay the stages up to the target one with a single yeast fraction y,
  chaining them so that each later stage adds only its incremental growth.
- Detect stages where growth is impossible (temperature at or outside the
  cardinal bounds, or a vanishing ingredient factor) before solving.
- Back-solve y with the generic Brent utility and map its failures to YeastError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from core.composition import DoughComposition
from core.types import LeaveningConfig, Procedure, hours
from physics.growth import maximum_specific_growth_rate, yeast_volume_expansion_ratio
from physics.ingredient_factors import IngredientFactors, ingredient_factors
from properties.yeast_models import YeastModel
from solvers.bracketing import solve_bracketed
from solvers.root_types import NoBracketingError, RootDiagnostics, TooManyEvaluationsError

logger = logging.getLogger(__name__)


class YeastError(RuntimeError):
    """Raised when no yeast fraction can satisfy the leavening procedure."""

    def __init__(self, message: str, *, stage: Optional[int] = None):
        super().__init__(message)
        self.stage = stage


@dataclass(slots=True)
class LeaveningResult:
    yeast: float
    factors: IngredientFactors
    diag: RootDiagnostics


def check_stages(
    procedure: Procedure,
    model: YeastModel,
    factors: IngredientFactors,
) -> None:
    """
    Raise YeastError for the first stage where growth cannot happen.

    The growth rate vanishes at and beyond the cardinal bounds, so every stage
    is checked against them; vanishing ingredient factors only matter for the
    replayed stages.
    """
    replayed = procedure.target_stage + 1
    for i, stage in enumerate(procedure.stages):
        causes = []
        if maximum_specific_growth_rate(model, stage.temperature) <= 0.0:
            causes.append(
                f"temperature {stage.temperature} °C outside ]{model.temperature_min}, "
                f"{model.temperature_max}[ °C"
            )
        if i < replayed and factors.composite <= 0.0:
            causes.extend(factors.zero_factors())
        if causes:
            raise YeastError(
                "No amount of yeast will ever be able to produce the given expansion ratio "
                f"due to the adverse environment in stage {i} ({', '.join(causes)})",
                stage=i,
            )


def simulated_volume_expansion_ratio(
    yeast: float,
    procedure: Procedure,
    model: YeastModel,
    correction_factor: float,
) -> float:
    """Expansion ratio at the end of the target stage for yeast fraction `yeast`."""
    stages = procedure.stages[: procedure.target_stage + 1]

    first = stages[0]
    elapsed = hours(first.duration)
    ratio = yeast_volume_expansion_ratio(model, yeast, elapsed, first.temperature, correction_factor)
    for stage in stages[1:]:
        before = yeast_volume_expansion_ratio(model, yeast, elapsed, stage.temperature, correction_factor)
        elapsed += hours(stage.duration)
        after = yeast_volume_expansion_ratio(model, yeast, elapsed, stage.temperature, correction_factor)
        ratio += after - before
    return ratio


def volume_expansion_ratio_difference(
    procedure: Procedure,
    model: YeastModel,
    correction_factor: float,
) -> Callable[[float], float]:
    """Return f(y) = simulated ratio - target ratio."""
    target = procedure.target_volume_expansion_ratio

    def f(yeast: float) -> float:
        return simulated_volume_expansion_ratio(yeast, procedure, model, correction_factor) - target

    return f


def solve_yeast(
    composition: DoughComposition,
    procedure: Procedure,
    model: YeastModel,
    config: Optional[LeaveningConfig] = None,
) -> LeaveningResult:
    """
    Find the yeast fraction that reaches the target expansion at the target stage.

    Raises:
        YeastError: adverse stage, unreachable target, or iteration budget exhausted
    """
    cfg = config or LeaveningConfig()
    factors = ingredient_factors(composition, model)
    check_stages(procedure, model, factors)

    f = volume_expansion_ratio_difference(procedure, model, factors.composite)
    try:
        result = solve_bracketed(
            f,
            cfg.yeast_min,
            cfg.yeast_max,
            xtol=cfg.tolerance,
            max_iterations=cfg.max_iterations,
            name="yeast",
        )
    except NoBracketingError as exc:
        raise YeastError(
            "No amount of yeast will ever be able to produce the given expansion ratio "
            f"(target {procedure.target_volume_expansion_ratio} at stage {procedure.target_stage}, "
            f"yeast in [{cfg.yeast_min}, {cfg.yeast_max}])",
            stage=procedure.target_stage,
        ) from exc
    except TooManyEvaluationsError as exc:
        raise YeastError(
            f"Yeast solver did not converge in {cfg.max_iterations} iterations, "
            "try increasing maximum number of evaluations"
        ) from exc

    logger.info(
        "Yeast fraction %.6f reaches ratio %.4f at stage %d (composite factor %.4f, %d evaluations)",
        result.x,
        procedure.target_volume_expansion_ratio,
        procedure.target_stage,
        factors.composite,
        result.diag.n_calls,
    )
    return LeaveningResult(yeast=result.x, factors=factors, diag=result.diag)
