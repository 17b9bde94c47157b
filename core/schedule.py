"""
Backward wall-clock scheduling from the time to bake.

Walking back from `time_to_bake`:
  seasoning → last stage (preceded by its after-stage work) → ... → first stage → dough making.
Stretch & fold instants accumulate their lapses from the end of dough making.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from core.types import Procedure, Schedule


def build_schedule(procedure: Procedure, time_to_bake: Optional[datetime] = None) -> Schedule:
    bake = time_to_bake or procedure.time_to_bake
    if bake is None:
        raise ValueError("A time to bake is required to build the schedule")

    seasoning_start = bake - procedure.seasoning

    intervals: List[Tuple[datetime, datetime]] = []
    end = seasoning_start
    for stage in reversed(procedure.stages):
        end -= stage.after_stage_work
        start = end - stage.duration
        intervals.append((start, end))
        end = start
    intervals.reverse()

    leavening_start = intervals[0][0]
    dough_making_start = leavening_start - procedure.dough_making

    folds: List[datetime] = []
    instant = leavening_start
    for fold in procedure.stretch_and_fold:
        instant += fold.lapse
        folds.append(instant)

    return Schedule(
        dough_making=(dough_making_start, leavening_start),
        stages=tuple(intervals),
        stretch_and_fold=tuple(folds),
        seasoning=(seasoning_start, bake),
    )


def format_schedule(schedule: Schedule) -> List[str]:
    """Human-readable lines (HH:MM) for logging."""

    def hm(instant: datetime) -> str:
        return instant.strftime("%H:%M")

    lines = [f"dough making {hm(schedule.dough_making[0])}-{hm(schedule.dough_making[1])}"]
    for i, (start, end) in enumerate(schedule.stages):
        lines.append(f"stage {i} {hm(start)}-{hm(end)}")
    for i, instant in enumerate(schedule.stretch_and_fold):
        lines.append(f"stretch & fold {i} at {hm(instant)}")
    lines.append(f"seasoning {hm(schedule.seasoning[0])}-{hm(schedule.seasoning[1])}")
    return lines


def total_duration(schedule: Schedule) -> timedelta:
    return schedule.seasoning[1] - schedule.dough_making[0]
