"""
Schedule builder.

Turns an ordered list of stage templates and a start date into planned
windows. Consecutive stages share a boundary day: stage k+1 starts on the
day stage k ends (same-day handoff).
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Collection, Dict, FrozenSet, List, Optional, Sequence

from talentflow.datetime_utils import to_date_only, to_ymd
from talentflow.models import StageState
from talentflow.scheduling.calendar import add_business_days_inclusive
from talentflow.scheduling.config import SchedulingConfig


@dataclass(frozen=True)
class StageTemplate:
    stage_id: Any
    sla_days: Optional[int]


@dataclass
class PlannedStage:
    stage_id: Any
    planned_start: date
    planned_end: date
    state: StageState = StageState.PENDING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage_id": self.stage_id,
            "planned_start": to_ymd(self.planned_start),
            "planned_end": to_ymd(self.planned_end),
            "state": self.state.value,
        }


@dataclass
class Schedule:
    stages: List[PlannedStage] = field(default_factory=list)
    holidays_hit: FrozenSet[date] = field(default_factory=frozenset)

    @property
    def end(self) -> Optional[date]:
        return self.stages[-1].planned_end if self.stages else None

    def by_stage_id(self) -> Dict[Any, PlannedStage]:
        return {planned.stage_id: planned for planned in self.stages}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stages": [planned.to_dict() for planned in self.stages],
            "holidays_hit": sorted(to_ymd(day) for day in self.holidays_hit),
        }


def build_schedule(
    ordered_stages: Sequence[StageTemplate],
    vacancy_start: date,
    holidays: Collection[date],
) -> Schedule:
    """
    Plan every stage in order starting from vacancy_start.

    Each stage spans max(1, sla_days) business days beginning at the cursor;
    the cursor then moves to that stage's end. The first stage is open, the
    rest pending.

    Args:
        ordered_stages: Stage templates in ascending template order
        vacancy_start: Date the first stage may start
        holidays: The tenant's non-working dates

    Returns:
        Schedule: planned windows plus the union of holidays skipped
    """
    cursor = to_date_only(vacancy_start, field="start_date")
    planned = []
    holidays_hit = set()

    for index, template in enumerate(ordered_stages):
        window = add_business_days_inclusive(
            cursor, SchedulingConfig.normalize_sla(template.sla_days), holidays
        )
        planned.append(PlannedStage(
            stage_id=template.stage_id,
            planned_start=window.start,
            planned_end=window.end,
            state=StageState.OPEN if index == 0 else StageState.PENDING,
        ))
        holidays_hit.update(window.skipped_holidays)
        cursor = window.end

    return Schedule(stages=planned, holidays_hit=frozenset(holidays_hit))
