"""
Pure business logic engine for vacancy scheduling.
Contains no database dependencies - works with plain objects exposing
state, planned_start, planned_end, actual_completion_date and sla_days.
"""
from datetime import date
from typing import Any, Collection, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from talentflow.datetime_utils import to_ymd
from talentflow.errors import BrokenInvariant, InvalidDate, InvalidTransition, MissingConfiguration
from talentflow.models import StageState, VacancyState
from talentflow.scheduling.builder import Schedule, StageTemplate, build_schedule
from talentflow.scheduling.calendar import list_dates_inclusive


class VacancyLifecycleEngine:
    """Allowed vacancy state changes requested by a caller."""

    # completed is only reachable through last-stage completion
    TRANSITIONS: Dict[VacancyState, Set[VacancyState]] = {
        VacancyState.OPEN: {VacancyState.PAUSED, VacancyState.CANCELLED},
        VacancyState.PAUSED: {VacancyState.OPEN, VacancyState.CANCELLED},
        VacancyState.COMPLETED: {VacancyState.CANCELLED},
        VacancyState.CANCELLED: set(),
    }

    @staticmethod
    def validate_transition(current: VacancyState, target: VacancyState) -> bool:
        """
        Check a requested vacancy state change.

        Returns:
            bool: True if the state changes, False for a same-state no-op

        Raises:
            InvalidTransition: If the lifecycle does not allow the change
        """
        if current == target:
            return False

        if target not in VacancyLifecycleEngine.TRANSITIONS.get(current, set()):
            if target == VacancyState.COMPLETED:
                message = "A vacancy is completed only by completing its last stage"
            else:
                message = f"Cannot change a {current.value} vacancy to {target.value}"
            raise InvalidTransition(message, details={"from": current.value, "to": target.value})

        return True


class StageCompletionEngine:
    """Rules for closing a stage and re-planning the stages after it."""

    @staticmethod
    def is_replay(stage, completion_date: date) -> bool:
        """True if the stage is already completed on exactly this date."""
        return stage.state == StageState.COMPLETED and stage.actual_completion_date == completion_date

    @staticmethod
    def validate(
        vacancy_state: VacancyState,
        stage,
        previous,
        completion_date: date,
        is_last: bool,
    ) -> None:
        """
        Validate a completion request before anything is written.

        Args:
            vacancy_state: Current state of the owning vacancy
            stage: The stage being completed
            previous: The stage before it in template order (None for the first)
            completion_date: Requested completion date
            is_last: Whether the stage is the last of the vacancy

        Raises:
            InvalidTransition: Vacancy is not open
            InvalidDate: completion_date precedes the stage's planned start
            BrokenInvariant: Predecessor not completed, or chain mismatch
        """
        replaying_last = (
            is_last
            and vacancy_state == VacancyState.COMPLETED
            and StageCompletionEngine.is_replay(stage, completion_date)
        )
        if vacancy_state != VacancyState.OPEN and not replaying_last:
            raise InvalidTransition(
                f"Stages can only be completed on an open vacancy (current state: {vacancy_state.value})",
                details={"vacancy_state": vacancy_state.value},
            )

        if stage.planned_start is None:
            raise BrokenInvariant(
                "Stage has no planned start date",
                details={"stage_id": getattr(stage, "id", None)},
            )

        if completion_date < stage.planned_start:
            raise InvalidDate(
                "Completion date cannot be earlier than the stage's planned start",
                details={
                    "completion_date": to_ymd(completion_date),
                    "planned_start": to_ymd(stage.planned_start),
                },
            )

        if previous is None:
            return

        if previous.state != StageState.COMPLETED:
            raise BrokenInvariant(
                "The previous stage must be completed first",
                details={"previous_stage_id": getattr(previous, "id", None)},
            )

        if previous.actual_completion_date != stage.planned_start:
            raise BrokenInvariant(
                "Previous stage completion date does not match this stage's planned start",
                details={
                    "previous_completion_date": to_ymd(previous.actual_completion_date),
                    "planned_start": to_ymd(stage.planned_start),
                },
            )

    @staticmethod
    def plan_tail(remaining: Sequence, completion_date: date, holidays: Collection[date]) -> Schedule:
        """
        Re-plan the stages after a completed one, starting on its completion day.

        The calendar moves a start that falls on a weekend or holiday to the
        next business day. The first remaining stage is pinned back to the
        completion date so the chain previous.actual == next.planned_start
        still holds; its planned end is kept.
        """
        schedule = build_schedule(templates_for(remaining), completion_date, holidays)
        if schedule.stages and schedule.stages[0].planned_start != completion_date:
            schedule.stages[0].planned_start = completion_date
        return schedule

    @staticmethod
    def stray_stages(stages: Iterable) -> List:
        """Stages not yet completed once the last stage has closed."""
        return [stage for stage in stages if stage.state != StageState.COMPLETED]


class HolidayImpactEngine:
    """Which holidays fall inside a vacancy's real or planned stage windows."""

    @staticmethod
    def stage_window(stage) -> Optional[Tuple[date, date]]:
        """
        Window of one stage: [planned_start, actual_completion_date] once
        completed, else [planned_start, planned_end]. None without a start or end.
        """
        if stage.planned_start is None:
            return None
        if stage.state == StageState.COMPLETED and stage.actual_completion_date is not None:
            end = stage.actual_completion_date
        else:
            end = stage.planned_end
        if end is None:
            return None
        return stage.planned_start, end

    @staticmethod
    def linked_dates(stages: Iterable, holidays: Collection[date]) -> Set[date]:
        hit = set()
        for stage in stages:
            window = HolidayImpactEngine.stage_window(stage)
            if window is None:
                continue
            for day in list_dates_inclusive(*window):
                if day in holidays:
                    hit.add(day)
        return hit


class CascadeEngine:
    """Decides whether a changed holiday date touches a vacancy."""

    @staticmethod
    def vacancy_period(stages: Iterable) -> Tuple[Optional[date], Optional[date]]:
        """
        (earliest planned start, latest actual-or-planned end) over the stages.
        Either side is None when no stage has a value for it.
        """
        starts = [stage.planned_start for stage in stages if stage.planned_start is not None]
        ends = [
            stage.actual_completion_date or stage.planned_end
            for stage in stages
            if (stage.actual_completion_date or stage.planned_end) is not None
        ]
        return (min(starts) if starts else None, max(ends) if ends else None)

    @staticmethod
    def is_affected(start_date: Optional[date], stages: Sequence, holiday_date: date) -> bool:
        if start_date is None:
            return False
        period_start, period_end = CascadeEngine.vacancy_period(stages)
        if period_start is None or period_end is None:
            return False
        return period_start <= holiday_date <= period_end


def templates_for(stages: Sequence) -> List[StageTemplate]:
    """Stage templates (id + SLA) for objects exposing id and sla_days."""
    if not stages:
        raise MissingConfiguration("The vacancy's process has no stages")
    return [StageTemplate(stage_id=stage.id, sla_days=stage.sla_days) for stage in stages]


def describe_schedule(schedule: Schedule) -> Dict[str, Any]:
    """Compact log payload for a built schedule."""
    return {
        "stage_count": len(schedule.stages),
        "end": to_ymd(schedule.end),
        "holidays_hit": len(schedule.holidays_hit),
    }
