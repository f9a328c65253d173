"""
Backfill of Vacancy.business_days_elapsed.

Completed vacancies with no value get the number of unique business days
covered by their stage windows, using the holidays linked to the vacancy.
The job only reads stage data and writes the single derived column with a
conditional UPDATE, so it can run alongside stage completions.
"""
from typing import Dict, Set

from talentflow.logging_config import OperationContext, get_logger
from talentflow.models import Holiday, Vacancy, VacancyHolidayLink, VacancyStage, VacancyState, db
from talentflow.scheduling.calendar import list_business_days_inclusive
from talentflow.storage import atomic

logger = get_logger(__name__)


def business_days_elapsed(stages, holidays) -> int:
    """Unique business days across [planned_start, actual_completion_date or planned_end] of each stage."""
    covered: Set = set()
    for stage in stages:
        end = stage.actual_completion_date or stage.planned_end
        if stage.planned_start is None or end is None:
            continue
        covered.update(list_business_days_inclusive(stage.planned_start, end, holidays))
    return len(covered)


def _linked_holiday_dates(vacancy_id: str) -> Set:
    rows = (
        db.session.query(Holiday.date)
        .join(VacancyHolidayLink, VacancyHolidayLink.holiday_id == Holiday.id)
        .filter(VacancyHolidayLink.vacancy_id == vacancy_id)
        .all()
    )
    return {row.date for row in rows}


def backfill_business_days_elapsed() -> Dict[str, int]:
    """
    Fill business_days_elapsed for active completed vacancies where it is NULL.

    Returns:
        dict: {"updated": rows written, "total": candidate vacancies}
    """
    with OperationContext("backfill_business_days_elapsed"):
        candidates = (
            Vacancy.query
            .filter(
                Vacancy.active.is_(True),
                Vacancy.state == VacancyState.COMPLETED,
                Vacancy.business_days_elapsed.is_(None),
            )
            .order_by(Vacancy.id)
            .all()
        )
        if not candidates:
            return {"updated": 0, "total": 0}

        values = {
            vacancy.id: business_days_elapsed(
                VacancyStage.for_vacancy(vacancy.id), _linked_holiday_dates(vacancy.id)
            )
            for vacancy in candidates
        }

        updated = 0
        with atomic("backfill_business_days_elapsed"):
            for vacancy_id, value in values.items():
                # A concurrent write wins; the row is simply skipped
                updated += (
                    Vacancy.query
                    .filter(Vacancy.id == vacancy_id, Vacancy.business_days_elapsed.is_(None))
                    .update({Vacancy.business_days_elapsed: value}, synchronize_session=False)
                )

    logger.info("Business days backfill finished", updated=updated, total=len(candidates))
    return {"updated": updated, "total": len(candidates)}
