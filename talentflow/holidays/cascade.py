"""
Holiday cascade coordinator.

After any holiday create, update or delete, every active open or paused
vacancy whose period contains the holiday date is reset: its whole schedule
is rebuilt from its start date with the current holiday set, completion
dates are cleared and the vacancy is reopened.
"""
from contextlib import nullcontext
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from talentflow.datetime_utils import to_date_only, to_ymd
from talentflow.holidays.repository import load_holiday_map, tenants_with_schedulable_vacancies
from talentflow.logging_config import OperationContext, get_logger
from talentflow.models import Vacancy, VacancyStage, VacancyState
from talentflow.storage import atomic
from talentflow.vacancies.engine import CascadeEngine
from talentflow.vacancies.holiday_links import rebuild_holiday_links
from talentflow.vacancies.service import VacancyScheduleService

logger = get_logger(__name__)


@dataclass
class CascadeResult:
    affected_count: int = 0
    vacancy_ids: List[str] = field(default_factory=list)

    def merge(self, other: "CascadeResult") -> "CascadeResult":
        # A vacancy reset by both runs counts once
        vacancy_ids = self.vacancy_ids + [v for v in other.vacancy_ids if v not in self.vacancy_ids]
        return CascadeResult(affected_count=len(vacancy_ids), vacancy_ids=vacancy_ids)

    def to_dict(self) -> dict:
        """Serialize for JSON response"""
        return {
            "affected_count": self.affected_count,
            "vacancy_ids": self.vacancy_ids,
        }


def reopen_and_recalculate_affected(
    tenant_id: str,
    holiday_date,
    actor_id: str,
    single_transaction: bool = False,
) -> CascadeResult:
    """
    Reset every vacancy of the tenant whose period contains holiday_date.

    Each affected vacancy is processed in its own transaction, so a failure
    partway leaves already processed vacancies updated. single_transaction
    wraps the whole cascade in one transaction instead.

    Args:
        tenant_id: Tenant whose vacancies are examined
        holiday_date: The created, edited or removed holiday date
        actor_id: Audit actor
        single_transaction: All-or-nothing across vacancies

    Returns:
        CascadeResult: number and ids of the vacancies reset

    Raises:
        InvalidDate: holiday_date cannot be parsed
        StorageError: A transaction failed (earlier vacancies stay updated
            unless single_transaction)
    """
    day = to_date_only(holiday_date, field="holiday_date")

    with OperationContext("holiday_cascade", tenant_id=tenant_id, holiday_date=to_ymd(day)):
        vacancies = (
            Vacancy.query
            .filter(
                Vacancy.tenant_id == tenant_id,
                Vacancy.active.is_(True),
                Vacancy.state.in_([VacancyState.OPEN, VacancyState.PAUSED]),
            )
            .order_by(Vacancy.created_at, Vacancy.id)
            .all()
        )

        affected_ids = [
            vacancy.id
            for vacancy in vacancies
            if CascadeEngine.is_affected(vacancy.start_date, VacancyStage.for_vacancy(vacancy.id), day)
        ]
        if not affected_ids:
            logger.info("No vacancies affected by holiday", tenant_id=tenant_id, holiday_date=to_ymd(day))
            return CascadeResult()

        reset_ids = []
        outer = atomic("holiday_cascade") if single_transaction else nullcontext()
        with outer:
            holidays = load_holiday_map(tenant_id)
            for vacancy_id in affected_ids:
                if _reset_vacancy(vacancy_id, holidays, actor_id, commit=not single_transaction):
                    reset_ids.append(vacancy_id)

    logger.info(
        "Holiday cascade finished",
        tenant_id=tenant_id,
        holiday_date=to_ymd(day),
        affected_count=len(reset_ids),
    )
    return CascadeResult(affected_count=len(reset_ids), vacancy_ids=reset_ids)


def _reset_vacancy(vacancy_id: str, holidays, actor_id: str, commit: bool) -> bool:
    """Reset one vacancy under its row lock. False when it left open/paused since the scan."""
    with atomic("holiday_cascade_vacancy", commit=commit):
        vacancy = (
            Vacancy.query
            .filter(Vacancy.id == vacancy_id)
            .with_for_update()
            .populate_existing()
            .one()
        )
        if not vacancy.active or vacancy.state not in (VacancyState.OPEN, VacancyState.PAUSED):
            logger.info(
                "Vacancy changed before reset, skipping",
                vacancy_id=vacancy_id,
                state=vacancy.state.value,
                active=vacancy.active,
            )
            return False
        VacancyScheduleService.reset_schedule(vacancy, holidays, actor_id, reopen=True)
        rebuild_holiday_links(vacancy_id, actor_id, commit=False)
    return True


def cascade_holiday_change(tenant_id: Optional[str], holiday_date: date, actor_id: str) -> CascadeResult:
    """
    Run the cascade for a holiday owner.

    A tenant holiday cascades for that tenant only. A national holiday
    (tenant_id None) cascades for every tenant with open or paused vacancies.
    """
    if tenant_id is not None:
        return reopen_and_recalculate_affected(tenant_id, holiday_date, actor_id)

    result = CascadeResult()
    for owner_id in tenants_with_schedulable_vacancies():
        result = result.merge(reopen_and_recalculate_affected(owner_id, holiday_date, actor_id))
    return result
