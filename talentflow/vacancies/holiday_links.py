"""
Holiday impact rebuilder.

VacancyHolidayLink rows are derived data: for one vacancy they are always
deleted and recreated from the current stage windows and holiday set.
"""
from datetime import date
from typing import List

from talentflow.errors import NotFound
from talentflow.holidays.repository import load_holiday_map
from talentflow.logging_config import get_logger
from talentflow.models import Vacancy, VacancyHolidayLink, VacancyStage, db
from talentflow.storage import atomic
from talentflow.vacancies.engine import HolidayImpactEngine

logger = get_logger(__name__)


def rebuild_holiday_links(vacancy_id: str, actor_id: str, commit: bool = True) -> List[date]:
    """
    Replace every holiday link of a vacancy.

    Args:
        vacancy_id: Vacancy to rebuild
        actor_id: Stamped on the new link rows
        commit: False when called inside an enclosing transaction

    Returns:
        List[date]: linked holiday dates, ascending

    Raises:
        NotFound: If the vacancy does not exist
        StorageError: If the database rejects the rebuild
    """
    with atomic("rebuild_holiday_links", commit=commit):
        vacancy = db.session.get(Vacancy, vacancy_id)
        if vacancy is None:
            raise NotFound("Vacancy not found", details={"vacancy_id": vacancy_id})

        VacancyHolidayLink.query.filter_by(vacancy_id=vacancy_id).delete(synchronize_session=False)

        holiday_map = load_holiday_map(vacancy.tenant_id)
        stages = VacancyStage.for_vacancy(vacancy_id)
        linked = sorted(HolidayImpactEngine.linked_dates(stages, holiday_map))

        for day in linked:
            link = VacancyHolidayLink(vacancy_id=vacancy_id, holiday_id=holiday_map[day])
            link.stamp(actor_id)
            db.session.add(link)

    logger.info(
        "Holiday links rebuilt",
        vacancy_id=vacancy_id,
        link_count=len(linked),
    )
    return linked
