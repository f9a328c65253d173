"""Holiday lookups. Loaded fresh for every operation, never cached across requests."""
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import or_

from talentflow.models import Holiday, Vacancy, VacancyState


def holidays_for_tenant(tenant_id: Optional[str]) -> List[Holiday]:
    """The tenant's own holidays plus national ones, ordered by date."""
    return (
        Holiday.query
        .filter(or_(Holiday.tenant_id == tenant_id, Holiday.tenant_id.is_(None)))
        .order_by(Holiday.date, Holiday.created_at, Holiday.id)
        .all()
    )


def load_holiday_map(tenant_id: Optional[str]) -> Dict[date, str]:
    """
    date -> holiday id for the tenant's full holiday set.

    When several holidays share a date (a national one and a tenant one,
    for instance) the earliest created wins.
    """
    holiday_map = {}
    for holiday in holidays_for_tenant(tenant_id):
        holiday_map.setdefault(holiday.date, holiday.id)
    return holiday_map


def find_duplicate(tenant_id: Optional[str], name: str, day: date, exclude_id: Optional[str] = None) -> Optional[Holiday]:
    """Holiday with the same (tenant, name, date), NULL tenant included."""
    query = Holiday.query.filter(Holiday.name == name, Holiday.date == day)
    if tenant_id is None:
        query = query.filter(Holiday.tenant_id.is_(None))
    else:
        query = query.filter(Holiday.tenant_id == tenant_id)
    if exclude_id is not None:
        query = query.filter(Holiday.id != exclude_id)
    return query.first()


def tenants_with_schedulable_vacancies() -> List[str]:
    """Tenants owning at least one active open or paused vacancy."""
    rows = (
        Vacancy.query
        .with_entities(Vacancy.tenant_id)
        .filter(
            Vacancy.active.is_(True),
            Vacancy.state.in_([VacancyState.OPEN, VacancyState.PAUSED]),
        )
        .distinct()
        .order_by(Vacancy.tenant_id)
        .all()
    )
    return [row.tenant_id for row in rows]
