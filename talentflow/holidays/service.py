"""
Service layer for holidays.

Every write is committed first, then the cascade re-plans the vacancies whose
period contains the affected date(s).
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from flask import current_app, has_app_context

from talentflow.datetime_utils import to_date_only, to_ymd, utc_today
from talentflow.errors import DuplicateRecord, InvalidDate, InvalidInput, NotFound
from talentflow.holidays.cascade import CascadeResult, cascade_holiday_change
from talentflow.holidays.repository import find_duplicate
from talentflow.logging_config import get_logger
from talentflow.models import Holiday, HolidayKind, VacancyHolidayLink, db
from talentflow.storage import atomic

logger = get_logger(__name__)


@dataclass
class HolidayChangeResult:
    holiday: Dict[str, Any]
    cascade: CascadeResult = field(default_factory=CascadeResult)

    def to_dict(self) -> dict:
        """Serialize for JSON response"""
        return {
            "holiday": self.holiday,
            "affected_count": self.cascade.affected_count,
            "affected_vacancy_ids": self.cascade.vacancy_ids,
        }


class HolidayService:
    """Holiday CRUD followed by cascading recalculation."""

    EDITABLE_FIELDS = ("name", "date")

    @staticmethod
    def _allow_past_dates() -> bool:
        return has_app_context() and bool(current_app.config.get("HOLIDAY_ALLOW_PAST_DATES"))

    @staticmethod
    def _clean_date(value):
        day = to_date_only(value, field="date")
        if day < utc_today() and not HolidayService._allow_past_dates():
            raise InvalidDate(
                "Holiday date cannot be in the past",
                details={"date": to_ymd(day), "today": to_ymd(utc_today())},
            )
        return day

    @staticmethod
    def _clean_name(name) -> str:
        if not isinstance(name, str) or not name.strip():
            raise InvalidInput("Holiday name is required", details={"field": "name"})
        return name.strip()

    @staticmethod
    def get_holiday(holiday_id: str, tenant_id: Optional[str]) -> Holiday:
        """
        Load a holiday owned by tenant_id (None for national holidays).

        Raises:
            NotFound: Missing, or owned by someone else
        """
        holiday = db.session.get(Holiday, holiday_id)
        if holiday is None or holiday.tenant_id != tenant_id:
            raise NotFound("Holiday not found", details={"holiday_id": holiday_id})
        return holiday

    @staticmethod
    def create(tenant_id: Optional[str], name: str, date, actor_id: str) -> HolidayChangeResult:
        """
        Create a holiday and cascade on its date.

        Args:
            tenant_id: Owning tenant, or None for a national holiday
            name: Holiday name
            date: YYYY-MM-DD, today or later unless HOLIDAY_ALLOW_PAST_DATES
            actor_id: Audit actor

        Raises:
            InvalidInput: Missing name
            InvalidDate: Unparseable or past date
            DuplicateRecord: Same (tenant, name, date) exists
        """
        name = HolidayService._clean_name(name)
        day = HolidayService._clean_date(date)

        with atomic("create_holiday"):
            if find_duplicate(tenant_id, name, day) is not None:
                raise DuplicateRecord(
                    "A holiday with that name and date already exists",
                    details={"name": name, "date": to_ymd(day)},
                )
            holiday = Holiday(
                tenant_id=tenant_id,
                kind=HolidayKind.NATIONAL if tenant_id is None else HolidayKind.TENANT,
                name=name,
                date=day,
            )
            holiday.stamp(actor_id)
            db.session.add(holiday)
            db.session.flush()
            payload = holiday.to_dict()

        logger.info("Holiday created", holiday_id=payload["id"], tenant_id=tenant_id, date=payload["date"])

        cascade = cascade_holiday_change(tenant_id, day, actor_id)
        return HolidayChangeResult(holiday=payload, cascade=cascade)

    @staticmethod
    def update(holiday_id: str, tenant_id: Optional[str], changes: Dict[str, Any], actor_id: str) -> HolidayChangeResult:
        """
        Rename or move a holiday, then cascade on its new date and, when it
        moved, on its old date too.
        """
        unknown = sorted(set(changes) - set(HolidayService.EDITABLE_FIELDS))
        if unknown:
            raise InvalidInput("Unknown holiday fields", details={"fields": unknown})

        new_name = HolidayService._clean_name(changes["name"]) if "name" in changes else None
        new_date = HolidayService._clean_date(changes["date"]) if changes.get("date") is not None else None

        with atomic("update_holiday"):
            holiday = HolidayService.get_holiday(holiday_id, tenant_id)
            old_date = holiday.date
            name = new_name or holiday.name
            day = new_date or holiday.date

            if find_duplicate(holiday.tenant_id, name, day, exclude_id=holiday.id) is not None:
                raise DuplicateRecord(
                    "A holiday with that name and date already exists",
                    details={"name": name, "date": to_ymd(day)},
                )

            holiday.name = name
            holiday.date = day
            holiday.stamp(actor_id)
            db.session.flush()
            payload = holiday.to_dict()

        logger.info(
            "Holiday updated",
            holiday_id=holiday_id,
            old_date=to_ymd(old_date),
            new_date=payload["date"],
        )

        cascade = cascade_holiday_change(tenant_id, day, actor_id)
        if day != old_date:
            cascade = cascade.merge(cascade_holiday_change(tenant_id, old_date, actor_id))
        return HolidayChangeResult(holiday=payload, cascade=cascade)

    @staticmethod
    def delete(holiday_id: str, tenant_id: Optional[str], actor_id: str) -> HolidayChangeResult:
        """Remove a holiday and its links, then cascade on its date."""
        with atomic("delete_holiday"):
            holiday = HolidayService.get_holiday(holiday_id, tenant_id)
            payload = holiday.to_dict()
            day = holiday.date
            VacancyHolidayLink.query.filter_by(holiday_id=holiday_id).delete(synchronize_session=False)
            db.session.delete(holiday)

        logger.info("Holiday deleted", holiday_id=holiday_id, tenant_id=tenant_id, date=payload["date"])

        cascade = cascade_holiday_change(tenant_id, day, actor_id)
        return HolidayChangeResult(holiday=payload, cascade=cascade)
