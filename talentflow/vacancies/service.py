"""
Service layer for vacancies.
Owns the transactions around vacancy creation, edits and schedule resets.
"""
from datetime import date
from typing import Any, Dict, Iterable, Optional

from talentflow.datetime_utils import to_date_only
from talentflow.errors import DuplicateRecord, InvalidInput, InvalidTransition, MissingConfiguration, NotFound
from talentflow.holidays.repository import load_holiday_map
from talentflow.logging_config import get_logger
from talentflow.models import (
    Holiday,
    Process,
    Vacancy,
    VacancyHolidayLink,
    VacancyStage,
    VacancyState,
    db,
)
from talentflow.scheduling.builder import Schedule, StageTemplate, build_schedule
from talentflow.storage import atomic
from talentflow.vacancies.engine import VacancyLifecycleEngine, describe_schedule, templates_for
from talentflow.vacancies.holiday_links import rebuild_holiday_links
from talentflow.vacancies.results import VacancySnapshot

logger = get_logger(__name__)


class VacancyScheduleService:
    """Writes built schedules onto VacancyStage rows."""

    @staticmethod
    def apply_schedule(stages: Iterable[VacancyStage], schedule: Schedule, actor_id: str) -> None:
        """
        Overwrite planned windows and states, clearing completion dates.

        Args:
            stages: VacancyStage rows whose ids appear in the schedule
            schedule: Schedule built with VacancyStage ids as stage ids
            actor_id: Audit actor
        """
        logger.debug("Applying schedule", actor_id=actor_id, **schedule.to_dict())
        planned_by_id = schedule.by_stage_id()
        for stage in stages:
            planned = planned_by_id.get(stage.id)
            if planned is None:
                continue
            stage.planned_start = planned.planned_start
            stage.planned_end = planned.planned_end
            stage.actual_completion_date = None
            stage.state = planned.state
            stage.stamp(actor_id)

    @staticmethod
    def reset_schedule(vacancy: Vacancy, holidays, actor_id: str, reopen: bool = True) -> Schedule:
        """
        Rebuild every stage from the vacancy's start date as if freshly started.

        All completion dates are cleared, the first stage is open and the rest
        pending. With reopen the vacancy is forced back to open.
        """
        stages = VacancyStage.for_vacancy(vacancy.id)
        schedule = build_schedule(templates_for(stages), vacancy.start_date, holidays)
        VacancyScheduleService.apply_schedule(stages, schedule, actor_id)

        if reopen:
            vacancy.state = VacancyState.OPEN
        vacancy.business_days_elapsed = None
        vacancy.stamp(actor_id)

        logger.info(
            "Vacancy schedule reset",
            vacancy_id=vacancy.id,
            start_date=str(vacancy.start_date),
            **describe_schedule(schedule)
        )
        return schedule


class VacancyService:
    """Service for vacancy creation, edits and snapshots."""

    EDITABLE_FIELDS = ("name", "department_id", "site_id", "start_date", "state")

    @staticmethod
    def get_vacancy(vacancy_id: str, tenant_id: Optional[str] = None, for_update: bool = False) -> Vacancy:
        """
        Load an active vacancy, optionally row-locked.

        Raises:
            NotFound: Missing, inactive, or owned by another tenant
        """
        query = Vacancy.query.filter(Vacancy.id == vacancy_id)
        if for_update:
            query = query.with_for_update().populate_existing()
        vacancy = query.first()

        if vacancy is None or not vacancy.active:
            raise NotFound("Vacancy not found", details={"vacancy_id": vacancy_id})
        if tenant_id is not None and vacancy.tenant_id != tenant_id:
            raise NotFound("Vacancy not found", details={"vacancy_id": vacancy_id})
        return vacancy

    @staticmethod
    def build_snapshot(vacancy: Vacancy) -> VacancySnapshot:
        stages = VacancyStage.for_vacancy(vacancy.id)
        holidays = (
            Holiday.query
            .join(VacancyHolidayLink, VacancyHolidayLink.holiday_id == Holiday.id)
            .filter(VacancyHolidayLink.vacancy_id == vacancy.id)
            .order_by(Holiday.date)
            .all()
        )
        return VacancySnapshot(
            vacancy=vacancy.to_dict(),
            stages=[stage.to_dict() for stage in stages],
            holidays=[holiday.to_dict() for holiday in holidays],
        )

    @staticmethod
    def get_snapshot(vacancy_id: str, tenant_id: Optional[str] = None) -> VacancySnapshot:
        vacancy = VacancyService.get_vacancy(vacancy_id, tenant_id)
        return VacancyService.build_snapshot(vacancy)

    @staticmethod
    def _clean_name(name) -> str:
        if not isinstance(name, str) or not name.strip():
            raise InvalidInput("Vacancy name is required", details={"field": "name"})
        return name.strip()

    @staticmethod
    def _find_duplicate(tenant_id, process_id, name, start_date, department_id, site_id, state, exclude_id=None):
        query = Vacancy.query.filter(
            Vacancy.tenant_id == tenant_id,
            Vacancy.process_id == process_id,
            Vacancy.name == name,
            Vacancy.start_date == start_date,
            Vacancy.state == state,
        )
        query = query.filter(
            Vacancy.department_id.is_(None) if department_id is None else Vacancy.department_id == department_id
        )
        query = query.filter(Vacancy.site_id.is_(None) if site_id is None else Vacancy.site_id == site_id)
        if exclude_id is not None:
            query = query.filter(Vacancy.id != exclude_id)
        return query.first()

    @staticmethod
    def create(
        tenant_id: str,
        process_id: str,
        name: str,
        start_date,
        actor_id: str,
        department_id: Optional[str] = None,
        site_id: Optional[str] = None,
    ) -> VacancySnapshot:
        """
        Create a vacancy with its full stage schedule and holiday links.

        Raises:
            InvalidInput: Missing name
            InvalidDate: Unparseable start date
            NotFound: Process missing or owned by another tenant
            MissingConfiguration: Process without stages
            DuplicateRecord: Same vacancy identity already exists
        """
        name = VacancyService._clean_name(name)
        start = to_date_only(start_date, field="start_date")

        with atomic("create_vacancy"):
            process = Process.query.filter_by(id=process_id, tenant_id=tenant_id).first()
            if process is None:
                raise NotFound("Process not found", details={"process_id": process_id})
            if not process.stages:
                raise MissingConfiguration("Process has no stages", details={"process_id": process_id})

            duplicate = VacancyService._find_duplicate(
                tenant_id, process_id, name, start, department_id, site_id, VacancyState.OPEN
            )
            if duplicate is not None:
                raise DuplicateRecord(
                    "A vacancy with the same process, name, start date, department and site already exists",
                    details={"vacancy_id": duplicate.id},
                )

            vacancy = Vacancy(
                tenant_id=tenant_id,
                process_id=process_id,
                name=name,
                start_date=start,
                department_id=department_id,
                site_id=site_id,
                state=VacancyState.OPEN,
                active=True,
            )
            vacancy.stamp(actor_id)
            db.session.add(vacancy)
            db.session.flush()

            process_stages = {process_stage.id: process_stage for process_stage in process.stages}
            templates = [
                StageTemplate(stage_id=process_stage.id, sla_days=process_stage.stage_type.sla_days)
                for process_stage in process.stages
            ]
            schedule = build_schedule(templates, start, load_holiday_map(tenant_id))

            for planned in schedule.stages:
                stage = VacancyStage(
                    vacancy_id=vacancy.id,
                    process_stage=process_stages[planned.stage_id],
                    state=planned.state,
                    planned_start=planned.planned_start,
                    planned_end=planned.planned_end,
                )
                stage.stamp(actor_id)
                db.session.add(stage)
            db.session.flush()

            rebuild_holiday_links(vacancy.id, actor_id, commit=False)
            snapshot = VacancyService.build_snapshot(vacancy)

        logger.info(
            "Vacancy created",
            vacancy_id=snapshot.vacancy["id"],
            tenant_id=tenant_id,
            process_id=process_id,
            **describe_schedule(schedule)
        )
        return snapshot

    @staticmethod
    def update(vacancy_id: str, tenant_id: str, changes: Dict[str, Any], actor_id: str) -> VacancySnapshot:
        """
        Edit a vacancy.

        A new start date rebuilds the whole schedule from that date. A state
        change follows the vacancy lifecycle.

        Raises:
            InvalidInput: Unknown field, empty name or unknown state
            InvalidTransition: Disallowed state change, or a start date change
                on a completed or cancelled vacancy
            DuplicateRecord: The edit collides with another vacancy
        """
        unknown = sorted(set(changes) - set(VacancyService.EDITABLE_FIELDS))
        if unknown:
            raise InvalidInput("Unknown vacancy fields", details={"fields": unknown})

        target_state = None
        if "state" in changes:
            try:
                target_state = VacancyState(changes["state"])
            except ValueError:
                raise InvalidInput(
                    "Invalid vacancy state",
                    details={"state": changes["state"], "allowed": [s.value for s in VacancyState]},
                )

        new_start: Optional[date] = None
        if "start_date" in changes:
            new_start = to_date_only(changes["start_date"], field="start_date")

        with atomic("update_vacancy"):
            vacancy = VacancyService.get_vacancy(vacancy_id, tenant_id, for_update=True)

            name = VacancyService._clean_name(changes["name"]) if "name" in changes else vacancy.name
            department_id = changes.get("department_id", vacancy.department_id)
            site_id = changes.get("site_id", vacancy.site_id)
            start = new_start or vacancy.start_date
            state = target_state or vacancy.state

            if target_state is not None:
                VacancyLifecycleEngine.validate_transition(vacancy.state, target_state)

            start_changed = new_start is not None and new_start != vacancy.start_date
            if start_changed and vacancy.state not in (VacancyState.OPEN, VacancyState.PAUSED):
                raise InvalidTransition(
                    f"Cannot move the start date of a {vacancy.state.value} vacancy",
                    details={"vacancy_state": vacancy.state.value},
                )

            duplicate = VacancyService._find_duplicate(
                vacancy.tenant_id, vacancy.process_id, name, start, department_id, site_id, state,
                exclude_id=vacancy.id,
            )
            if duplicate is not None:
                raise DuplicateRecord(
                    "A vacancy with the same process, name, start date, department and site already exists",
                    details={"vacancy_id": duplicate.id},
                )

            vacancy.name = name
            vacancy.department_id = department_id
            vacancy.site_id = site_id

            if start_changed:
                vacancy.start_date = new_start
                VacancyScheduleService.reset_schedule(
                    vacancy, load_holiday_map(vacancy.tenant_id), actor_id, reopen=False
                )

            if target_state is not None:
                vacancy.state = target_state

            vacancy.stamp(actor_id)
            db.session.flush()

            if start_changed:
                rebuild_holiday_links(vacancy.id, actor_id, commit=False)

            snapshot = VacancyService.build_snapshot(vacancy)

        logger.info(
            "Vacancy updated",
            vacancy_id=vacancy_id,
            fields=sorted(changes),
            start_changed=start_changed,
            state=snapshot.vacancy["state"],
        )
        return snapshot
