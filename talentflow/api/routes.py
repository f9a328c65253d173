from flask import jsonify, request

from talentflow.api import api_bp
from talentflow.api.helpers import error_response, get_actor_id, get_json_body, get_tenant_id
from talentflow.errors import SchedulingError
from talentflow.holidays.service import HolidayService
from talentflow.logging_config import get_logger
from talentflow.processes.service import ProcessService, StageTypeService
from talentflow.vacancies.commands import CompleteStageCommand
from talentflow.vacancies.service import VacancyService

logger = get_logger(__name__)


def _unexpected(message, exc):
    logger.error(message, error=str(exc), exc_info=True)
    return jsonify({"error": message, "details": str(exc)}), 500


def _holiday_owner(tenant_id):
    """National holidays are addressed with ?national=true (or "national": true on create)."""
    national = request.args.get("national", "").lower() in ("1", "true", "yes")
    return None if national else tenant_id


@api_bp.route("/stage-types", methods=["POST"])
def create_stage_type():
    """Create a stage type: {"name": str, "sla_days": int}"""
    try:
        tenant_id, actor_id = get_tenant_id(), get_actor_id()
        data = get_json_body()
        stage_type = StageTypeService.create(tenant_id, data.get("name"), data.get("sla_days"), actor_id)
        return jsonify(stage_type), 201
    except SchedulingError as exc:
        return error_response(exc)
    except Exception as exc:
        return _unexpected("Failed to create stage type", exc)


@api_bp.route("/processes", methods=["POST"])
def create_process():
    """Create a process with all its stages: {"name", "description"?, "stages": [{"stage_type_id", "order"}]}"""
    try:
        tenant_id, actor_id = get_tenant_id(), get_actor_id()
        data = get_json_body()
        process = ProcessService.create(
            tenant_id,
            data.get("name"),
            data.get("stages") or [],
            actor_id,
            description=data.get("description"),
        )
        return jsonify(process), 201
    except SchedulingError as exc:
        return error_response(exc)
    except Exception as exc:
        return _unexpected("Failed to create process", exc)


@api_bp.route("/vacancies", methods=["POST"])
def create_vacancy():
    """Create a vacancy and schedule all of its stages."""
    try:
        tenant_id, actor_id = get_tenant_id(), get_actor_id()
        data = get_json_body()
        snapshot = VacancyService.create(
            tenant_id=tenant_id,
            process_id=data.get("process_id"),
            name=data.get("name"),
            start_date=data.get("start_date"),
            actor_id=actor_id,
            department_id=data.get("department_id"),
            site_id=data.get("site_id"),
        )
        return jsonify(snapshot.to_dict()), 201
    except SchedulingError as exc:
        return error_response(exc)
    except Exception as exc:
        return _unexpected("Failed to create vacancy", exc)


@api_bp.route("/vacancies/<vacancy_id>", methods=["GET"])
def get_vacancy(vacancy_id):
    try:
        snapshot = VacancyService.get_snapshot(vacancy_id, get_tenant_id())
        return jsonify(snapshot.to_dict()), 200
    except SchedulingError as exc:
        return error_response(exc)
    except Exception as exc:
        return _unexpected("Failed to get vacancy", exc)


@api_bp.route("/vacancies/<vacancy_id>", methods=["PATCH"])
def update_vacancy(vacancy_id):
    """Edit name, department_id, site_id, start_date or state."""
    try:
        tenant_id, actor_id = get_tenant_id(), get_actor_id()
        snapshot = VacancyService.update(vacancy_id, tenant_id, get_json_body(), actor_id)
        return jsonify(snapshot.to_dict()), 200
    except SchedulingError as exc:
        return error_response(exc)
    except Exception as exc:
        return _unexpected("Failed to update vacancy", exc)


@api_bp.route("/vacancy-stages/<stage_id>/complete", methods=["POST"])
def complete_vacancy_stage(stage_id):
    """Complete the current stage: {"completion_date": "YYYY-MM-DD"}"""
    try:
        tenant_id, actor_id = get_tenant_id(), get_actor_id()
        data = get_json_body()
        snapshot = CompleteStageCommand(
            stage_id=stage_id,
            completion_date=data.get("completion_date"),
            actor_id=actor_id,
            tenant_id=tenant_id,
        ).execute()
        return jsonify(snapshot.to_dict()), 200
    except SchedulingError as exc:
        return error_response(exc)
    except Exception as exc:
        return _unexpected("Failed to complete stage", exc)


@api_bp.route("/holidays", methods=["POST"])
def create_holiday():
    """Create a holiday and re-plan affected vacancies: {"name", "date", "national"?}"""
    try:
        tenant_id, actor_id = get_tenant_id(), get_actor_id()
        data = get_json_body()
        owner = None if data.get("national") is True else _holiday_owner(tenant_id)
        result = HolidayService.create(owner, data.get("name"), data.get("date"), actor_id)
        return jsonify(result.to_dict()), 201
    except SchedulingError as exc:
        return error_response(exc)
    except Exception as exc:
        return _unexpected("Failed to create holiday", exc)


@api_bp.route("/holidays/<holiday_id>", methods=["PATCH"])
def update_holiday(holiday_id):
    try:
        tenant_id, actor_id = get_tenant_id(), get_actor_id()
        result = HolidayService.update(holiday_id, _holiday_owner(tenant_id), get_json_body(), actor_id)
        return jsonify(result.to_dict()), 200
    except SchedulingError as exc:
        return error_response(exc)
    except Exception as exc:
        return _unexpected("Failed to update holiday", exc)


@api_bp.route("/holidays/<holiday_id>", methods=["DELETE"])
def delete_holiday(holiday_id):
    try:
        tenant_id, actor_id = get_tenant_id(), get_actor_id()
        result = HolidayService.delete(holiday_id, _holiday_owner(tenant_id), actor_id)
        return jsonify(result.to_dict()), 200
    except SchedulingError as exc:
        return error_response(exc)
    except Exception as exc:
        return _unexpected("Failed to delete holiday", exc)
