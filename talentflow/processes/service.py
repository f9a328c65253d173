"""
Service layer for stage types and processes.

A process is created once with all of its stages; stage orders are 1-based
and contiguous and a stage type appears at most once per process.
"""
from typing import Any, Dict, List, Optional, Tuple

from talentflow.errors import DuplicateRecord, InvalidInput, MissingConfiguration, NotFound
from talentflow.logging_config import get_logger
from talentflow.models import Process, ProcessStage, StageType, db
from talentflow.storage import atomic

logger = get_logger(__name__)


def _clean_name(name, label: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidInput(f"{label} name is required", details={"field": "name"})
    return name.strip()


class StageTypeService:
    """Tenant-owned stage templates with an SLA in business days."""

    @staticmethod
    def validate_sla(sla_days) -> int:
        # bool is an int subclass; reject it explicitly
        if isinstance(sla_days, bool) or not isinstance(sla_days, int) or sla_days < 0:
            raise InvalidInput(
                "sla_days must be an integer greater than or equal to 0",
                details={"sla_days": sla_days},
            )
        return sla_days

    @staticmethod
    def create(tenant_id: str, name: str, sla_days: int, actor_id: str) -> Dict[str, Any]:
        """
        Create a stage type.

        Raises:
            InvalidInput: Missing name or invalid SLA
            DuplicateRecord: Name already used by the tenant
        """
        name = _clean_name(name, "Stage type")
        sla_days = StageTypeService.validate_sla(sla_days)

        with atomic("create_stage_type"):
            if StageType.query.filter_by(tenant_id=tenant_id, name=name).first() is not None:
                raise DuplicateRecord("A stage type with that name already exists", details={"name": name})

            stage_type = StageType(tenant_id=tenant_id, name=name, sla_days=sla_days, active=True)
            stage_type.stamp(actor_id)
            db.session.add(stage_type)
            db.session.flush()
            payload = stage_type.to_dict()

        logger.info("Stage type created", stage_type_id=payload["id"], tenant_id=tenant_id, sla_days=sla_days)
        return payload


class ProcessService:
    """Process templates: an ordered list of stage types."""

    @staticmethod
    def validate_stage_orders(stages: List[Dict[str, Any]]) -> List[Tuple[int, str]]:
        """
        Validate a process stage list.

        Args:
            stages: [{"stage_type_id": ..., "order": ...}]

        Returns:
            List of (order, stage_type_id) sorted by order

        Raises:
            MissingConfiguration: Empty list
            InvalidInput: Non-integer or non-positive orders, gaps, duplicate
                orders or duplicate stage types
        """
        if not stages:
            raise MissingConfiguration("A process needs at least one stage")

        pairs = []
        for item in stages:
            if not isinstance(item, dict):
                raise InvalidInput("Each stage must be an object with stage_type_id and order")
            order = item.get("order")
            stage_type_id = item.get("stage_type_id")
            if isinstance(order, bool) or not isinstance(order, int) or order < 1:
                raise InvalidInput("Stage order must be an integer >= 1", details={"order": order})
            if not stage_type_id:
                raise InvalidInput("stage_type_id is required", details={"order": order})
            pairs.append((order, stage_type_id))

        orders = [order for order, _ in pairs]
        if len(set(orders)) != len(orders):
            raise InvalidInput("Duplicate stage orders", details={"orders": sorted(orders)})

        type_ids = [type_id for _, type_id in pairs]
        if len(set(type_ids)) != len(type_ids):
            raise InvalidInput("A stage type can appear only once per process")

        expected = list(range(1, len(pairs) + 1))
        if sorted(orders) != expected:
            raise InvalidInput(
                "Stage orders must be contiguous starting at 1",
                details={"orders": sorted(orders), "expected": expected},
            )

        return sorted(pairs)

    @staticmethod
    def create(
        tenant_id: str,
        name: str,
        stages: List[Dict[str, Any]],
        actor_id: str,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create a process with all its stages in one transaction.

        Raises:
            InvalidInput: Bad name or stage list
            MissingConfiguration: No stages
            NotFound: A stage type is missing or belongs to another tenant
            DuplicateRecord: Name already used by the tenant
        """
        name = _clean_name(name, "Process")
        pairs = ProcessService.validate_stage_orders(stages)

        with atomic("create_process"):
            if Process.query.filter_by(tenant_id=tenant_id, name=name).first() is not None:
                raise DuplicateRecord("A process with that name already exists", details={"name": name})

            type_ids = [type_id for _, type_id in pairs]
            found = {
                stage_type.id: stage_type
                for stage_type in StageType.query.filter(
                    StageType.tenant_id == tenant_id,
                    StageType.id.in_(type_ids),
                ).all()
            }
            missing = [type_id for type_id in type_ids if type_id not in found]
            if missing:
                raise NotFound("Stage type not found", details={"stage_type_ids": missing})

            process = Process(tenant_id=tenant_id, name=name, description=description, active=True)
            process.stamp(actor_id)
            for order, type_id in pairs:
                process_stage = ProcessStage(stage_type=found[type_id], order=order)
                process_stage.stamp(actor_id)
                process.stages.append(process_stage)

            db.session.add(process)
            db.session.flush()
            payload = process.to_dict()

        logger.info(
            "Process created",
            process_id=payload["id"],
            tenant_id=tenant_id,
            stage_count=len(pairs),
        )
        return payload
