from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from talentflow.datetime_utils import to_date_only, to_ymd
from talentflow.errors import NotFound
from talentflow.holidays.repository import load_holiday_map
from talentflow.logging_config import get_logger
from talentflow.models import StageState, VacancyStage, VacancyState, db
from talentflow.storage import atomic
from talentflow.vacancies.engine import StageCompletionEngine, describe_schedule
from talentflow.vacancies.holiday_links import rebuild_holiday_links
from talentflow.vacancies.results import VacancySnapshot
from talentflow.vacancies.service import VacancyScheduleService, VacancyService

logger = get_logger(__name__)


@dataclass
class CompleteStageCommand:
    """
    Command to close the current stage of a vacancy.

    Runs as one transaction:
    - Locks the vacancy row and validates state, dates and the stage chain
    - Marks the stage completed (skipped when replaying the same date)
    - Re-plans the remaining stages from the completion date, or completes
      the vacancy when the last stage closes
    - Rebuilds the vacancy's holiday links
    """
    stage_id: str
    completion_date: Union[date, str]
    actor_id: str
    tenant_id: Optional[str] = None

    def execute(self) -> VacancySnapshot:
        """
        Execute the stage completion.

        Returns:
            VacancySnapshot of the vacancy after the change

        Raises:
            NotFound: Stage or vacancy missing, inactive or in another tenant
            InvalidTransition: Vacancy is not open
            InvalidDate: Completion date unparseable or before the planned start
            BrokenInvariant: Previous stage not completed or chain mismatch
            StorageError: The database rejected the transaction
        """
        completion = to_date_only(self.completion_date, field="completion_date")

        with atomic("complete_stage"):
            # 1. Lock the vacancy first, then read its stages under the lock
            vacancy_id = (
                db.session.query(VacancyStage.vacancy_id)
                .filter(VacancyStage.id == self.stage_id)
                .scalar()
            )
            if vacancy_id is None:
                raise NotFound("Vacancy stage not found", details={"stage_id": self.stage_id})

            vacancy = VacancyService.get_vacancy(vacancy_id, self.tenant_id, for_update=True)
            stages = VacancyStage.for_vacancy(vacancy.id, refresh=True)
            index = next(i for i, sibling in enumerate(stages) if sibling.id == self.stage_id)
            stage = stages[index]
            previous = stages[index - 1] if index > 0 else None
            remaining = stages[index + 1:]

            # 2-3. Validate before any write
            StageCompletionEngine.validate(
                vacancy.state, stage, previous, completion, is_last=not remaining
            )

            # 4-5. Close the stage unless this is a replay of the same date
            replay = StageCompletionEngine.is_replay(stage, completion)
            if not replay:
                stage.state = StageState.COMPLETED
                stage.actual_completion_date = completion
                stage.stamp(self.actor_id)

            # 6. Re-plan the tail or close the vacancy
            if remaining:
                schedule = StageCompletionEngine.plan_tail(
                    remaining, completion, load_holiday_map(vacancy.tenant_id)
                )
                VacancyScheduleService.apply_schedule(remaining, schedule, self.actor_id)
                if vacancy.state != VacancyState.OPEN:
                    vacancy.state = VacancyState.OPEN
                vacancy.business_days_elapsed = None
                logger.info(
                    "Remaining stages re-planned",
                    vacancy_id=vacancy.id,
                    from_date=to_ymd(completion),
                    **describe_schedule(schedule)
                )
            else:
                vacancy.state = VacancyState.COMPLETED
                for stray in StageCompletionEngine.stray_stages(stages):
                    logger.warning(
                        "Forcing stray stage to completed",
                        vacancy_id=vacancy.id,
                        stage_id=stray.id,
                        state=stray.state.value,
                    )
                    stray.state = StageState.COMPLETED
                    stray.stamp(self.actor_id)

            vacancy.stamp(self.actor_id)
            db.session.flush()

            # 7. Holiday links are always rebuilt in full
            rebuild_holiday_links(vacancy.id, self.actor_id, commit=False)

            # 8. Snapshot before commit expires the instances
            snapshot = VacancyService.build_snapshot(vacancy)

        logger.info(
            "Stage completed",
            stage_id=self.stage_id,
            vacancy_id=snapshot.vacancy["id"],
            completion_date=to_ymd(completion),
            replay=replay,
            vacancy_state=snapshot.vacancy["state"],
        )
        return snapshot


def complete_stage(stage_id: str, completion_date, actor_id: str, tenant_id: Optional[str] = None) -> VacancySnapshot:
    """Complete a vacancy stage. See CompleteStageCommand."""
    return CompleteStageCommand(
        stage_id=stage_id,
        completion_date=completion_date,
        actor_id=actor_id,
        tenant_id=tenant_id,
    ).execute()
