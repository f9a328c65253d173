"""
Tests for the business_days_elapsed backfill.
"""
from types import SimpleNamespace

from talentflow.jobs.backfill import backfill_business_days_elapsed, business_days_elapsed
from talentflow.models import Vacancy, db
from talentflow.vacancies.commands import complete_stage
from conftest import ACTOR, FRI, MON, NEXT_MON, NEXT_TUE, THU, TUE, WED


def make_stage(planned_start, planned_end, actual_completion_date=None):
    return SimpleNamespace(
        planned_start=planned_start,
        planned_end=planned_end,
        actual_completion_date=actual_completion_date,
    )


def finish(snapshot, *days):
    for stage, day in zip(snapshot.stages, days):
        complete_stage(stage["id"], day, ACTOR)


class TestBusinessDaysElapsed:

    def test_shared_boundary_days_count_once(self):
        stages = [make_stage(MON, WED, WED), make_stage(WED, THU, THU)]
        assert business_days_elapsed(stages, set()) == 4

    def test_weekends_and_holidays_are_excluded(self):
        stages = [make_stage(THU, NEXT_TUE)]
        assert business_days_elapsed(stages, {NEXT_MON}) == 3

    def test_actual_completion_wins_over_planned_end(self):
        stages = [make_stage(MON, TUE, FRI)]
        assert business_days_elapsed(stages, set()) == 5

    def test_stages_without_dates_are_skipped(self):
        stages = [make_stage(None, None), make_stage(MON, MON)]
        assert business_days_elapsed(stages, set()) == 1


class TestBackfillJob:

    def test_fills_completed_vacancies_once(self, two_stage_vacancy):
        vacancy_id = two_stage_vacancy.vacancy["id"]
        finish(two_stage_vacancy, WED, THU)

        assert backfill_business_days_elapsed() == {"updated": 1, "total": 1}
        assert db.session.get(Vacancy, vacancy_id).business_days_elapsed == 4

        assert backfill_business_days_elapsed() == {"updated": 0, "total": 0}

    def test_open_vacancies_are_ignored(self, two_stage_vacancy):
        assert backfill_business_days_elapsed() == {"updated": 0, "total": 0}
        assert db.session.get(Vacancy, two_stage_vacancy.vacancy["id"]).business_days_elapsed is None

    def test_linked_holidays_are_excluded(self, tenant_id, make_process, make_vacancy, add_holiday):
        add_holiday(tenant_id, TUE)
        process = make_process(tenant_id, [3, 2])
        snapshot = make_vacancy(tenant_id, process["id"], MON)
        # [Mon, Thu] skipping Tuesday, then [Thu, Fri]
        finish(snapshot, THU, FRI)

        backfill_business_days_elapsed()

        assert db.session.get(Vacancy, snapshot.vacancy["id"]).business_days_elapsed == 4

    def test_existing_value_is_kept(self, two_stage_vacancy):
        vacancy_id = two_stage_vacancy.vacancy["id"]
        finish(two_stage_vacancy, WED, THU)
        vacancy = db.session.get(Vacancy, vacancy_id)
        vacancy.business_days_elapsed = 10
        db.session.commit()

        assert backfill_business_days_elapsed() == {"updated": 0, "total": 0}
        assert db.session.get(Vacancy, vacancy_id).business_days_elapsed == 10
