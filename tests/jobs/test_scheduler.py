from unittest.mock import MagicMock, patch

from talentflow.jobs.scheduler import init_scheduler


class TestInitScheduler:

    def test_disabled_by_default(self, app):
        with patch("talentflow.jobs.scheduler.BackgroundScheduler") as scheduler_cls:
            assert init_scheduler(app) is None
        scheduler_cls.assert_not_called()

    def test_registers_backfill_job(self, app):
        app.config["SCHEDULER_ENABLED"] = True
        app.config["BACKFILL_INTERVAL_MINUTES"] = 15
        scheduler = MagicMock()

        with patch("talentflow.jobs.scheduler.BackgroundScheduler", return_value=scheduler), \
                patch("talentflow.jobs.scheduler.atexit.register") as register:
            assert init_scheduler(app) is scheduler

        scheduler.start.assert_called_once_with()
        register.assert_called_once()
        kwargs = scheduler.add_job.call_args.kwargs
        assert kwargs["id"] == "backfill_business_days_elapsed"
        assert kwargs["trigger"] == "interval"
        assert kwargs["minutes"] == 15
        assert kwargs["max_instances"] == 1

    def test_job_errors_are_logged_not_raised(self, app):
        app.config["SCHEDULER_ENABLED"] = True
        scheduler = MagicMock()

        with patch("talentflow.jobs.scheduler.BackgroundScheduler", return_value=scheduler), \
                patch("talentflow.jobs.scheduler.atexit.register"):
            init_scheduler(app)

        job = scheduler.add_job.call_args.kwargs["func"]
        with patch(
            "talentflow.jobs.scheduler.backfill_business_days_elapsed",
            side_effect=RuntimeError("boom"),
        ) as backfill:
            job()
        backfill.assert_called_once_with()
