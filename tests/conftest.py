"""
Shared fixtures: a Flask app on in-memory SQLite plus small factories for
tenants, processes, vacancies and holidays.

Calendar used throughout the suite (March 2025):
    Mon 03  Tue 04  Wed 05  Thu 06  Fri 07  Sat 08  Sun 09
    Mon 10  Tue 11  Wed 12  Thu 13  Fri 14
"""
from datetime import date

import pytest

from talentflow import create_app
from talentflow.config import TestingConfig
from talentflow.models import Holiday, HolidayKind, Tenant, db
from talentflow.processes.service import ProcessService, StageTypeService
from talentflow.vacancies.service import VacancyService

ACTOR = "user-1"

MON = date(2025, 3, 3)
TUE = date(2025, 3, 4)
WED = date(2025, 3, 5)
THU = date(2025, 3, 6)
FRI = date(2025, 3, 7)
SAT = date(2025, 3, 8)
SUN = date(2025, 3, 9)
NEXT_MON = date(2025, 3, 10)
NEXT_TUE = date(2025, 3, 11)
NEXT_WED = date(2025, 3, 12)


@pytest.fixture
def app():
    """Create Flask application for testing."""
    app = create_app(TestingConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def _make_tenant(name):
    tenant = Tenant(name=name)
    db.session.add(tenant)
    db.session.commit()
    return tenant.id


@pytest.fixture
def tenant_id(app):
    return _make_tenant("Acme")


@pytest.fixture
def other_tenant_id(app):
    return _make_tenant("Globex")


@pytest.fixture
def make_process():
    """make_process(tenant_id, [sla, ...], name=...) -> process dict with ordered stages."""
    counter = {"n": 0}

    def factory(tenant_id, slas, name=None):
        counter["n"] += 1
        stages = []
        for order, sla in enumerate(slas, start=1):
            stage_type = StageTypeService.create(
                tenant_id, f"Stage {counter['n']}.{order}", sla, ACTOR
            )
            stages.append({"stage_type_id": stage_type["id"], "order": order})
        return ProcessService.create(
            tenant_id, name or f"Process {counter['n']}", stages, ACTOR
        )

    return factory


@pytest.fixture
def make_vacancy():
    """make_vacancy(tenant_id, process_id, start, name=...) -> VacancySnapshot."""

    def factory(tenant_id, process_id, start, name="Backend Engineer", **kwargs):
        return VacancyService.create(tenant_id, process_id, name, start, ACTOR, **kwargs)

    return factory


@pytest.fixture
def add_holiday():
    """Insert a holiday row directly, without running the cascade."""

    def factory(tenant_id, day, name=None):
        holiday = Holiday(
            tenant_id=tenant_id,
            kind=HolidayKind.NATIONAL if tenant_id is None else HolidayKind.TENANT,
            name=name or f"Holiday {day.isoformat()}",
            date=day,
        )
        db.session.add(holiday)
        db.session.commit()
        return holiday.id

    return factory


@pytest.fixture
def two_stage_vacancy(tenant_id, make_process, make_vacancy):
    """SLA 3 then SLA 2, started Monday: [Mon, Wed] then [Wed, Thu]."""
    process = make_process(tenant_id, [3, 2])
    return make_vacancy(tenant_id, process["id"], MON)
