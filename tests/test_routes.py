"""
Tests for the HTTP API.
"""
from unittest.mock import patch

import pytest

from conftest import ACTOR


@pytest.fixture
def headers(tenant_id):
    return {"X-Tenant-Id": tenant_id, "X-Actor-Id": ACTOR}


@pytest.fixture
def process_id(client, headers):
    stage_type_ids = []
    for name, sla in (("Screening", 3), ("Interview", 2)):
        response = client.post("/api/stage-types", json={"name": name, "sla_days": sla}, headers=headers)
        assert response.status_code == 201
        stage_type_ids.append(response.get_json()["id"])

    response = client.post(
        "/api/processes",
        json={
            "name": "Engineering hiring",
            "stages": [
                {"stage_type_id": type_id, "order": order}
                for order, type_id in enumerate(stage_type_ids, start=1)
            ],
        },
        headers=headers,
    )
    assert response.status_code == 201
    return response.get_json()["id"]


@pytest.fixture
def vacancy(client, headers, process_id):
    response = client.post(
        "/api/vacancies",
        json={"process_id": process_id, "name": "Backend Engineer", "start_date": "2025-03-03"},
        headers=headers,
    )
    assert response.status_code == 201
    return response.get_json()


class TestHeaders:

    def test_missing_tenant_header(self, client):
        response = client.get("/api/vacancies/anything")
        assert response.status_code == 400
        assert response.get_json()["code"] == "invalid_input"

    def test_missing_actor_header(self, client, tenant_id):
        response = client.post("/api/stage-types", json={"name": "Screening", "sla_days": 3},
                               headers={"X-Tenant-Id": tenant_id})
        assert response.status_code == 400
        assert response.get_json()["details"] == {"header": "X-Actor-Id"}

    def test_body_must_be_an_object(self, client, headers):
        response = client.post("/api/stage-types", json=["Screening"], headers=headers)
        assert response.status_code == 400


class TestVacancyRoutes:

    def test_create_and_get(self, client, headers, vacancy):
        assert [stage["planned_end"] for stage in vacancy["stages"]] == ["2025-03-05", "2025-03-06"]

        response = client.get(f"/api/vacancies/{vacancy['vacancy']['id']}", headers=headers)

        assert response.status_code == 200
        assert response.get_json() == vacancy

    def test_complete_stages_through_the_api(self, client, headers, vacancy):
        first, second = [stage["id"] for stage in vacancy["stages"]]

        response = client.post(f"/api/vacancy-stages/{first}/complete",
                               json={"completion_date": "2025-03-07"}, headers=headers)
        assert response.status_code == 200
        body = response.get_json()
        assert body["stages"][1]["planned_start"] == "2025-03-07"
        assert body["stages"][1]["planned_end"] == "2025-03-10"

        response = client.post(f"/api/vacancy-stages/{second}/complete",
                               json={"completion_date": "2025-03-10"}, headers=headers)
        assert response.get_json()["vacancy"]["state"] == "completed"

    def test_bad_completion_date(self, client, headers, vacancy):
        first = vacancy["stages"][0]["id"]
        response = client.post(f"/api/vacancy-stages/{first}/complete",
                               json={"completion_date": "07/03/2025"}, headers=headers)

        assert response.status_code == 400
        assert response.get_json()["code"] == "invalid_date"

    def test_out_of_order_completion(self, client, headers, vacancy):
        second = vacancy["stages"][1]["id"]
        response = client.post(f"/api/vacancy-stages/{second}/complete",
                               json={"completion_date": "2025-03-07"}, headers=headers)
        assert response.status_code == 409

    def test_unknown_stage(self, client, headers):
        response = client.post("/api/vacancy-stages/missing/complete",
                               json={"completion_date": "2025-03-07"}, headers=headers)
        assert response.status_code == 404

    def test_patch_vacancy(self, client, headers, vacancy):
        response = client.patch(f"/api/vacancies/{vacancy['vacancy']['id']}",
                                json={"state": "paused"}, headers=headers)
        assert response.status_code == 200
        assert response.get_json()["vacancy"]["state"] == "paused"

    def test_vacancy_of_another_tenant(self, client, vacancy, other_tenant_id):
        response = client.get(f"/api/vacancies/{vacancy['vacancy']['id']}",
                              headers={"X-Tenant-Id": other_tenant_id})
        assert response.status_code == 404

    def test_duplicate_vacancy(self, client, headers, process_id, vacancy):
        response = client.post(
            "/api/vacancies",
            json={"process_id": process_id, "name": "Backend Engineer", "start_date": "2025-03-03"},
            headers=headers,
        )
        assert response.status_code == 409

    def test_unexpected_error(self, client, headers):
        with patch("talentflow.api.routes.VacancyService.get_snapshot", side_effect=RuntimeError("boom")):
            response = client.get("/api/vacancies/anything", headers=headers)

        assert response.status_code == 500
        assert response.get_json() == {"error": "Failed to get vacancy", "details": "boom"}


class TestHolidayRoutes:

    @pytest.fixture(autouse=True)
    def allow_past(self, app):
        app.config["HOLIDAY_ALLOW_PAST_DATES"] = True

    def test_holiday_lifecycle_replans_vacancy(self, client, headers, vacancy):
        vacancy_id = vacancy["vacancy"]["id"]

        response = client.post("/api/holidays", json={"name": "Founders day", "date": "2025-03-04"}, headers=headers)
        assert response.status_code == 201
        body = response.get_json()
        assert body["affected_vacancy_ids"] == [vacancy_id]
        holiday_id = body["holiday"]["id"]

        snapshot = client.get(f"/api/vacancies/{vacancy_id}", headers=headers).get_json()
        assert snapshot["stages"][0]["planned_end"] == "2025-03-06"
        assert [holiday["id"] for holiday in snapshot["holidays"]] == [holiday_id]

        response = client.patch(f"/api/holidays/{holiday_id}", json={"date": "2025-03-20"}, headers=headers)
        assert response.status_code == 200
        assert response.get_json()["affected_count"] == 1

        response = client.delete(f"/api/holidays/{holiday_id}", headers=headers)
        assert response.status_code == 200
        assert response.get_json()["holiday"]["date"] == "2025-03-20"

    def test_national_holiday(self, client, headers, vacancy):
        response = client.post("/api/holidays", json={"name": "National day", "date": "2025-03-05", "national": True},
                               headers=headers)
        assert response.status_code == 201
        body = response.get_json()
        assert body["holiday"]["kind"] == "national"
        assert body["affected_count"] == 1

        holiday_id = body["holiday"]["id"]
        assert client.delete(f"/api/holidays/{holiday_id}", headers=headers).status_code == 404
        assert client.delete(f"/api/holidays/{holiday_id}?national=true", headers=headers).status_code == 200

    def test_missing_holiday_name(self, client, headers):
        response = client.post("/api/holidays", json={"date": "2025-03-04"}, headers=headers)
        assert response.status_code == 400
