import pytest

from src.society_fines.society_fines.container import assemble_container
from src.society_fines.society_fines.core.enums import OfficerPosition
from src.society_fines.society_fines.main import create_app
from src.society_fines.society_fines.officers.model import OfficerRoster

from tests.fakes import (
    InMemoryCommonWorks,
    InMemoryFunerals,
    InMemoryMeetings,
    InMemoryMembers,
    InMemoryOfficers,
    InMemorySettings,
    member,
)


@pytest.fixture()
def container():
    return assemble_container(
        members_repo=InMemoryMembers([member(1), member(2), member(3), member(4, roles={"chairman"})]),
        officers_repo=InMemoryOfficers(OfficerRoster(positions={OfficerPosition.CHAIRMAN: 4})),
        settings_repo=InMemorySettings(),
        meetings_repo=InMemoryMeetings(),
        funerals_repo=InMemoryFunerals(),
        common_works_repo=InMemoryCommonWorks(),
        settings_ttl_seconds=0,
    )


@pytest.fixture()
def client(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container).test_client()


def test_meeting_absents_create_then_update(client):
    resp = client.post("/meeting/absents", json={"absentData": {"date": "2025-01-05", "absentArray": [1]}})
    assert resp.status_code == 201
    assert resp.get_json()["isUpdate"] is False

    resp = client.post("/meeting/absents", json={"absentData": {"date": "2025-01-05", "absentArray": ["1"]}})
    assert resp.status_code == 200
    assert resp.get_json()["message"] == "No attendance changes detected."


def test_meeting_absents_validation_errors(client):
    resp = client.post("/meeting/absents", json={"absentData": {"date": "2025-01-05", "absentArray": "1"}})
    assert resp.status_code == 400

    resp = client.post("/meeting/absents", json={"absentData": {"absentArray": []}})
    assert resp.status_code == 400


def test_meeting_lookup_by_date_and_missing_fines(client):
    client.post("/meeting/absents", json={"absentData": {"date": "2025-01-05", "absentArray": [2]}})

    resp = client.get("/meeting/attendance/date?date=2025-01-05")
    assert resp.get_json()["meeting"]["absents"] == [2]

    resp = client.get("/meeting/attendance/date?date=2025-02-05")
    assert resp.get_json()["meeting"] is None

    assert client.get("/meeting/fines/99").status_code == 404


def test_funeral_flow(client, container):
    resp = client.post(
        "/funeral/createFuneral",
        json={"date": "2025-05-10", "member_id": 1, "deceased_id": "member", "cemeteryAssignments": [{"member_id": 2}]},
    )
    assert resp.status_code == 201
    funeral_id = resp.get_json()["funeral"]["funeral_id"]

    resp = client.post(
        "/funeral/updateFuneralAbsents",
        json={"absentData": {"funeral_id": funeral_id, "absentArray": [2, 3, 4]}},
    )
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["finesAdded"] == 1
    assert body["excludedFromFines"] == 2

    resp = client.post(
        "/funeral/updateWorkAttendance",
        json={"funeralId": funeral_id, "funeralWorkAbsents": [], "cemeteryWorkAbsents": [3]},
    )
    assert resp.get_json()["eventFinesRemoved"] == 1

    resp = client.get(f"/funeral/workFineAmounts/{funeral_id}")
    assert resp.get_json() == {"funeralWorkFine": 1000, "cemeteryWorkFine": 1000}

    resp = client.delete("/funeral/byDeceased", json={"deceased_id": "1"})
    assert resp.get_json()["finesRemoved"] == 1
    assert container.members_repo.fines == []


def test_funeral_not_found(client):
    resp = client.post("/funeral/updateFuneralAbsents", json={"absentData": {"funeral_id": 77, "absentArray": []}})
    assert resp.status_code == 404


def test_common_work_endpoints(client):
    resp = client.post(
        "/commonwork/attendance",
        json={"workData": {"date": "2025-06-01", "title": "Cleanup", "absentArray": [1]}},
    )
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["finesAdded"] == 1
    assert body["stats"]["totalExpectedMembers"] == 3

    work_id = body["workId"]
    assert client.get(f"/commonwork/fineAmount/{work_id}").get_json()["commonWorkFine"] == 500
    assert client.get("/commonwork/date?date=2025-06-01").get_json()["commonWork"]["workId"] == work_id
    assert client.get("/commonwork/stats?year=2025").get_json()["stats"]["totalWorks"] == 1

    assert client.delete(f"/commonwork/{work_id}").get_json()["finesRemoved"] == 1
    assert client.get(f"/commonwork/{work_id}").status_code == 404


def test_common_work_requires_title(client):
    resp = client.post("/commonwork/attendance", json={"workData": {"date": "2025-06-01"}})
    assert resp.status_code == 400


def test_settings_update_is_visible_immediately(client):
    assert client.get("/settings/fines").get_json()["funeralAttendanceFine"] == 100

    resp = client.put("/settings/FUNERAL_ATTENDANCE_FINE_VALUE", json={"value": 250})
    assert resp.status_code == 200

    assert client.get("/settings/fines").get_json()["funeralAttendanceFine"] == 250


def test_unexpected_errors_become_500(client, container, monkeypatch):
    def boom():
        raise RuntimeError("storage offline")

    monkeypatch.setattr(container.meeting_service, "get_attendance_sheet", boom)

    resp = client.get("/meeting/attendance")
    assert resp.status_code == 500
    assert resp.get_json() == {"message": "Internal server error.", "error": "storage offline"}
