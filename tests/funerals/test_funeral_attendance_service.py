from datetime import date

import pytest

from src.society_fines.society_fines.core.enums import FineType, MemberStatus, OfficerPosition
from src.society_fines.society_fines.core.exceptions import NotFoundError, ValidationError
from src.society_fines.society_fines.fines.ledger import FineLedger
from src.society_fines.society_fines.funerals.service import FuneralAttendanceService
from src.society_fines.society_fines.officers.model import AreaAdmin, OfficerRoster
from src.society_fines.society_fines.settings.service import FineSettingsProvider

from tests.fakes import InMemoryFunerals, InMemoryMembers, InMemoryOfficers, InMemorySettings, member

FUNERAL_DATE = date(2025, 5, 10)


def _service():
    members = InMemoryMembers(
        [
            member(1),
            member(2),
            member(3),
            member(4),
            member(5, area="South"),
            member(6),
            member(7),
            member(8),
            member(9),
            member(10, status=MemberStatus.FREE),
        ]
    )
    officers = InMemoryOfficers(
        OfficerRoster(
            positions={OfficerPosition.CHAIRMAN: 1, OfficerPosition.AUDITOR: 2},
            area_admins=(
                AreaAdmin(area="North", member_id=3, helper1_id=4),
                AreaAdmin(area="South", member_id=5),
            ),
        )
    )
    funerals = InMemoryFunerals()
    settings = FineSettingsProvider(InMemorySettings(), ttl_seconds=0, environ={})
    svc = FuneralAttendanceService(funerals, members, officers, FineLedger(members), settings)
    return members, funerals, svc


def _funeral(svc, **kwargs):
    data = {
        "funeral_date": FUNERAL_DATE,
        "member_id": 6,
        "deceased_id": "member",
        "cemetery_assignments": [7],
        "funeral_assignments": [],
        "removed_members": [8],
    }
    data.update(kwargs)
    return svc.create_funeral(**data)


def test_create_funeral_resolves_member_as_deceased():
    _, _, svc = _service()

    funeral = _funeral(svc)

    assert funeral.deceased_id == "6"
    assert funeral.cemetery_assignments == (7,)


def test_create_funeral_requires_known_reporting_member():
    _, _, svc = _service()

    with pytest.raises(NotFoundError):
        _funeral(svc, member_id=404)


def test_event_absents_apply_exemptions():
    members, _, svc = _service()
    funeral = _funeral(svc)

    result = svc.update_event_absents(funeral.funeral_id, [1, 2, 3, 4, 5, 7, 8, 9, 10])

    assert result.fines_added == 3
    assert result.excluded_from_fines == 6
    assert members.fines_of(FineType.FUNERAL) == [(2, 1), (5, 1), (9, 1)]
    assert all(f.amount == 100 for f in members.fines)
    assert result.funeral.event_absents == (1, 2, 3, 4, 5, 7, 8, 9, 10)


def test_event_absents_update_removes_fines_of_now_present_members():
    members, _, svc = _service()
    funeral = _funeral(svc)
    svc.update_event_absents(funeral.funeral_id, [2, 9])

    result = svc.update_event_absents(funeral.funeral_id, ["9"])

    assert result.fines_removed == 1
    assert result.fines_added == 0
    assert members.fines_of(FineType.FUNERAL) == [(9, 1)]


def test_work_absence_supersedes_attendance_fine():
    members, _, svc = _service()
    funeral = _funeral(svc)
    svc.update_event_absents(funeral.funeral_id, [9])

    result = svc.update_work_attendance(funeral.funeral_id, cemetery_work_absents=[9], funeral_work_absents=[2])

    assert result.cemetery_work.fines_added == 1
    assert result.funeral_work.fines_added == 1
    assert result.event_fines_removed == 1
    assert members.fines_of(FineType.FUNERAL) == []
    assert members.fines_of(FineType.CEMETERY_WORK) == [(9, 1)]
    assert members.list_fines(9)[0].amount == 1000


def test_attendance_fine_skipped_when_work_fine_exists():
    members, _, svc = _service()
    funeral = _funeral(svc)
    svc.update_work_attendance(funeral.funeral_id, funeral_work_absents=[9])

    result = svc.update_event_absents(funeral.funeral_id, [9, 2])

    assert result.excluded_due_to_work_fines == 1
    assert result.fines_added == 1
    assert members.fines_of(FineType.FUNERAL) == [(2, 1)]


def test_work_roster_correction_removes_work_fine_only():
    members, _, svc = _service()
    funeral = _funeral(svc)
    svc.update_work_attendance(funeral.funeral_id, funeral_work_absents=[9], cemetery_work_absents=[2])

    result = svc.update_work_attendance(funeral.funeral_id, funeral_work_absents=[], cemetery_work_absents=[2])

    assert result.funeral_work.fines_removed == 1
    assert result.cemetery_work.fines_added == 0
    assert members.fines_of(FineType.FUNERAL_WORK) == []
    assert members.fines_of(FineType.CEMETERY_WORK) == [(2, 1)]


def test_last_assignment_info_uses_latest_fully_staffed_funeral():
    _, _, svc = _service()
    _funeral(svc, deceased_id="A", cemetery_assignments=list(range(100, 115)), removed_members=[8])
    _funeral(svc, deceased_id="B", cemetery_assignments=[7])

    info = svc.get_last_assignment_info()

    assert info == {"lastMember_id": 114, "removedMembers_ids": [8]}


def test_last_assignment_info_without_history():
    _, _, svc = _service()

    assert svc.get_last_assignment_info() == {"lastMember_id": 0, "removedMembers_ids": []}


def test_extra_due_is_independent_of_attendance_fines():
    members, funerals, svc = _service()
    funeral = _funeral(svc, deceased_id="D-1")
    svc.update_event_absents(funeral.funeral_id, [9])

    assert svc.record_extra_due(deceased_id="D-1", member_id="9", amount=250) is True
    assert svc.record_extra_due(deceased_id="D-1", member_id=9, amount=250) is False

    assert members.fines_of(FineType.FUNERAL) == [(9, 1)]
    assert members.fines_of(FineType.EXTRA_DUE) == [(9, 1)]
    assert funerals.get_by_id(funeral.funeral_id).extra_due_members == (9,)
    assert svc.get_extra_dues("D-1")[0]["extraDue"] == 250


def test_extra_due_requires_positive_amount():
    _, _, svc = _service()
    _funeral(svc, deceased_id="D-1")

    with pytest.raises(ValidationError):
        svc.record_extra_due(deceased_id="D-1", member_id=9, amount=0)


def test_work_fine_amounts_fall_back_to_settings():
    _, _, svc = _service()
    funeral = _funeral(svc)

    assert svc.get_work_fine_amounts(funeral.funeral_id) == {"funeralWorkFine": 1000, "cemeteryWorkFine": 1000}


def test_delete_removes_every_fine_of_the_funeral():
    members, funerals, svc = _service()
    funeral = _funeral(svc, deceased_id="D-2")
    svc.update_event_absents(funeral.funeral_id, [2])
    svc.update_work_attendance(funeral.funeral_id, cemetery_work_absents=[9])
    svc.record_extra_due(deceased_id="D-2", member_id=5, amount=300)

    removed = svc.delete_by_deceased_id("D-2")

    assert removed == 3
    assert members.fines == []
    assert funerals.get_by_id(funeral.funeral_id) is None


def test_unknown_funeral_is_not_found():
    _, _, svc = _service()

    with pytest.raises(NotFoundError):
        svc.update_event_absents(42, [])
    with pytest.raises(ValidationError):
        svc.update_event_absents(None, [])


def test_cemetery_assignee_listed_absent_is_not_fined():
    members, _, svc = _service()
    funeral = _funeral(svc, cemetery_assignments=[{"member_id": 5}])

    result = svc.update_event_absents(funeral.funeral_id, [5])

    assert result.fines_added == 0
    assert members.fines_of(FineType.FUNERAL) == []


def test_funeral_work_absence_replaces_existing_attendance_fine():
    members, _, svc = _service()
    funeral = _funeral(svc)
    svc.update_event_absents(funeral.funeral_id, [9])
    assert members.fines_of(FineType.FUNERAL) == [(9, 1)]

    svc.update_work_attendance(funeral.funeral_id, funeral_work_absents=[9])

    assert members.fines_of(FineType.FUNERAL) == []
    assert members.fines_of(FineType.FUNERAL_WORK) == [(9, 1)]
    assert members.list_fines(9)[0].amount == 1000
