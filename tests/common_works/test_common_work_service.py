from datetime import date

import pytest

from src.society_fines.society_fines.common_works.model import AttendanceStats
from src.society_fines.society_fines.common_works.service import CommonWorkService
from src.society_fines.society_fines.core.enums import FineType, MemberStatus
from src.society_fines.society_fines.core.exceptions import NotFoundError, ValidationError
from src.society_fines.society_fines.fines.ledger import FineLedger
from src.society_fines.society_fines.settings.model import COMMON_WORK_FINE_VALUE, SystemSetting
from src.society_fines.society_fines.settings.service import FineSettingsProvider

from tests.fakes import InMemoryCommonWorks, InMemoryMembers, InMemorySettings, member

WORK_DAY = date(2025, 6, 1)


def _service(settings=()):
    members = InMemoryMembers(
        [
            member(1, roles={"chairman"}),
            member(2, roles={"auditor"}),
            member(3, status=MemberStatus.FREE),
            member(4),
            member(5),
            member(6),
            member(7, status=MemberStatus.ATTENDANCE_FREE),
        ]
    )
    works = InMemoryCommonWorks()
    provider = FineSettingsProvider(InMemorySettings(settings), ttl_seconds=0, environ={})
    svc = CommonWorkService(works, members, FineLedger(members), provider, today=lambda: WORK_DAY)
    return members, works, svc


def test_create_fines_non_exempt_absentees_and_reports_stats():
    members, _, svc = _service()

    result = svc.save_attendance(work_date=WORK_DAY, title="Temple cleanup", absent_array=[4, "1"])

    assert result.is_update is False
    assert result.fines_added == 1
    assert members.fines_of(FineType.COMMON_WORK) == [(4, result.work_id)]
    assert result.stats.to_dict() == {
        "totalExpectedMembers": 3,
        "totalPresentMembers": 1,
        "totalAbsentMembers": 2,
        "attendanceRate": 33.3,
        "fineAmount": 500,
        "totalFineAmount": 1000,
    }


def test_update_adds_and_removes_fines_by_diff():
    members, works, svc = _service()
    first = svc.save_attendance(work_date=WORK_DAY, title="Temple cleanup", absent_array=[4, 1])

    result = svc.save_attendance(work_date=WORK_DAY, title="Temple cleanup", remarks="rain", absent_array=[5])

    assert result.is_update is True
    assert result.work_id == first.work_id
    assert result.fines_removed == 1
    assert result.fines_added == 1
    assert members.fines_of(FineType.COMMON_WORK) == [(5, first.work_id)]
    assert works.get_by_id(first.work_id).remarks == "rain"


def test_configured_amount_is_used():
    members, _, svc = _service([SystemSetting(COMMON_WORK_FINE_VALUE, "750", "fine")])

    result = svc.save_attendance(work_date=WORK_DAY, title="Road repair", absent_array=[6])

    assert result.stats.fine_amount == 750
    assert members.list_fines(6)[0].amount == 750
    assert svc.get_fine_amount(result.work_id) == 750


def test_attendance_rate_is_zero_without_expected_members():
    stats = AttendanceStats.compute(expected=0, absent=0, fine_amount=500)

    assert stats.attendance_rate == 0.0


def test_title_is_required():
    _, _, svc = _service()

    with pytest.raises(ValidationError):
        svc.save_attendance(work_date=WORK_DAY, title="  ", absent_array=[])


def test_yearly_stats():
    _, _, svc = _service()
    svc.save_attendance(work_date=date(2025, 1, 10), title="A", absent_array=[4])
    svc.save_attendance(work_date=date(2025, 8, 10), title="B", absent_array=[4, 5])
    svc.save_attendance(work_date=date(2024, 8, 10), title="old", absent_array=[4, 5, 6])

    stats = svc.get_yearly_stats("2025")

    assert stats["totalWorks"] == 2
    assert stats["totalExpectedAttendance"] == 6
    assert stats["totalActualAttendance"] == 3
    assert stats["avgAttendanceRate"] == pytest.approx(50.0)
    assert svc.get_yearly_stats()["year"] == 2025


def test_delete_removes_the_works_fines():
    members, works, svc = _service()
    result = svc.save_attendance(work_date=WORK_DAY, title="A", absent_array=[4, 5])

    assert svc.delete(result.work_id) == 2
    assert members.fines == []
    assert works.get_by_id(result.work_id) is None

    with pytest.raises(NotFoundError):
        svc.delete(result.work_id)
