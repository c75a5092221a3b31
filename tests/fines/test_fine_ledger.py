from datetime import datetime

from src.society_fines.society_fines.core.enums import FineType
from src.society_fines.society_fines.fines.ledger import FineLedger

from tests.fakes import InMemoryMembers, member

NOW = datetime(2025, 3, 1, 9, 0, 0)


def _ledger(*ids):
    members = InMemoryMembers(member(m) for m in ids)
    return members, FineLedger(members, clock=lambda: NOW)


def test_apply_is_idempotent_per_member_event_and_type():
    members, ledger = _ledger(1)

    first = ledger.apply_fine(1, event_id=5, fine_type=FineType.FUNERAL, amount=100)
    second = ledger.apply_fine(1, event_id=5, fine_type=FineType.FUNERAL, amount=100)

    assert first.added is True
    assert second.added is False
    assert members.fines_of(FineType.FUNERAL) == [(1, 5)]
    assert members.fines[0].fine_date == NOW


def test_same_event_different_type_is_a_separate_fine():
    members, ledger = _ledger(1)

    ledger.apply_fine(1, event_id=5, fine_type=FineType.EXTRA_DUE, amount=250)
    ledger.apply_fine(1, event_id=5, fine_type=FineType.FUNERAL, amount=100)

    assert len(members.list_fines(1)) == 2


def test_work_fine_supersedes_attendance_fine_for_same_funeral():
    members, ledger = _ledger(1)
    ledger.apply_fine(1, event_id=5, fine_type=FineType.FUNERAL, amount=100)
    ledger.apply_fine(1, event_id=6, fine_type=FineType.FUNERAL, amount=100)

    result = ledger.apply_fine(1, event_id=5, fine_type=FineType.CEMETERY_WORK, amount=1000)

    assert result.added is True
    assert result.superseded == 1
    assert members.fines_of(FineType.FUNERAL) == [(1, 6)]
    assert members.fines_of(FineType.CEMETERY_WORK) == [(1, 5)]


def test_fine_for_unknown_member_is_not_added():
    members, ledger = _ledger(1)

    assert ledger.apply_fine(99, event_id=1, fine_type=FineType.MEETING, amount=500).added is False
    assert members.fines == []


def test_remove_fine_returns_count():
    members, ledger = _ledger(1)
    ledger.apply_fine(1, event_id=5, fine_type=FineType.COMMON_WORK, amount=500)

    assert ledger.remove_fine(1, event_id=5, fine_type=FineType.COMMON_WORK) == 1
    assert ledger.remove_fine(1, event_id=5, fine_type=FineType.COMMON_WORK) == 0
    assert not ledger.has_fine(1, event_id=5, fine_type=FineType.COMMON_WORK)
