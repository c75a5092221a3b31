from datetime import date

import pytest

from src.society_fines.society_fines.core.enums import FineType
from src.society_fines.society_fines.fines.ledger import FineLedger
from src.society_fines.society_fines.meetings.counter import ConsecutiveAbsenceCounter
from src.society_fines.society_fines.meetings.model import Meeting, MeetingHistory
from src.society_fines.society_fines.meetings.recalculation import HistoricalRecalculationEngine

from tests.fakes import InMemoryMembers, member


def _counter(*ids):
    members = InMemoryMembers(member(m) for m in ids)
    return members, ConsecutiveAbsenceCounter(members, FineLedger(members))


def test_every_third_consecutive_absence_is_fined():
    members, counter = _counter(1)

    results = [counter.record_absence(1, meeting_id=mid) for mid in range(1, 7)]

    assert results == [False, False, True, False, False, True]
    assert members.fines_of(FineType.MEETING) == [(1, 3), (1, 6)]
    assert all(f.amount == 500 for f in members.fines)


def test_presence_resets_the_run_without_retracting_fines():
    members, counter = _counter(1)
    for mid in (1, 2, 3):
        counter.record_absence(1, meeting_id=mid)

    assert counter.record_presence(1) is True
    assert members.counter(1) == 0
    assert members.fines_of(FineType.MEETING) == [(1, 3)]
    assert counter.record_presence(1) is False


def test_unknown_member_is_skipped():
    members, counter = _counter(1)

    outcome = counter.apply(meeting_id=1, absent=[1, 99], present=[])

    assert outcome.counters_incremented == 1
    assert outcome.skipped == 1


def test_history_rejects_out_of_order_meetings():
    with pytest.raises(ValueError):
        MeetingHistory(
            [
                Meeting(meeting_id=2, meeting_date=date(2025, 2, 1)),
                Meeting(meeting_id=1, meeting_date=date(2025, 1, 1)),
            ]
        )

    history = MeetingHistory.from_unordered(
        [
            Meeting(meeting_id=2, meeting_date=date(2025, 2, 1)),
            Meeting(meeting_id=1, meeting_date=date(2025, 1, 1)),
        ]
    )
    assert [m.meeting_id for m in history] == [1, 2]
    assert isinstance(history[:1], MeetingHistory)


def test_recalculation_requires_ordered_history():
    members, counter = _counter(1)
    engine = HistoricalRecalculationEngine(members, counter)

    with pytest.raises(TypeError):
        engine.recalculate([1], [Meeting(meeting_id=1, meeting_date=date(2025, 1, 1), absents=(1,))])


def test_replay_rederives_counter_from_full_history():
    members, counter = _counter(1, 2)
    engine = HistoricalRecalculationEngine(members, counter)
    history = MeetingHistory(
        [
            Meeting(meeting_id=1, meeting_date=date(2025, 1, 1), absents=(1, 2)),
            Meeting(meeting_id=2, meeting_date=date(2025, 2, 1), absents=(1,)),
            Meeting(meeting_id=3, meeting_date=date(2025, 3, 1), absents=(1, 2)),
        ]
    )

    outcome = engine.recalculate([1, 2], history)

    assert outcome.meetings_replayed == 3
    assert outcome.fines_added == 1
    assert members.counter(1) == 3
    assert members.counter(2) == 1
    assert members.fines_of(FineType.MEETING) == [(1, 3)]
