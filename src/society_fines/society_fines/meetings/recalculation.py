from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

import structlog

from ..common.identifiers import normalize_member_ids
from ..core.enums import FineType
from ..members.repository import MemberRepository
from .counter import ConsecutiveAbsenceCounter
from .model import MeetingHistory

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RecalculationOutcome:
    members: tuple[int, ...]
    meetings_replayed: int
    fines_removed: int
    fines_added: int


class HistoricalRecalculationEngine:
    """Re-derive consecutive-absence counters after a retroactive roster edit.

    Only the affected members are touched, but the replay always walks the
    whole meeting history from the first meeting: O(members x meetings),
    which grows with the society's history.

    With ``retract_meeting_fines`` every meeting fine of the affected members
    is pulled before the replay, so fines follow the corrected history.
    Without it (the default) fines already levied stay and the replay only
    adds fines that are missing.
    """

    def __init__(
        self,
        members: MemberRepository,
        counter: ConsecutiveAbsenceCounter,
        *,
        retract_meeting_fines: bool = False,
    ):
        self._members = members
        self._counter = counter
        self._retract = bool(retract_meeting_fines)

    def recalculate(self, member_ids: Iterable[Any], history: MeetingHistory) -> RecalculationOutcome:
        if not isinstance(history, MeetingHistory):
            raise TypeError("recalculate() requires a MeetingHistory (meetings in date order)")

        affected = normalize_member_ids(member_ids)
        if not affected:
            return RecalculationOutcome(members=(), meetings_replayed=0, fines_removed=0, fines_added=0)

        fines_removed = 0
        if self._retract:
            fines_removed = self._members.remove_fines_for_members(affected, event_type=FineType.MEETING)
        self._members.reset_meeting_absents_many(affected)

        fines_added = 0
        for meeting in history:
            absent = set(meeting.absents)
            outcome = self._counter.apply(
                meeting_id=meeting.meeting_id,
                absent=[m for m in affected if m in absent],
                present=[m for m in affected if m not in absent],
            )
            fines_added += outcome.fines_added

        logger.info(
            "meeting_history_replayed",
            members=len(affected),
            meetings=len(history),
            fines_removed=fines_removed,
            fines_added=fines_added,
        )
        return RecalculationOutcome(
            members=tuple(affected),
            meetings_replayed=len(history),
            fines_removed=fines_removed,
            fines_added=fines_added,
        )
