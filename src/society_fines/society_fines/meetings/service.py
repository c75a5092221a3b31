from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

import structlog

from ..common.identifiers import normalize_member_ids
from ..common.validators import require_list
from ..core.constants import ATTENDANCE_EXEMPT_STATUSES
from ..core.enums import FineType
from ..core.exceptions import NotFoundError
from ..fines.diff import diff_absentees, present_members
from ..fines.eligibility.base import EventContext
from ..fines.eligibility.resolver import EligibilityResolver
from ..members.repository import MemberRepository
from .counter import ConsecutiveAbsenceCounter
from .model import Meeting
from .recalculation import HistoricalRecalculationEngine
from .repository import MeetingRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class MeetingSaveResult:
    meeting_id: int
    is_update: bool
    fines_added: int = 0
    fines_removed: int = 0
    affected_members: int = 0

    @property
    def message(self) -> str:
        if not self.is_update:
            return "Attendance and meeting document created successfully."
        if not self.affected_members:
            return "No attendance changes detected."
        return "Meeting attendance updated successfully."


class MeetingAttendanceService:
    def __init__(
        self,
        meetings: MeetingRepository,
        members: MemberRepository,
        counter: ConsecutiveAbsenceCounter,
        recalculation: HistoricalRecalculationEngine,
        *,
        resolver: EligibilityResolver | None = None,
    ):
        self._meetings = meetings
        self._members = members
        self._counter = counter
        self._recalculation = recalculation
        self._resolver = resolver or EligibilityResolver()

    def _active_roster(self) -> list[int]:
        return [m.member_id for m in self._members.list_active(exclude_statuses=ATTENDANCE_EXEMPT_STATUSES)]

    def _fineable(self, member_ids: list[int]) -> tuple[int, ...]:
        members = {m.member_id: m for m in self._members.get_many(member_ids)}
        result = self._resolver.resolve(EventContext(fine_type=FineType.MEETING), member_ids, members)
        if result.unknown:
            logger.warning("meeting_unknown_members_skipped", member_ids=list(result.unknown))
        return result.eligible

    def save_attendance(self, *, meeting_date: date, absent_array: Any) -> MeetingSaveResult:
        absents = normalize_member_ids(require_list(absent_array, "absentArray"))

        existing = self._meetings.get_by_date(meeting_date)
        if existing:
            return self._update(existing, absents)
        return self._create(meeting_date, absents)

    def _create(self, meeting_date: date, absents: list[int]) -> MeetingSaveResult:
        meeting_id = self._meetings.create(meeting_date=meeting_date, absents=absents)

        present = present_members(self._active_roster(), absents)
        outcome = self._counter.apply(
            meeting_id=meeting_id,
            absent=self._fineable(absents),
            present=present,
        )

        logger.info(
            "meeting_created",
            meeting_id=meeting_id,
            meeting_date=meeting_date.isoformat(),
            absent=len(absents),
            present=len(present),
            fines_added=outcome.fines_added,
            skipped=outcome.skipped,
        )
        return MeetingSaveResult(
            meeting_id=meeting_id,
            is_update=False,
            fines_added=outcome.fines_added,
            affected_members=len(absents) + len(present),
        )

    def _update(self, existing: Meeting, absents: list[int]) -> MeetingSaveResult:
        diff = diff_absentees(existing.absents, absents)
        if not diff.has_changes:
            return MeetingSaveResult(meeting_id=existing.meeting_id, is_update=True)

        self._meetings.update_absents(meeting_id=existing.meeting_id, absents=absents)

        affected = self._fineable(list(diff.affected))
        outcome = self._recalculation.recalculate(affected, self._meetings.list_chronological())

        logger.info(
            "meeting_updated",
            meeting_id=existing.meeting_id,
            newly_absent=len(diff.newly_absent),
            newly_present=len(diff.newly_present),
            affected=len(affected),
        )
        return MeetingSaveResult(
            meeting_id=existing.meeting_id,
            is_update=True,
            fines_added=outcome.fines_added,
            fines_removed=outcome.fines_removed,
            affected_members=len(diff.affected),
        )

    def get_meeting_by_date(self, meeting_date: date) -> Optional[Meeting]:
        return self._meetings.get_by_date(meeting_date)

    def get_attendance_sheet(self) -> dict:
        member_ids = self._active_roster()
        records = []
        for meeting in self._meetings.list_chronological():
            absent = set(meeting.absents)
            records.append(
                {
                    "date": meeting.meeting_date.isoformat(),
                    "attendance": [{"memberId": m, "present": m not in absent} for m in member_ids],
                }
            )
        return {"attendanceRecords": records, "memberIds": member_ids}

    def get_meeting_fines(self, meeting_id: int) -> dict:
        if not self._meetings.get_by_id(meeting_id):
            raise NotFoundError("Meeting not found.")

        fined = [
            f for f in self._members.list_fined_members(event_id=meeting_id, event_type=FineType.MEETING)
            if f.total_amount > 0
        ]
        return {
            "finedMembers": [
                {
                    "member_id": f.member_id,
                    "name": f.name,
                    "fines": [
                        {
                            "fineId": fine.fine_id,
                            "amount": fine.amount,
                            "date": fine.fine_date.isoformat(),
                            "eventId": fine.event_id,
                            "eventType": fine.event_type.value,
                        }
                        for fine in f.fines
                    ],
                    "totalFineAmount": f.total_amount,
                    "fineCount": len(f.fines),
                }
                for f in fined
            ],
            "totalFinedMembers": len(fined),
            "totalFineAmount": sum(f.total_amount for f in fined),
        }
