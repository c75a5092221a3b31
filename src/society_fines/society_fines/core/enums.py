from __future__ import annotations

from enum import Enum


class MemberStatus(str, Enum):
    """Membership status; some statuses waive attendance obligations."""

    REGULAR = "regular"
    FREE = "free"
    ATTENDANCE_FREE = "attendance-free"
    FUNERAL_FREE = "funeral-free"


class FineType(str, Enum):
    """Closed set of fine kinds; stored as the fine's event type."""

    MEETING = "meeting"
    FUNERAL = "funeral"
    FUNERAL_WORK = "funeral-work"
    CEMETERY_WORK = "cemetery-work"
    COMMON_WORK = "common-work"
    EXTRA_DUE = "extraDue"

    @property
    def is_work(self) -> bool:
        return self in (FineType.FUNERAL_WORK, FineType.CEMETERY_WORK)

    @property
    def is_funeral_event(self) -> bool:
        """Fine kinds whose event id references a funeral."""
        return self in (FineType.FUNERAL, FineType.FUNERAL_WORK, FineType.CEMETERY_WORK, FineType.EXTRA_DUE)


class OfficerPosition(str, Enum):
    CHAIRMAN = "chairman"
    SECRETARY = "secretary"
    VICE_CHAIRMAN = "vice-chairman"
    VICE_SECRETARY = "vice-secretary"
    TREASURER = "treasurer"
    LOAN_TREASURER = "loan-treasurer"
    SPEAKER_HANDLER = "speaker-handler"
    AUDITOR = "auditor"


class AssignmentKind(str, Enum):
    """Funeral duty lists."""

    CEMETERY = "cemetery"
    FUNERAL = "funeral"
    REMOVED = "removed"


class FuneralRoster(str, Enum):
    """The three independent absentee rosters carried by a funeral."""

    EVENT = "event"
    FUNERAL_WORK = "funeral-work"
    CEMETERY_WORK = "cemetery-work"

    @property
    def fine_type(self) -> FineType:
        if self is FuneralRoster.EVENT:
            return FineType.FUNERAL
        if self is FuneralRoster.FUNERAL_WORK:
            return FineType.FUNERAL_WORK
        if self is FuneralRoster.CEMETERY_WORK:
            return FineType.CEMETERY_WORK
        raise ValueError(f"Unhandled funeral roster: {self!r}")
