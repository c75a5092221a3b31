from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class AttendanceStats:
    """Aggregates derived from the roster size, absentee count and fine amount."""

    total_expected: int
    total_present: int
    total_absent: int
    fine_amount: int
    total_fine_amount: int

    @classmethod
    def compute(cls, *, expected: int, absent: int, fine_amount: int) -> "AttendanceStats":
        return cls(
            total_expected=expected,
            total_present=expected - absent,
            total_absent=absent,
            fine_amount=fine_amount,
            total_fine_amount=absent * fine_amount,
        )

    @property
    def attendance_rate(self) -> float:
        if self.total_expected <= 0:
            return 0.0
        return round(self.total_present / self.total_expected * 100, 1)

    def to_dict(self) -> dict:
        return {
            "totalExpectedMembers": self.total_expected,
            "totalPresentMembers": self.total_present,
            "totalAbsentMembers": self.total_absent,
            "attendanceRate": self.attendance_rate,
            "fineAmount": self.fine_amount,
            "totalFineAmount": self.total_fine_amount,
        }


@dataclass(frozen=True)
class CommonWork:
    work_id: int
    work_date: date
    title: str
    remarks: str = ""
    absents: tuple[int, ...] = ()
    total_expected: int = 0
    total_present: int = 0
    total_fine_amount: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def attendance_rate(self) -> float:
        if self.total_expected <= 0:
            return 0.0
        return round(self.total_present / self.total_expected * 100, 1)


@dataclass(frozen=True)
class CommonWorkDraft:
    work_date: date
    title: str
    remarks: str
    absents: tuple[int, ...]
    stats: AttendanceStats
