from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.constants import MEETING_FINE_AMOUNT
from ..core.enums import FineType

FUNERAL_WORK_FINE_VALUE = "FUNERAL_WORK_FINE_VALUE"
CEMETERY_WORK_FINE_VALUE = "CEMETERY_WORK_FINE_VALUE"
FUNERAL_ATTENDANCE_FINE_VALUE = "FUNERAL_ATTENDANCE_FINE_VALUE"
COMMON_WORK_FINE_VALUE = "COMMON_WORK_FINE_VALUE"


@dataclass(frozen=True)
class SystemSetting:
    setting_name: str
    setting_value: Any
    setting_type: str
    description: str = ""
    effective_from: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_effective(self, at: datetime) -> bool:
        return self.effective_from is None or at >= self.effective_from


@dataclass(frozen=True)
class FineSettings:
    funeral_work_fine: int
    cemetery_work_fine: int
    funeral_attendance_fine: int
    common_work_fine: int

    def amount_for(self, fine_type: FineType) -> int:
        if fine_type is FineType.MEETING:
            return MEETING_FINE_AMOUNT
        if fine_type is FineType.FUNERAL:
            return self.funeral_attendance_fine
        if fine_type is FineType.FUNERAL_WORK:
            return self.funeral_work_fine
        if fine_type is FineType.CEMETERY_WORK:
            return self.cemetery_work_fine
        if fine_type is FineType.COMMON_WORK:
            return self.common_work_fine
        if fine_type is FineType.EXTRA_DUE:
            raise ValueError("extraDue amounts are set per due, not configured")
        raise ValueError(f"Unhandled fine type: {fine_type!r}")

    def to_dict(self) -> dict:
        return {
            "funeralWorkFine": self.funeral_work_fine,
            "cemeteryWorkFine": self.cemetery_work_fine,
            "funeralAttendanceFine": self.funeral_attendance_fine,
            "commonWorkFine": self.common_work_fine,
            "meetingFine": MEETING_FINE_AMOUNT,
        }
