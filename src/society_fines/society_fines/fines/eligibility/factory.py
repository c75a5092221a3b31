from __future__ import annotations

from dataclasses import dataclass

from ...core.enums import FineType
from .base import ExemptionPolicy, NoExemption
from .common_work_policy import CommonWorkExemption
from .funeral_policy import FuneralAttendanceExemption
from .meeting_policy import MeetingExemption


@dataclass
class ExemptionPolicyFactory:
    """Factory Pattern: choose the exemption rule for a fine type."""

    def for_fine_type(self, fine_type: FineType) -> ExemptionPolicy:
        if fine_type is FineType.MEETING:
            return MeetingExemption()
        if fine_type is FineType.FUNERAL:
            return FuneralAttendanceExemption()
        if fine_type in (FineType.FUNERAL_WORK, FineType.CEMETERY_WORK):
            return NoExemption()
        if fine_type is FineType.COMMON_WORK:
            return CommonWorkExemption()
        if fine_type is FineType.EXTRA_DUE:
            return NoExemption()
        raise ValueError(f"Unhandled fine type: {fine_type!r}")
