from __future__ import annotations

from typing import Iterable

from ...core.constants import ATTENDANCE_EXEMPT_STATUSES, FUNERAL_EXEMPT_POSITIONS
from ...members.model import Member
from .base import EventContext, ExemptionPolicy


class FuneralAttendanceExemption(ExemptionPolicy):
    """Exempt from the funeral attendance fine:

    - members on the cemetery/funeral duty lists or the removed list
    - free and attendance-free members
    - officers (auditor excluded)
    - the area admin and helpers of the deceased member's area only
    """

    def exempt_members(self, context: EventContext, candidates: Iterable[Member]) -> frozenset[int]:
        officers = context.officers.holders(FUNERAL_EXEMPT_POSITIONS)
        officers |= context.officers.area_admin_ids(context.area)
        excluded = set(context.assigned_ids) | set(context.removed_ids) | officers

        return frozenset(
            m.member_id
            for m in candidates
            if m.member_id in excluded or m.status in ATTENDANCE_EXEMPT_STATUSES
        )

