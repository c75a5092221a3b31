from __future__ import annotations

from typing import Iterable

from ...core.constants import ATTENDANCE_EXEMPT_STATUSES
from ...members.model import Member
from .base import EventContext, ExemptionPolicy


class MeetingExemption(ExemptionPolicy):
    """Free and attendance-free members are left off the meeting roster."""

    def exempt_members(self, context: EventContext, candidates: Iterable[Member]) -> frozenset[int]:
        return frozenset(m.member_id for m in candidates if m.status in ATTENDANCE_EXEMPT_STATUSES)
