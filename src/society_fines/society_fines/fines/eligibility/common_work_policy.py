from __future__ import annotations

from typing import Iterable

from ...core.constants import COMMON_WORK_EXEMPT_ROLES, COMMON_WORK_EXEMPT_STATUSES
from ...members.model import Member
from .base import EventContext, ExemptionPolicy


class CommonWorkExemption(ExemptionPolicy):
    """Privileged officers and free members are never fined for communal work."""

    def exempt_members(self, context: EventContext, candidates: Iterable[Member]) -> frozenset[int]:
        return frozenset(
            m.member_id
            for m in candidates
            if (m.roles & COMMON_WORK_EXEMPT_ROLES) or m.status in COMMON_WORK_EXEMPT_STATUSES
        )
