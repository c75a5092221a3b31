from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

import structlog

from ..common.datetime_utils import now_local
from ..core.enums import FineType
from ..members.repository import MemberRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FineApplication:
    added: bool
    # Attendance fines removed because a work fine supersedes them.
    superseded: int = 0


class FineLedger:
    """Applies and removes tagged fines on member ledgers.

    At most one fine exists per (member, event, type): the insert is a single
    conditional write in the member store. A work fine for a funeral always
    replaces a plain attendance fine for the same funeral; the reverse never
    happens automatically.

    Each call is its own write; nothing here spans several members.
    """

    def __init__(self, members: MemberRepository, *, clock: Callable[[], datetime] = now_local):
        self._members = members
        self._clock = clock

    def apply_fine(self, member_id: int, *, event_id: int, fine_type: FineType, amount: int) -> FineApplication:
        superseded = 0
        if fine_type.is_work:
            superseded = self._members.remove_fines(member_id, event_id=event_id, event_type=FineType.FUNERAL)

        added = self._members.add_fine(
            member_id,
            event_id=event_id,
            event_type=fine_type,
            amount=int(amount),
            fine_date=self._clock(),
        )
        if not added:
            logger.debug("fine_exists", member_id=member_id, event_id=event_id, fine_type=fine_type.value)
        return FineApplication(added=added, superseded=superseded)

    def remove_fine(self, member_id: int, *, event_id: int, fine_type: FineType) -> int:
        return self._members.remove_fines(member_id, event_id=event_id, event_type=fine_type)

    def has_fine(self, member_id: int, *, event_id: int, fine_type: FineType) -> bool:
        return self._members.has_fine(member_id, event_id=event_id, event_type=fine_type)
