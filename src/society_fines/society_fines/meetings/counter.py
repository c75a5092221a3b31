from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import structlog

from ..core.constants import MEETING_FINE_AMOUNT, MEETING_FINE_EVERY
from ..core.enums import FineType
from ..fines.ledger import FineLedger
from ..members.repository import MemberRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CounterOutcome:
    fines_added: int = 0
    counters_incremented: int = 0
    counters_reset: int = 0
    skipped: int = 0


class ConsecutiveAbsenceCounter:
    """Per-member run length of unbroken meeting absences.

    Every ``every``-th consecutive absence levies a meeting fine. A presence
    resets the run to 0 but never takes back a fine already levied.
    """

    def __init__(
        self,
        members: MemberRepository,
        ledger: FineLedger,
        *,
        fine_amount: int = MEETING_FINE_AMOUNT,
        every: int = MEETING_FINE_EVERY,
    ):
        self._members = members
        self._ledger = ledger
        self._fine_amount = int(fine_amount)
        self._every = int(every)

    def record_absence(self, member_id: int, *, meeting_id: int) -> bool | None:
        """Returns whether a fine was added, or None for an unknown member."""

        count = self._members.increment_meeting_absents(member_id)
        if count is None:
            return None
        if count > 0 and count % self._every == 0:
            return self._ledger.apply_fine(
                member_id,
                event_id=meeting_id,
                fine_type=FineType.MEETING,
                amount=self._fine_amount,
            ).added
        return False

    def record_presence(self, member_id: int) -> bool:
        return self._members.reset_meeting_absents(member_id)

    def apply(self, *, meeting_id: int, absent: Iterable[int], present: Iterable[int]) -> CounterOutcome:
        """Reset present members, then count absences; per-member failures are logged and skipped."""

        fines_added = incremented = reset = skipped = 0

        for member_id in present:
            try:
                if self.record_presence(member_id):
                    reset += 1
            except Exception:
                logger.exception("meeting_counter_reset_failed", member_id=member_id, meeting_id=meeting_id)
                skipped += 1

        for member_id in absent:
            try:
                fined = self.record_absence(member_id, meeting_id=meeting_id)
            except Exception:
                logger.exception("meeting_counter_increment_failed", member_id=member_id, meeting_id=meeting_id)
                skipped += 1
                continue
            if fined is None:
                skipped += 1
                continue
            incremented += 1
            if fined:
                fines_added += 1

        return CounterOutcome(
            fines_added=fines_added,
            counters_incremented=incremented,
            counters_reset=reset,
            skipped=skipped,
        )
