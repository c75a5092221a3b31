from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import FineType, MemberStatus


@dataclass(frozen=True)
class Fine:
    """A monetary penalty tagged with the event that triggered it.

    Fines are never edited in place: a correction removes and re-adds.
    """

    member_id: int
    event_id: int
    event_type: FineType
    amount: int
    fine_date: datetime
    fine_id: Optional[int] = None

    @property
    def key(self) -> tuple[int, int, FineType]:
        return (self.member_id, self.event_id, self.event_type)


@dataclass(frozen=True)
class Member:
    member_id: int
    name: str
    area: Optional[str]
    status: MemberStatus
    roles: frozenset[str] = frozenset()
    meeting_absents: int = 0
    deactivated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.deactivated_at is None


@dataclass(frozen=True)
class FinedMember:
    """Read-model: a member together with their fines for one event."""

    member_id: int
    name: str
    fines: tuple[Fine, ...]

    @property
    def total_amount(self) -> int:
        return sum(f.amount for f in self.fines)
