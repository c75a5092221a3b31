from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ...core.enums import FineType
from ...members.model import Member
from ...officers.model import OfficerRoster


@dataclass(frozen=True)
class EventContext:
    """Everything an exemption rule may look at for one event."""

    fine_type: FineType
    event_id: Optional[int] = None
    area: Optional[str] = None
    assigned_ids: frozenset[int] = frozenset()
    removed_ids: frozenset[int] = frozenset()
    officers: OfficerRoster = field(default_factory=OfficerRoster)


class ExemptionPolicy(ABC):
    """Strategy Pattern: decide which candidates are exempt from a fine."""

    @abstractmethod
    def exempt_members(self, context: EventContext, candidates: Iterable[Member]) -> frozenset[int]:
        raise NotImplementedError


class NoExemption(ExemptionPolicy):
    """Nobody is exempt: funeral duty absences and explicit extra dues."""

    def exempt_members(self, context: EventContext, candidates: Iterable[Member]) -> frozenset[int]:
        return frozenset()
