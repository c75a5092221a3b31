from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import FuneralRoster


@dataclass(frozen=True)
class Funeral:
    """A funeral event.

    ``member_id`` is the reporting (living) member whose area is the
    funeral's area; ``deceased_id`` is that member's id or a dependent's id.
    The three absentee rosters are tracked independently.
    """

    funeral_id: int
    funeral_date: date
    member_id: int
    deceased_id: str
    cemetery_assignments: tuple[int, ...] = ()
    funeral_assignments: tuple[int, ...] = ()
    removed_members: tuple[int, ...] = ()
    event_absents: tuple[int, ...] = ()
    funeral_work_absents: tuple[int, ...] = ()
    cemetery_work_absents: tuple[int, ...] = ()
    extra_due_members: tuple[int, ...] = ()

    def roster(self, kind: FuneralRoster) -> tuple[int, ...]:
        if kind is FuneralRoster.EVENT:
            return self.event_absents
        if kind is FuneralRoster.FUNERAL_WORK:
            return self.funeral_work_absents
        if kind is FuneralRoster.CEMETERY_WORK:
            return self.cemetery_work_absents
        raise ValueError(f"Unhandled funeral roster: {kind!r}")

    @property
    def assigned_ids(self) -> frozenset[int]:
        return frozenset(self.cemetery_assignments) | frozenset(self.funeral_assignments)


@dataclass(frozen=True)
class NewFuneral:
    funeral_date: date
    member_id: int
    deceased_id: str
    cemetery_assignments: tuple[int, ...] = ()
    funeral_assignments: tuple[int, ...] = ()
    removed_members: tuple[int, ...] = ()


@dataclass(frozen=True)
class AssignmentUpdate:
    cemetery_assignments: tuple[int, ...]
    funeral_assignments: tuple[int, ...]
    removed_members: tuple[int, ...]
    funeral_date: Optional[date] = None
