from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import FuneralRoster
from .model import AssignmentUpdate, Funeral, NewFuneral


class FuneralRepository(Protocol):
    def get_by_id(self, funeral_id: int) -> Optional[Funeral]:
        raise NotImplementedError

    def get_by_deceased_id(self, deceased_id: str) -> Optional[Funeral]:
        raise NotImplementedError

    def create(self, funeral: NewFuneral) -> int:
        raise NotImplementedError

    def update_assignments(self, *, funeral_id: int, update: AssignmentUpdate) -> bool:
        raise NotImplementedError

    def update_roster(self, *, funeral_id: int, roster: FuneralRoster, member_ids: Sequence[int]) -> bool:
        """Replace one absentee roster; the other two are untouched."""

        raise NotImplementedError

    def add_extra_due_member(self, *, funeral_id: int, member_id: int) -> None:
        raise NotImplementedError

    def list_recent(self, limit: int) -> Sequence[Funeral]:
        """Most recently created first."""

        raise NotImplementedError

    def delete(self, funeral_id: int) -> bool:
        raise NotImplementedError
