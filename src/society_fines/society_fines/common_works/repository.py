from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import CommonWork, CommonWorkDraft


class CommonWorkRepository(Protocol):
    def get_by_id(self, work_id: int) -> Optional[CommonWork]:
        raise NotImplementedError

    def get_by_date(self, work_date: date) -> Optional[CommonWork]:
        raise NotImplementedError

    def create(self, draft: CommonWorkDraft) -> int:
        raise NotImplementedError

    def update(self, *, work_id: int, draft: CommonWorkDraft) -> None:
        raise NotImplementedError

    def list_by_year(self, year: int) -> Sequence[CommonWork]:
        """Works dated in the given calendar year, oldest first."""
        raise NotImplementedError

    def delete(self, work_id: int) -> bool:
        raise NotImplementedError
