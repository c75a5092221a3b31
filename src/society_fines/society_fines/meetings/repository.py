from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Meeting, MeetingHistory


class MeetingRepository(Protocol):
    def get_by_id(self, meeting_id: int) -> Optional[Meeting]:
        raise NotImplementedError

    def get_by_date(self, meeting_date: date) -> Optional[Meeting]:
        raise NotImplementedError

    def create(self, *, meeting_date: date, absents: Sequence[int]) -> int:
        raise NotImplementedError

    def update_absents(self, *, meeting_id: int, absents: Sequence[int]) -> bool:
        raise NotImplementedError

    def list_chronological(self) -> MeetingHistory:
        """All meetings ordered by date ascending."""

        raise NotImplementedError
