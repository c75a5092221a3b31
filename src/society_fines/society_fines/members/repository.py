from __future__ import annotations

from datetime import datetime
from typing import Collection, Iterable, Optional, Protocol, Sequence

from ..core.enums import FineType, MemberStatus
from .model import Fine, FinedMember, Member


class MemberRepository(Protocol):
    """Member store.

    Every method is a single-document (single-row-set) atomic operation;
    there is no transaction spanning several calls.
    """

    def get_by_id(self, member_id: int) -> Optional[Member]:
        raise NotImplementedError

    def get_many(self, member_ids: Iterable[int]) -> Sequence[Member]:
        """Unknown ids are silently skipped."""

        raise NotImplementedError

    def list_active(
        self,
        *,
        exclude_statuses: Collection[MemberStatus] = (),
        exclude_roles: Collection[str] = (),
    ) -> Sequence[Member]:
        """Members without ``deactivated_at``, ordered by member_id."""

        raise NotImplementedError

    # --- fines -------------------------------------------------------------

    def list_fines(self, member_id: int) -> Sequence[Fine]:
        raise NotImplementedError

    def has_fine(self, member_id: int, *, event_id: int, event_type: FineType) -> bool:
        raise NotImplementedError

    def add_fine(
        self,
        member_id: int,
        *,
        event_id: int,
        event_type: FineType,
        amount: int,
        fine_date: datetime,
    ) -> bool:
        """Insert a fine unless one with the same (member, event, type) exists.

        Must be a single atomic conditional insert. Returns True if inserted.
        """

        raise NotImplementedError

    def remove_fines(self, member_id: int, *, event_id: int, event_type: FineType) -> int:
        raise NotImplementedError

    def remove_fines_for_members(
        self,
        member_ids: Iterable[int],
        *,
        event_type: FineType,
        event_id: Optional[int] = None,
    ) -> int:
        raise NotImplementedError

    def remove_fines_for_event(self, *, event_id: int, event_types: Collection[FineType]) -> int:
        raise NotImplementedError

    def members_with_fine(
        self,
        *,
        event_id: int,
        event_types: Collection[FineType],
        member_ids: Optional[Iterable[int]] = None,
    ) -> set[int]:
        raise NotImplementedError

    def list_fined_members(self, *, event_id: int, event_type: FineType) -> Sequence[FinedMember]:
        raise NotImplementedError

    # --- consecutive meeting absences ----------------------------------------

    def increment_meeting_absents(self, member_id: int) -> Optional[int]:
        """Atomically add one; returns the new value, or None for unknown members."""

        raise NotImplementedError

    def reset_meeting_absents(self, member_id: int) -> bool:
        """Set to 0 only if currently > 0. Returns True if a row changed."""

        raise NotImplementedError

    def reset_meeting_absents_many(self, member_ids: Iterable[int]) -> int:
        raise NotImplementedError
