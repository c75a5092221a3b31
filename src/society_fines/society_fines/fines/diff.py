from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from ..common.identifiers import normalize_member_ids


@dataclass(frozen=True)
class AttendanceDiff:
    """Transitions between two absentee rosters of the same event."""

    newly_absent: tuple[int, ...]
    newly_present: tuple[int, ...]

    @property
    def affected(self) -> tuple[int, ...]:
        return tuple(sorted(set(self.newly_absent) | set(self.newly_present)))

    @property
    def has_changes(self) -> bool:
        return bool(self.newly_absent or self.newly_present)


def diff_absentees(previous: Iterable[Any], new: Iterable[Any]) -> AttendanceDiff:
    """Compute ``new - previous`` and ``previous - new``.

    Ids are normalized first, so ``"206"`` and ``206`` are the same member.
    Order follows the input rosters.
    """

    prev_ids = normalize_member_ids(previous)
    new_ids = normalize_member_ids(new)
    prev_set = set(prev_ids)
    new_set = set(new_ids)

    return AttendanceDiff(
        newly_absent=tuple(m for m in new_ids if m not in prev_set),
        newly_present=tuple(m for m in prev_ids if m not in new_set),
    )


def present_members(roster: Iterable[Any], absent: Iterable[Any]) -> list[int]:
    """Roster members not marked absent; used when an event is first created."""

    absent_set = set(normalize_member_ids(absent))
    return [m for m in normalize_member_ids(roster) if m not in absent_set]
