from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Iterator, Sequence, overload


@dataclass(frozen=True)
class Meeting:
    meeting_id: int
    meeting_date: date
    absents: tuple[int, ...] = ()


class MeetingHistory(Sequence[Meeting]):
    """Meetings in non-decreasing date order.

    Construction rejects out-of-order input, so holding a ``MeetingHistory``
    is proof the replay order holds. Use ``from_unordered`` to sort.
    """

    def __init__(self, meetings: Iterable[Meeting] = ()):
        items = tuple(meetings)
        for earlier, later in zip(items, items[1:]):
            if later.meeting_date < earlier.meeting_date:
                raise ValueError(
                    f"Meeting {later.meeting_id} ({later.meeting_date}) precedes "
                    f"meeting {earlier.meeting_id} ({earlier.meeting_date})"
                )
        self._items = items

    @classmethod
    def from_unordered(cls, meetings: Iterable[Meeting]) -> "MeetingHistory":
        return cls(sorted(meetings, key=lambda m: (m.meeting_date, m.meeting_id)))

    @overload
    def __getitem__(self, index: int) -> Meeting: ...

    @overload
    def __getitem__(self, index: slice) -> "MeetingHistory": ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return MeetingHistory(self._items[index])
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Meeting]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"MeetingHistory({len(self._items)} meetings)"
