from __future__ import annotations

from dataclasses import dataclass, field
from typing import Collection, Mapping, Optional

from ..core.enums import OfficerPosition


@dataclass(frozen=True)
class AreaAdmin:
    area: str
    member_id: Optional[int] = None
    helper1_id: Optional[int] = None
    helper2_id: Optional[int] = None

    def member_ids(self) -> set[int]:
        return {m for m in (self.member_id, self.helper1_id, self.helper2_id) if m is not None}


@dataclass(frozen=True)
class OfficerRoster:
    """Society office holders: one member per position plus per-area admins."""

    positions: Mapping[OfficerPosition, int] = field(default_factory=dict)
    area_admins: tuple[AreaAdmin, ...] = ()

    def holders(self, positions: Collection[OfficerPosition]) -> set[int]:
        return {self.positions[p] for p in positions if self.positions.get(p) is not None}

    def area_admin_ids(self, area: Optional[str]) -> set[int]:
        """Admin + both helpers of ``area``; nothing when the area is unknown."""

        if not area:
            return set()
        ids: set[int] = set()
        for admin in self.area_admins:
            if admin.area == area:
                ids |= admin.member_ids()
        return ids
