from __future__ import annotations

from typing import Protocol

from .model import OfficerRoster


class OfficerRepository(Protocol):
    def get_roster(self) -> OfficerRoster:
        """Current office holders; an empty roster when none are configured."""

        raise NotImplementedError
