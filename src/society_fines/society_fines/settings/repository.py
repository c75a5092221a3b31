from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

from .model import SystemSetting


class SettingsRepository(Protocol):
    def get(self, setting_name: str) -> Optional[SystemSetting]:
        raise NotImplementedError

    def list_all(self) -> Sequence[SystemSetting]:
        raise NotImplementedError

    def upsert(
        self,
        *,
        setting_name: str,
        setting_value: Any,
        setting_type: str,
        description: str = "",
        effective_from: Optional[datetime] = None,
    ) -> None:
        raise NotImplementedError
