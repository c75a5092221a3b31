from __future__ import annotations

import os
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

import structlog

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty, require_positive_amount
from ..core.constants import (
    DEFAULT_CEMETERY_WORK_FINE,
    DEFAULT_COMMON_WORK_FINE,
    DEFAULT_FUNERAL_ATTENDANCE_FINE,
    DEFAULT_FUNERAL_WORK_FINE,
    DEFAULT_SETTINGS_CACHE_TTL_SECONDS,
)
from ..core.exceptions import ValidationError
from .model import (
    CEMETERY_WORK_FINE_VALUE,
    COMMON_WORK_FINE_VALUE,
    FUNERAL_ATTENDANCE_FINE_VALUE,
    FUNERAL_WORK_FINE_VALUE,
    FineSettings,
)
from .repository import SettingsRepository

logger = structlog.get_logger(__name__)

FINE_SETTING_DEFAULTS = {
    FUNERAL_WORK_FINE_VALUE: DEFAULT_FUNERAL_WORK_FINE,
    CEMETERY_WORK_FINE_VALUE: DEFAULT_CEMETERY_WORK_FINE,
    FUNERAL_ATTENDANCE_FINE_VALUE: DEFAULT_FUNERAL_ATTENDANCE_FINE,
    COMMON_WORK_FINE_VALUE: DEFAULT_COMMON_WORK_FINE,
}


@dataclass
class _CacheEntry:
    value: Any
    stored_at: float


def _as_amount(value: Any, default: int) -> int:
    try:
        amount = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    return amount if amount > 0 else default


class FineSettingsProvider:
    """Cached access to configurable fine amounts.

    Each setting is cached for ``ttl_seconds``; ``invalidate`` drops one
    entry or the whole cache. Lookup order: stored setting already in
    effect, then the environment variable of the same name, then default.
    """

    def __init__(
        self,
        settings: SettingsRepository,
        *,
        ttl_seconds: float = DEFAULT_SETTINGS_CACHE_TTL_SECONDS,
        environ: Optional[Mapping[str, str]] = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = now_local,
    ):
        self._settings = settings
        self._ttl = float(ttl_seconds)
        self._environ = environ if environ is not None else os.environ
        self._clock = clock
        self._now = now
        self._cache: dict[str, _CacheEntry] = {}

    def get_setting_value(self, setting_name: str, default: Any = None) -> Any:
        cached = self._cache.get(setting_name)
        if cached and (self._clock() - cached.stored_at) < self._ttl:
            return cached.value

        try:
            stored = self._settings.get(setting_name)
        except Exception:
            logger.exception("settings_lookup_failed", setting=setting_name)
            # Not cached: the next call retries storage.
            return self._environ.get(setting_name, default)

        if stored is not None and stored.is_effective(self._now()):
            value = stored.setting_value
        elif setting_name in self._environ:
            value = self._environ[setting_name]
        else:
            value = default

        self._cache[setting_name] = _CacheEntry(value=value, stored_at=self._clock())
        return value

    def get_fine_settings(self) -> FineSettings:
        values = {
            name: _as_amount(self.get_setting_value(name, default), default)
            for name, default in FINE_SETTING_DEFAULTS.items()
        }
        return FineSettings(
            funeral_work_fine=values[FUNERAL_WORK_FINE_VALUE],
            cemetery_work_fine=values[CEMETERY_WORK_FINE_VALUE],
            funeral_attendance_fine=values[FUNERAL_ATTENDANCE_FINE_VALUE],
            common_work_fine=values[COMMON_WORK_FINE_VALUE],
        )

    def invalidate(self, setting_name: Optional[str] = None) -> None:
        if setting_name:
            self._cache.pop(setting_name, None)
        else:
            self._cache.clear()

    def update_setting(
        self,
        *,
        setting_name: str,
        value: Any,
        effective_from: Optional[datetime] = None,
        description: str = "",
    ) -> None:
        name = require_non_empty(setting_name, "Setting name")
        if value is None or str(value).strip() == "":
            raise ValidationError("Setting value is required")
        if name in FINE_SETTING_DEFAULTS:
            value = require_positive_amount(value, name)
            setting_type = "fine"
        else:
            setting_type = "general"

        self._settings.upsert(
            setting_name=name,
            setting_value=value,
            setting_type=setting_type,
            description=description,
            effective_from=effective_from,
        )
        self.invalidate(name)
        logger.info("setting_updated", setting=name, value=value, effective_from=effective_from)
