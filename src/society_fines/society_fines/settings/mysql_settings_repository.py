from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import SystemSetting
from .repository import SettingsRepository


def _to_setting(r: dict) -> SystemSetting:
    return SystemSetting(
        setting_name=r["setting_name"],
        setting_value=r["setting_value"],
        setting_type=r["setting_type"],
        description=r.get("description") or "",
        effective_from=r.get("effective_from"),
        updated_at=r.get("updated_at"),
    )


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, setting_name: str) -> Optional[SystemSetting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT setting_name, setting_value, setting_type, description, effective_from, updated_at
                FROM system_settings
                WHERE setting_name=%s
                """,
                (setting_name,),
            )
            r = fetchone(cur)
            return _to_setting(r) if r else None

    def list_all(self) -> Sequence[SystemSetting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT setting_name, setting_value, setting_type, description, effective_from, updated_at
                FROM system_settings
                ORDER BY setting_type, setting_name
                """
            )
            return [_to_setting(r) for r in fetchall(cur)]

    def upsert(
        self,
        *,
        setting_name: str,
        setting_value: Any,
        setting_type: str,
        description: str = "",
        effective_from: Optional[datetime] = None,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO system_settings(setting_name, setting_value, setting_type, description, effective_from, updated_at)
                VALUES(%s,%s,%s,%s,%s,NOW())
                ON DUPLICATE KEY UPDATE
                    setting_value=VALUES(setting_value),
                    effective_from=VALUES(effective_from),
                    description=IF(VALUES(description) = '', description, VALUES(description)),
                    updated_at=NOW()
                """,
                (setting_name, str(setting_value), setting_type, description, effective_from),
            )
