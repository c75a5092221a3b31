from __future__ import annotations

from ..core.enums import OfficerPosition
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AreaAdmin, OfficerRoster
from .repository import OfficerRepository


def _opt_int(value) -> int | None:
    return int(value) if value is not None else None


class MySQLOfficerRepository(OfficerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_roster(self) -> OfficerRoster:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT position, member_id FROM officer_positions WHERE member_id IS NOT NULL")
            positions = {OfficerPosition(r["position"]): int(r["member_id"]) for r in fetchall(cur)}

            cur.execute("SELECT area, member_id, helper1_id, helper2_id FROM area_admins ORDER BY area")
            area_admins = tuple(
                AreaAdmin(
                    area=r["area"],
                    member_id=_opt_int(r.get("member_id")),
                    helper1_id=_opt_int(r.get("helper1_id")),
                    helper2_id=_opt_int(r.get("helper2_id")),
                )
                for r in fetchall(cur)
            )

        return OfficerRoster(positions=positions, area_admins=area_admins)
