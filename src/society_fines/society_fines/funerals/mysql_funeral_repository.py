from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import AssignmentKind, FuneralRoster
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AssignmentUpdate, Funeral, NewFuneral
from .repository import FuneralRepository


class MySQLFuneralRepository(FuneralRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _hydrate(self, cur, r: dict) -> Funeral:
        funeral_id = int(r["funeral_id"])

        cur.execute(
            "SELECT kind, member_id FROM funeral_assignments WHERE funeral_id=%s ORDER BY kind, position",
            (funeral_id,),
        )
        assignments: dict[str, list[int]] = {}
        for a in fetchall(cur):
            assignments.setdefault(a["kind"], []).append(int(a["member_id"]))

        cur.execute(
            "SELECT roster, member_id FROM funeral_absents WHERE funeral_id=%s ORDER BY roster, position",
            (funeral_id,),
        )
        rosters: dict[str, list[int]] = {}
        for a in fetchall(cur):
            rosters.setdefault(a["roster"], []).append(int(a["member_id"]))

        cur.execute(
            "SELECT member_id FROM funeral_extra_dues WHERE funeral_id=%s ORDER BY member_id",
            (funeral_id,),
        )
        extra_dues = tuple(int(a["member_id"]) for a in fetchall(cur))

        return Funeral(
            funeral_id=funeral_id,
            funeral_date=r["funeral_date"],
            member_id=int(r["member_id"]),
            deceased_id=str(r["deceased_id"]),
            cemetery_assignments=tuple(assignments.get(AssignmentKind.CEMETERY.value, ())),
            funeral_assignments=tuple(assignments.get(AssignmentKind.FUNERAL.value, ())),
            removed_members=tuple(assignments.get(AssignmentKind.REMOVED.value, ())),
            event_absents=tuple(rosters.get(FuneralRoster.EVENT.value, ())),
            funeral_work_absents=tuple(rosters.get(FuneralRoster.FUNERAL_WORK.value, ())),
            cemetery_work_absents=tuple(rosters.get(FuneralRoster.CEMETERY_WORK.value, ())),
            extra_due_members=extra_dues,
        )

    def _get_where(self, where: str, params: tuple) -> Optional[Funeral]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT funeral_id, funeral_date, member_id, deceased_id FROM funerals WHERE {where} "
                "ORDER BY funeral_id DESC LIMIT 1",
                params,
            )
            r = fetchone(cur)
            return self._hydrate(cur, r) if r else None

    def get_by_id(self, funeral_id: int) -> Optional[Funeral]:
        return self._get_where("funeral_id=%s", (int(funeral_id),))

    def get_by_deceased_id(self, deceased_id: str) -> Optional[Funeral]:
        return self._get_where("deceased_id=%s", (str(deceased_id),))

    @staticmethod
    def _write_assignments(cur, funeral_id: int, kind: AssignmentKind, member_ids: Sequence[int]) -> None:
        cur.execute("DELETE FROM funeral_assignments WHERE funeral_id=%s AND kind=%s", (funeral_id, kind.value))
        if member_ids:
            cur.executemany(
                "INSERT INTO funeral_assignments(funeral_id, kind, position, member_id) VALUES(%s,%s,%s,%s)",
                [(funeral_id, kind.value, pos, int(m)) for pos, m in enumerate(member_ids)],
            )

    def create(self, funeral: NewFuneral) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO funerals(funeral_date, member_id, deceased_id) VALUES(%s,%s,%s)",
                (funeral.funeral_date, int(funeral.member_id), str(funeral.deceased_id)),
            )
            funeral_id = int(cur.lastrowid)
            self._write_assignments(cur, funeral_id, AssignmentKind.CEMETERY, funeral.cemetery_assignments)
            self._write_assignments(cur, funeral_id, AssignmentKind.FUNERAL, funeral.funeral_assignments)
            self._write_assignments(cur, funeral_id, AssignmentKind.REMOVED, funeral.removed_members)
            return funeral_id

    def update_assignments(self, *, funeral_id: int, update: AssignmentUpdate) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM funerals WHERE funeral_id=%s", (int(funeral_id),))
            if not fetchone(cur):
                return False
            if update.funeral_date is not None:
                cur.execute(
                    "UPDATE funerals SET funeral_date=%s WHERE funeral_id=%s",
                    (update.funeral_date, int(funeral_id)),
                )
            self._write_assignments(cur, int(funeral_id), AssignmentKind.CEMETERY, update.cemetery_assignments)
            self._write_assignments(cur, int(funeral_id), AssignmentKind.FUNERAL, update.funeral_assignments)
            self._write_assignments(cur, int(funeral_id), AssignmentKind.REMOVED, update.removed_members)
            return True

    def update_roster(self, *, funeral_id: int, roster: FuneralRoster, member_ids: Sequence[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM funerals WHERE funeral_id=%s", (int(funeral_id),))
            if not fetchone(cur):
                return False
            cur.execute(
                "DELETE FROM funeral_absents WHERE funeral_id=%s AND roster=%s",
                (int(funeral_id), roster.value),
            )
            if member_ids:
                cur.executemany(
                    "INSERT INTO funeral_absents(funeral_id, roster, position, member_id) VALUES(%s,%s,%s,%s)",
                    [(int(funeral_id), roster.value, pos, int(m)) for pos, m in enumerate(member_ids)],
                )
            return True

    def add_extra_due_member(self, *, funeral_id: int, member_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO funeral_extra_dues(funeral_id, member_id) VALUES(%s,%s)",
                (int(funeral_id), int(member_id)),
            )

    def list_recent(self, limit: int) -> Sequence[Funeral]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT funeral_id, funeral_date, member_id, deceased_id
                FROM funerals
                ORDER BY funeral_id DESC
                LIMIT %s
                """,
                (int(limit),),
            )
            rows = fetchall(cur)
            return [self._hydrate(cur, r) for r in rows]

    def delete(self, funeral_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            for table in ("funeral_assignments", "funeral_absents", "funeral_extra_dues"):
                cur.execute(f"DELETE FROM {table} WHERE funeral_id=%s", (int(funeral_id),))
            cur.execute("DELETE FROM funerals WHERE funeral_id=%s", (int(funeral_id),))
            return cur.rowcount > 0
