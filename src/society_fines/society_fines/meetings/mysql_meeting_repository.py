from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Meeting, MeetingHistory
from .repository import MeetingRepository


class MySQLMeetingRepository(MeetingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _absents(self, cur, meeting_id: int) -> tuple[int, ...]:
        cur.execute(
            "SELECT member_id FROM meeting_absents WHERE meeting_id=%s ORDER BY member_id",
            (int(meeting_id),),
        )
        return tuple(int(r["member_id"]) for r in fetchall(cur))

    def _get_where(self, where: str, params: tuple) -> Optional[Meeting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT meeting_id, meeting_date FROM meetings WHERE {where}", params)
            r = fetchone(cur)
            if not r:
                return None
            return Meeting(
                meeting_id=int(r["meeting_id"]),
                meeting_date=r["meeting_date"],
                absents=self._absents(cur, int(r["meeting_id"])),
            )

    def get_by_id(self, meeting_id: int) -> Optional[Meeting]:
        return self._get_where("meeting_id=%s", (int(meeting_id),))

    def get_by_date(self, meeting_date: date) -> Optional[Meeting]:
        return self._get_where("meeting_date=%s", (meeting_date,))

    def create(self, *, meeting_date: date, absents: Sequence[int]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO meetings(meeting_date) VALUES(%s)", (meeting_date,))
            meeting_id = int(cur.lastrowid)
            if absents:
                cur.executemany(
                    "INSERT INTO meeting_absents(meeting_id, member_id) VALUES(%s,%s)",
                    [(meeting_id, int(m)) for m in absents],
                )
            return meeting_id

    def update_absents(self, *, meeting_id: int, absents: Sequence[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM meetings WHERE meeting_id=%s", (int(meeting_id),))
            if not fetchone(cur):
                return False
            cur.execute("DELETE FROM meeting_absents WHERE meeting_id=%s", (int(meeting_id),))
            if absents:
                cur.executemany(
                    "INSERT INTO meeting_absents(meeting_id, member_id) VALUES(%s,%s)",
                    [(int(meeting_id), int(m)) for m in absents],
                )
            return True

    def list_chronological(self) -> MeetingHistory:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT meeting_id, meeting_date FROM meetings ORDER BY meeting_date ASC, meeting_id ASC")
            meetings = fetchall(cur)
            cur.execute("SELECT meeting_id, member_id FROM meeting_absents ORDER BY meeting_id, member_id")
            absents: dict[int, list[int]] = {}
            for r in fetchall(cur):
                absents.setdefault(int(r["meeting_id"]), []).append(int(r["member_id"]))

        return MeetingHistory(
            Meeting(
                meeting_id=int(r["meeting_id"]),
                meeting_date=r["meeting_date"],
                absents=tuple(absents.get(int(r["meeting_id"]), ())),
            )
            for r in meetings
        )
