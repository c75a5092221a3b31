from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import CommonWork, CommonWorkDraft
from .repository import CommonWorkRepository

_COLUMNS = """
    work_id, work_date, title, remarks, total_expected, total_present,
    total_fine_amount, created_at, updated_at
"""


class MySQLCommonWorkRepository(CommonWorkRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _hydrate(self, cur, r: dict) -> CommonWork:
        work_id = int(r["work_id"])
        cur.execute(
            "SELECT member_id FROM common_work_absents WHERE work_id=%s ORDER BY position",
            (work_id,),
        )
        absents = tuple(int(a["member_id"]) for a in fetchall(cur))
        return CommonWork(
            work_id=work_id,
            work_date=r["work_date"],
            title=str(r["title"]),
            remarks=str(r.get("remarks") or ""),
            absents=absents,
            total_expected=int(r["total_expected"] or 0),
            total_present=int(r["total_present"] or 0),
            total_fine_amount=int(r["total_fine_amount"] or 0),
            created_at=r.get("created_at"),
            updated_at=r.get("updated_at"),
        )

    @staticmethod
    def _write_absents(cur, work_id: int, member_ids: Sequence[int]) -> None:
        cur.execute("DELETE FROM common_work_absents WHERE work_id=%s", (work_id,))
        if member_ids:
            cur.executemany(
                "INSERT INTO common_work_absents(work_id, position, member_id) VALUES(%s,%s,%s)",
                [(work_id, pos, int(m)) for pos, m in enumerate(member_ids)],
            )

    def get_by_id(self, work_id: int) -> Optional[CommonWork]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM common_works WHERE work_id=%s", (int(work_id),))
            r = fetchone(cur)
            return self._hydrate(cur, r) if r else None

    def get_by_date(self, work_date: date) -> Optional[CommonWork]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM common_works WHERE work_date=%s ORDER BY work_id LIMIT 1",
                (work_date,),
            )
            r = fetchone(cur)
            return self._hydrate(cur, r) if r else None

    def create(self, draft: CommonWorkDraft) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO common_works(work_date, title, remarks, total_expected, total_present, total_fine_amount)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    draft.work_date,
                    draft.title,
                    draft.remarks,
                    draft.stats.total_expected,
                    draft.stats.total_present,
                    draft.stats.total_fine_amount,
                ),
            )
            work_id = int(cur.lastrowid)
            self._write_absents(cur, work_id, draft.absents)
            return work_id

    def update(self, *, work_id: int, draft: CommonWorkDraft) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE common_works
                SET title=%s, remarks=%s, total_expected=%s, total_present=%s, total_fine_amount=%s
                WHERE work_id=%s
                """,
                (
                    draft.title,
                    draft.remarks,
                    draft.stats.total_expected,
                    draft.stats.total_present,
                    draft.stats.total_fine_amount,
                    int(work_id),
                ),
            )
            self._write_absents(cur, int(work_id), draft.absents)

    def list_by_year(self, year: int) -> Sequence[CommonWork]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM common_works
                WHERE work_date BETWEEN %s AND %s
                ORDER BY work_date, work_id
                """,
                (date(int(year), 1, 1), date(int(year), 12, 31)),
            )
            rows = fetchall(cur)
            return [self._hydrate(cur, r) for r in rows]

    def delete(self, work_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM common_work_absents WHERE work_id=%s", (int(work_id),))
            cur.execute("DELETE FROM common_works WHERE work_id=%s", (int(work_id),))
            return cur.rowcount > 0
