from __future__ import annotations

from datetime import datetime
from typing import Collection, Iterable, Optional, Sequence

from ..core.enums import FineType, MemberStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Fine, FinedMember, Member
from .repository import MemberRepository


def _to_fine(r: dict) -> Fine:
    return Fine(
        fine_id=int(r["fine_id"]),
        member_id=int(r["member_id"]),
        event_id=int(r["event_id"]),
        event_type=FineType(r["event_type"]),
        amount=int(r["amount"]),
        fine_date=r["fine_date"],
    )


class MySQLMemberRepository(MemberRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_roles(self, cur, member_ids: Sequence[int]) -> dict[int, set[str]]:
        roles: dict[int, set[str]] = {}
        if not member_ids:
            return roles
        placeholders, params = in_clause(member_ids)
        cur.execute(f"SELECT member_id, role FROM member_roles WHERE member_id IN {placeholders}", params)
        for r in fetchall(cur):
            roles.setdefault(int(r["member_id"]), set()).add(r["role"])
        return roles

    def _to_members(self, cur, rows: list[dict]) -> list[Member]:
        roles = self._load_roles(cur, [int(r["member_id"]) for r in rows])
        return [
            Member(
                member_id=int(r["member_id"]),
                name=r["name"],
                area=r.get("area"),
                status=MemberStatus(r["status"]),
                roles=frozenset(roles.get(int(r["member_id"]), ())),
                meeting_absents=int(r.get("meeting_absents") or 0),
                deactivated_at=r.get("deactivated_at"),
            )
            for r in rows
        ]

    def get_by_id(self, member_id: int) -> Optional[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT member_id, name, area, status, meeting_absents, deactivated_at
                FROM members
                WHERE member_id=%s
                """,
                (int(member_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return self._to_members(cur, [r])[0]

    def get_many(self, member_ids: Iterable[int]) -> Sequence[Member]:
        ids = [int(m) for m in member_ids]
        if not ids:
            return []
        placeholders, params = in_clause(ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT member_id, name, area, status, meeting_absents, deactivated_at
                FROM members
                WHERE member_id IN {placeholders}
                ORDER BY member_id
                """,
                params,
            )
            return self._to_members(cur, fetchall(cur))

    def list_active(
        self,
        *,
        exclude_statuses: Collection[MemberStatus] = (),
        exclude_roles: Collection[str] = (),
    ) -> Sequence[Member]:
        clauses = ["m.deactivated_at IS NULL"]
        params: list[object] = []

        if exclude_statuses:
            placeholders, values = in_clause([MemberStatus(s).value for s in exclude_statuses])
            clauses.append(f"m.status NOT IN {placeholders}")
            params.extend(values)
        if exclude_roles:
            placeholders, values = in_clause(sorted(exclude_roles))
            clauses.append(
                f"NOT EXISTS (SELECT 1 FROM member_roles mr WHERE mr.member_id = m.member_id AND mr.role IN {placeholders})"
            )
            params.extend(values)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT m.member_id, m.name, m.area, m.status, m.meeting_absents, m.deactivated_at
                FROM members m
                WHERE {where}
                ORDER BY m.member_id
                """,
                tuple(params),
            )
            return self._to_members(cur, fetchall(cur))

    def list_fines(self, member_id: int) -> Sequence[Fine]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT fine_id, member_id, event_id, event_type, amount, fine_date
                FROM fines
                WHERE member_id=%s
                ORDER BY fine_id
                """,
                (int(member_id),),
            )
            return [_to_fine(r) for r in fetchall(cur)]

    def has_fine(self, member_id: int, *, event_id: int, event_type: FineType) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM fines WHERE member_id=%s AND event_id=%s AND event_type=%s LIMIT 1",
                (int(member_id), int(event_id), event_type.value),
            )
            return fetchone(cur) is not None

    def add_fine(
        self,
        member_id: int,
        *,
        event_id: int,
        event_type: FineType,
        amount: int,
        fine_date: datetime,
    ) -> bool:
        # uq_fines_member_event_type makes this a single conditional insert;
        # rowcount is 0 when the (member, event, type) fine already exists
        # or the member is unknown.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO fines(member_id, event_id, event_type, amount, fine_date)
                SELECT %s,%s,%s,%s,%s FROM members WHERE member_id=%s
                """,
                (int(member_id), int(event_id), event_type.value, int(amount), fine_date, int(member_id)),
            )
            return cur.rowcount == 1

    def remove_fines(self, member_id: int, *, event_id: int, event_type: FineType) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM fines WHERE member_id=%s AND event_id=%s AND event_type=%s",
                (int(member_id), int(event_id), event_type.value),
            )
            return int(cur.rowcount)

    def remove_fines_for_members(
        self,
        member_ids: Iterable[int],
        *,
        event_type: FineType,
        event_id: Optional[int] = None,
    ) -> int:
        ids = [int(m) for m in member_ids]
        if not ids:
            return 0
        placeholders, params = in_clause(ids)
        sql = f"DELETE FROM fines WHERE event_type=%s AND member_id IN {placeholders}"
        args: tuple = (event_type.value, *params)
        if event_id is not None:
            sql += " AND event_id=%s"
            args = (*args, int(event_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, args)
            return int(cur.rowcount)

    def remove_fines_for_event(self, *, event_id: int, event_types: Collection[FineType]) -> int:
        if not event_types:
            return 0
        placeholders, params = in_clause([t.value for t in event_types])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"DELETE FROM fines WHERE event_id=%s AND event_type IN {placeholders}",
                (int(event_id), *params),
            )
            return int(cur.rowcount)

    def members_with_fine(
        self,
        *,
        event_id: int,
        event_types: Collection[FineType],
        member_ids: Optional[Iterable[int]] = None,
    ) -> set[int]:
        if not event_types:
            return set()
        type_ph, type_params = in_clause([t.value for t in event_types])
        sql = f"SELECT DISTINCT member_id FROM fines WHERE event_id=%s AND event_type IN {type_ph}"
        args: tuple = (int(event_id), *type_params)

        if member_ids is not None:
            ids = [int(m) for m in member_ids]
            if not ids:
                return set()
            id_ph, id_params = in_clause(ids)
            sql += f" AND member_id IN {id_ph}"
            args = (*args, *id_params)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, args)
            return {int(r["member_id"]) for r in fetchall(cur)}

    def list_fined_members(self, *, event_id: int, event_type: FineType) -> Sequence[FinedMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT f.fine_id, f.member_id, f.event_id, f.event_type, f.amount, f.fine_date, m.name
                FROM fines f
                JOIN members m ON m.member_id = f.member_id
                WHERE f.event_id=%s AND f.event_type=%s
                ORDER BY f.member_id, f.fine_id
                """,
                (int(event_id), event_type.value),
            )
            rows = fetchall(cur)

        grouped: dict[int, tuple[str, list[Fine]]] = {}
        for r in rows:
            name, fines = grouped.setdefault(int(r["member_id"]), (r["name"], []))
            fines.append(_to_fine(r))
        return [FinedMember(member_id=mid, name=name, fines=tuple(fines)) for mid, (name, fines) in grouped.items()]

    def increment_meeting_absents(self, member_id: int) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE members SET meeting_absents = meeting_absents + 1 WHERE member_id=%s",
                (int(member_id),),
            )
            if cur.rowcount == 0:
                return None
            cur.execute("SELECT meeting_absents FROM members WHERE member_id=%s", (int(member_id),))
            r = fetchone(cur)
            return int(r["meeting_absents"]) if r else None

    def reset_meeting_absents(self, member_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE members SET meeting_absents=0 WHERE member_id=%s AND meeting_absents > 0",
                (int(member_id),),
            )
            return cur.rowcount > 0

    def reset_meeting_absents_many(self, member_ids: Iterable[int]) -> int:
        ids = [int(m) for m in member_ids]
        if not ids:
            return 0
        placeholders, params = in_clause(ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE members SET meeting_absents=0 WHERE member_id IN {placeholders}", params)
            return int(cur.rowcount)
