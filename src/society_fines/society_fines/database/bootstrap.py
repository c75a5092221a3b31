"""Schema and seed loading for local and demo databases."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterator

import mysql.connector
import structlog

from .connection import DBConfig

logger = structlog.get_logger(__name__)

# Tables the MySQL repositories read and write.
REQUIRED_TABLES = (
    "members",
    "member_roles",
    "fines",
    "officer_positions",
    "area_admins",
    "system_settings",
    "meetings",
    "meeting_absents",
    "funerals",
    "funeral_assignments",
    "funeral_absents",
    "funeral_extra_dues",
    "common_works",
    "common_work_absents",
)

_DB_DIRECTIVES = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b.*?;\s*$")


def split_sql_script(sql: str) -> Iterator[str]:
    """Yield statements of a schema/seed script.

    ``CREATE DATABASE``/``USE`` lines and ``--`` comment lines are dropped so the
    script targets whatever database DB_CONFIG names. Semicolons inside quoted
    literals do not end a statement.
    """

    body = "\n".join(ln for ln in _DB_DIRECTIVES.sub("", sql).splitlines() if not ln.lstrip().startswith("--"))

    start = 0
    quote = None
    i = 0
    while i < len(body):
        ch = body[i]
        if quote:
            if ch == "\\":
                i += 1
            elif ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = body[start:i].strip()
            if stmt:
                yield stmt
            start = i + 1
        i += 1

    tail = body[start:].strip()
    if tail:
        yield tail


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_mapping(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def run_sql_script(db_config: dict, path: str | Path) -> int:
    """Execute every statement of ``path`` in one transaction; returns the statement count."""

    statements = list(split_sql_script(Path(path).read_text(encoding="utf-8")))

    conn = _connect(DBConfig.from_mapping(db_config))
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    except Exception:
        conn.rollback()
        logger.exception("sql_script_failed", path=str(path))
        raise
    finally:
        conn.close()

    logger.info("sql_script_applied", path=str(path), statements=len(statements))
    return len(statements)


def apply_schema(db_config: dict, *, schema_path: str | Path) -> int:
    ensure_database_exists(db_config)
    return run_sql_script(db_config, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> int:
    return run_sql_script(db_config, seed_path)


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_mapping(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def missing_tables(db_config: dict) -> list[str]:
    present = set(list_tables(db_config))
    return [t for t in REQUIRED_TABLES if t not in present]
