from pathlib import Path

from src.society_fines.society_fines.database.bootstrap import REQUIRED_TABLES, split_sql_script

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def test_split_drops_database_directives_and_comments():
    sql = """
    CREATE DATABASE IF NOT EXISTS demo;
    USE demo;
    -- a comment; with a semicolon
    CREATE TABLE a (id INT);
    INSERT INTO a VALUES (1);
    """

    assert list(split_sql_script(sql)) == ["CREATE TABLE a (id INT)", "INSERT INTO a VALUES (1)"]


def test_split_keeps_semicolons_inside_literals():
    sql = "INSERT INTO s VALUES ('a;b', \"c;d\"); INSERT INTO s VALUES ('it\\'s;ok')"

    assert list(split_sql_script(sql)) == [
        "INSERT INTO s VALUES ('a;b', \"c;d\")",
        "INSERT INTO s VALUES ('it\\'s;ok')",
    ]


def test_schema_creates_every_required_table():
    statements = list(split_sql_script(SCHEMA.read_text(encoding="utf-8")))
    created = {s.split()[5] for s in statements if s.upper().startswith("CREATE TABLE IF NOT EXISTS")}

    assert set(REQUIRED_TABLES) <= created


def test_schema_keeps_one_fine_per_member_event_and_type():
    statements = list(split_sql_script(SCHEMA.read_text(encoding="utf-8")))
    fines = [s for s in statements if s.upper().startswith("CREATE TABLE IF NOT EXISTS FINES ")]

    assert len(fines) == 1
    assert "UNIQUE KEY uq_fines_member_event_type (member_id, event_id, event_type)" in fines[0]
