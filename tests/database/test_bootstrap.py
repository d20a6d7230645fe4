from __future__ import annotations

from dojo_attendance.database.bootstrap import _iter_sql_statements, _strip_create_db_and_use
from dojo_attendance.main import SCHEMA_PATH


def test_schema_splits_into_create_table_statements():
    sql = _strip_create_db_and_use(SCHEMA_PATH.read_text(encoding="utf-8"))

    statements = list(_iter_sql_statements(sql))

    assert len(statements) == 5
    assert all(s.upper().startswith("CREATE TABLE IF NOT EXISTS") for s in statements)
    assert any("UNIQUE KEY uq_schedule_session_date (schedule_id, session_date)" in s for s in statements)


def test_semicolons_inside_quotes_do_not_split():
    sql = "INSERT INTO t VALUES ('a;b');\n-- comment; here\nSELECT 1;"

    assert list(_iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('a;b')", "SELECT 1"]
