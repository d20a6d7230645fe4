from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from dojo_attendance.config import get_settings_module
from dojo_attendance.database.bootstrap import apply_schema, list_tables
from dojo_attendance.database.connection import DBConfig, DatabaseConnection
from dojo_attendance.main import SCHEMA_PATH


def main() -> None:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection(DBConfig.from_dict(dict(settings.DB_CONFIG)))

    apply_schema(conn, schema_path=SCHEMA_PATH)
    tables = list_tables(conn)
    cfg = conn.config
    print(f"OK: Applied schema.sql -> {cfg.user}@{cfg.host}:{cfg.port}/{cfg.database} (tables={len(tables)})")


if __name__ == "__main__":
    main()
