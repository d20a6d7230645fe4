from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .classes.controller import register as register_classes
from .common.http import api_errors, ok
from .config import get_settings_module
from .container import Container, build_container
from .core.school_config import SchoolConfig
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig, DatabaseConnection
from .schedules.controller import register as register_schedules
from .students.controller import register as register_students

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "database" / "schema.sql"


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    A ready-made ``container`` (e.g. wired with in-memory repositories) skips
    the database setup entirely.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            conn = DatabaseConnection(DBConfig.from_dict(db_config))
            apply_schema(conn, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%d)", len(list_tables(conn)))

        container = build_container(
            db_config=db_config,
            school_config=SchoolConfig.from_settings(
                getattr(settings, "CATEGORIES"),
                getattr(settings, "BELT_LEVELS"),
            ),
            reconcile_max_attempts=int(getattr(settings, "RECONCILE_MAX_ATTEMPTS", 3)),
            next_class_lookahead_days=int(getattr(settings, "NEXT_CLASS_LOOKAHEAD_DAYS", 14)),
        )

    register_classes(app, container)
    register_schedules(app, container)
    register_students(app, container)
    register_attendance(app, container)

    @app.route("/api/config", methods=["GET"], endpoint="api_config")
    @api_errors
    def api_config():
        return ok(container.school_config.to_dict())

    return app
