from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .logging_utils import setup_json_logging
from .payroll.controller import register as register_payroll
from .reports.controller import register as register_reports
from .shifts.controller import register as register_shifts
from .timetracking.controller import register as register_time_tracking

logger = logging.getLogger(__name__)

_ROOT = Path(__file__).resolve().parents[3]


def register_routes(app: Flask, container: Container) -> None:
    register_shifts(app, container)
    register_time_tracking(app, container)
    register_attendance(app, container)
    register_payroll(app, container)
    register_reports(app, container)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    setup_json_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    logger.info(
        "starting",
        extra={
            "settings": settings_module,
            "db": f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
        },
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=_ROOT / "database" / "schema.sql")
        logger.info("schema ready", extra={"tables": len(list_tables(db_config))})
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=_ROOT / "database" / "seed.sql")
        logger.info("demo seed ready")

    container = build_container(db_config=db_config, settings=settings)
    register_routes(app, container)
    return app
