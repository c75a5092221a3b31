from __future__ import annotations

import importlib
from pathlib import Path
from typing import Optional

import structlog
from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.log_config import configure_logging
from .database.bootstrap import apply_schema, apply_seed_sql, missing_tables

from .container import Container, build_container
from .common_works.controller import register as register_common_works
from .funerals.controller import register as register_funerals
from .meetings.controller import register as register_meetings
from .settings.controller import register as register_settings

logger = structlog.get_logger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app; pass ``container`` to skip MySQL wiring (tests)."""

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(
        getattr(settings, "LOG_LEVEL", "INFO"),
        json=bool(getattr(settings, "LOG_JSON", False)),
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "app_starting",
            settings=settings_module,
            db=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            missing = missing_tables(db_config)
            if missing:
                logger.warning("schema_incomplete", missing=missing)
            else:
                logger.info("schema_ready")
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            logger.info("seed_ready")

        container = build_container(
            db_config=db_config,
            settings_ttl_seconds=float(getattr(settings, "SETTINGS_CACHE_TTL_SECONDS", 300)),
            retract_meeting_fines=bool(getattr(settings, "RETRACT_MEETING_FINES_ON_REPLAY", False)),
        )

    app.extensions["society_fines.container"] = container

    register_meetings(app, container)
    register_funerals(app, container)
    register_common_works(app, container)
    register_settings(app, container)

    return app
