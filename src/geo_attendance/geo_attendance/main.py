from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.http import register_error_handlers
from .container import Container, build_container
from .core.logging import setup_logging
from .database.bootstrap import apply_schema
from .attendance.controller import register as register_attendance
from .settings.controller import register as register_settings
from .stats.controller import register as register_stats
from .tracking.controller import register as register_tracking

_log = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        _log.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)

        container = build_container(db_config=db_config, settings=settings)

    app.extensions["geo_attendance"] = container

    register_error_handlers(app)
    register_attendance(app, container)
    register_stats(app, container)
    register_settings(app, container)
    register_tracking(app, container)

    container.runtime.start()
    if container.auto_start_tracking:
        container.runtime.call(container.monitor.start)

    return app
