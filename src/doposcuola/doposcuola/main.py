from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .announcements.controller import register as register_announcements
from .auth.controller import register as register_auth
from .auth.provider import log_auth_event
from .bookings.controller import register as register_bookings
from .common.web import EXTENSION_KEY
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_default_settings, ensure_demo_data, list_tables
from .holidays.controller import register as register_holidays
from .reports.controller import register as register_reports
from .settings.controller import register as register_settings
from .subjects.controller import register as register_subjects
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Pass a ready ``container`` to skip database bootstrapping (tests do this).
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
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
            apply_schema(db_config)
            ensure_default_settings(db_config)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_data(db_config)
            logger.info("demo seed ready")

        container = build_container(
            db_config=db_config,
            mail_config=getattr(settings, "MAIL_CONFIG", {}),
            public_url=getattr(settings, "PUBLIC_URL", ""),
        )

    container.auth_provider.on_auth_state_change(log_auth_event)
    app.extensions[EXTENSION_KEY] = container

    register_auth(app, container)
    register_users(app, container)
    register_bookings(app, container)
    register_subjects(app, container)
    register_announcements(app, container)
    register_holidays(app, container)
    register_settings(app, container)
    register_reports(app, container)

    return app
