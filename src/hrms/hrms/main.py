from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .auth.controller import register as register_auth
from .auth.tokens import TokenService
from .common.datetime_utils import now_local
from .common.responses import ok, register_error_handlers
from .container import Container, build_container
from .core.constants import API_PREFIX, API_VERSION
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .extensions import cors, mail, socketio
from .leaves.controller import register as register_leaves
from .mail.mailer import FlaskMailer
from .notifications.controller import register as register_notifications
from .notifications.publisher import SocketIOPublisher
from .notifications.realtime import register_socket_handlers
from .payroll.controller import register as register_payroll
from .profiles.controller import register as register_profiles
from .reports.controller import register as register_reports

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"

_MAIL_KEYS = (
    "MAIL_SERVER",
    "MAIL_PORT",
    "MAIL_USE_SSL",
    "MAIL_USE_TLS",
    "MAIL_USERNAME",
    "MAIL_PASSWORD",
    "MAIL_DEFAULT_SENDER",
    "MAIL_SUPPRESS_SEND",
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _bootstrap_database(settings, db_config: dict) -> None:
    if getattr(settings, "AUTO_INIT_DB", False):
        apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
    if getattr(settings, "AUTO_SEED_DB", False):
        ensure_demo_users(db_config)
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
        logger.info("Demo seed ready")


def create_app(container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    """Application factory.

    Tests pass a ``container`` built over in-memory repositories; otherwise the
    MySQL-backed container is built from the selected settings module.
    """

    load_dotenv(override=False)
    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.url_map.strict_slashes = False
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["PORT"] = int(getattr(settings, "PORT", 5000))
    for key in _MAIL_KEYS:
        if hasattr(settings, key):
            app.config[key] = getattr(settings, key)

    origins = list(getattr(settings, "CORS_ORIGINS", []))
    mail.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": origins}}, supports_credentials=True)
    socketio.init_app(app, cors_allowed_origins=origins)

    db_config = getattr(settings, "DB_CONFIG")
    if container is None:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        _bootstrap_database(settings, db_config)
        container = build_container(
            db_config=db_config,
            tokens=TokenService(
                getattr(settings, "ACCESS_TOKEN_SECRET"),
                getattr(settings, "REFRESH_TOKEN_SECRET"),
            ),
            mailer=FlaskMailer(mail, frontend_url=getattr(settings, "FRONTEND_URL")),
            publisher=SocketIOPublisher(socketio),
        )
    app.extensions["hrms"] = container

    register_error_handlers(app)
    register_auth(app, container)
    register_profiles(app, container)
    register_attendance(app, container)
    register_leaves(app, container)
    register_payroll(app, container)
    register_notifications(app, container)
    register_reports(app, container)
    register_socket_handlers(socketio, container.authenticator)

    @app.route(API_PREFIX, methods=["GET"], endpoint="api_root")
    def api_root():
        return ok(name="HRMS API", version=API_VERSION)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return ok(status="ok", timestamp=now_local())

    return app
