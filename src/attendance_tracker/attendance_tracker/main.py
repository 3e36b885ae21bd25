from __future__ import annotations

import atexit
import importlib
import logging
import os
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Mapping, Optional, Sequence

import click
from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .attendance.scheduler import AbsenceBackfillScheduler
from .common.datetime_utils import parse_iso_date
from .container import Container, build_container
from .core.constants import DEFAULT_TOKEN_TTL_SECONDS
from .database.bootstrap import apply_schema, list_tables
from .users.controller import register as register_users
from .users.service import ensure_admin
from .web.errors import register_error_handlers
from .web.responses import success
from .web.tracing import configure_logging, register_tracing

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(*, settings_module: Optional[str] = None, container: Optional[Container] = None) -> Flask:
    """Build the Flask app.

    Pass ``container`` to run against pre-built repositories (tests); otherwise
    MySQL repositories are wired from the settings module.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["API_PREFIX"] = getattr(settings, "API_PREFIX", "/api")

    if not app.config["TESTING"]:
        configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        container = _build_runtime_container(settings)

    app.extensions["attendance_tracker"] = container

    register_tracing(app)
    register_error_handlers(app)
    register_users(app, container)
    register_attendance(app, container)
    _register_cli(app, container)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return success({"status": "UP"})

    return app


def _build_runtime_container(settings) -> Container:
    db_config = getattr(settings, "DB_CONFIG")
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings.__name__,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=SCHEMA_PATH)
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

    container = build_container(
        db_config=db_config,
        jwt_secret=getattr(settings, "JWT_SECRET", None),
        jwt_ttl_seconds=int(getattr(settings, "JWT_EXPIRATION_SECONDS", DEFAULT_TOKEN_TTL_SECONDS)),
    )

    admin_password = getattr(settings, "ADMIN_PASSWORD", None)
    if bool(getattr(settings, "SEED_ADMIN", False)):
        if admin_password:
            ensure_admin(
                container.users_repo,
                username=getattr(settings, "ADMIN_USERNAME", "admin"),
                password=admin_password,
                full_name=getattr(settings, "ADMIN_FULL_NAME", "Admin User"),
            )
        else:
            logger.warning("SEED_ADMIN is on but ADMIN_PASSWORD is not set; admin not seeded")

    if bool(getattr(settings, "SCHEDULER_ENABLED", False)) and should_start_scheduler(
        debug=bool(getattr(settings, "DEBUG", False)), argv=sys.argv, environ=os.environ
    ):
        scheduler = AbsenceBackfillScheduler(container.attendance_service)
        scheduler.start()
        atexit.register(scheduler.shutdown)

    return container


def should_start_scheduler(*, debug: bool, argv: Sequence[str], environ: Mapping[str, str]) -> bool:
    """Only the process that serves requests runs the daily job.

    Skips the debug reloader's watcher process (the child has
    ``WERKZEUG_RUN_MAIN=true``) and one-off ``flask`` commands other than ``run``.
    """
    if debug and environ.get("WERKZEUG_RUN_MAIN") != "true":
        return False
    if environ.get("FLASK_RUN_FROM_CLI") == "true" and "run" not in argv[1:]:
        return False
    return True


def _register_cli(app: Flask, container: Container) -> None:
    @app.cli.command("mark-absent")
    @click.option("--date", "target", default=None, help="Work date (YYYY-MM-DD); defaults to yesterday.")
    def mark_absent(target: Optional[str]) -> None:
        """Create ABSENT records for users with no attendance on a date."""
        work_date = parse_iso_date(target) if target else date.today() - timedelta(days=1)
        created = container.attendance_service.mark_absent_for_date(work_date)
        click.echo(f"{work_date.isoformat()}: {created} absence record(s) created")
