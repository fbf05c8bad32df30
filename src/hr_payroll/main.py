from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, send_from_directory

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.web import register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_admin_user, list_tables
from .employees.controller import register as register_employees
from .integrations.notifier import LoggingNotifier, SmtpNotifier, SmtpSettings
from .integrations.sheets import CsvSheetSync, NullSheetSync
from .integrations.storage import LocalObjectStorage
from .payroll.controller import register as register_payroll
from .payroll.policy import PayrollPolicy
from .reports.controller import register as register_reports
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def _notifier(smtp: dict):
    if not smtp or not smtp.get("host"):
        return LoggingNotifier()
    return SmtpNotifier(
        SmtpSettings(
            host=str(smtp["host"]),
            port=int(smtp.get("port", 587)),
            user=str(smtp.get("user", "")),
            password=str(smtp.get("password", "")),
            from_address=str(smtp.get("from_address") or smtp.get("user", "")),
        )
    )


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app; a prebuilt container skips all database wiring."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    upload_dir = Path(getattr(settings, "UPLOAD_DIR", "uploads")).resolve()
    public_url = getattr(settings, "PUBLIC_UPLOAD_URL", "/uploads").rstrip("/")

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module, db_config.get("user"), db_config.get("host"),
            db_config.get("port", 3306), db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[2] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            ensure_admin_user(
                db_config,
                email=getattr(settings, "ADMIN_EMAIL"),
                password=getattr(settings, "ADMIN_PASSWORD"),
            )
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

        export_dir = getattr(settings, "SHEETS_EXPORT_DIR", "")
        container = build_container(
            db_config=db_config,
            policy=PayrollPolicy.from_mapping(getattr(settings, "PAYROLL_POLICY", {}) or {}),
            notifier=_notifier(getattr(settings, "SMTP", {})),
            storage=LocalObjectStorage(upload_dir, public_url=public_url),
            sheets=CsvSheetSync(export_dir) if export_dir else NullSheetSync(),
        )

    app.extensions["container"] = container
    register_error_handlers(app)

    register_users(app, container)
    register_employees(app, container)
    register_attendance(app, container)
    register_payroll(app, container)
    register_reports(app, container)

    @app.get(f"{public_url}/<path:filename>")
    def uploaded_file(filename: str):
        return send_from_directory(upload_dir, filename)

    return app
