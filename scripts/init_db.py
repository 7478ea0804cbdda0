"""Create the HRMS database (if needed) and apply database/schema.sql.

Usage: python scripts/init_db.py   (APP_ENV selects the settings module)
"""
from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.hrms.hrms.database.bootstrap import apply_schema, list_tables

logger = logging.getLogger("hrms.scripts.init_db")

EXPECTED_TABLES = {
    "accounts",
    "profiles",
    "attendance_records",
    "leave_requests",
    "leave_history",
    "payroll_records",
    "notifications",
    "notification_outbox",
    "audit_log",
}


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    tables = set(list_tables(db_config))
    missing = sorted(EXPECTED_TABLES - tables)
    if missing:
        logger.error("Schema applied but tables are missing: %s", ", ".join(missing))
        return 1

    logger.info("Schema ready on %s/%s (%d tables)", db_config.get("host"), db_config.get("database"), len(tables))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
