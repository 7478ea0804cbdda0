"""Insert the demo accounts and sample rows from database/seed.sql.

Accounts go first because the sample payroll rows join on them.
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

from src.hrms.hrms.database.bootstrap import DEMO_USERS, apply_seed_sql, ensure_demo_users

logger = logging.getLogger("hrms.scripts.seed_db")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    ensure_demo_users(db_config)
    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")

    logger.info("Seeded %s/%s; demo logins:", db_config.get("host"), db_config.get("database"))
    for user in DEMO_USERS:
        logger.info("  %-9s %s / %s", user.role, user.email, user.password)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
