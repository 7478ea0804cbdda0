import os

from config.config import *  # noqa: F401,F403
from config.config import env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "dev-access-secret")
REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", "dev-refresh-secret")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Without SMTP credentials the links are only written to the log.
MAIL_SUPPRESS_SEND = env_flag("MAIL_SUPPRESS_SEND", "1")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
# Optional: also seed demo data on startup
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
