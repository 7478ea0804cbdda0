from config.config import *  # noqa: F401,F403

SECRET_KEY = "test-secret"
ACCESS_TOKEN_SECRET = "test-access-secret"
REFRESH_TOKEN_SECRET = "test-refresh-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

MAIL_SUPPRESS_SEND = True

AUTO_INIT_DB = False
AUTO_SEED_DB = False
