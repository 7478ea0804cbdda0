import os

from config.config import *  # noqa: F401,F403
from config.config import env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "please-set-ACCESS_TOKEN_SECRET")
REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", "please-set-REFRESH_TOKEN_SECRET")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

MAIL_SUPPRESS_SEND = env_flag("MAIL_SUPPRESS_SEND", "0")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
