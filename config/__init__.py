import os

_ALIASES = {
    "prod": "production",
    "production": "production",
    "test": "testing",
    "testing": "testing",
    "dev": "development",
    "development": "development",
}


def get_settings_module() -> str:
    """Resolve the settings module from APP_ENV, falling back to FLASK_ENV."""

    env = (os.getenv("APP_ENV") or os.getenv("FLASK_ENV") or "development").lower()
    return f"config.{_ALIASES.get(env, 'development')}"
