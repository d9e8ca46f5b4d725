"""Per-environment settings modules. APP_ENV picks one; development is the default."""
import os

_ENVIRONMENTS = {
    "dev": "development",
    "development": "development",
    "test": "testing",
    "testing": "testing",
    "prod": "production",
    "production": "production",
}


def get_settings_module() -> str:
    env = os.getenv("APP_ENV", "development").strip().lower()
    return f"config.{_ENVIRONMENTS.get(env, 'development')}"
