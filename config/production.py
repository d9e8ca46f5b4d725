import os

from .config import (  # noqa: F401
    DB_CONFIG,
    DEFAULT_KOLLEL_PROGRAM,
    EARLY_BLOCK_MINUTES,
    HANDLER_RATES,
    KOLLEL_SCHEDULES,
    LOG_LEVEL,
)

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
