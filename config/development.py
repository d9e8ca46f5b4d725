import os

from .config import (  # noqa: F401
    DB_CONFIG,
    DEFAULT_KOLLEL_PROGRAM,
    EARLY_BLOCK_MINUTES,
    HANDLER_RATES,
    KOLLEL_SCHEDULES,
    SECRET_KEY,
)

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed the programs table on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
