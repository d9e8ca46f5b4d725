"""Defaults shared by every environment; env modules override what differs."""
import os

SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-key"

DB_CONFIG = {
    "host": os.environ.get("DB_HOST", "localhost"),
    "port": int(os.environ.get("DB_PORT", "3306")),
    "user": os.environ.get("DB_USER", "root"),
    "password": os.environ.get("DB_PASSWORD", ""),
    "database": os.environ.get("DB_NAME", "shul_stipends"),
}

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Handler payout per bonus (on time, early, learning).
HANDLER_RATES = {
    "weekday": os.environ.get("HANDLER_WEEKDAY_RATE", "100"),
    "weekend": os.environ.get("HANDLER_WEEKEND_RATE", "150"),
}

# Early learning block length, for statistics only.
EARLY_BLOCK_MINUTES = {"weekday": 15, "saturday": 25}

# Keyed by program name as stored in the programs table.
KOLLEL_SCHEDULES = {
    "Keter Eliyahu Morning Kollel": {
        "start": "08:30",
        "end": "10:30",
        "minutes_per_day": 120,
        "monthly_salary": os.environ.get("KOLLEL_MONTHLY_SALARY", "8000"),
    },
    "Keter Eliyahu Full Morning Kollel": {
        "start": "08:45",
        "end": "12:00",
        "minutes_per_day": 195,
        "monthly_salary": os.environ.get("FULL_KOLLEL_MONTHLY_SALARY", "8000"),
    },
}

DEFAULT_KOLLEL_PROGRAM = "Keter Eliyahu Morning Kollel"
