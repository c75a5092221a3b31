import os

from config import env_flag

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "society_test_db"),
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
LOG_JSON = False

SETTINGS_CACHE_TTL_SECONDS = 0.0
RETRACT_MEETING_FINES_ON_REPLAY = env_flag("RETRACT_MEETING_FINES_ON_REPLAY", "0")
