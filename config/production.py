import os

from config import env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "society_db"),
}

DEBUG = False

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = env_flag("LOG_JSON", "1")

SETTINGS_CACHE_TTL_SECONDS = float(os.getenv("SETTINGS_CACHE_TTL_SECONDS", "300"))
RETRACT_MEETING_FINES_ON_REPLAY = env_flag("RETRACT_MEETING_FINES_ON_REPLAY", "0")
