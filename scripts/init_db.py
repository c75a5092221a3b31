"""Apply database/schema.sql to the database selected by APP_ENV."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.society_fines.society_fines.common.log_config import configure_logging
from src.society_fines.society_fines.database.bootstrap import apply_schema, missing_tables


def main() -> int:
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    statements = apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    missing = missing_tables(db_config)
    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    if missing:
        print(f"FAILED: {target} is missing tables: {', '.join(missing)}")
        return 1
    print(f"OK: Applied schema.sql ({statements} statements) -> {target}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
