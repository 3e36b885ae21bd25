from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.attendance_tracker.attendance_tracker.database.connection import DBConfig, DatabaseConnection
from src.attendance_tracker.attendance_tracker.users.mysql_user_repository import MySQLUserRepository
from src.attendance_tracker.attendance_tracker.users.service import ensure_admin


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    password = getattr(settings, "ADMIN_PASSWORD", None)
    if not password:
        raise SystemExit("ADMIN_PASSWORD is not set")

    users = MySQLUserRepository(DatabaseConnection.get_instance(DBConfig.from_dict(db_config)))
    username = getattr(settings, "ADMIN_USERNAME", "admin")
    created = ensure_admin(
        users,
        username=username,
        password=password,
        full_name=getattr(settings, "ADMIN_FULL_NAME", "Admin User"),
    )

    print(
        f"OK: admin {username!r} {'created' if created else 'already present'} -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
