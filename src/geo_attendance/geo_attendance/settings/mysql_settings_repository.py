from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .repository import SettingsRepository


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, key: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT setting_value FROM app_settings WHERE setting_key=%s", (key,))
            r = fetchone(cur)
            return str(r["setting_value"]) if r else None

    def set(self, key: str, value: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO app_settings(setting_key, setting_value)
                VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE setting_value=VALUES(setting_value)
                """,
                (key, value),
            )

    def delete(self, key: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM app_settings WHERE setting_key=%s", (key,))
