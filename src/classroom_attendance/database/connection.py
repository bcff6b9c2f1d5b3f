from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping

import mysql.connector
from mysql.connector.constants import ClientFlag


@dataclass(frozen=True)
class DBConfig:
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = ""
    database: str = "attendance_db"

    @classmethod
    def from_settings(cls, db_config: Mapping[str, Any]) -> "DBConfig":
        """Build from a settings ``DB_CONFIG`` dict; missing keys fall back to defaults."""
        defaults = cls()
        return cls(
            host=str(db_config.get("host", defaults.host)),
            port=int(db_config.get("port", defaults.port)),
            user=str(db_config.get("user", defaults.user)),
            password=str(db_config.get("password", defaults.password)),
            database=str(db_config.get("database", defaults.database)),
        )

    def connect_kwargs(self, *, with_database: bool = True) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = dict(host=self.host, port=self.port, user=self.user, password=self.password)
        if with_database:
            kwargs["database"] = self.database
        return kwargs


class DatabaseConnection:
    """Hands out one short-lived MySQL connection per repository call.

    Sessions run in UTC so DATETIME columns hold naive UTC values.
    """

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    def connect(self):
        return mysql.connector.connect(
            **self._config.connect_kwargs(),
            time_zone="+00:00",
            # UPDATE rowcount reports matched rows, not only changed ones.
            client_flags=[ClientFlag.FOUND_ROWS],
        )
