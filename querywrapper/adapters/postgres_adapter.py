"""
PostgreSQL Adapter for querywrapper

One psycopg2 connection per adapter. psycopg2 binds parameters with the
`format` paramstyle, so compiled ? placeholders are rewritten to %s.

Requirements:
    pip install querywrapper[postgres]
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

try:
    import psycopg2
    PSYCOPG2_AVAILABLE = True
except ImportError:
    PSYCOPG2_AVAILABLE = False
    psycopg2 = None

from querywrapper.adapters.base import BaseAdapter, DatabaseConnectionError

logger = logging.getLogger(__name__)


class PostgresAdapter(BaseAdapter):
    """
    Adapter for PostgreSQL.

    Config options:
        dsn: libpq connection string; used instead of the keywords below
        host, port (5432), database, user, password: connection keywords
        sslmode: SSL mode (default: prefer)
        connect_timeout: Seconds to wait for the server (default: 10)

    Every statement runs in its own transaction: committed on success,
    rolled back on a driver error.

    Example:
        with PostgresAdapter({"dsn": "postgresql://app@localhost/app"}) as db:
            member = QueryWrapper().eq("id", 7386).get_one(db, "member", Member)
    """

    ENGINE = "postgres"
    PLACEHOLDER = "%s"
    DRIVER_ERRORS = (psycopg2.Error,) if PSYCOPG2_AVAILABLE else ()

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)

        if "dsn" not in config:
            missing = [k for k in ("host", "database", "user") if k not in config]
            if missing:
                raise DatabaseConnectionError(
                    f"Missing required config: {', '.join(missing)} (or pass a dsn)",
                    engine=self.ENGINE
                )

    def describe(self) -> str:
        if "dsn" in self.config:
            return "dsn"
        return f"{self.config['host']}:{self.config.get('port', 5432)}/{self.config['database']}"

    def _open(self):
        if not PSYCOPG2_AVAILABLE:
            raise DatabaseConnectionError(
                "psycopg2 not installed. Run: pip install querywrapper[postgres]",
                engine=self.ENGINE
            )

        if "dsn" in self.config:
            return psycopg2.connect(self.config["dsn"])

        return psycopg2.connect(
            host=self.config["host"],
            port=self.config.get("port", 5432),
            dbname=self.config["database"],
            user=self.config["user"],
            password=self.config.get("password"),
            sslmode=self.config.get("sslmode", "prefer"),
            connect_timeout=self.config.get("connect_timeout", 10),
        )

    def _commit(self) -> None:
        self._connection.commit()

    def _rollback(self) -> None:
        try:
            self._connection.rollback()
        except self.DRIVER_ERRORS as e:
            logger.warning(f"PostgreSQL rollback failed: {e}")

    def convert_placeholders(self, sql: str, params: Optional[Sequence[Any]] = None) -> Tuple[str, List[Any]]:
        """
        Rewrite ? as %s.

        Literal % signs are doubled so psycopg2 does not read them as
        format markers. Without parameters psycopg2 skips formatting, so the
        statement is left alone.
        """
        params = list(params or [])
        if not params:
            return sql, params
        return sql.replace("%", "%%").replace("?", "%s"), params
