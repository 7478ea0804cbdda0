from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

import mysql.connector
from mysql.connector import pooling
from mysql.connector.errors import PoolError

logger = logging.getLogger(__name__)


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = 5
    charset: str = "utf8mb4"


class DatabaseConnection:
    """Process-wide pool of MySQL connections.

    Repositories borrow one connection per operation; ``close()`` on a pooled
    connection hands it back to the pool. When every pooled connection is in
    use a plain connection is opened instead, so load above ``pool_size`` is
    served rather than rejected.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None
        self._lock = threading.Lock()

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    @property
    def config(self) -> DBConfig:
        return self._config

    def _params(self) -> dict:
        return {
            "host": self._config.host,
            "port": int(self._config.port),
            "user": self._config.user,
            "password": self._config.password,
            "database": self._config.database,
            "charset": self._config.charset,
            "autocommit": False,
        }

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        # Created lazily so building the app never touches the server.
        with self._lock:
            if self._pool is None:
                logger.info(
                    "Opening MySQL pool %s@%s:%s/%s (size=%s)",
                    self._config.user,
                    self._config.host,
                    self._config.port,
                    self._config.database,
                    self._config.pool_size,
                )
                self._pool = pooling.MySQLConnectionPool(
                    pool_name="hrms", pool_size=int(self._config.pool_size), **self._params()
                )
            return self._pool

    def connect(self):
        pool = self._get_pool()
        try:
            return pool.get_connection()
        except PoolError:
            logger.debug("MySQL pool exhausted; opening an unpooled connection")
            return mysql.connector.connect(**self._params())
