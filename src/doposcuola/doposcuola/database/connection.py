from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import mysql.connector
from mysql.connector import pooling


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = 0

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "doposcuola")),
            pool_size=int(db_config.get("pool_size", 0)),
        )


class DatabaseConnection:
    """Connection factory for the hosted relational store.

    Without a pool we open a short-lived connection per operation; with
    ``pool_size`` > 0 connections are borrowed from a mysql-connector pool and
    ``close()`` hands them back.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None
        if config.pool_size > 0:
            self._pool = pooling.MySQLConnectionPool(
                pool_name="doposcuola",
                pool_size=config.pool_size,
                **self._connect_args(),
            )

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    @property
    def config(self) -> DBConfig:
        return self._config

    def _connect_args(self) -> dict:
        return {
            "host": self._config.host,
            "port": int(self._config.port),
            "user": self._config.user,
            "password": self._config.password,
            "database": self._config.database,
            "charset": "utf8mb4",
        }

    def connect(self):
        if self._pool is not None:
            return self._pool.get_connection()
        return mysql.connector.connect(**self._connect_args())
