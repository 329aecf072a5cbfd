from __future__ import annotations

import typing as t

import pydantic as p

from .base import BaseSettings


class StorageSettings(BaseSettings):
    persistent: PersistentSettings


class PersistentSettings(BaseSettings):
    """Exactly one database backend."""

    sqlite: SqliteSettings | None = None
    postgresql: PostgresqlSettings | None = None

    @p.model_validator(mode="after")
    def one_backend(self) -> PersistentSettings:
        if (self.sqlite is None) == (self.postgresql is None):
            raise ValueError("configure exactly one of storage.persistent.sqlite or storage.persistent.postgresql")
        return self


class SqliteSettings(BaseSettings):
    database: str = ":memory:"
    driver: t.Literal["sqlite+pysqlite"] = "sqlite+pysqlite"

    @property
    def in_memory(self) -> bool:
        return self.database in ("", ":memory:")


class PostgresqlSettings(BaseSettings):
    host: p.IPvAnyAddress | str | None = None
    port: int = 5432
    database: str
    driver: t.Literal["postgresql+psycopg"] = "postgresql+psycopg"
