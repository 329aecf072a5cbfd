from __future__ import annotations

import pydantic as p
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from fluentmark.model import DeploymentEnvironment

from .base import BaseSecrets


class PostgresqlSecrets(BaseSecrets):
    username: p.Secret[str] | None = None
    password: p.Secret[str] | None = None


class Secrets(BaseSecrets):
    """Credentials, read from ``FLUENTMARK_``-prefixed environment variables.

    Nested keys are joined with ``__``, e.g. ``FLUENTMARK_POSTGRESQL__PASSWORD``.
    """

    model_config = SettingsConfigDict(
        env_prefix="FLUENTMARK_",
        env_nested_delimiter="__",
        populate_by_name=True,
        extra="ignore",
    )

    root: p.AnyUrl
    env: DeploymentEnvironment

    postgresql: PostgresqlSecrets = p.Field(default_factory=PostgresqlSecrets)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings
