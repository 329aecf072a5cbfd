import pydantic as p
from pydantic_settings import BaseSettings as PydanticBaseSettings
from pydantic_settings import PydanticBaseSettingsSource

from fluentmark.model import DeploymentEnvironment

from .base import BaseSettings
from .evaluation import EvaluationSettings
from .logging import LoggingSettings
from .source import OverrideSettingsSource, YAMLCascadingSettingsSource
from .storage import StorageSettings
from .template import TemplateSettings

# each section must be supplied by one of the YAML files
Section = p.Field(default=..., validate_default=True)


class Settings(BaseSettings):
    """Application settings, one field per ``config/<field>.yaml`` file.

    ``root``, ``env`` and ``override`` are not configuration themselves; they
    tell the sources where to look and what to patch.
    """

    root: p.FileUrl
    env: DeploymentEnvironment
    override: tuple[str, ...] = ()

    logging: LoggingSettings = Section
    storage: StorageSettings = Section
    template: TemplateSettings = Section
    evaluation: EvaluationSettings = Section

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[PydanticBaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # earlier sources take precedence: command line overrides beat YAML
        return init_settings, OverrideSettingsSource(settings_cls), YAMLCascadingSettingsSource(settings_cls)
