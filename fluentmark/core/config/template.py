from .base import BaseSettings


class TemplateSettings(BaseSettings):
    # relative to the project root
    path: str = "fluentmark/templates"
