__all__ = [
    "EvaluationSettings",
    "LoggingSettings",
    "Secrets",
    "Settings",
    "StorageSettings",
    "TemplateSettings",
]


from .evaluation import EvaluationSettings
from .logging import LoggingSettings
from .secrets import Secrets
from .settings import Settings
from .storage import StorageSettings
from .template import TemplateSettings
