__all__ = [
    "BootConfiguration",
    "EvaluationContainer",
    "FluentmarkContainer",
    "StorageContainer",
    "TemplateContainer",
]

from .evaluation import EvaluationContainer
from .fluentmark import BootConfiguration, FluentmarkContainer
from .storage import StorageContainer
from .template import TemplateContainer
