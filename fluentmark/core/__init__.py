__all__ = [
    "BootConfiguration",
    "di",
    "FluentmarkContainer",
    "LoggingProvider",
    "Settings",
    "Secrets",
    "TimestampProvider",
]


from . import di
from .config import Secrets, Settings
from .container import BootConfiguration, FluentmarkContainer
from .provider import LoggingProvider, TimestampProvider
