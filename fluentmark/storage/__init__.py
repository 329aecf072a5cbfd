"""Persistence for submissions and everything an evaluation produces.

Each submodule holds plain functions over one table that take the session as
an injected keyword argument; :mod:`.repository` adapts them to the store
interfaces the evaluation pipeline consumes. Submodules are imported on first
attribute access, e.g. ``storage.submission.get(...)``.
"""

import importlib
import sys
import types
import typing as t

from sqlalchemy.orm import Session, SessionTransaction

MODULES = ("activity", "submission", "evaluation", "mistake", "feedback", "notification", "repository")

__all__ = ["Session", "SessionTransaction", *MODULES]

if t.TYPE_CHECKING:
    from . import activity, evaluation, feedback, mistake, notification, repository, submission


def __getattr__(name: str) -> types.ModuleType:
    if name not in MODULES:
        raise AttributeError(f"module {__name__} has no attribute {name}")
    module = importlib.import_module(f"{__name__}.{name}")
    setattr(sys.modules[__name__], name, module)
    return module
