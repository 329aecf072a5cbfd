import pydantic as p

from .base import BaseSettings


class EvaluationSettings(BaseSettings):
    batch_limit: int = p.Field(default=50, gt=0)
    max_workers: int = p.Field(default=1, gt=0)
    # fixed seed for reproducible sub-score jitter; unseeded when None
    random_seed: int | None = None
