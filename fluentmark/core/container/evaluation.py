"""Evaluation container: session-bound repositories and pipelines."""

from __future__ import annotations

import datetime
import typing as t

import jinja2
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Dependency, Factory, Object, Provider, Singleton
from sqlalchemy.orm import Session

from fluentmark.evaluation.pipeline import BatchEvaluator, EvaluationPipeline
from fluentmark.evaluation.randomness import RandomSourceFactory, seeded_factory
from fluentmark.storage.repository import ActivityRepository, EvaluationRepository, FeedbackRepository, \
    MistakeRepository, StoredNotifier, SubmissionRepository


def provide_pipeline(
    session: Session,
    env: jinja2.Environment,
    rng_factory: RandomSourceFactory,
    clock: t.Callable[[], datetime.datetime],
) -> EvaluationPipeline:
    """Build a pipeline whose stores all share ``session``."""
    return EvaluationPipeline(
        SubmissionRepository(session),
        ActivityRepository(session),
        EvaluationRepository(session),
        MistakeRepository(session),
        FeedbackRepository(session),
        StoredNotifier(session),
        env=env,
        rng_factory=rng_factory,
        clock=clock,
    )


class EvaluationContainer(DeclarativeContainer):
    config = Configuration()
    session: Provider[Session] = Dependency(instance_of=Session)
    env: Provider[jinja2.Environment] = Dependency(instance_of=jinja2.Environment)
    clock: Provider[t.Callable[[], datetime.datetime]] = Object()

    rng_factory: Provider[RandomSourceFactory] = Singleton(seeded_factory, config.random_seed)

    submissions: Provider[SubmissionRepository] = Factory(SubmissionRepository, session=session)
    notifier: Provider[StoredNotifier] = Factory(StoredNotifier, session=session)

    # a new session per pipeline; a pipeline must not be shared between threads
    pipeline: Provider[EvaluationPipeline] = Factory(
        provide_pipeline, session=session, env=env, rng_factory=rng_factory, clock=clock
    )
    batch: Provider[BatchEvaluator] = Factory(
        BatchEvaluator,
        submissions=submissions,
        pipeline_factory=pipeline.provider,
        max_workers=config.max_workers,
    )
