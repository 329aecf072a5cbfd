"""CLI commands for evaluating submissions and reviewing the results."""

from __future__ import annotations

import typing as t

from sqlalchemy.orm import Session

import fluentmark.lib.cli as click
from fluentmark.core import di, FluentmarkContainer
from fluentmark.evaluation import detect_challenges, EvaluationOutcome, EvaluationPipeline
from fluentmark.evaluation.errors import NotificationFailure, SubmissionNotFound
from fluentmark.evaluation.pipeline import BatchEvaluator
from fluentmark.model import EvaluationID, FeedbackID, StudentID, SubmissionID, TeacherID
from fluentmark.storage import evaluation as evaluation_storage
from fluentmark.storage import mistake as mistake_storage
from fluentmark.storage import submission as submission_storage
from fluentmark.storage.evaluation import ReviewScores
from fluentmark.storage.repository import StoredNotifier

REVIEWABLE_SCORES = ("overall_score", "grammar_score", "vocabulary_score", "pronunciation_score", "logic_score")


@click.group("evaluate")
def evaluate():
    """Evaluate submissions and manage their results."""
    ...


def echo_outcome(outcome: EvaluationOutcome) -> None:
    evaluation = outcome.evaluation
    click.echo(f"Submission {outcome.submission.submission_id}: {outcome.submission.content_type.value}")
    click.echo(f"  Evaluation: {evaluation.evaluation_id}")
    click.echo(f"  Overall score: {evaluation.overall_score}/100 (confidence {evaluation.ai_confidence:.2f})")
    for name in ("grammar", "vocabulary", "pronunciation", "logic"):
        score = getattr(evaluation, f"{name}_score")
        if score is not None:
            click.echo(f"  {name.capitalize()}: {score}")
    click.echo(f"  Mistakes: {len(outcome.mistakes)}")
    for m in outcome.mistakes:
        click.echo(f"    [{m.severity.value}] {m.category.value}: {m.description}")
    click.echo(f"  Feedback: {outcome.feedback.feedback_id} ({outcome.feedback.tone.value})")
    click.echo("")
    click.echo(outcome.feedback.text)


@evaluate.command("run")
@click.argument("submission_id", type=click.KeyParamType(SubmissionID))
@di.inject
def evaluate_run(
    submission_id: SubmissionID,
    pipeline: EvaluationPipeline = di.Provide["evaluation.pipeline"],
) -> None:
    """Evaluate a pending submission."""
    echo_outcome(pipeline.evaluate(submission_id))


@evaluate.command("retry")
@click.argument("submission_id", type=click.KeyParamType(SubmissionID))
@di.inject
def evaluate_retry(
    submission_id: SubmissionID,
    pipeline: EvaluationPipeline = di.Provide["evaluation.pipeline"],
) -> None:
    """Re-run a failed evaluation; completed submissions are shown as they are."""
    echo_outcome(pipeline.retry(submission_id))


@evaluate.command("batch")
@click.option("--limit", "-n", type=int, default=None, help="Evaluate at most this many pending submissions")
@click.option("--workers", "-w", type=int, default=None, help="Number of worker threads")
@click.pass_obj
@di.inject
def evaluate_batch(
    ct: FluentmarkContainer,
    limit: int | None,
    workers: int | None,
    batch_limit: int = di.Provide["config.evaluation.batch_limit"],
) -> None:
    """Evaluate pending submissions, oldest first."""
    kwargs: dict[str, t.Any] = {} if workers is None else {"max_workers": workers}
    batch: BatchEvaluator = ct.evaluation.batch(**kwargs)
    results = batch.run(limit or batch_limit)

    for result in results:
        if result.ok:
            assert result.outcome is not None
            click.echo(f"{result.submission_id}  {result.outcome.evaluation.overall_score:>3}/100")
        else:
            click.echo(f"{result.submission_id}  {click.style('failed', fg='red')}: {result.error}")
    failed = sum(1 for r in results if not r.ok)
    click.echo(f"{len(results) - failed} evaluated, {failed} failed")
    if failed:
        raise SystemExit(1)


@evaluate.command("summarize")
@click.argument("feedback_id", type=click.KeyParamType(FeedbackID))
@di.inject
def evaluate_summarize(
    feedback_id: FeedbackID,
    pipeline: EvaluationPipeline = di.Provide["evaluation.pipeline"],
) -> None:
    """Replace a feedback narrative with its short summary."""
    feedback = pipeline.summarize_feedback(feedback_id)
    click.echo(feedback.text)


def parse_scores(ctx: click.Context, param: click.Parameter, value: tuple[str, ...]) -> ReviewScores:
    scores: dict[str, int] = {}
    for item in value:
        name, _, raw = item.partition("=")
        name = name if name.endswith("_score") else f"{name}_score"
        if name not in REVIEWABLE_SCORES or not raw.strip().isdigit():
            raise click.BadParameter(f"expected one of {', '.join(REVIEWABLE_SCORES)}=N, got {item!r}")
        scores[name] = int(raw)
    return t.cast(ReviewScores, scores)


@evaluate.command("review")
@click.argument("evaluation_id", type=click.KeyParamType(EvaluationID))
@click.option("--teacher", "-t", "teacher_id", type=click.KeyParamType(TeacherID), required=True)
@click.option("--notes", "-m", default=None, help="Notes for the student")
@click.option("--score", "-s", "scores", multiple=True, callback=parse_scores, help="Score override, e.g. grammar=80")
@di.inject
def evaluate_review(
    evaluation_id: EvaluationID,
    teacher_id: TeacherID,
    notes: str | None,
    scores: ReviewScores,
    session: Session = di.Provide["storage.persistent.session"],
    notifier: StoredNotifier = di.Provide["evaluation.notifier"],
) -> None:
    """Record a teacher's review of an evaluation and notify the student."""
    with session.begin():
        evaluation = evaluation_storage.review(
            evaluation_id, teacher_id=teacher_id, notes=notes, scores=scores, session=session
        )
        submission = submission_storage.get(evaluation.submission_id, session=session)
        if submission is None:
            raise SubmissionNotFound(f"no submission {evaluation.submission_id}")

    try:
        notifier.notify_teacher_review(submission.student_id, evaluation.evaluation_id)
    except NotificationFailure as e:
        click.echo(f"Warning: student was not notified: {e}", err=True)

    click.echo(f"Reviewed evaluation {evaluation.evaluation_id}")
    click.echo(f"  Overall score: {evaluation.overall_score}/100")
    if evaluation.teacher_notes:
        click.echo(f"  Notes: {evaluation.teacher_notes}")


@evaluate.command("challenges")
@click.argument("student_id", type=click.KeyParamType(StudentID))
@click.option("--window", "-n", type=int, default=10, help="Number of recent submissions to consider")
@di.inject
def evaluate_challenges(
    student_id: StudentID,
    window: int,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """List error categories that keep recurring in a student's recent work."""
    with session.begin():
        recent = mistake_storage.find_recent_for_student(student_id, limit=window, session=session)

    challenges = detect_challenges(recent.mistakes, window=recent.submissions)
    if not challenges:
        click.echo(f"No recurring challenges in the last {recent.submissions} submissions")
        return
    for c in challenges:
        click.echo(f"{c['category'].value:<14} {c['frequency']:>3} ({c['percentage']}%, {c['severity']})")
        click.echo(f"  {c['recommendation']}")


command = evaluate
