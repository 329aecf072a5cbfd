"""Tests for the fluentmark.model entities."""

from __future__ import annotations

import datetime

import pydantic as p
import pytest

from fluentmark.model import Activity, ActivityID, BaseModel, ContentType, Evaluation, EvaluationID, Feedback, \
    FeedbackID, Mistake, Notification, StudentID, Submission, SubmissionID, WithCtime, WithTimestamps, \
    WritingContent

NOW = datetime.datetime(2024, 9, 17, 12, 0, tzinfo=datetime.UTC)


class TestEntityBases(object):
    @pytest.mark.parametrize("model", [Activity, Submission, Evaluation, Feedback])
    def test_timestamped_entities(self, model: type[BaseModel]) -> None:
        assert issubclass(model, WithTimestamps)
        assert {"create_time", "update_time"} <= set(model.model_fields)

    @pytest.mark.parametrize("model", [Mistake, Notification])
    def test_create_time_only_entities(self, model: type[BaseModel]) -> None:
        assert issubclass(model, WithCtime)
        assert "update_time" not in model.model_fields


class TestSubmission(object):
    def test_content_is_discriminated(self) -> None:
        submission = Submission.model_validate(
            {
                "submission_id": str(SubmissionID()),
                "student_id": str(StudentID()),
                "activity_id": str(ActivityID()),
                "content": {"content_type": "writing", "text": "Two words"},
                "submitted_at": NOW,
                "create_time": NOW,
                "update_time": NOW,
            }
        )

        assert isinstance(submission.content, WritingContent)
        assert submission.content.word_count == 2
        assert submission.content_type is ContentType.Writing

    def test_unknown_content_type_is_rejected(self) -> None:
        with pytest.raises(p.ValidationError):
            Submission.model_validate(
                {
                    "submission_id": str(SubmissionID()),
                    "student_id": str(StudentID()),
                    "activity_id": str(ActivityID()),
                    "content": {"content_type": "video"},
                    "submitted_at": NOW,
                    "create_time": NOW,
                    "update_time": NOW,
                }
            )


class TestKeys(object):
    def test_keys_are_typed(self) -> None:
        key = EvaluationID()
        assert EvaluationID(str(key)) == key
        with pytest.raises(ValueError):
            FeedbackID(str(key))
