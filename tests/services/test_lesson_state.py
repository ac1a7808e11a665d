from __future__ import annotations

from datetime import UTC, datetime, timedelta

from lms.models.progress import (
    COMPLETED,
    IN_PROGRESS,
    NOT_STARTED,
    EnrollmentProgress,
    LessonProgress,
)
from lms.services import lesson_state

T0 = datetime(2026, 1, 1, tzinfo=UTC)
T1 = T0 + timedelta(minutes=5)


def test_first_access_moves_lesson_to_in_progress() -> None:
    entry = lesson_state.touch(None, "l1", T0)
    assert entry.state == IN_PROGRESS
    assert entry.last_accessed_at == T0
    assert LessonProgress(lesson_id="l1").state == NOT_STARTED


def test_completion_sets_completed_at_once() -> None:
    done = lesson_state.apply_update(None, "l1", T0, completed=True)
    assert done.state == COMPLETED
    again = lesson_state.apply_update(done, "l1", T1, completed=True, video_timestamp=30)
    assert again.completed_at == T0
    assert again.video_timestamp == 30
    assert again.last_accessed_at == T1


def test_completed_false_never_reverts() -> None:
    done = lesson_state.apply_update(None, "l1", T0, completed=True)
    after = lesson_state.apply_update(done, "l1", T1, completed=False)
    assert after.completed
    assert after.completed_at == T0


def test_negative_video_timestamp_clamped() -> None:
    entry = lesson_state.touch(None, "l1", T0, video_timestamp=-4)
    assert entry.video_timestamp == 0.0


def test_passing_quiz_completes_and_lower_retake_keeps_it() -> None:
    passed = lesson_state.record_quiz_attempt(None, "q", T0, score=80, answers={0: 1})
    assert passed.completed
    retake = lesson_state.record_quiz_attempt(passed, "q", T1, score=20, answers={0: 0})
    assert retake.completed
    assert retake.completed_at == T0
    assert retake.quiz_score == 20
    assert [a.score for a in retake.quiz_attempts] == [80, 20]


def test_failing_quiz_leaves_lesson_in_progress() -> None:
    entry = lesson_state.record_quiz_attempt(None, "q", T0, score=69, answers={})
    assert entry.state == IN_PROGRESS


def _progress(*entries: LessonProgress, status: str = NOT_STARTED) -> EnrollmentProgress:
    return EnrollmentProgress(user_id="u", course_id="c", status=status, lessons=entries)


def test_summarize_counts_only_current_lessons() -> None:
    progress = _progress(
        LessonProgress(lesson_id="a", completed=True),
        LessonProgress(lesson_id="gone", completed=True),
    )
    out = lesson_state.summarize(progress, ["a", "b", "c"], T0)
    assert out.percent == 33
    assert out.status == IN_PROGRESS


def test_summarize_completes_course_and_is_sticky() -> None:
    progress = _progress(
        LessonProgress(lesson_id="a", completed=True),
        LessonProgress(lesson_id="b", completed=True),
    )
    done = lesson_state.summarize(progress, ["a", "b"], T0)
    assert done.status == COMPLETED
    assert done.percent == 100
    assert done.completed_at == T0
    assert lesson_state.became_completed(progress, done)

    # a lesson added later lowers the percent but not the status
    later = lesson_state.summarize(done, ["a", "b", "c"], T1)
    assert later.status == COMPLETED
    assert later.percent == 67
    assert later.completed_at == T0
    assert not lesson_state.became_completed(done, later)


def test_summarize_empty_course_is_zero_percent() -> None:
    out = lesson_state.summarize(_progress(), [], T0)
    assert out.percent == 0
    assert out.status == NOT_STARTED
    assert out.started_at == T0


def test_summarize_keeps_last_accessed_lesson_when_not_given() -> None:
    progress = EnrollmentProgress(user_id="u", course_id="c", last_accessed_lesson="a")
    assert lesson_state.summarize(progress, ["a"], T0).last_accessed_lesson == "a"
    assert (
        lesson_state.summarize(progress, ["a"], T0, last_accessed_lesson="b").last_accessed_lesson
        == "b"
    )


def test_summarize_accumulates_time_spent() -> None:
    progress = _progress(LessonProgress(lesson_id="a"))
    first = lesson_state.summarize(progress, ["a"], T0, time_spent=40)
    second = lesson_state.summarize(first, ["a"], T1, time_spent=20)
    assert second.total_time_spent == 60
    assert lesson_state.summarize(second, ["a"], T1, time_spent=-5).total_time_spent == 60
