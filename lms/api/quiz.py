from __future__ import annotations

from fastapi import APIRouter

from lms.api.dependencies import StoreDep, UserDep
from lms.api.errors import domain_errors
from lms.schemas.quiz import QuestionReviewOut, QuizResultOut, QuizSubmitIn, QuizSubmitOut
from lms.services import quiz_service

router = APIRouter(prefix="/quiz", tags=["quiz"])


@router.post("/{lesson_id}/submit", response_model=QuizSubmitOut)
async def submit_quiz(
    lesson_id: str, body: QuizSubmitIn, principal: UserDep, store: StoreDep
) -> QuizSubmitOut:
    with domain_errors():
        submission = await quiz_service.submit(
            store, principal.user_id, lesson_id, body.answers, time_taken=body.time_taken
        )

    result = submission.result
    questions = submission.lesson.quiz_questions
    return QuizSubmitOut(
        score=result.score,
        passed=result.passed,
        total_questions=result.total_questions,
        correct_answers=result.correct_answers,
        answers=[
            QuestionReviewOut(
                question=questions[o.question_index].question,
                options=list(questions[o.question_index].options),
                correct_answer=o.correct_answer,
                user_answer=o.selected,
                is_correct=o.is_correct,
                points=o.points,
            )
            for o in result.outcomes
        ],
        lesson_completed=submission.progress.lesson.completed,
        course_completed=submission.progress.course_newly_completed,
    )


@router.get("/{lesson_id}/results", response_model=list[QuizResultOut])
async def quiz_results(
    lesson_id: str, principal: UserDep, store: StoreDep
) -> list[QuizResultOut]:
    with domain_errors():
        attempts = await quiz_service.results(store, principal.user_id, lesson_id)
    return [QuizResultOut.from_domain(r) for r in attempts]


@router.get("/{lesson_id}/best", response_model=QuizResultOut)
async def best_quiz_result(
    lesson_id: str, principal: UserDep, store: StoreDep
) -> QuizResultOut:
    with domain_errors():
        result = await quiz_service.best(store, principal.user_id, lesson_id)
    return QuizResultOut.from_domain(result)
