from __future__ import annotations

import logging
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, status
from pydantic import Field

from lms.api.dependencies import StoreDep, UserDep, optional_user
from lms.api.errors import domain_errors
from lms.models.course import Lesson, QuizQuestion
from lms.models.principal import Principal
from lms.schemas.base import CamelModel
from lms.schemas.progress import LessonCompleteOut
from lms.services import course_service, progress_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lessons", tags=["lessons"])


class QuizQuestionIn(CamelModel):
    question: str
    options: list[str]
    correct_answer: int
    points: int = 1


class QuizQuestionOut(CamelModel):
    question: str
    options: list[str]
    points: int


class LessonIn(CamelModel):
    title: str = Field(min_length=1, max_length=500)
    lesson_type: Literal["video", "article", "quiz"]
    order: int | None = Field(default=None, ge=1)
    duration: int = Field(default=1, ge=1)
    content: str = ""
    video_url: str | None = None
    article_content: str | None = None
    quiz_questions: list[QuizQuestionIn] = Field(default_factory=list)
    is_preview: bool = False


class LessonPatch(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    lesson_type: Literal["video", "article", "quiz"] | None = None
    order: int | None = Field(default=None, ge=1)
    duration: int | None = Field(default=None, ge=1)
    content: str | None = None
    video_url: str | None = None
    article_content: str | None = None
    quiz_questions: list[QuizQuestionIn] | None = None
    is_preview: bool | None = None


class LessonOut(CamelModel):
    """Quiz answers are withheld; learners get them back after submitting."""

    id: str
    course_id: str
    title: str
    lesson_type: str
    order: int
    duration: int
    content: str = ""
    video_url: str | None = None
    article_content: str | None = None
    quiz_questions: list[QuizQuestionOut] = Field(default_factory=list)
    is_preview: bool = False

    @classmethod
    def from_domain(cls, lesson: Lesson) -> LessonOut:
        return cls(
            id=lesson.id,
            course_id=lesson.course_id,
            title=lesson.title,
            lesson_type=lesson.lesson_type,
            order=lesson.order,
            duration=lesson.duration,
            content=lesson.content,
            video_url=lesson.video_url,
            article_content=lesson.article_content,
            quiz_questions=[
                QuizQuestionOut(question=q.question, options=list(q.options), points=q.points)
                for q in lesson.quiz_questions
            ],
            is_preview=lesson.is_preview,
        )


def _questions(items: list[QuizQuestionIn]) -> tuple[QuizQuestion, ...]:
    return tuple(
        QuizQuestion(
            question=q.question,
            options=tuple(q.options),
            correct_answer=q.correct_answer,
            points=q.points,
        )
        for q in items
    )


@router.get("/course/{course_id}", response_model=list[LessonOut])
async def list_course_lessons(course_id: str, store: StoreDep) -> list[LessonOut]:
    with domain_errors():
        lessons = await course_service.list_lessons(store, course_id)
    return [LessonOut.from_domain(le) for le in lessons]


@router.post(
    "/course/{course_id}",
    response_model=LessonOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_lesson(
    course_id: str, body: LessonIn, principal: UserDep, store: StoreDep
) -> LessonOut:
    with domain_errors():
        lesson = await course_service.create_lesson(
            store,
            principal,
            course_id,
            order=body.order,
            title=body.title,
            lesson_type=body.lesson_type,
            duration=body.duration,
            content=body.content,
            video_url=body.video_url,
            article_content=body.article_content,
            quiz_questions=_questions(body.quiz_questions),
            is_preview=body.is_preview,
        )
    await progress_service.invalidate_course(course_id)
    return LessonOut.from_domain(lesson)


@router.get("/{lesson_id}", response_model=LessonOut)
async def get_lesson(
    lesson_id: str,
    store: StoreDep,
    principal: Annotated[Principal | None, Depends(optional_user)],
) -> LessonOut:
    with domain_errors():
        lesson = await course_service.require_lesson(store, lesson_id)
        await course_service.get_with_lessons(store, lesson.course_id, principal)
    return LessonOut.from_domain(lesson)


@router.put("/{lesson_id}", response_model=LessonOut)
async def update_lesson(
    lesson_id: str, body: LessonPatch, principal: UserDep, store: StoreDep
) -> LessonOut:
    changes = body.model_dump(exclude_unset=True, exclude={"quiz_questions"})
    if body.quiz_questions is not None:
        changes["quiz_questions"] = _questions(body.quiz_questions)
    with domain_errors():
        lesson = await course_service.update_lesson(store, principal, lesson_id, **changes)
    await progress_service.invalidate_course(lesson.course_id)
    return LessonOut.from_domain(lesson)


@router.delete("/{lesson_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lesson(lesson_id: str, principal: UserDep, store: StoreDep) -> None:
    with domain_errors():
        lesson = await course_service.require_lesson(store, lesson_id)
        await course_service.delete_lesson(store, principal, lesson_id)
    await progress_service.invalidate_course(lesson.course_id)


@router.post("/{lesson_id}/complete", response_model=LessonCompleteOut)
async def complete_lesson(
    lesson_id: str, principal: UserDep, store: StoreDep
) -> LessonCompleteOut:
    """Mark a lesson completed.  Repeat calls are harmless and report
    ``alreadyCompleted: true``."""
    with domain_errors():
        update, already = await progress_service.complete_lesson(
            store, principal.user_id, lesson_id
        )
    return LessonCompleteOut(
        lesson_id=lesson_id,
        course_id=update.progress.course_id,
        already_completed=already,
        progress=update.progress.percent,
        status=update.progress.status,  # type: ignore[arg-type]
        completed_at=update.lesson.completed_at,
        certificate_id=update.certificate.id if update.certificate else None,
    )
