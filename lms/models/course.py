from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

LESSON_TYPES = ("video", "article", "quiz")
COURSE_LEVELS = ("Beginner", "Intermediate", "Advanced")


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class Course:
    id: str
    title: str
    description: str
    instructor_id: str
    category: str
    subtitle: str = ""
    level: str = "Beginner"  # Beginner|Intermediate|Advanced
    price: float = 0.0
    is_published: bool = False
    created_at: datetime = field(default_factory=_now)

    @staticmethod
    def new(
        *,
        title: str,
        description: str,
        instructor_id: str,
        category: str,
        subtitle: str = "",
        level: str = "Beginner",
        price: float = 0.0,
        is_published: bool = False,
    ) -> Course:
        return Course(
            id=str(uuid4()),
            title=title,
            description=description,
            instructor_id=instructor_id,
            category=category,
            subtitle=subtitle,
            level=level,
            price=price,
            is_published=is_published,
        )


@dataclass(frozen=True, slots=True)
class QuizQuestion:
    question: str
    options: tuple[str, ...]
    correct_answer: int
    points: int = 1


@dataclass(frozen=True, slots=True)
class Lesson:
    id: str
    course_id: str
    title: str
    lesson_type: str  # video|article|quiz
    order: int
    duration: int = 1  # minutes
    content: str = ""
    video_url: str | None = None
    article_content: str | None = None
    quiz_questions: tuple[QuizQuestion, ...] = ()
    is_preview: bool = False

    @staticmethod
    def new(
        *,
        course_id: str,
        title: str,
        lesson_type: str,
        order: int,
        duration: int = 1,
        content: str = "",
        video_url: str | None = None,
        article_content: str | None = None,
        quiz_questions: tuple[QuizQuestion, ...] = (),
        is_preview: bool = False,
    ) -> Lesson:
        return Lesson(
            id=str(uuid4()),
            course_id=course_id,
            title=title,
            lesson_type=lesson_type,
            order=order,
            duration=duration,
            content=content,
            video_url=video_url,
            article_content=article_content,
            quiz_questions=quiz_questions,
            is_preview=is_preview,
        )

    @property
    def is_quiz(self) -> bool:
        return self.lesson_type == "quiz"
