"""Per-course progress session for one learner.

Owns the merged view of a course while it is open: ``load`` reconciles
the server record with the local mirror, saves go through the
SaveScheduler, and the view is re-merged after every local write and
every confirmed save.  When the merged view reaches completed the
tracker requests the certificate; the server issues it at most once.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from lms.client.api import (
    ProgressApiClient,
    RemoteNotFoundError,
    RemoteProgressError,
    RemoteTimeoutError,
)
from lms.client.config import ClientSettings
from lms.client.local_cache import ProgressCache
from lms.client.reconcile import MergeResult, merge_progress
from lms.client.scheduler import SaveOutcome, SaveScheduler
from lms.schemas.certificates import CertificateOut
from lms.schemas.progress import CourseProgressOut
from lms.schemas.quiz import QuizSubmitOut

logger = logging.getLogger(__name__)


class CourseProgressTracker:
    def __init__(
        self,
        course_id: str,
        lesson_ids: Sequence[str],
        api: ProgressApiClient,
        cache: ProgressCache,
        *,
        settings: ClientSettings | None = None,
    ) -> None:
        self.course_id = course_id
        self.lesson_ids = list(lesson_ids)
        self._api = api
        self._cache = cache
        self._manual_timeout = settings.manual_save_timeout if settings else 10.0

        self.scheduler = SaveScheduler(
            course_id,
            api,
            cache,
            debounce=settings.debounce_seconds if settings else 3.0,
            auto_timeout=settings.auto_save_timeout if settings else 5.0,
            manual_timeout=self._manual_timeout,
            on_confirmed=self._confirmed,
        )
        self._remote: CourseProgressOut | None = None
        self._view = merge_progress(None, {}, self.lesson_ids)
        self.current_index = 0
        self.certificate: CertificateOut | None = None

    @property
    def view(self) -> MergeResult:
        return self._view

    @property
    def current_progress(self) -> int:
        return self._view.progress

    @property
    def current_lesson_id(self) -> str | None:
        if not self.lesson_ids:
            return None
        return self.lesson_ids[self.current_index]

    async def load(self) -> MergeResult:
        """Fetch the server record and reconcile it with the local mirror."""
        self.scheduler.enable_remote()
        try:
            self._remote = await self._api.get_progress(
                self.course_id, timeout=self._manual_timeout
            )
        except RemoteNotFoundError:
            logger.info("No remote progress for course=%s; using local copy", self.course_id)
            self.scheduler.disable_remote()
        except RemoteTimeoutError:
            logger.warning("Loading progress timed out for course=%s", self.course_id)
        except RemoteProgressError:
            logger.exception("Loading progress failed for course=%s", self.course_id)

        self._remerge()
        resume = self._view.last_accessed_lesson
        if resume in self.lesson_ids:
            self.current_index = self.lesson_ids.index(resume)
        return self._view

    def _remerge(self) -> None:
        self._view = merge_progress(
            self._remote, self._cache.load(self.course_id), self.lesson_ids
        )

    def _confirmed(self, progress: CourseProgressOut) -> None:
        self._remote = progress
        self._remerge()

    async def select_lesson(self, index: int) -> None:
        if not 0 <= index < len(self.lesson_ids):
            raise IndexError(f"lesson index {index} out of range")
        self.current_index = index
        lesson_id = self.lesson_ids[index]
        known = self._view.view(lesson_id)
        await self.scheduler.save(
            lesson_id, completed=known.completed, video_timestamp=known.video_timestamp
        )
        self._remerge()

    async def update_video_position(
        self, seconds: float, lesson_id: str | None = None
    ) -> None:
        lesson_id = lesson_id or self.current_lesson_id
        if lesson_id is None:
            return
        known = self._view.view(lesson_id)
        await self.scheduler.save(
            lesson_id, completed=known.completed, video_timestamp=seconds
        )
        self._remerge()

    async def mark_lesson_complete(self, lesson_id: str | None = None) -> SaveOutcome | None:
        lesson_id = lesson_id or self.current_lesson_id
        if lesson_id is None:
            return None
        known = self._view.view(lesson_id)
        outcome = await self.scheduler.save(
            lesson_id, completed=True, video_timestamp=known.video_timestamp, immediate=True
        )
        self._remerge()
        await self._maybe_request_certificate()
        return outcome

    async def submit_quiz(
        self, lesson_id: str, answers: dict[int, int], *, time_taken: int = 0
    ) -> QuizSubmitOut:
        """Submit a quiz; RemoteValidationError propagates to the caller."""
        result = await self._api.submit_quiz(
            lesson_id, answers, time_taken=time_taken, timeout=self._manual_timeout
        )
        if result.passed:
            await self.mark_lesson_complete(lesson_id)
        return result

    async def _maybe_request_certificate(self) -> None:
        if self.certificate is not None or not self._view.is_completed:
            return
        if not self.scheduler.remote_enabled:
            return
        try:
            self.certificate = await self._api.issue_certificate(
                self.course_id, timeout=self._manual_timeout
            )
        except RemoteProgressError as e:
            logger.warning("Certificate request failed for course=%s: %s", self.course_id, e)
            return
        logger.info(
            "Certificate %s for course=%s",
            self.certificate.certificate_code,
            self.course_id,
        )

    async def close(self) -> None:
        await self.scheduler.close()
