"""Debounced, local-first progress saves.

Every save writes the local mirror first.  Then:

  completed or immediate  -> sent now with the manual timeout; any timer
                             pending for that lesson is cancelled
  otherwise               -> buffered; a per-lesson timer is (re)started
                             and only the latest payload is sent when it
                             fires, with the auto-save timeout

Remote failures never undo the local write:

  timeout    remote stays enabled, state "offline"
  not_found  remote disabled until ``enable_remote()`` (next load)
  other      logged, state "error"

Sends for the same lesson are serialized in issue order.  In-flight
requests are never cancelled; ``close()`` only drops pending timers.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from lms.client.api import (
    ProgressApiClient,
    RemoteNotFoundError,
    RemoteProgressError,
    RemoteTimeoutError,
)
from lms.client.local_cache import LocalLessonEntry, ProgressCache
from lms.schemas.progress import CourseProgressOut

logger = logging.getLogger(__name__)

IDLE = "idle"
SAVING = "saving"
SAVED = "saved"
OFFLINE = "offline"
ERROR = "error"

FAILURE_TIMEOUT = "timeout"
FAILURE_NOT_FOUND = "not_found"
FAILURE_DISABLED = "disabled"
FAILURE_OTHER = "other"


@dataclass(frozen=True, slots=True)
class SaveRequest:
    lesson_id: str
    completed: bool
    video_timestamp: float


@dataclass(frozen=True, slots=True)
class SaveOutcome:
    lesson_id: str
    ok: bool
    failure: str | None = None
    progress: CourseProgressOut | None = None


class SaveScheduler:
    def __init__(
        self,
        course_id: str,
        api: ProgressApiClient,
        cache: ProgressCache,
        *,
        debounce: float = 3.0,
        auto_timeout: float = 5.0,
        manual_timeout: float = 10.0,
        on_confirmed: Callable[[CourseProgressOut], None] | None = None,
    ) -> None:
        self.course_id = course_id
        self._api = api
        self._cache = cache
        self._debounce = debounce
        self._auto_timeout = auto_timeout
        self._manual_timeout = manual_timeout
        self._on_confirmed = on_confirmed

        self._timers: dict[str, asyncio.Task[None]] = {}
        self._pending: dict[str, SaveRequest] = {}
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

        self._remote_enabled = True
        self.state = IDLE
        self.last_saved_at: datetime | None = None
        self.sent = 0

    @property
    def remote_enabled(self) -> bool:
        return self._remote_enabled

    def enable_remote(self) -> None:
        self._remote_enabled = True

    def disable_remote(self) -> None:
        self._remote_enabled = False

    def pending_lessons(self) -> list[str]:
        return sorted(self._pending)

    def write_local(self, request: SaveRequest) -> None:
        now = datetime.now(UTC)
        self._cache.save_lesson(
            self.course_id,
            request.lesson_id,
            LocalLessonEntry(
                completed=request.completed,
                video_timestamp=request.video_timestamp,
                last_accessed_at=now,
                saved_at=now,
            ),
        )

    async def save(
        self,
        lesson_id: str,
        *,
        completed: bool = False,
        video_timestamp: float = 0.0,
        immediate: bool = False,
    ) -> SaveOutcome | None:
        """Record a save; returns the outcome when sent now, else None."""
        request = SaveRequest(lesson_id, completed, max(0.0, video_timestamp))
        self.write_local(request)

        self._cancel_timer(lesson_id)
        if completed or immediate:
            self._pending.pop(lesson_id, None)
            return await self._send(request, self._manual_timeout)

        self._pending[lesson_id] = request
        self._timers[lesson_id] = asyncio.create_task(self._fire_later(lesson_id))
        return None

    async def flush(self) -> list[SaveOutcome]:
        """Send every buffered payload now."""
        requests = [self._pending.pop(lid) for lid in sorted(self._pending)]
        for request in requests:
            self._cancel_timer(request.lesson_id)
        return list(
            await asyncio.gather(*(self._send(r, self._auto_timeout) for r in requests))
        )

    async def close(self) -> None:
        timers = list(self._timers.values())
        self._timers.clear()
        self._pending.clear()
        for task in timers:
            task.cancel()
        await asyncio.gather(*timers, return_exceptions=True)

    def _cancel_timer(self, lesson_id: str) -> None:
        task = self._timers.pop(lesson_id, None)
        if task is not None:
            task.cancel()

    async def _fire_later(self, lesson_id: str) -> None:
        await asyncio.sleep(self._debounce)
        # past this point the send is in flight and no longer cancellable
        self._timers.pop(lesson_id, None)
        request = self._pending.pop(lesson_id, None)
        if request is not None:
            await self._send(request, self._auto_timeout)

    async def _send(self, request: SaveRequest, timeout: float) -> SaveOutcome:
        if not self._remote_enabled:
            self.state = OFFLINE
            return SaveOutcome(request.lesson_id, ok=False, failure=FAILURE_DISABLED)

        self.state = SAVING
        async with self._locks[request.lesson_id]:
            try:
                self.sent += 1
                progress = await self._api.update_lesson_progress(
                    self.course_id,
                    request.lesson_id,
                    completed=request.completed,
                    video_timestamp=request.video_timestamp,
                    timeout=timeout,
                )
            except RemoteTimeoutError:
                logger.warning(
                    "Progress save timed out; kept locally course=%s lesson=%s",
                    self.course_id,
                    request.lesson_id,
                )
                self.state = OFFLINE
                return SaveOutcome(request.lesson_id, ok=False, failure=FAILURE_TIMEOUT)
            except RemoteNotFoundError:
                logger.warning(
                    "Progress API unavailable; saving locally until next load course=%s",
                    self.course_id,
                )
                self._remote_enabled = False
                self.state = OFFLINE
                return SaveOutcome(request.lesson_id, ok=False, failure=FAILURE_NOT_FOUND)
            except RemoteProgressError:
                logger.exception(
                    "Progress save failed course=%s lesson=%s",
                    self.course_id,
                    request.lesson_id,
                )
                self.state = ERROR
                return SaveOutcome(request.lesson_id, ok=False, failure=FAILURE_OTHER)

        self.state = SAVED
        self.last_saved_at = datetime.now(UTC)
        if self._on_confirmed is not None:
            self._on_confirmed(progress)
        return SaveOutcome(request.lesson_id, ok=True, progress=progress)
