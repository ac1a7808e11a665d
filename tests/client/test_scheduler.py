"""Debounce, durability and failure handling of SaveScheduler.

Driven with asyncio.run and a short debounce; the remote side is a fake
that records every call.
"""

from __future__ import annotations

import asyncio

from lms.client.api import (
    RemoteNotFoundError,
    RemoteServiceError,
    RemoteTimeoutError,
)
from lms.client.local_cache import InMemoryProgressCache
from lms.client.scheduler import (
    ERROR,
    FAILURE_DISABLED,
    FAILURE_NOT_FOUND,
    FAILURE_OTHER,
    FAILURE_TIMEOUT,
    IDLE,
    OFFLINE,
    SAVED,
    SaveScheduler,
)
from lms.schemas.progress import CourseProgressOut, LessonProgressOut

DEBOUNCE = 0.05
SETTLE = 0.15


class FakeApi:
    def __init__(self, error: Exception | None = None, delay: float = 0.0) -> None:
        self.calls: list[dict] = []
        self.events: list[str] = []
        self.error = error
        self.delay = delay

    async def update_lesson_progress(
        self, course_id, lesson_id, *, completed, video_timestamp, timeout
    ) -> CourseProgressOut:
        self.calls.append(
            {
                "lesson_id": lesson_id,
                "completed": completed,
                "video_timestamp": video_timestamp,
                "timeout": timeout,
            }
        )
        self.events.append(f"start:{video_timestamp}")
        if self.delay:
            await asyncio.sleep(self.delay)
        self.events.append(f"end:{video_timestamp}")
        if self.error is not None:
            raise self.error
        return CourseProgressOut(
            course_id=course_id,
            progress=100 if completed else 0,
            status="in_progress",
            lessons=[
                LessonProgressOut(
                    lesson_id=lesson_id, completed=completed, video_timestamp=video_timestamp
                )
            ],
        )


def _scheduler(api: FakeApi, cache: InMemoryProgressCache | None = None, **kw) -> SaveScheduler:
    return SaveScheduler(
        "c1",
        api,  # type: ignore[arg-type]
        cache or InMemoryProgressCache(),
        debounce=DEBOUNCE,
        auto_timeout=5.0,
        manual_timeout=10.0,
        **kw,
    )


def test_rapid_saves_collapse_into_one_request_with_latest_payload() -> None:
    api = FakeApi()

    async def scenario() -> SaveScheduler:
        s = _scheduler(api)
        for ts in (1, 2, 3):
            assert await s.save("l1", video_timestamp=ts) is None
        assert api.calls == []
        await asyncio.sleep(SETTLE)
        return s

    s = asyncio.run(scenario())
    assert len(api.calls) == 1
    assert api.calls[0]["video_timestamp"] == 3
    assert api.calls[0]["timeout"] == 5.0
    assert s.state == SAVED
    assert s.last_saved_at is not None


def test_immediate_save_cancels_pending_timer() -> None:
    api = FakeApi()

    async def scenario() -> None:
        s = _scheduler(api)
        await s.save("l1", video_timestamp=5)
        outcome = await s.save("l1", completed=True, video_timestamp=6)
        assert outcome is not None and outcome.ok
        await asyncio.sleep(SETTLE)

    asyncio.run(scenario())
    assert len(api.calls) == 1
    assert api.calls[0]["completed"] is True
    assert api.calls[0]["timeout"] == 10.0


def test_immediate_hint_without_completion_sends_now() -> None:
    api = FakeApi()

    async def scenario() -> None:
        s = _scheduler(api)
        await s.save("l1", video_timestamp=7, immediate=True)

    asyncio.run(scenario())
    assert api.calls[0]["completed"] is False
    assert api.calls[0]["timeout"] == 10.0


def test_timers_are_per_lesson() -> None:
    api = FakeApi()

    async def scenario() -> None:
        s = _scheduler(api)
        await s.save("l1", video_timestamp=1)
        await s.save("l2", video_timestamp=2)
        await s.save("l1", video_timestamp=3)
        await asyncio.sleep(SETTLE)

    asyncio.run(scenario())
    sent = sorted((c["lesson_id"], c["video_timestamp"]) for c in api.calls)
    assert sent == [("l1", 3), ("l2", 2)]


def test_local_cache_written_before_remote_even_on_failure() -> None:
    api = FakeApi(error=RemoteTimeoutError("slow"))
    cache = InMemoryProgressCache()

    async def scenario() -> SaveScheduler:
        s = _scheduler(api, cache)
        outcome = await s.save("l1", completed=True, video_timestamp=9)
        assert outcome is not None
        assert outcome.failure == FAILURE_TIMEOUT
        return s

    s = asyncio.run(scenario())
    entry = cache.load("c1")["l1"]
    assert entry.completed is True
    assert entry.video_timestamp == 9
    assert entry.saved_at is not None
    assert s.state == OFFLINE
    assert s.remote_enabled


def test_debounced_payload_is_local_before_timer_fires() -> None:
    cache = InMemoryProgressCache()

    async def scenario() -> None:
        s = _scheduler(FakeApi(), cache)
        await s.save("l1", video_timestamp=4)
        assert cache.load("c1")["l1"].video_timestamp == 4
        assert s.pending_lessons() == ["l1"]
        await s.close()

    asyncio.run(scenario())


def test_not_found_disables_remote_until_reenabled() -> None:
    api = FakeApi(error=RemoteNotFoundError("gone"))

    async def scenario() -> SaveScheduler:
        s = _scheduler(api)
        first = await s.save("l1", completed=True)
        assert first is not None and first.failure == FAILURE_NOT_FOUND
        assert not s.remote_enabled

        second = await s.save("l2", completed=True)
        assert second is not None and second.failure == FAILURE_DISABLED
        assert len(api.calls) == 1

        s.enable_remote()
        api.error = None
        third = await s.save("l2", completed=True)
        assert third is not None and third.ok
        return s

    s = asyncio.run(scenario())
    assert len(api.calls) == 2
    assert s.state == SAVED


def test_unexpected_error_reports_error_state() -> None:
    api = FakeApi(error=RemoteServiceError("500"))

    async def scenario() -> SaveScheduler:
        s = _scheduler(api)
        outcome = await s.save("l1", completed=True)
        assert outcome is not None and outcome.failure == FAILURE_OTHER
        return s

    s = asyncio.run(scenario())
    assert s.state == ERROR
    assert s.remote_enabled


def test_flush_sends_pending_now_and_close_drops_timers() -> None:
    api = FakeApi()

    async def scenario() -> None:
        s = _scheduler(api)
        await s.save("l1", video_timestamp=1)
        outcomes = await s.flush()
        assert [o.lesson_id for o in outcomes] == ["l1"]

        await s.save("l2", video_timestamp=2)
        await s.close()
        await asyncio.sleep(SETTLE)

    asyncio.run(scenario())
    assert [c["lesson_id"] for c in api.calls] == ["l1"]


def test_sends_for_one_lesson_keep_issue_order() -> None:
    api = FakeApi(delay=0.05)

    async def scenario() -> None:
        s = _scheduler(api)
        await s.save("l1", video_timestamp=1)
        # let the timer fire; the first request is now in flight
        await asyncio.sleep(DEBOUNCE + 0.01)
        await s.save("l1", completed=True, video_timestamp=2)
        await asyncio.sleep(SETTLE)

    asyncio.run(scenario())
    assert api.events == ["start:1", "end:1", "start:2", "end:2"]


def test_confirmed_callback_receives_server_record() -> None:
    api = FakeApi()
    seen: list[CourseProgressOut] = []

    async def scenario() -> None:
        s = _scheduler(api, on_confirmed=seen.append)
        assert s.state == IDLE
        await s.save("l1", completed=True)

    asyncio.run(scenario())
    assert len(seen) == 1
    assert seen[0].lessons[0].completed is True
