"""Shared fixtures: record factories and a fake stat.ink/YouTube pair."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

import pytest

from shared.errors import UpdateFailed
from shared.models.domain import MatchRecord, RunRecord, TimeInterval
from shared.models.enums import RecordKind

from linker.sources.base import LivestreamSource, LivestreamWindow, RecordStore

STREAM_START = datetime(2024, 3, 9, 10, 0, 0, tzinfo=timezone.utc)
STREAM_END = datetime(2024, 3, 9, 10, 30, 0, tzinfo=timezone.utc)
VIDEO_ID = "dQw4w9WgXcQ"


def iso(dt: datetime) -> str:
    return dt.isoformat()


@pytest.fixture
def interval() -> TimeInterval:
    return TimeInterval(start=STREAM_START, end=STREAM_END)


@pytest.fixture
def make_match() -> Callable[..., MatchRecord]:
    def _make(record_id: str, at: datetime | str) -> MatchRecord:
        stamp = at if isinstance(at, str) else iso(at)
        return MatchRecord.model_validate({"id": record_id, "start_at": {"iso8601": stamp}})
    return _make


@pytest.fixture
def make_run() -> Callable[..., RunRecord]:
    def _make(
        record_id: str,
        at: datetime,
        danger_rate: Optional[float] = 40,
        golden_eggs: int = 12,
        waves: Optional[list[dict[str, Any]]] = None,
    ) -> RunRecord:
        return RunRecord.model_validate({
            "id": record_id,
            "start_at": {"time": int(at.timestamp()), "iso8601": iso(at)},
            "danger_rate": danger_rate,
            "golden_eggs": golden_eggs,
            "waves": waves if waves is not None else [
                {"tide": {"key": "low"}, "golden_delivered": 20, "event": None},
            ],
        })
    return _make


class FakeYouTube(LivestreamSource):
    def __init__(self, window: Optional[LivestreamWindow] = None, error: Optional[Exception] = None) -> None:
        self.window = window or LivestreamWindow(
            video_id=VIDEO_ID,
            actual_start_time=iso(STREAM_START),
            actual_end_time=iso(STREAM_END),
        )
        self.error = error
        self.calls: list[str] = []

    @property
    def source_name(self) -> str:
        return "youtube"

    async def fetch_livestream_window(self, video_id: str) -> LivestreamWindow:
        self.calls.append(video_id)
        if self.error:
            raise self.error
        return self.window


class FakeStatInk(RecordStore):
    def __init__(
        self,
        matches: Optional[list[MatchRecord]] = None,
        runs: Optional[list[RunRecord]] = None,
        failing_ids: set[str] | None = None,
        fetch_error: Optional[Exception] = None,
    ) -> None:
        self.records = {RecordKind.MATCH: matches or [], RecordKind.RUN: runs or []}
        self.failing_ids = failing_ids or set()
        self.fetch_error = fetch_error
        self.updates: list[tuple[RecordKind, str, str]] = []

    @property
    def source_name(self) -> str:
        return "stat.ink"

    async def fetch_records(self, kind: RecordKind) -> list:
        if self.fetch_error:
            raise self.fetch_error
        return list(self.records[kind])

    async def apply_update(self, kind: RecordKind, record_id: str, link: str) -> None:
        self.updates.append((kind, record_id, link))
        if record_id in self.failing_ids:
            raise UpdateFailed(record_id, kind.value, "HTTP 403")


@pytest.fixture
def fake_youtube() -> FakeYouTube:
    return FakeYouTube()


@pytest.fixture
def at() -> Callable[..., datetime]:
    """Offset from stream start: at(minutes=5) -> 10:05:00."""
    def _at(**kwargs: float) -> datetime:
        return STREAM_START + timedelta(**kwargs)
    return _at
