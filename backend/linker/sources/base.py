"""
Interfaces for the external systems a run talks to.
The engine depends only on these, so tests can swap in fakes.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional, Sequence

from pydantic import ValidationError

from shared.errors import LinkerError
from shared.models.domain import DomainModel, TimeInterval, TimestampedRecord, parse_instant
from shared.models.enums import RecordKind


class LivestreamWindow(DomainModel):
    """When a livestream actually ran, as reported by the video platform."""
    video_id: str
    actual_start_time: str
    actual_end_time: Optional[str] = None
    scheduled_start_time: Optional[str] = None

    @property
    def is_live(self) -> bool:
        return self.actual_end_time is None

    def interval(self, now: Optional[datetime] = None) -> TimeInterval:
        """
        Build the stream's TimeInterval. A stream that is still live ends "now".

        Raises:
            MalformedTimestamp: If either bound cannot be parsed.
            LinkerError: If the window does not end after it starts.
        """
        start = parse_instant(self.actual_start_time)
        if self.actual_end_time is None:
            end = now or datetime.now(timezone.utc)
        else:
            end = parse_instant(self.actual_end_time)
        try:
            return TimeInterval(start=start, end=end)
        except ValidationError as exc:
            raise LinkerError(
                f"Livestream {self.video_id} ends before it starts",
                hint="The video platform returned an inconsistent window; try again later.",
            ) from exc


class LivestreamSource(ABC):
    """Video platform that knows when a stream ran."""

    @property
    @abstractmethod
    def source_name(self) -> str:
        pass

    @abstractmethod
    async def fetch_livestream_window(self, video_id: str) -> LivestreamWindow:
        """
        Raises:
            NotFound: If the id resolves to zero videos.
            FetchFailed: On any transport or decoding error.
        """
        pass


class RecordStore(ABC):
    """Match-history service holding the records we link to."""

    @property
    @abstractmethod
    def source_name(self) -> str:
        pass

    @abstractmethod
    async def fetch_records(self, kind: RecordKind) -> Sequence[TimestampedRecord]:
        """
        Most recent records of one kind, newest first.

        Raises:
            FetchFailed: On any transport or decoding error.
        """
        pass

    @abstractmethod
    async def apply_update(self, kind: RecordKind, record_id: str, link: str) -> None:
        """
        Attach link to one record. Called at most once per record per run.

        Raises:
            UpdateFailed: If the store rejects the update or is unreachable.
        """
        pass
