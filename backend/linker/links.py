"""
Timestamp links into the stream video.
A link is the record's offset from stream start plus a user-supplied delay
correction, in whole seconds.
"""
from __future__ import annotations

import re
from datetime import datetime
from typing import Sequence

from shared.errors import InvalidVideoId
from shared.models.domain import LinkedUpdate, TimeInterval, TimestampedRecord
from shared.models.enums import RecordKind

WATCH_URL = "https://youtube.com/watch?v={video_id}&t={seconds}s"

_VIDEO_ID = r"[A-Za-z0-9_-]{11}"
_BARE_ID_RE = re.compile(rf"^{_VIDEO_ID}$")
_URL_PATTERNS = (
    re.compile(rf"(?:youtube\.com|youtube-nocookie\.com)/watch\?(?:.*&)?v=({_VIDEO_ID})"),
    re.compile(rf"youtu\.be/({_VIDEO_ID})"),
    re.compile(rf"youtube\.com/(?:live|shorts|embed)/({_VIDEO_ID})"),
)


def extract_video_id(value: str) -> str:
    """Accept a bare video id or a common YouTube URL form and return the id."""
    value = value.strip()
    if _BARE_ID_RE.match(value):
        return value
    for pattern in _URL_PATTERNS:
        m = pattern.search(value)
        if m:
            return m.group(1)
    raise InvalidVideoId(f"Could not find a YouTube video id in {value!r}")


def offset_seconds(interval_start: datetime, record_start: datetime, offset: int) -> int:
    """Whole seconds from stream start to the record, plus offset (may be negative)."""
    return int((record_start - interval_start).total_seconds()) + offset


def build_link(video_id: str, interval_start: datetime, record_start: datetime, offset: int) -> str:
    seconds = offset_seconds(interval_start, record_start, offset)
    return WATCH_URL.format(video_id=video_id, seconds=seconds)


def build_updates(
    kind: RecordKind,
    records: Sequence[TimestampedRecord],
    interval: TimeInterval,
    video_id: str,
    offset: int,
) -> list[LinkedUpdate]:
    return [
        LinkedUpdate(
            record_id=r.id,
            kind=kind,
            link=build_link(video_id, interval.start, r.start_time, offset),
        )
        for r in records
    ]
