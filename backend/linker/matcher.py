"""Select the records that started strictly inside the stream window."""
from __future__ import annotations

from typing import Sequence, TypeVar

from shared.models.domain import TimeInterval, TimestampedRecord

R = TypeVar("R", bound=TimestampedRecord)


def match_interval(interval: TimeInterval, records: Sequence[R]) -> list[R]:
    """
    Return the records whose start time lies strictly between the interval
    bounds, in input order. A record exactly on either bound is excluded.

    Raises:
        MalformedTimestamp: If any record's start time cannot be parsed.
    """
    return [r for r in records if interval.contains(r.start_time)]
