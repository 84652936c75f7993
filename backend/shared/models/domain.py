"""
Pydantic v2 domain models shared across vodlinker.
Wire models mirror stat.ink's JSON and ignore fields we do not use; derived
models (LinkedUpdate, SummaryLine) are ephemeral and never persisted.
Every model is frozen: updates happen remotely, keyed by id.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shared.errors import MalformedTimestamp
from shared.models.enums import RecordKind


def parse_instant(value: Any) -> datetime:
    """Parse an RFC 3339 / ISO 8601 instant; naive or garbage input is rejected."""
    if not isinstance(value, str):
        raise MalformedTimestamp(value)
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError as exc:
        raise MalformedTimestamp(value) from exc
    if parsed.tzinfo is None:
        raise MalformedTimestamp(value)
    return parsed


# ── Base ────────────────────────────────────────────────────────────────
class DomainModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class WireModel(DomainModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )


# ── Time window ─────────────────────────────────────────────────────────
class TimeInterval(DomainModel):
    """Half-open stream window; only instants strictly inside count as matches."""
    start: datetime
    end: datetime

    @model_validator(mode="after")
    def check_order(self) -> "TimeInterval":
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("interval bounds must be timezone-aware")
        if not self.start < self.end:
            raise ValueError(f"interval start {self.start} is not before end {self.end}")
        return self

    def contains(self, instant: datetime) -> bool:
        return self.start < instant < self.end


# ── stat.ink records ────────────────────────────────────────────────────
class StatInkTime(WireModel):
    time: Optional[int] = None
    iso8601: str


class KeyRef(WireModel):
    key: str


class TimestampedRecord(WireModel):
    id: str
    start_at: StatInkTime

    @property
    def start_time(self) -> datetime:
        """Record start; raises MalformedTimestamp instead of guessing."""
        return parse_instant(self.start_at.iso8601)


class MatchRecord(TimestampedRecord):
    """A Splatoon 3 battle upload."""
    url: Optional[str] = None
    uuid: Optional[str] = None


class WaveRecord(WireModel):
    tide: KeyRef
    golden_delivered: int = 0
    event: Optional[KeyRef] = None

    @field_validator("golden_delivered", mode="before")
    @classmethod
    def none_is_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @property
    def tide_key(self) -> str:
        return self.tide.key


class RunRecord(TimestampedRecord):
    """A Salmon Run shift upload."""
    danger_rate: Optional[int] = None
    golden_eggs: int = 0
    waves: list[WaveRecord] = Field(default_factory=list)


    @field_validator("danger_rate", mode="before")
    @classmethod
    def truncate_danger_rate(cls, v: Any) -> Any:
        # stat.ink reports e.g. 333.0; the summary only shows whole percents
        if isinstance(v, float):
            return int(v)
        return v

    @field_validator("golden_eggs", mode="before")
    @classmethod
    def none_is_zero(cls, v: Any) -> Any:
        return 0 if v is None else v


# ── Derived ─────────────────────────────────────────────────────────────
class LinkedUpdate(DomainModel):
    """One pending write of a video link onto one stat.ink record."""
    record_id: str
    kind: RecordKind
    link: str


class SummaryLine(DomainModel):
    order_key: int
    text: str
