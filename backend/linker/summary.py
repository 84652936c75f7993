"""
Salmon Run summary for a video description.

Lines are keyed by their offset into the stream in seconds. Keys are unique
(a later line replaces an earlier one with the same key) and the output is
ordered by key, not by insertion.
"""
from __future__ import annotations

from datetime import datetime
from typing import Mapping, Optional, Sequence

from shared.config import DEFAULT_TIDE_ABBREVIATIONS
from shared.models.domain import RunRecord, SummaryLine, WaveRecord
from shared.models.enums import SalmonEvent

from linker.links import offset_seconds

HEADER_LINE = "00:00:00 Start"
UNKNOWN_TIDE = "???"
UNKNOWN_EVENT = "UNKNOWN EVENT"
MAX_WAVES = 3

# {tide} is replaced by the wave's tide abbreviation
EVENT_PHRASES: dict[str, str] = {
    SalmonEvent.TORNADO.value: "Tornado",
    SalmonEvent.RUSH.value: "Rush",
    SalmonEvent.COHOCK_CHARGE.value: "Cohock",
    SalmonEvent.MOTHERSHIP.value: "Mothership",
    SalmonEvent.GRILLER.value: "Griller",
    SalmonEvent.FOG.value: "{tide} Fog",
    SalmonEvent.GOLDIE_SEEKING.value: "{tide} Seeking",
    SalmonEvent.MUDMOUTH_ERUPTION.value: "{tide} Mudmouth",
}


def format_offset(seconds: int) -> str:
    """HH:MM:SS; negative offsets get a leading minus sign."""
    sign = "-" if seconds < 0 else ""
    hours, rem = divmod(abs(seconds), 3600)
    minutes, secs = divmod(rem, 60)
    return f"{sign}{hours:02d}:{minutes:02d}:{secs:02d}"


class SummaryBuilder:
    def __init__(self, tide_abbreviations: Optional[Mapping[str, str]] = None) -> None:
        self._tides = dict(
            DEFAULT_TIDE_ABBREVIATIONS if tide_abbreviations is None else tide_abbreviations
        )
        self._lines: dict[int, str] = {0: HEADER_LINE}

    def tide_abbreviation(self, tide_key: str) -> str:
        return self._tides.get(tide_key, UNKNOWN_TIDE)

    def describe_wave(self, wave: WaveRecord) -> str:
        tide = self.tide_abbreviation(wave.tide_key)
        if wave.event is None:
            return f"{tide} {wave.golden_delivered}"
        phrase = EVENT_PHRASES.get(wave.event.key, UNKNOWN_EVENT).format(tide=tide)
        return f"{phrase} {wave.golden_delivered}"

    def describe_run(self, run: RunRecord, order_key: int) -> str:
        waves = ", ".join(self.describe_wave(w) for w in run.waves[:MAX_WAVES])
        return (
            f"{format_offset(order_key)} SR {run.danger_rate or 0}% "
            f"{run.golden_eggs} ({waves})"
        )

    def add(self, order_key: int, text: str) -> None:
        """Insert a line; an existing line with the same key is replaced."""
        self._lines[order_key] = text

    def add_runs(self, runs: Sequence[RunRecord], interval_start: datetime, offset: int) -> None:
        """
        Add one line per run, in input order.

        Raises:
            MalformedTimestamp: If a run's start time cannot be parsed.
        """
        for run in runs:
            order_key = offset_seconds(interval_start, run.start_time, offset)
            self.add(order_key, self.describe_run(run, order_key))

    def lines(self) -> list[SummaryLine]:
        return [SummaryLine(order_key=k, text=self._lines[k]) for k in sorted(self._lines)]

    def render(self) -> str:
        return "\n".join(line.text for line in self.lines())


def build_summary(
    runs: Sequence[RunRecord],
    interval_start: datetime,
    offset: int,
    tide_abbreviations: Optional[Mapping[str, str]] = None,
) -> str:
    builder = SummaryBuilder(tide_abbreviations)
    builder.add_runs(runs, interval_start, offset)
    return builder.render()
