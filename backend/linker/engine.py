"""
Run orchestration: fetch -> match -> link -> dispatch -> (summary).

Fetches run concurrently; matching, link building and the summary are plain
synchronous functions over immutable inputs. Every fatal condition is a
LinkerError, which run() logs with its remediation hint and turns into a
non-zero exit status.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

import structlog

from shared.errors import FetchFailed, LinkerError, NoMatches
from shared.models.domain import MatchRecord, RunRecord, TimestampedRecord
from shared.models.enums import RecordKind
from shared.utils.logging import get_logger
from shared.utils.metrics import RECORDS_MATCHED

from linker.dispatcher import DispatchReport, UpdateDispatcher
from linker.links import build_updates
from linker.matcher import match_interval
from linker.output import SummarySink
from linker.sources.base import LivestreamSource, LivestreamWindow, RecordStore
from linker.summary import SummaryBuilder

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


@dataclass(frozen=True)
class RunRequest:
    video_id: str
    offset_seconds: int = 0
    dry_run: bool = False
    generate_summary: bool = False


@dataclass
class RunResult:
    matches: list[MatchRecord] = field(default_factory=list)
    runs: list[RunRecord] = field(default_factory=list)
    report: DispatchReport = field(default_factory=DispatchReport)
    summary: Optional[str] = None


class LinkerEngine:
    """Links one livestream's matches and runs on the record store."""

    def __init__(
        self,
        livestreams: LivestreamSource,
        store: RecordStore,
        sink: Optional[SummarySink] = None,
        tide_abbreviations: Optional[Mapping[str, str]] = None,
        log: Optional[structlog.stdlib.BoundLogger] = None,
    ) -> None:
        self._livestreams = livestreams
        self._store = store
        self._sink = sink
        self._tides = tide_abbreviations
        self._log = log or logger

    async def _fetch_inputs(
        self, video_id: str
    ) -> tuple[LivestreamWindow, Sequence[TimestampedRecord], Sequence[TimestampedRecord]]:
        results = await asyncio.gather(
            self._livestreams.fetch_livestream_window(video_id),
            self._store.fetch_records(RecordKind.MATCH),
            self._store.fetch_records(RecordKind.RUN),
            return_exceptions=True,
        )
        sources = (
            self._livestreams.source_name,
            self._store.source_name,
            self._store.source_name,
        )
        for source, result in zip(sources, results):
            if isinstance(result, FetchFailed):
                raise result
            if isinstance(result, BaseException):
                raise FetchFailed(source, str(result) or type(result).__name__) from result
        window, matches, runs = results
        return window, matches, runs

    async def execute(self, request: RunRequest) -> RunResult:
        """
        Perform the run and return what happened.

        Raises:
            FetchFailed: If any input could not be fetched.
            MalformedTimestamp: If the window or any record has a bad timestamp.
            LinkerError: If the window does not end after it starts.
            NoMatches: If neither battles nor runs fall inside the stream.
            UpdateFailed: The first failed update, after all updates finished.
        """
        window, all_matches, all_runs = await self._fetch_inputs(request.video_id)

        interval = window.interval()
        if window.is_live:
            self._log.warning(
                "livestream_still_live",
                video_id=request.video_id,
                window_end=interval.end.isoformat(),
            )
        self._log.info(
            "stream_window",
            video_id=request.video_id,
            start=interval.start.isoformat(),
            end=interval.end.isoformat(),
        )

        result = RunResult(
            matches=match_interval(interval, all_matches),
            runs=match_interval(interval, all_runs),
        )
        for kind, matched in ((RecordKind.MATCH, result.matches), (RecordKind.RUN, result.runs)):
            RECORDS_MATCHED.labels(kind=kind.value).inc(len(matched))
            self._log.info("records_matched", kind=kind.value, count=len(matched))

        if not result.matches and not result.runs:
            raise NoMatches("Found no battles or salmon runs to modify!")

        updates = build_updates(
            RecordKind.MATCH, result.matches, interval, request.video_id, request.offset_seconds
        ) + build_updates(
            RecordKind.RUN, result.runs, interval, request.video_id, request.offset_seconds
        )

        dispatcher = UpdateDispatcher(self._store.apply_update, dry_run=request.dry_run, log=self._log)
        result.report = await dispatcher.dispatch(updates)
        if not result.report.ok:
            self._log.error(
                "updates_incomplete",
                failed=len(result.report.failures),
                succeeded=result.report.succeeded,
            )
        result.report.raise_for_failures()

        if request.dry_run:
            self._log.info("dry_run_finished", would_update=result.report.skipped)
        else:
            self._log.info("updates_finished", updated=result.report.succeeded)

        if request.generate_summary:
            builder = SummaryBuilder(self._tides)
            builder.add_runs(result.runs, interval.start, request.offset_seconds)
            result.summary = builder.render()
            if self._sink is not None:
                self._sink.emit(result.summary)

        return result

    async def run(self, request: RunRequest) -> int:
        """Execute and map the outcome to a process exit status."""
        try:
            await self.execute(request)
        except LinkerError as exc:
            self._log.error(
                "run_failed",
                error=exc.message,
                error_type=type(exc).__name__,
                hint=exc.hint,
            )
            return EXIT_FAILURE
        return EXIT_OK
