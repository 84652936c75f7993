"""
Concurrent link-update dispatch.

One task per LinkedUpdate, all started together; the dispatcher waits for
every task before looking at outcomes, so one rejected update never stops
its siblings. Nothing is retried.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, Optional

import structlog

from shared.errors import UpdateFailed
from shared.models.domain import LinkedUpdate
from shared.models.enums import RecordKind
from shared.utils.logging import get_logger
from shared.utils.metrics import UPDATES

ApplyUpdate = Callable[[RecordKind, str, str], Awaitable[None]]

logger = get_logger(__name__)


@dataclass
class DispatchReport:
    attempted: int = 0
    succeeded: int = 0
    skipped: int = 0
    failures: list[UpdateFailed] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        """Raise the first recorded failure, if any."""
        if self.failures:
            raise self.failures[0]


class UpdateDispatcher:
    """Applies LinkedUpdates through an injected async apply_update(kind, id, link)."""

    def __init__(
        self,
        apply_update: ApplyUpdate,
        dry_run: bool = False,
        log: Optional[structlog.stdlib.BoundLogger] = None,
    ) -> None:
        self._apply = apply_update
        self._dry_run = dry_run
        self._log = log or logger

    async def _apply_one(self, update: LinkedUpdate) -> None:
        try:
            await self._apply(update.kind, update.record_id, update.link)
        except UpdateFailed:
            raise
        except Exception as exc:
            raise UpdateFailed(update.record_id, update.kind.value, str(exc)) from exc

    async def dispatch(self, updates: Iterable[LinkedUpdate]) -> DispatchReport:
        report = DispatchReport()
        pending: list[LinkedUpdate] = []
        tasks: list[asyncio.Task[None]] = []

        for update in updates:
            if self._dry_run:
                report.skipped += 1
                UPDATES.labels(kind=update.kind.value, outcome="dry_run").inc()
                self._log.info(
                    "update_skipped_dry_run",
                    kind=update.kind.value,
                    record_id=update.record_id,
                    link=update.link,
                )
                continue
            pending.append(update)
            tasks.append(asyncio.create_task(self._apply_one(update)))

        report.attempted = len(tasks)
        if not tasks:
            return report

        # Drain every task; no cancellation on failure.
        results = await asyncio.gather(*tasks, return_exceptions=True)

        for update, result in zip(pending, results):
            if isinstance(result, BaseException):
                failure = (
                    result
                    if isinstance(result, UpdateFailed)
                    else UpdateFailed(update.record_id, update.kind.value, str(result))
                )
                report.failures.append(failure)
                UPDATES.labels(kind=update.kind.value, outcome="failed").inc()
                self._log.error(
                    "update_failed",
                    kind=update.kind.value,
                    record_id=update.record_id,
                    error=failure.message,
                )
                continue
            report.succeeded += 1
            UPDATES.labels(kind=update.kind.value, outcome="applied").inc()
            self._log.info(
                "update_applied",
                kind=update.kind.value,
                record_id=update.record_id,
                link=update.link,
            )

        return report
