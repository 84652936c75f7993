"""
stat.ink source: reads a user's Splatoon 3 battle and Salmon Run logs and
patches the video link onto individual uploads.
Writes go through stat.ink's internal PATCH endpoints, authenticated by the
_identity session cookie.
"""
from __future__ import annotations

from typing import Sequence

import httpx
from pydantic import TypeAdapter, ValidationError

from shared.errors import FetchFailed, UpdateFailed
from shared.models.domain import MatchRecord, RunRecord, TimestampedRecord
from shared.models.enums import RecordKind
from shared.utils.http_client import APIHTTPClient
from shared.utils.logging import get_logger

from linker.sources.base import RecordStore

logger = get_logger(__name__)

STATINK_BASE = "https://stat.ink"
IDENTITY_COOKIE = "_identity"

INDEX_PATHS: dict[RecordKind, str] = {
    RecordKind.MATCH: "/@{username}/spl3/index.json",
    RecordKind.RUN: "/@{username}/salmon3/index.json",
}
PATCH_PATHS: dict[RecordKind, str] = {
    RecordKind.MATCH: "/api/internal/patch-battle3-url",
    RecordKind.RUN: "/api/internal/patch-salmon3-url",
}

_ADAPTERS: dict[RecordKind, TypeAdapter] = {
    RecordKind.MATCH: TypeAdapter(list[MatchRecord]),
    RecordKind.RUN: TypeAdapter(list[RunRecord]),
}


class StatInkSource(RecordStore):
    """One shared HTTP client; safe to use from concurrent update tasks."""

    def __init__(self, http: APIHTTPClient, username: str) -> None:
        self._http = http
        self._username = username

    @property
    def source_name(self) -> str:
        return "stat.ink"

    async def fetch_records(self, kind: RecordKind) -> Sequence[TimestampedRecord]:
        path = INDEX_PATHS[kind].format(username=self._username)
        logger.debug("statink_fetch", kind=kind.value, path=path)
        try:
            data = await self._http.get_json(path)
            records = _ADAPTERS[kind].validate_python(data)
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            hint = "Check statink.username in your config file." if status == 404 else None
            raise FetchFailed(self.source_name, f"HTTP {status} fetching {kind.label} log", hint) from exc
        except httpx.HTTPError as exc:
            raise FetchFailed(self.source_name, f"request failed: {exc}") from exc
        except (ValueError, ValidationError) as exc:
            raise FetchFailed(self.source_name, f"unexpected {kind.label} log format: {exc}") from exc

        logger.debug("statink_fetched", kind=kind.value, count=len(records))
        return records

    async def apply_update(self, kind: RecordKind, record_id: str, link: str) -> None:
        try:
            await self._http.post_form(
                PATCH_PATHS[kind],
                params={"id": record_id},
                data={"_method": "PATCH", "link_url": link},
            )
        except httpx.HTTPStatusError as exc:
            raise UpdateFailed(
                record_id, kind.value, f"HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpdateFailed(record_id, kind.value, str(exc) or type(exc).__name__) from exc
        logger.debug("statink_updated", kind=kind.value, record_id=record_id)
