"""
YouTube Data API v3 source: resolves a video id to its livestream window.
Uses the videos endpoint with part=liveStreamingDetails.
"""
from __future__ import annotations

from typing import Optional

import httpx
from pydantic import ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from shared.errors import FetchFailed, NotFound
from shared.models.domain import WireModel
from shared.utils.http_client import APIHTTPClient
from shared.utils.logging import get_logger

from linker.sources.base import LivestreamSource, LivestreamWindow

logger = get_logger(__name__)

YOUTUBE_API_BASE = "https://www.googleapis.com/youtube/v3"


# ── Wire models ─────────────────────────────────────────────────────────
class _YouTubeModel(WireModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        alias_generator=to_camel,
    )


class LiveStreamingDetails(_YouTubeModel):
    actual_start_time: Optional[str] = None
    actual_end_time: Optional[str] = None
    scheduled_start_time: Optional[str] = None


class VideoItem(_YouTubeModel):
    id: str
    live_streaming_details: Optional[LiveStreamingDetails] = None


class VideoListResponse(_YouTubeModel):
    items: list[VideoItem] = Field(default_factory=list)


class YouTubeSource(LivestreamSource):
    """Fetches liveStreamingDetails for a single video."""

    def __init__(self, http: APIHTTPClient, api_key: str) -> None:
        self._http = http
        self._api_key = api_key

    @property
    def source_name(self) -> str:
        return "youtube"

    async def fetch_livestream_window(self, video_id: str) -> LivestreamWindow:
        logger.debug("youtube_fetch", video_id=video_id)
        try:
            data = await self._http.get_json(
                "/videos",
                params={"part": "liveStreamingDetails", "id": video_id, "key": self._api_key},
            )
            listing = VideoListResponse.model_validate(data)
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            hint = "Check your google_api_key." if status in (400, 401, 403) else None
            raise FetchFailed(self.source_name, f"HTTP {status} from videos endpoint", hint) from exc
        except httpx.HTTPError as exc:
            raise FetchFailed(self.source_name, f"request failed: {exc}") from exc
        except (ValueError, ValidationError) as exc:
            raise FetchFailed(self.source_name, f"unexpected response: {exc}") from exc

        if not listing.items:
            raise NotFound(video_id)

        item = listing.items[0]
        details = item.live_streaming_details
        if details is None or details.actual_start_time is None:
            raise FetchFailed(
                self.source_name,
                f"video {video_id!r} has no livestream start time",
                hint="Is this a livestream that has already started?",
            )

        logger.debug("youtube_window", video_id=video_id, start=details.actual_start_time,
                     end=details.actual_end_time)
        return LivestreamWindow(
            video_id=item.id,
            actual_start_time=details.actual_start_time,
            actual_end_time=details.actual_end_time,
            scheduled_start_time=details.scheduled_start_time,
        )
