"""
vodlinker command-line entrypoint.

Usage:
  vodlinker VIDEO [-o SECONDS] [--dry-run] [--summary] [--summary-file PATH]
                  [--config-dir DIR] [-v]

VIDEO is a YouTube video id (e.g. dQw4w9WgXcQ) or any common YouTube URL.
Exit status is 0 on success and 1 on any fatal condition.
"""
from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

from shared.config import Settings, load_settings
from shared.errors import LinkerError
from shared.utils.http_client import APIHTTPClient
from shared.utils.logging import get_logger, setup_logging
from shared.utils.metrics import write_metrics

from linker.engine import EXIT_FAILURE, LinkerEngine, RunRequest
from linker.links import extract_video_id
from linker.output import FileSink, StdoutSink, SummarySink
from linker.sources.statink import IDENTITY_COOKIE, STATINK_BASE, StatInkSource
from linker.sources.youtube import YOUTUBE_API_BASE, YouTubeSource

logger = get_logger(__name__)

SERVICE_NAME = "vodlinker"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=SERVICE_NAME,
        description="Link stat.ink battles and Salmon Runs to their moment in a YouTube livestream.",
    )
    parser.add_argument("video", help="The YouTube stream id or URL (e.g. dQw4w9WgXcQ)")
    parser.add_argument(
        "-o",
        "--offset",
        type=int,
        default=0,
        help="Seconds to add to every timestamp to adjust for stream delay (may be negative)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log the links that would be written without touching stat.ink",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print a Salmon Run summary suitable for the video description",
    )
    parser.add_argument(
        "--summary-file",
        type=Path,
        default=None,
        help="Write the summary to this file instead of stdout (implies --summary)",
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=None,
        help="The directory holding config.toml",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


async def run(settings: Settings, request: RunRequest, sink: SummarySink) -> int:
    youtube_http = APIHTTPClient(
        "youtube",
        YOUTUBE_API_BASE,
        headers={"User-Agent": settings.http.user_agent},
        timeout_s=settings.http.request_timeout_s,
    )
    statink_http = APIHTTPClient(
        "statink",
        STATINK_BASE,
        headers={"User-Agent": settings.http.user_agent},
        cookies={IDENTITY_COOKIE: settings.statink.identity_cookie},
        timeout_s=settings.http.request_timeout_s,
        # an expired session redirects to the login page
        follow_redirects=False,
    )
    async with youtube_http, statink_http:
        engine = LinkerEngine(
            YouTubeSource(youtube_http, settings.google_api_key),
            StatInkSource(statink_http, settings.statink.username),
            sink=sink,
            tide_abbreviations=settings.summary.tide_abbreviations,
        )
        return await engine.run(request)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    log_level = "DEBUG" if args.verbose else None

    try:
        settings = load_settings(args.config_dir)
    except LinkerError as exc:
        setup_logging(SERVICE_NAME, log_level or "INFO")
        logger.error("configuration_failed", error=exc.message, hint=exc.hint)
        return EXIT_FAILURE

    setup_logging(SERVICE_NAME, log_level or settings.log_level, settings.environment)

    try:
        settings.require_credentials()
        video_id = extract_video_id(args.video)
    except LinkerError as exc:
        logger.error("startup_failed", error=exc.message, hint=exc.hint)
        return EXIT_FAILURE

    logger.info(
        "run_started",
        video_id=video_id,
        statink_user=settings.statink.username,
        offset=args.offset,
        dry_run=args.dry_run,
    )

    sink: SummarySink = FileSink(args.summary_file) if args.summary_file else StdoutSink()
    request = RunRequest(
        video_id=video_id,
        offset_seconds=args.offset,
        dry_run=args.dry_run,
        generate_summary=args.summary or args.summary_file is not None,
    )
    status = asyncio.run(run(settings, request, sink))

    if settings.metrics_file is not None:
        write_metrics(settings.metrics_file)
    return status


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
