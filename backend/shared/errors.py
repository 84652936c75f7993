"""Error taxonomy for vodlinker. Every fatal condition carries a remediation hint."""
from __future__ import annotations

from typing import Optional


class LinkerError(Exception):
    """Base for all errors that end a run with a non-zero exit status."""

    default_hint = "Re-run with --verbose for more detail."

    def __init__(self, message: str, hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint or self.default_hint


class ConfigurationError(LinkerError):
    """Raised when the config file is missing, unreadable or incomplete."""

    default_hint = "Please double check your configuration file and try again."


class InvalidVideoId(LinkerError):
    """Raised when a livestream id cannot be extracted from user input."""

    default_hint = "Pass the video id (e.g. dQw4w9WgXcQ) or a full YouTube URL."


class MalformedTimestamp(LinkerError):
    """Raised when a record's time field is not a valid instant."""

    default_hint = "The upstream data looks corrupt; check the record on stat.ink."

    def __init__(self, value: object, hint: Optional[str] = None) -> None:
        super().__init__(f"Unparsable timestamp: {value!r}", hint)
        self.value = value


class FetchFailed(LinkerError):
    """Raised when one of the external fetches fails."""

    default_hint = "Are you connected to the internet?"

    def __init__(self, source: str, message: str, hint: Optional[str] = None) -> None:
        super().__init__(f"{source}: {message}", hint)
        self.source = source


class NotFound(FetchFailed):
    """Raised when the livestream id resolves to zero results."""

    default_hint = "Livestream ID not found! Did you copy the correct ID?"

    def __init__(self, video_id: str, hint: Optional[str] = None) -> None:
        super().__init__("youtube", f"no video with id {video_id!r}", hint)
        self.video_id = video_id


class NoMatches(LinkerError):
    """Raised when no record of any kind falls inside the stream window."""

    default_hint = "Check that stat.ink has uploads for this stream, or adjust the stream id."


class UpdateFailed(LinkerError):
    """Raised for a single record whose link update was rejected."""

    default_hint = "Unable to update a run. Is your identity cookie expired?"

    def __init__(self, record_id: str, kind: str, message: str, hint: Optional[str] = None) -> None:
        super().__init__(f"Updating {kind} {record_id} failed: {message}", hint)
        self.record_id = record_id
        self.kind = kind
