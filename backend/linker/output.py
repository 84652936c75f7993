"""Where a rendered summary goes."""
from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TextIO

from shared.errors import LinkerError
from shared.utils.logging import get_logger

logger = get_logger(__name__)


class SummarySink(ABC):
    @abstractmethod
    def emit(self, text: str) -> None:
        pass


class StdoutSink(SummarySink):
    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def emit(self, text: str) -> None:
        stream = self._stream or sys.stdout
        stream.write(text + "\n")
        stream.flush()


class FileSink(SummarySink):
    def __init__(self, path: Path) -> None:
        self._path = path

    def emit(self, text: str) -> None:
        try:
            self._path.write_text(text + "\n", encoding="utf-8")
        except OSError as exc:
            raise LinkerError(
                f"Could not write summary to {self._path}: {exc}",
                hint="Check that the directory exists and is writable.",
            ) from exc
        logger.info("summary_written", path=str(self._path))
