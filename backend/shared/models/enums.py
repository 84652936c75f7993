"""Domain enumerations for vodlinker."""
from __future__ import annotations

from enum import Enum


class RecordKind(str, Enum):
    """The two stat.ink record kinds a stream can be linked into."""

    MATCH = "battle"
    RUN = "salmon"

    @property
    def label(self) -> str:
        return "battle" if self == RecordKind.MATCH else "salmon run"


class SalmonEvent(str, Enum):
    """Known-wave event keys as reported by stat.ink."""

    TORNADO = "tornado"
    RUSH = "rush"
    COHOCK_CHARGE = "cohock_charge"
    MOTHERSHIP = "mothership"
    GRILLER = "griller"
    FOG = "fog"
    GOLDIE_SEEKING = "goldie_seeking"
    MUDMOUTH_ERUPTION = "mudmouth_eruption"
