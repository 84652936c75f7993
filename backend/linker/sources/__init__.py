from linker.sources.base import LivestreamSource, LivestreamWindow, RecordStore
from linker.sources.statink import StatInkSource
from linker.sources.youtube import YouTubeSource

__all__ = [
    "LivestreamSource",
    "LivestreamWindow",
    "RecordStore",
    "StatInkSource",
    "YouTubeSource",
]
