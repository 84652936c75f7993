"""
Run metrics for vodlinker.
Wraps prometheus_client; a one-shot CLI has no scrape endpoint, so the
registry is dumped to a textfile (node_exporter textfile collector format).
"""
from __future__ import annotations

from pathlib import Path

from prometheus_client import REGISTRY, Counter, Histogram, write_to_textfile

from shared.utils.logging import get_logger

logger = get_logger(__name__)

# ── Counters ────────────────────────────────────────────────────────────
API_REQUESTS = Counter(
    "vl_api_requests_total",
    "Total outbound HTTP requests",
    ["service", "method", "status"],
)
RECORDS_MATCHED = Counter(
    "vl_records_matched_total",
    "Records found inside the livestream window",
    ["kind"],
)
UPDATES = Counter(
    "vl_updates_total",
    "Link updates by outcome",
    ["kind", "outcome"],
)

# ── Histograms ──────────────────────────────────────────────────────────
API_LATENCY = Histogram(
    "vl_api_latency_seconds",
    "Outbound HTTP request latency in seconds",
    ["service"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)


def write_metrics(path: Path) -> None:
    """Dump the default registry to path; failures are logged, not raised."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        write_to_textfile(str(path), REGISTRY)
        logger.debug("metrics_written", path=str(path))
    except OSError as exc:
        logger.warning("metrics_write_failed", path=str(path), error=str(exc))
