"""Tests for request metrics and the textfile dump."""
from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from prometheus_client import REGISTRY

from shared.utils.http_client import APIHTTPClient
from shared.utils.metrics import write_metrics


def _sample(name: str, labels: dict[str, str]) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.mark.asyncio
async def test_requests_are_counted_by_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500 if request.url.path == "/fail" else 200, json={})

    labels_ok = {"service": "metrics-test", "method": "GET", "status": "200"}
    labels_err = {"service": "metrics-test", "method": "GET", "status": "500"}
    before_ok = _sample("vl_api_requests_total", labels_ok)
    before_err = _sample("vl_api_requests_total", labels_err)

    async with APIHTTPClient("metrics-test", "https://example.test", transport=httpx.MockTransport(handler)) as http:
        await http.get_json("/ok")
        with pytest.raises(httpx.HTTPStatusError):
            await http.get_json("/fail")

    assert _sample("vl_api_requests_total", labels_ok) == before_ok + 1
    assert _sample("vl_api_requests_total", labels_err) == before_err + 1


@pytest.mark.asyncio
async def test_client_must_be_started() -> None:
    http = APIHTTPClient("metrics-test", "https://example.test")
    with pytest.raises(RuntimeError):
        await http.get_json("/ok")


def test_write_metrics(tmp_path: Path) -> None:
    target = tmp_path / "out" / "vodlinker.prom"
    write_metrics(target)
    text = target.read_text()
    assert "vl_updates_total" in text
    assert "vl_api_requests_total" in text
