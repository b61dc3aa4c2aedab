from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest
from fastapi.testclient import TestClient

from vitalrate.config import PipelineConfig
from vitalrate.service import CONFIG_ENV, HISTORY_LIMIT, make_app


def _client() -> TestClient:
    return TestClient(make_app(PipelineConfig()))


def test_ingest_metrics_summaries_reset() -> None:
    client = _client()
    r = client.get("/summaries")
    assert r.status_code == 200
    assert r.json() == {"heart": None, "respiration": None}
    assert client.get("/metrics").json()["pending"] is True

    t = np.arange(600) / 30.0
    x = 100.0 + np.sin(2 * np.pi * 1.2 * t)
    r = client.post("/ingest", json={"t0": 0, "samples": x[:300].tolist()})
    assert r.status_code == 200
    assert r.json()["pending"] is True
    r = client.post("/ingest", json={"t0": 300, "samples": x[300:].tolist()})
    body = r.json()
    assert body["count"] == 300
    assert body["tick"] == 599
    assert abs(body["heart_rate"] - 72.0) <= 2.0

    m = client.get("/metrics").json()
    assert m["pending"] is False
    s = client.get("/summaries").json()
    assert s["heart"]["count"] == 89
    assert s["respiration"]["count"] == 89

    assert client.post("/reset").json() == {"status": "ok"}
    assert client.get("/summaries").json() == {"heart": None, "respiration": None}


def test_ingest_empty_and_invalid_payloads() -> None:
    client = _client()
    assert client.post("/ingest", json={"samples": []}).json()["status"] == "empty"
    r = client.post("/ingest", json={"t0": 0, "samples": ["abc"]})
    assert r.status_code == 422


def test_config_endpoint() -> None:
    cfg = _client().get("/config").json()
    assert cfg["window_size"] == 512
    assert cfg["heart_band_hz"] == [0.8, 3.5]
    assert cfg["region"] is None


def test_ingest_rejects_non_finite_samples() -> None:
    client = _client()
    for token in ("NaN", "Infinity", "-Infinity"):
        r = client.post(
            "/ingest",
            content='{"t0": 0, "samples": [1.0, %s, 2.0]}' % token,
            headers={"content-type": "application/json"},
        )
        assert r.status_code == 422
    assert client.get("/metrics").json()["tick"] is None


def test_default_app_bounds_history(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV, raising=False)
    cfg = TestClient(make_app()).get("/config").json()
    assert cfg["history_limit"] == HISTORY_LIMIT


def test_app_reads_config_file_from_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "vitalrate.json"
    path.write_text(json.dumps({"windowSize": 256, "bufferCapacity": 256, "heartBandHz": [0.7, 3.0]}))
    monkeypatch.setenv(CONFIG_ENV, str(path))
    client = TestClient(make_app())
    cfg = client.get("/config").json()
    assert cfg["window_size"] == 256
    assert cfg["heart_band_hz"] == [0.7, 3.0]
    assert cfg["history_limit"] == HISTORY_LIMIT

    t = np.arange(256) / 30.0
    r = client.post("/ingest", json={"samples": np.sin(2 * np.pi * 1.2 * t).tolist()})
    assert r.json()["pending"] is False
