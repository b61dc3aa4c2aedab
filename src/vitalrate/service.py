"""FastAPI service wrapping one measurement session.

A browser or capture process samples the ROI itself and POSTs green-channel
samples to ``/ingest``; the service runs the same pipeline used in-process
and exposes the latest estimates and per-session summaries.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import asdict
from typing import Optional

from fastapi import FastAPI
from pydantic import BaseModel, Field, FiniteFloat

from .config import PipelineConfig, load_config
from .pipeline import FrameResult, VitalsSession
from .stats import StatsSummary

logger = logging.getLogger(__name__)

CONFIG_ENV = "VITALRATE_CONFIG"
HISTORY_LIMIT = 15 * 60 * 2  # estimates kept per band


class IngestModel(BaseModel):
    t0: int = Field(0, ge=0)
    samples: list[FiniteFloat] = Field(default_factory=list, max_length=10_000)


class SummaryModel(BaseModel):
    count: int
    mean: float
    std: float


def _summary(s: Optional[StatsSummary]) -> Optional[dict]:
    return SummaryModel(**asdict(s)).model_dump() if s is not None else None


def _metrics(result: FrameResult, tick: Optional[int]) -> dict:
    return {
        "tick": tick,
        "heart_rate": result.heart_rate,
        "respiration_rate": result.respiration_rate,
        "pending": result.pending,
    }


def _default_config() -> PipelineConfig:
    defaults = {"history_limit": HISTORY_LIMIT}
    path = os.environ.get(CONFIG_ENV)
    if path:
        logger.info("loading config from %s", path)
        return load_config(path, defaults=defaults)
    return PipelineConfig(**defaults)


def make_app(config: Optional[PipelineConfig] = None) -> FastAPI:
    """Build the app around one long-lived session.

    Without ``config`` the options come from the JSON file named by
    ``$VITALRATE_CONFIG`` (camelCase or snake_case keys), else the defaults.
    Either way the rate history is capped at ``HISTORY_LIMIT`` estimates per band
    unless the file sets ``historyLimit``. An explicit ``config`` is used as is.
    """
    app = FastAPI(title="vitalrate", version="0.1.0")
    session = VitalsSession(config or _default_config())
    lock = asyncio.Lock()

    def feed(t0: int, samples: list[float]) -> dict:
        # FFT work runs off the event loop
        tick = t0
        for v in samples:
            session.process_frame(v, tick)
            tick += 1
        return _metrics(session.last_result, session.last_tick)

    @app.get("/health")
    async def health() -> dict[str, str]:  # pragma: no cover - trivial
        return {"status": "ok"}

    @app.get("/config")
    async def get_config() -> dict:
        return asdict(session.config)

    @app.get("/metrics")
    async def get_metrics() -> dict:
        async with lock:
            return _metrics(session.last_result, session.last_tick)

    @app.get("/summaries")
    async def get_summaries() -> dict:
        async with lock:
            s = session.get_summaries()
            return {"heart": _summary(s.heart), "respiration": _summary(s.respiration)}

    @app.post("/ingest")
    async def post_ingest(payload: IngestModel) -> dict:
        if not payload.samples:
            return {"status": "empty", "count": 0}
        async with lock:
            metrics = await asyncio.to_thread(feed, payload.t0, payload.samples)
        logger.debug("ingested %d samples from tick %d", len(payload.samples), payload.t0)
        return {"status": "ok", "count": len(payload.samples), **metrics}

    @app.post("/reset")
    async def post_reset() -> dict[str, str]:
        async with lock:
            session.reset_session()
        logger.info("reset requested over HTTP")
        return {"status": "ok"}

    return app


app = make_app()


def main() -> None:  # pragma: no cover - manual run helper
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)


if __name__ == "__main__":  # pragma: no cover
    main()
