"""
Stage timing observer.

Stages report start/end to an optional TimingCollector. The collector only
records; it never alters control flow or results, so every caller accepts
``timing=None`` and behaves identically without one.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from serpharvest.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class StageTiming:
    """Accumulated timing for one named stage."""

    duration: float = 0.0
    status: str = "pending"
    calls: int = 0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "duration": round(self.duration, 4),
            "status": self.status,
            "calls": self.calls,
        }
        if self.error:
            result["error"] = self.error
        return result


class TimingCollector:
    """Collects per-stage elapsed time.

    Example:
        timing = TimingCollector()
        async with timing.stage("organic_results"):
            ...
        timing.records["organic_results"].duration
    """

    def __init__(self) -> None:
        self.records: dict[str, StageTiming] = {}
        self._started: dict[str, float] = {}

    def start(self, name: str) -> None:
        """Mark the start of a stage."""
        self._started[name] = time.perf_counter()

    def end(self, name: str, error: BaseException | None = None) -> None:
        """Mark the end of a stage and accumulate its duration."""
        started = self._started.pop(name, None)
        if started is None:
            logger.debug("Timing end without start", stage=name)
            return

        record = self.records.setdefault(name, StageTiming())
        record.duration += time.perf_counter() - started
        record.calls += 1
        if error is None:
            record.status = "success"
        else:
            record.status = "error"
            record.error = str(error)

    @asynccontextmanager
    async def stage(self, name: str) -> AsyncIterator[None]:
        """Time the enclosed block. Exceptions are recorded and re-raised."""
        self.start(name)
        try:
            yield
        except BaseException as e:
            self.end(name, e)
            raise
        self.end(name)

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {name: record.to_dict() for name, record in self.records.items()}


@asynccontextmanager
async def timed(timing: TimingCollector | None, name: str) -> AsyncIterator[None]:
    """Time a block when a collector is present, otherwise do nothing."""
    if timing is None:
        yield
        return
    async with timing.stage(name):
        yield
