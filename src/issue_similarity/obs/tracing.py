"""Per-request scoring traces and aggregate metrics."""

from __future__ import annotations

import threading
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from issue_similarity.scoring.booster import BoostBreakdown


@dataclass(slots=True)
class CandidateTrace:
    candidate_id: str
    lexical_score: float
    semantic_score: float
    merged_score: float
    boost: BoostBreakdown
    final_score: float


@dataclass(slots=True)
class ScoringTrace:
    trace_id: str
    timestamp_utc: str
    query_id: str
    candidate_count: int
    returned_count: int
    semantic_available: dict[str, bool]
    truncated: bool
    latency_ms: float
    candidates: list[CandidateTrace] = field(default_factory=list)

    @property
    def semantic_degraded(self) -> bool:
        return not all(self.semantic_available.values())


TraceObserver = Callable[[ScoringTrace], None]


def new_trace(
    *,
    query_id: str,
    candidate_count: int,
    returned_count: int,
    semantic_available: dict[str, bool],
    truncated: bool,
    latency_ms: float,
    candidates: list[CandidateTrace],
) -> ScoringTrace:
    return ScoringTrace(
        trace_id=str(uuid.uuid4()),
        timestamp_utc=datetime.now(timezone.utc).isoformat(),
        query_id=query_id,
        candidate_count=candidate_count,
        returned_count=returned_count,
        semantic_available=semantic_available,
        truncated=truncated,
        latency_ms=latency_ms,
        candidates=candidates,
    )


class TraceStore:
    """In-memory trace storage for API-level observability.

    Safe to use as the engine observer from concurrent request threads.
    """

    def __init__(self, max_records: int = 1000) -> None:
        self._records: dict[str, ScoringTrace] = {}
        self._max_records = max_records
        self._lock = threading.Lock()

    def record(self, trace: ScoringTrace) -> None:
        with self._lock:
            self._records[trace.trace_id] = trace
            while len(self._records) > self._max_records:
                self._records.pop(next(iter(self._records)), None)

    def get(self, trace_id: str) -> ScoringTrace:
        with self._lock:
            record = self._records.get(trace_id)
        if record is None:
            raise KeyError(f"Trace not found: {trace_id}")
        return record

    def list_recent(self, limit: int = 20) -> list[ScoringTrace]:
        with self._lock:
            return list(self._records.values())[-limit:]

    def summary(self) -> dict[str, float | int]:
        """Aggregate request metrics for dashboard display."""
        with self._lock:
            records = list(self._records.values())
        total = len(records)
        if total == 0:
            return {
                "total_requests": 0,
                "avg_latency_ms": 0.0,
                "p95_latency_ms": 0.0,
                "avg_candidates": 0.0,
                "semantic_degraded_requests": 0,
            }

        latencies = sorted(record.latency_ms for record in records)
        p95_index = max(0, int((len(latencies) * 0.95) - 1))
        return {
            "total_requests": total,
            "avg_latency_ms": sum(latencies) / total,
            "p95_latency_ms": latencies[p95_index],
            "avg_candidates": sum(record.candidate_count for record in records) / total,
            "semantic_degraded_requests": sum(1 for record in records if record.semantic_degraded),
        }


class Timer:
    """Simple context timer used by the engine."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0
