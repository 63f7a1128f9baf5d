"""
Monitoring for the Smart Campus Chatbot

Tracks:
1. Response metrics (latency per route)
2. AI provider calls (duration, success, failure kind)
3. Reply sources (ai vs fallback)
4. Internal errors
"""

import asyncio
import statistics
import time
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from smart_campus.config import Config
from smart_campus.utils.logging_utils import get_logger

logger = get_logger("monitor")


# =============================================================================
# METRICS STORAGE
# =============================================================================

class MetricsStore:
    """In-memory metrics storage with time-based cleanup."""

    def __init__(self, max_age_hours: int = 24):
        self.max_age_hours = max_age_hours
        self.metrics: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def record(self, metric_name: str, value: Any, metadata: Dict[str, Any] = None):
        """Record a metric value, dropping entries of the same metric past max age."""
        now = datetime.now()
        cutoff = now - timedelta(hours=self.max_age_hours)
        async with self._lock:
            entries = self.metrics[metric_name]
            # Entries are appended in time order, so stale ones sit at the front.
            stale = 0
            while stale < len(entries) and entries[stale]["timestamp"] <= cutoff:
                stale += 1
            if stale:
                del entries[:stale]
            entries.append({
                "timestamp": now,
                "value": value,
                "metadata": metadata or {},
            })

    async def get_recent(
        self,
        metric_name: str,
        hours: int = 1,
    ) -> List[Dict[str, Any]]:
        """Get recent metric values."""
        cutoff = datetime.now() - timedelta(hours=hours)
        async with self._lock:
            return [
                m for m in self.metrics[metric_name]
                if m["timestamp"] > cutoff
            ]

    async def cleanup(self):
        """Remove old metrics."""
        cutoff = datetime.now() - timedelta(hours=self.max_age_hours)
        async with self._lock:
            for name in self.metrics:
                self.metrics[name] = [
                    m for m in self.metrics[name]
                    if m["timestamp"] > cutoff
                ]

    async def reset(self):
        async with self._lock:
            self.metrics.clear()


# Global metrics store
metrics_store = MetricsStore(max_age_hours=Config.METRICS_MAX_AGE_HOURS)


# =============================================================================
# METRIC RECORDERS
# =============================================================================

async def record_response_time(duration_ms: float, route: str):
    """Record response time for a request."""
    await metrics_store.record("response_time", duration_ms, {"route": route})


async def record_llm_call(
    duration_ms: float,
    success: bool,
    error_kind: Optional[str] = None,
):
    """Record one AI provider call."""
    await metrics_store.record("llm_call", {
        "duration_ms": duration_ms,
        "success": success,
        "error_kind": error_kind,
    })


async def record_reply_source(source: Optional[str]):
    """Record which responder produced a reply (None for apologies)."""
    await metrics_store.record("reply_source", source or "apology")


async def record_error(error_type: str, details: str = None):
    """Record an error occurrence."""
    await metrics_store.record("error", {
        "type": error_type,
        "details": details,
    })


# =============================================================================
# METRICS AGGREGATION
# =============================================================================

async def get_response_time_stats(hours: int = 1) -> Dict[str, Any]:
    """Get response time statistics."""
    metrics = await metrics_store.get_recent("response_time", hours)

    if not metrics:
        return {"count": 0, "avg_ms": 0, "p50_ms": 0, "p95_ms": 0}

    values = sorted(m["value"] for m in metrics)

    def percentile(p: int) -> float:
        idx = int(len(values) * p / 100)
        return values[min(idx, len(values) - 1)]

    return {
        "count": len(values),
        "avg_ms": round(statistics.mean(values), 2),
        "max_ms": round(max(values), 2),
        "p50_ms": round(percentile(50), 2),
        "p95_ms": round(percentile(95), 2),
    }


async def get_llm_stats(hours: int = 1) -> Dict[str, Any]:
    """Get AI provider usage statistics."""
    metrics = await metrics_store.get_recent("llm_call", hours)

    if not metrics:
        return {"count": 0, "success_rate": 0, "avg_duration_ms": 0, "failures": {}}

    values = [m["value"] for m in metrics]
    successes = sum(1 for v in values if v["success"])

    failures = defaultdict(int)
    for v in values:
        if not v["success"]:
            failures[v["error_kind"] or "unknown"] += 1

    return {
        "count": len(values),
        "success_rate": round(successes / len(values) * 100, 2),
        "avg_duration_ms": round(statistics.mean(v["duration_ms"] for v in values), 2),
        "failures": dict(failures),
    }


async def get_source_stats(hours: int = 1) -> Dict[str, int]:
    metrics = await metrics_store.get_recent("reply_source", hours)
    by_source = defaultdict(int)
    for m in metrics:
        by_source[m["value"]] += 1
    return dict(by_source)


async def get_error_stats(hours: int = 1) -> Dict[str, Any]:
    """Get error statistics."""
    metrics = await metrics_store.get_recent("error", hours)

    if not metrics:
        return {"count": 0, "by_type": {}}

    by_type = defaultdict(int)
    for m in metrics:
        by_type[m["value"]["type"]] += 1

    return {
        "count": len(metrics),
        "by_type": dict(by_type),
    }


async def get_dashboard_data(hours: int = 1) -> Dict[str, Any]:
    """Get all chatbot metrics in one payload."""
    return {
        "period_hours": hours,
        "generated_at": datetime.now().isoformat(),
        "response_times": await get_response_time_stats(hours),
        "llm": await get_llm_stats(hours),
        "sources": await get_source_stats(hours),
        "errors": await get_error_stats(hours),
    }


# =============================================================================
# MONITORING CLASS
# =============================================================================

class Monitor:
    """
    Convenience class for request-level monitoring.

    Usage:
        async with Monitor.request("chatbot") as m:
            reply = await responder.resolve(request)
            await m.record_source(reply.source)
    """

    def __init__(self, route: str):
        self.route = route
        self.start_time = None

    async def __aenter__(self):
        self.start_time = time.time()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        duration_ms = (time.time() - self.start_time) * 1000
        await record_response_time(duration_ms, self.route)

        if exc_type and not issubclass(exc_type, asyncio.CancelledError):
            await record_error(exc_type.__name__, str(exc_val))

    async def record_source(self, source: Optional[str]):
        await record_reply_source(source)

    @classmethod
    def request(cls, route: str) -> "Monitor":
        """Create a monitor for a request."""
        return cls(route)


# =============================================================================
# CLEANUP TASK
# =============================================================================

async def start_cleanup_task(interval_seconds: float = 3600):
    """Background task that prunes metrics older than the store's max age."""
    while True:
        try:
            await asyncio.sleep(interval_seconds)
            await metrics_store.cleanup()
            logger.debug("Cleaned up old metrics")
        except asyncio.CancelledError:
            break
        except Exception as e:
            logger.error(f"Metrics cleanup error: {e}")
