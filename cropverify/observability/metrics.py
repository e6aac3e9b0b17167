"""
Submission Counters
-------------------
In-process counters/timers consumed by /admin/metrics. Workflows only live as
long as the process, so these do too.
"""
from __future__ import annotations

import threading
from typing import Dict, List

_MAX_SAMPLES = 500  # cap to bound percentile computation cost

_lock = threading.Lock()
_counters: Dict[str, int] = {}
_latencies: List[int] = []


def _percentile(data: List[float], p: float) -> float:
    """Deterministic percentile (nearest-rank on sorted data)."""
    if not data:
        return 0.0
    d = sorted(data)
    k = max(1, int(round(p * len(d))))
    return float(d[k - 1])


def _incr(key: str) -> None:
    with _lock:
        _counters[key] = _counters.get(key, 0) + 1


def increment_submission_attempt() -> None:
    _incr("submission.attempts")

def increment_submission_success() -> None:
    _incr("submission.succeeded")

def increment_submission_blocked() -> None:
    _incr("submission.blocked")

def increment_submission_failed() -> None:
    _incr("submission.failed")

def increment_eligibility_fail_open() -> None:
    _incr("eligibility.fail_open")

def record_submission_latency(ms: int) -> None:
    with _lock:
        _latencies.insert(0, int(ms))
        del _latencies[_MAX_SAMPLES:]


def snapshot() -> dict:
    with _lock:
        counters = dict(_counters)
        lat = list(_latencies)
    return {
        "counters": counters,
        "submissionLatencyMs": {
            "p50": _percentile(lat, 0.50),
            "p95": _percentile(lat, 0.95),
            "samples": len(lat),
        },
    }


def reset() -> None:
    with _lock:
        _counters.clear()
        _latencies.clear()
