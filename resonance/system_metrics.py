import threading
import time
from collections import deque
from typing import Any


MAX_TIMING_SAMPLES = 1000

COUNTERS = (
    "ws_connections_active",
    "ws_connections_total",
    "ws_disconnects_total",
    "turns_total",
    "turn_errors_total",
    "malformed_messages_total",
    "greetings_sent",
    "interventions_emitted",
    "frequency_offers_emitted",
    "sessions_completed",
    "notes_saved",
)
TIMING_STAGES = ("transcription_ms", "generation_ms", "synthesis_ms", "total_ms")

_lock = threading.Lock()
_counters: dict[str, int] = dict.fromkeys(COUNTERS, 0)
_turn_timings: deque = deque(maxlen=MAX_TIMING_SAMPLES)


def _adjust(name: str, delta: int) -> None:
    with _lock:
        if name not in _counters:
            raise KeyError(f"unknown metric {name!r}")
        _counters[name] = max(0, _counters[name] + int(delta))


def increment_metric(name: str, amount: int = 1) -> None:
    _adjust(name, amount)


def decrement_metric(name: str, amount: int = 1) -> None:
    _adjust(name, -amount)


def _ms(value: float) -> float:
    return round(max(0.0, float(value or 0.0)), 2)


def record_turn_timing(
    transcription_ms: float,
    generation_ms: float,
    synthesis_ms: float,
    total_ms: float,
    word_count: int = 0,
    session_duration_sec: float = 0.0,
) -> dict[str, Any]:
    """Keep one audio turn's stage latencies in the rolling window and return the sample."""
    sample = {
        "timestamp": time.time(),
        "transcription_ms": _ms(transcription_ms),
        "generation_ms": _ms(generation_ms),
        "synthesis_ms": _ms(synthesis_ms),
        "total_ms": _ms(total_ms),
        "word_count": int(word_count or 0),
        "session_duration_sec": _ms(session_duration_sec),
    }
    with _lock:
        _turn_timings.append(sample)
    return sample


def _timing_summary(samples: list[dict]) -> dict[str, float]:
    summary: dict[str, float] = {}
    for stage in TIMING_STAGES:
        values = [item[stage] for item in samples]
        summary[f"avg_{stage}"] = round(sum(values) / len(values), 2) if values else 0.0
    totals = [item["total_ms"] for item in samples]
    summary["max_total_ms"] = max(totals, default=0.0)
    summary["min_total_ms"] = min(totals, default=0.0)
    return summary


def get_metrics_snapshot(extra: dict[str, Any] | None = None) -> dict[str, Any]:
    with _lock:
        counters = dict(_counters)
        samples = list(_turn_timings)

    payload: dict[str, Any] = {"generated_at": time.time(), **counters, "timing_samples": len(samples)}
    payload.update(_timing_summary(samples))
    if extra:
        payload.update(extra)
    return payload


def reset_metrics() -> None:
    with _lock:
        for name in _counters:
            _counters[name] = 0
        _turn_timings.clear()
