from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(slots=True)
class Metrics:
    counters: dict[str, float] = field(default_factory=dict)
    gauges: dict[str, Any] = field(default_factory=dict)

    def inc(self, path: str, n: float = 1.0) -> float:
        self.counters[path] = self.counters.get(path, 0.0) + float(n)
        return self.counters[path]

    def get(self, path: str) -> float:
        return self.counters.get(path, 0.0)

    def set_gauge(self, path: str, value: Any) -> Any:
        self.gauges[path] = value
        return value


@dataclass(slots=True)
class EventRing:
    capacity: int = 200
    events: list[Mapping[str, object]] = field(default_factory=list)

    def append(self, event: Mapping[str, object]) -> None:
        if self.capacity <= 0:
            return
        self.events.append(dict(event))
        if len(self.events) > int(self.capacity):
            self.events = self.events[-int(self.capacity) :]

    def tail(self, n: int = 10) -> list[Mapping[str, object]]:
        return list(self.events[-max(0, int(n)) :]) if n else []


def ensure_metrics(owner: Any) -> Metrics:
    metrics = getattr(owner, "metrics", None)
    if not isinstance(metrics, Metrics):
        metrics = Metrics()
        owner.metrics = metrics
    return metrics


def ensure_event_ring(owner: Any) -> EventRing:
    ring = getattr(owner, "event_ring", None)
    if not isinstance(ring, EventRing):
        ring = EventRing()
        owner.event_ring = ring
    return ring


def record_event(owner: Any, event: Mapping[str, object]) -> None:
    payload = dict(event)
    snapshot = getattr(owner, "stats", None)
    if snapshot is not None:
        payload.setdefault("year", snapshot.year)
        payload.setdefault("month", snapshot.month)
    ensure_event_ring(owner).append(payload)


__all__ = [
    "EventRing",
    "Metrics",
    "ensure_event_ring",
    "ensure_metrics",
    "record_event",
]
