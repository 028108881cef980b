"""Migration observers: record which backend served each request."""

import threading
from abc import ABC, abstractmethod

from loguru import logger

from strangler_router.models import RoutingDecision


class MigrationObserver(ABC):
    """Sink for routing decisions.

    ``record`` must return quickly. The router swallows anything it raises,
    but implementations should not rely on that.
    """

    @abstractmethod
    def record(self, decision: RoutingDecision) -> None:
        ...


class CountingObserver(MigrationObserver):
    """In-memory per-selector counters, safe under concurrent use."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: dict[str, int] = {}

    def record(self, decision: RoutingDecision) -> None:
        with self._lock:
            self._counts[decision.selector] = self._counts.get(decision.selector, 0) + 1

    def counts(self) -> dict[str, int]:
        """Snapshot of requests served per selector."""
        with self._lock:
            return dict(self._counts)

    @property
    def total(self) -> int:
        with self._lock:
            return sum(self._counts.values())

    def fractions(self) -> dict[str, float]:
        """Share of traffic per selector; empty until something is recorded."""
        counts = self.counts()
        total = sum(counts.values())
        if not total:
            return {}
        return {selector: n / total for selector, n in counts.items()}

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()


class LoggingObserver(MigrationObserver):
    """Log one line per decision."""

    def __init__(self, level: str = "INFO"):
        self.level = level

    def record(self, decision: RoutingDecision) -> None:
        logger.log(
            self.level,
            f"Migration: {decision.routing_key!r} → {decision.selector} at {decision.timestamp:.3f}",
        )


class CompositeObserver(MigrationObserver):
    """Forward each decision to several observers."""

    def __init__(self, *observers: MigrationObserver):
        self.observers = list(observers)

    def record(self, decision: RoutingDecision) -> None:
        for observer in self.observers:
            try:
                observer.record(decision)
            except Exception as e:
                logger.warning(f"Observer {observer.__class__.__name__} failed: {e}")
