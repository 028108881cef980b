"""Routing policies: map a routing key to a backend selector.

Policies are pure: no I/O, no randomness, no exceptions for any string key.
Each one also reports every selector it can produce so the router can check
at startup that all of them have a registered provider.
"""

from __future__ import annotations

import zlib
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping

from strangler_router.errors import ConfigurationError
from strangler_router.models import Backend


class RoutingPolicy(ABC):
    """Strategy deciding which backend serves a routing key."""

    def __init__(self, default: str = Backend.LEGACY):
        self.default = str(default)

    @abstractmethod
    def decide(self, routing_key: str) -> str:
        """Return the selector for ``routing_key``. Must be total."""
        ...

    @abstractmethod
    def selectors(self) -> frozenset[str]:
        """Every selector ``decide`` can return."""
        ...

    def __call__(self, routing_key: str) -> str:
        return self.decide(routing_key)


class PrefixPolicy(RoutingPolicy):
    """Case-sensitive prefix match anchored at position 0.

    Rules are tried in order and the first matching prefix wins; keys matching
    no rule go to ``default``.
    """

    def __init__(self, rules: Mapping[str, str] | Iterable[tuple[str, str]], default: str = Backend.LEGACY):
        super().__init__(default)
        items = rules.items() if isinstance(rules, Mapping) else rules
        self._rules: list[tuple[str, str]] = []
        for prefix, selector in items:
            if not isinstance(prefix, str) or not prefix:
                # An empty prefix would match everything and shadow the default.
                raise ConfigurationError(f"Invalid routing prefix: {prefix!r}")
            self._rules.append((prefix, str(selector)))

    @classmethod
    def modern_prefix(cls, prefix: str = "MODERN_") -> PrefixPolicy:
        """Ids starting with ``prefix`` go to modern, everything else to legacy."""
        return cls({prefix: Backend.MODERN}, default=Backend.LEGACY)

    @property
    def rules(self) -> list[tuple[str, str]]:
        return list(self._rules)

    def decide(self, routing_key: str) -> str:
        if isinstance(routing_key, str):
            for prefix, selector in self._rules:
                if routing_key.startswith(prefix):
                    return selector
        return self.default

    def selectors(self) -> frozenset[str]:
        return frozenset([self.default, *(s for _, s in self._rules)])

    def __repr__(self) -> str:
        return f"PrefixPolicy(rules={self._rules!r}, default={self.default!r})"


class AllowListPolicy(RoutingPolicy):
    """Route an explicit set of keys to ``selector``."""

    def __init__(self, keys: Iterable[str], selector: str = Backend.MODERN, default: str = Backend.LEGACY):
        super().__init__(default)
        self.keys = frozenset(keys)
        self.selector = str(selector)

    def decide(self, routing_key: str) -> str:
        if isinstance(routing_key, str) and routing_key in self.keys:
            return self.selector
        return self.default

    def selectors(self) -> frozenset[str]:
        return frozenset([self.default, self.selector])


class PercentagePolicy(RoutingPolicy):
    """Route a stable ``percent`` share of keys to ``selector``.

    Keys are bucketed with CRC32, so a given key always lands in the same
    bucket; raising ``percent`` only ever moves keys towards ``selector``.
    Changing ``salt`` reshuffles which keys are in the share.
    """

    def __init__(self, percent: int, selector: str = Backend.MODERN, default: str = Backend.LEGACY, salt: str = ""):
        super().__init__(default)
        if isinstance(percent, bool) or not isinstance(percent, int) or not 0 <= percent <= 100:
            raise ConfigurationError(f"Rollout percent must be an integer in 0..100, got {percent!r}")
        self.percent = percent
        self.selector = str(selector)
        self.salt = salt

    def bucket(self, routing_key: str) -> int:
        return zlib.crc32(f"{self.salt}{routing_key}".encode("utf-8", "surrogatepass")) % 100

    def decide(self, routing_key: str) -> str:
        if not isinstance(routing_key, str):
            return self.default
        if self.bucket(routing_key) < self.percent:
            return self.selector
        return self.default

    def selectors(self) -> frozenset[str]:
        return frozenset([self.default, self.selector])
