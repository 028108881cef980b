"""Core data models for strangler-router."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum


class Backend(str, Enum):
    """Selectors for the two canonical backends.

    Any string works as a selector; these are just the ones every deployment has.
    """
    LEGACY = "legacy"
    MODERN = "modern"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Customer:
    """A customer record as returned by a backend."""
    id: str
    name: str | None = None
    source: str = ""  # selector of the backend that produced it

    def to_public(self, include_source: bool = False) -> dict[str, str | None]:
        data: dict[str, str | None] = {"id": self.id, "name": self.name}
        if include_source:
            data["source"] = self.source
        return data


@dataclass(frozen=True)
class Found:
    """Lookup hit."""
    entity: Customer


@dataclass(frozen=True)
class NotFound:
    """Lookup miss. A valid outcome, not an error."""
    id: str


LookupResult = Found | NotFound


@dataclass(frozen=True)
class RoutingDecision:
    """Which backend a request was routed to, and when."""
    routing_key: str
    selector: str
    timestamp: float = field(default_factory=time.time)


class CustomerProvider(ABC):
    """Abstract base class for customer backends."""

    def __init__(self, source: str):
        self.source = str(source)

    @abstractmethod
    async def lookup(self, customer_id: str) -> LookupResult:
        """Fetch a customer by id."""
        ...

    @property
    def name(self) -> str:
        return self.__class__.__name__
