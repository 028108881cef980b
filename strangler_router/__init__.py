"""strangler-router: incremental legacy → modern migration with per-request routing."""

from strangler_router.errors import BackendUnavailable, ConfigurationError, StranglerRouterError, ValidationError
from strangler_router.models import Backend, Customer, CustomerProvider, Found, NotFound, RoutingDecision
from strangler_router.observer import CompositeObserver, CountingObserver, LoggingObserver, MigrationObserver
from strangler_router.policy import AllowListPolicy, PercentagePolicy, PrefixPolicy, RoutingPolicy
from strangler_router.router import StranglerRouter

__all__ = [
    "Backend",
    "Customer",
    "CustomerProvider",
    "Found",
    "NotFound",
    "RoutingDecision",
    "RoutingPolicy",
    "PrefixPolicy",
    "AllowListPolicy",
    "PercentagePolicy",
    "MigrationObserver",
    "CountingObserver",
    "LoggingObserver",
    "CompositeObserver",
    "StranglerRouter",
    "StranglerRouterError",
    "ValidationError",
    "ConfigurationError",
    "BackendUnavailable",
]
