"""StranglerRouter: per-request dispatch between legacy and modern backends."""

import asyncio
import time
from collections.abc import Mapping

from loguru import logger

from strangler_router.errors import BackendUnavailable, ConfigurationError, ValidationError
from strangler_router.models import CustomerProvider, LookupResult, RoutingDecision
from strangler_router.observer import CountingObserver, MigrationObserver
from strangler_router.policy import RoutingPolicy


class StranglerRouter:
    """Routes each lookup to exactly one backend chosen by a routing policy.

    For every request:
      1. The policy maps the routing key to a selector
      2. The provider registered under that selector serves the lookup
      3. The decision is handed to the observer, whatever the outcome

    There is no failover: each backend is authoritative for its share of
    traffic, so a failing backend surfaces as :class:`BackendUnavailable`
    tagged with its selector.
    """

    def __init__(
        self,
        policy: RoutingPolicy,
        providers: Mapping[str, CustomerProvider],
        observer: MigrationObserver | None = None,
        *,
        default_timeout: float | None = None,
    ):
        self._policy = policy
        self._providers = {str(selector): provider for selector, provider in providers.items()}
        self._observer = observer if observer is not None else CountingObserver()
        self._default_timeout = default_timeout
        self._last_decision: RoutingDecision | None = None

        self.validate()

    @property
    def policy(self) -> RoutingPolicy:
        return self._policy

    @property
    def observer(self) -> MigrationObserver:
        return self._observer

    @property
    def selectors(self) -> list[str]:
        """Registered selectors, sorted."""
        return sorted(self._providers)

    @property
    def last_decision(self) -> RoutingDecision | None:
        """Most recent decision, for diagnostics only.

        Best effort: under concurrent ``handle`` calls this is whichever request
        decided last. Routing never reads it; use the observer for accounting.
        """
        return self._last_decision

    def validate(self) -> None:
        """Fail fast if the policy can pick a selector with no provider."""
        missing = sorted(self._policy.selectors() - set(self._providers))
        if missing:
            raise ConfigurationError(
                f"No provider registered for selector(s) {', '.join(missing)} "
                f"(registered: {', '.join(self.selectors) or 'none'})"
            )
        logger.debug(f"Router: {self._policy!r} validated against {self.selectors}")

    async def handle(self, routing_key: str, *, timeout: float | None = None) -> LookupResult:
        """Look up ``routing_key`` on the backend the policy selects.

        Args:
            routing_key: Customer id; must be a non-empty string.
            timeout: Seconds to wait for the provider. Defaults to the
                router's ``default_timeout``; ``None`` waits indefinitely.

        Returns:
            The provider's ``Found`` or ``NotFound``, unchanged.

        Raises:
            ValidationError: If ``routing_key`` is missing or not a string.
            ConfigurationError: If the selected backend is not registered.
            BackendUnavailable: If the provider raised or timed out.
        """
        if not isinstance(routing_key, str) or not routing_key:
            raise ValidationError(f"Routing key must be a non-empty string, got {routing_key!r}")

        selector = self._policy.decide(routing_key)
        decision = RoutingDecision(routing_key, selector)
        self._last_decision = decision

        try:
            provider = self._providers.get(selector)
            if provider is None:
                raise ConfigurationError(f"Policy selected unregistered backend '{selector}'")

            limit = timeout if timeout is not None else self._default_timeout
            logger.info(f"Route: {routing_key!r} → {selector} ({provider.name})")

            start = time.monotonic()
            try:
                if limit is None:
                    result = await provider.lookup(routing_key)
                else:
                    result = await asyncio.wait_for(provider.lookup(routing_key), timeout=limit)
            except asyncio.TimeoutError as e:
                latency_ms = int((time.monotonic() - start) * 1000)
                logger.warning(f"Backend {selector} timed out after {latency_ms}ms for {routing_key!r}")
                raise BackendUnavailable(selector, TimeoutError(f"no response within {limit}s")) from e
            except Exception as e:
                latency_ms = int((time.monotonic() - start) * 1000)
                logger.warning(f"Backend {selector} failed in {latency_ms}ms for {routing_key!r}: {e}")
                raise BackendUnavailable(selector, e) from e

            return result
        finally:
            # Runs on success, miss, provider error and cancellation alike.
            self._observe(decision)

    def _observe(self, decision: RoutingDecision) -> None:
        try:
            self._observer.record(decision)
        except Exception as e:
            logger.warning(f"Migration observer failed for {decision.routing_key!r}: {e}")
