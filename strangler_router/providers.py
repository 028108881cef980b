"""In-memory customer backends.

Real deployments plug a database or RPC client in behind
:class:`~strangler_router.models.CustomerProvider`; these two cover the
canonical legacy/modern demo and fixture-backed tests.
"""

from collections.abc import Mapping

from strangler_router.models import Customer, CustomerProvider, Found, LookupResult, NotFound


class SyntheticCustomerProvider(CustomerProvider):
    """Answers every lookup with a synthesized record named ``display_name``."""

    def __init__(self, source: str, display_name: str):
        super().__init__(source)
        self.display_name = display_name

    async def lookup(self, customer_id: str) -> LookupResult:
        return Found(Customer(customer_id, self.display_name, self.source))


class FixtureCustomerProvider(CustomerProvider):
    """Serves a fixed set of records; anything else is a miss."""

    def __init__(self, source: str, records: Mapping[str, str | None]):
        super().__init__(source)
        self.records = dict(records)  # id -> name

    async def lookup(self, customer_id: str) -> LookupResult:
        if customer_id not in self.records:
            return NotFound(customer_id)
        return Found(Customer(customer_id, self.records[customer_id], self.source))
