"""Error taxonomy for strangler-router.

``NotFound`` is deliberately absent: a missing customer is a lookup result,
see :class:`strangler_router.models.NotFound`.
"""


class StranglerRouterError(Exception):
    """Base class for all router errors."""


class ValidationError(StranglerRouterError):
    """Missing or malformed routing key. Never retried."""


class ConfigurationError(StranglerRouterError):
    """Deployment defect, e.g. a selector with no registered provider."""


class BackendUnavailable(StranglerRouterError):
    """The selected backend failed or timed out."""

    def __init__(self, selector: str, cause: BaseException | None = None):
        self.selector = str(selector)
        self.cause = cause
        detail = f": {cause}" if cause is not None and str(cause) else ""
        super().__init__(f"Backend '{self.selector}' unavailable{detail}")
