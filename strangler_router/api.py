"""HTTP binding for the strangler router.

``GET /api/customer?id=...`` delegates to :class:`StranglerRouter`.
Misses are 404s and a failing backend is a 503 naming that backend.
``GET /api/migration`` reports how traffic has split so far.
"""

from __future__ import annotations

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from loguru import logger

from strangler_router.config import Settings, build_router, configure_logging
from strangler_router.errors import BackendUnavailable, ValidationError
from strangler_router.models import NotFound
from strangler_router.observer import CompositeObserver, CountingObserver, LoggingObserver
from strangler_router.router import StranglerRouter


def _find_counter(observer) -> CountingObserver | None:
    """First CountingObserver in ``observer``, looking inside composites."""
    if isinstance(observer, CountingObserver):
        return observer
    if isinstance(observer, CompositeObserver):
        for inner in observer.observers:
            found = _find_counter(inner)
            if found is not None:
                return found
    return None


def create_app(
    settings: Settings | None = None,
    *,
    router: StranglerRouter | None = None,
    counter: CountingObserver | None = None,
) -> FastAPI:
    """Build the application.

    With no ``router``, one is assembled from ``settings``, observed by a
    counter (served at ``/api/migration``) and a debug-level log line.
    Configuration defects raise here, before any request is served.
    """
    settings = settings or Settings()
    configure_logging(settings.log_level)

    if router is None:
        counter = counter or CountingObserver()
        router = build_router(settings, CompositeObserver(counter, LoggingObserver("DEBUG")))
    elif counter is None:
        counter = _find_counter(router.observer)

    app = FastAPI(title="strangler-router")
    app.state.settings = settings
    app.state.router = router
    app.state.counter = counter

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(BackendUnavailable)
    async def _backend_unavailable(request: Request, exc: BackendUnavailable):
        logger.error(f"{request.url.path}: {exc}")
        return JSONResponse(status_code=503, content={"detail": str(exc), "backend": exc.selector})

    @app.get("/health")
    async def health():
        return {"status": "ok", "backends": router.selectors}

    @app.get("/api/customer")
    async def get_customer(customer_id: str | None = Query(default=None, alias="id")):
        """Return ``{id, name}`` for the customer, from whichever backend owns it."""
        if not customer_id:
            raise HTTPException(status_code=400, detail="Query parameter 'id' is required")

        result = await router.handle(customer_id)
        if isinstance(result, NotFound):
            raise HTTPException(status_code=404, detail=f"Customer {customer_id} not found")
        return result.entity.to_public(include_source=settings.expose_source)

    @app.get("/api/migration")
    async def migration_progress():
        if counter is None:
            raise HTTPException(status_code=404, detail="Migration progress is not being counted")
        return {"total": counter.total, "counts": counter.counts(), "fractions": counter.fractions()}

    return app
