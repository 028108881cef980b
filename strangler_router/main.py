"""ASGI entry point: ``uvicorn strangler_router.main:app``."""

from strangler_router.api import create_app
from strangler_router.config import load_settings

app = create_app(load_settings())
