"""Settings for a strangler-router deployment.

Settings come from a YAML file (explicit path or ``STRANGLER_ROUTER_CONFIG``)
and are validated with pydantic. The defaults reproduce the canonical setup:
``MODERN_``-prefixed ids go to the modern backend, everything else to legacy.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Annotated, Literal, Union

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from strangler_router.errors import ConfigurationError
from strangler_router.models import Backend, CustomerProvider
from strangler_router.observer import MigrationObserver
from strangler_router.policy import AllowListPolicy, PercentagePolicy, PrefixPolicy, RoutingPolicy
from strangler_router.providers import FixtureCustomerProvider, SyntheticCustomerProvider
from strangler_router.router import StranglerRouter

CONFIG_ENV_VAR = "STRANGLER_ROUTER_CONFIG"

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class SyntheticBackendSettings(_StrictModel):
    kind: Literal["synthetic"]
    display_name: str


class FixtureBackendSettings(_StrictModel):
    kind: Literal["fixture"]
    records: dict[str, str | None] = Field(default_factory=dict)


BackendSettings = Annotated[
    Union[SyntheticBackendSettings, FixtureBackendSettings],
    Field(discriminator="kind"),
]


def _default_backends() -> dict[str, BackendSettings]:
    return {
        Backend.LEGACY.value: SyntheticBackendSettings(kind="synthetic", display_name="Legacy Customer"),
        Backend.MODERN.value: SyntheticBackendSettings(kind="synthetic", display_name="Modern Customer"),
    }


class Settings(_StrictModel):
    policy: Literal["prefix", "allow_list", "percentage"] = "prefix"
    default_backend: str = Backend.LEGACY.value
    # prefix policy: ordered, first match wins
    prefix_rules: dict[str, str] = Field(default_factory=lambda: {"MODERN_": Backend.MODERN.value})
    # allow_list / percentage policies
    target_backend: str = Backend.MODERN.value
    allow_list: list[str] = Field(default_factory=list)
    rollout_percent: int = Field(default=0, ge=0, le=100)
    rollout_salt: str = ""

    timeout_s: float | None = Field(default=None, gt=0)
    expose_source: bool = False
    log_level: LogLevel = "INFO"
    backends: dict[str, BackendSettings] = Field(default_factory=_default_backends)

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value


def load_settings(path: str | os.PathLike | None = None) -> Settings:
    """Load settings from ``path``, ``$STRANGLER_ROUTER_CONFIG`` or defaults."""
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None
    if path is None:
        return Settings()

    config_path = Path(path)
    try:
        with open(config_path) as fh:
            data = yaml.safe_load(fh) or {}
    except OSError as e:
        raise ConfigurationError(f"Cannot read config {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config {config_path} must be a mapping, got {type(data).__name__}")

    try:
        settings = Settings.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid settings in {config_path}: {e}") from e

    logger.info(f"Loaded settings from {config_path}")
    return settings


def configure_logging(level: str = "INFO") -> None:
    """Send loguru output to stderr at ``level``."""
    level = level.upper()
    try:
        logger.level(level)
    except ValueError as e:
        raise ConfigurationError(f"Unknown log level {level!r}") from e
    logger.remove()
    logger.add(sys.stderr, level=level)


def build_policy(settings: Settings) -> RoutingPolicy:
    if settings.policy == "allow_list":
        return AllowListPolicy(settings.allow_list, settings.target_backend, settings.default_backend)
    if settings.policy == "percentage":
        return PercentagePolicy(
            settings.rollout_percent, settings.target_backend, settings.default_backend,
            salt=settings.rollout_salt,
        )
    return PrefixPolicy(settings.prefix_rules, default=settings.default_backend)


def build_providers(settings: Settings) -> dict[str, CustomerProvider]:
    providers: dict[str, CustomerProvider] = {}
    for selector, backend in settings.backends.items():
        if isinstance(backend, FixtureBackendSettings):
            providers[selector] = FixtureCustomerProvider(selector, backend.records)
        else:
            providers[selector] = SyntheticCustomerProvider(selector, backend.display_name)
    return providers


def build_router(settings: Settings, observer: MigrationObserver | None = None) -> StranglerRouter:
    """Assemble policy, providers and router; raises ConfigurationError on defects."""
    router = StranglerRouter(
        build_policy(settings),
        build_providers(settings),
        observer,
        default_timeout=settings.timeout_s,
    )
    logger.info(
        f"Router ready: policy={settings.policy} backends={router.selectors} "
        f"timeout={settings.timeout_s}"
    )
    return router
