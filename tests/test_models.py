"""Basic structure tests for strangler_router."""

import dataclasses

import pytest


def test_imports():
    from strangler_router import (
        Backend, BackendUnavailable, ConfigurationError, CountingObserver, Customer,
        Found, NotFound, PrefixPolicy, RoutingDecision, StranglerRouter, ValidationError,
    )


def test_backend_selectors_are_strings():
    from strangler_router import Backend
    assert Backend.MODERN == "modern"
    assert str(Backend.LEGACY) == "legacy"
    assert {Backend.MODERN: 1}["modern"] == 1


def test_customer_hides_source_by_default():
    from strangler_router import Customer
    c = Customer("MODERN_1", "Modern Customer", "modern")
    assert c.to_public() == {"id": "MODERN_1", "name": "Modern Customer"}
    assert c.to_public(include_source=True)["source"] == "modern"


def test_customer_is_immutable():
    from strangler_router import Customer
    c = Customer("LEGACY_1", "Legacy Customer", "legacy")
    with pytest.raises(dataclasses.FrozenInstanceError):
        c.name = "changed"


def test_found_and_not_found_are_distinct():
    from strangler_router import Customer, Found, NotFound
    hit = Found(Customer("x", None, "legacy"))
    miss = NotFound("x")
    assert hit != miss
    assert hit.entity.name is None
    assert miss.id == "x"


def test_routing_decision():
    from strangler_router import RoutingDecision
    rd = RoutingDecision(routing_key="MODERN_1", selector="modern")
    assert rd.selector == "modern"
    assert rd.timestamp > 0
    with pytest.raises(dataclasses.FrozenInstanceError):
        rd.selector = "legacy"


def test_backend_unavailable_names_backend():
    from strangler_router import BackendUnavailable
    err = BackendUnavailable("modern", RuntimeError("connection refused"))
    assert err.selector == "modern"
    assert "modern" in str(err)
    assert "connection refused" in str(err)
