"""Centralised in-memory runtime state.

The relay keeps one registry, one connection manager and one handler per
process. Routers reach them through the ``get_*`` dependencies below so tests
can swap in fresh instances with ``app.dependency_overrides``.
"""
from __future__ import annotations

from .connections import ConnectionManager
from .registry import Registry
from .signaling import SignalingHandler

registry = Registry()
connections = ConnectionManager()
handler = SignalingHandler(registry)


def get_registry() -> Registry:
    return registry


def get_connections() -> ConnectionManager:
    return connections


def get_handler() -> SignalingHandler:
    return handler


__all__ = [
    "registry",
    "connections",
    "handler",
    "get_registry",
    "get_connections",
    "get_handler",
]
