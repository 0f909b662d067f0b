from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from roomrelay.app import app
from roomrelay.connections import ConnectionManager
from roomrelay.registry import Registry
from roomrelay.signaling import SignalingHandler
from roomrelay.state import get_connections, get_handler, get_registry


@pytest.fixture
def registry() -> Registry:
    return Registry()


@pytest.fixture
def handler(registry: Registry) -> SignalingHandler:
    return SignalingHandler(registry)


@pytest.fixture
def client(registry: Registry):
    connections = ConnectionManager()
    handler = SignalingHandler(registry)
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_connections] = lambda: connections
    app.dependency_overrides[get_handler] = lambda: handler
    # Entering the client keeps every websocket on one event loop.
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
