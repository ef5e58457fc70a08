"""API test fixtures."""

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import ServiceContainer, set_container
from shared.storage import MemoryStorage


@pytest.fixture
def container(session_storage, navigator, transport):
    container = ServiceContainer(storage=session_storage, navigator=navigator, transport=transport)
    set_container(container)
    return container


@pytest.fixture
def signed_out_container(navigator, transport):
    container = ServiceContainer(storage=MemoryStorage(), navigator=navigator, transport=transport)
    set_container(container)
    return container


@pytest.fixture
def client():
    return TestClient(create_app())
