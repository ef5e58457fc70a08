"""CLI test fixtures."""

import pytest

from api.dependencies import ServiceContainer
from main import build_parser
from shared.storage import MemoryStorage


@pytest.fixture
def parse():
    """Parse a command line the way the entry point does."""
    parser = build_parser()
    return parser.parse_args


@pytest.fixture
def container(session_storage, navigator, transport):
    return ServiceContainer(storage=session_storage, navigator=navigator, transport=transport)


@pytest.fixture
def signed_out_container(navigator, transport):
    return ServiceContainer(storage=MemoryStorage(), navigator=navigator, transport=transport)
