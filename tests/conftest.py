"""Pytest configuration helpers for test collection.

Ensure the project root is on sys.path so tests can import the package
without requiring PYTHONPATH to be set externally, and provide the shared
store fixtures.
"""
import sys
from pathlib import Path
import pytest


def pytest_configure(config):
    # Insert repo root (one level up from tests/) to sys.path
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))


@pytest.fixture
def backend():
    from docstore_lib.backend.memory_client import MemoryBackendClient
    return MemoryBackendClient(page_size=2)


@pytest.fixture
def counting(backend):
    from tests.helpers import CountingClient
    return CountingClient(backend)


@pytest.fixture
def store(counting):
    from docstore_lib.store import create_store
    return create_store(counting)


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from docstore_lib.backend.memory_client import MemoryBackendClient
    from docstore_lib.config.config import ServerConfig
    from docstore_lib.main import create_app, Config

    app = create_app(Config(
        client=MemoryBackendClient(),
        server_config=ServerConfig(server_name='test'),
        configure_logging=False,
    ))
    return TestClient(app)
