"""
Shared fixtures for integration tests.

These fixtures handle:
- Redirecting storage to a temporary data directory
- Resetting the lazily created service singletons
- A TestClient with startup events executed
"""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def isolated_storage(tmp_path, monkeypatch):
    import messages_router
    from config import config

    monkeypatch.setattr(config.STORAGE, "data_dir", str(tmp_path / "data"))
    for name in ("_message_store", "_message_intake", "_archiver"):
        monkeypatch.setattr(messages_router, name, None)
    return config.STORAGE


@pytest.fixture
def client(isolated_storage):
    import core  # noqa: F401
    from core.app_state import app

    with TestClient(app) as test_client:
        yield test_client
