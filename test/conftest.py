"""Fixtures compartidos: store simulado, cliente HTTP y tokens."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from auth.utils import create_access_token
from helpers import FakeTracksCollection


@pytest.fixture
def collection():
    return MagicMock()


@pytest.fixture
def store(collection):
    return SimpleNamespace(tracks=collection, connected=True)


@pytest.fixture
def memory_store():
    return SimpleNamespace(tracks=FakeTracksCollection(), connected=True)


@pytest.fixture
def make_client():
    from main import create_app

    def _make(store):
        return TestClient(create_app(store=store))

    return _make


@pytest.fixture
def client(make_client, store):
    return make_client(store)


@pytest.fixture
def admin_headers():
    token = create_access_token({"email": "admin@example.com", "role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers():
    token = create_access_token({"email": "user@example.com", "role": "user"})
    return {"Authorization": f"Bearer {token}"}
