"""
Shared fixtures.

Every test gets its own repositories, loaded from the bundled seed files,
so create/update/delete tests never leak into each other.
"""

import pytest
from fastapi.testclient import TestClient

from artifind.catalog.store import (
    build_artisan_repository,
    build_product_repository,
    get_artisan_repository,
    get_product_repository,
)
from artifind.main import app, get_chat_store
from artifind.storage import ChatSessionStore


@pytest.fixture
def product_repo():
    return build_product_repository()


@pytest.fixture
def artisan_repo():
    return build_artisan_repository()


@pytest.fixture
def chat_store():
    return ChatSessionStore(max_messages=20)


@pytest.fixture
def client(product_repo, artisan_repo, chat_store):
    app.dependency_overrides[get_product_repository] = lambda: product_repo
    app.dependency_overrides[get_artisan_repository] = lambda: artisan_repo
    app.dependency_overrides[get_chat_store] = lambda: chat_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
