import os
import tempfile

# must be set before product_manager is imported: settings and the engine are module-level
_DB_DIR = tempfile.mkdtemp(prefix="product_manager_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ["AI_PROVIDER"] = "mock"

import pytest
from fastapi.testclient import TestClient

from product_manager.adapters.mock_text import MockTextAdapter
from product_manager.db import init_db
from product_manager.main import app
from product_manager.repositories.product_repo import ProductStore
from product_manager.services.content_service import ContentService
from product_manager.services.controller import AppController


@pytest.fixture(autouse=True)
def fresh_db():
    # every test starts with an empty storage slot
    init_db(reset=True)
    yield


@pytest.fixture
def store():
    return ProductStore()


@pytest.fixture
def loaded_store(store):
    store.load()
    return store


@pytest.fixture
def adapter():
    return MockTextAdapter()


@pytest.fixture
def content(adapter):
    return ContentService(adapter, timeout_seconds=1)


@pytest.fixture
def controller(loaded_store, content):
    return AppController(loaded_store, content)


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
