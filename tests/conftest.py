from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from wingnest.api import create_app
from wingnest.connections.manager import ConnectionManager
from wingnest.domain.wing import Wing
from wingnest.stores.local import LocalWingStore
from tests.fakes import FakeTextGenerator


@pytest.fixture
def test_wings() -> dict[str, Wing]:
    return {
        "mdn-js": Wing(
            id="mdn-js",
            url="https://developer.mozilla.org/en-US/docs/Web/JavaScript",
            title="JavaScript | MDN",
            summary="Reference and guides for the JavaScript language",
            collection_ids=["web"],
        ),
        "mdn-css": Wing(
            id="mdn-css",
            url="https://developer.mozilla.org/en-US/docs/Web/CSS",
            title="CSS | MDN",
            summary="Reference for Cascading Style Sheets",
            collection_ids=["web"],
        ),
        "blog": Wing(
            id="blog",
            url="https://blog.example.com/2024/release-notes",
            title="Release notes",
        ),
        "docs": Wing(
            id="docs",
            url="https://docs.example.com/getting-started",
            title="Getting started",
        ),
        "pasta": Wing(
            id="pasta",
            url="https://cooking.test/recipes/carbonara",
            title="Carbonara",
            summary="A classic Roman pasta recipe",
            collection_ids=["food"],
        ),
    }


@pytest.fixture
def fake_generator() -> FakeTextGenerator:
    return FakeTextGenerator("0.0")


@pytest.fixture
def wing_store(test_wings: dict[str, Wing]) -> LocalWingStore:
    return LocalWingStore.from_data(wings=test_wings)


@pytest.fixture
def manager(wing_store: LocalWingStore, fake_generator: FakeTextGenerator) -> ConnectionManager:
    return ConnectionManager(store=wing_store, generator=fake_generator)


@pytest.fixture
def store_file(tmp_path: Path, test_wings: dict[str, Wing]) -> Path:
    """A wing store persisted to a temporary JSON file."""
    path = tmp_path / "wings.json"
    LocalWingStore.from_data(wings=test_wings).save(str(path))
    return path


@pytest.fixture
def file_store(store_file: Path) -> LocalWingStore:
    return LocalWingStore(filepath=store_file)


@pytest.fixture
def test_client(file_store: LocalWingStore, fake_generator: FakeTextGenerator) -> TestClient:
    """Create test client with a file-backed store and a fake generator."""
    app = create_app(store=file_store, generator=fake_generator)
    return TestClient(app)
