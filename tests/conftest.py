from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.domain.store import Store
from app.main import create_app
from tools.fixtures import FILES, write_fixtures


@pytest.fixture
def expected() -> dict[str, bytes]:
    """Fixture bytes keyed by resource path."""
    return dict(FILES)


@pytest.fixture
def resource_root(tmp_path: Path) -> Path:
    root = tmp_path / "resources"
    write_fixtures(root)
    return root


@pytest.fixture(params=[True, False], ids=["preload", "lazy"])
def store(request: pytest.FixtureRequest, resource_root: Path) -> Store:
    return Store.from_directory(resource_root, preload=request.param)


@pytest.fixture
def lazy_store(resource_root: Path) -> Store:
    return Store.from_directory(resource_root, preload=False)


@pytest.fixture
def make_client():
    """Return a factory building a TestClient around a given store."""

    def _make(store: Store, root: Path) -> TestClient:
        app = create_app(store=store, settings=Settings(resource_root=root))
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client, store: Store, resource_root: Path) -> TestClient:
    return make_client(store, resource_root)
