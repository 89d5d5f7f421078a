# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from task_downloader.fetcher import RemoteFetcher
from task_downloader.registry import TaskRegistry
from task_downloader.shutdown import ShutdownCoordinator
from task_downloader.web import create_app

from .fakes import FakeSession


@pytest.fixture()
def storage_dir(tmp_path: Path) -> Path:
    path = tmp_path / "storage"
    path.mkdir()
    return path


@pytest.fixture()
def coordinator() -> ShutdownCoordinator:
    return ShutdownCoordinator()


@pytest.fixture()
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def fetcher(storage_dir: Path, coordinator: ShutdownCoordinator, session: FakeSession) -> RemoteFetcher:
    return RemoteFetcher(storage_dir, coordinator, session=session, timeout=1)


@pytest.fixture()
def registry(fetcher: RemoteFetcher, coordinator: ShutdownCoordinator) -> TaskRegistry:
    """Registry wired to the real fetcher, which talks to a FakeSession."""
    return TaskRegistry(fetcher, coordinator)


@pytest.fixture()
def client(registry: TaskRegistry, coordinator: ShutdownCoordinator):
    app = create_app(registry, coordinator)
    app.config["TESTING"] = True
    return app.test_client()
