# tests/test_shutdown.py

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from task_downloader import storage
from task_downloader.errors import ServiceStopping
from task_downloader.shutdown import ShutdownCoordinator


def test_keep_alive_unit_blocks_until_stop() -> None:
    c = ShutdownCoordinator()
    assert c.pending == 1
    assert c.wait(timeout=0.01) is False

    assert c.request_stop() is True
    assert c.stopping
    assert c.wait(timeout=1) is True


def test_request_stop_is_idempotent() -> None:
    c = ShutdownCoordinator()
    with c.work():
        assert c.request_stop() is True
        assert c.request_stop() is False
        # the second stop must not release the running download's unit
        assert c.pending == 1
    assert c.pending == 0


def test_stop_waits_for_registered_work() -> None:
    c = ShutdownCoordinator()
    c.register_work()
    c.request_stop()
    assert c.wait(timeout=0.01) is False
    c.release_work()
    assert c.wait(timeout=1) is True


def test_work_is_released_when_body_raises() -> None:
    c = ShutdownCoordinator()
    with pytest.raises(ValueError):
        with c.work():
            raise ValueError("boom")
    assert c.pending == 1


def test_register_after_stop_is_rejected() -> None:
    c = ShutdownCoordinator()
    c.request_stop()
    with pytest.raises(ServiceStopping):
        c.register_work()
    assert c.pending == 0


def test_release_without_register_is_an_error() -> None:
    c = ShutdownCoordinator()
    c.request_stop()
    with pytest.raises(RuntimeError):
        c.release_work()


def test_finalizer_runs_cleanup_after_last_download(tmp_path: Path) -> None:
    c = ShutdownCoordinator()
    storage_dir = storage.make_storage_dir(tmp_path)
    (storage_dir / "file-task-1-x.pdf").write_bytes(b"x")
    order: list[str] = []
    stopped = threading.Event()

    def cleanup() -> None:
        storage.remove_storage_dir(storage_dir)
        order.append("cleanup")

    def stop_server() -> None:
        order.append("stop")
        stopped.set()

    c.register_work()
    t = c.start_finalizer(cleanup, stop_server)
    c.request_stop()

    assert not stopped.wait(timeout=0.05)
    assert storage_dir.exists(), "cleanup must wait for the running download"

    c.release_work()
    t.join(timeout=2)
    assert order == ["cleanup", "stop"]
    assert not storage_dir.exists()


def test_finalizer_continues_after_failing_step() -> None:
    c = ShutdownCoordinator()
    ran: list[str] = []

    def broken() -> None:
        raise OSError("permission denied")

    t = c.start_finalizer(broken, lambda: ran.append("stop"))
    c.request_stop()
    t.join(timeout=2)
    assert ran == ["stop"]


def test_finalizer_can_only_start_once() -> None:
    c = ShutdownCoordinator()
    c.start_finalizer()
    with pytest.raises(RuntimeError):
        c.start_finalizer()
    c.request_stop()
