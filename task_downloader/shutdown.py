"""
Stop coordination.

The coordinator counts outstanding work. It starts with one unit held on
behalf of the running server; request_stop() releases that unit. Every
download registers itself for the duration of the transfer, so the count only
reaches zero once the server was asked to stop *and* all downloads are done.
That is the moment the finalizer removes the storage directory and shuts the
server down.
"""
import contextlib
import logging
import threading
from typing import Callable, Optional

from .errors import ServiceStopping

logger = logging.getLogger(__name__)


class ShutdownCoordinator:
    def __init__(self):
        self._cond = threading.Condition()
        self._pending = 1  # keep-alive unit, released by request_stop()
        self._stopping = False
        self._finalizer: Optional[threading.Thread] = None

    @property
    def stopping(self) -> bool:
        with self._cond:
            return self._stopping

    @property
    def pending(self) -> int:
        with self._cond:
            return self._pending

    def register_work(self):
        with self._cond:
            if self._stopping:
                raise ServiceStopping()
            self._pending += 1

    def release_work(self):
        with self._cond:
            self._release_locked()

    def _release_locked(self):
        if self._pending <= 0:
            raise RuntimeError("release_work() called more times than register_work()")
        self._pending -= 1
        if self._pending == 0:
            self._cond.notify_all()

    @contextlib.contextmanager
    def work(self):
        self.register_work()
        try:
            yield
        finally:
            self.release_work()

    def request_stop(self) -> bool:
        """Switch to stopping. Returns False if a stop was already requested."""
        with self._cond:
            if self._stopping:
                return False
            self._stopping = True
            logger.info("Stop requested, %d download(s) still running", self._pending - 1)
            self._release_locked()
            return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: self._pending == 0, timeout)

    def start_finalizer(self, *callbacks: Callable[[], None]) -> threading.Thread:
        """Run callbacks in order on a daemon thread once all work is done."""
        if self._finalizer is not None:
            raise RuntimeError("finalizer already started")

        def run():
            self.wait()
            logger.info("All downloads finished, shutting down")
            for cb in callbacks:
                try:
                    cb()
                except Exception:
                    logger.exception("Shutdown step %r failed", getattr(cb, "__name__", cb))

        t = threading.Thread(target=run, name="shutdown-finalizer", daemon=True)
        t.start()
        self._finalizer = t
        return t
