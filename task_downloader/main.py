"""Command line entry point: parse flags, wire the core together, serve."""
import argparse
import logging
import signal
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Optional

from werkzeug.serving import make_server

from . import storage
from .fetcher import TIMEOUT_DEFAULT, RemoteFetcher
from .logging_setup import setup_logging
from .registry import MAX_OBJECTS, MAX_TASKS, TaskRegistry
from .shutdown import ShutdownCoordinator
from .web import create_app

logger = logging.getLogger(__name__)


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8080
    max_tasks: int = MAX_TASKS
    max_objects: int = MAX_OBJECTS
    timeout: float = TIMEOUT_DEFAULT
    storage_parent: Optional[Path] = None


def parse_cli_args(argv=None):
    p = argparse.ArgumentParser(
        description="Task downloader: collect remote PDF/JPEG files into tasks over HTTP."
    )
    p.add_argument("--host", default="0.0.0.0", help="Interface to listen on. Default: 0.0.0.0")
    p.add_argument("-p", "--port", type=int, default=8080, help="Port to listen on. Default: 8080")
    p.add_argument("--max-tasks", type=int, default=MAX_TASKS,
        help=f"Maximum number of tasks. Default: {MAX_TASKS}")
    p.add_argument("--max-objects", type=int, default=MAX_OBJECTS,
        help=f"Maximum number of files per task. Default: {MAX_OBJECTS}")
    p.add_argument("--timeout", type=float, default=TIMEOUT_DEFAULT,
        help=f"Network timeout in seconds for HEAD/GET. Default: {TIMEOUT_DEFAULT}")
    p.add_argument("--storage-parent", type=Path, default=None,
        help="Where to create the temporary storage directory. Default: system temp dir")
    p.add_argument("--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Default: INFO")
    p.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file")
    p.add_argument("--access-log", action="store_true", help="Log every HTTP request")
    return p.parse_args(argv)


class TaskServer:
    """Everything one running service owns, plus its shutdown sequence."""

    def __init__(self, config: ServerConfig):
        self.config = config
        self.storage_dir = storage.make_storage_dir(config.storage_parent)
        self.coordinator = ShutdownCoordinator()
        self.fetcher = RemoteFetcher(self.storage_dir, self.coordinator, timeout=config.timeout)
        self.registry = TaskRegistry(
            self.fetcher,
            self.coordinator,
            max_tasks=max(1, config.max_tasks),
            max_objects=max(1, config.max_objects),
        )
        self.app = create_app(self.registry, self.coordinator)
        self.http = make_server(config.host, config.port, self.app, threaded=True)
        self.coordinator.start_finalizer(
            partial(storage.remove_storage_dir, self.storage_dir),
            self.http.shutdown,
        )

    def serve_forever(self):
        logger.info("Server will be started at %s:%d...", self.config.host, self.http.server_port)
        try:
            self.http.serve_forever()
        finally:
            self.http.server_close()
        logger.info("Server stopped")


def main(argv=None):
    args = parse_cli_args(argv)
    setup_logging(getattr(logging, args.log_level), args.log_file, access_log=args.access_log)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        max_tasks=args.max_tasks,
        max_objects=args.max_objects,
        timeout=args.timeout,
        storage_parent=args.storage_parent,
    )
    server = TaskServer(config)

    # Ctrl+C behaves like POST /stop
    def _on_sigint(signum, frame):
        if server.coordinator.request_stop():
            logger.info("Stopping… letting active downloads finish")

    signal.signal(signal.SIGINT, _on_sigint)
    server.serve_forever()


if __name__ == "__main__":
    main()
