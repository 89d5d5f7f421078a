"""
Remote fetcher: HEAD probe, content-type allow-list and a streamed GET.

Nothing here retries. A failure is logged once where it happens and raised as
one of the typed errors from errors.py.
"""
import logging
from pathlib import Path
from typing import Dict, Optional

import requests

from . import storage
from .errors import ProbeFailed, TransferError, UnsupportedType
from .models import ObjectEntry
from .shutdown import ShutdownCoordinator

logger = logging.getLogger(__name__)

# content type -> extension of the stored file
ALLOWED_TYPES = {
    "application/pdf": ".pdf",
    "image/jpeg": ".jpg",
}

HEADERS_DEFAULT = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
}

CHUNK_SIZE = 64 * 1024
TIMEOUT_DEFAULT = 30


def _media_type(value: str) -> str:
    # "application/pdf; charset=binary" -> "application/pdf"
    return value.split(";", 1)[0].strip().lower()


class RemoteFetcher:
    def __init__(
        self,
        storage_dir: Path,
        coordinator: ShutdownCoordinator,
        session: Optional[requests.Session] = None,
        allowed_types: Optional[Dict[str, str]] = None,
        timeout: float = TIMEOUT_DEFAULT,
    ):
        self.storage_dir = Path(storage_dir)
        self.coordinator = coordinator
        self.session = session if session is not None else requests.Session()
        self.allowed_types = dict(ALLOWED_TYPES if allowed_types is None else allowed_types)
        self.timeout = timeout
        self.headers = dict(HEADERS_DEFAULT)

    def probe(self, url: str) -> str:
        """Return the media type the server reports for url."""
        try:
            r = self.session.head(url, headers=self.headers, allow_redirects=True, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("HEAD %s failed: %s", url, exc)
            raise ProbeFailed() from exc
        return _media_type(r.headers.get("Content-Type", ""))

    def validate(self, content_type: str) -> str:
        ext = self.allowed_types.get(_media_type(content_type))
        if ext is None:
            raise UnsupportedType(f"Object has not good file type ({content_type or 'unknown'})")
        return ext

    def fetch(self, url: str, destination: Path) -> int:
        """Stream url into an existing destination file. Returns bytes written."""
        done = 0
        try:
            with open(destination, "wb") as f:
                with self.session.get(url, headers=self.headers, stream=True,
                                      allow_redirects=True, timeout=self.timeout) as r:
                    r.raise_for_status()
                    for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                        if not chunk:
                            continue
                        f.write(chunk)
                        done += len(chunk)
        except (requests.RequestException, OSError) as exc:
            logger.warning("GET %s -> %s failed: %s", url, destination, exc)
            raise TransferError() from exc
        logger.debug("GET %s -> %s (%d bytes)", url, destination, done)
        return done

    def download(self, url: str, task_number: str) -> ObjectEntry:
        """Probe, validate and fetch url into a new file of the storage dir."""
        url = url.strip()
        ext = self.validate(self.probe(url))

        with self.coordinator.work():
            try:
                dest = storage.create_destination(self.storage_dir, task_number, ext)
            except OSError as exc:
                logger.warning("Cannot create file in %s: %s", self.storage_dir, exc)
                raise TransferError("File creation error") from exc
            try:
                self.fetch(url, dest)
            except TransferError:
                dest.unlink(missing_ok=True)
                raise

        return ObjectEntry(url=url, path=str(dest), name=dest.name)
