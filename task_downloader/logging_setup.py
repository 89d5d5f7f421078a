import logging
import sys
from pathlib import Path
from typing import Optional

# Optional: ANSI colors on Windows
try:
    import colorama
    colorama.just_fix_windows_console()
except Exception:
    pass

FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
DATEFMT = "%Y-%m-%d %H:%M:%S"


class _QuietWerkzeug(logging.Filter):
    """Drop werkzeug's per-request access lines below WARNING."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("werkzeug"):
            return record.levelno >= logging.WARNING
        return True


def setup_logging(level: int = logging.INFO, log_file: Optional[Path] = None, access_log: bool = False) -> None:
    """Configure root logging once, before the server starts."""
    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(fmt=FORMAT, datefmt=DATEFMT)

    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(fmt)
    if not access_log:
        ch.addFilter(_QuietWerkzeug())
    root.addHandler(ch)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setFormatter(fmt)
        root.addHandler(fh)

    logging.captureWarnings(True)
