"""Log file setup for the terminal UI.

The TUI owns the terminal, so log records go to an append-only file instead
of the console.
"""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(log_path: Path, level: int = logging.INFO) -> bool:
    """Send the ``yellow`` loggers to ``log_path``.

    Returns:
        False if the file could not be opened; a warning is printed to
        stderr and logging stays unconfigured.
    """
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    except OSError as e:
        print(f"Warning: Could not set up logging: {e}", file=sys.stderr)
        return False

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger("yellow")
    root.setLevel(level)
    for existing in list(root.handlers):
        if isinstance(existing, logging.FileHandler):
            root.removeHandler(existing)
            existing.close()
    root.addHandler(handler)
    return True
