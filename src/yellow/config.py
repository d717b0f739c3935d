"""Configuration and file path resolution for yellow."""

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

# Deleted memos older than this are purged on load
RETENTION = timedelta(days=7)

LOCAL_FILENAME = ".yellow.json"


@dataclass
class YellowConfig:
    """Resolved locations of the memo file and the log file."""

    data_path: Path
    log_path: Path


def get_global_data_path() -> Path:
    """Get the global memo file path (~/.yellow/memos.json)."""
    return Path.home() / ".yellow" / "memos.json"


def get_local_data_path() -> Path:
    """Get the local memo file path (CWD/.yellow.json)."""
    return Path.cwd() / LOCAL_FILENAME


def get_data_path(override: str | None = None, use_global: bool = False) -> Path:
    """Resolve the memo file path.

    Priority:
    1. --file PATH explicit override (highest)
    2. YELLOW_FILE env var
    3. --global flag → ~/.yellow/memos.json
    4. fallback → .yellow.json in CWD

    Args:
        override: Explicit path passed via --file flag
        use_global: If True, use the global memo file

    Returns:
        Path to the JSON memo file
    """
    if override:
        return Path(override).expanduser().resolve()

    env_path = os.environ.get("YELLOW_FILE")
    if env_path:
        return Path(env_path).expanduser().resolve()

    if use_global:
        return get_global_data_path()

    return get_local_data_path()


def get_log_path(data_path: Path, override: str | None = None) -> Path:
    """Resolve the log file path: --log, then YELLOW_LOG, then next to the data file."""
    if override:
        return Path(override).expanduser().resolve()

    env_path = os.environ.get("YELLOW_LOG")
    if env_path:
        return Path(env_path).expanduser().resolve()

    return data_path.with_suffix(".log")


def load_config(
    data_override: str | None = None,
    log_override: str | None = None,
    use_global: bool = False,
) -> YellowConfig:
    data_path = get_data_path(data_override, use_global=use_global)
    return YellowConfig(
        data_path=data_path,
        log_path=get_log_path(data_path, log_override),
    )


def ensure_data_dir(path: Path) -> None:
    """Ensure the parent directory for a file exists."""
    path.parent.mkdir(parents=True, exist_ok=True)
