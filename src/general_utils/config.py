"""Environment variable configuration.

Environment variables:
    GU_LOG_DEBUG: Debug logging
        - true/1/yes = on (DEBUG records written to a temp file)
        - false/0/no = off (default, INFO records written to stderr)

    GU_EXEC_ENCODING: Encoding used to decode child process output
        - default utf-8
        - unknown codecs fall back to the default

    GU_EXEC_READ_SIZE: Bytes requested per pipe read
        - default 4096
        - clamped to 1..1048576
"""

from __future__ import annotations

import codecs
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

__all__ = ["Config", "load_config", "get_config", "reload_config"]

DEFAULT_ENCODING = "utf-8"
DEFAULT_READ_SIZE = 4096
MAX_READ_SIZE = 1024 * 1024


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse a boolean environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_encoding(value: str | None) -> str:
    """Parse the output encoding, keeping only codecs Python knows."""
    if not value or not value.strip():
        return DEFAULT_ENCODING
    try:
        return codecs.lookup(value.strip()).name
    except LookupError:
        return DEFAULT_ENCODING


def _parse_read_size(value: str | None) -> int:
    """Parse the pipe read size."""
    if not value:
        return DEFAULT_READ_SIZE
    try:
        size = int(value)
    except ValueError:
        return DEFAULT_READ_SIZE
    return max(1, min(size, MAX_READ_SIZE))


@dataclass
class Config:
    """Library configuration.

    Attributes:
        log_debug: Debug logging (to a temp file)
        log_file: Log file path (set automatically when log_debug=True)
        encoding: Codec used to decode child stdout/stderr
        read_size: Bytes requested per pipe read
    """

    log_debug: bool = False
    log_file: str | None = None
    encoding: str = DEFAULT_ENCODING
    read_size: int = DEFAULT_READ_SIZE

    def __repr__(self) -> str:
        return (
            f"Config(log_debug={self.log_debug}, "
            f"log_file={self.log_file}, "
            f"encoding={self.encoding}, "
            f"read_size={self.read_size})"
        )


def _generate_log_file_path() -> str:
    """Build a timestamped log file path under the system temp directory."""
    log_dir = Path(tempfile.gettempdir()) / "general-utils"
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"gu_debug_{timestamp}.log"

    return str(log_file.resolve())


def load_config() -> Config:
    """Load configuration from environment variables."""
    log_debug = _parse_bool(os.environ.get("GU_LOG_DEBUG"), default=False)
    log_file = _generate_log_file_path() if log_debug else None

    return Config(
        log_debug=log_debug,
        log_file=log_file,
        encoding=_parse_encoding(os.environ.get("GU_EXEC_ENCODING")),
        read_size=_parse_read_size(os.environ.get("GU_EXEC_READ_SIZE")),
    )


# Lazily loaded global instance
_config: Config | None = None


def get_config() -> Config:
    """Return the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """Reload configuration from the environment (used by tests)."""
    global _config
    _config = load_config()
    return _config
