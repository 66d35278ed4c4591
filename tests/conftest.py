"""Pytest configuration and fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Project root
PROJECT_ROOT = Path(__file__).parent.parent

# Add src to the import path (development checkouts)
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

DUMMY_PROGRAM = Path(__file__).parent / "fixtures" / "dummy_program.py"


@pytest.fixture
def python() -> str:
    """Interpreter used to launch the dummy program."""
    return sys.executable


@pytest.fixture
def dummy_program() -> str:
    """Path of the dummy program."""
    return str(DUMMY_PROGRAM)


class OutputCollector:
    """Output handler that accumulates both streams."""

    def __init__(self) -> None:
        self.stdout_chunks: list[str] = []
        self.stderr_chunks: list[str] = []
        self.calls: list[tuple[str | None, str | None]] = []

    def __call__(self, stdout_text: str | None, stderr_text: str | None) -> None:
        self.calls.append((stdout_text, stderr_text))
        if stdout_text is not None:
            self.stdout_chunks.append(stdout_text)
        if stderr_text is not None:
            self.stderr_chunks.append(stderr_text)

    @property
    def stdout(self) -> str:
        return "".join(self.stdout_chunks)

    @property
    def stderr(self) -> str:
        return "".join(self.stderr_chunks)


@pytest.fixture
def collector() -> OutputCollector:
    """Fresh output collector."""
    return OutputCollector()
