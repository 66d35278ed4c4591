"""Runtime module for running external programs.

This module provides single-shot process execution with streamed output
and exit-code based success/failure classification.
"""

from __future__ import annotations

from .process_runner import (
    ExecOptions,
    OutputHandler,
    ProcessRunner,
    StreamDisposition,
    run_command,
    run_process,
)

__all__ = [
    "ExecOptions",
    "OutputHandler",
    "ProcessRunner",
    "StreamDisposition",
    "run_command",
    "run_process",
]
