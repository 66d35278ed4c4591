"""General Utils - process execution helpers for service backends.

Environment variables:
    GU_LOG_DEBUG: Debug logging to a temp file (default false)
    GU_EXEC_ENCODING: Encoding of child output (default utf-8)
    GU_EXEC_READ_SIZE: Bytes per pipe read (default 4096)

Usage:
    exit_code = await run_process("make", ["test"], success_exit_codes={0, 2})
"""

__version__ = "0.1.0"

from .errors import ExecError, ExecPreconditionError
from .runtime import (
    ExecOptions,
    OutputHandler,
    ProcessRunner,
    StreamDisposition,
    run_command,
    run_process,
)

__all__ = [
    "__version__",
    "ExecError",
    "ExecOptions",
    "ExecPreconditionError",
    "OutputHandler",
    "ProcessRunner",
    "StreamDisposition",
    "run_command",
    "run_process",
]
