"""Process runner: spawn one program, stream its output, classify its exit code.

general-utils runtime module v0.1.0

This module provides:
- A single-shot async wrapper around an external program
- Stdout/stderr streaming to an optional handler, echoed to the parent's
  own streams unless suppressed
- Success/failure classification against a set of accepted exit codes

Key design points:
- One coroutine per invocation, nothing shared between calls
- stdout and stderr are pumped concurrently; order is preserved within a
  stream, never across streams
- Every failure (bad exit code, binary that cannot be launched) surfaces
  as ExecError carrying the exit code
- The child stays in the caller's process group (Ctrl+C reaches both)
"""

from __future__ import annotations

import codecs
import logging
import subprocess
import sys
import warnings
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import anyio
from anyio.abc import ByteReceiveStream
from pydantic import BaseModel, ConfigDict, field_validator

from ..config import get_config
from ..errors import ExecError, ExecPreconditionError

__all__ = [
    "ExecOptions",
    "OutputHandler",
    "ProcessRunner",
    "StreamDisposition",
    "run_command",
    "run_process",
]

logger = logging.getLogger(__name__)

# (stdout_text, stderr_text): exactly one side is set per call
OutputHandler = Callable[[str | None, str | None], None]

# Conventional shell codes, reused when the program cannot be launched directly
EXIT_CODE_NOT_FOUND = 127
EXIT_CODE_NOT_EXECUTABLE = 126
EXIT_CODE_SPAWN_FAILED = 1


class StreamDisposition(str, Enum):
    """What happens to one of the child's standard streams.

    - INHERIT: the child shares the parent's stream
    - PIPE: the stream is captured by the runner
    - IGNORE: the stream is connected to the null device
    """

    INHERIT = "inherit"
    PIPE = "pipe"
    IGNORE = "ignore"

    def to_subprocess(self) -> int | None:
        """Value understood by the subprocess layer."""
        if self is StreamDisposition.PIPE:
            return subprocess.PIPE
        if self is StreamDisposition.IGNORE:
            return subprocess.DEVNULL
        return None


DEFAULT_STDIO = (
    StreamDisposition.INHERIT,
    StreamDisposition.PIPE,
    StreamDisposition.PIPE,
)


class ExecOptions(BaseModel):
    """Options for a single execution. Every field has its own default.

    Attributes:
        success_exit_codes: Exit codes considered a success, in the caller's
            order without duplicates (a bare int is accepted)
        output_handler: Called with (stdout_text, None) or (None, stderr_text) per chunk
        suppress_local_echo: Do not write captured chunks to this process's stdout/stderr
        use_shell: Resolve and run the program through the host shell
        stdio: Dispositions for (stdin, stdout, stderr); a single disposition
            applies to all three
    """

    model_config = ConfigDict(frozen=True)

    success_exit_codes: tuple[int, ...] = (0,)
    output_handler: OutputHandler | None = None
    suppress_local_echo: bool = False
    use_shell: bool = True
    stdio: tuple[StreamDisposition, StreamDisposition, StreamDisposition] = DEFAULT_STDIO

    @field_validator("success_exit_codes", mode="before")
    @classmethod
    def _normalize_success_exit_codes(cls, value: Any) -> Any:
        if value is None:
            return (0,)
        if isinstance(value, int):
            return (value,)
        if isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
            codes = list(dict.fromkeys(value))
            if not codes:
                raise ValueError("at least one success exit code is required")
            return tuple(codes)
        return value

    @field_validator("stdio", mode="before")
    @classmethod
    def _expand_stdio(cls, value: Any) -> Any:
        # StreamDisposition is a str, so both spellings land here
        if isinstance(value, str):
            return (value, value, value)
        return value

    def describe_success_codes(self) -> str:
        """Accepted codes as a comma-separated string, in the caller's order."""
        return ",".join(str(code) for code in self.success_exit_codes)


@dataclass
class ProcessRunner:
    """Runs one external program to completion and reports how it finished.

    Example:
        runner = ProcessRunner()
        exit_code = await runner.run(
            "git",
            ["status", "--short"],
            ExecOptions(output_handler=collect, suppress_local_echo=True),
        )

    Attributes:
        encoding: Codec used to decode the child's output
        read_size: Bytes requested per pipe read
    """

    encoding: str = field(default_factory=lambda: get_config().encoding)
    read_size: int = field(default_factory=lambda: get_config().read_size)

    async def run(
        self,
        program: str | None,
        arguments: Sequence[str] = (),
        options: ExecOptions | None = None,
    ) -> int:
        """Run ``program`` with ``arguments`` and return its exit code.

        Args:
            program: Executable to run (must not be blank)
            arguments: Ordered arguments, may be empty
            options: Execution options (defaults when omitted)

        Returns:
            The exit code, always a member of ``options.success_exit_codes``

        Raises:
            ExecPreconditionError: If ``program`` is blank (nothing is spawned)
            ExecError: If the exit code is not an accepted one, or the
                program could not be launched
        """
        if options is None:
            options = ExecOptions()

        if program is None or not program.strip():
            raise ExecPreconditionError('The "program" argument is required')

        command = self._build_command(program, arguments, options)
        stdin, stdout, stderr = (d.to_subprocess() for d in options.stdio)

        try:
            process = await anyio.open_process(
                command,
                stdin=stdin,
                stdout=stdout,
                stderr=stderr,
            )
        except OSError as e:
            raise self._spawn_error(program, e) from e

        logger.debug(
            f"Started subprocess pid={process.pid} "
            f"program={program} shell={options.use_shell}"
        )

        # First exception raised by output_handler, shared by both pumps
        handler_errors: list[Exception] = []

        async with process:
            try:
                async with anyio.create_task_group() as tg:
                    if process.stdout is not None:
                        tg.start_soon(self._pump, process.stdout, False, options, handler_errors)
                    if process.stderr is not None:
                        tg.start_soon(self._pump, process.stderr, True, options, handler_errors)
            except BaseExceptionGroup as group:
                if len(group.exceptions) == 1:
                    raise group.exceptions[0] from None
                raise

            exit_code = await process.wait()

        logger.debug(
            f"Subprocess completed pid={process.pid} returncode={exit_code}"
        )

        # The child always runs to completion; a failing handler is reported after it
        if handler_errors:
            raise handler_errors[0]

        if exit_code not in options.success_exit_codes:
            raise ExecError(
                f'Expected success codes were "{options.describe_success_codes()}", '
                f'but the process exited with "{exit_code}".',
                exit_code,
            )
        return exit_code

    def _build_command(
        self,
        program: str,
        arguments: Sequence[str],
        options: ExecOptions,
    ) -> str | list[str]:
        """A single line for the shell, or an argv list for direct exec.

        The shell line is not quoted; the host shell interprets it as is.
        """
        if options.use_shell:
            return " ".join([program, *arguments])
        return [program, *arguments]

    def _spawn_error(self, program: str, error: OSError) -> ExecError:
        if isinstance(error, FileNotFoundError):
            exit_code = EXIT_CODE_NOT_FOUND
        elif isinstance(error, PermissionError):
            exit_code = EXIT_CODE_NOT_EXECUTABLE
        else:
            exit_code = EXIT_CODE_SPAWN_FAILED
        return ExecError(f'Unable to launch "{program}": {error}', exit_code)

    async def _pump(
        self,
        stream: ByteReceiveStream,
        is_stderr: bool,
        options: ExecOptions,
        handler_errors: list[Exception],
    ) -> None:
        """Forward one captured stream until EOF.

        Decoding is incremental so a multi-byte character split across two
        reads is emitted whole. The pipe is drained to EOF even after the
        handler has failed, so the child never blocks on a full pipe.
        """
        decoder = codecs.getincrementaldecoder(self.encoding)(errors="replace")

        while True:
            try:
                chunk = await stream.receive(self.read_size)
            except anyio.EndOfStream:
                break
            self._emit(decoder.decode(chunk), is_stderr, options, handler_errors)

        self._emit(decoder.decode(b"", final=True), is_stderr, options, handler_errors)

    @staticmethod
    def _emit(
        text: str,
        is_stderr: bool,
        options: ExecOptions,
        handler_errors: list[Exception],
    ) -> None:
        if not text:
            return

        # The handler is not called again once it has failed
        if options.output_handler is not None and not handler_errors:
            try:
                if is_stderr:
                    options.output_handler(None, text)
                else:
                    options.output_handler(text, None)
            except Exception as e:
                handler_errors.append(e)

        if not options.suppress_local_echo:
            # Looked up per write so redirected streams are honoured
            target = sys.stderr if is_stderr else sys.stdout
            target.write(text)
            target.flush()


async def run_process(
    program: str | None,
    arguments: Sequence[str] = (),
    **options: Any,
) -> int:
    """Run a program with a default ``ProcessRunner``.

    Keyword arguments are ``ExecOptions`` fields.
    """
    return await ProcessRunner().run(program, arguments, ExecOptions(**options))


async def run_command(
    command: str | None,
    arguments: Sequence[str],
    data_handler: OutputHandler | None = None,
    use_shell: bool = False,
) -> None:
    """Deprecated, use ``run_process()`` instead.

    Output is echoed only when a ``data_handler`` is given. Shell resolution
    is off by default and nothing is returned on success.
    """
    warnings.warn(
        "run_command() is deprecated, use run_process() instead",
        DeprecationWarning,
        stacklevel=2,
    )
    await ProcessRunner().run(
        command,
        arguments,
        ExecOptions(
            output_handler=data_handler,
            use_shell=use_shell,
            suppress_local_echo=data_handler is None,
        ),
    )
