"""Command-line entry point and logging setup.

Usage:
    python -m general_utils [--success-code N ...] [--no-shell] [--quiet] program [args ...]

The program's output is echoed as it arrives. The process exits with the
program's exit code, or with the failure's exit code when it is not accepted.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from .config import Config, get_config
from .errors import ExecError
from .runtime import ExecOptions, ProcessRunner

__all__ = ["build_parser", "configure_logging", "main", "run_cli"]

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(config: Config) -> None:
    """Install handlers for the ``general_utils`` namespace.

    LOG_DEBUG mode writes DEBUG records to ``config.log_file``; otherwise
    INFO records go to stderr. Third-party loggers stay at WARNING.
    """
    log_handlers: list[logging.Handler] = []

    if config.log_debug and config.log_file:
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log_handlers.append(file_handler)
        log_level = logging.DEBUG
    else:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log_handlers.append(stderr_handler)
        log_level = logging.INFO

    logging.basicConfig(
        level=logging.WARNING,
        handlers=log_handlers,
    )
    logging.getLogger("general_utils").setLevel(log_level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gu-exec",
        description="Run a program and exit with its exit code",
    )
    parser.add_argument(
        "--success-code",
        dest="success_codes",
        type=int,
        action="append",
        default=None,
        help="Exit code considered a success (repeatable, default 0)",
    )
    parser.add_argument("--no-shell", action="store_true", help="Run the program without a shell")
    parser.add_argument("--quiet", action="store_true", help="Do not echo the program's output")
    parser.add_argument("program", help="Program to run")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Program arguments")
    return parser


async def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse ``argv``, run the program and return the exit status to use."""
    args = build_parser().parse_args(argv)
    options = ExecOptions(
        success_exit_codes=args.success_codes,
        use_shell=not args.no_shell,
        suppress_local_echo=args.quiet,
    )

    try:
        return await ProcessRunner().run(args.program, args.args, options)
    except ExecError as e:
        logger.error(e.message)
        return e.exit_code


def main() -> None:
    """Main entry point."""
    configure_logging(get_config())
    exit_code = asyncio.run(run_cli())
    # Signal deaths are negative; report them the way shells do
    sys.exit(128 - exit_code if exit_code < 0 else exit_code)


if __name__ == "__main__":
    main()
