"""
Error mapping and CLI utilities.

Provides centralized exception-to-exit-code mapping and CLI command wrappers
to ensure consistent error handling across all Typer commands.
"""
from __future__ import annotations

import logging
from typing import Callable, TypeVar

import typer

T = TypeVar('T')

logger = logging.getLogger(__name__)

# Fallback for anything not listed below
FALLBACK_EXIT_CODE = 3

EXIT_CODES = {
    "BinaryNotFoundError": 1,
    "ValidationError": 2,
    "ValueError": 2,
    "UnsupportedPlatformError": 2,
    "FileNotFoundError": 2,
    "DownloadError": 3,
    "StreamError": 3,
    "MalformedArchiveError": 4,
    "WriteError": 5,
    "InstallPathError": 6,
}


def exit_code_for(exc: BaseException) -> int:
    """
    Map exception to standardized exit code.

    Returns exit codes:
    - 0: Success (including an archive entry that was not found by `extract`)
    - 1: Release does not contain the binary (BinaryNotFoundError)
    - 2: Invalid manifest, settings or platform
    - 3: Download or stream failure, or unknown error
    - 4: Malformed archive (MalformedArchiveError)
    - 5: Write failure (WriteError)
    - 6: No installation directory (InstallPathError)

    Args:
        exc: Exception to map

    Returns:
        Exit code, with 3 as fallback for unknown exceptions
    """
    return EXIT_CODES.get(type(exc).__name__, FALLBACK_EXIT_CODE)


def run_and_exit(func: Callable[[], T]) -> T:
    """
    Unified error wrapper for CLI commands.

    Executes the given function and maps any exception to an exit code using
    typer.Exit, after reporting the message on stderr. This centralizes error
    handling so CLI commands don't need individual try/except blocks.

    Args:
        func: Function to execute

    Returns:
        Function result if successful

    Raises:
        typer.Exit: With appropriate exit code if function raises exception
    """
    try:
        return func()
    except typer.Exit:
        raise
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        from .printers import print_error
        print_error(e)
        raise typer.Exit(code=exit_code_for(e)) from e
