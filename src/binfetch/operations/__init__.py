"""
Operations package - CLI support layer.

Centralizes exception-to-exit-code mapping and human-readable output so the
Typer commands stay thin and testable.
"""
from .mappers import EXIT_CODES, exit_code_for, run_and_exit

__all__ = ["EXIT_CODES", "exit_code_for", "run_and_exit"]
