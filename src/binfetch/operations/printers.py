"""
Human-readable output formatting.

Keeps all CLI output in one place so the commands only orchestrate.
"""
from __future__ import annotations

from pathlib import Path

import typer

from ..extract import ExtractResult, Written
from ..installer import InstallResult
from ..models import InstallTarget


def print_install_summary(result: InstallResult, verbose: bool = False) -> None:
    """
    Print install summary.

    Args:
        result: Outcome of the install
        verbose: Also show the URL and extraction strategy
    """
    typer.echo(f"Installed {result.bin_name} to {result.installed_path}")
    if verbose:
        typer.echo(f"URL: {result.url}")
        typer.echo(f"Strategy: {result.strategy.value}")


def print_uninstall_summary(bin_name: str, removed: Path | None) -> None:
    """Print uninstall outcome."""
    if removed is None:
        typer.echo(f"{bin_name} is not installed")
    else:
        typer.echo(f"Removed {removed}")


def print_target(target: InstallTarget, goos: str, goarch: str, install_dir: Path) -> None:
    """Print what an install would do, without doing it."""
    typer.echo(f"Binary: {target.bin_name}")
    typer.echo(f"Version: {target.version}")
    typer.echo(f"Platform: {goos}/{goarch}")
    typer.echo(f"URL: {target.url}")
    typer.echo(f"Extract to: {target.bin_path}")
    typer.echo(f"Install to: {install_dir}")


def print_extract_result(result: ExtractResult, size: int) -> None:
    """
    Print the outcome of extracting one entry.

    Args:
        result: Written or Absent
        size: Size of the archive buffer in bytes
    """
    if isinstance(result, Written):
        typer.echo(f"Extracted {result.path} ({_format_bytes(size)} archive)")
    else:
        typer.echo(f"Entry not found: {result.name}")


def print_error(exc: BaseException) -> None:
    """Report a failed command on stderr."""
    typer.echo(f"Error: {exc}", err=True)


def _format_bytes(size_bytes: int) -> str:
    """
    Format byte count as human-readable string.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB", "42 KB")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"
