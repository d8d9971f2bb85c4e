"""
binfetch CLI

Commands:
- install: Download the release for this platform and install the binary
- uninstall: Remove the installed binary
- resolve: Show URL and paths for this platform without downloading
- extract: Extract one entry from a local archive file
"""
from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import Optional

import typer

from .cli_context import CLIContext
from .collector import collect
from .extract import Strategy, run_strategy, strategy_for
from .install_path import get_installation_path
from .installer import install as _install, resolve_target, uninstall as _uninstall
from .operations import run_and_exit
from .operations.printers import (
    print_extract_result, print_install_summary, print_target, print_uninstall_summary
)
from .platforms import current_platform

app = typer.Typer(name="binfetch", help="Fetch and install platform-specific release binaries")

# Read size for local archives
CHUNK_SIZE = 1024 * 1024  # 1 MiB


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
    )


@app.command()
def install(
    manifest: Optional[str] = typer.Option(None, "--manifest", "-m", help="Manifest path (default: binfetch.yaml)"),
    bin_dir: Optional[str] = typer.Option(None, "--bin-dir", help="Installation directory override"),
    verbose: bool = typer.Option(False, "--verbose", help="Show detailed output")
) -> None:
    """Download the release for this platform and install its binary."""
    _configure_logging(verbose)

    def _run() -> None:
        context = CLIContext.from_env(manifest_path=manifest, bin_dir=bin_dir)
        try:
            result = _install(context.manifest, settings=context.settings, fetcher=context.fetcher)
        finally:
            context.close()
        print_install_summary(result, verbose=verbose)

    run_and_exit(_run)


@app.command()
def uninstall(
    manifest: Optional[str] = typer.Option(None, "--manifest", "-m", help="Manifest path (default: binfetch.yaml)"),
    bin_dir: Optional[str] = typer.Option(None, "--bin-dir", help="Installation directory override"),
    verbose: bool = typer.Option(False, "--verbose", help="Show detailed output")
) -> None:
    """Remove the installed binary."""
    _configure_logging(verbose)

    def _run() -> None:
        context = CLIContext.from_env(manifest_path=manifest, bin_dir=bin_dir)
        target = resolve_target(context.manifest)
        removed = _uninstall(context.manifest, settings=context.settings)
        print_uninstall_summary(target.bin_name, removed)

    run_and_exit(_run)


@app.command()
def resolve(
    manifest: Optional[str] = typer.Option(None, "--manifest", "-m", help="Manifest path (default: binfetch.yaml)"),
    bin_dir: Optional[str] = typer.Option(None, "--bin-dir", help="Installation directory override"),
    goos: Optional[str] = typer.Option(None, "--platform", help="GOOS override (e.g. linux, windows)"),
    goarch: Optional[str] = typer.Option(None, "--arch", help="GOARCH override (e.g. amd64, arm64)"),
    verbose: bool = typer.Option(False, "--verbose", help="Show detailed output")
) -> None:
    """Show the release URL and paths for a platform without downloading."""
    _configure_logging(verbose)

    def _run() -> None:
        context = CLIContext.from_env(manifest_path=manifest, bin_dir=bin_dir)
        target_os, target_arch = goos, goarch
        if target_os is None or target_arch is None:
            current_os, current_arch = current_platform()
            target_os = target_os or current_os
            target_arch = target_arch or current_arch
        target = context.manifest.target(target_os, target_arch)
        install_dir = get_installation_path(context.settings, goos=target_os)
        print_target(target, target_os, target_arch, install_dir)

    run_and_exit(_run)


@app.command()
def extract(
    archive: Path = typer.Argument(..., help="Local archive (.zip, .tar.gz, .tgz, .tar.zst)"),
    name: str = typer.Argument(..., help="Entry name to extract"),
    dest: Path = typer.Argument(..., help="Existing destination directory"),
    verbose: bool = typer.Option(False, "--verbose", help="Show detailed output")
) -> None:
    """Extract one entry from a local archive, keeping its file mode."""
    _configure_logging(verbose)

    def _run() -> None:
        strategy = strategy_for(archive.name)
        if strategy is Strategy.RAW:
            raise ValueError(f"Unsupported archive type: {archive.name}")

        with open(archive, "rb") as f:
            chunks = iter(functools.partial(f.read, CHUNK_SIZE), b"")
            buffer = collect(chunks, size_hint=archive.stat().st_size)

        result = run_strategy(strategy, buffer, name, dest)
        print_extract_result(result, len(buffer))

    run_and_exit(_run)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
