"""
binfetch installer.

Implements install() and uninstall(): resolve the manifest for the running
platform, download the release, extract the configured binary into the
package's local bin path, verify it is there and move it into the
environment's executable directory.
"""
from __future__ import annotations

import errno
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .errors import BinaryNotFoundError, WriteError
from .extract import Absent, Strategy, run_strategy, strategy_for
from .install_path import get_installation_path
from .models import InstallTarget, Manifest
from .platforms import current_platform
from .settings import Settings
from .transport import HttpFetcher

__all__ = ["InstallResult", "resolve_target", "install", "uninstall"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallResult:
    """Outcome of a successful install."""
    bin_name: str
    url: str
    strategy: Strategy
    installed_path: Path


def resolve_target(manifest: Manifest, *, goos: Optional[str] = None,
                   goarch: Optional[str] = None) -> InstallTarget:
    """
    Resolve the manifest for a platform, defaulting to the running one.

    Raises:
        UnsupportedPlatformError: If the running platform has no mapping
        ValueError: If the manifest has no URL for the platform
    """
    if goos is None or goarch is None:
        current_os, current_arch = current_platform()
        goos = goos or current_os
        goarch = goarch or current_arch
    return manifest.target(goos, goarch)


def install(manifest: Manifest, *, settings: Settings, fetcher: Optional[HttpFetcher] = None,
            goos: Optional[str] = None, goarch: Optional[str] = None,
            env: Optional[Mapping[str, str]] = None) -> InstallResult:
    """
    Download the release described by `manifest` and install its binary.

    Args:
        manifest: Parsed manifest
        settings: binfetch settings
        fetcher: HTTP fetcher (created from settings when omitted)
        goos: Target GOOS override (defaults to the running platform)
        goarch: Target GOARCH override (defaults to the running architecture)
        env: Environment used for the installation path lookup

    Returns:
        InstallResult describing where the binary ended up

    Raises:
        DownloadError: If the release cannot be requested
        StreamError: If the download fails mid-transfer
        MalformedArchiveError: If the release is not a valid archive
        BinaryNotFoundError: If the release does not contain the binary
        WriteError: If writing or moving the binary fails
        InstallPathError: If no installation directory can be determined
    """
    target = resolve_target(manifest, goos=goos, goarch=goarch)
    strategy = strategy_for(target.url)
    logger.info(f"Installing {target.bin_name} {target.version} from {target.url} ({strategy.value})")

    try:
        target.bin_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WriteError(f"Cannot create {target.bin_path}: {e}", path=str(target.bin_path)) from e

    owns_fetcher = fetcher is None
    fetcher = fetcher or HttpFetcher(settings)
    try:
        buffer = fetcher.download(target.url)
    finally:
        if owns_fetcher:
            fetcher.close()

    result = run_strategy(strategy, buffer, target.bin_name, target.bin_path)
    extracted = target.bin_path / target.bin_name
    if isinstance(result, Absent) or not extracted.is_file():
        raise BinaryNotFoundError(
            "Downloaded binary does not contain the binary specified in configuration - "
            f"{target.bin_name}"
        )
    logger.debug(f"Extracted {extracted}")

    install_dir = get_installation_path(settings, env=env, goos=goos)
    installed = _place_binary(extracted, install_dir / target.bin_name)
    logger.info(f"Installed {installed}")

    return InstallResult(
        bin_name=target.bin_name,
        url=target.url,
        strategy=strategy,
        installed_path=installed,
    )


def uninstall(manifest: Manifest, *, settings: Settings, goos: Optional[str] = None,
              goarch: Optional[str] = None,
              env: Optional[Mapping[str, str]] = None) -> Optional[Path]:
    """
    Remove the installed binary.

    Returns:
        The removed path, or None if the binary was not installed

    Raises:
        WriteError: If the binary exists but cannot be removed
    """
    target = resolve_target(manifest, goos=goos, goarch=goarch)
    install_dir = get_installation_path(settings, env=env, goos=goos)
    path = install_dir / target.bin_name

    try:
        path.unlink()
    except FileNotFoundError:
        logger.info(f"{path} is not installed")
        return None
    except OSError as e:
        raise WriteError(f"Cannot remove {path}: {e}", path=str(path)) from e

    logger.info(f"Removed {path}")
    return path


def _place_binary(source: Path, dest: Path) -> Path:
    """Move `source` to `dest`, replacing an existing binary and keeping its mode."""
    if source.resolve() == dest.resolve():
        return dest
    try:
        try:
            os.replace(source, dest)
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise
            # Different filesystems: copy (with mode) then drop the source
            shutil.copy2(source, dest)
            source.unlink()
    except OSError as e:
        raise WriteError(f"Cannot move {source} to {dest}: {e}", path=str(dest)) from e
    return dest
