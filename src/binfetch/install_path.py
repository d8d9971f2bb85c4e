"""
Locate the executable directory the binary is installed into.
"""
from __future__ import annotations

import logging
import os
import sysconfig
from pathlib import Path
from typing import Mapping, Optional

from .errors import InstallPathError
from .settings import Settings

__all__ = ["get_installation_path"]

logger = logging.getLogger(__name__)


def get_installation_path(settings: Settings, *, env: Optional[Mapping[str, str]] = None,
                          goos: Optional[str] = None) -> Path:
    """
    Determine (and create) the directory binaries are installed into.

    Lookup order:
    1. settings.bin_dir (BINFETCH_BIN_DIR)
    2. The active virtualenv's bin/ (Scripts/ on windows)
    3. sysconfig's "scripts" path for the running interpreter

    Args:
        settings: binfetch settings
        env: Environment mapping (defaults to os.environ)
        goos: Target GOOS; only used to pick bin/ vs Scripts/ for virtualenvs

    Returns:
        Existing directory path

    Raises:
        InstallPathError: If no directory can be determined or created
    """
    env = os.environ if env is None else env
    windows = goos == "windows" if goos is not None else os.name == "nt"

    if settings.bin_dir:
        directory = Path(settings.bin_dir)
        logger.debug(f"Using configured bin dir {directory}")
    elif env.get("VIRTUAL_ENV"):
        directory = Path(env["VIRTUAL_ENV"]) / ("Scripts" if windows else "bin")
        logger.debug(f"Using virtualenv bin dir {directory}")
    else:
        scripts = sysconfig.get_path("scripts")
        if not scripts:
            raise InstallPathError("Error finding binary installation directory")
        directory = Path(scripts)
        logger.debug(f"Using interpreter scripts dir {directory}")

    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise InstallPathError(f"Cannot create installation directory {directory}: {e}") from e
    return directory
