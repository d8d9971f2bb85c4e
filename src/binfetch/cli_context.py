"""
CLI Context for managing application dependencies.

Provides a clean way to manage CLI-level dependencies like settings, the
parsed manifest and the HTTP fetcher, avoiding global state and enabling
dependency injection in tests.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .models import Manifest
from .settings import Settings, create_settings_from_env
from .transport import HttpFetcher


@dataclass
class CLIContext:
    """
    Shared context for CLI commands.

    Settings come from the environment, with command-line overrides applied on
    top. The manifest and fetcher are created on first access.
    """
    settings: Settings
    _manifest: Optional[Manifest] = None
    _fetcher: Optional[HttpFetcher] = None

    @classmethod
    def from_env(cls, *, manifest_path: Optional[str] = None,
                 bin_dir: Optional[str] = None) -> CLIContext:
        """
        Create CLI context from environment variables.

        Args:
            manifest_path: Overrides BINFETCH_MANIFEST
            bin_dir: Overrides BINFETCH_BIN_DIR

        Returns:
            CLIContext with settings loaded from environment
        """
        settings = create_settings_from_env()
        overrides = {}
        if manifest_path:
            overrides["manifest_path"] = manifest_path
        if bin_dir:
            overrides["bin_dir"] = bin_dir
        if overrides:
            settings = dataclasses.replace(settings, **overrides)
        return cls(settings=settings)

    @property
    def manifest(self) -> Manifest:
        """Parsed manifest (loaded once per command)."""
        if self._manifest is None:
            self._manifest = Manifest.from_yaml_file(Path(self.settings.manifest_path))
        return self._manifest

    @property
    def fetcher(self) -> HttpFetcher:
        """HTTP fetcher built from settings (lazy initialization)."""
        if self._fetcher is None:
            self._fetcher = HttpFetcher(self.settings)
        return self._fetcher

    def close(self) -> None:
        if self._fetcher is not None:
            self._fetcher.close()
            self._fetcher = None
