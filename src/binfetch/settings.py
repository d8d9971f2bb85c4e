"""
Settings and configuration for binfetch.

Centralizes configuration values and provides validation with fail-fast behavior.
Loads settings from environment variables when the CLI context is created.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

__all__ = ["Settings", "create_settings_from_env", "DEFAULT_MANIFEST"]

DEFAULT_MANIFEST = "binfetch.yaml"


@dataclass(frozen=True)
class Settings:
    """
    Configuration settings for binfetch.

    Manifest:
        manifest_path: Path of the YAML manifest describing the binary

    Installation:
        bin_dir: Explicit executable directory (overrides venv/sysconfig lookup)

    HTTP:
        http_timeout_s: HTTP request timeout in seconds
        http_retry: Number of retries for connection timeouts (0=no retry)
        insecure: Skip TLS certificate verification for local/dev mirrors
    """
    manifest_path: str = DEFAULT_MANIFEST
    bin_dir: Optional[str] = None
    http_timeout_s: float = 30.0
    http_retry: int = 2
    insecure: bool = False

    def __post_init__(self):
        """Validate settings on construction."""
        if not self.manifest_path:
            raise ValueError("manifest_path is required")

        if self.bin_dir is not None and not self.bin_dir.strip():
            raise ValueError("bin_dir must not be blank")

        if self.http_timeout_s <= 0:
            raise ValueError(f"http_timeout_s must be positive, got {self.http_timeout_s}")

        if self.http_retry < 0:
            raise ValueError(f"http_retry must be non-negative, got {self.http_retry}")


def create_settings_from_env() -> Settings:
    """
    Load settings from environment variables.

    Environment Variables:
        - BINFETCH_MANIFEST (default: binfetch.yaml)
        - BINFETCH_BIN_DIR (optional)
        - BINFETCH_HTTP_TIMEOUT (default: 30.0)
        - BINFETCH_HTTP_RETRY (default: 2)
        - BINFETCH_INSECURE (default: false)

    Returns:
        Settings object with validated configuration

    Raises:
        ValueError: If configuration is invalid

    Note:
        Creates a fresh Settings instance every time (no caching).
    """
    def str_to_bool(value: str) -> bool:
        return value.lower() in ('true', '1', 'yes', 'on')

    def get_float(key: str, default: float) -> float:
        value = os.getenv(key)
        return float(value) if value else default

    def get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        return int(value) if value else default

    return Settings(
        manifest_path=os.getenv("BINFETCH_MANIFEST") or DEFAULT_MANIFEST,
        bin_dir=os.getenv("BINFETCH_BIN_DIR") or None,
        http_timeout_s=get_float("BINFETCH_HTTP_TIMEOUT", 30.0),
        http_retry=get_int("BINFETCH_HTTP_RETRY", 2),
        insecure=str_to_bool(os.getenv("BINFETCH_INSECURE", "false")),
    )
