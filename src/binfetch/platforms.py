"""
Platform/architecture naming and release URL templating.

Release assets are usually named after Go's GOOS/GOARCH values, so the running
interpreter's platform and machine names are mapped onto those before the URL
template is filled in.
"""
from __future__ import annotations

import platform as _platform
import sys
from typing import Mapping, Optional, Tuple, Union

from .errors import UnsupportedPlatformError

__all__ = [
    "ARCH_MAPPING",
    "PLATFORM_MAPPING",
    "UrlConfig",
    "current_platform",
    "select_url",
    "render_url",
]

# platform.machine() -> GOARCH
ARCH_MAPPING = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "arm64": "arm64",
    "aarch64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "arm": "arm",
}

# sys.platform prefix -> GOOS
PLATFORM_MAPPING = {
    "darwin": "darwin",
    "linux": "linux",
    "win32": "windows",
    "freebsd": "freebsd",
}

UrlConfig = Union[str, Mapping[str, Union[str, Mapping[str, str]]]]


def current_platform(sys_platform: Optional[str] = None,
                     machine: Optional[str] = None) -> Tuple[str, str]:
    """
    Return (goos, goarch) for the running interpreter.

    Raises:
        UnsupportedPlatformError: If the platform or architecture has no mapping
    """
    sys_platform = sys_platform if sys_platform is not None else sys.platform
    machine = (machine if machine is not None else _platform.machine()).lower()

    goarch = ARCH_MAPPING.get(machine)
    if goarch is None:
        raise UnsupportedPlatformError(f"Installation is not supported for this architecture: {machine}")

    # sys.platform carries a version suffix on some systems, e.g. "freebsd14"
    for prefix, goos in PLATFORM_MAPPING.items():
        if sys_platform.startswith(prefix):
            return goos, goarch
    raise UnsupportedPlatformError(f"Installation is not supported for this platform: {sys_platform}")


def select_url(url_config: UrlConfig, goos: str, goarch: str) -> Optional[str]:
    """
    Pick the URL template for a platform/architecture pair.

    `url_config` is either a single template, or a mapping keyed by GOOS whose
    values are templates or mappings keyed by GOARCH. Both levels may carry a
    "default" key.

    Examples:
        >>> select_url({"linux": {"amd64": "a", "default": "b"}}, "linux", "arm64")
        'b'
    """
    if isinstance(url_config, str):
        return url_config

    by_platform = url_config.get(goos) or url_config.get("default")
    if by_platform is None or isinstance(by_platform, str):
        return by_platform

    return by_platform.get(goarch) or by_platform.get("default")


def render_url(template: str, *, goos: str, goarch: str, version: str,
               bin_name: str) -> Tuple[str, str]:
    """
    Fill in a URL template.

    Returns:
        (url, bin_name); on windows the binary name gains an ".exe" suffix
    """
    if version.startswith("v"):
        version = version[1:]

    url = template
    if goos == "windows":
        bin_name += ".exe"
        url = url.replace("{{win_ext}}", ".exe")
        url = url.replace("{{archive_ext}}", ".zip")
    else:
        url = url.replace("{{win_ext}}", "")
        url = url.replace("{{archive_ext}}", ".tar.gz")

    url = url.replace("{{arch}}", goarch)
    url = url.replace("{{platform}}", goos)
    url = url.replace("{{version}}", version)
    url = url.replace("{{bin_name}}", bin_name)
    return url, bin_name
