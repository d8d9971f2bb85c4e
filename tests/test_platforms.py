"""
Tests for platform mapping and URL templating.
"""
from __future__ import annotations

import pytest

from binfetch.errors import UnsupportedPlatformError
from binfetch.platforms import current_platform, render_url, select_url


class TestCurrentPlatform:
    """Test current_platform() mapping."""

    @pytest.mark.parametrize("sys_platform,machine,expected", [
        ("linux", "x86_64", ("linux", "amd64")),
        ("linux", "aarch64", ("linux", "arm64")),
        ("darwin", "arm64", ("darwin", "arm64")),
        ("win32", "AMD64", ("windows", "amd64")),
        ("freebsd14", "i386", ("freebsd", "386")),
        ("linux", "armv7l", ("linux", "arm")),
    ])
    def test_supported(self, sys_platform, machine, expected):
        """Test supported platform/architecture pairs."""
        assert current_platform(sys_platform, machine) == expected

    def test_unsupported_architecture(self):
        """Test that unknown architectures are rejected."""
        with pytest.raises(UnsupportedPlatformError, match="architecture: mips"):
            current_platform("linux", "mips")

    def test_unsupported_platform(self):
        """Test that unknown platforms are rejected."""
        with pytest.raises(UnsupportedPlatformError, match="platform: sunos5"):
            current_platform("sunos5", "x86_64")


class TestSelectUrl:
    """Test select_url() lookup rules."""

    def test_plain_string(self):
        """Test that a string applies to every platform."""
        assert select_url("https://x/tool", "linux", "amd64") == "https://x/tool"

    def test_platform_then_arch(self):
        """Test nested platform/arch lookup."""
        config = {"linux": {"amd64": "linux-amd64", "arm64": "linux-arm64"}}
        assert select_url(config, "linux", "arm64") == "linux-arm64"

    def test_defaults_at_both_levels(self):
        """Test 'default' fallbacks."""
        config = {
            "linux": {"amd64": "linux-amd64", "default": "linux-any"},
            "default": "fallback",
        }
        assert select_url(config, "linux", "386") == "linux-any"
        assert select_url(config, "darwin", "arm64") == "fallback"

    def test_no_match(self):
        """Test that no match yields None."""
        assert select_url({"linux": "x"}, "windows", "amd64") is None
        assert select_url({"linux": {"amd64": "x"}}, "linux", "arm64") is None


class TestRenderUrl:
    """Test render_url() substitution."""

    TEMPLATE = "https://x/v{{version}}/{{bin_name}}_{{platform}}_{{arch}}{{win_ext}}{{archive_ext}}"

    def test_posix(self):
        """Test substitution on non-windows platforms."""
        url, bin_name = render_url(self.TEMPLATE, goos="linux", goarch="amd64",
                                   version="v1.2.3", bin_name="task")
        assert url == "https://x/v1.2.3/task_linux_amd64.tar.gz"
        assert bin_name == "task"

    def test_windows(self):
        """Test that windows gets .exe and .zip."""
        url, bin_name = render_url(self.TEMPLATE, goos="windows", goarch="386",
                                   version="1.0.0", bin_name="task")
        assert url == "https://x/v1.0.0/task.exe_windows_386.exe.zip"
        assert bin_name == "task.exe"

    def test_only_one_leading_v_stripped(self):
        """Test version prefix handling."""
        url, _ = render_url("{{version}}", goos="linux", goarch="amd64",
                            version="vv2", bin_name="t")
        assert url == "v2"
