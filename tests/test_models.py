"""
Tests for manifest models and entry name validation.
"""
from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from binfetch.models import Manifest
from binfetch.path_safety import safe_entry_name


class TestSafeEntryName:
    """Test safe_entry_name function directly."""

    def test_plain_names_allowed(self):
        """Test that plain file names are allowed."""
        assert safe_entry_name("task") == "task"
        assert safe_entry_name("task.exe") == "task.exe"
        assert safe_entry_name("./task") == "task"

    @pytest.mark.parametrize("name", [
        "", ".", "/usr/bin/task", "../task", "bin/task", "a\\b", "..\\..\\task",
    ])
    def test_unsafe_names_rejected(self, name):
        """Test that empty, absolute, nested and traversal names are rejected."""
        with pytest.raises(ValueError, match="unsafe entry name"):
            safe_entry_name(name)


class TestManifest:
    """Test Manifest loading and resolution."""

    def test_from_yaml_file(self, manifest_file, tmp_path):
        """Test loading a manifest from YAML."""
        manifest = Manifest.from_yaml_file(manifest_file())
        assert manifest.version == "v1.2.3"
        assert manifest.binary.name == "tool"
        assert manifest.binary.path == str(tmp_path / "bin")

    def test_target(self, manifest_file, tmp_path):
        """Test resolving the manifest for a platform."""
        manifest = Manifest.from_yaml_file(manifest_file())
        target = manifest.target("linux", "arm64")

        assert target.url == "https://example.com/releases/v1.2.3/tool_linux_arm64.tar.gz"
        assert target.bin_name == "tool"
        assert target.bin_path == tmp_path / "bin"
        assert target.version == "1.2.3"

    def test_target_windows_binary_name(self, manifest_file):
        """Test the .exe suffix on windows."""
        manifest = Manifest.from_yaml_file(manifest_file())
        target = manifest.target("windows", "amd64")
        assert target.bin_name == "tool.exe"
        assert target.url.endswith("tool_windows_amd64.zip")

    def test_nested_url_mapping(self):
        """Test a platform/arch URL mapping."""
        manifest = Manifest.model_validate({
            "version": "2.0.0",
            "binary": {
                "name": "tool",
                "path": "./bin",
                "url": {"linux": {"amd64": "https://x/linux.tgz"}, "default": "https://x/other"},
            },
        })
        assert manifest.target("linux", "amd64").url == "https://x/linux.tgz"
        assert manifest.target("darwin", "arm64").url == "https://x/other"
        assert manifest.target("darwin", "arm64").bin_path == Path("bin")

    def test_no_url_for_platform(self):
        """Test that an unmatched platform raises ValueError."""
        manifest = Manifest.model_validate({
            "version": "1.0.0",
            "binary": {"name": "tool", "path": "./bin", "url": {"linux": "https://x/t"}},
        })
        with pytest.raises(ValueError, match="Could not find url matching platform and architecture"):
            manifest.target("windows", "amd64")

    def test_numeric_version_coerced(self):
        """Test that an unquoted YAML version is accepted."""
        manifest = Manifest.model_validate({
            "version": 1.5,
            "binary": {"name": "tool", "path": "bin", "url": "https://x/t"},
        })
        assert manifest.version == "1.5"

    @pytest.mark.parametrize("data", [
        {"binary": {"name": "tool", "path": "bin", "url": "https://x"}},
        {"version": "", "binary": {"name": "tool", "path": "bin", "url": "https://x"}},
        {"version": "1.0", "binary": {"name": "../tool", "path": "bin", "url": "https://x"}},
        {"version": "1.0", "binary": {"name": "tool", "path": "", "url": "https://x"}},
        {"version": "1.0", "binary": {"name": "tool", "path": "bin", "url": ""}},
        {"version": "1.0"},
    ])
    def test_invalid_manifests(self, data):
        """Test that incomplete or unsafe manifests fail validation."""
        with pytest.raises(ValidationError):
            Manifest.model_validate(data)

    def test_missing_file(self, tmp_path):
        """Test that a missing manifest raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Unable to find"):
            Manifest.from_yaml_file(tmp_path / "binfetch.yaml")

    def test_non_mapping_document(self, tmp_path):
        """Test that a YAML list is rejected."""
        path = tmp_path / "binfetch.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="expected a mapping"):
            Manifest.from_yaml_file(path)
