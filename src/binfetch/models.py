"""
Manifest models.

The manifest is a small YAML document, normally `binfetch.yaml` at the root of
the package being installed:

    version: v3.38.0
    binary:
      name: task
      path: ./bin
      url: https://example.com/releases/v{{version}}/task_{{platform}}_{{arch}}{{archive_ext}}

`url` may also be a mapping keyed by platform (and then by architecture), with
"default" entries at either level.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Union

import yaml
from pydantic import BaseModel, Field, field_validator

from .path_safety import safe_entry_name
from .platforms import render_url, select_url

__all__ = ["BinarySpec", "Manifest", "InstallTarget"]


class BinarySpec(BaseModel):
    """Where the binary comes from and what it is called."""
    name: str = Field(..., description="Binary name inside the release")
    path: str = Field(..., description="Directory the release is extracted into")
    url: Union[str, Dict[str, Union[str, Dict[str, str]]]] = Field(
        ..., description="URL template or platform/arch mapping of templates"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return safe_entry_name(v)

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("'path' property is necessary")
        return v

    @field_validator("url")
    @classmethod
    def validate_url(cls, v):
        if not v:
            raise ValueError("'url' property is required")
        return v


@dataclass(frozen=True)
class InstallTarget:
    """A manifest resolved for one platform/architecture."""
    bin_name: str
    bin_path: Path
    url: str
    version: str


class Manifest(BaseModel):
    """Binary release description."""
    version: str = Field(..., description="Release version, optionally 'v'-prefixed")
    binary: BinarySpec = Field(..., description="Binary release description")

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, v):
        # Unquoted YAML versions such as 1.2 load as numbers
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("'version' property must be specified")
        return v.strip()

    @classmethod
    def from_yaml_file(cls, path: Path) -> Manifest:
        """Load a Manifest from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(
                f"Unable to find {path}. "
                "Please run this command at the root of the package you want installed"
            )

        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Invalid manifest {path}: expected a mapping at the top level")
        return cls.model_validate(data)

    def target(self, goos: str, goarch: str) -> InstallTarget:
        """
        Resolve the release URL and binary name for a platform.

        Raises:
            ValueError: If no URL template matches the platform/architecture
        """
        template = select_url(self.binary.url, goos, goarch)
        if not template:
            raise ValueError("Could not find url matching platform and architecture")

        url, bin_name = render_url(
            template,
            goos=goos,
            goarch=goarch,
            version=self.version,
            bin_name=self.binary.name,
        )
        return InstallTarget(
            bin_name=bin_name,
            bin_path=Path(self.binary.path),
            url=url,
            version=self.version[1:] if self.version.startswith("v") else self.version,
        )
