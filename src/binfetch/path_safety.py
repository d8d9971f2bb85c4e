"""
Path safety utilities for binfetch.

The extractor joins the configured binary name onto the destination directory
without sanitizing it, so names coming from a manifest are validated here
first.
"""
from __future__ import annotations

from pathlib import PurePosixPath


def safe_entry_name(name: str) -> str:
    """
    Validate a binary / archive entry name taken from configuration.

    This function enforces the following safety rules:
    - No empty strings or "."
    - No absolute paths (starting with '/')
    - No parent directory references ('..' components)
    - No backslashes (Windows separators would escape the directory there)
    - No nested names; the binary sits at the top level of its directory

    Args:
        name: Entry name from configuration

    Returns:
        Normalized entry name

    Raises:
        ValueError: If the name violates safety rules

    Examples:
        >>> safe_entry_name("task")
        'task'

        >>> safe_entry_name("../task")
        ValueError: unsafe entry name: ../task
    """
    rel = PurePosixPath(name)
    s = str(rel)
    if not name or s == ".":
        raise ValueError(f"unsafe entry name: {name}")
    if "\\" in s:
        raise ValueError(f"unsafe entry name: {name}")
    if rel.is_absolute() or ".." in rel.parts or len(rel.parts) != 1:
        raise ValueError(f"unsafe entry name: {name}")
    return s
