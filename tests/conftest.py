"""Root pytest configuration for binfetch tests."""
from __future__ import annotations

import textwrap

import pytest

from binfetch.settings import Settings


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Keep the developer's environment out of the tests."""
    for var in ("BINFETCH_MANIFEST", "BINFETCH_BIN_DIR", "BINFETCH_HTTP_TIMEOUT",
                "BINFETCH_HTTP_RETRY", "BINFETCH_INSECURE", "VIRTUAL_ENV"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def install_dir(tmp_path):
    """Directory standing in for the environment's bin/."""
    path = tmp_path / "installed"
    path.mkdir()
    return path


@pytest.fixture
def settings(install_dir):
    """Standard test settings: no retries, installs into a temp dir."""
    return Settings(bin_dir=str(install_dir), http_retry=0, http_timeout_s=5.0)


@pytest.fixture
def manifest_file(tmp_path):
    """Write a manifest whose extraction dir lives under tmp_path."""
    def _write(url: str = "https://example.com/releases/v{{version}}/tool_{{platform}}_{{arch}}{{archive_ext}}",
               name: str = "tool", version: str = "v1.2.3"):
        path = tmp_path / "binfetch.yaml"
        path.write_text(textwrap.dedent(f"""\
            version: {version}
            binary:
              name: {name}
              path: {tmp_path / 'bin'}
              url: "{url}"
        """))
        return path
    return _write
