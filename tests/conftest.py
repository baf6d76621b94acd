"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import os
import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of canonicalcat modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("canonicalcat"):
        del sys.modules[module_name]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """Remove CANONICALCAT__* env vars and hide the user's global config."""
    for key in [k for k in os.environ if k.startswith("CANONICALCAT__")]:
        monkeypatch.delenv(key)
    monkeypatch.setattr(
        "canonicalcat.config.loader.GLOBAL_CONFIG_PATH",
        tmp_path / "global-config" / "config.yaml",
    )
    yield
