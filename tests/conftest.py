"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local kitescope package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of kitescope modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("kitescope"):
        del sys.modules[module_name]

from kitescope.config.models import KiteScopeConfig  # noqa: E402
from kitescope.engine import KiteScope  # noqa: E402

WriteFiles = Callable[[dict[str, str]], Path]


@pytest.fixture
def write_files(tmp_path: Path) -> WriteFiles:
    """Write ``{relative path: text}`` under a fresh workspace root and return the root."""

    def _write(files: dict[str, str]) -> Path:
        for name, text in files.items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text)
        return tmp_path

    return _write


@pytest.fixture
def engine(tmp_path: Path) -> KiteScope:
    """Engine over ``tmp_path`` with default settings (no YAML lookup)."""
    return KiteScope(tmp_path, config=KiteScopeConfig())
