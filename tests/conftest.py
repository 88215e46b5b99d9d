"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import os
import sys
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of declfeat modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("declfeat"):
        del sys.modules[module_name]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep DECLFEAT__* variables from the outer environment out of tests."""
    for key in list(os.environ):
        if key.upper().startswith("DECLFEAT__"):
            monkeypatch.delenv(key)
