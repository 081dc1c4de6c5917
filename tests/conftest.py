import os
import sys

import pytest


# Ensure the repository's src/ is on sys.path for `from chess_rules...` imports
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC_PATH = os.path.abspath(os.path.join(REPO_ROOT, "src"))
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)


@pytest.fixture
def clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop CHESS_RULES_* variables so settings fall back to defaults."""
    for key in list(os.environ):
        if key.startswith("CHESS_RULES_"):
            monkeypatch.delenv(key, raising=False)
