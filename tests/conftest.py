from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the repository root is on sys.path so tests can import `app`, `rules`, etc.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def resolver():
    from resolve.links import RegistryResolver

    return RegistryResolver()


@pytest.fixture
def entries():
    from core.config import RULE_DIR
    from rules.catalog import load_entries

    return load_entries(RULE_DIR)
