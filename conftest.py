from __future__ import annotations

import sys
from pathlib import Path

import pytest


SRC_PATH = Path(__file__).resolve().parent / "src"
if SRC_PATH.is_dir():
    sys.path.insert(0, str(SRC_PATH))


@pytest.fixture
def zigzag_engine():
    from nexustd.core.engine import Engine
    from nexustd.core.model.path import get_path_pattern

    return Engine(get_path_pattern("zigzag"), seed=7)
