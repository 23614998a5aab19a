from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

SAMPLES_DIR = Path(__file__).resolve().parent / "_samples"


@pytest.fixture()
def samples_dir() -> Path:
    return SAMPLES_DIR


@pytest.fixture()
def load_sample() -> Callable[[str], dict[str, Any]]:
    def _load(name: str) -> dict[str, Any]:
        path = SAMPLES_DIR / f"{name}.json"
        return json.loads(path.read_text(encoding="utf-8"))

    return _load
