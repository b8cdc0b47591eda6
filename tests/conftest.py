from __future__ import annotations

from collections.abc import Callable
from itertools import count
from pathlib import Path

import pytest

# Projects are built under tmp_path: anything inside this checkout's tests/
# directory is classified as the auditor's own test material.


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    counter = count()

    def _make(files: dict[str, str]) -> Path:
        index = next(counter)
        root = tmp_path / ("project" if index == 0 else f"project-{index}")
        root.mkdir()
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return _make
