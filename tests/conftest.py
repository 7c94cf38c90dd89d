from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def gallery(tmp_path: Path) -> Path:
    """A gallery directory holding two images and one unrelated file."""

    folder = tmp_path / "gallery"
    folder.mkdir()
    for name in ("b.png", "a.jpg", "c.txt"):
        (folder / name).write_bytes(b"")
    return folder
