from pathlib import Path

import pytest

from captioner.discovery import SUPPORTED_EXTENSIONS, discover_images


def test_discovery_filters_by_extension(gallery: Path):
    names = sorted(path.name for path in discover_images(gallery))
    assert names == ["a.jpg", "b.png"]


def test_discovery_is_case_insensitive_and_skips_directories(tmp_path: Path):
    for name in ("UPPER.JPG", "mixed.JpEg", "shot.PNG", "notes.md", "noext"):
        (tmp_path / name).write_bytes(b"")
    (tmp_path / "folder.jpg").mkdir()
    (tmp_path / "folder.jpg" / "nested.png").write_bytes(b"")

    names = sorted(path.name for path in discover_images(tmp_path))

    assert names == ["UPPER.JPG", "mixed.JpEg", "shot.PNG"]


def test_discovery_is_stable_on_rescan(gallery: Path):
    assert discover_images(gallery) == discover_images(gallery)


def test_discovery_returns_paths_inside_directory(gallery: Path):
    for path in discover_images(gallery):
        assert path.parent == gallery
        assert path.suffix.lower() in SUPPORTED_EXTENSIONS


def test_discovery_missing_directory_raises(tmp_path: Path):
    with pytest.raises(OSError):
        discover_images(tmp_path / "missing")


def test_discovery_on_file_raises(tmp_path: Path):
    target = tmp_path / "image.jpg"
    target.write_bytes(b"")
    with pytest.raises(OSError):
        discover_images(target)
