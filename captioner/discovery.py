from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, List

SUPPORTED_EXTENSIONS = {".jpg", ".jpeg", ".png"}


def iter_images(folder: Path) -> Iterator[Path]:
    """Yield image files from ``folder`` in directory-listing order.

    Only direct children are considered. ``OSError`` is raised when the folder
    cannot be listed.
    """

    for path in Path(folder).iterdir():
        if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
            continue
        if path.is_dir():
            logging.debug("Skipping directory %s", path)
            continue
        yield path


def discover_images(folder: Path) -> List[Path]:
    images = list(iter_images(folder))
    logging.debug("Discovered %d image(s) in %s", len(images), folder)
    return images


__all__ = ["SUPPORTED_EXTENSIONS", "discover_images", "iter_images"]
