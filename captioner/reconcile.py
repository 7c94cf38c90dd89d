"""Merge a saved caption table with the images currently on disk."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Set

from .records import CaptionRecord, sort_by_filename


@dataclass
class ReconcileResult:
    """Outcome of :func:`reconcile`.

    ``records`` is the merged table in file name order, ``added`` the records
    created for images missing from the saved table and ``unresolved`` every
    path whose canonical form could not be determined.
    """

    records: List[CaptionRecord]
    added: List[CaptionRecord] = field(default_factory=list)
    unresolved: List[Path] = field(default_factory=list)


def canonical_path(path: Path) -> Path:
    """Return the absolute, symlink-free form of ``path``.

    Raises ``OSError`` when the path does not exist or cannot be resolved.
    """

    try:
        return Path(path).resolve(strict=True)
    except RuntimeError as exc:
        # symlink loops on interpreters that predate OSError for them
        raise OSError(f"Unable to resolve {path}: {exc}") from exc


class _IdentityIndex:
    """Canonical identities of image paths, with per-path failure tracking."""

    def __init__(self) -> None:
        self.unresolved: List[Path] = []

    def key(self, path: Path) -> str:
        try:
            return str(canonical_path(path))
        except OSError as exc:
            logging.warning("Unable to canonicalize %s (%s); comparing by normalized path", path, exc)
            self.unresolved.append(Path(path))
            return os.path.normpath(os.path.abspath(path))


def reconcile(existing: Sequence[CaptionRecord], discovered: Iterable[Path]) -> ReconcileResult:
    """Combine ``existing`` captions with freshly ``discovered`` images.

    Existing records are kept as they are. Discovered images that are not
    already captioned get an empty caption. Identity is decided on canonical
    paths; a path that cannot be canonicalized is reported and compared by its
    normalized absolute form instead.
    """

    identities = _IdentityIndex()
    kept: List[CaptionRecord] = []
    known: Set[str] = set()
    by_filename: Dict[str, CaptionRecord] = {}

    for record in existing:
        if record.filename in by_filename:
            logging.warning(
                "Ignoring duplicate caption entry for %s; keeping the first one", record.filename
            )
            continue
        key = identities.key(record.image_path)
        known.add(key)
        by_filename[record.filename] = record
        kept.append(record)

    added: List[CaptionRecord] = []
    for image_path in discovered:
        key = identities.key(image_path)
        if key in known:
            continue
        name = Path(image_path).name
        if name in by_filename:
            logging.warning(
                "Image %s shares its file name with caption entry %s; keeping the existing entry",
                image_path,
                by_filename[name].image_path,
            )
            continue
        record = CaptionRecord.empty(image_path)
        known.add(key)
        by_filename[name] = record
        added.append(record)

    logging.info(
        "Appending the following new images: [%s]",
        ", ".join(record.filename for record in added),
    )

    return ReconcileResult(
        records=sort_by_filename(kept + added),
        added=added,
        unresolved=identities.unresolved,
    )


def fresh_table(discovered: Iterable[Path]) -> List[CaptionRecord]:
    """Build a table of empty captions for every discovered image."""

    return sort_by_filename([CaptionRecord.empty(path) for path in discovered])


__all__ = ["ReconcileResult", "canonical_path", "fresh_table", "reconcile"]
