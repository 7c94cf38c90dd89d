"""Data model shared by the codec, reconciliation and edit session."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Tuple


@dataclass
class CaptionRecord:
    """Caption for a single image file."""

    image_path: Path
    caption: str = ""

    @classmethod
    def empty(cls, image_path: Path) -> "CaptionRecord":
        return cls(Path(image_path), "")

    @property
    def filename(self) -> str:
        return self.image_path.name

    @property
    def label(self) -> str:
        return f"{self.filename}: {self.caption}"


@dataclass(frozen=True)
class ViewCommand:
    """External program used to preview an image while its caption is edited.

    Arguments have every backslash removed before they reach the child
    process, so ``\\-\\-flag`` on the command line arrives as ``--flag``.
    """

    command: str
    args: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_options(cls, command: str, args: Sequence[str] | None = None) -> "ViewCommand":
        return cls(command, tuple(args or ()))

    def argv(self, image_path: Path) -> List[str]:
        return [self.command, *(arg.replace("\\", "") for arg in self.args), str(image_path)]


def sort_by_filename(records: Sequence[CaptionRecord]) -> List[CaptionRecord]:
    """Return ``records`` ordered by file name, the order captions are stored in."""

    return sorted(records, key=lambda record: record.filename)


__all__ = ["CaptionRecord", "ViewCommand", "sort_by_filename"]
