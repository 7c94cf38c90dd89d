"""Wire discovery, reconciliation, editing and persistence into one run."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .caption_csv import read_caption_csv, write_caption_csv
from .discovery import discover_images
from .reconcile import fresh_table, reconcile
from .records import CaptionRecord, ViewCommand
from .session import CaptionEditor, Launcher, edit_captions, launch_viewer

# Output type -> default file name
OUTPUT_TYPES: Dict[str, str] = {
    "csv": "captions.csv",
}


class UnsupportedOutputTypeError(ValueError):
    """Raised when the requested output type has no writer."""

    def __init__(self, output_type: str) -> None:
        self.output_type = output_type
        supported = ", ".join(sorted(OUTPUT_TYPES))
        super().__init__(f"unsupported output type {output_type!r} (available: {supported})")


@dataclass
class CaptionerConfig:
    """Resolved options for a captioning run."""

    gallery_dir: Path = field(default_factory=Path.cwd)
    output_type: str = "csv"
    output_name: Optional[str] = None
    edit: bool = False
    view_command: Optional[str] = None
    view_command_args: List[str] = field(default_factory=list)
    gui: bool = False

    def check_output_type(self) -> None:
        if self.output_type not in OUTPUT_TYPES:
            raise UnsupportedOutputTypeError(self.output_type)

    @property
    def csv_path(self) -> Path:
        self.check_output_type()
        name = self.output_name or OUTPUT_TYPES[self.output_type]
        return Path(self.gallery_dir) / name

    def resolved_view_command(self) -> Optional[ViewCommand]:
        if not self.view_command:
            return None
        return ViewCommand.from_options(self.view_command, self.view_command_args)


def load_captions(csv_path: Path, gallery_dir: Path) -> List[CaptionRecord]:
    """Return the caption table for ``gallery_dir``, merged with ``csv_path`` if present."""

    image_paths = discover_images(gallery_dir)
    if csv_path.exists():
        logging.info('Caption file "%s" already exists, reading file.', csv_path.name)
        existing = read_caption_csv(csv_path)
        result = reconcile(existing, image_paths)
        if result.unresolved:
            logging.warning(
                "%d path(s) could not be canonicalized and were compared by normalized absolute path",
                len(result.unresolved),
            )
        return result.records
    logging.info("Generating new captions.")
    return fresh_table(image_paths)


def run(
    config: CaptionerConfig,
    *,
    editor: Optional[CaptionEditor] = None,
    launcher: Launcher = launch_viewer,
) -> List[CaptionRecord]:
    """Discover, reconcile, optionally edit, then write the caption table.

    The output type is checked before touching the filesystem so an
    unsupported type leaves the gallery untouched.
    """

    config.check_output_type()
    gallery_dir = Path(config.gallery_dir)
    csv_path = config.csv_path

    captions = load_captions(csv_path, gallery_dir)

    if config.edit and editor is None and config.gui:
        from .session_tk import TkCaptionEditor

        editor = TkCaptionEditor()

    captions = edit_captions(
        captions,
        enabled=config.edit,
        view_command=config.resolved_view_command(),
        editor=editor,
        launcher=launcher,
    )
    write_caption_csv(captions, csv_path)
    return captions


__all__ = [
    "OUTPUT_TYPES",
    "CaptionerConfig",
    "UnsupportedOutputTypeError",
    "load_captions",
    "run",
]
