"""Caption editing for image galleries."""

from .caption_csv import CaptionFormatError, read_caption_csv, write_caption_csv
from .discovery import discover_images
from .pipeline import CaptionerConfig, UnsupportedOutputTypeError, run
from .reconcile import reconcile
from .records import CaptionRecord, ViewCommand

__all__ = [
    "CaptionFormatError",
    "CaptionRecord",
    "CaptionerConfig",
    "UnsupportedOutputTypeError",
    "ViewCommand",
    "discover_images",
    "read_caption_csv",
    "reconcile",
    "run",
    "write_caption_csv",
]
