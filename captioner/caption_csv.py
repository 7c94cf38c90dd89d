"""Read and write caption tables stored as CSV.

The file has an ``Image,Caption`` header followed by one row per image. Image
names are stored bare and resolved against the directory holding the CSV.
"""
from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd

from .records import CaptionRecord

CSV_HEADER = ("Image", "Caption")


class CaptionFormatError(ValueError):
    """Raised when a caption table row cannot be parsed."""

    def __init__(
        self,
        path: Path,
        message: str,
        *,
        row: Optional[int] = None,
        line: Optional[int] = None,
        column: Optional[str] = None,
    ) -> None:
        self.path = Path(path)
        self.row = row
        self.line = line
        self.column = column
        location = str(self.path)
        if row is not None:
            location += f", row {row}"
        if line is not None:
            location += f" (line {line})"
        if column is not None:
            location += f", column {column!r}"
        super().__init__(f"{location}: {message}")


def read_caption_csv(csv_path: Path) -> List[CaptionRecord]:
    """Load the caption table stored at ``csv_path``.

    Rows are numbered from 1 starting after the header. Any row that does not
    hold exactly an image name and a caption raises :class:`CaptionFormatError`;
    rows are never skipped silently.
    """

    csv_path = Path(csv_path)
    image_directory = csv_path.parent
    records: List[CaptionRecord] = []

    with csv_path.open("r", newline="", encoding="utf-8") as handle:
        reader = csv.reader(handle)
        try:
            header = next(reader, None)
            if header is None:
                return records
            row_number = 0
            for fields in reader:
                if not fields:
                    continue
                row_number += 1
                records.append(
                    _parse_row(fields, csv_path, image_directory, row_number, reader.line_num)
                )
        except csv.Error as exc:
            raise CaptionFormatError(csv_path, str(exc), line=reader.line_num) from exc
        except UnicodeDecodeError as exc:
            raise CaptionFormatError(csv_path, f"file is not valid UTF-8: {exc}") from exc

    logging.debug("Read %d caption(s) from %s", len(records), csv_path)
    return records


def _parse_row(
    fields: Sequence[str],
    csv_path: Path,
    image_directory: Path,
    row: int,
    line: int,
) -> CaptionRecord:
    if len(fields) < len(CSV_HEADER):
        missing = CSV_HEADER[len(fields)]
        raise CaptionFormatError(
            csv_path,
            f"expected {len(CSV_HEADER)} fields, found {len(fields)}",
            row=row,
            line=line,
            column=missing,
        )
    if len(fields) > len(CSV_HEADER):
        raise CaptionFormatError(
            csv_path,
            f"expected {len(CSV_HEADER)} fields, found {len(fields)}",
            row=row,
            line=line,
        )
    image_filename, caption = fields
    if not image_filename.strip():
        raise CaptionFormatError(
            csv_path, "image filename is empty", row=row, line=line, column=CSV_HEADER[0]
        )
    return CaptionRecord(image_directory / image_filename, caption)


def write_caption_csv(records: Sequence[CaptionRecord], csv_path: Path) -> None:
    """Replace ``csv_path`` with the captions in ``records``."""

    csv_path = Path(csv_path)
    rows = [(record.filename, record.caption) for record in records]
    for row_number, row in enumerate(rows, start=1):
        _check_encodable(row, csv_path, row_number)
    logging.info('Writing captions to "%s".', csv_path)
    df = pd.DataFrame(rows, columns=list(CSV_HEADER))
    # CRLF rows make the csv writer quote any field holding a bare "\r" too.
    df.to_csv(csv_path, index=False, encoding="utf-8", lineterminator="\r\n")


def _check_encodable(row: Sequence[str], csv_path: Path, row_number: int) -> None:
    """Reject values that cannot be stored as UTF-8 before the file is replaced.

    Undecodable file names come back from the OS as lone surrogates.
    """

    for column, value in zip(CSV_HEADER, row):
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise CaptionFormatError(
                csv_path,
                f"{value!r} cannot be stored as UTF-8: {exc.reason}",
                row=row_number,
                column=column,
            ) from exc


__all__ = ["CSV_HEADER", "CaptionFormatError", "read_caption_csv", "write_caption_csv"]
