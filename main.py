"""Edit captions for a gallery of images."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List

from captioner.caption_csv import CaptionFormatError
from captioner.pipeline import OUTPUT_TYPES, CaptionerConfig, UnsupportedOutputTypeError, run


def setup_logging(verbose: bool = False) -> None:
    """Configure the root logger."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        force=True,
    )

    # Thumbnail decoding in the GUI makes PIL chatty at DEBUG.
    if not verbose:
        logging.getLogger("PIL").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="image-captioner", description=__doc__)
    parser.add_argument(
        "gallery_dir",
        nargs="?",
        type=Path,
        help="Directory of the gallery to generate captions for (default: current directory).",
    )
    parser.add_argument(
        "-t",
        "--output-type",
        default="csv",
        help=f"The type of output, available options: {', '.join(sorted(OUTPUT_TYPES))} (default: csv).",
    )
    parser.add_argument(
        "-n",
        "--output-name",
        help=(
            "Name of the output file, relative to the gallery directory "
            "(default: captions.csv for the csv output type)."
        ),
    )
    parser.add_argument(
        "-e",
        "--edit",
        action="store_true",
        help="Interactively edit the captions before they are written.",
    )
    parser.add_argument(
        "-c",
        "--view-command",
        help="Program launched to view an image while its caption is being edited.",
    )
    parser.add_argument(
        "-a",
        "--view-command-args",
        nargs="+",
        default=[],
        metavar="ARG",
        help=(
            "Arguments passed to the view command before the image path. "
            'Escape dash "-" symbols with a backslash: "\\-". '
            'For example: -a "\\-\\-some" "command"'
        ),
    )
    parser.add_argument(
        "--gui",
        action="store_true",
        help="Edit captions in a Tkinter window instead of the console.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> CaptionerConfig:
    gallery_dir = args.gallery_dir if args.gallery_dir is not None else Path.cwd()
    return CaptionerConfig(
        gallery_dir=gallery_dir,
        output_type=args.output_type,
        output_name=args.output_name,
        edit=args.edit,
        view_command=args.view_command,
        view_command_args=list(args.view_command_args),
        gui=args.gui,
    )


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    config = config_from_args(args)
    logging.debug("Options: %s", config)

    try:
        run(config)
    except UnsupportedOutputTypeError as exc:
        logging.error("Error: %s", exc)
        return 1
    except CaptionFormatError as exc:
        logging.error("Invalid caption table: %s", exc)
        return 1
    except OSError as exc:
        logging.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
