"""Command-line entry point for atlas packing."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from .config import DEFAULT_MAX_CANVAS_SIZE, BuildRequest, load_request
from .core import ImageFormat, MultiFrameMode, OutputEncoding
from .core.errors import ProcessingError, ValidationError
from .pipeline import build_atlas

logger = logging.getLogger(__name__)

OUTPUT_TYPES = [encoding.value for encoding in OutputEncoding if encoding is not OutputEncoding.TEMPLATE]
MULTI_FRAME_CHOICES = {"separate": MultiFrameMode.SEPARATE_FRAMES, "sheet": MultiFrameMode.SINGLE_SHEET}


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="atlaspacker",
        description="Pack folders of images into a power-of-two texture atlas and descriptor.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    config_cmd = commands.add_parser("config", help="Build an atlas from a configuration file")
    config_cmd.add_argument(
        "-i",
        "--input",
        type=Path,
        required=True,
        help="Configuration file (.json, .ron or .toml)",
    )

    pack_cmd = commands.add_parser("pack", help="Build an atlas from folders given on the command line")
    pack_cmd.add_argument("-i", "--input", type=Path, nargs="+", required=True, help="Folders containing images")
    pack_cmd.add_argument("-o", "--output", type=Path, required=True, help="Output folder for the sheet and descriptor")
    pack_cmd.add_argument(
        "-t",
        "--type",
        choices=OUTPUT_TYPES,
        default=OutputEncoding.JSON.value,
        help="Descriptor output type (default: json)",
    )
    pack_cmd.add_argument("-a", "--template-path", type=Path, help="Template to render with the atlas data")
    pack_cmd.add_argument("-n", "--name", help="Output name (default: output folder name)")
    pack_cmd.add_argument(
        "--max-size",
        type=int,
        default=DEFAULT_MAX_CANVAS_SIZE,
        help=f"Maximum canvas width and height, a power of two (default: {DEFAULT_MAX_CANVAS_SIZE})",
    )
    pack_cmd.add_argument(
        "--format",
        choices=[fmt.value for fmt in ImageFormat],
        default=ImageFormat.PNG.value,
        help="Sheet image format (default: png)",
    )
    pack_cmd.add_argument("--nine-patch", action="store_true", help="Read nine-patch sidecar files")
    pack_cmd.add_argument(
        "--multi-frame",
        choices=sorted(MULTI_FRAME_CHOICES),
        help="Pack animated containers as separate frames or a single sheet",
    )
    pack_cmd.add_argument(
        "--strip-extension",
        action="store_true",
        help="Drop file extensions from frame names",
    )
    return parser


def request_from_args(args: argparse.Namespace) -> BuildRequest:
    """Translate parsed arguments into a build request."""

    if args.command == "config":
        return load_request(args.input)

    name = args.name or args.output.resolve().name or "atlas"
    try:
        return BuildRequest(
            name=name,
            output_directory=args.output,
            source_folders=args.input,
            max_canvas_size=args.max_size,
            preserve_extension_in_name=not args.strip_extension,
            nine_patch_enabled=args.nine_patch,
            multi_frame_enabled=args.multi_frame is not None,
            multi_frame_mode=MULTI_FRAME_CHOICES.get(args.multi_frame, MultiFrameMode.SEPARATE_FRAMES),
            output_image_format=args.format,
            output_encodings={args.type},
            template_paths=args.template_path,
        )
    except PydanticValidationError as exc:
        raise ValidationError(str(exc)) from exc


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        request = request_from_args(args)
        outcome = build_atlas(request)
    except (ValidationError, ProcessingError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    logger.info("Atlas written to %s (%s frame(s))", outcome.sheet_path, len(outcome.descriptor.frames))
    return 0


if __name__ == "__main__":
    sys.exit(main())
