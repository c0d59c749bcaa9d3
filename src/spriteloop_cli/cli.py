"""Command-line entry point for keying frames and exporting sprites."""

import argparse
import logging
import sys
from pathlib import Path

from spriteloop.core import ChromaKeySettings, FeatherDirection, MarkedFrame
from spriteloop.core import exporter, manifest_writer
from spriteloop.core.errors import SpriteLoopError, ValidationError
from spriteloop.core.frame_selection import FrameWorkingSet
from spriteloop.utils import file_tools, validators

logger = logging.getLogger("spriteloop.cli")

MODES = ("sheet", "frames", "gif")


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spriteloop",
        description="Chroma-key extracted video frames and export them as frames, a GIF or a sprite sheet.",
    )
    parser.add_argument("inputs", type=Path, nargs="+", help="Frame images or directories of frames, in order")
    parser.add_argument("-o", "--output", type=Path, required=True, help="Output file (sheet/gif) or directory (frames)")
    parser.add_argument("--mode", choices=MODES, default="sheet", help="Export type (default: sheet)")
    parser.add_argument(
        "--key-color",
        dest="key_colors",
        action="append",
        default=[],
        metavar="COLOR",
        help="Color to remove as R,G,B or #RRGGBB; repeat for several",
    )
    parser.add_argument("--tolerance", type=float, default=40.0, help="RGB distance keyed out, 0-442 (default: 40)")
    parser.add_argument("--feather", type=float, default=4.0, help="Edge blur radius in px (default: 4)")
    parser.add_argument("--choke", type=float, default=0.0, help="Erode the subject by this many px (default: 0)")
    parser.add_argument("--smoothing", type=float, default=0.0, help="Second blur radius in px (default: 0)")
    parser.add_argument(
        "--feather-direction",
        choices=[d.value for d in FeatherDirection],
        default=FeatherDirection.BACKGROUND.value,
        help="Let the feather fade into the background (both sides) or only outward from the subject",
    )
    parser.add_argument("--columns", type=int, default=0, help="Sheet columns; 0 puts every frame in one row")
    parser.add_argument("--rows", type=int, default=0, help="Minimum sheet rows; 0 derives from columns")
    parser.add_argument("--padding", type=int, default=0, help="Pixels between sheet cells")
    parser.add_argument(
        "--crop",
        type=int,
        nargs=4,
        metavar=("TOP", "RIGHT", "BOTTOM", "LEFT"),
        help="Trim processed frames before export (px)",
    )
    parser.add_argument("--fps", type=float, default=exporter.DEFAULT_GIF_FPS, help="GIF frame rate (default: 12)")
    parser.add_argument("--manifest", type=Path, help="Optional JSON manifest for sprite sheet placements")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse arguments and show plan without rendering outputs",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def settings_from_args(args: argparse.Namespace) -> ChromaKeySettings:
    validators.validate_tolerance(args.tolerance)
    for name in ("feather", "choke", "smoothing"):
        validators.validate_radius(getattr(args, name), name.capitalize())
    return ChromaKeySettings(
        colors=tuple(validators.parse_key_color(value) for value in args.key_colors),
        tolerance=args.tolerance,
        feather=args.feather,
        choke=args.choke,
        smoothing=args.smoothing,
        feather_direction=args.feather_direction,
    )


def run(args: argparse.Namespace) -> None:
    settings = settings_from_args(args)
    crop = validators.parse_crop(args.crop)
    validators.validate_grid(args.columns, args.rows, args.padding)
    validators.validate_fps(args.fps)

    paths = [validators.validate_frame_path(p) for p in file_tools.expand_frame_inputs(args.inputs)]
    if not paths:
        raise ValidationError("No frame images found in the given inputs")

    working_set = FrameWorkingSet()
    for index, path in enumerate(paths):
        working_set.add(MarkedFrame(key=index, time=index / args.fps, frame_index=index, path=path))
    logger.info("Processing %s frame(s) with %s key color(s)", len(working_set), len(settings.colors))
    buffers = list(working_set.processed_frames(settings, crop))

    if args.mode == "frames":
        exporter.export_frames(buffers, args.output)
    elif args.mode == "gif":
        exporter.export_gif(buffers, args.output, args.fps)
    else:
        sheet_path, layout = exporter.export_spritesheet(
            buffers, args.output, args.columns, args.rows, args.padding
        )
        if args.manifest:
            manifest_writer.write_manifest(layout, list(working_set), sheet_path, args.padding, args.manifest)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.dry_run:
        parser.print_help()
        return 0

    configure_logging(args.verbose)
    try:
        run(args)
    except SpriteLoopError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
