"""Command line entry point: split one large image into tiles."""

import argparse
import sys
from pathlib import Path
from typing import Optional

import yaml

from .chipper import ImageChipper
from .config import ChipConfig, load_config, save_config
from .errors import ChipperError
from .grid import compute_tile_grid, require_positive
from .manifest import save_tile_info
from .naming import DEFAULT_EXTENSION

DEFAULT_OUTPUT_DIR = "."
DEFAULT_MAX_MEMORY_MB = 5000
MANIFEST_FILENAME = "tile_info.json"


def build_parser() -> argparse.ArgumentParser:
    # -h is taken by --height, so help is --help only
    parser = argparse.ArgumentParser(
        prog="imagechipper",
        description="Create image tiles out of a larger image.",
        add_help=False,
    )
    parser.add_argument("--help", action="help", help="Show this help message and exit.")
    parser.add_argument(
        "-i", "--input", required=True, help="The input file to process."
    )
    parser.add_argument(
        "-o",
        "--outdir",
        default=None,
        help=f"The output directory to save the tiles in (default: {DEFAULT_OUTPUT_DIR}).",
    )
    parser.add_argument(
        "-mm",
        "--maxmem",
        type=int,
        default=None,
        help=f"The maximum amount of memory to use in megabytes (default: {DEFAULT_MAX_MEMORY_MB}).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print progress information to the console.",
    )
    parser.add_argument(
        "-w",
        "--width",
        type=int,
        default=None,
        help="The width of the output images, specify in conjunction with height.",
    )
    parser.add_argument(
        "-h",
        "--height",
        type=int,
        default=None,
        help="The height of the output images, specify in conjunction with width.",
    )
    parser.add_argument(
        "-c",
        "--columns",
        type=int,
        default=None,
        help="The number of output images in the horizontal direction, "
        "specify in conjunction with rows.",
    )
    parser.add_argument(
        "-r",
        "--rows",
        type=int,
        default=None,
        help="The number of output images in the vertical direction, "
        "specify in conjunction with columns.",
    )
    parser.add_argument(
        "-p", "--prefix", default=None, help="The prefix for each output filename."
    )
    parser.add_argument(
        "-s", "--suffix", default=None, help="The suffix for each output filename."
    )
    parser.add_argument(
        "-e",
        "--ext",
        default=None,
        help=f"The output image file extension (default: {DEFAULT_EXTENSION}).",
    )
    parser.add_argument(
        "-x",
        "--hex",
        action="store_true",
        help="Number tiles with uppercase hexadecimal indices.",
    )
    parser.add_argument(
        "--config", default=None, help="YAML preset providing defaults for these options."
    )
    parser.add_argument(
        "--save-config",
        default=None,
        help="Write the effective settings to this YAML preset.",
    )
    parser.add_argument(
        "--manifest",
        action="store_true",
        help=f"Write {MANIFEST_FILENAME} describing every tile to the output directory.",
    )
    parser.add_argument(
        "--progress", action="store_true", help="Show a progress bar."
    )
    return parser


def _first(*values):
    for value in values:
        if value is not None:
            return value
    return None


def resolve_settings(
    args: argparse.Namespace,
    parser: argparse.ArgumentParser,
) -> ChipConfig:
    """Merge command line options over an optional preset.

    Exits with a usage error unless exactly one complete pair
    (width+height or columns+rows) is given.
    """
    preset = ChipConfig()
    if args.config is not None:
        try:
            preset = load_config(args.config)
        except (FileNotFoundError, ValueError, TypeError, yaml.YAMLError) as e:
            parser.error(f"cannot load config {args.config}: {e}")

    grid_args = (args.width, args.height, args.columns, args.rows)
    if any(v is not None for v in grid_args):
        width, height, columns, rows = grid_args
    else:
        width, height = preset.tile_width, preset.tile_height
        columns, rows = preset.columns, preset.rows

    has_size = width is not None and height is not None
    has_count = columns is not None and rows is not None
    partial = (width is None) != (height is None) or (columns is None) != (rows is None)

    if partial or has_size == has_count:
        parser.error(
            "specify either --width and --height, or --columns and --rows "
            "(exactly one pair)"
        )

    return ChipConfig(
        tile_width=width,
        tile_height=height,
        columns=columns,
        rows=rows,
        prefix=_first(args.prefix, preset.prefix, ""),
        suffix=_first(args.suffix, preset.suffix, ""),
        extension=_first(args.ext, preset.extension, DEFAULT_EXTENSION),
        hex_mode=args.hex or preset.hex_mode,
        max_memory_mb=_first(args.maxmem, preset.max_memory_mb, DEFAULT_MAX_MEMORY_MB),
        output_dir=_first(args.outdir, preset.output_dir, DEFAULT_OUTPUT_DIR),
    )


def run(
    settings: ChipConfig,
    input_path: str,
    verbose: bool = False,
    manifest: bool = False,
    progress: bool = False,
) -> list[Path]:
    """Chip ``input_path`` according to ``settings``.

    The grid parameters are validated before the source image is decoded.
    """
    if settings.tile_width is not None:
        require_positive(tile_width=settings.tile_width, tile_height=settings.tile_height)
    else:
        require_positive(columns=settings.columns, rows=settings.rows)

    with ImageChipper(
        input_path,
        max_memory_mb=settings.max_memory_mb,
        verbose=verbose,
        prefix=settings.prefix,
        suffix=settings.suffix,
        hex_mode=settings.hex_mode,
    ) as chipper:
        if settings.tile_width is not None:
            grid = chipper.plan_by_dimensions(settings.tile_width, settings.tile_height)
        else:
            grid = chipper.plan_by_count(settings.columns, settings.rows)
            if verbose and (grid.columns, grid.rows) != (settings.columns, settings.rows):
                print(
                    f"Requested {settings.columns} columns x {settings.rows} rows; "
                    f"using {grid.columns} x {grid.rows} so that no tile is empty."
                )

        outputs = chipper.chip(grid, settings.output_dir, settings.extension, progress=progress)

    if manifest:
        manifest_path = save_tile_info(
            compute_tile_grid(grid),
            Path(settings.output_dir) / MANIFEST_FILENAME,
            grid=grid,
            filenames=outputs,
            source=input_path,
        )
        if verbose:
            print(f"Wrote manifest {manifest_path}")

    return outputs


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = resolve_settings(args, parser)

    try:
        outputs = run(settings, args.input, args.verbose, args.manifest, args.progress)
        if args.save_config is not None:
            save_config(settings, args.save_config)
    except (ChipperError, OSError) as e:
        print(f"Failed to split image: {e}", file=sys.stderr)
        return 1

    if args.verbose:
        print(f"Wrote {len(outputs)} tiles to {settings.output_dir}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
