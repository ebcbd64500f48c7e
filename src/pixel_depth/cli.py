"""
Command-Line Interface for Pixel Depth

Usage:
    pixeldepth punk.png -o punk-depth.png
    pixeldepth punk.png --mode mesh -o punk.obj
    pixeldepth punk.png --token-id 42 --owner alice.eth --logo logo.png
    pixeldepth --batch sprites/ --output-dir out/ --mode depth

"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional
import time
import warnings

from .config import DEFAULT_IDENTIFIER, ElevationConfig, RenderConfig, ZERO_ADDRESS
from .errors import OverlayWarning, PixelDepthError
from .generator import BatchProcessor, DepthConverter
from .overlay import find_logo

# Logo locations probed when --logo is not given
DEFAULT_LOGO_CANDIDATES = (
    "logo.png",
    "assets/logo.png",
    "public/logo.png",
)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="pixeldepth",
        description="Pixel Depth - Convert pixel art to extruded depth images or OBJ meshes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pixeldepth punk.png -o punk-depth.png
      Render a side-view depth image

  pixeldepth punk.png --mode mesh -o punk.obj --colors
      Export a brightness voxel mesh with vertex colors

  pixeldepth punk.png --token-id 42 --owner alice.eth --logo brand.png
      Annotate the depth image

  pixeldepth --batch sprites/ --output-dir out/
      Convert every image in a directory

Modes:
  depth - Shaded side-view extrusion (PNG), default
  mesh  - One voxel per pixel, height from brightness (OBJ)
        """
    )

    # Input
    parser.add_argument(
        "input",
        nargs="?",
        help="Input image file (PNG recommended)"
    )

    # Output
    parser.add_argument(
        "-o", "--output",
        help="Output file path (default: next to the input)"
    )

    parser.add_argument(
        "-m", "--mode",
        choices=["depth", "mesh"],
        default="depth",
        help="Conversion mode (default: depth)"
    )

    # Overlays
    parser.add_argument(
        "--token-id",
        default=None,
        help=f"Identifier drawn as #<id> (default: {DEFAULT_IDENTIFIER})"
    )

    parser.add_argument(
        "--owner",
        default=None,
        help="Owner label drawn at the bottom (default: zero address)"
    )

    parser.add_argument(
        "--logo",
        nargs="+",
        help="Logo file candidates, first readable one is used"
    )

    parser.add_argument(
        "--no-logo",
        action="store_true",
        help="Don't look for a logo"
    )

    # Rendering
    parser.add_argument(
        "--angle",
        type=float,
        default=45.0,
        help="Side view angle in degrees (default: 45)"
    )

    parser.add_argument(
        "--extrusion-depth",
        type=float,
        default=5.0,
        help="Canvas pixels per elevation tier unit (default: 5)"
    )

    parser.add_argument(
        "--padding",
        type=int,
        default=60,
        help="Canvas padding in pixels (default: 60)"
    )

    parser.add_argument(
        "--threshold",
        type=float,
        default=0.2,
        help="Brightness below which pixels count as dark (default: 0.2)"
    )

    # Mesh
    parser.add_argument(
        "--colors",
        action="store_true",
        help="Include vertex colors in OBJ output"
    )

    # Batch processing
    parser.add_argument(
        "--batch",
        help="Batch process directory of images"
    )

    parser.add_argument(
        "--output-dir",
        help="Output directory for batch processing"
    )

    parser.add_argument(
        "--pattern",
        default=None,
        help="File pattern for batch processing (default: common image types)"
    )

    # Misc
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 1.0.0"
    )

    return parser


def build_converter(args) -> DepthConverter:
    """Create a converter from parsed arguments."""
    return DepthConverter(
        elevation_config=ElevationConfig(brightness_threshold=args.threshold),
        render_config=RenderConfig(
            side_view_angle=args.angle,
            extrusion_depth=args.extrusion_depth,
            padding=args.padding,
        ),
    )


def resolve_logo(args):
    """Load the logo requested on the command line, if any."""
    if args.no_logo:
        return None
    return find_logo(args.logo or DEFAULT_LOGO_CANDIDATES)


def process_single(args) -> int:
    """Process a single image file."""
    if not args.input:
        print("Error: No input file specified", file=sys.stderr)
        return 1

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1

    if args.output:
        output_path = Path(args.output)
    elif args.mode == "mesh":
        output_path = input_path.with_suffix(".obj")
    else:
        output_path = input_path.with_name(f"{input_path.stem}-depth.png")

    start_time = time.time()

    try:
        converter = build_converter(args)

        if args.verbose:
            print(f"Loading: {input_path}")
        converter.load_image(input_path)

        if args.mode == "mesh":
            converter.export_obj(output_path, include_colors=args.colors)
            if args.verbose:
                print(f"Voxels: {len(converter.voxels)}")
        else:
            rendered = converter.export_png(
                output_path,
                identifier=args.token_id or DEFAULT_IDENTIFIER,
                owner_label=args.owner or ZERO_ADDRESS,
                logo=resolve_logo(args),
            )
            if args.verbose:
                print(f"Canvas: {rendered.width}x{rendered.height}")
                print(f"Tiers: {converter.elevation.histogram()}")
                for warning in rendered.warnings:
                    print(f"Warning: {warning}")

        if args.verbose:
            print(f"Exported: {output_path}")
            print(f"\nCompleted in {time.time() - start_time:.2f}s")

        return 0

    except (PixelDepthError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def process_batch(args) -> int:
    """Process a batch of images."""
    batch_dir = Path(args.batch)
    if not batch_dir.is_dir():
        print(f"Error: Batch directory not found: {batch_dir}", file=sys.stderr)
        return 1

    output_dir = Path(args.output_dir) if args.output_dir else batch_dir / "output"
    start_time = time.time()

    try:
        converter = build_converter(args)
        processor = BatchProcessor(
            elevation_config=converter.elevation_config,
            render_config=converter.render_config,
        )

        outputs = processor.process_directory(
            batch_dir,
            output_dir,
            mode=args.mode,
            pattern=args.pattern,
            identifier=args.token_id,
            owner_label=args.owner,
            logo=resolve_logo(args) if args.mode == "depth" else None,
            include_colors=args.colors,
        )

        elapsed = time.time() - start_time
        print(f"Processed {len(outputs)} files in {elapsed:.2f}s")
        print(f"Output directory: {output_dir}")

        return 0

    except (PixelDepthError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Overlay problems are already reported through logging
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", OverlayWarning)
        if args.batch:
            return process_batch(args)
        return process_single(args)


if __name__ == "__main__":
    sys.exit(main())
