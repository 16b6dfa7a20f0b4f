"""CLI for the pinout diagram generator.

Usage:
    genpinout board.csv
    genpinout board.csv out/board.svg --overwrite
    genpinout board.csv --png --config genpinout.yaml
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from genpinout.assembler import assemble
from genpinout.config import GenPinoutConfig
from genpinout.document import Document
from genpinout.errors import PinoutError
from genpinout.observability.logging import setup_logging
from genpinout.renderer import SvgRenderer
from genpinout.resources import HeuristicMetrics, PillowImageLoader, PillowMetrics, SvgIconLoader

log = logging.getLogger(__name__)


def build_renderer(input_path: Path, config: GenPinoutConfig) -> SvgRenderer:
    """Parse, validate and lay out ``input_path``; return a ready renderer."""
    base_dir = Path(config.resource_dir) if config.resource_dir else input_path.parent
    images = PillowImageLoader(base_dir)
    icons = SvgIconLoader(base_dir)
    if config.font_metrics == "pillow":
        metrics = PillowMetrics(config.font_paths)
    else:
        metrics = HeuristicMetrics()

    document = Document.from_file(input_path, page_id=config.default_page, dpi=config.default_dpi)
    primitives = assemble(document, images=images, icons=icons, metrics=metrics)
    return SvgRenderer(document.canvas, primitives, document.font_links, images=images, icons=icons)


def default_output(input_path: Path, config: GenPinoutConfig) -> Path:
    return Path(config.output_dir) / f"{input_path.stem}.svg"


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="genpinout",
        description="Generate a pinout diagram (SVG) from a CSV description",
    )
    parser.add_argument("input", help="CSV pinout description")
    parser.add_argument("output", nargs="?", default=None, help="Output SVG path (default: <output_dir>/<stem>.svg)")
    parser.add_argument("--overwrite", "-o", action="store_true", help="Replace an existing output file")
    parser.add_argument("--png", action="store_true", help="Also write a PNG next to the SVG")
    parser.add_argument("--config", default=None, help="YAML config file (default: genpinout.yaml)")
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the `genpinout` CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.config and not Path(args.config).exists():
        parser.error(f"config file not found: {args.config}")
    config = GenPinoutConfig.from_yaml(args.config or "genpinout.yaml")
    setup_logging(config.log_level)

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"File not found: {input_path}", file=sys.stderr)
        sys.exit(1)

    output = Path(args.output) if args.output else default_output(input_path, config)
    targets = [output] + ([output.with_suffix(".png")] if args.png else [])
    for target in targets:
        if target.exists() and not args.overwrite:
            print(f"{target} exists, not overwriting (use --overwrite)", file=sys.stderr)
            sys.exit(1)

    try:
        renderer = build_renderer(input_path, config)
        output.parent.mkdir(parents=True, exist_ok=True)
        renderer.render_svg_to_file(output)
        if args.png:
            renderer.render_png_to_file(output.with_suffix(".png"))
    except PinoutError as exc:
        print(f"{input_path}: {exc}", file=sys.stderr)
        sys.exit(1)
    except RuntimeError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(1)

    print(f"Pinout written to {output}")
