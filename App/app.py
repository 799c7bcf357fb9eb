"""Stipple plotter command line - Main entry point."""

import argparse
import logging
import sys
from pathlib import Path

from calibration import Calibrator
from config_manager import ConfigManager
from models import ColorMode, PipelineConfig, SamplingConfig, StippleError
from stippling import StippleProcessor
from stippling.interchange import load_channels, save_channels
from stippling.svg_export import write_path, write_points

logger = logging.getLogger("app")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stipple-plotter",
        description="Turn images into stipples or tours and tours into motion programs.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    stipple = commands.add_parser("stipple", help="Sample, relax and tour an image")
    stipple.add_argument("-i", "--input", type=Path, required=True, help="Input image")
    stipple.add_argument("-s", "--svg", type=Path, help="SVG output file")
    stipple.add_argument("-j", "--json", type=Path, help="JSON output file for points or tours")
    stipple.add_argument("-n", "--num-points", type=int, default=20000)
    stipple.add_argument("--draw-points", action="store_true", help="Keep dots, skip tours")
    stipple.add_argument("--voronoi-iterations", type=int, default=0)
    stipple.add_argument(
        "--tsp-improvement",
        type=float,
        default=0.0,
        help="Stop 2-opt when a pass gains less than this fraction (0 disables 2-opt)",
    )
    stipple.add_argument("--gamma", type=float, default=1.0)
    stipple.add_argument("--cmyk", action="store_true", help="Split into C, M, Y, K channels")
    stipple.add_argument("--seed", type=int, help="Random seed for reproducible output")
    stipple.add_argument("--workers", type=int, help="Worker threads (default: one per channel)")

    gcode = commands.add_parser("gcode", help="Convert saved tours into motion programs")
    gcode.add_argument("-i", "--input", type=Path, required=True, help="Tour JSON file")
    gcode.add_argument("-o", "--output", type=Path, required=True, help="Output directory")
    gcode.add_argument("-c", "--calibration", type=Path, required=True, help="Calibration JSON")
    gcode.add_argument("--draw-points", action="store_true", help="One dot per point")

    return parser


def run_stipple(args: argparse.Namespace) -> None:
    sampling = SamplingConfig(
        num_points=args.num_points,
        gamma=args.gamma,
        mode=ColorMode.CMYK if args.cmyk else ColorMode.GREYSCALE,
        seed=args.seed,
    )
    pipeline = PipelineConfig(
        voronoi_iterations=args.voronoi_iterations,
        tsp_improvement=args.tsp_improvement,
        draw_points=args.draw_points,
        max_workers=args.workers,
    )

    result = StippleProcessor(sampling, pipeline).process_file(args.input)

    if args.svg:
        writer = write_path if result.is_tour else write_points
        writer(args.svg, result.channels, result.width, result.height)
        logger.info("Wrote %s", args.svg)
    if args.json:
        save_channels(args.json, result.channels)
        logger.info("Wrote %s", args.json)


def run_gcode(args: argparse.Namespace) -> None:
    calibrator = Calibrator(ConfigManager(args.calibration).load())
    channels = load_channels(args.input)

    translated = calibrator.translate_origin(channels)
    transformed = calibrator.transform_coordinates(translated)

    args.output.mkdir(parents=True, exist_ok=True)
    for index, channel in enumerate(transformed):
        filename = args.output / f"channel_{index:03}.gcode"
        filename.write_text(calibrator.render_program(channel, draw_points=args.draw_points))
        logger.info(
            "Wrote %s (%d points, %.1f cord travel)",
            filename,
            len(channel),
            calibrator.estimate_travel(channel),
        )


def main(argv: "list[str] | None" = None) -> int:
    """Run the stipple plotter command line."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "stipple":
            run_stipple(args)
        else:
            run_gcode(args)
    except (StippleError, ValueError, OSError) as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
