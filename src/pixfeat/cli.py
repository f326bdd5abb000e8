"""Command-line interface for pixfeat."""

import argparse
import logging
import sys
from dataclasses import asdict

import yaml

from .core import (
    HarrisParams,
    HoughParams,
    PixfeatError,
    canny_edges,
    corner_distribution,
    detect_corners,
    hough_lines,
    load_image,
    load_parameters,
    save_parameters,
    threshold_edges,
    to_intensity,
    update_params,
)

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(description="Detect Hough lines and Harris corners in an image.")
    parser.add_argument("image", help="Path to the image file.")
    parser.add_argument(
        "-c",
        "--config",
        help="Path to a parameter YAML file.",
    )
    parser.add_argument(
        "--detect",
        choices=["lines", "corners", "both"],
        default="both",
        help="Which detector to run.",
    )
    parser.add_argument(
        "--edges",
        choices=["canny", "threshold"],
        default="canny",
        help="How the edge mask for line detection is built.",
    )
    parser.add_argument("--sigma", type=float, default=1.0, help="Canny smoothing.")
    parser.add_argument(
        "--edge-threshold", type=float, default=0.5, help="Brightness threshold for --edges threshold."
    )
    parser.add_argument("--vote-threshold", type=int, help="Minimum Hough votes for a line.")
    parser.add_argument("--max-lines", type=int, help="Maximum number of lines.")
    parser.add_argument("--block-size", type=int, help="Harris window size (odd).")
    parser.add_argument("--kernel-size", type=int, choices=[3, 5], help="Sobel kernel size.")
    parser.add_argument("-k", type=float, help="Harris k constant.")
    parser.add_argument(
        "--border-mode", choices=["nearest", "reflect"], help="How the Harris filters extend the image edges."
    )
    parser.add_argument(
        "--relative-threshold", type=float, help="Corner threshold as a fraction of the maximum response."
    )
    parser.add_argument("-o", "--output", help="Write the YAML report here instead of stdout.")
    parser.add_argument("--save-config", help="Write the effective parameters to this YAML file.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More log output.")
    return parser


def configure_logging(verbosity):
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S',
    )


def run(args):
    """Run the requested detectors and return the report as a dict."""
    if args.config:
        hough, harris = load_parameters(args.config)
    else:
        hough, harris = HoughParams(), HarrisParams()
    hough = update_params(hough, vote_threshold=args.vote_threshold, max_lines=args.max_lines)
    harris = update_params(
        harris,
        block_size=args.block_size,
        kernel_size=args.kernel_size,
        k=args.k,
        border_mode=args.border_mode,
        relative_threshold=args.relative_threshold,
    )
    if args.save_config:
        save_parameters(hough, harris, args.save_config)
        logger.info("Parameters saved to %s", args.save_config)

    intensity = to_intensity(load_image(args.image))
    height, width = intensity.shape
    report = {"image": args.image, "width": width, "height": height}

    if args.detect in ("lines", "both"):
        if args.edges == "canny":
            edges = canny_edges(intensity, sigma=args.sigma)
        else:
            edges = threshold_edges(intensity, threshold=args.edge_threshold)
        lines = hough_lines(edges, **asdict(hough))
        logger.info("Found %d lines", len(lines))
        report["lines"] = [
            {"rho": float(line.rho), "theta": float(line.theta), "score": line.score} for line in lines
        ]

    if args.detect in ("corners", "both"):
        _, corners = detect_corners(intensity, **asdict(harris))
        logger.info("Found %d corners", len(corners))
        report["corners"] = [asdict(corner) for corner in corners]
        report["corner_distribution"] = corner_distribution(corners, intensity.shape)

    return report


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        report = run(args)
    except (OSError, PixfeatError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.output:
        with open(args.output, "w") as f:
            yaml.dump(report, f, sort_keys=False)
        print(f"Report saved to {args.output}")
    else:
        yaml.dump(report, sys.stdout, sort_keys=False)


if __name__ == "__main__":
    main()
