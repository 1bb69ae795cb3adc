"""Subcommand dispatcher for clipstitch.

Usage:
    clipstitch stitch  clip-0.mp4 clip-1.mp4 --project-id promo-42
    clipstitch stitch  --manifest stitch.yaml
    clipstitch probe   clip-0.mp4 clip-1.mp4
"""

import argparse
import sys


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="clipstitch",
        description="Stitch generated clips into one video with similarity-driven transitions.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # Register subcommands. Each delegates to its own module's main().
    subparsers.add_parser("stitch", help="Stitch clips into one MP4")
    subparsers.add_parser("probe", help="Show clip metadata and compatibility")

    # Parse only the subcommand name, pass the rest to the subcommand's parser.
    parsed, remaining = parser.parse_known_args(args)

    if parsed.command is None:
        parser.print_help()
        sys.exit(1)

    if parsed.command == "stitch":
        from .stitch_cli import main as stitch_main
        stitch_main(remaining)
    elif parsed.command == "probe":
        from .probe_cli import main as probe_main
        probe_main(remaining)


if __name__ == "__main__":
    main()
