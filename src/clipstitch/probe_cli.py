"""CLI for probing — clip metadata plus cross-clip compatibility warnings.

Usage:
    clipstitch probe scene-0.mp4 scene-1.mp4
    clipstitch probe scene-0.mp4 --json
"""

import argparse
import json
import sys
from dataclasses import asdict

from .common import DEFAULT_FFPROBE, configure_logging
from .errors import StitchError
from .probe import compatibility_warnings, probe_clips


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Show duration, codec, resolution and audio presence of clips.",
    )
    parser.add_argument("clips", nargs="+", help="Clip files to probe")
    parser.add_argument(
        "--json", action="store_true",
        help="Print a JSON list instead of a table",
    )
    parser.add_argument(
        "--ffprobe", default=DEFAULT_FFPROBE,
        help="ffprobe binary (default: ffprobe on PATH)",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)
    parsed = parser.parse_args(args)
    configure_logging(parsed.verbose)

    try:
        infos = probe_clips(parsed.clips, ffprobe=parsed.ffprobe)
    except StitchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    warnings = compatibility_warnings(infos)

    if parsed.json:
        print(json.dumps(
            {"clips": [asdict(i) for i in infos], "warnings": warnings}, indent=2,
        ))
        return

    for i, info in enumerate(infos):
        audio = "audio" if info.has_audio else "no audio"
        print(
            f"  [{i}] {info.duration:6.2f}s  {info.codec:<6} "
            f"{info.width}x{info.height}  {audio:<8}  {info.path}"
        )
    print(f"\nTotal: {sum(i.duration for i in infos):.2f}s in {len(infos)} clip(s)")
    for w in warnings:
        print(f"Warning: {w}")


if __name__ == "__main__":
    main()
