"""CLI for stitching — clips in, one MP4 out.

Clips are given on the command line or in a stitch manifest (see
clipstitch.manifest). --dry-run stops after planning: it probes the clips,
analyzes every boundary, and prints the chosen transitions and the ffmpeg
filter graph without encoding anything.

Usage:
    clipstitch stitch scene-0.mp4 scene-1.mp4 scene-2.mp4 --project-id promo-42
    clipstitch stitch --manifest stitch.yaml --profile pronounced
    clipstitch stitch scene-*.mp4 --project-id test --dry-run -v
"""

import argparse
import sys
import tempfile
from dataclasses import replace
from pathlib import Path

from .common import configure_logging
from .errors import StitchError
from .manifest import load_stitch_manifest, validate_clip_paths
from .profile import PROFILES, resolve_profile
from .stitcher import plan_stitch, probe_and_check, stitch_videos, validate_job


def _parse_args(args=None):
    parser = argparse.ArgumentParser(
        description="Stitch clips into one MP4 with similarity-driven transitions.",
    )
    parser.add_argument(
        "clips", nargs="*",
        help="Clip files in timeline order (or use --manifest)",
    )
    parser.add_argument(
        "--project-id", default=None,
        help="Project ID, names the output directory",
    )
    parser.add_argument(
        "--manifest", default=None,
        help="Path to stitch YAML manifest",
    )
    parser.add_argument(
        "--profile", default=None,
        help=f"Built-in profile ({', '.join(sorted(PROFILES))}) or profile YAML path",
    )
    parser.add_argument(
        "--output-root", default=None,
        help="Parent directory for <project-id>/final/output.mp4",
    )
    parser.add_argument(
        "--timeout", type=float, default=None,
        help="Encoder timeout in seconds (overrides the profile)",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Plan transitions and print the filter graph, don't encode",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Show progress (-v) or every tool command (-vv)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true",
        help="Only report errors",
    )
    return parser, parser.parse_args(args)


def _print_plan(plan) -> None:
    for i, info in enumerate(plan.infos):
        audio = "audio" if info.has_audio else "no audio"
        print(
            f"  [{i}] {info.duration:6.2f}s  {info.codec:<6} "
            f"{info.width}x{info.height}  {audio:<8}  {info.path}"
        )
    print()
    for i, (sim, tr) in enumerate(zip(plan.similarities, plan.transitions)):
        print(f"  {i}->{i + 1}  similarity={sim:.3f}  transition={tr}")
    print()
    for off in plan.offsets:
        print(
            f"  clip {off.clip_index}: keep {off.trim_start:.3f}-{off.trim_end:.3f}s, "
            f"at {off.transition_start:.3f}s"
        )
    print(f"\nExpected duration: ~{plan.expected_duration:.2f}s")
    print(f"Audio: {'yes' if plan.graph.has_audio else 'none'}")
    print("\nFilter graph:")
    for part in plan.graph.filter_complex.split(";"):
        print(f"  {part}")


def main(args=None):
    parser, parsed = _parse_args(args)
    configure_logging(parsed.verbose, parsed.quiet)

    if parsed.manifest and parsed.clips:
        parser.error("Give clips either on the command line or in --manifest, not both")

    profile_arg = parsed.profile
    output_root = parsed.output_root
    project_id = parsed.project_id

    if parsed.manifest:
        config = load_stitch_manifest(parsed.manifest)
        validate_clip_paths(config)
        clips = config["clips"]
        # Command line overrides manifest.
        project_id = project_id or config["project_id"]
        profile_arg = profile_arg or config["profile"]
        output_root = output_root or config["output_root"]
    else:
        clips = parsed.clips

    if not clips:
        parser.error("No clips given (pass clip paths or --manifest)")
    if not project_id:
        parser.error("--project-id is required (unless the manifest sets it)")

    try:
        profile = resolve_profile(profile_arg)
        if parsed.timeout is not None:
            profile = replace(profile, encoder=replace(profile.encoder, timeout=parsed.timeout))

        if parsed.dry_run:
            job = validate_job(clips, project_id)
            if len(job.clip_paths) == 1:
                print("Single clip: would stream-copy without transitions.")
                return
            print(f"Planning {len(job.clip_paths)} clips (profile: {profile.name})\n")
            infos = probe_and_check(list(job.clip_paths), profile)
            with tempfile.TemporaryDirectory() as work_dir:
                plan = plan_stitch(infos, profile, Path(work_dir))
            _print_plan(plan)
            return

        if not parsed.quiet:
            print(f"Stitching {len(clips)} clips (profile: {profile.name})...")
        output = stitch_videos(clips, project_id, profile=profile, output_root=output_root)
    except (StitchError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if not parsed.quiet:
        print(f"\nDone: {output}")


if __name__ == "__main__":
    main()
