"""Stitch orchestration — clips in, one MP4 with boundary transitions out.

Pipeline (linear, nothing loops back):

  validate -> single clip?  stream copy
           -> otherwise     probe all -> boundary similarity (N-1, sequential)
                            -> transition policy -> filter graph -> ffmpeg
  -> verify output -> clean up -> return output path

Cheap checks (inputs, timeline, stream counts) all run before the encoder
starts. Similarity failures are absorbed (medium score). Anything fatal
removes the partial output before propagating; the per-job analysis
directory is removed on every exit path.

Layout under output_root (default <system temp>/projects):

  <project_id>/final/output.mp4
  <project_id>/final/temp_analysis/    sampled stills, removed at job end
"""

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path

from .common import remove_quietly, remove_tree_quietly
from .errors import ClipNotFound, StitchExecutionFailure
from .executor import copy_single_clip, run_stitch
from .graph import build_filter_graph
from .models import ClipInfo, FilterGraph, StitchJob, TimelineOffset, TransitionConfig
from .policy import select_transition
from .probe import compatibility_warnings, probe_clips
from .profile import StitchProfile, resolve_profile
from .similarity import boundary_similarity
from .timeline import calculate_offsets

logger = logging.getLogger(__name__)

OUTPUT_FILENAME = "output.mp4"
ANALYSIS_DIRNAME = "temp_analysis"


@dataclass(frozen=True)
class StitchPlan:
    """Everything decided before the encoder runs."""

    infos: tuple[ClipInfo, ...]
    similarities: tuple[float, ...]
    transitions: tuple[TransitionConfig, ...]
    offsets: tuple[TimelineOffset, ...]
    graph: FilterGraph

    @property
    def expected_duration(self) -> float:
        return self.graph.expected_duration


# ── Validation ────────────────────────────────────────────────────


def validate_job(clip_paths: list[str], project_id: str) -> StitchJob:
    """Check inputs before any external process runs.

    Raises:
        ValueError: Empty clip list, or missing/unsafe project id.
        ClipNotFound: A clip path does not exist.
    """
    if not clip_paths:
        raise ValueError("At least one video clip is required")
    if not isinstance(project_id, str) or not project_id.strip():
        raise ValueError("Project ID is required")
    # The id becomes a directory name under output_root.
    if project_id in (".", "..") or "/" in project_id or "\\" in project_id:
        raise ValueError(f"Project ID must be a single path component, got {project_id!r}")

    resolved = []
    for path in clip_paths:
        p = Path(path)
        if not p.is_file():
            raise ClipNotFound(path)
        resolved.append(str(p.resolve()))
    return StitchJob(clip_paths=tuple(resolved), project_id=project_id)


def project_output_dir(project_id: str, output_root: str | Path | None = None) -> Path:
    root = Path(output_root) if output_root else Path(tempfile.gettempdir()) / "projects"
    return root / project_id / "final"


# ── Planning ──────────────────────────────────────────────────────


def plan_stitch(
    infos: list[ClipInfo],
    profile: StitchProfile,
    work_dir: str | Path,
) -> StitchPlan:
    """Analyze boundaries, choose transitions, build the filter graph.

    Boundaries are analyzed one at a time, in order.

    Raises:
        TimelineError: A clip is too short for its transitions.
        StreamCountMismatch: Inconsistent audio segments (should not happen).
    """
    sampling = profile.sampling
    similarities = []
    transitions = []
    for i in range(len(infos) - 1):
        similarity = boundary_similarity(
            infos[i], infos[i + 1], work_dir,
            ffmpeg=profile.tools.ffmpeg_exe,
            tail_offset=sampling.tail_offset,
            size=(sampling.compare_width, sampling.compare_height),
            fallback=sampling.fallback_score,
        )
        transition = select_transition(similarity, profile.transitions)
        similarities.append(similarity)
        transitions.append(transition)
        logger.info(
            "Clips %d->%d: similarity=%.3f, transition=%s",
            i, i + 1, similarity, transition,
        )

    offsets = calculate_offsets([info.duration for info in infos], transitions)
    graph = build_filter_graph(infos, transitions, video=profile.video, audio=profile.audio)
    return StitchPlan(
        infos=tuple(infos),
        similarities=tuple(similarities),
        transitions=tuple(transitions),
        offsets=tuple(offsets),
        graph=graph,
    )


def probe_and_check(paths: list[str], profile: StitchProfile) -> list[ClipInfo]:
    """Probe every clip and log (never raise) codec/resolution mismatches."""
    infos = probe_clips(paths, ffprobe=profile.tools.ffprobe)
    for info in infos:
        logger.info(
            "  %s: %.2fs %s %dx%d %s",
            info.path, info.duration, info.codec, info.width, info.height,
            "audio" if info.has_audio else "no audio",
        )
    for warning in compatibility_warnings(infos):
        logger.warning("%s; clips will be normalized", warning)
    return infos


# ── Entry point ───────────────────────────────────────────────────


def stitch_videos(
    clip_paths: list[str],
    project_id: str,
    profile: "StitchProfile | str | Path | None" = None,
    output_root: str | Path | None = None,
) -> str:
    """Stitch clips, in order, into one MP4 with smoothed boundaries.

    Args:
        clip_paths: Local clip files in timeline order.
        project_id: Names the output directory.
        profile: StitchProfile, built-in profile name, YAML profile path,
            or None for the standard profile.
        output_root: Parent of per-project output directories.

    Returns:
        Absolute path of the stitched MP4.

    Raises:
        ValueError: Invalid inputs or profile.
        ClipNotFound, ProbeFailure, TimelineError, StreamCountMismatch,
        StitchExecutionFailure: See clipstitch.errors.
    """
    job = validate_job(clip_paths, project_id)
    profile = resolve_profile(profile)

    output_dir = project_output_dir(job.project_id, output_root)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = (output_dir / OUTPUT_FILENAME).resolve()
    work_dir = output_dir / ANALYSIS_DIRNAME
    remove_tree_quietly(work_dir)
    work_dir.mkdir(parents=True, exist_ok=True)

    ffmpeg = profile.tools.ffmpeg_exe
    try:
        if len(job.clip_paths) == 1:
            logger.info("Single clip, copying without transitions")
            copy_single_clip(
                job.clip_paths[0], output_path,
                timeout=profile.encoder.timeout, ffmpeg=ffmpeg,
            )
        else:
            logger.info("Analyzing %d clips", len(job.clip_paths))
            infos = probe_and_check(list(job.clip_paths), profile)
            logger.info(
                "Total input duration: %.2fs, %d/%d clips have audio",
                sum(i.duration for i in infos),
                sum(1 for i in infos if i.has_audio), len(infos),
            )
            plan = plan_stitch(infos, profile, work_dir)
            run_stitch(
                list(job.clip_paths), plan.graph, output_path,
                video=profile.video, encoder=profile.encoder, ffmpeg=ffmpeg,
            )

        if not output_path.is_file():
            raise StitchExecutionFailure(f"Stitched video file was not created: {output_path}")
    except Exception:
        remove_quietly(output_path)
        raise
    finally:
        remove_tree_quietly(work_dir)

    logger.info("Video stitching completed: %s", output_path)
    return str(output_path)
