"""Boundary similarity — SSIM between the frames on either side of a cut.

ffmpeg's ssim filter prints its result to stderr when the graph closes:

    [Parsed_ssim_6 @ 0x...] SSIM Y:0.93 (11.6) U:0.97 (15.5) V:0.97 (15.8) All:0.95 (13.0)

The "All" value is the score. Both stills are scaled to one comparison size
first, so clips of different resolutions can still be compared.

Failure policy: the analysis only tunes transition style, so any failure
(missing frame, ffmpeg error, unparseable or out-of-range score) collapses
to a medium score instead of failing the stitch.
"""

import logging
import math
import re
from pathlib import Path

from .common import default_ffmpeg, remove_quietly, run_tool, stderr_tail
from .errors import FrameExtractionFailure, SimilarityComparisonFailure
from .frames import BOUNDARY_FRAME_NAMES, TAIL_OFFSET, sample_boundary_frames
from .models import ClipInfo

logger = logging.getLogger(__name__)

FALLBACK_SIMILARITY = 0.5
COMPARE_SIZE = (640, 360)

_SSIM_ALL = re.compile(r"All:\s*(\S+)")


def parse_ssim_score(text: str) -> float:
    """Pull the overall SSIM score out of ffmpeg's diagnostic text.

    Uses the last "All:" occurrence. Raises SimilarityComparisonFailure if
    there is none or it is not a finite number in [0, 1].
    """
    matches = _SSIM_ALL.findall(text or "")
    if not matches:
        raise SimilarityComparisonFailure("no SSIM score in ffmpeg output")
    raw = matches[-1]
    try:
        score = float(raw)
    except ValueError as exc:
        raise SimilarityComparisonFailure(f"unparseable SSIM score {raw!r}") from exc
    if not math.isfinite(score) or not 0.0 <= score <= 1.0:
        raise SimilarityComparisonFailure(f"SSIM score out of range: {score!r}")
    return score


def _ssim_graph(size: tuple[int, int]) -> str:
    w, h = size
    return (
        f"[0:v]scale={w}:{h},setsar=1,format=yuv420p[ref];"
        f"[1:v]scale={w}:{h},setsar=1,format=yuv420p[cmp];"
        f"[ref][cmp]ssim"
    )


def compare_frames(
    frame_a: str | Path,
    frame_b: str | Path,
    ffmpeg: str | None = None,
    size: tuple[int, int] = COMPARE_SIZE,
) -> float:
    """SSIM between two stills, 1.0 = identical.

    Raises:
        SimilarityComparisonFailure: ffmpeg failed or printed no usable score.
    """
    ffmpeg = ffmpeg or default_ffmpeg()
    cmd = [
        ffmpeg, "-hide_banner", "-nostats",
        "-i", str(frame_a),
        "-i", str(frame_b),
        "-filter_complex", _ssim_graph(size),
        "-f", "null", "-",
    ]
    try:
        result = run_tool(cmd)
    except OSError as exc:
        raise SimilarityComparisonFailure(f"could not run ffmpeg: {exc}") from exc
    if result.returncode != 0:
        raise SimilarityComparisonFailure(
            f"ffmpeg ssim exited with {result.returncode}: "
            f"{stderr_tail(result.stderr, lines=3)}"
        )
    return parse_ssim_score(result.stderr)


def frame_similarity(
    frame_a: str | Path,
    frame_b: str | Path,
    ffmpeg: str | None = None,
    size: tuple[int, int] = COMPARE_SIZE,
    fallback: float = FALLBACK_SIMILARITY,
) -> float:
    """compare_frames(), but never raises: failures return `fallback`."""
    try:
        return compare_frames(frame_a, frame_b, ffmpeg=ffmpeg, size=size)
    except (SimilarityComparisonFailure, OSError, ValueError) as exc:
        logger.warning("SSIM comparison failed (%s), defaulting to %.2f similarity", exc, fallback)
        return fallback


def boundary_similarity(
    outgoing: ClipInfo,
    incoming: ClipInfo,
    work_dir: str | Path,
    ffmpeg: str | None = None,
    tail_offset: float = TAIL_OFFSET,
    size: tuple[int, int] = COMPARE_SIZE,
    fallback: float = FALLBACK_SIMILARITY,
) -> float:
    """Similarity of outgoing's last frame and incoming's first frame.

    Sampled stills are written to work_dir and removed before returning.
    Never raises for frame or comparison failures.
    """
    work_dir = Path(work_dir)
    try:
        tail, head = sample_boundary_frames(
            outgoing, incoming, work_dir, tail_offset=tail_offset, ffmpeg=ffmpeg,
        )
        return frame_similarity(tail, head, ffmpeg=ffmpeg, size=size, fallback=fallback)
    except (FrameExtractionFailure, OSError, ValueError) as exc:
        logger.warning("Similarity analysis failed: %s, defaulting to %.2f", exc, fallback)
        return fallback
    finally:
        for name in BOUNDARY_FRAME_NAMES:
            remove_quietly(work_dir / name)
