"""Still-frame sampling for boundary comparison."""

import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .common import default_ffmpeg, run_tool, stderr_tail
from .errors import FrameExtractionFailure
from .models import ClipInfo

logger = logging.getLogger(__name__)

# Seeking to exactly `duration` lands past the last decodable frame.
TAIL_OFFSET = 0.1

BOUNDARY_FRAME_NAMES = ("frame1_compare.png", "frame2_compare.png")


def sample_frame(
    clip_path: str | Path,
    timestamp: float,
    output_path: str | Path,
    ffmpeg: str | None = None,
) -> str:
    """Extract one still from clip_path at timestamp into output_path.

    The output format follows output_path's suffix (png recommended).

    Raises:
        FrameExtractionFailure: ffmpeg failed, wrote nothing, or wrote
            something that does not decode as an image.
    """
    ffmpeg = ffmpeg or default_ffmpeg()
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    cmd = [
        ffmpeg, "-y",
        "-ss", f"{max(timestamp, 0.0):.3f}",
        "-i", str(clip_path),
        "-frames:v", "1",
        "-q:v", "2",
        str(output_path),
    ]
    try:
        result = run_tool(cmd)
    except OSError as exc:
        raise FrameExtractionFailure(clip_path, timestamp, str(exc)) from exc
    if result.returncode != 0:
        raise FrameExtractionFailure(
            clip_path, timestamp,
            stderr_tail(result.stderr, lines=5) or f"ffmpeg exited with {result.returncode}",
        )
    if not output_path.exists() or output_path.stat().st_size == 0:
        raise FrameExtractionFailure(clip_path, timestamp, "no frame written")

    try:
        with Image.open(output_path) as img:
            img.verify()
    except (UnidentifiedImageError, OSError) as exc:
        raise FrameExtractionFailure(clip_path, timestamp, f"unreadable still: {exc}") from exc

    logger.debug("Sampled %s at %.3fs -> %s", clip_path, timestamp, output_path)
    return str(output_path)


def sample_boundary_frames(
    outgoing: ClipInfo,
    incoming: ClipInfo,
    work_dir: str | Path,
    tail_offset: float = TAIL_OFFSET,
    ffmpeg: str | None = None,
) -> tuple[str, str]:
    """Sample the last frame of `outgoing` and the first frame of `incoming`.

    Returns:
        (tail_frame_path, head_frame_path) inside work_dir.
    """
    work_dir = Path(work_dir)
    tail_t = max(0.0, outgoing.duration - tail_offset)
    tail = sample_frame(outgoing.path, tail_t, work_dir / BOUNDARY_FRAME_NAMES[0], ffmpeg=ffmpeg)
    head = sample_frame(incoming.path, 0.0, work_dir / BOUNDARY_FRAME_NAMES[1], ffmpeg=ffmpeg)
    return tail, head
