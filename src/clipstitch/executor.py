"""Stitch execution — the single ffmpeg run that renders the output.

Every clip is its own -i input, the filter graph is one -filter_complex
argument, and outputs are mapped explicitly: the audio label only when the
graph produced one, otherwise -an. Output is H.264 at a constant frame
rate, AAC audio when present.

On any failure the partial output is deleted before StitchExecutionFailure
reaches the caller.
"""

import logging
import subprocess
import time
from pathlib import Path

from .common import default_ffmpeg, remove_quietly, run_tool, stderr_tail
from .errors import StitchExecutionFailure
from .models import FilterGraph
from .profile import EncoderSettings, VideoSettings

logger = logging.getLogger(__name__)


def build_stitch_command(
    clip_paths: list[str],
    graph: FilterGraph,
    output_path: str | Path,
    video: VideoSettings | None = None,
    encoder: EncoderSettings | None = None,
    ffmpeg: str | None = None,
) -> list[str]:
    """Assemble the ffmpeg argument vector for a stitch."""
    video = video or VideoSettings()
    encoder = encoder or EncoderSettings()

    inputs = []
    for path in clip_paths:
        inputs.extend(["-i", str(path)])

    if graph.audio_label:
        audio_args = [
            "-map", f"[{graph.audio_label}]",
            "-c:a", encoder.audio_codec, "-b:a", encoder.audio_bitrate,
        ]
    else:
        audio_args = ["-an"]

    return [
        ffmpeg or default_ffmpeg(), "-y", "-hide_banner",
        *inputs,
        "-filter_complex", graph.filter_complex,
        "-map", f"[{graph.video_label}]",
        *audio_args,
        "-c:v", encoder.video_codec,
        "-preset", encoder.preset,
        "-crf", str(encoder.crf),
        "-pix_fmt", "yuv420p",
        "-r", str(video.fps),
        "-fps_mode", "cfr",
        "-movflags", "+faststart",
        str(output_path),
    ]


def _run_to_output(
    cmd: list[str],
    output_path: Path,
    timeout: float | None,
    what: str,
) -> str:
    """Run cmd, then make sure it left a non-empty output_path.

    Raises:
        StitchExecutionFailure: On launch failure, non-zero exit, timeout, or
            missing output. The partial output is removed first.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    t0 = time.monotonic()
    try:
        result = run_tool(cmd, timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        remove_quietly(output_path)
        stderr = exc.stderr.decode(errors="replace") if isinstance(exc.stderr, bytes) else exc.stderr
        raise StitchExecutionFailure(
            f"{what} timed out after {timeout:.0f}s", stderr=stderr_tail(stderr), timeout=True,
        ) from exc
    except OSError as exc:
        remove_quietly(output_path)
        raise StitchExecutionFailure(f"{what} could not start: {exc}") from exc

    if result.returncode != 0:
        remove_quietly(output_path)
        raise StitchExecutionFailure(
            f"{what} failed (ffmpeg exited with {result.returncode})",
            stderr=stderr_tail(result.stderr),
        )

    if not output_path.exists() or output_path.stat().st_size == 0:
        remove_quietly(output_path)
        raise StitchExecutionFailure(
            f"{what} produced no output file: {output_path}",
            stderr=stderr_tail(result.stderr),
        )

    logger.info("%s finished in %.1fs: %s", what, time.monotonic() - t0, output_path)
    return str(output_path)


def run_stitch(
    clip_paths: list[str],
    graph: FilterGraph,
    output_path: str | Path,
    video: VideoSettings | None = None,
    encoder: EncoderSettings | None = None,
    ffmpeg: str | None = None,
) -> str:
    """Render the stitched output. Returns the output path.

    Raises:
        StitchExecutionFailure: See _run_to_output. timeout=True when the
            encoder exceeded encoder.timeout and was killed.
    """
    encoder = encoder or EncoderSettings()
    cmd = build_stitch_command(
        clip_paths, graph, output_path, video=video, encoder=encoder, ffmpeg=ffmpeg,
    )
    logger.info(
        "Stitching %d clips (%s audio), expected duration ~%.2fs",
        len(clip_paths), "with" if graph.has_audio else "no", graph.expected_duration,
    )
    logger.debug("Filter complex: %s", graph.filter_complex)
    return _run_to_output(cmd, Path(output_path), encoder.timeout, "Stitch")


def copy_single_clip(
    clip_path: str | Path,
    output_path: str | Path,
    timeout: float | None = None,
    ffmpeg: str | None = None,
) -> str:
    """Stream-copy one clip to output_path, no re-encode."""
    cmd = [
        ffmpeg or default_ffmpeg(), "-y", "-hide_banner",
        "-i", str(clip_path),
        "-c", "copy",
        str(output_path),
    ]
    return _run_to_output(cmd, Path(output_path), timeout, "Stream copy")
