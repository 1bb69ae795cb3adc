"""Clip probing via ffprobe.

Two independent ffprobe runs per clip: one for the first video stream
(codec, resolution, duration) and one that only asks whether an audio
stream exists. A failed audio probe is normal for silent clips and just
means has_audio=False; a failed video probe is fatal.
"""

import json
import logging
from pathlib import Path

from .common import DEFAULT_FFPROBE, run_tool, stderr_tail
from .errors import ClipNotFound, ProbeFailure
from .models import ClipInfo

logger = logging.getLogger(__name__)


def _video_probe_cmd(ffprobe: str, path: str) -> list[str]:
    return [
        ffprobe, "-v", "error",
        "-select_streams", "v:0",
        "-show_entries", "stream=codec_name,width,height,duration:format=duration",
        "-of", "json",
        path,
    ]


def _audio_probe_cmd(ffprobe: str, path: str) -> list[str]:
    return [
        ffprobe, "-v", "error",
        "-select_streams", "a:0",
        "-show_entries", "stream=codec_name",
        "-of", "json",
        path,
    ]


def _parse_duration(*candidates) -> float | None:
    """First positive float among ffprobe duration strings ('N/A' is skipped)."""
    for value in candidates:
        try:
            duration = float(value)
        except (TypeError, ValueError):
            continue
        if duration > 0:
            return duration
    return None


def _has_audio(path: str, ffprobe: str) -> bool:
    try:
        result = run_tool(_audio_probe_cmd(ffprobe, path))
    except OSError:
        return False
    if result.returncode != 0:
        return False
    try:
        data = json.loads(result.stdout or "{}")
    except json.JSONDecodeError:
        return False
    return bool(data.get("streams"))


def probe_clip(path: str | Path, ffprobe: str = DEFAULT_FFPROBE) -> ClipInfo:
    """Read codec, resolution, duration and audio presence of one clip.

    Raises:
        ClipNotFound: path does not exist.
        ProbeFailure: The video probe failed or reported no usable stream.
    """
    path = str(path)
    if not Path(path).exists():
        raise ClipNotFound(path)

    try:
        result = run_tool(_video_probe_cmd(ffprobe, path))
    except OSError as exc:
        raise ProbeFailure(path, f"could not run {ffprobe}: {exc}") from exc
    if result.returncode != 0:
        raise ProbeFailure(
            path, stderr_tail(result.stderr) or f"ffprobe exited with {result.returncode}",
        )

    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError as exc:
        raise ProbeFailure(path, f"unparseable ffprobe output: {exc}") from exc

    streams = data.get("streams") or []
    if not streams:
        raise ProbeFailure(path, "no video stream")
    stream = streams[0]
    fmt = data.get("format") or {}

    duration = _parse_duration(fmt.get("duration"), stream.get("duration"))
    if duration is None:
        raise ProbeFailure(path, "no duration reported")

    try:
        width = int(stream.get("width") or 0)
        height = int(stream.get("height") or 0)
    except (TypeError, ValueError) as exc:
        raise ProbeFailure(path, f"bad dimensions: {exc}") from exc

    info = ClipInfo(
        path=path,
        duration=duration,
        codec=stream.get("codec_name") or "unknown",
        width=width,
        height=height,
        has_audio=_has_audio(path, ffprobe),
    )
    logger.debug("Probed %s: %s", path, info)
    return info


def probe_clips(paths: list[str], ffprobe: str = DEFAULT_FFPROBE) -> list[ClipInfo]:
    """Probe clips in order. Stops at the first failure."""
    return [probe_clip(p, ffprobe=ffprobe) for p in paths]


def compatibility_warnings(infos: list[ClipInfo]) -> list[str]:
    """Describe codec and resolution mismatches against the first clip.

    These are warnings only: the filter graph rescales and re-encodes every
    clip, so mismatched inputs still stitch.
    """
    if not infos:
        return []
    first = infos[0]
    warnings = []

    odd_codecs = [i for i, info in enumerate(infos) if info.codec != first.codec]
    if odd_codecs:
        warnings.append(
            f"Clips have different codecs: clip 0 is {first.codec}, "
            + ", ".join(f"clip {i} is {infos[i].codec}" for i in odd_codecs)
        )

    odd_sizes = [i for i, info in enumerate(infos) if info.resolution != first.resolution]
    if odd_sizes:
        warnings.append(
            f"Clips have different resolutions: clip 0 is {first.width}x{first.height}, "
            + ", ".join(
                f"clip {i} is {infos[i].width}x{infos[i].height}" for i in odd_sizes
            )
        )
    return warnings
