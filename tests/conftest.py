"""Shared test fixtures for clipstitch tests."""

import shutil
import subprocess

import pytest
import imageio_ffmpeg

from clipstitch.models import ClipInfo
from clipstitch.profile import EncoderSettings, StitchProfile, VideoSettings

_FFMPEG = imageio_ffmpeg.get_ffmpeg_exe()

# imageio_ffmpeg bundles ffmpeg but not ffprobe.
requires_ffprobe = pytest.mark.skipif(
    shutil.which("ffprobe") is None, reason="ffprobe not on PATH",
)


def _make_clip(path, duration, size="320x240", source="color=c=blue", audio=True, fps=10,
               title=None):
    sep = ":" if "=" in source else "="
    cmd = [
        _FFMPEG, "-y",
        "-f", "lavfi", "-i", f"{source}{sep}s={size}:d={duration}:r={fps}",
    ]
    if audio:
        cmd += [
            "-f", "lavfi", "-i", f"sine=frequency=440:sample_rate=44100:duration={duration}",
            "-c:a", "aac", "-b:a", "32k",
        ]
    if title is not None:
        # Raw bytes so non-UTF-8 titles reach the container unchanged.
        cmd += ["-metadata", b"title=" + title]
    cmd += [
        "-c:v", "libx264", "-preset", "ultrafast", "-crf", "28", "-pix_fmt", "yuv420p",
        "-t", str(duration),
        str(path),
    ]
    subprocess.run(cmd, check=True, capture_output=True)
    return path


@pytest.fixture
def make_clip(tmp_path):
    """Factory: make_clip(name, duration, size=, source=, audio=, fps=, title=) -> Path.

    Clips are H.264 (10fps by default), with an AAC sine tone unless
    audio=False. title (bytes) is written as container metadata.
    """
    def _factory(name, duration, **kwargs):
        return _make_clip(tmp_path / name, duration, **kwargs)
    return _factory


def frame_hashes(path, copy=False):
    """Per-frame video hashes of a file (ffmpeg framemd5), one per frame.

    copy=True hashes the stored packets instead of decoded frames.
    """
    cmd = [_FFMPEG, "-v", "error", "-i", str(path), "-map", "0:v"]
    if copy:
        cmd += ["-c", "copy"]
    cmd += ["-f", "framemd5", "-"]
    out = subprocess.run(cmd, check=True, capture_output=True).stdout.decode()
    return [line for line in out.splitlines() if line and not line.startswith("#")]


def decode_audio(path, seconds=None):
    """Decode the first audio stream to mono 16-bit samples."""
    import numpy as np

    cmd = [_FFMPEG, "-v", "error", "-i", str(path), "-map", "0:a:0"]
    if seconds is not None:
        cmd += ["-t", str(seconds)]
    cmd += ["-ac", "1", "-ar", "44100", "-f", "s16le", "-"]
    out = subprocess.run(cmd, check=True, capture_output=True).stdout
    return np.frombuffer(out, dtype=np.int16)


@pytest.fixture
def clip_info():
    """Factory for ClipInfo records that match what make_clip writes."""
    def _factory(path, duration, has_audio=True, width=320, height=240, codec="h264"):
        return ClipInfo(
            path=str(path), duration=duration, codec=codec,
            width=width, height=height, has_audio=has_audio,
        )
    return _factory


@pytest.fixture
def fast_profile():
    """Small, quick profile: 320x240 at 10fps, plain fps conversion."""
    return StitchProfile(
        name="test",
        video=VideoSettings(width=320, height=240, fps=10, interpolation="fps"),
        encoder=EncoderSettings(preset="ultrafast", crf=30, timeout=120),
    )
