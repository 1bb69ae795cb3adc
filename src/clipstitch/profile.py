"""Stitch profiles — every tunable of the engine in one immutable object.

A profile is passed explicitly through the pipeline; nothing in clipstitch
keeps module-level mutable settings. Three built-in profiles differ only in
their transition durations. Profile files are YAML and start from a
built-in (``base``), overriding individual fields per section.

Profile file schema:
  base: standard                # subtle | standard | pronounced
  transitions:
    high_similarity: 0.8        # score >= this -> high_kind, min_duration
    medium_similarity: 0.5      # score >= this -> medium_kind, default_duration
    min_duration: 0.15
    default_duration: 0.3
    max_duration: 0.5           # score below medium -> low_kind, max_duration
    high_kind: fade
    medium_kind: fade
    low_kind: distance
  video:
    width: 1920
    height: 1080
    fps: 30
    interpolation: motion       # motion (minterpolate) | fps (drop/duplicate)
  audio:
    sample_rate: 44100
  encoder:
    video_codec: libx264
    preset: medium
    crf: 23
    audio_codec: aac
    audio_bitrate: 192k
    timeout: 600                # seconds, null = wait forever
  sampling:
    tail_offset: 0.1            # sample the last frame this far before the end
    fallback_score: 0.5         # similarity used when analysis fails
    compare_width: 640
    compare_height: 360
  tools:
    ffmpeg: null                # null = imageio-ffmpeg's bundled binary
    ffprobe: ffprobe
"""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path

import yaml

from .common import DEFAULT_FFPROBE, default_ffmpeg
from .models import TransitionKind


VALID_INTERPOLATIONS = {"motion", "fps"}


# ── Profile sections ──────────────────────────────────────────────


@dataclass(frozen=True)
class TransitionTable:
    """Similarity thresholds and the transition chosen for each band."""

    high_similarity: float = 0.8
    medium_similarity: float = 0.5
    min_duration: float = 0.15
    default_duration: float = 0.3
    max_duration: float = 0.5
    high_kind: TransitionKind = TransitionKind.FADE
    medium_kind: TransitionKind = TransitionKind.FADE
    low_kind: TransitionKind = TransitionKind.DISTANCE

    def __post_init__(self):
        if not 0 <= self.medium_similarity <= self.high_similarity <= 1:
            raise ValueError(
                "transitions: need 0 <= medium_similarity <= high_similarity <= 1, "
                f"got medium={self.medium_similarity!r}, high={self.high_similarity!r}"
            )
        if not 0 < self.min_duration <= self.default_duration <= self.max_duration:
            raise ValueError(
                "transitions: need 0 < min_duration <= default_duration <= max_duration, "
                f"got {self.min_duration!r}, {self.default_duration!r}, {self.max_duration!r}"
            )


@dataclass(frozen=True)
class VideoSettings:
    width: int = 1920
    height: int = 1080
    fps: int = 30
    interpolation: str = "motion"

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"video: resolution must be positive, got {self.width}x{self.height}")
        if self.width % 2 or self.height % 2:
            # yuv420p needs even dimensions.
            raise ValueError(f"video: width and height must be even, got {self.width}x{self.height}")
        if self.fps <= 0:
            raise ValueError(f"video: fps must be > 0, got {self.fps!r}")
        if self.interpolation not in VALID_INTERPOLATIONS:
            raise ValueError(
                f"video: invalid interpolation '{self.interpolation}'. "
                f"Valid: {sorted(VALID_INTERPOLATIONS)}"
            )


@dataclass(frozen=True)
class AudioSettings:
    sample_rate: int = 44100

    def __post_init__(self):
        if self.sample_rate <= 0:
            raise ValueError(f"audio: sample_rate must be > 0, got {self.sample_rate!r}")


@dataclass(frozen=True)
class EncoderSettings:
    video_codec: str = "libx264"
    preset: str = "medium"
    crf: int = 23
    audio_codec: str = "aac"
    audio_bitrate: str = "192k"
    timeout: float | None = 600.0

    def __post_init__(self):
        if not 0 <= self.crf <= 51:
            raise ValueError(f"encoder: crf must be within 0-51, got {self.crf!r}")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"encoder: timeout must be > 0 or null, got {self.timeout!r}")


@dataclass(frozen=True)
class SamplingSettings:
    tail_offset: float = 0.1
    fallback_score: float = 0.5
    compare_width: int = 640
    compare_height: int = 360

    def __post_init__(self):
        if self.tail_offset < 0:
            raise ValueError(f"sampling: tail_offset must be >= 0, got {self.tail_offset!r}")
        if not 0 <= self.fallback_score <= 1:
            raise ValueError(
                f"sampling: fallback_score must be within [0, 1], got {self.fallback_score!r}"
            )
        if self.compare_width <= 0 or self.compare_height <= 0:
            raise ValueError("sampling: compare_width and compare_height must be positive")


@dataclass(frozen=True)
class ToolSettings:
    ffmpeg: str | None = None
    ffprobe: str = DEFAULT_FFPROBE

    @property
    def ffmpeg_exe(self) -> str:
        return self.ffmpeg or default_ffmpeg()


@dataclass(frozen=True)
class StitchProfile:
    name: str = "standard"
    transitions: TransitionTable = field(default_factory=TransitionTable)
    video: VideoSettings = field(default_factory=VideoSettings)
    audio: AudioSettings = field(default_factory=AudioSettings)
    encoder: EncoderSettings = field(default_factory=EncoderSettings)
    sampling: SamplingSettings = field(default_factory=SamplingSettings)
    tools: ToolSettings = field(default_factory=ToolSettings)


# ── Built-in profiles ─────────────────────────────────────────────
# (min, default, max) transition durations. Cuts are softened, not
# dissolved: even "pronounced" stays under a second.

_PROFILE_DURATIONS = {
    "subtle": (0.15, 0.2, 0.3),
    "standard": (0.15, 0.3, 0.5),
    "pronounced": (0.15, 0.5, 0.8),
}

PROFILES = {
    name: StitchProfile(
        name=name,
        transitions=TransitionTable(
            min_duration=lo, default_duration=mid, max_duration=hi,
        ),
    )
    for name, (lo, mid, hi) in _PROFILE_DURATIONS.items()
}

DEFAULT_PROFILE = "standard"

_SECTIONS = ("transitions", "video", "audio", "encoder", "sampling", "tools")


# ── Loading ───────────────────────────────────────────────────────


def _coerce(section: str, name: str, value, default):
    """Convert a YAML scalar to the type of the field's default value."""
    where = f"{section}.{name}"
    if isinstance(default, TransitionKind):
        return TransitionKind.parse(value)
    if value is None:
        if default is None or name in ("timeout", "ffmpeg"):
            return None
        raise ValueError(f"Profile: {where} must not be null")
    if isinstance(default, bool):
        raise ValueError(f"Profile: {where} has no boolean form")
    if isinstance(default, int) and not isinstance(default, bool):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"Profile: {where} must be an integer, got {value!r}")
        return value
    if isinstance(default, float) or name == "timeout":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Profile: {where} must be a number, got {value!r}")
        return float(value)
    return str(value)


def _apply_section(obj, section: str, values):
    """Return a copy of a settings dataclass with YAML overrides applied."""
    if values is None:
        return obj
    if not isinstance(values, dict):
        raise ValueError(f"Profile: '{section}' must be a mapping")
    known = {f.name: getattr(obj, f.name) for f in fields(obj)}
    unknown = set(values) - set(known)
    if unknown:
        raise ValueError(
            f"Profile: unknown field(s) in '{section}': {sorted(unknown)}. "
            f"Valid: {sorted(known)}"
        )
    overrides = {
        name: _coerce(section, name, value, known[name])
        for name, value in values.items()
    }
    return replace(obj, **overrides)


def profile_from_dict(raw: dict, name: str | None = None) -> StitchProfile:
    """Build a profile from an already-parsed mapping (see module docstring).

    Raises:
        ValueError: Unknown base/section/field or an invalid value.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError("Profile: top level must be a mapping")

    unknown = set(raw) - set(_SECTIONS) - {"base", "name"}
    if unknown:
        raise ValueError(f"Profile: unknown section(s): {sorted(unknown)}")

    base_name = raw.get("base", DEFAULT_PROFILE)
    if base_name not in PROFILES:
        raise ValueError(
            f"Profile: unknown base '{base_name}'. Valid: {sorted(PROFILES)}"
        )
    profile = PROFILES[base_name]

    overrides = {"name": str(raw.get("name") or name or base_name)}
    for section in _SECTIONS:
        overrides[section] = _apply_section(
            getattr(profile, section), section, raw.get(section),
        )
    return replace(profile, **overrides)


def load_profile(profile_path: str | Path) -> StitchProfile:
    """Load a YAML profile file.

    The profile name defaults to the file stem.

    Raises:
        ValueError: Invalid contents.
        FileNotFoundError: Missing file.
    """
    with open(profile_path) as f:
        raw = yaml.safe_load(f)
    return profile_from_dict(raw, name=Path(profile_path).stem)


def resolve_profile(value: "StitchProfile | str | Path | None") -> StitchProfile:
    """Turn a profile argument into a StitchProfile.

    Accepts None (the default profile), a StitchProfile, a built-in
    profile name, or a path to a YAML profile file.
    """
    if value is None:
        return PROFILES[DEFAULT_PROFILE]
    if isinstance(value, StitchProfile):
        return value
    if isinstance(value, str) and value in PROFILES:
        return PROFILES[value]
    if Path(value).is_file():
        return load_profile(value)
    raise ValueError(
        f"Unknown profile '{value}': not a built-in ({sorted(PROFILES)}) "
        "and not an existing file"
    )
