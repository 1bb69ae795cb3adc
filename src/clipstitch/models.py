"""Data types shared across the stitching pipeline.

All records are frozen dataclasses: a ClipInfo is produced once per clip and
never mutated, timeline offsets and filter graphs are derived values that get
rebuilt rather than edited.
"""

from dataclasses import dataclass
from enum import Enum


class TransitionKind(Enum):
    """Blend styles between two adjacent clips, valued by their ffmpeg names."""

    FADE = "fade"
    FADE_BLACK = "fadeblack"
    FADE_WHITE = "fadewhite"
    DISTANCE = "distance"
    WIPE_LEFT = "wipeleft"
    WIPE_RIGHT = "wiperight"
    NONE = "none"

    @classmethod
    def parse(cls, value: "str | TransitionKind") -> "TransitionKind":
        """Accept an enum member, its value ('fadewhite') or its name ('FADE_WHITE')."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for kind in cls:
            if text.lower() == kind.value or text.upper() == kind.name:
                return kind
        raise ValueError(
            f"Unknown transition kind '{value}'. "
            f"Valid: {sorted(k.value for k in cls)}"
        )


@dataclass(frozen=True)
class ClipInfo:
    path: str
    duration: float
    codec: str
    width: int
    height: int
    has_audio: bool

    @property
    def resolution(self) -> tuple[int, int]:
        return (self.width, self.height)


@dataclass(frozen=True)
class TransitionConfig:
    kind: TransitionKind
    duration: float

    def __post_init__(self):
        if self.duration < 0:
            raise ValueError(f"Transition duration must be >= 0, got {self.duration!r}")
        if self.kind is TransitionKind.NONE and self.duration != 0:
            raise ValueError("A 'none' transition must have duration 0")

    def __str__(self):
        return f"{self.kind.value} ({self.duration:.2f}s)"


@dataclass(frozen=True)
class TimelineOffset:
    """Where one clip sits in the output.

    trim_start/trim_end bound the part of the source clip that is kept;
    transition_start is where that part begins in the output timeline.
    """

    clip_index: int
    trim_start: float
    trim_end: float
    transition_start: float

    @property
    def length(self) -> float:
        return self.trim_end - self.trim_start


@dataclass(frozen=True)
class StitchJob:
    """One stitch request: ordered clip paths plus the owning project."""

    clip_paths: tuple[str, ...]
    project_id: str

    def __post_init__(self):
        object.__setattr__(self, "clip_paths", tuple(str(p) for p in self.clip_paths))


@dataclass(frozen=True)
class FilterGraph:
    """A complete -filter_complex description and the labels to map."""

    filter_complex: str
    video_label: str
    audio_label: str | None
    expected_duration: float

    @property
    def has_audio(self) -> bool:
        return self.audio_label is not None
