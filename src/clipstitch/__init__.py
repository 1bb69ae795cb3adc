"""clipstitch — stitch independently generated clips into one video.

Measures visual similarity at each clip boundary (SSIM of the frames on
either side), picks a short transition from it, and renders everything in
one ffmpeg pass: per-clip trim, frame-rate and resolution normalization,
boundary fades, audio unification (synthesized silence for clips without
audio), and a final concat.
"""

from .errors import (
    ClipNotFound,
    CleanupFailure,
    FrameExtractionFailure,
    ProbeFailure,
    SimilarityComparisonFailure,
    StitchError,
    StitchExecutionFailure,
    StreamCountMismatch,
    TimelineError,
)
from .models import ClipInfo, StitchJob, TimelineOffset, TransitionConfig, TransitionKind
from .profile import PROFILES, StitchProfile, load_profile
from .stitcher import stitch_videos

__all__ = [
    "ClipInfo",
    "ClipNotFound",
    "CleanupFailure",
    "FrameExtractionFailure",
    "PROFILES",
    "ProbeFailure",
    "SimilarityComparisonFailure",
    "StitchError",
    "StitchExecutionFailure",
    "StitchJob",
    "StitchProfile",
    "StreamCountMismatch",
    "TimelineError",
    "TimelineOffset",
    "TransitionConfig",
    "TransitionKind",
    "load_profile",
    "stitch_videos",
]
