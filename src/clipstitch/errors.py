"""Error taxonomy for the stitching engine.

Fatal errors propagate to the caller of stitch_videos(). The two analysis
errors (FrameExtractionFailure, SimilarityComparisonFailure) are raised by
their components but absorbed by the boundary-similarity step, which falls
back to a medium score. CleanupFailure is only ever logged.
"""


class StitchError(Exception):
    """Base class for every error raised by clipstitch."""


class ClipNotFound(StitchError, FileNotFoundError):
    """An input clip path does not exist."""

    def __init__(self, path):
        self.path = str(path)
        super().__init__(f"Clip not found: {self.path}")


class ProbeFailure(StitchError):
    """ffprobe could not report the video stream of a clip."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to probe {self.path}: {reason}")


class FrameExtractionFailure(StitchError):
    """ffmpeg could not produce a still frame from a clip."""

    def __init__(self, path, timestamp: float, reason: str):
        self.path = str(path)
        self.timestamp = timestamp
        self.reason = reason
        super().__init__(
            f"Failed to extract frame from {self.path} at {timestamp:.3f}s: {reason}"
        )


class SimilarityComparisonFailure(StitchError):
    """The ssim comparison failed or printed no usable score."""


class TimelineError(StitchError):
    """A clip is too short to absorb its adjacent transitions."""


class StreamCountMismatch(StitchError):
    """The concat filter would receive a partial set of audio streams."""

    def __init__(self, video_count: int, audio_count: int):
        self.video_count = video_count
        self.audio_count = audio_count
        super().__init__(
            f"Audio stream count mismatch: {video_count} video streams "
            f"but {audio_count} audio streams"
        )


class StitchExecutionFailure(StitchError):
    """The final ffmpeg run failed, timed out, or left no output file.

    stderr holds the tail of ffmpeg's diagnostic output (may be empty).
    """

    def __init__(self, message: str, stderr: str = "", timeout: bool = False):
        self.stderr = stderr
        self.timeout = timeout
        detail = f"\n{stderr}" if stderr else ""
        super().__init__(f"{message}{detail}")


class CleanupFailure(StitchError):
    """A temp artifact or partial output could not be removed."""

    def __init__(self, path, cause: OSError):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"Could not remove {self.path}: {cause}")
