"""Filter graph builder — trim + fade + concat stitching of N clips.

Produces one ffmpeg -filter_complex string for N >= 2 input clips, where
input i is the i-th clip on the ffmpeg command line.

Per clip, one video chain:
  1. reset timestamps, trim to the clip's timeline window, reset again,
  2. resample to the output frame rate (minterpolate motion-compensated
     interpolation, or plain fps in "fps" mode),
  3. clone the last frame and cut at the segment's exact frame count, so
     the segment lasts frames / fps whatever the rate filter produced,
  4. scale into the output frame keeping aspect, pad the rest (letterbox),
  5. fade in over half the incoming transition, fade out over half the
     outgoing one (first clip: out only, last clip: in only).

Audio, only when at least one clip has audio: every clip gets exactly one
audio chain so concat sees N audio segments. Clips with audio are trimmed
to the same window, resampled to one rate and stereo layout, and padded
with silence if the track is shorter than the video. Clips without audio
get synthesized silence. Every audio segment is exactly as long as its
video segment. Audio fades mirror
the video fades.

Finally all segments are joined with concat, video/audio interleaved per
clip: [v0][a0][v1][a1]...concat=n=N:v=1:a=1[vout][aout]. When no clip has
audio the graph has no audio output at all.

Transition kinds: adjacent clips never overlap in this scheme, so every
kind is rendered as a fade through a solid colour. fadewhite fades through
white, none is a hard cut, everything else fades through black.
"""

import logging
import math

from .errors import StreamCountMismatch
from .models import ClipInfo, FilterGraph, TimelineOffset, TransitionConfig, TransitionKind
from .profile import AudioSettings, VideoSettings
from .timeline import calculate_offsets

logger = logging.getLogger(__name__)

VIDEO_OUT = "vout"
AUDIO_OUT = "aout"


def _t(seconds: float) -> str:
    return f"{seconds:.3f}"


def _frame_at(seconds: float, fps: int) -> int:
    # Round half up; the epsilon absorbs float error in seconds * fps.
    return int(math.floor(seconds * fps + 0.5 + 1e-6))


def segment_frames(offsets: list[TimelineOffset], fps: int) -> list[int]:
    """Output frame count of each clip segment.

    Counts come from rounding segment boundaries on the output timeline,
    so they always add up to the rounded total and never drift.
    """
    counts = []
    for offset in offsets:
        start = _frame_at(offset.transition_start, fps)
        end = _frame_at(offset.transition_start + offset.length, fps)
        counts.append(max(end - start, 1))
    return counts


# ── Per-clip chains ───────────────────────────────────────────────


def _rate_filter(video: VideoSettings) -> str:
    """Frame-rate conversion to the output rate."""
    if video.interpolation == "motion":
        # mci: motion-compensated interpolation, aobmc: adaptive overlapped
        # block compensation, bidir: bidirectional motion estimation.
        return (
            f"minterpolate=fps={video.fps}:mi_mode=mci:mc_mode=aobmc"
            f":me_mode=bidir:vsbmc=1:scd=none"
        )
    return f"fps={video.fps}"


def _fade_color(kind: TransitionKind) -> str:
    return ":color=white" if kind is TransitionKind.FADE_WHITE else ""


def _edge_fades(
    incoming: TransitionConfig | None,
    outgoing: TransitionConfig | None,
    length: float,
) -> tuple[list[str], list[str]]:
    """Video and audio fade filters for one clip's kept window.

    Returns (video_fades, audio_fades), in application order.
    """
    video_fades = []
    audio_fades = []

    if incoming is not None and incoming.kind is not TransitionKind.NONE and incoming.duration > 0:
        d = incoming.duration / 2
        video_fades.append(f"fade=t=in:st=0:d={_t(d)}{_fade_color(incoming.kind)}")
        audio_fades.append(f"afade=t=in:st=0:d={_t(d)}")

    if outgoing is not None and outgoing.kind is not TransitionKind.NONE and outgoing.duration > 0:
        d = outgoing.duration / 2
        st = max(0.0, length - d)
        video_fades.append(f"fade=t=out:st={_t(st)}:d={_t(d)}{_fade_color(outgoing.kind)}")
        audio_fades.append(f"afade=t=out:st={_t(st)}:d={_t(d)}")

    return video_fades, audio_fades


def _video_chain(
    index: int,
    offset: TimelineOffset,
    frames: int,
    video: VideoSettings,
    fades: list[str],
) -> str:
    w, h = video.width, video.height
    # minterpolate can drop the last frames of a window; clone the final
    # frame and cut at an exact frame count so every segment is frames/fps long.
    pad = max(2, video.fps // 4)
    filters = [
        "setpts=PTS-STARTPTS",
        f"trim=start={_t(offset.trim_start)}:end={_t(offset.trim_end)}",
        "setpts=PTS-STARTPTS",
        _rate_filter(video),
        f"tpad=stop_mode=clone:stop={pad}",
        f"trim=end_frame={frames}",
        f"scale={w}:{h}:force_original_aspect_ratio=decrease",
        f"pad={w}:{h}:(ow-iw)/2:(oh-ih)/2",
        "setsar=1",
        "format=yuv420p",
        *fades,
    ]
    return f"[{index}:v]{','.join(filters)}[v{index}]"


def _audio_chain(
    index: int,
    info: ClipInfo,
    offset: TimelineOffset,
    seconds: float,
    audio: AudioSettings,
    fades: list[str],
) -> str:
    rate = audio.sample_rate
    length = _t(seconds)
    layout = f"aformat=sample_rates={rate}:channel_layouts=stereo"

    if info.has_audio:
        filters = [
            "asetpts=PTS-STARTPTS",
            f"atrim=start={_t(offset.trim_start)}:end={_t(offset.trim_end)}",
            "asetpts=PTS-STARTPTS",
            f"aresample={rate}:async=1",
            layout,
            f"apad=whole_dur={length}",
            f"atrim=duration={length}",
            *fades,
        ]
        return f"[{index}:a]{','.join(filters)}[a{index}]"

    # No native track: synthesize silence of the exact segment length.
    filters = [
        f"anullsrc=channel_layout=stereo:sample_rate={rate}",
        f"atrim=duration={length}",
        "asetpts=PTS-STARTPTS",
        layout,
        *fades,
    ]
    return f"{','.join(filters)}[a{index}]"


# ── Concat ────────────────────────────────────────────────────────


def concat_filter(
    video_labels: list[str],
    audio_labels: list[str],
    with_audio: bool,
) -> str:
    """Build the final concat filter.

    With audio, inputs are interleaved per clip ([v0][a0][v1][a1]...), which
    is the order concat expects for v=1:a=1.

    Raises:
        StreamCountMismatch: audio label count is not 0 (without audio) or
            exactly the video label count (with audio).
    """
    expected_audio = len(video_labels) if with_audio else 0
    if len(audio_labels) != expected_audio:
        raise StreamCountMismatch(len(video_labels), len(audio_labels))

    n = len(video_labels)
    if with_audio:
        inputs = "".join(f"[{v}][{a}]" for v, a in zip(video_labels, audio_labels))
        return f"{inputs}concat=n={n}:v=1:a=1[{VIDEO_OUT}][{AUDIO_OUT}]"

    inputs = "".join(f"[{v}]" for v in video_labels)
    return f"{inputs}concat=n={n}:v=1:a=0[{VIDEO_OUT}]"


# ── Graph ─────────────────────────────────────────────────────────


def build_filter_graph(
    infos: list[ClipInfo],
    transitions: list[TransitionConfig],
    video: VideoSettings | None = None,
    audio: AudioSettings | None = None,
) -> FilterGraph:
    """Build the full stitch graph for N >= 2 probed clips.

    Args:
        infos: ClipInfo per input, in timeline order (= ffmpeg input order).
        transitions: One TransitionConfig per adjacent pair.
        video: Output resolution, frame rate, interpolation mode.
        audio: Output sample rate.

    Returns:
        FilterGraph with the filter_complex text and labels to -map.

    Raises:
        ValueError: Fewer than 2 clips, or wrong number of transitions.
        TimelineError: A clip is too short for its transitions.
        StreamCountMismatch: Audio and video segment counts disagree.
    """
    if len(infos) < 2:
        raise ValueError(f"A filter graph needs at least 2 clips, got {len(infos)}")
    video = video or VideoSettings()
    audio = audio or AudioSettings()

    offsets = calculate_offsets([info.duration for info in infos], transitions)
    frame_counts = segment_frames(offsets, video.fps)
    with_audio = any(info.has_audio for info in infos)
    n = len(infos)

    filters = []
    video_labels = []
    audio_labels = []

    seconds = [count / video.fps for count in frame_counts]
    for i, (info, offset) in enumerate(zip(infos, offsets)):
        incoming = transitions[i - 1] if i > 0 else None
        outgoing = transitions[i] if i < n - 1 else None
        video_fades, audio_fades = _edge_fades(incoming, outgoing, seconds[i])

        filters.append(_video_chain(i, offset, frame_counts[i], video, video_fades))
        video_labels.append(f"v{i}")

        if with_audio:
            filters.append(_audio_chain(i, info, offset, seconds[i], audio, audio_fades))
            audio_labels.append(f"a{i}")

        logger.debug(
            "Clip %d: window %.3f-%.3fs, %d frames (%s), starts at %.3fs",
            i, offset.trim_start, offset.trim_end, frame_counts[i],
            "native audio" if info.has_audio else ("silence" if with_audio else "no audio"),
            offset.transition_start,
        )

    filters.append(concat_filter(video_labels, audio_labels, with_audio))

    return FilterGraph(
        filter_complex=";".join(filters),
        video_label=VIDEO_OUT,
        audio_label=AUDIO_OUT if with_audio else None,
        expected_duration=sum(frame_counts) / video.fps,
    )
