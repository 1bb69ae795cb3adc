"""Tests for filter graph construction.

Structure tests assert on the filter_complex text. The render tests feed the
graph to the bundled ffmpeg to make sure it is accepted as written.
"""

import pytest

from clipstitch.errors import StreamCountMismatch, TimelineError
from clipstitch.graph import build_filter_graph, concat_filter, segment_frames
from clipstitch.models import ClipInfo, TransitionConfig, TransitionKind
from clipstitch.profile import AudioSettings, VideoSettings
from clipstitch.timeline import calculate_offsets
from conftest import frame_hashes

SMALL = VideoSettings(width=320, height=240, fps=10, interpolation="fps")


def _info(name, duration, has_audio=True, width=320, height=240):
    return ClipInfo(
        path=name, duration=duration, codec="h264",
        width=width, height=height, has_audio=has_audio,
    )


def _fade(d, kind=TransitionKind.FADE):
    return TransitionConfig(kind, d)


def _chains(graph):
    return graph.filter_complex.split(";")


class TestConcatFilter:
    def test_interleaves_audio_and_video(self):
        f = concat_filter(["v0", "v1", "v2"], ["a0", "a1", "a2"], with_audio=True)
        assert f == "[v0][a0][v1][a1][v2][a2]concat=n=3:v=1:a=1[vout][aout]"

    def test_video_only(self):
        f = concat_filter(["v0", "v1"], [], with_audio=False)
        assert f == "[v0][v1]concat=n=2:v=1:a=0[vout]"

    def test_partial_audio_rejected(self):
        with pytest.raises(StreamCountMismatch) as exc_info:
            concat_filter(["v0", "v1", "v2"], ["a0", "a2"], with_audio=True)
        assert exc_info.value.video_count == 3
        assert exc_info.value.audio_count == 2

    def test_audio_labels_without_audio_rejected(self):
        with pytest.raises(StreamCountMismatch):
            concat_filter(["v0", "v1"], ["a0"], with_audio=False)


class TestBuildFilterGraph:
    def test_mixed_audio_synthesizes_silence(self):
        graph = build_filter_graph(
            [_info("a.mp4", 5.0, has_audio=False), _info("b.mp4", 4.0)],
            [_fade(0.4)],
            video=SMALL,
        )
        chains = _chains(graph)
        assert graph.has_audio
        assert graph.audio_label == "aout"
        # v0, a0 (silence), v1, a1 (native), concat
        assert len(chains) == 5
        assert chains[1].startswith("anullsrc=channel_layout=stereo:sample_rate=44100")
        assert "atrim=duration=4.800" in chains[1]
        assert chains[1].endswith("[a0]")
        assert chains[3].startswith("[1:a]")
        assert "apad=whole_dur=3.800" in chains[3]
        assert chains[4] == "[v0][a0][v1][a1]concat=n=2:v=1:a=1[vout][aout]"
        assert graph.expected_duration == pytest.approx(8.6)

    def test_no_audio_anywhere(self):
        graph = build_filter_graph(
            [_info("a.mp4", 3.0, has_audio=False), _info("b.mp4", 3.0, has_audio=False)],
            [_fade(0.3)],
            video=SMALL,
        )
        assert not graph.has_audio
        assert graph.audio_label is None
        assert "anullsrc" not in graph.filter_complex
        assert "afade" not in graph.filter_complex
        assert _chains(graph)[-1] == "[v0][v1]concat=n=2:v=1:a=0[vout]"

    def test_every_clip_gets_one_audio_segment(self):
        infos = [
            _info("a.mp4", 2.0),
            _info("b.mp4", 2.0, has_audio=False),
            _info("c.mp4", 2.0),
            _info("d.mp4", 2.0, has_audio=False),
        ]
        graph = build_filter_graph(infos, [_fade(0.3)] * 3, video=SMALL)
        for i in range(4):
            assert graph.filter_complex.count(f"[a{i}]") == 2  # produced, consumed
        assert graph.filter_complex.count("anullsrc") == 2

    def test_trim_windows_and_fades(self):
        graph = build_filter_graph(
            [_info("a.mp4", 5.0), _info("b.mp4", 4.0)], [_fade(0.4)], video=SMALL,
        )
        v0, _, v1, _, _ = _chains(graph)
        assert v0.startswith("[0:v]")
        assert "trim=start=0.000:end=4.800" in v0
        assert "fade=t=out:st=4.600:d=0.200" in v0
        assert "fade=t=in" not in v0
        assert "trim=start=0.200:end=4.000" in v1
        assert "fade=t=in:st=0:d=0.200" in v1
        assert "fade=t=out" not in v1

    def test_segments_cut_to_whole_frames(self):
        graph = build_filter_graph(
            [_info("a.mp4", 5.0, has_audio=False), _info("b.mp4", 4.0)],
            [_fade(0.3)],
            video=VideoSettings(width=320, height=240, fps=30, interpolation="motion"),
        )
        v0, a0, v1, a1, _ = _chains(graph)
        # 4.85s and 3.85s windows become 146 and 115 frames.
        assert "tpad=stop_mode=clone:stop=7,trim=end_frame=146," in v0
        assert "trim=end_frame=115," in v1
        # Audio follows the video segment, not the raw window.
        assert "atrim=duration=4.867" in a0
        assert "apad=whole_dur=3.833,atrim=duration=3.833" in a1
        assert "fade=t=out:st=4.717:d=0.150" in v0
        assert graph.expected_duration == pytest.approx(261 / 30)
        assert graph.expected_duration == pytest.approx(8.7)

    def test_normalizes_resolution_and_rate(self):
        graph = build_filter_graph(
            [_info("a.mp4", 3.0, width=640, height=360), _info("b.mp4", 3.0)],
            [_fade(0.3)],
            video=SMALL,
        )
        v0 = _chains(graph)[0]
        assert "fps=10" in v0
        assert "scale=320:240:force_original_aspect_ratio=decrease" in v0
        assert "pad=320:240:(ow-iw)/2:(oh-ih)/2" in v0
        assert "setsar=1,format=yuv420p" in v0

    def test_motion_interpolation_by_default(self):
        graph = build_filter_graph(
            [_info("a.mp4", 3.0), _info("b.mp4", 3.0)], [_fade(0.3)],
        )
        assert "minterpolate=fps=30:mi_mode=mci" in graph.filter_complex
        assert "scale=1920:1080" in graph.filter_complex

    def test_custom_sample_rate(self):
        graph = build_filter_graph(
            [_info("a.mp4", 3.0), _info("b.mp4", 3.0, has_audio=False)],
            [_fade(0.3)],
            video=SMALL,
            audio=AudioSettings(sample_rate=48000),
        )
        assert "aresample=48000" in graph.filter_complex
        assert "anullsrc=channel_layout=stereo:sample_rate=48000" in graph.filter_complex

    def test_white_fade(self):
        graph = build_filter_graph(
            [_info("a.mp4", 3.0), _info("b.mp4", 3.0)],
            [_fade(0.5, TransitionKind.FADE_WHITE)],
            video=SMALL,
        )
        assert graph.filter_complex.count(":color=white") == 2

    def test_hard_cut_has_no_fades(self):
        graph = build_filter_graph(
            [_info("a.mp4", 3.0), _info("b.mp4", 3.0)],
            [TransitionConfig(TransitionKind.NONE, 0.0)],
            video=SMALL,
        )
        assert "fade=" not in graph.filter_complex
        assert graph.expected_duration == pytest.approx(6.0)

    def test_needs_two_clips(self):
        with pytest.raises(ValueError, match="at least 2 clips"):
            build_filter_graph([_info("a.mp4", 3.0)], [])

    def test_too_short_clip(self):
        with pytest.raises(TimelineError):
            build_filter_graph(
                [_info("a.mp4", 3.0), _info("b.mp4", 0.2), _info("c.mp4", 3.0)],
                [_fade(0.5), _fade(0.5)],
            )


class TestSegmentFrames:
    def test_adds_up_to_rounded_total(self):
        offsets = calculate_offsets([5.0, 4.0], [_fade(0.3)])
        assert segment_frames(offsets, 30) == [146, 115]
        assert segment_frames(offsets, 10) == [49, 38]

    def test_many_clips_do_not_drift(self):
        durations = [1.37, 2.11, 0.93, 3.05, 1.71]
        transitions = [_fade(0.15), _fade(0.3), _fade(0.5), _fade(0.15)]
        offsets = calculate_offsets(durations, transitions)
        total = sum(durations) - sum(t.duration for t in transitions)
        for fps in (10, 24, 30, 60):
            counts = segment_frames(offsets, fps)
            assert abs(sum(counts) / fps - total) <= 0.5 / fps + 1e-9

    def test_at_least_one_frame(self):
        offsets = calculate_offsets([0.1, 0.1], [TransitionConfig(TransitionKind.NONE, 0.0)])
        assert segment_frames(offsets, 5) == [1, 1]


class TestGraphRenders:
    """The generated graph must be valid ffmpeg syntax."""

    def test_mixed_audio_renders(self, make_clip, clip_info, tmp_path):
        from clipstitch.executor import run_stitch
        from clipstitch.profile import EncoderSettings

        a = make_clip("a.mp4", 2.0, audio=False)
        b = make_clip("b.mp4", 2.0, size="640x360", source="testsrc")
        infos = [clip_info(a, 2.0, has_audio=False), clip_info(b, 2.0, width=640, height=360)]
        graph = build_filter_graph(infos, [_fade(0.3)], video=SMALL)

        out = tmp_path / "out.mp4"
        run_stitch(
            [str(a), str(b)], graph, out,
            video=SMALL, encoder=EncoderSettings(preset="ultrafast", timeout=120),
        )
        assert out.stat().st_size > 0

    def test_motion_output_has_exact_frame_count(self, make_clip, clip_info, tmp_path):
        from clipstitch.executor import run_stitch
        from clipstitch.profile import EncoderSettings
        from conftest import decode_audio

        video = VideoSettings(width=320, height=240, fps=30, interpolation="motion")
        a = make_clip("a.mp4", 5.0, audio=False, fps=30)
        b = make_clip("b.mp4", 4.0, source="testsrc", fps=30)
        infos = [clip_info(a, 5.0, has_audio=False), clip_info(b, 4.0)]
        graph = build_filter_graph(infos, [_fade(0.3)], video=video)

        out = tmp_path / "out.mp4"
        run_stitch(
            [str(a), str(b)], graph, out,
            video=video, encoder=EncoderSettings(preset="ultrafast", timeout=300),
        )
        frames = len(frame_hashes(out))
        assert frames == 261
        assert abs(frames / 30 - 8.7) <= 1 / 30 + 1e-9
        audio_seconds = len(decode_audio(out)) / 44100
        assert abs(audio_seconds - frames / 30) <= 1 / 30
