"""Tests for stitch profiles: built-ins, YAML loading, validation."""

import pytest
import yaml

from clipstitch.models import TransitionKind
from clipstitch.profile import (
    DEFAULT_PROFILE,
    PROFILES,
    EncoderSettings,
    StitchProfile,
    TransitionTable,
    VideoSettings,
    load_profile,
    profile_from_dict,
    resolve_profile,
)


def _write_profile(tmp_path, data, name="custom.yaml"):
    path = tmp_path / name
    path.write_text(yaml.dump(data))
    return path


class TestBuiltinProfiles:
    def test_names(self):
        assert set(PROFILES) == {"subtle", "standard", "pronounced"}
        assert DEFAULT_PROFILE == "standard"

    def test_all_transitions_sub_second(self):
        for profile in PROFILES.values():
            assert profile.transitions.max_duration < 1.0

    def test_standard_matches_defaults(self):
        assert PROFILES["standard"].transitions == TransitionTable()
        assert PROFILES["standard"].video == VideoSettings()


class TestSectionValidation:
    def test_odd_dimensions(self):
        with pytest.raises(ValueError, match="even"):
            VideoSettings(width=321, height=240)

    def test_unknown_interpolation(self):
        with pytest.raises(ValueError, match="interpolation"):
            VideoSettings(interpolation="blend")

    def test_thresholds_out_of_order(self):
        with pytest.raises(ValueError, match="medium_similarity <= high_similarity"):
            TransitionTable(high_similarity=0.4, medium_similarity=0.6)

    def test_durations_out_of_order(self):
        with pytest.raises(ValueError, match="min_duration <= default_duration"):
            TransitionTable(min_duration=0.5, default_duration=0.3)

    def test_timeout_may_be_disabled(self):
        assert EncoderSettings(timeout=None).timeout is None

    def test_bad_crf(self):
        with pytest.raises(ValueError, match="crf"):
            EncoderSettings(crf=60)


class TestProfileFromDict:
    def test_empty_is_standard(self):
        assert profile_from_dict({}) == PROFILES["standard"]

    def test_base_and_overrides(self):
        profile = profile_from_dict({
            "base": "pronounced",
            "video": {"width": 1280, "height": 720, "interpolation": "fps"},
            "encoder": {"timeout": None, "crf": 20},
        })
        assert profile.name == "pronounced"
        assert profile.transitions.max_duration == 0.8
        assert (profile.video.width, profile.video.height) == (1280, 720)
        assert profile.video.fps == 30
        assert profile.encoder.timeout is None
        assert profile.encoder.crf == 20

    def test_transition_kinds_from_strings(self):
        profile = profile_from_dict({"transitions": {"low_kind": "fadewhite", "high_kind": "NONE"}})
        assert profile.transitions.low_kind is TransitionKind.FADE_WHITE
        assert profile.transitions.high_kind is TransitionKind.NONE

    def test_int_accepted_for_float(self):
        profile = profile_from_dict({"encoder": {"timeout": 30}})
        assert profile.encoder.timeout == 30.0

    def test_unknown_section(self):
        with pytest.raises(ValueError, match="unknown section"):
            profile_from_dict({"colour": {}})

    def test_unknown_field(self):
        with pytest.raises(ValueError, match="unknown field.*'video'"):
            profile_from_dict({"video": {"bitrate": "8M"}})

    def test_unknown_base(self):
        with pytest.raises(ValueError, match="unknown base"):
            profile_from_dict({"base": "dramatic"})

    def test_wrong_type(self):
        with pytest.raises(ValueError, match="video.fps must be an integer"):
            profile_from_dict({"video": {"fps": "thirty"}})

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown transition kind"):
            profile_from_dict({"transitions": {"low_kind": "spiral"}})


class TestLoadProfile:
    def test_name_from_file_stem(self, tmp_path):
        path = _write_profile(tmp_path, {"base": "subtle"}, name="my-look.yaml")
        profile = load_profile(path)
        assert profile.name == "my-look"
        assert profile.transitions.default_duration == 0.2

    def test_explicit_name_wins(self, tmp_path):
        path = _write_profile(tmp_path, {"name": "promo"})
        assert load_profile(path).name == "promo"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_profile(path).transitions == PROFILES["standard"].transitions


class TestResolveProfile:
    def test_none(self):
        assert resolve_profile(None) is PROFILES["standard"]

    def test_builtin_name(self):
        assert resolve_profile("subtle") is PROFILES["subtle"]

    def test_instance_passthrough(self):
        profile = StitchProfile(name="x")
        assert resolve_profile(profile) is profile

    def test_file_path(self, tmp_path):
        path = _write_profile(tmp_path, {"audio": {"sample_rate": 48000}})
        assert resolve_profile(str(path)).audio.sample_rate == 48000

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown profile 'loud'"):
            resolve_profile("loud")
