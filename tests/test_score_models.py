"""Tests for stampscore.models and stampscore.config."""

import pytest

from stampscore.config import ScorerSettings, DEFAULT_API_URL
from stampscore.models import (
    ProcessingStatus, SubmissionState, ScoreRecord,
    freeze_scores, parse_float_or_zero,
)


class TestParseFloatOrZero:
    @pytest.mark.parametrize("value,expected", [
        ("12.5", 12.5),
        ("0", 0.0),
        (3, 3.0),
        (2.25, 2.25),
        ("-1.5", -1.5),
    ])
    def test_numbers(self, value, expected):
        assert parse_float_or_zero(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", "NaN", "inf", float("nan"), [], {}, True])
    def test_falls_back_to_zero(self, value):
        assert parse_float_or_zero(value) == 0.0


class TestFreezeScores:
    def test_parses_values(self):
        frozen = freeze_scores({"Google": "1.5", "Brightid": "bad"})
        assert dict(frozen) == {"Google": 1.5, "Brightid": 0.0}

    def test_read_only(self):
        frozen = freeze_scores({"Google": "1"})
        with pytest.raises(TypeError):
            frozen["Google"] = 2.0

    @pytest.mark.parametrize("raw", [None, "x", 5, ["Google"]])
    def test_not_a_mapping(self, raw):
        assert freeze_scores(raw) is None


class TestScoreRecord:
    def test_passing(self):
        r = ScoreRecord(raw_score=15, threshold=10, score=12.5)
        assert r.passing
        assert r.description == "Passing Score"

    def test_equal_to_threshold_is_low(self):
        r = ScoreRecord(raw_score=10, threshold=10, score=1)
        assert not r.passing
        assert r.description == "Low Score"

    def test_immutable(self):
        r = ScoreRecord(raw_score=1, threshold=2, score=3)
        with pytest.raises(AttributeError):
            r.score = 4


class TestStates:
    def test_in_progress(self):
        assert ProcessingStatus.PROCESSING.in_progress
        assert ProcessingStatus.BULK_PROCESSING.in_progress
        assert not ProcessingStatus.DONE.in_progress
        assert not ProcessingStatus.ERROR.in_progress

    def test_terminal(self):
        assert SubmissionState.SUCCESS.terminal
        assert SubmissionState.ERROR.terminal
        assert not SubmissionState.PENDING.terminal
        assert not SubmissionState.INITIAL.terminal


class TestScorerSettings:
    def test_defaults(self):
        s = ScorerSettings()
        assert s.api_url == DEFAULT_API_URL
        assert s.max_attempts == 30
        assert (s.initial_delay_ms, s.delay_step_ms, s.max_delay_ms) == (1000, 500, 10000)

    def test_endpoints_strip_trailing_slash(self):
        s = ScorerSettings(api_url="https://api.example.com/ceramic-cache/")
        assert s.score_endpoint == "https://api.example.com/ceramic-cache/score"
        assert s.weights_endpoint == "https://api.example.com/ceramic-cache/weights"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SCORER_API_URL", "https://env.example.com")
        monkeypatch.setenv("SCORER_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("SCORER_TIMEOUT", "2.5")
        s = ScorerSettings.from_env()
        assert s.api_url == "https://env.example.com"
        assert s.max_attempts == 5
        assert s.timeout == 2.5
        assert s.catalog_path is None

    def test_from_env_overrides(self, monkeypatch):
        monkeypatch.setenv("SCORER_API_URL", "https://env.example.com")
        s = ScorerSettings.from_env(api_url="https://cli.example.com", catalog_path=None)
        assert s.api_url == "https://cli.example.com"

    @pytest.mark.parametrize("kwargs", [
        {"api_url": ""},
        {"timeout": 0},
        {"max_attempts": 0},
        {"initial_delay_ms": -1},
        {"initial_delay_ms": 2000, "max_delay_ms": 1000},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            ScorerSettings(**kwargs)
