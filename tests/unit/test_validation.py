"""
Tests for request validation helpers.
"""

import pytest

from telemost_recorder.utils.validation import (
    ValidationResult,
    validate_duration,
    validate_file_path,
    validate_format,
    validate_meeting_url,
    validate_recording_id,
    validate_recording_params,
)

MEETING_URL = "https://telemost.yandex.ru/j/12345678901234"


class TestMeetingUrl:
    """Test meeting URL checks."""

    @pytest.mark.parametrize("url", [
        MEETING_URL,
        "http://telemost.yandex.ru/j/1",
        "https://sub.telemost.yandex.ru/j/1",
    ])
    def test_valid(self, url):
        assert validate_meeting_url(url).is_valid

    @pytest.mark.parametrize("url, message", [
        ("", "required"),
        (None, "required"),
        (42, "string"),
        ("telemost.yandex.ru/j/1", "malformed"),
        ("ftp://telemost.yandex.ru/j/1", "malformed"),
        ("https://zoom.us/j/1", "Telemost"),
        ("https://telemost.yandex.ru.evil.com/j/1", "Telemost"),
        ("https://nottelemost.yandex.ru/j/1", "Telemost"),
    ])
    def test_invalid(self, url, message):
        result = validate_meeting_url(url)
        assert not result.is_valid
        assert message in result.errors[0]


class TestDuration:
    """Test duration checks."""

    @pytest.mark.parametrize("duration", [10, 60, 3600, 120.0])
    def test_valid(self, duration):
        assert validate_duration(duration).is_valid

    @pytest.mark.parametrize("duration, message", [
        ("60", "number"),
        (None, "number"),
        (True, "number"),
        (float("nan"), "valid number"),
        (5, "at least 10"),
        (3601, "at most 3600"),
        (30.5, "whole number"),
    ])
    def test_invalid(self, duration, message):
        result = validate_duration(duration)
        assert not result.is_valid
        assert message in result.errors[0]

    def test_custom_bounds(self):
        assert validate_duration(7200, max_duration=14400).is_valid
        assert not validate_duration(5, min_duration=1, max_duration=4).is_valid


class TestFormatAndPaths:
    """Test format, path and id checks."""

    def test_formats(self):
        assert validate_format("webm").is_valid
        assert validate_format("wav").is_valid
        assert "Supported formats" in validate_format("ogg").errors[0]
        assert not validate_format("").is_valid

    @pytest.mark.parametrize("path", ["recordings/out.webm", "/data/out.webm", "out.webm"])
    def test_safe_paths(self, path):
        assert validate_file_path(path).is_valid

    @pytest.mark.parametrize("path", ["../out.webm", "recordings/../../etc/passwd", "out?.webm", 'a"b.webm', ""])
    def test_unsafe_paths(self, path):
        assert not validate_file_path(path).is_valid

    def test_recording_id(self):
        assert validate_recording_id("2f1c1b3e-9f1e-4d6e-8a89-0c3a5e7e1f00").is_valid
        assert not validate_recording_id("not-a-uuid").is_valid
        assert not validate_recording_id(None).is_valid


class TestRecordingParams:
    """Test combined request validation."""

    def test_collects_every_error(self):
        result = validate_recording_params("https://zoom.us/j/1", duration=5, file_format="ogg")

        assert len(result.errors) == 3

    def test_optional_parameters_are_skipped(self):
        assert validate_recording_params(MEETING_URL).is_valid

    def test_max_duration_allows_long_meetings(self):
        assert validate_recording_params(MEETING_URL, max_duration=7200).is_valid
        assert not validate_recording_params(MEETING_URL, max_duration=20000).is_valid

    def test_result_extend(self):
        result = ValidationResult(["a"])
        result.extend(ValidationResult(["b"]))
        assert result.errors == ["a", "b"]
