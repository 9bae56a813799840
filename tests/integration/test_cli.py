"""
Integration tests for the CLI commands.
"""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from telemost_recorder.main import app
from telemost_recorder.recorder import EndReason, RecordingResult

from tests.fakes import MEETING_URL


@pytest.fixture
def runner():
    """Create a CLI runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run every command in an empty directory without touching logging."""
    monkeypatch.chdir(tmp_path)
    with patch("telemost_recorder.main.setup_logging"):
        yield


@pytest.fixture
def recorder_cls():
    with patch("telemost_recorder.main.TelemostRecorder") as cls:
        yield cls


def finish_with(recorder_cls, result):
    async def record(request):
        return result
    recorder_cls.return_value.record.side_effect = record


class TestCLIRecord:
    """Test the 'record' CLI command."""

    def test_record_help(self, runner):
        """Test help for record command."""
        result = runner.invoke(app, ["record", "--help"])
        assert result.exit_code == 0
        assert "--until-end" in result.stdout
        assert "--visible" in result.stdout

    def test_record_for_duration(self, runner, recorder_cls, tmp_path):
        output = str(tmp_path / "meeting.webm")
        finish_with(recorder_cls, RecordingResult.succeeded(output, 60, 2048))

        result = runner.invoke(app, ["record", MEETING_URL, "--duration", "60", "-o", output])

        assert result.exit_code == 0
        assert "Recording saved" in result.stdout
        request = recorder_cls.return_value.record.call_args.args[0]
        assert request.duration_seconds == 60
        assert request.until_end is False
        assert request.output_path == output

    def test_record_until_end(self, runner, recorder_cls):
        finish_with(recorder_cls, RecordingResult.succeeded("out.webm", 95, 4096, EndReason.NAVIGATION_DETECTED))

        result = runner.invoke(app, ["record", MEETING_URL, "--until-end", "--max-duration", "5400"])

        assert result.exit_code == 0
        assert "navigation_detected" in result.stdout
        request = recorder_cls.return_value.record.call_args.args[0]
        assert request.until_end is True
        assert request.duration_seconds is None
        assert request.max_duration_seconds == 5400

    def test_default_output_path(self, runner, recorder_cls):
        """Without -o the file is named in the configured output directory."""
        finish_with(recorder_cls, RecordingResult.succeeded("out.wav", 300, 1))

        runner.invoke(app, ["record", MEETING_URL, "--format", "wav"])

        request = recorder_cls.return_value.record.call_args.args[0]
        assert request.output_path.startswith("recordings")
        assert request.output_path.endswith(".wav")
        assert request.duration_seconds == 300

    def test_visible_option(self, runner, recorder_cls):
        finish_with(recorder_cls, RecordingResult.succeeded("out.webm", 60, 1))

        runner.invoke(app, ["record", MEETING_URL, "-d", "60", "--visible"])

        settings = recorder_cls.call_args.args[0]
        assert settings.browser.headless is False

    def test_invalid_parameters(self, runner, recorder_cls):
        result = runner.invoke(app, ["record", "https://zoom.us/j/1", "--duration", "5"])

        assert result.exit_code == 1
        assert "Invalid parameters" in result.stdout
        recorder_cls.assert_not_called()

    def test_parent_output_path_rejected(self, runner, recorder_cls):
        result = runner.invoke(app, ["record", MEETING_URL, "-d", "60", "-o", "../meeting.webm"])

        assert result.exit_code == 1
        assert "Invalid parameters" in result.stdout
        recorder_cls.assert_not_called()

    def test_failed_recording(self, runner, recorder_cls):
        finish_with(recorder_cls, RecordingResult.failed("Failed to connect to meeting: timeout"))

        result = runner.invoke(app, ["record", MEETING_URL, "-d", "60"])

        assert result.exit_code == 1
        assert "Failed to connect to meeting" in result.stdout

    def test_missing_config_file(self, runner, recorder_cls, tmp_path):
        result = runner.invoke(app, ["record", MEETING_URL, "-d", "60", "-c", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "Configuration error" in result.stdout


class TestCLIServe:
    """Test the 'serve' CLI command."""

    def test_serve(self, runner):
        with patch("telemost_recorder.main.run_server") as run_server:
            result = runner.invoke(app, ["serve", "--port", "8080"])

        assert result.exit_code == 0
        assert run_server.call_args.kwargs["port"] == 8080
        assert run_server.call_args.kwargs["host"] is None

    def test_serve_error(self, runner):
        with patch("telemost_recorder.main.run_server", side_effect=OSError("Address already in use")):
            result = runner.invoke(app, ["serve"])

        assert result.exit_code == 1
        assert "Address already in use" in result.stdout


class TestCLIConfig:
    """Test the 'config' and 'version' commands."""

    def test_config_from_file(self, runner, tmp_path):
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("server:\n  port: 8080\n", encoding="utf-8")

        result = runner.invoke(app, ["config", "-c", str(config_file)])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["server"]["port"] == 8080

    def test_version(self, runner):
        from telemost_recorder import __version__
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout
