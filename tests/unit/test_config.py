"""
Tests for configuration system.
"""

import os

import pytest

from telemost_recorder.config import (
    Settings,
    BrowserSettings,
    PageSettings,
    RecordingSettings,
    ConfigLoader,
    DEFAULT_JOIN_LOCATORS,
    load_config,
    get_settings,
    reset_settings,
)
from telemost_recorder.exceptions import ConfigurationError
from telemost_recorder.interfaces.browser import BrowserType, LocatorKind


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Keep stray config files and .env files out of the tests."""
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("TELEMOST_RECORDER__"):
            monkeypatch.delenv(name)
    reset_settings()
    yield
    reset_settings()


class TestSettings:
    """Test the Settings classes."""

    def test_default_settings(self):
        """Test default settings are created correctly."""
        settings = Settings()

        assert settings.browser.headless is True
        assert settings.browser.browser_type == BrowserType.CHROMIUM
        assert settings.page.timeout_ms == 60000
        assert settings.page.wait_timeout_ms == 30000
        assert settings.page.poll_interval_ms == 1000
        assert settings.recording.progress_interval_ms == 5000
        assert settings.recording.settle_delay_ms == 1000
        assert settings.recording.default_max_duration == 7200
        assert settings.server.port == 3100

    def test_default_join_locators(self):
        """Exact button text is tried before attribute selectors."""
        locators = Settings().join.locators

        assert locators == DEFAULT_JOIN_LOCATORS
        assert locators[0].kind == LocatorKind.TEXT
        assert locators[0].value == "Подключиться"
        assert locators[1].value == '[data-test-id="enter-conference-button"]'

    def test_autoplay_switches_are_on_by_default(self):
        args = BrowserSettings().args

        assert "--autoplay-policy=no-user-gesture-required" in args
        assert "--use-fake-ui-for-media-stream" in args

    def test_merge_with_overrides(self):
        """Test merging settings with overrides."""
        settings = Settings()
        new_settings = settings.merge_with({
            "browser": {"headless": False},
            "page": {"wait_timeout_ms": 5000},
        })

        assert new_settings.browser.headless is False
        assert new_settings.page.wait_timeout_ms == 5000
        # Other settings should remain default
        assert new_settings.page.timeout_ms == 60000
        assert new_settings.browser.viewport_width == 1280
        # The original is untouched
        assert settings.browser.headless is True

    def test_merge_with_invalid_value(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings().merge_with({"recording": {"progress_interval_ms": 10}})

        assert any("progress_interval_ms" in e for e in exc_info.value.details["errors"])

    def test_settings_are_frozen(self):
        settings = Settings()
        with pytest.raises(Exception):
            settings.browser.headless = False

    def test_page_settings_validation(self):
        """Test validation of page settings."""
        assert PageSettings(timeout_ms=5000).timeout_ms == 5000

        with pytest.raises(ValueError):
            PageSettings(poll_interval_ms=10)

    def test_recording_settings_validation(self):
        with pytest.raises(ValueError):
            RecordingSettings(file_format="ogg")
        with pytest.raises(ValueError):
            RecordingSettings(settle_delay_ms=0)

    def test_launch_options(self):
        options = BrowserSettings(headless=False, channel="chrome").launch_options()

        assert options["headless"] is False
        assert options["browser_type"] == BrowserType.CHROMIUM
        assert options["channel"] == "chrome"
        assert "executable_path" not in options

    def test_context_options(self):
        options = BrowserSettings(viewport_width=1920, viewport_height=1080).context_options()
        assert options == {"viewport": {"width": 1920, "height": 1080}}

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("TELEMOST_RECORDER__BROWSER__HEADLESS", "false")
        monkeypatch.setenv("TELEMOST_RECORDER__PAGE__WAIT_TIMEOUT_MS", "45000")

        settings = Settings()

        assert settings.browser.headless is False
        assert settings.page.wait_timeout_ms == 45000


class TestConfigLoader:
    """Test loading configuration from files."""

    def test_load_yaml_file(self, tmp_path):
        config_file = tmp_path / "custom.yaml"
        config_file.write_text(
            "browser:\n  headless: false\nrecording:\n  output_dir: /data/recordings\n",
            encoding="utf-8",
        )

        settings = load_config(config_path=config_file)

        assert settings.browser.headless is False
        assert settings.recording.output_dir == "/data/recordings"

    def test_default_config_file_is_found(self, tmp_path):
        (tmp_path / "telemost-recorder.yaml").write_text("server:\n  port: 8080\n", encoding="utf-8")

        assert ConfigLoader().find_config_file().name == "telemost-recorder.yaml"
        assert load_config().server.port == 8080

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(config_path=tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "broken.yaml"
        config_file.write_text("browser: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(config_path=config_file)

    def test_non_mapping_yaml(self, tmp_path):
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- one\n- two\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(config_path=config_file)

    def test_invalid_values_in_file(self, tmp_path):
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("server:\n  port: 0\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_config(config_path=config_file)

    def test_overrides_win(self, tmp_path):
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("page:\n  timeout_ms: 20000\n", encoding="utf-8")

        settings = load_config(config_path=config_file, page={"timeout_ms": 10000})

        assert settings.page.timeout_ms == 10000

    def test_env_file(self, tmp_path):
        env_file = tmp_path / "recorder.env"
        env_file.write_text("TELEMOST_RECORDER__SERVER__PORT=9000\n", encoding="utf-8")

        try:
            settings = load_config(env_file=env_file)
        finally:
            os.environ.pop("TELEMOST_RECORDER__SERVER__PORT", None)

        assert settings.server.port == 9000


class TestGlobalSettings:
    """Test the settings singleton."""

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_reset_settings(self):
        first = get_settings()
        reset_settings()
        assert get_settings() is not first
