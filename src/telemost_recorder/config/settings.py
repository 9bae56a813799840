"""
Settings - Pydantic models for type-safe configuration.

This module defines all configuration settings as Pydantic models,
providing validation, type hints, and automatic environment variable loading.
A Settings instance is frozen: overrides always produce a new instance.

Example:
    >>> from telemost_recorder.config import Settings, load_config
    >>> settings = load_config()  # Loads from env, yaml, and defaults
    >>> print(settings.page.wait_timeout_ms)
    30000
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from telemost_recorder.exceptions.base import ConfigurationError
from telemost_recorder.interfaces.browser import BrowserType, LocatorStrategy

DEFAULT_BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-first-run",
    "--no-default-browser-check",
    "--autoplay-policy=no-user-gesture-required",
    "--use-fake-ui-for-media-stream",
    "--use-fake-device-for-media-stream",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
]

# Tried in order. Exact button text first, attribute selectors as fallback.
DEFAULT_JOIN_LOCATORS = [
    LocatorStrategy.text("Подключиться", "join button text"),
    LocatorStrategy.selector('[data-test-id="enter-conference-button"]', "join button test id"),
    LocatorStrategy.selector('button:has-text("Подключиться")', "join button containing text"),
]


class BrowserSettings(BaseModel):
    """
    Browser launch settings.

    Attributes:
        headless: Run browser in headless mode
        browser_type: Browser engine to launch
        channel: Branded browser channel (chrome, msedge), None for bundled Chromium
        executable_path: Explicit browser binary
        args: Command line switches passed to the browser
        viewport_width: Page viewport width in pixels
        viewport_height: Page viewport height in pixels
    """
    model_config = ConfigDict(frozen=True)

    headless: bool = True
    browser_type: BrowserType = BrowserType.CHROMIUM
    channel: Optional[str] = None
    executable_path: Optional[str] = None
    args: List[str] = Field(default_factory=lambda: list(DEFAULT_BROWSER_ARGS))
    viewport_width: int = Field(default=1280, ge=320, le=3840)
    viewport_height: int = Field(default=720, ge=240, le=2160)

    def launch_options(self) -> Dict[str, Any]:
        """Keyword arguments for IBrowser.launch()."""
        options: Dict[str, Any] = {
            "headless": self.headless,
            "browser_type": self.browser_type,
            "args": list(self.args),
        }
        if self.channel:
            options["channel"] = self.channel
        if self.executable_path:
            options["executable_path"] = self.executable_path
        return options

    def context_options(self) -> Dict[str, Any]:
        """Keyword arguments for new_page()/new_context()."""
        return {
            "viewport": {"width": self.viewport_width, "height": self.viewport_height},
        }


class PageSettings(BaseModel):
    """
    Page timing settings.

    Attributes:
        timeout_ms: Navigation timeout
        wait_timeout_ms: Budget for each join locator lookup
        poll_interval_ms: Delay between element lookups
    """
    model_config = ConfigDict(frozen=True)

    timeout_ms: int = Field(default=60000, ge=1000)
    wait_timeout_ms: int = Field(default=30000, ge=1000)
    poll_interval_ms: int = Field(default=1000, ge=100)


class RecordingSettings(BaseModel):
    """
    Recording behaviour settings.

    Attributes:
        default_duration: Duration used when a request does not give one (seconds)
        default_max_duration: Ceiling for until-end recordings (seconds)
        output_dir: Directory for recordings created by the API and CLI
        file_format: Default output file extension
        progress_interval_ms: Cadence of progress notifications in duration mode
        settle_delay_ms: Pause between joining and starting the capture
        chunk_interval_ms: How often the capture source emits audio chunks
        stop_timeout_ms: How long stopping waits for the last chunks to drain
        monitor_log_interval_s: Progress log cadence while waiting for meeting end
        monitor_check_interval_ms: How often the meeting-end monitor checks elapsed time
    """
    model_config = ConfigDict(frozen=True)

    default_duration: int = Field(default=300, ge=10, le=3600)
    default_max_duration: int = Field(default=7200, ge=10)
    output_dir: str = "./recordings"
    file_format: Literal["webm", "mp3", "wav"] = "webm"
    progress_interval_ms: int = Field(default=5000, ge=1000)
    settle_delay_ms: int = Field(default=1000, gt=0)
    chunk_interval_ms: int = Field(default=1000, gt=0)
    stop_timeout_ms: int = Field(default=10000, gt=0)
    monitor_log_interval_s: int = Field(default=30, gt=0)
    monitor_check_interval_ms: int = Field(default=2000, gt=0)


class JoinSettings(BaseModel):
    """
    Join control lookup.

    Attributes:
        locators: Ordered locator strategies, each tried with the full wait timeout
    """
    model_config = ConfigDict(frozen=True)

    locators: List[LocatorStrategy] = Field(
        default_factory=lambda: list(DEFAULT_JOIN_LOCATORS),
        min_length=1,
    )


class LoggingSettings(BaseModel):
    """
    Logging configuration.

    Attributes:
        level: Log level
        file: Log file path (None for console only)
        json_format: Use JSON format for the file log
        enable_progress: Log recording progress lines
        enable_page_console: Forward page console messages to the log
        enable_page_errors: Forward uncaught page errors to the log
    """
    model_config = ConfigDict(frozen=True)

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file: Optional[str] = None
    json_format: bool = False
    enable_progress: bool = True
    enable_page_console: bool = False
    enable_page_errors: bool = True


class ServerSettings(BaseModel):
    """HTTP API settings."""
    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = Field(default=3100, ge=1, le=65535)


class Settings(BaseSettings):
    """
    Root settings container - single source of truth for all configuration.

    Settings are loaded in this priority order (highest to lowest):
    1. Explicit values passed to constructor (ConfigLoader passes the YAML file here)
    2. Environment variables (prefixed with TELEMOST_RECORDER__)
    3. Default values

    Example:
        >>> settings = Settings()  # Load from env vars
        >>> settings = Settings(browser=BrowserSettings(headless=False))  # Override
    """

    model_config = SettingsConfigDict(
        env_prefix="TELEMOST_RECORDER__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    page: PageSettings = Field(default_factory=PageSettings)
    recording: RecordingSettings = Field(default_factory=RecordingSettings)
    join: JoinSettings = Field(default_factory=JoinSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    debug: bool = False

    def merge_with(self, overrides: Dict[str, Any]) -> "Settings":
        """
        Create a new Settings instance with overrides applied.

        Sections are merged key by key, so a partial section override keeps
        the remaining keys of that section.

        Args:
            overrides: Dictionary of values to override

        Returns:
            New, validated Settings instance

        Raises:
            ConfigurationError: If the merged configuration is invalid
        """
        current = self.model_dump()

        def deep_merge(base: dict, updates: dict) -> dict:
            for key, value in updates.items():
                if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                    deep_merge(base[key], value)
                else:
                    base[key] = value
            return base

        merged = deep_merge(current, overrides)
        try:
            return Settings(**merged)
        except PydanticValidationError as e:
            raise ConfigurationError(
                "Configuration validation failed",
                {"errors": [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]},
            ) from e
