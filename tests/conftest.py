"""
Pytest configuration and fixtures.
"""

import pytest

from telemost_recorder.config import Settings
from telemost_recorder.exceptions import BrowserLaunchError, NavigationError, PageError

from tests.fakes import MEETING_URL, FakeBrowser, FakePage


@pytest.fixture
def settings(tmp_path):
    """Settings with fast timings and an isolated output directory."""
    return Settings().merge_with({
        "page": {"timeout_ms": 5000, "wait_timeout_ms": 1000, "poll_interval_ms": 100},
        "recording": {
            "output_dir": str(tmp_path / "recordings"),
            "progress_interval_ms": 5000,
            "settle_delay_ms": 1000,
            "stop_timeout_ms": 2000,
            "monitor_check_interval_ms": 3_600_000,
        },
    })


@pytest.fixture
def fake_page():
    return FakePage()


@pytest.fixture
def fake_browser(fake_page):
    return FakeBrowser(fake_page)


@pytest.fixture
def output_path(tmp_path):
    return str(tmp_path / "out" / "meeting.webm")


@pytest.fixture
def launch_failure():
    return BrowserLaunchError("Executable doesn't exist")


@pytest.fixture
def navigation_failure():
    return NavigationError("net::ERR_NAME_NOT_RESOLVED", url=MEETING_URL)


@pytest.fixture
def capture_failure():
    return PageError("MediaRecorder is not supported")
