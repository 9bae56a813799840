"""
Exceptions module - Custom exception hierarchy.

This module defines all custom exceptions used throughout Telemost Recorder,
providing clear error types for different failure scenarios.
"""

from telemost_recorder.exceptions.base import (
    TelemostRecorderError,
    ConfigurationError,
    ValidationError,
    InitializationError,
)
from telemost_recorder.exceptions.browser import (
    BrowserError,
    BrowserLaunchError,
    BrowserConnectionError,
    PageError,
    NavigationError,
    ElementNotFoundError,
    TimeoutError as BrowserTimeoutError,
)
from telemost_recorder.exceptions.recording import (
    RecordingError,
    MeetingConnectionError,
    JoinError,
    CaptureError,
    SinkError,
    TeardownError,
)

__all__ = [
    # Base exceptions
    "TelemostRecorderError",
    "ConfigurationError",
    "ValidationError",
    "InitializationError",
    # Browser exceptions
    "BrowserError",
    "BrowserLaunchError",
    "BrowserConnectionError",
    "PageError",
    "NavigationError",
    "ElementNotFoundError",
    "BrowserTimeoutError",
    # Recording exceptions
    "RecordingError",
    "MeetingConnectionError",
    "JoinError",
    "CaptureError",
    "SinkError",
    "TeardownError",
]
