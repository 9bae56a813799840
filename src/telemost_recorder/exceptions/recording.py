"""
Recording exceptions raised by the session orchestrator and the capture pipe.
"""

from telemost_recorder.exceptions.base import TelemostRecorderError


class RecordingError(TelemostRecorderError):
    """Base exception for recording failures."""
    code = "recording_error"


class MeetingConnectionError(RecordingError):
    """
    Navigation to the meeting address failed or timed out.
    """
    code = "connection_error"


class JoinError(RecordingError):
    """
    No join control could be located or activated.

    Raised after every configured locator strategy has been tried.
    """
    code = "join_error"


class CaptureError(RecordingError):
    """
    The audio stream could not be obtained.

    Also raised when a capture is requested while one is already active.
    """
    code = "capture_error"


class SinkError(RecordingError):
    """
    Writing captured bytes to the output file failed.

    The capture keeps running; the error is reported when the pipe is stopped.
    """
    code = "sink_error"


class TeardownError(RecordingError):
    """
    Closing the page, context or browser failed.

    Always logged, never re-raised by the recorder.
    """
    code = "teardown_error"
