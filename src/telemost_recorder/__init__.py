"""
Telemost Recorder - Records the audio of Yandex Telemost meetings.

A headless browser joins the meeting as a guest, captures the page's audio
output and streams it into a file, either for a fixed duration or until the
meeting ends.

Example:
    >>> from telemost_recorder import TelemostRecorder
    >>> recorder = TelemostRecorder()
    >>> result = await recorder.record_for_duration(
    ...     "https://telemost.yandex.ru/j/12345678901234", 60, "meeting.webm"
    ... )
"""

__version__ = "0.1.0"

# Public API exports
from telemost_recorder.config.settings import Settings
from telemost_recorder.recorder.models import RecordingRequest, RecordingResult
from telemost_recorder.recorder.orchestrator import TelemostRecorder, record_audio_from_telemost
from telemost_recorder.browsers.pool import BrowserPool

__all__ = [
    "TelemostRecorder",
    "record_audio_from_telemost",
    "RecordingRequest",
    "RecordingResult",
    "BrowserPool",
    "Settings",
    "__version__",
]
