"""
Recorder module - Joins a Telemost meeting and records its audio.
"""

from telemost_recorder.recorder.models import (
    EndReason,
    MonitorResult,
    RecorderStatus,
    RecordingProgress,
    RecordingRequest,
    RecordingResult,
)
from telemost_recorder.recorder.capture import CapturePipe
from telemost_recorder.recorder.monitor import MeetingEndMonitor
from telemost_recorder.recorder.orchestrator import TelemostRecorder, record_audio_from_telemost

__all__ = [
    "EndReason",
    "MonitorResult",
    "RecorderStatus",
    "RecordingProgress",
    "RecordingRequest",
    "RecordingResult",
    "CapturePipe",
    "MeetingEndMonitor",
    "TelemostRecorder",
    "record_audio_from_telemost",
]
