"""
Validation helpers for recording requests.

Each validator returns a ValidationResult instead of raising, so callers can
collect every problem before answering.
"""

import re
import uuid
from dataclasses import dataclass, field
from typing import Any, List, Optional
from urllib.parse import urlparse

MIN_DURATION = 10
MAX_DURATION = 3600
SUPPORTED_FORMATS = ("webm", "mp3", "wav")
TELEMOST_HOST = "telemost.yandex.ru"

_UNSAFE_PATH_CHARS = re.compile(r'[<>:"|?*]')


@dataclass
class ValidationResult:
    """Outcome of one or more checks."""
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def extend(self, other: "ValidationResult") -> None:
        self.errors.extend(other.errors)


def validate_meeting_url(url: Any) -> ValidationResult:
    """Check that a URL points at a Telemost meeting."""
    result = ValidationResult()
    if not url:
        result.errors.append("Meeting URL is required")
        return result
    if not isinstance(url, str):
        result.errors.append("Meeting URL must be a string")
        return result

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        result.errors.append("Meeting URL is malformed")
    elif not (parsed.hostname == TELEMOST_HOST or (parsed.hostname or "").endswith("." + TELEMOST_HOST)):
        result.errors.append("Meeting URL must be a Yandex Telemost link")
    return result


def validate_duration(duration: Any, min_duration: int = MIN_DURATION, max_duration: int = MAX_DURATION) -> ValidationResult:
    """Check that a duration is a whole number of seconds within bounds."""
    result = ValidationResult()
    if isinstance(duration, bool) or not isinstance(duration, (int, float)):
        result.errors.append("Duration must be a number")
        return result
    if duration != duration:  # NaN
        result.errors.append("Duration must be a valid number")
        return result
    if duration < min_duration:
        result.errors.append(f"Duration must be at least {min_duration} seconds")
    if duration > max_duration:
        result.errors.append(f"Duration must be at most {max_duration} seconds")
    if isinstance(duration, float) and not duration.is_integer():
        result.errors.append("Duration must be a whole number of seconds")
    return result


def validate_format(file_format: Any) -> ValidationResult:
    """Check that the output format is supported."""
    result = ValidationResult()
    if not file_format:
        result.errors.append("Audio format is required")
        return result
    if not isinstance(file_format, str):
        result.errors.append("Audio format must be a string")
        return result
    if file_format not in SUPPORTED_FORMATS:
        result.errors.append(f"Supported formats: {', '.join(SUPPORTED_FORMATS)}")
    return result


def validate_file_path(file_path: Any) -> ValidationResult:
    """Reject empty paths, unsafe characters and parent-directory traversal."""
    result = ValidationResult()
    if not file_path:
        result.errors.append("File path is required")
        return result
    if not isinstance(file_path, str):
        result.errors.append("File path must be a string")
        return result
    if _UNSAFE_PATH_CHARS.search(file_path):
        result.errors.append("File path contains unsafe characters")
    if file_path.startswith("..") or "/.." in file_path or "\\.." in file_path:
        result.errors.append("Relative parent paths are not allowed")
    return result


def validate_recording_id(recording_id: Any) -> ValidationResult:
    """Check that a recording id is a UUID."""
    result = ValidationResult()
    if not recording_id:
        result.errors.append("Recording id is required")
        return result
    try:
        uuid.UUID(str(recording_id))
    except ValueError:
        result.errors.append("Recording id must be a valid UUID")
    return result


def validate_recording_params(
    meeting_url: Any,
    duration: Optional[Any] = None,
    file_format: Optional[Any] = None,
    output_path: Optional[Any] = None,
    max_duration: Optional[Any] = None,
) -> ValidationResult:
    """
    Validate every parameter of a recording request.

    Optional parameters are only checked when given.
    """
    result = validate_meeting_url(meeting_url)
    if duration is not None:
        result.extend(validate_duration(duration))
    if max_duration is not None:
        result.extend(validate_duration(max_duration, max_duration=4 * MAX_DURATION))
    if file_format is not None:
        result.extend(validate_format(file_format))
    if output_path is not None:
        result.extend(validate_file_path(output_path))
    return result
