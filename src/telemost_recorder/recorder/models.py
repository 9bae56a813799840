"""
Recording data types - requests, results and progress snapshots.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from telemost_recorder.exceptions.base import ValidationError
from telemost_recorder.utils.validation import validate_recording_params


class EndReason(str, Enum):
    """Why an until-end recording stopped."""
    MAX_DURATION_REACHED = "max_duration_reached"
    NAVIGATION_DETECTED = "navigation_detected"
    LEFT_CONFERENCE = "left_conference"
    PAGE_ERROR = "page_error"
    PAGE_CLOSED = "page_closed"


@dataclass(frozen=True)
class MonitorResult:
    """Outcome of the meeting-end race."""
    duration_seconds: int
    reason: EndReason


@dataclass(frozen=True)
class RecordingProgress:
    """Progress snapshot of a fixed-duration recording."""
    seconds_elapsed: int
    total_seconds: int
    percentage: int

    @classmethod
    def create(cls, elapsed: float, total: int) -> "RecordingProgress":
        """Build a snapshot with elapsed clamped to [0, total]."""
        seconds = int(max(0, min(elapsed, total)))
        percentage = round(seconds / total * 100) if total > 0 else 100
        return cls(seconds_elapsed=seconds, total_seconds=total, percentage=percentage)


@dataclass(frozen=True)
class RecorderStatus:
    """Diagnostic view of a recorder instance."""
    instance_id: str
    is_initialized: bool
    is_recording: bool
    has_browser: bool
    has_page: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RecordingResult:
    """
    Outcome of one recording invocation.

    Attributes:
        success: Whether a non-empty recording was produced
        file_path: Where the audio was written
        duration_seconds: Recorded duration
        file_size: Size of the output file in bytes
        error: Failure message when success is False
        reason: Why an until-end recording stopped
    """
    success: bool
    file_path: Optional[str] = None
    duration_seconds: Optional[int] = None
    file_size: Optional[int] = None
    error: Optional[str] = None
    reason: Optional[EndReason] = None

    @classmethod
    def succeeded(
        cls,
        file_path: str,
        duration_seconds: int,
        file_size: int,
        reason: Optional[EndReason] = None,
    ) -> "RecordingResult":
        return cls(
            success=True,
            file_path=file_path,
            duration_seconds=duration_seconds,
            file_size=file_size,
            reason=reason,
        )

    @classmethod
    def failed(cls, error: str, file_path: Optional[str] = None) -> "RecordingResult":
        return cls(success=False, error=error, file_path=file_path)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.reason is not None:
            data["reason"] = self.reason.value
        return {k: v for k, v in data.items() if v is not None}


class RecordingRequest(BaseModel):
    """
    A validated recording request.

    Exactly one mode applies: a fixed duration, or until-end with a ceiling.
    Immutable once accepted.
    """
    model_config = ConfigDict(frozen=True)

    meeting_url: str
    output_path: str
    duration_seconds: Optional[int] = None
    until_end: bool = False
    max_duration_seconds: int = Field(default=7200, ge=10)
    file_format: Literal["webm", "mp3", "wav"] = "webm"

    @model_validator(mode="after")
    def _check(self) -> "RecordingRequest":
        result = validate_recording_params(
            self.meeting_url,
            duration=None if self.until_end else self.duration_seconds,
            file_format=self.file_format,
            output_path=self.output_path,
            max_duration=self.max_duration_seconds if self.until_end else None,
        )
        if not self.until_end and self.duration_seconds is None:
            result.errors.append("Duration is required unless recording until the meeting ends")
        if not result.is_valid:
            raise ValueError("; ".join(result.errors))
        return self

    @classmethod
    def from_params(cls, **params: Any) -> "RecordingRequest":
        """
        Build a request, raising our ValidationError with every failed check.

        Raises:
            ValidationError: If any parameter is invalid
        """
        try:
            return cls(**params)
        except PydanticValidationError as e:
            errors = []
            for err in e.errors():
                message = str(err["msg"]).removeprefix("Value error, ")
                loc = ".".join(str(p) for p in err["loc"])
                errors.extend(
                    [f"{loc}: {m}" if loc else m for m in message.split("; ")]
                )
            raise ValidationError("Invalid recording parameters", errors) from e
