"""
Utilities module - Logging, filesystem and validation helpers.
"""

from telemost_recorder.utils.logging import setup_logging, get_logger, InstanceLoggerAdapter
from telemost_recorder.utils.files import (
    FileInfo,
    ensure_directory_exists,
    generate_file_name,
    get_file_info,
    get_mime_type,
    delete_file,
)
from telemost_recorder.utils.validation import ValidationResult, validate_recording_params

__all__ = [
    "setup_logging",
    "get_logger",
    "InstanceLoggerAdapter",
    "FileInfo",
    "ensure_directory_exists",
    "generate_file_name",
    "get_file_info",
    "get_mime_type",
    "delete_file",
    "ValidationResult",
    "validate_recording_params",
]
