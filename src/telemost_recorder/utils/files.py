"""
Filesystem helpers for recordings.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

MIME_TYPES = {
    "webm": "audio/webm",
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "m4a": "audio/mp4",
}

AUDIO_EXTENSIONS = tuple(MIME_TYPES)


@dataclass(frozen=True)
class FileInfo:
    """Metadata of a recording file on disk."""
    path: str
    size: int
    mime_type: str
    created_at: datetime
    recording_id: str


def ensure_directory_exists(dir_path: PathLike) -> Path:
    """Create a directory (and parents) if it does not exist."""
    path = Path(dir_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def generate_file_name(file_format: str = "webm", prefix: str = "recording") -> str:
    """
    Generate a unique recording file name.

    Example:
        >>> generate_file_name("wav")
        'recording_1718000000000_1a2b3c4d.wav'
    """
    timestamp = int(time.time() * 1000)
    return f"{prefix}_{timestamp}_{uuid.uuid4().hex[:8]}.{file_format}"


def get_mime_type(file_format: str) -> str:
    """Get the MIME type for an audio file extension."""
    return MIME_TYPES.get(file_format.lower().lstrip("."), "application/octet-stream")


def get_file_info(file_path: PathLike) -> Optional[FileInfo]:
    """
    Stat a file.

    Returns:
        FileInfo, or None if the file does not exist or cannot be read
    """
    path = Path(file_path)
    try:
        stats = path.stat()
    except OSError:
        return None

    return FileInfo(
        path=str(path),
        size=stats.st_size,
        mime_type=get_mime_type(path.suffix),
        created_at=datetime.fromtimestamp(stats.st_ctime),
        recording_id=path.stem,
    )


def file_exists(file_path: PathLike) -> bool:
    """Check whether a regular file exists."""
    return Path(file_path).is_file()


def get_file_size(file_path: PathLike) -> int:
    """Get the size of a file in bytes, 0 if it cannot be read."""
    info = get_file_info(file_path)
    return info.size if info else 0


def delete_file(file_path: PathLike) -> bool:
    """
    Delete a file if it exists.

    Returns:
        True if a file was removed
    """
    path = Path(file_path)
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning(f"Could not delete {path}: {e}")
        return False


def list_files(directory: PathLike, file_filter: Optional[Callable[[Path], bool]] = None) -> List[Path]:
    """List regular files in a directory, optionally filtered."""
    path = Path(directory)
    if not path.is_dir():
        return []
    files = sorted(p for p in path.iterdir() if p.is_file())
    return [p for p in files if file_filter(p)] if file_filter else files


def get_audio_files(directory: PathLike) -> List[Path]:
    """List audio recordings in a directory."""
    return list_files(directory, lambda p: p.suffix.lower().lstrip(".") in AUDIO_EXTENSIONS)


def cleanup_old_files(directory: PathLike, max_age_seconds: float = 24 * 60 * 60) -> int:
    """
    Delete files older than max_age_seconds.

    Returns:
        Number of deleted files
    """
    now = time.time()
    deleted = 0
    for path in list_files(directory):
        try:
            age = now - path.stat().st_mtime
        except OSError:
            continue
        if age > max_age_seconds and delete_file(path):
            deleted += 1
    if deleted:
        logger.info(f"Removed {deleted} old files from {directory}")
    return deleted
