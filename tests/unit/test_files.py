"""
Tests for filesystem helpers.
"""

import os
import re
import time

from telemost_recorder.utils.files import (
    cleanup_old_files,
    delete_file,
    ensure_directory_exists,
    file_exists,
    generate_file_name,
    get_audio_files,
    get_file_info,
    get_file_size,
    get_mime_type,
    list_files,
)


class TestFileNames:
    """Test naming and MIME helpers."""

    def test_generate_file_name(self):
        name = generate_file_name("wav")
        assert re.fullmatch(r"recording_\d+_[0-9a-f]{8}\.wav", name)

    def test_generated_names_are_unique(self):
        assert generate_file_name() != generate_file_name()

    def test_prefix(self):
        assert generate_file_name("webm", prefix="meeting").startswith("meeting_")

    def test_mime_types(self):
        assert get_mime_type("webm") == "audio/webm"
        assert get_mime_type(".MP3") == "audio/mpeg"
        assert get_mime_type("xyz") == "application/octet-stream"


class TestFileOperations:
    """Test stat, list and delete helpers."""

    def test_ensure_directory_exists(self, tmp_path):
        path = ensure_directory_exists(tmp_path / "a" / "b")
        assert path.is_dir()
        # Idempotent
        ensure_directory_exists(path)

    def test_file_info(self, tmp_path):
        path = tmp_path / "recording_1.webm"
        path.write_bytes(b"12345")

        info = get_file_info(path)

        assert info.size == 5
        assert info.mime_type == "audio/webm"
        assert info.recording_id == "recording_1"
        assert get_file_size(path) == 5
        assert file_exists(path)

    def test_missing_file(self, tmp_path):
        path = tmp_path / "missing.webm"

        assert get_file_info(path) is None
        assert get_file_size(path) == 0
        assert not file_exists(path)
        assert delete_file(path) is False

    def test_delete_file(self, tmp_path):
        path = tmp_path / "out.webm"
        path.write_bytes(b"x")

        assert delete_file(path) is True
        assert not path.exists()

    def test_list_files(self, tmp_path):
        (tmp_path / "b.webm").write_bytes(b"")
        (tmp_path / "a.wav").write_bytes(b"")
        (tmp_path / "notes.txt").write_bytes(b"")
        (tmp_path / "sub").mkdir()

        assert [p.name for p in list_files(tmp_path)] == ["a.wav", "b.webm", "notes.txt"]
        assert [p.name for p in get_audio_files(tmp_path)] == ["a.wav", "b.webm"]
        assert list_files(tmp_path / "missing") == []

    def test_cleanup_old_files(self, tmp_path):
        old = tmp_path / "old.webm"
        new = tmp_path / "new.webm"
        old.write_bytes(b"")
        new.write_bytes(b"")
        two_days_ago = time.time() - 2 * 24 * 60 * 60
        os.utime(old, (two_days_ago, two_days_ago))

        assert cleanup_old_files(tmp_path) == 1
        assert not old.exists()
        assert new.exists()
