"""
Unit tests for TempFileStager.
"""

import io
import tempfile
from pathlib import Path

import pytest

from spicy.errors import BuildIOError
from spicy.staging import TempFileStager


@pytest.fixture
def temp_dir(tmp_path, monkeypatch):
    """Redirect the process temp directory into tmp_path."""
    directory = tmp_path / "tmp"
    directory.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(directory))
    return directory


class TestTempFileStager:
    """Test suite for TempFileStager."""

    def test_stage_bytes(self, temp_dir):
        stager = TempFileStager()

        path = stager.stage(b"\x00\x01\xff", "data.bin")

        assert path.is_absolute()
        assert path.parent == temp_dir.resolve()
        assert path.read_bytes() == b"\x00\x01\xff"
        assert path.suffix == ".bin"
        assert path.name.startswith("data-")

    def test_stage_file_object(self, temp_dir):
        stager = TempFileStager()

        path = stager.stage(io.BytesIO(b"stream content"), "stream")

        assert path.read_bytes() == b"stream content"

    def test_colliding_hints_are_unique(self, temp_dir):
        stager = TempFileStager()

        paths = [stager.stage(str(i).encode(), "entry.o") for i in range(5)]

        assert len(set(paths)) == 5
        assert [p.read_bytes() for p in paths] == [b"0", b"1", b"2", b"3", b"4"]

    def test_hint_with_directories(self, temp_dir):
        stager = TempFileStager()

        path = stager.stage(b"x", "assets/sprites/hero.bin")

        assert path.parent == temp_dir.resolve()
        assert path.name.startswith("hero-")

    def test_reserve_creates_empty_file(self, temp_dir):
        stager = TempFileStager()

        path = stager.reserve("out.o")

        assert path.exists()
        assert path.read_bytes() == b""
        assert path in stager.paths

    def test_cleanup_removes_files(self, temp_dir):
        stager = TempFileStager()
        paths = [stager.stage(b"a", "a"), stager.reserve("b")]

        stager.cleanup()

        assert not any(p.exists() for p in paths)
        assert stager.paths == []

    def test_cleanup_ignores_already_removed(self, temp_dir):
        stager = TempFileStager()
        path = stager.stage(b"a", "a")
        path.unlink()

        stager.cleanup()

    def test_context_manager_cleans_up_on_error(self, temp_dir):
        with pytest.raises(RuntimeError):
            with TempFileStager() as stager:
                path = stager.stage(b"a", "a")
                raise RuntimeError("stage failed")

        assert not path.exists()
        assert list(temp_dir.iterdir()) == []

    def test_keep_leaves_files(self, temp_dir):
        with TempFileStager(keep=True) as stager:
            path = stager.stage(b"kept", "kept.s")

        assert path.read_bytes() == b"kept"

    def test_create_failure_raises_io_error(self, monkeypatch):
        def fail(*args, **kwargs):
            raise OSError("No space left on device")

        monkeypatch.setattr(tempfile, "mkstemp", fail)

        with pytest.raises(BuildIOError, match="No space left on device"):
            TempFileStager().stage(b"a", "a")

    def test_write_failure_leaves_no_file(self, temp_dir):
        class BrokenStream(io.RawIOBase):
            def readable(self):
                return True

            def readinto(self, buffer):
                raise OSError("read error")

        stager = TempFileStager()

        with pytest.raises(BuildIOError, match="read error"):
            stager.stage(BrokenStream(), "broken")

        assert list(temp_dir.iterdir()) == []
        assert stager.paths == []
