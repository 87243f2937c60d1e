"""Temporary file staging.

Some tools only accept file paths, so in-memory byte streams have to be
written to disk before the tool can read them. TempFileStager does that and
remembers every file it created so they can all be removed when the scope
that needed them ends:

    with TempFileStager() as stager:
        path = stager.stage(script_bytes, "link.ld")
        run_tool(["-T", str(path)])
    # path is gone here, whether run_tool succeeded or raised
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO, List, Tuple, Union

from .errors import BuildIOError

Stream = Union[bytes, bytearray, memoryview, BinaryIO]


def _split_hint(name_hint: str) -> Tuple[str, str]:
    """Turn a name hint into a (prefix, suffix) pair safe for mkstemp."""
    name = name_hint.replace("\\", "/").rstrip("/").split("/")[-1]
    stem, suffix = os.path.splitext(name)
    stem = stem or "spicy"
    return f"{stem}-", suffix


class TempFileStager:
    """Creates uniquely named temp files and deletes them on cleanup."""

    def __init__(self, keep: bool = False):
        """Initialize stager.

        Args:
            keep: Leave staged files on disk after cleanup (for debugging)
        """
        self.keep = keep
        self._paths: List[Path] = []

    @property
    def paths(self) -> List[Path]:
        """Paths staged or reserved so far and not yet cleaned up."""
        return list(self._paths)

    def stage(self, stream: Stream, name_hint: str) -> Path:
        """Write a byte stream to a new temp file.

        Args:
            stream: Bytes or a binary file object to copy
            name_hint: Name the temp file is derived from; need not be unique

        Returns:
            Absolute path of the new file

        Raises:
            BuildIOError: If the file cannot be created or written
        """
        prefix, suffix = _split_hint(name_hint)
        try:
            fd, name = tempfile.mkstemp(prefix=prefix, suffix=suffix)
        except OSError as e:
            raise BuildIOError(f"could not create temp file for {name_hint}: {e}") from e

        path = Path(name).resolve()
        try:
            with os.fdopen(fd, "wb") as f:
                if isinstance(stream, (bytes, bytearray, memoryview)):
                    f.write(stream)
                else:
                    shutil.copyfileobj(stream, f)
        except OSError as e:
            path.unlink(missing_ok=True)
            raise BuildIOError(f"could not write temp file {path}: {e}") from e

        self._paths.append(path)
        logging.debug(f"Writing file for {name_hint} to {path}")
        return path

    def reserve(self, name_hint: str) -> Path:
        """Allocate an empty temp file for a tool to write its output into."""
        return self.stage(b"", name_hint)

    def cleanup(self) -> None:
        """Delete every file created by this stager."""
        paths, self._paths = self._paths, []
        for path in paths:
            if self.keep:
                logging.info(f"Keeping temporary file {path}")
                continue
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logging.warning(f"Failed to remove temporary file {path}: {e}")

    def __enter__(self) -> "TempFileStager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()
