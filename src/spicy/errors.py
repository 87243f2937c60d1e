"""Exception hierarchy for spicy.

All errors raised by the runners, the stager and the build pipeline derive
from SpicyError, so the orchestrator can turn any of them into a failed
BuildResult with a single except clause.

    SpicyError
    ├── BuildIOError        - file open/read/write failures
    ├── ExecutionError      - external tool exited nonzero or could not start
    ├── MissingOutputError  - tool succeeded but its output file is absent
    └── StageError          - pipeline stage failures
        ├── PreprocessError
        ├── ParseError
        ├── AllocationError
        ├── WrapError
        ├── EntryError
        ├── LinkError
        └── BinarizeError
"""

from pathlib import Path
from typing import Optional, Union


class SpicyError(Exception):
    """Base exception for all spicy errors."""
    pass


class BuildIOError(SpicyError):
    """Raised when a file or stream cannot be opened, read or written."""
    pass


class ExecutionError(SpicyError):
    """Raised when an external tool fails.

    Attributes:
        command: Program name or path that was run
        returncode: Exit status, or None if the process could not be spawned
        stderr: Full captured standard error text
    """

    def __init__(self, command: str, returncode: Optional[int], stderr: str):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        if returncode is None:
            status = "could not start"
        else:
            status = f"exit status {returncode}"
        super().__init__(f"Error running '{command}': {status}: {stderr}")


class MissingOutputError(SpicyError):
    """Raised when a tool exits successfully but its output file is absent."""

    def __init__(self, path: Union[str, Path], reason: str = ""):
        self.path = Path(path)
        message = f"expected output file not produced: {self.path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class StageError(SpicyError):
    """Base class for failures of a single pipeline stage."""
    pass


class PreprocessError(StageError):
    pass


class ParseError(StageError):
    pass


class AllocationError(StageError):
    """Raised when the ROM image cannot be created."""
    pass


class WrapError(StageError):
    """Raised when a raw include cannot be wrapped as a linkable object."""
    pass


class EntryError(StageError):
    pass


class LinkError(StageError):
    pass


class BinarizeError(StageError):
    pass
