"""spicy - ROM image builder driving an external MIPS toolchain."""

from .config import BuildConfig, ToolchainConfig
from .errors import (
    BuildIOError,
    ExecutionError,
    MissingOutputError,
    SpicyError,
)
from .rom import CODE_START, RomImage
from .runner import ExecRunner, MappedFileRunner, OutputFileRunner, Runner
from .spec import Segment, Spec, Wave, parse_spec
from .staging import TempFileStager

__version__ = "0.1.0"

__all__ = [
    "BuildConfig",
    "ToolchainConfig",
    "SpicyError",
    "BuildIOError",
    "ExecutionError",
    "MissingOutputError",
    "CODE_START",
    "RomImage",
    "Runner",
    "ExecRunner",
    "OutputFileRunner",
    "MappedFileRunner",
    "Segment",
    "Spec",
    "Wave",
    "parse_spec",
    "TempFileStager",
]
