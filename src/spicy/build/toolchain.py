"""Toolchain runners.

Resolves the preprocessor, assembler, linker and objcopy programs named by a
ToolchainConfig into Runner instances used by the build stages.
"""

import shutil
from dataclasses import dataclass
from typing import Dict, List

from ..config import ToolchainConfig
from ..runner import ExecRunner, Runner


@dataclass
class Toolchain:
    """The four external programs the build pipeline drives."""

    cpp: Runner
    assembler: Runner
    linker: Runner
    objcopy: Runner

    @classmethod
    def from_config(cls, config: ToolchainConfig) -> "Toolchain":
        """Create direct runners for every tool named in the config."""
        return cls(
            cpp=ExecRunner(config.cpp),
            assembler=ExecRunner(config.assembler),
            linker=ExecRunner(config.linker),
            objcopy=ExecRunner(config.objcopy),
        )

    @staticmethod
    def get_all_tools(config: ToolchainConfig) -> Dict[str, str]:
        """Map tool roles to the command names the config resolves to."""
        return {
            "cpp": config.cpp,
            "as": config.assembler,
            "ld": config.linker,
            "objcopy": config.objcopy,
        }

    @staticmethod
    def find_missing(config: ToolchainConfig) -> List[str]:
        """Return the configured commands that cannot be found on PATH."""
        return [
            command for command in Toolchain.get_all_tools(config).values()
            if shutil.which(command) is None
        ]
