"""Build configuration.

The CLI builds one BuildConfig from the command line and hands it to the
orchestrator; nothing else reads command-line state.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

DEFAULT_TOOLCHAIN_PREFIX = "mips64-elf-"


@dataclass(frozen=True)
class ToolchainConfig:
    """Names or paths of the external toolchain programs.

    Any command left as None is derived from the prefix, e.g. the default
    linker is "mips64-elf-ld".
    """

    prefix: str = DEFAULT_TOOLCHAIN_PREFIX
    cpp_command: Optional[str] = None
    as_command: Optional[str] = None
    ld_command: Optional[str] = None
    objcopy_command: Optional[str] = None

    @property
    def cpp(self) -> str:
        # Preprocessing goes through the gcc driver (gcc -E)
        return self.cpp_command or f"{self.prefix}gcc"

    @property
    def assembler(self) -> str:
        return self.as_command or f"{self.prefix}as"

    @property
    def linker(self) -> str:
        return self.ld_command or f"{self.prefix}ld"

    @property
    def objcopy(self) -> str:
        return self.objcopy_command or f"{self.prefix}objcopy"


@dataclass(frozen=True)
class BuildConfig:
    """Immutable settings for one ROM build."""

    spec_path: Path
    rom_path: Path = Path("rom.n64")
    elf_path: Path = Path("rom.out")
    rom_size_mbits: int = -1
    fill_byte: int = 0x00
    verbose: bool = False
    verbose_linking: bool = False
    disable_overlap_check: bool = False
    defines: Tuple[str, ...] = ()
    include_paths: Tuple[str, ...] = ()
    undefines: Tuple[str, ...] = ()
    toolchain: ToolchainConfig = field(default_factory=ToolchainConfig)

    @property
    def min_rom_size(self) -> Optional[int]:
        """Minimum output size in bytes, or None if no size was requested."""
        if self.rom_size_mbits > 0:
            return 1000000 * self.rom_size_mbits // 8
        return None
