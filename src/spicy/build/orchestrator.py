"""
ROM build orchestration.

This module coordinates a complete ROM build, from the spec file to the
output image:
- Reading and preprocessing the spec (gcc -E)
- Parsing segments and waves
- Wrapping raw includes as objects (ld -b binary)
- Assembling each wave's entry stub (as)
- Linking each wave (ld)
- Converting each linked wave to a flat binary (objcopy)
- Writing binaries into the ROM image and saving it, padded to size
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple

from ..config import BuildConfig
from ..errors import (
    AllocationError,
    BinarizeError,
    BuildIOError,
    EntryError,
    LinkError,
    ParseError,
    PreprocessError,
    SpicyError,
    WrapError,
)
from ..rom import CODE_START, RomImage
from ..spec import Spec, Wave, parse_spec
from ..staging import TempFileStager
from .stages import (
    binarize_object,
    create_entry_binary,
    create_raw_object_wrapper,
    link_spec,
    preprocess_spec,
)
from .toolchain import Toolchain


@dataclass
class BuildResult:
    """Result of a complete ROM build."""

    success: bool
    rom_path: Optional[Path]
    elf_path: Optional[Path]
    rom_size: Optional[int]
    wave_count: int
    build_time: float
    message: str


class RomBuildOrchestrator:
    """
    Orchestrates the build of one ROM image.

    Phases, strictly in order and fail-fast:
    1. Read the spec file
    2. Preprocess it with the C preprocessor
    3. Parse segments and waves
    4. Create the blank ROM image
    5. For each wave: wrap raw includes, assemble the entry stub, link,
       binarize, and write the binary at CODE_START
    6. Save the image, padded to the requested size

    Every wave is written at the same CODE_START offset, so with several
    waves only the last one survives in the image.

    Example usage:
        config = BuildConfig(spec_path=Path("spec"), rom_size_mbits=8)
        result = RomBuildOrchestrator(config).build()
        if result.success:
            print(f"ROM: {result.rom_path} ({result.rom_size} bytes)")
    """

    def __init__(
        self,
        config: BuildConfig,
        toolchain: Optional[Toolchain] = None,
        spec_parser: Callable[[str], Spec] = parse_spec
    ):
        """
        Initialize orchestrator.

        Args:
            config: Build configuration
            toolchain: Tool runners (defaults to the ones named in config)
            spec_parser: Function turning preprocessed text into a Spec
        """
        self.config = config
        self.toolchain = toolchain or Toolchain.from_config(config.toolchain)
        self.spec_parser = spec_parser

    def build(self) -> BuildResult:
        """
        Execute the complete build.

        Returns:
            BuildResult with build status and output paths; on failure the
            message names the stage that failed and why
        """
        start_time = time.time()

        try:
            # The stager owns every temp file of the run and removes them
            # on exit, successful or not
            with TempFileStager(keep=self.config.verbose) as stager:
                rom_size, wave_count = self._run(stager)

            build_time = time.time() - start_time
            logging.info(f"Build complete in {build_time:.2f}s")
            return BuildResult(
                success=True,
                rom_path=self.config.rom_path,
                elf_path=self.config.elf_path if wave_count else None,
                rom_size=rom_size,
                wave_count=wave_count,
                build_time=build_time,
                message="Build successful"
            )

        except SpicyError as e:
            return BuildResult(
                success=False,
                rom_path=None,
                elf_path=None,
                rom_size=None,
                wave_count=0,
                build_time=time.time() - start_time,
                message=str(e)
            )
        except Exception as e:
            return BuildResult(
                success=False,
                rom_path=None,
                elf_path=None,
                rom_size=None,
                wave_count=0,
                build_time=time.time() - start_time,
                message=f"Unexpected error: {e}"
            )

    def _run(self, stager: TempFileStager) -> Tuple[int, int]:
        logging.info("[1/6] Reading spec...")
        source = self._read_spec()

        logging.info("[2/6] Preprocessing spec...")
        text = self._preprocess(source)

        logging.info("[3/6] Parsing spec...")
        spec = self._parse(text)
        logging.info(f"      {len(spec.segments)} segments, {len(spec.waves)} waves")

        logging.info("[4/6] Creating ROM image...")
        rom = self._create_rom()

        logging.info("[5/6] Building waves...")
        for index, wave in enumerate(spec.waves, start=1):
            logging.info(f"      Wave {index}/{len(spec.waves)}: {wave.name}")
            self._build_wave(wave, rom, stager)

        logging.info("[6/6] Writing ROM...")
        rom_size = self._write_rom(rom)
        logging.info(f"      {self.config.rom_path}: {rom_size} bytes")

        return rom_size, len(spec.waves)

    def _read_spec(self) -> bytes:
        try:
            return Path(self.config.spec_path).read_bytes()
        except OSError as e:
            raise BuildIOError(f"could not open spec: {e}") from e

    def _preprocess(self, source: bytes) -> str:
        try:
            return preprocess_spec(
                source,
                self.toolchain.cpp,
                self.config.include_paths,
                self.config.defines,
                self.config.undefines
            )
        except SpicyError as e:
            raise PreprocessError(f"could not preprocess spec: {e}") from e

    def _parse(self, text: str) -> Spec:
        try:
            return self.spec_parser(text)
        except SpicyError as e:
            raise ParseError(f"could not parse spec: {e}") from e

    def _create_rom(self) -> RomImage:
        try:
            return RomImage(self.config.fill_byte)
        except AllocationError as e:
            raise AllocationError(f"could not create ROM image: {e}") from e

    def _build_wave(self, wave: Wave, rom: RomImage, stager: TempFileStager) -> None:
        self._wrap_raw_segments(wave, stager)

        try:
            entry = create_entry_binary(wave, self.toolchain.assembler, stager)
        except SpicyError as e:
            raise EntryError(f"could not create entry binary for wave '{wave.name}': {e}") from e

        try:
            linked_object = link_spec(
                wave,
                self.toolchain.linker,
                entry,
                self.config.elf_path,
                stager,
                verbose_linking=self.config.verbose_linking,
                disable_overlap_check=self.config.disable_overlap_check
            )
        except SpicyError as e:
            raise LinkError(f"could not link wave '{wave.name}': {e}") from e

        try:
            binary = binarize_object(linked_object, self.toolchain.objcopy, stager)
        except SpicyError as e:
            raise BinarizeError(f"could not binarize wave '{wave.name}': {e}") from e

        try:
            rom.write_at(binary, CODE_START)
        except SpicyError as e:
            raise BuildIOError(f"could not write ROM: {e}") from e
        logging.debug(f"Wave {wave.name}: {len(binary)} bytes at 0x{CODE_START:x}")

    def _wrap_raw_segments(self, wave: Wave, stager: TempFileStager) -> None:
        for seg in wave.raw_segments:
            for include in seg.includes:
                try:
                    data = Path(include).read_bytes()
                except OSError as e:
                    raise BuildIOError(f"could not open include: {e}") from e

                try:
                    create_raw_object_wrapper(
                        data, f"{include}.o", self.toolchain.linker, keep_temp_files=stager.keep
                    )
                except SpicyError as e:
                    raise WrapError(f"could not wrap include '{include}': {e}") from e

    def _write_rom(self, rom: RomImage) -> int:
        rom_path = Path(self.config.rom_path)
        try:
            out = open(rom_path, "wb")
        except OSError as e:
            raise BuildIOError(f"could not create ROM: {e}") from e

        try:
            with out:
                min_size = self.config.min_rom_size
                if min_size is not None:
                    # Pad by writing one zero byte at min_size
                    out.seek(min_size)
                    out.write(b"\x00")
                    out.seek(0)
                rom.save(out)
            return rom_path.stat().st_size
        except OSError as e:
            raise BuildIOError(f"could not write ROM: {e}") from e
