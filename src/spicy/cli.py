"""
Command-line interface for spicy.

This module provides the `spicy` CLI tool, a makerom-compatible ROM image
builder:

    spicy [options] <spec>
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from spicy import __version__
from spicy.build import RomBuildOrchestrator, Toolchain
from spicy.cli_utils import ErrorFormatter, setup_logging
from spicy.config import DEFAULT_TOOLCHAIN_PREFIX, BuildConfig, ToolchainConfig


def _parse_int(value: str) -> int:
    """Parse an integer in decimal or 0x-prefixed hex."""
    try:
        return int(value, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}")


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spicy",
        description="Build a ROM image from a spec file using an external MIPS toolchain",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"spicy {__version__}",
    )
    parser.add_argument(
        "spec",
        nargs="*",
        help="Build specification file",
    )
    parser.add_argument(
        "-d",
        "--verbose",
        action="store_true",
        help="Print verbose information and keep temporary files",
    )
    parser.add_argument(
        "-m",
        "--verbose-linking",
        "--verbose_linking",
        dest="verbose_linking",
        action="store_true",
        help="Print a link editor map when linking",
    )
    parser.add_argument(
        "-o",
        "--disable-overlapping-section-checks",
        "--disable_overlapping_section_checks",
        dest="disable_overlap_check",
        action="store_true",
        help="Disable checks for overlapping sections",
    )
    parser.add_argument(
        "-s",
        "--romsize",
        type=_parse_int,
        default=-1,
        help="ROM size (Mbit)",
    )
    parser.add_argument(
        "-f",
        "--filldata-byte",
        "--filldata_byte",
        dest="fill_byte",
        type=_parse_int,
        default=0x00,
        help="Fill byte for data in the ROM image (0x0 - 0xff)",
    )
    parser.add_argument(
        "-r",
        "--rom-name",
        "--rom_name",
        dest="rom_name",
        type=Path,
        default=Path("rom.n64"),
        help="Output ROM image filename (default: rom.n64)",
    )
    parser.add_argument(
        "-e",
        "--rom-elf-name",
        "--rom_elf_name",
        dest="elf_name",
        type=Path,
        default=Path("rom.out"),
        help="Output linked ELF filename (default: rom.out)",
    )
    parser.add_argument(
        "-D",
        "--define",
        action="append",
        default=[],
        help="Macro definition for the preprocessor",
    )
    parser.add_argument(
        "-I",
        "--include",
        action="append",
        default=[],
        help="Header search path for the preprocessor",
    )
    parser.add_argument(
        "-U",
        "--undefine",
        action="append",
        default=[],
        help="Macro to undefine in the preprocessor",
    )

    # Toolchain overrides
    parser.add_argument(
        "--toolchain-prefix",
        default=DEFAULT_TOOLCHAIN_PREFIX,
        help=f"Prefix of the toolchain commands (default: {DEFAULT_TOOLCHAIN_PREFIX})",
    )
    parser.add_argument("--cpp-command", "--cpp_command", dest="cpp_command", default=None,
                        help="Preprocessor (gcc driver) command to use")
    parser.add_argument("--as-command", "--as_command", dest="as_command", default=None,
                        help="Assembler command to use")
    parser.add_argument("--ld-command", "--ld_command", dest="ld_command", default=None,
                        help="Linker command to use")
    parser.add_argument("--objcopy-command", "--objcopy_command", dest="objcopy_command",
                        default=None, help="objcopy command to use")
    return parser


def config_from_args(parsed_args: argparse.Namespace) -> BuildConfig:
    """Build the immutable build configuration from parsed arguments.

    Raises:
        ValueError: If the number of spec arguments is not exactly one
    """
    if len(parsed_args.spec) != 1:
        if not parsed_args.spec:
            raise ValueError("missing argument: <spec>")
        raise ValueError(
            f"invalid usage: got {len(parsed_args.spec)} arguments, expected exactly 1"
        )

    toolchain = ToolchainConfig(
        prefix=parsed_args.toolchain_prefix,
        cpp_command=parsed_args.cpp_command,
        as_command=parsed_args.as_command,
        ld_command=parsed_args.ld_command,
        objcopy_command=parsed_args.objcopy_command,
    )
    return BuildConfig(
        spec_path=Path(parsed_args.spec[0]),
        rom_path=parsed_args.rom_name,
        elf_path=parsed_args.elf_name,
        rom_size_mbits=parsed_args.romsize,
        fill_byte=parsed_args.fill_byte,
        verbose=parsed_args.verbose,
        verbose_linking=parsed_args.verbose_linking,
        disable_overlap_check=parsed_args.disable_overlap_check,
        defines=tuple(parsed_args.define),
        include_paths=tuple(parsed_args.include),
        undefines=tuple(parsed_args.undefine),
        toolchain=toolchain,
    )


def build_command(config: BuildConfig) -> None:
    """Build the ROM image described by config and exit."""
    try:
        missing = Toolchain.find_missing(config.toolchain)
        if missing:
            ErrorFormatter.print_warning(f"Toolchain commands not found on PATH: {', '.join(missing)}")

        result = RomBuildOrchestrator(config).build()

        if result.success:
            if config.verbose:
                ErrorFormatter.print_success("Build successful!")
                print(f"ROM image: {result.rom_path} ({result.rom_size:,} bytes)")
                print(f"Build time: {result.build_time:.2f}s")
            sys.exit(0)
        else:
            ErrorFormatter.print_error("Build failed!", f"Error: {result.message}")
            sys.exit(1)

    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, config.verbose)


def main(argv: Optional[List[str]] = None) -> None:
    """spicy - build a ROM image from a spec file."""
    parser = create_parser()
    parsed_args = parser.parse_args(argv)

    setup_logging(parsed_args.verbose)

    try:
        config = config_from_args(parsed_args)
    except ValueError as e:
        ErrorFormatter.handle_usage_error(str(e))
        return

    build_command(config)


if __name__ == "__main__":
    main()
