"""Pipeline stages.

Each stage turns its inputs into a toolchain invocation and returns the
tool's product as bytes:

    preprocess_spec            gcc -E        spec source -> spec text
    create_raw_object_wrapper  ld -b binary  raw include -> <include>.o
    create_entry_binary        as            entry stub  -> entry object
    link_spec                  ld -T         wave        -> linked ELF
    binarize_object            objcopy       linked ELF  -> flat binary

Stages raise the runner's errors unchanged; the orchestrator wraps them with
the stage that failed.
"""

from pathlib import Path
from typing import Iterable, List, Union

from ..errors import BuildIOError, EntryError
from ..runner import MappedFileRunner, OutputFileRunner, Runner
from ..spec import Wave
from ..staging import TempFileStager

# Address the boot segment is linked at (KSEG0, just past the exception vectors)
BOOT_ADDRESS = 0x80000400

# Argument tokens substituted with staged temp files
RAW_INPUT_TOKEN = "raw.bin"
ENTRY_SOURCE_TOKEN = "entry.s"
LINKED_OBJECT_TOKEN = "linked.elf"

ENTRY_TEMPLATE = """\
\t.section .text.entry, "ax"
\t.set noreorder
\t.global _start
_start:
{stack}\tj\t{entry}
\tnop
"""

CODE_SECTIONS = ".text .text.* .rodata .rodata.* .data .data.* .sdata .sdata.*"
BSS_SECTIONS = ".sbss .sbss.* .bss .bss.* COMMON"


def preprocess_spec(
    source: Union[str, bytes],
    runner: Runner,
    include_paths: Iterable[str] = (),
    defines: Iterable[str] = (),
    undefines: Iterable[str] = ()
) -> str:
    """Run the spec source through the C preprocessor.

    Args:
        source: Spec file content
        runner: Runner for the gcc driver
        include_paths: Header search paths (-I)
        defines: Macro definitions, "NAME" or "NAME=VALUE" (-D)
        undefines: Macros to undefine (-U)

    Returns:
        Preprocessed spec text
    """
    if isinstance(source, str):
        source = source.encode("utf-8")

    args = ["-E", "-P", "-x", "c"]
    args.extend(f"-I{path}" for path in include_paths)
    args.extend(f"-D{define}" for define in defines)
    args.extend(f"-U{undefine}" for undefine in undefines)
    args.append("-")

    return runner.run(source, args).decode("utf-8", errors="replace")


def create_raw_object_wrapper(
    data: bytes,
    output_name: Union[str, Path],
    runner: Runner,
    keep_temp_files: bool = False
) -> bytes:
    """Wrap raw bytes as a relocatable object with ld -b binary.

    The object is written to output_name, where the linker script of the
    wave picks it up.

    Returns:
        The content of the new object file
    """
    output_name = str(output_name)
    wrapper = MappedFileRunner(
        runner, {RAW_INPUT_TOKEN: data}, output_name, keep_temp_files=keep_temp_files
    )
    return wrapper.run(None, ["-r", "-b", "binary", "-o", output_name, RAW_INPUT_TOKEN])


def generate_entry_source(wave: Wave) -> str:
    """Generate the assembly stub that sets up the stack and jumps to entry.

    Raises:
        EntryError: If the wave has no segment with an entry point
    """
    boot = wave.boot_segment
    if boot is None or not boot.entry:
        raise EntryError(f"wave '{wave.name}' has no boot segment with an entry point")

    stack = f"\tla\t$sp, {boot.stack}\n" if boot.stack else ""
    return ENTRY_TEMPLATE.format(stack=stack, entry=boot.entry)


def create_entry_binary(wave: Wave, runner: Runner, stager: TempFileStager) -> bytes:
    """Assemble the wave's entry stub.

    Returns:
        The assembled entry object
    """
    source = generate_entry_source(wave).encode("utf-8")
    output = stager.reserve("entry.o")
    assembler = MappedFileRunner(
        runner, {ENTRY_SOURCE_TOKEN: source}, output, keep_temp_files=stager.keep
    )
    return assembler.run(
        None,
        ["-march=vr4300", "-mtune=vr4300", "-o", str(output), ENTRY_SOURCE_TOKEN],
    )


def object_files(wave: Wave) -> List[str]:
    """Object files linked into a wave, in segment order.

    Raw segment includes are linked through their wrapper objects.
    """
    objects = []
    for seg in wave.segments:
        for include in seg.includes:
            objects.append(f"{include}.o" if seg.is_raw else include)
    return objects


def generate_linker_script(wave: Wave) -> str:
    """Generate a linker script placing the wave's segments in order."""
    lines = [
        f"/* wave: {wave.name} */",
        "OUTPUT_ARCH(mips)",
        "ENTRY(_start)",
    ]
    objects = object_files(wave)
    if objects:
        lines.append("INPUT(" + " ".join(f'"{obj}"' for obj in objects) + ")")

    lines.append("SECTIONS")
    lines.append("{")
    lines.append(f"    . = 0x{BOOT_ADDRESS:08x};")
    lines.append("    .entry : { *(.text.entry) }")
    for seg in wave.segments:
        includes = [f"{inc}.o" if seg.is_raw else inc for inc in seg.includes]
        code = " ".join(f'"{inc}"({CODE_SECTIONS})' for inc in includes)
        bss = " ".join(f'"{inc}"({BSS_SECTIONS})' for inc in includes)
        lines.append(f"    .{seg.name} : {{ {code} }}")
        lines.append(f"    .{seg.name}.bss (NOLOAD) : {{ {bss} }}")
    lines.append("    /DISCARD/ : { *(.MIPS.abiflags .reginfo .pdr .comment .gnu.attributes) }")
    lines.append("}")
    return "\n".join(lines) + "\n"


def link_spec(
    wave: Wave,
    runner: Runner,
    entry: bytes,
    elf_path: Union[str, Path],
    stager: TempFileStager,
    verbose_linking: bool = False,
    disable_overlap_check: bool = False
) -> bytes:
    """Link a wave into an ELF file at elf_path.

    Args:
        wave: Wave to link
        runner: Runner for ld
        entry: Assembled entry object
        elf_path: Where ld writes the linked object
        stager: Stager for the linker script and entry object
        verbose_linking: Ask ld for a link map (-M)
        disable_overlap_check: Skip ld's section overlap check

    Returns:
        The linked ELF object
    """
    elf_path = Path(elf_path)
    try:
        elf_path.unlink(missing_ok=True)
    except OSError as e:
        raise BuildIOError(f"could not remove stale {elf_path}: {e}") from e

    script = stager.stage(generate_linker_script(wave).encode("utf-8"), "link.ld")
    entry_object = stager.stage(entry, "entry.o")

    args: List[str] = ["-T", str(script), "-o", str(elf_path)]
    if verbose_linking:
        args.append("-M")
    if disable_overlap_check:
        args.append("--no-check-sections")
    args.append(str(entry_object))

    return OutputFileRunner(runner, elf_path).run(None, args)


def binarize_object(linked: bytes, runner: Runner, stager: TempFileStager) -> bytes:
    """Convert a linked object to a flat binary with objcopy -O binary."""
    output = stager.reserve("binary.bin")
    objcopy = MappedFileRunner(
        runner, {LINKED_OBJECT_TOKEN: linked}, output, keep_temp_files=stager.keep
    )
    return objcopy.run(None, ["-O", "binary", LINKED_OBJECT_TOKEN, str(output)])
