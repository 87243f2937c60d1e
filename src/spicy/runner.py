"""Command runners for external toolchain programs.

A Runner executes an external program over a byte stream and returns the
program's output as bytes. There are three variants, composed by delegation:

    ExecRunner        - runs the program, feeds stdin, returns stdout
    OutputFileRunner  - runs an inner runner, returns a fixed output file
    MappedFileRunner  - stages mapped input streams to temp files, substitutes
                        their paths into the arguments, runs an inner runner
                        and returns the file named by its output argument

Example:
    ld = ExecRunner("mips64-elf-ld")
    wrap = MappedFileRunner(ld, {"input.bin": data}, "input.o")
    obj = wrap.run(None, ["-r", "-b", "binary", "-o", "input.o", "input.bin"])
"""

import logging
import shlex
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Union

from .errors import BuildIOError, ExecutionError, MissingOutputError
from .staging import Stream, TempFileStager


def log_command(command: str, args: Sequence[str]) -> None:
    """Log the shell-quoted command line about to be executed."""
    logging.info(f"Running {shlex.join([command, *args])}")


class Runner(ABC):
    """Interface for running an external program over a byte stream."""

    @abstractmethod
    def run(self, stdin: Optional[bytes], args: Sequence[str]) -> bytes:
        """Run the program.

        Args:
            stdin: Bytes fed to standard input (None for empty input)
            args: Program arguments, not including the program itself

        Returns:
            The program's output

        Raises:
            SpicyError: If the program or its output handling fails
        """
        pass


class ExecRunner(Runner):
    """Runs a program directly, capturing stdout and stderr."""

    def __init__(self, command: str):
        self.command = command

    def run(self, stdin: Optional[bytes], args: Sequence[str]) -> bytes:
        log_command(self.command, args)
        try:
            result = subprocess.run(
                [self.command, *args],
                input=stdin if stdin is not None else b"",
                capture_output=True,
            )
        except OSError as e:
            raise ExecutionError(self.command, None, str(e)) from e

        if logging.getLogger().isEnabledFor(logging.DEBUG):
            logging.debug(f"stdout: {result.stdout.decode('utf-8', errors='replace')}")
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace")
            raise ExecutionError(self.command, result.returncode, stderr)
        return result.stdout

    def __repr__(self) -> str:
        return f"ExecRunner({self.command!r})"


class OutputFileRunner(Runner):
    """Runs an inner runner and returns the content of a known output file."""

    def __init__(self, runner: Runner, output_file: Union[str, Path]):
        self.runner = runner
        self.output_file = Path(output_file)

    def run(self, stdin: Optional[bytes], args: Sequence[str]) -> bytes:
        self.runner.run(stdin, args)
        try:
            return self.output_file.read_bytes()
        except OSError as e:
            raise MissingOutputError(self.output_file, str(e)) from e


def _read_stream(stream: Stream) -> bytes:
    if isinstance(stream, (bytes, bytearray, memoryview)):
        return bytes(stream)
    try:
        return stream.read()
    except OSError as e:
        raise BuildIOError(f"could not read input stream: {e}") from e


class MappedFileRunner(Runner):
    """Substitutes staged temp file paths for mapped argument tokens.

    Each argument exactly equal to a key of `input_files` is replaced by the
    absolute path of a temp file holding that key's stream. A key repeated in
    the arguments maps to the same temp file. Temp files live until run()
    returns or raises.
    """

    def __init__(
        self,
        runner: Runner,
        input_files: Mapping[str, Stream],
        output_file_arg: Union[str, Path],
        keep_temp_files: bool = False
    ):
        """Initialize mapped runner.

        Args:
            runner: Runner that executes the rewritten command
            input_files: Argument token to stream mapping
            output_file_arg: Literal path the tool writes its output to
            keep_temp_files: Leave staged inputs on disk after the run
        """
        self.runner = runner
        # File objects are read once so every run stages the same content
        self.input_files: Dict[str, bytes] = {
            token: _read_stream(stream) for token, stream in input_files.items()
        }
        self.output_file_arg = str(output_file_arg)
        self.keep_temp_files = keep_temp_files

    def run(self, stdin: Optional[bytes], args: Sequence[str]) -> bytes:
        with TempFileStager(keep=self.keep_temp_files) as stager:
            staged: Dict[str, str] = {}
            new_args = []
            for arg in args:
                if arg in self.input_files:
                    if arg not in staged:
                        staged[arg] = str(stager.stage(self.input_files[arg], arg))
                    new_args.append(staged[arg])
                else:
                    new_args.append(arg)

            self.runner.run(stdin, new_args)

        try:
            return Path(self.output_file_arg).read_bytes()
        except OSError as e:
            raise BuildIOError(f"could not read {self.output_file_arg}: {e}") from e
