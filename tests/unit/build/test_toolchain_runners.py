"""
Unit tests for Toolchain resolution and the missing tool check.
"""

import shutil

from spicy.build.toolchain import Toolchain
from spicy.config import ToolchainConfig
from spicy.runner import ExecRunner


class TestToolchain:
    """Test suite for Toolchain."""

    def test_from_config(self):
        toolchain = Toolchain.from_config(ToolchainConfig(prefix="mips-n64-", as_command="/opt/as"))

        assert isinstance(toolchain.cpp, ExecRunner)
        assert toolchain.cpp.command == "mips-n64-gcc"
        assert toolchain.assembler.command == "/opt/as"
        assert toolchain.objcopy.command == "mips-n64-objcopy"

    def test_get_all_tools(self):
        tools = Toolchain.get_all_tools(ToolchainConfig())

        assert tools == {
            "cpp": "mips64-elf-gcc",
            "as": "mips64-elf-as",
            "ld": "mips64-elf-ld",
            "objcopy": "mips64-elf-objcopy",
        }

    def test_find_missing(self, monkeypatch):
        present = {"mips64-elf-gcc", "mips64-elf-as"}
        monkeypatch.setattr(shutil, "which", lambda cmd: f"/usr/bin/{cmd}" if cmd in present else None)

        assert Toolchain.find_missing(ToolchainConfig()) == ["mips64-elf-ld", "mips64-elf-objcopy"]

    def test_nothing_missing(self, monkeypatch):
        monkeypatch.setattr(shutil, "which", lambda cmd: f"/usr/bin/{cmd}")

        assert Toolchain.find_missing(ToolchainConfig()) == []
