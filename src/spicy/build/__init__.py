"""
Build pipeline for spicy.

This module provides the ROM build pipeline including:
- Toolchain runner resolution (gcc, as, ld, objcopy)
- Pipeline stages (preprocess, wrap, assemble, link, binarize)
- Build orchestration
"""

from .orchestrator import BuildResult, RomBuildOrchestrator
from .stages import (
    binarize_object,
    create_entry_binary,
    create_raw_object_wrapper,
    link_spec,
    preprocess_spec,
)
from .toolchain import Toolchain

__all__ = [
    'BuildResult',
    'RomBuildOrchestrator',
    'Toolchain',
    'binarize_object',
    'create_entry_binary',
    'create_raw_object_wrapper',
    'link_spec',
    'preprocess_spec',
]
