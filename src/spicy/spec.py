"""Build specification model and reader.

A (preprocessed) spec file is a sequence of segment and wave blocks:

    beginseg
        name "code"
        flags BOOT OBJECT
        entry boot
        stack bootStack + STACKSIZE
        include "codesegment.o"
    endseg

    beginwave
        name "game"
        include "code"
    endwave

The reader only understands the block structure and the directives the build
pipeline uses (name, flags, entry, stack, include). Any other segment
directive (address, after, align, ...) is kept as an opaque attribute.
"""

import shlex
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .errors import ParseError


@dataclass
class Segment:
    """A segment block of the spec."""

    name: str
    flags: Tuple[str, ...] = ()
    entry: Optional[str] = None
    stack: Optional[str] = None
    includes: List[str] = field(default_factory=list)
    attributes: Dict[str, str] = field(default_factory=dict)

    @property
    def is_raw(self) -> bool:
        return "RAW" in self.flags

    @property
    def is_boot(self) -> bool:
        return "BOOT" in self.flags


@dataclass
class Wave:
    """A build unit: one linked and binarized group of segments."""

    name: str
    segments: List[Segment] = field(default_factory=list)

    @property
    def raw_segments(self) -> List[Segment]:
        return [seg for seg in self.segments if seg.is_raw]

    @property
    def boot_segment(self) -> Optional[Segment]:
        """First BOOT segment, else the first segment with an entry point."""
        for seg in self.segments:
            if seg.is_boot:
                return seg
        for seg in self.segments:
            if seg.entry:
                return seg
        return None


@dataclass
class Spec:
    """A parsed build specification."""

    segments: Dict[str, Segment] = field(default_factory=dict)
    waves: List[Wave] = field(default_factory=list)


def _unquote(value: str, line_no: int) -> str:
    try:
        parts = shlex.split(value)
    except ValueError as e:
        raise ParseError(f"line {line_no}: {e}") from e
    if len(parts) != 1:
        raise ParseError(f"line {line_no}: expected a single value, got {value!r}")
    return parts[0]


def parse_spec(text: str) -> Spec:
    """Parse preprocessed spec text.

    Args:
        text: Spec source after preprocessing

    Returns:
        Spec with segments and waves in file order

    Raises:
        ParseError: On malformed blocks or references to unknown segments
    """
    spec = Spec()
    segment: Optional[Segment] = None
    wave: Optional[Wave] = None
    wave_includes: List[Tuple[str, int]] = []
    pending_waves: List[Tuple[Wave, List[Tuple[str, int]]]] = []

    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split(None, 1)
        directive = parts[0]
        value = parts[1].strip() if len(parts) > 1 else ""

        if directive == "beginseg":
            if segment is not None or wave is not None:
                raise ParseError(f"line {line_no}: nested beginseg")
            segment = Segment(name="")
        elif directive == "endseg":
            if segment is None:
                raise ParseError(f"line {line_no}: endseg without beginseg")
            if not segment.name:
                raise ParseError(f"line {line_no}: segment has no name")
            if segment.name in spec.segments:
                raise ParseError(f"line {line_no}: duplicate segment {segment.name!r}")
            spec.segments[segment.name] = segment
            segment = None
        elif directive == "beginwave":
            if segment is not None or wave is not None:
                raise ParseError(f"line {line_no}: nested beginwave")
            wave = Wave(name="")
            wave_includes = []
        elif directive == "endwave":
            if wave is None:
                raise ParseError(f"line {line_no}: endwave without beginwave")
            if not wave.name:
                raise ParseError(f"line {line_no}: wave has no name")
            pending_waves.append((wave, wave_includes))
            wave = None
        elif segment is not None:
            if directive == "name":
                segment.name = _unquote(value, line_no)
            elif directive == "flags":
                segment.flags = segment.flags + tuple(value.split())
            elif directive == "entry":
                segment.entry = value
            elif directive == "stack":
                segment.stack = value
            elif directive == "include":
                segment.includes.append(_unquote(value, line_no))
            else:
                segment.attributes[directive] = value
        elif wave is not None:
            if directive == "name":
                wave.name = _unquote(value, line_no)
            elif directive == "include":
                wave_includes.append((_unquote(value, line_no), line_no))
            else:
                raise ParseError(f"line {line_no}: unknown wave directive {directive!r}")
        else:
            raise ParseError(f"line {line_no}: unexpected {directive!r} outside of a block")

    if segment is not None:
        raise ParseError("unterminated segment block at end of file")
    if wave is not None:
        raise ParseError("unterminated wave block at end of file")

    for pending, includes in pending_waves:
        for seg_name, line_no in includes:
            if seg_name not in spec.segments:
                raise ParseError(
                    f"line {line_no}: wave {pending.name!r} includes unknown segment {seg_name!r}"
                )
            pending.segments.append(spec.segments[seg_name])
        spec.waves.append(pending)

    return spec
