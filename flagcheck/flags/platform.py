"""
Build and platform capabilities that vary constraint bounds.

A `Platform` answers the questions the runtime would otherwise settle at
build time: which compilers exist, whether tiering is active, and the
architecture's word size, instruction address unit and alignment limits.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .catalog import MAX_INTX

Capability = Literal["compiler1", "compiler2", "rtm"]

# Invocation counters keep their state bits below the count.
INVOCATION_COUNT_SHIFT = 1
INT_MAX = 2**31 - 1
BYTES_PER_LONG = 8
DOUBLE_SIZE = 8


@dataclass(frozen=True)
class ArchSpec:
    word_size: int
    addr_unit: int
    min_loop_alignment: int
    max_prefetch_instr: int


ARCHES: dict[str, ArchSpec] = {
    "x86_64": ArchSpec(word_size=8, addr_unit=1, min_loop_alignment=16, max_prefetch_instr=3),
    "x86_32": ArchSpec(word_size=4, addr_unit=1, min_loop_alignment=4, max_prefetch_instr=3),
    "aarch64": ArchSpec(word_size=8, addr_unit=1, min_loop_alignment=16, max_prefetch_instr=MAX_INTX),
    "ppc64": ArchSpec(word_size=8, addr_unit=4, min_loop_alignment=16, max_prefetch_instr=MAX_INTX),
    "s390x": ArchSpec(word_size=8, addr_unit=2, min_loop_alignment=2, max_prefetch_instr=MAX_INTX),
    "riscv64": ArchSpec(word_size=8, addr_unit=1, min_loop_alignment=16, max_prefetch_instr=MAX_INTX),
}


@dataclass(frozen=True)
class Platform:
    """Capability query object consulted by constraints with platform-dependent bounds."""

    arch: str = "x86_64"
    compiler1: bool = True
    compiler2: bool = True
    tiered: bool = True
    interpreter_only: bool = False
    rtm: bool = False

    def __post_init__(self) -> None:
        if self.arch not in ARCHES:
            raise ValueError(f"Unknown architecture: {self.arch} (known: {', '.join(ARCHES)})")

    @property
    def _spec(self) -> ArchSpec:
        return ARCHES[self.arch]

    @property
    def word_size(self) -> int:
        return self._spec.word_size

    @property
    def addr_unit(self) -> int:
        """Instruction address unit; code offsets must be multiples of it."""
        return self._spec.addr_unit

    @property
    def min_loop_alignment(self) -> int:
        return self._spec.min_loop_alignment

    @property
    def max_prefetch_instr(self) -> int:
        return self._spec.max_prefetch_instr

    @property
    def has_compiler(self) -> bool:
        return self.compiler1 or self.compiler2

    @property
    def is_tiered(self) -> bool:
        return self.compiler1 and self.compiler2 and self.tiered and not self.interpreter_only

    @property
    def min_compiler_threads(self) -> int:
        if self.is_tiered:
            return 2
        if not self.interpreter_only:
            return 1
        return 0

    def supports(self, capability: Capability | None) -> bool:
        if capability is None:
            return True
        if capability == "compiler1":
            return self.compiler1
        if capability == "compiler2":
            return self.compiler2
        if capability == "rtm":
            return self.rtm
        return False

    def describe(self) -> str:
        compilers = [name for name, built in (("c1", self.compiler1), ("c2", self.compiler2)) if built]
        parts = [self.arch, "+".join(compilers) or "no compilers"]
        if self.is_tiered:
            parts.append("tiered")
        if self.interpreter_only:
            parts.append("interpreter only")
        if self.rtm:
            parts.append("rtm")
        return ", ".join(parts)
