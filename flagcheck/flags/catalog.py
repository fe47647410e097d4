"""
Flag catalog for the compiler tuning flags flagcheck knows about.

Each entry declares the flag's storage type and its default. The defaults are
the 64-bit x86 product values; ergonomically computed flags use the value the
runtime settles on for a typical server-class machine.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

FlagValue = Union[int, bool, str]


class FlagType(str, Enum):
    """Storage type of a flag, with the representable range for integer types."""

    INTX = "intx"
    UINTX = "uintx"
    INT = "int"
    UINT = "uint"
    BOOL = "bool"
    CCSTRLIST = "ccstrlist"

    @property
    def bounds(self) -> tuple[int, int] | None:
        return _INTEGER_BOUNDS.get(self)


MAX_INTX = 2**63 - 1
MIN_INTX = -(2**63)
MAX_UINTX = 2**64 - 1
MAX_INT = 2**31 - 1
MIN_INT = -(2**31)
MAX_UINT = 2**32 - 1

_INTEGER_BOUNDS: dict[FlagType, tuple[int, int]] = {
    FlagType.INTX: (MIN_INTX, MAX_INTX),
    FlagType.UINTX: (0, MAX_UINTX),
    FlagType.INT: (MIN_INT, MAX_INT),
    FlagType.UINT: (0, MAX_UINT),
}


@dataclass(frozen=True)
class FlagSpec:
    """A tunable runtime flag."""

    name: str
    type: FlagType
    default: FlagValue
    description: str

    def check_value(self, value: object) -> FlagValue:
        """
        Ensure `value` is storable in this flag.

        Raises:
            ValueError: if the value has the wrong type or does not fit the
                flag's integer width.
        """
        if self.type is FlagType.BOOL:
            if not isinstance(value, bool):
                raise ValueError(f"{self.name} expects a boolean, got {value!r}")
            return value

        if self.type is FlagType.CCSTRLIST:
            if not isinstance(value, str):
                raise ValueError(f"{self.name} expects a string list, got {value!r}")
            return value

        # bool is a subclass of int; a boolean is never a valid number here.
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{self.name} expects an integer ({self.type.value}), got {value!r}")
        low, high = self.type.bounds  # type: ignore[misc]
        if not low <= value <= high:
            raise ValueError(f"{self.name} ({value}) does not fit in {self.type.value} [{low}, {high}]")
        return value


def _flag(name: str, type_: FlagType, default: FlagValue, description: str) -> FlagSpec:
    return FlagSpec(name=name, type=type_, default=default, description=description)


_SPECS = [
    _flag("CICompilerCount", FlagType.INTX, 12, "Number of compiler threads to run"),
    _flag("AllocatePrefetchStyle", FlagType.INTX, 1,
          "0 = no prefetch, 1 = prefetch after each allocation, 2 = watermark gated, 3 = one prefetch per cache line"),
    _flag("AllocatePrefetchDistance", FlagType.INTX, 192, "Distance to prefetch ahead of the allocation pointer, in bytes"),
    _flag("AllocatePrefetchStepSize", FlagType.INTX, 16, "Step size in bytes of sequential prefetch instructions"),
    _flag("AllocatePrefetchInstr", FlagType.INTX, 0, "Select the prefetch instruction used for allocation"),
    _flag("CompileThreshold", FlagType.INTX, 10000, "Number of interpreted method invocations before compiling"),
    _flag("OnStackReplacePercentage", FlagType.INTX, 140,
          "NON_TIERED number of method invocations/branches (as a percentage of CompileThreshold) before on-stack replacement"),
    _flag("InterpreterProfilePercentage", FlagType.INTX, 33,
          "NON_TIERED number of method invocations/branches (as a percentage of CompileThreshold) before profiling in the interpreter"),
    _flag("ProfileInterpreter", FlagType.BOOL, True, "Profile at the bytecode level during interpretation"),
    _flag("CodeCacheSegmentSize", FlagType.UINTX, 64, "Code cache segment size in bytes (smallest unit of allocation)"),
    _flag("CodeEntryAlignment", FlagType.INTX, 32, "Code entry alignment for generated code, in bytes"),
    _flag("OptoLoopAlignment", FlagType.INTX, 16, "Align inner loops to zero relative to this modulus"),
    _flag("InteriorEntryAlignment", FlagType.INTX, 16, "Code alignment for interior entry points in generated code, in bytes"),
    _flag("ArraycopySrcPrefetchDistance", FlagType.UINTX, 0, "Distance to prefetch the source array in arraycopy"),
    _flag("ArraycopyDstPrefetchDistance", FlagType.UINTX, 0, "Distance to prefetch the destination array in arraycopy"),
    _flag("AVX3Threshold", FlagType.INT, 4096, "Minimum array size in bytes before 512-bit vector instructions are used"),
    _flag("TypeProfileLevel", FlagType.UINT, 111,
          "=XYZ, with Z: arguments, Y: return value, X: parameters; 0 = off, 1 = JSR 292 only, 2 = all methods"),
    _flag("VerifyIterativeGVN", FlagType.UINT, 0,
          "=XY, with Y: verify def-use modifications, X: verify the final fixed point"),
    _flag("InitArrayShortSize", FlagType.INTX, 64,
          "Threshold in bytes below which array initialization is fully unrolled"),
    _flag("MaxNodeLimit", FlagType.INTX, 80000, "Maximum number of nodes in a compiled method"),
    _flag("NodeLimitFudgeFactor", FlagType.INTX, 2000, "Fudge factor for certain optimizations"),
    _flag("UseRTMLocking", FlagType.BOOL, False, "Enable restricted transactional memory locking"),
    _flag("RTMTotalCountIncrRate", FlagType.INT, 64, "Increment the total RTM attempt count once every n times"),
    _flag("UseCountedLoopSafepoints", FlagType.BOOL, True, "Keep safepoints in counted loops"),
    _flag("LoopStripMiningIter", FlagType.UINTX, 1000, "Number of iterations in a strip mined loop"),
    _flag("DisableIntrinsic", FlagType.CCSTRLIST, "", "Do not expand intrinsics whose (internal) names are listed"),
    _flag("ControlIntrinsic", FlagType.CCSTRLIST, "",
          "Control intrinsics using a list of +/- (internal) names, separated by commas"),
]

FLAGS: dict[str, FlagSpec] = {spec.name: spec for spec in _SPECS}


def get_flag(name: str) -> FlagSpec:
    """Look up a flag by name, raising ValueError for unknown flags."""
    spec = FLAGS.get(name)
    if spec is None:
        raise ValueError(f"Unknown flag: {name}")
    return spec
