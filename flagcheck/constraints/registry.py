"""
Constraint registry: flag -> constraint function plus its declared dependencies.

`depends_on` lists every flag the function reads besides its own. The engine
evaluates constraints so that each runs after the constraints of the flags
it depends on.
"""

from __future__ import annotations

from . import compiler, intrinsics
from .schema import ConstraintDef

_DEFS = [
    ConstraintDef(
        flag="CICompilerCount",
        func=compiler.ci_compiler_count,
        summary="At least 2 threads when tiered, 1 with any compiler, at most 0 when no compiler is built",
    ),
    ConstraintDef(
        flag="AllocatePrefetchDistance",
        func=compiler.allocate_prefetch_distance,
        summary="Between 0 and 512",
    ),
    ConstraintDef(
        flag="AllocatePrefetchStepSize",
        func=compiler.allocate_prefetch_step_size,
        depends_on=("AllocatePrefetchStyle",),
        summary="Multiple of the word size when AllocatePrefetchStyle is 3",
    ),
    ConstraintDef(
        flag="AllocatePrefetchInstr",
        func=compiler.allocate_prefetch_instr,
        summary="Between 0 and 3 on x86, non-negative elsewhere",
    ),
    ConstraintDef(
        flag="CompileThreshold",
        func=compiler.compile_threshold,
        summary="Between 0 and INT_MAX shifted by the invocation counter shift",
    ),
    ConstraintDef(
        flag="OnStackReplacePercentage",
        func=compiler.on_stack_replace_percentage,
        depends_on=("CompileThreshold", "ProfileInterpreter", "InterpreterProfilePercentage"),
        summary="Bounded by CompileThreshold; at least InterpreterProfilePercentage when profiling",
    ),
    ConstraintDef(
        flag="CodeEntryAlignment",
        func=compiler.code_entry_alignment,
        correctable=False,
        summary="Power of two, at least 16, at most CodeCacheSegmentSize",
    ),
    ConstraintDef(
        flag="OptoLoopAlignment",
        func=compiler.opto_loop_alignment,
        depends_on=("CodeEntryAlignment",),
        summary="Power of two, multiple of the address unit, at most CodeEntryAlignment, at least the platform minimum",
    ),
    ConstraintDef(
        flag="InteriorEntryAlignment",
        func=compiler.interior_entry_alignment,
        depends_on=("CodeEntryAlignment",),
        requires="compiler2",
        summary="Power of two, multiple of the address unit, at most CodeEntryAlignment, at least the platform minimum",
    ),
    # CodeEntryAlignment also reads CodeCacheSegmentSize; neither corrects,
    # so only the segment size declares the edge.
    ConstraintDef(
        flag="CodeCacheSegmentSize",
        func=compiler.code_cache_segment_size,
        depends_on=("CodeEntryAlignment", "OptoLoopAlignment"),
        correctable=False,
        summary="At least CodeEntryAlignment, 8 bytes, and OptoLoopAlignment when C2 is built",
    ),
    ConstraintDef(
        flag="ArraycopySrcPrefetchDistance",
        func=compiler.arraycopy_src_prefetch_distance,
        correctable=False,
        summary="Below 4032",
    ),
    ConstraintDef(
        flag="ArraycopyDstPrefetchDistance",
        func=compiler.arraycopy_dst_prefetch_distance,
        correctable=False,
        summary="Below 4032",
    ),
    ConstraintDef(
        flag="AVX3Threshold",
        func=compiler.avx3_threshold,
        correctable=False,
        summary="0 or a power of two",
    ),
    ConstraintDef(
        flag="TypeProfileLevel",
        func=compiler.type_profile_level,
        summary="Three packed digits, each 0..2",
    ),
    ConstraintDef(
        flag="VerifyIterativeGVN",
        func=compiler.verify_iterative_gvn,
        correctable=False,
        summary="Two packed digits, each 0 or 1",
    ),
    ConstraintDef(
        flag="InitArrayShortSize",
        func=compiler.init_array_short_size,
        correctable=False,
        summary="Multiple of 8 bytes",
    ),
    ConstraintDef(
        flag="NodeLimitFudgeFactor",
        func=compiler.node_limit_fudge_factor,
        depends_on=("MaxNodeLimit",),
        requires="compiler2",
        summary="Between 2% and 40% of MaxNodeLimit",
    ),
    ConstraintDef(
        flag="RTMTotalCountIncrRate",
        func=compiler.rtm_total_count_incr_rate,
        depends_on=("UseRTMLocking",),
        summary="Power of two when RTM locking is on; reset to 64 otherwise",
    ),
    ConstraintDef(
        flag="LoopStripMiningIter",
        func=compiler.loop_strip_mining_iter,
        depends_on=("UseCountedLoopSafepoints",),
        requires="compiler2",
        summary="1 or more with counted loop safepoints, 0 without",
    ),
    ConstraintDef(
        flag="DisableIntrinsic",
        func=intrinsics.disable_intrinsic,
        correctable=False,
        summary="Every entry names a known intrinsic",
    ),
    ConstraintDef(
        flag="ControlIntrinsic",
        func=intrinsics.control_intrinsic,
        correctable=False,
        summary="Every entry is +name or -name for a known intrinsic",
    ),
]

CONSTRAINTS: dict[str, ConstraintDef] = {d.flag: d for d in _DEFS}


def get_constraint(flag: str) -> ConstraintDef | None:
    return CONSTRAINTS.get(flag)
