"""
Constraint functions for the compiler tuning flags.

Every function takes the proposed value and a ConstraintContext and returns
None when the value is acceptable or a ConstraintViolation when it is not.
In verify mode, functions with a correction path write the substituted value
back through `ctx.correct` and return None.
"""

from __future__ import annotations

from ..flags.platform import BYTES_PER_LONG, DOUBLE_SIZE, INT_MAX, INVOCATION_COUNT_SHIFT
from ..flags.store import Origin
from .context import ConstraintContext
from .primitives import (
    clamp,
    in_range,
    is_multiple_of,
    is_power_of_two,
    pack_digits,
    percent_of,
    round_down_to_multiple,
    round_down_to_power_of_two,
    unpack_digits,
)
from .schema import ConstraintViolation

MAX_PREFETCH_DISTANCE = 512
MIN_CODE_ENTRY_ALIGNMENT = 16
ARRAYCOPY_PREFETCH_LIMIT = 4032
RTM_DEFAULT_INCR_RATE = 64
NODE_LIMIT_FUDGE_MIN_PERCENT = 2
NODE_LIMIT_FUDGE_MAX_PERCENT = 40


def _range_check(
    ctx: ConstraintContext,
    flag: str,
    value: int,
    low: int,
    high: int,
    message: str | None = None,
) -> ConstraintViolation | None:
    if in_range(value, low, high):
        return None
    if ctx.verify:
        ctx.correct(flag, value, clamp(value, low, high))
        return None
    return ctx.violation(flag, value, message or f"{flag} ({value}) must be between {low} and {high}")


def compile_threshold_limit() -> int:
    return INT_MAX >> INVOCATION_COUNT_SHIFT


def ci_compiler_count(value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    """Validate the minimum number of compiler threads needed to run the VM."""
    if not ctx.platform.has_compiler:
        if value > 0:
            if ctx.verify:
                ctx.correct("CICompilerCount", value, -1)
                return None
            return ctx.violation(
                "CICompilerCount",
                value,
                f"CICompilerCount ({value}) cannot be greater than 0 because there are no compilers",
            )
        return None

    minimum = ctx.platform.min_compiler_threads
    if value < minimum:
        if ctx.verify:
            ctx.correct("CICompilerCount", value, minimum)
            return None
        return ctx.violation("CICompilerCount", value, f"CICompilerCount ({value}) must be at least {minimum}")
    return None


def allocate_prefetch_distance(value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    return _range_check(ctx, "AllocatePrefetchDistance", value, 0, MAX_PREFETCH_DISTANCE)


def allocate_prefetch_step_size(value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    """Only prefetch style 3 (one prefetch per cache line) needs word-aligned steps."""
    if ctx.get("AllocatePrefetchStyle") != 3:
        return None

    word_size = ctx.platform.word_size
    if is_multiple_of(value, word_size):
        return None
    if ctx.verify:
        ctx.correct("AllocatePrefetchStepSize", value, round_down_to_multiple(value, word_size))
        return None
    return ctx.violation(
        "AllocatePrefetchStepSize",
        value,
        f"AllocatePrefetchStepSize ({value}) must be multiple of {word_size}",
    )


def allocate_prefetch_instr(value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    return _range_check(ctx, "AllocatePrefetchInstr", value, 0, ctx.platform.max_prefetch_instr)


def compile_threshold(value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    return _range_check(ctx, "CompileThreshold", value, 0, compile_threshold_limit())


def on_stack_replace_percentage(value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    """
    Bound the OSR percentage by what CompileThreshold leaves room for.

    The ceiling is INT_MAX (shifted like the invocation counter when the
    interpreter does not profile) scaled by 100 / CompileThreshold. With
    profiling on, the floor is InterpreterProfilePercentage and the ceiling
    is raised by the same amount.
    """
    threshold = ctx.get("CompileThreshold")
    if compile_threshold(threshold, ctx.quiet()) is not None:
        return ctx.violation(
            "OnStackReplacePercentage",
            value,
            "OnStackReplacePercentage cannot be validated because CompileThreshold value is invalid",
        )

    profiling = ctx.get("ProfileInterpreter")
    ceiling = INT_MAX
    if not profiling:
        ceiling >>= INVOCATION_COUNT_SHIFT
    ceiling = ceiling * 100 if threshold == 0 else ceiling * 100 // threshold

    if profiling:
        floor = ctx.get("InterpreterProfilePercentage")
        if value < floor:
            if ctx.verify:
                ctx.correct("OnStackReplacePercentage", value, floor)
                return None
            return ctx.violation(
                "OnStackReplacePercentage",
                value,
                f"OnStackReplacePercentage ({value}) must be larger than InterpreterProfilePercentage ({floor})",
            )
        ceiling += floor
    elif value < 0:
        if ctx.verify:
            ctx.correct("OnStackReplacePercentage", value, 0)
            return None
        return ctx.violation(
            "OnStackReplacePercentage", value, f"OnStackReplacePercentage ({value}) must be non-negative"
        )

    if value > ceiling:
        if ctx.verify:
            ctx.correct("OnStackReplacePercentage", value, ceiling)
            return None
        return ctx.violation(
            "OnStackReplacePercentage",
            value,
            f"OnStackReplacePercentage ({value}) must be between 0 and {ceiling}",
        )
    return None


# CodeCacheSegmentSize and CodeEntryAlignment are development flags; neither
# has a correction path.


def code_cache_segment_size(value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    entry_alignment = ctx.get("CodeEntryAlignment")
    if value < entry_alignment:
        return ctx.violation(
            "CodeCacheSegmentSize",
            value,
            f"CodeCacheSegmentSize ({value}) must be larger than or equal to "
            f"CodeEntryAlignment ({entry_alignment}) to align entry points",
        )

    if value < DOUBLE_SIZE:
        return ctx.violation(
            "CodeCacheSegmentSize",
            value,
            f"CodeCacheSegmentSize ({value}) must be at least {DOUBLE_SIZE} to align constants",
        )

    if ctx.platform.compiler2:
        loop_alignment = ctx.get("OptoLoopAlignment")
        if value < loop_alignment:
            return ctx.violation(
                "CodeCacheSegmentSize",
                value,
                f"CodeCacheSegmentSize ({value}) must be larger than or equal to "
                f"OptoLoopAlignment ({loop_alignment}) to align inner loops",
            )
    return None


def code_entry_alignment(value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    if not is_power_of_two(value):
        return ctx.violation("CodeEntryAlignment", value, f"CodeEntryAlignment ({value}) must be a power of two")

    if value < MIN_CODE_ENTRY_ALIGNMENT:
        return ctx.violation(
            "CodeEntryAlignment",
            value,
            f"CodeEntryAlignment ({value}) must be greater than or equal to {MIN_CODE_ENTRY_ALIGNMENT}",
        )

    segment_size = ctx.get("CodeCacheSegmentSize")
    if value > segment_size:
        return ctx.violation(
            "CodeEntryAlignment",
            value,
            f"CodeEntryAlignment ({value}) must be less than or equal to "
            f"CodeCacheSegmentSize ({segment_size}) to align entry points",
        )
    return None


def _loop_alignment(flag: str, value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    """
    Shared rule for OptoLoopAlignment and InteriorEntryAlignment.

    The checks run in a fixed order; in verify mode each failing check
    adjusts the running value and the final value is stored once.
    """
    aligned = value

    if not is_power_of_two(aligned):
        if not ctx.verify:
            return ctx.violation(flag, value, f"{flag} ({value}) must be a power of two")
        aligned = round_down_to_power_of_two(aligned)

    unit = ctx.platform.addr_unit
    if not is_multiple_of(aligned, unit):
        if not ctx.verify:
            return ctx.violation(flag, value, f"{flag} ({value}) must be multiple of NOP size ({unit})")
        aligned = round_down_to_multiple(aligned, unit)

    entry_alignment = ctx.get("CodeEntryAlignment")
    if aligned > entry_alignment:
        if not ctx.verify:
            return ctx.violation(
                flag,
                value,
                f"{flag} ({value}) must be less than or equal to CodeEntryAlignment ({entry_alignment})",
            )
        # CodeEntryAlignment may itself not be a power of two
        aligned = round_down_to_power_of_two(entry_alignment)

    minimum = ctx.platform.min_loop_alignment
    if aligned < minimum:
        if not ctx.verify:
            return ctx.violation(flag, value, f"{flag} ({value}) must be greater than or equal to {minimum}")
        aligned = minimum

    if aligned == value:
        return None
    if _loop_alignment(flag, aligned, ctx.quiet()) is not None:
        return ctx.violation(
            flag,
            value,
            f"{flag} ({value}) cannot be corrected: no alignment satisfies "
            f"CodeEntryAlignment ({entry_alignment}) and the platform minimum ({minimum})",
        )
    ctx.correct(flag, value, aligned)
    return None


def opto_loop_alignment(value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    return _loop_alignment("OptoLoopAlignment", value, ctx)


def interior_entry_alignment(value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    return _loop_alignment("InteriorEntryAlignment", value, ctx)


def _arraycopy_prefetch_distance(flag: str, value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    if value >= ARRAYCOPY_PREFETCH_LIMIT:
        return ctx.violation(flag, value, f"{flag} ({value}) must be between 0 and {ARRAYCOPY_PREFETCH_LIMIT - 1}")
    return None


def arraycopy_src_prefetch_distance(value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    return _arraycopy_prefetch_distance("ArraycopySrcPrefetchDistance", value, ctx)


def arraycopy_dst_prefetch_distance(value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    return _arraycopy_prefetch_distance("ArraycopyDstPrefetchDistance", value, ctx)


def avx3_threshold(value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    if value != 0 and not is_power_of_two(value):
        return ctx.violation(
            "AVX3Threshold",
            value,
            f"AVX3Threshold ({value}) must be 0 or a power of two value between 0 and {INT_MAX}",
        )
    return None


def type_profile_level(value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    """Three packed digits (parameters, return value, arguments), each 0..2."""
    digits, overflow = unpack_digits(value, 3)
    corrected = False

    for position, digit in enumerate(digits):
        if digit > 2:
            if not ctx.verify:
                return ctx.violation(
                    "TypeProfileLevel", value, f"Invalid value ({value}) in TypeProfileLevel at position {position}"
                )
            digits[position] = 2
            corrected = True

    if overflow != 0:
        if not ctx.verify:
            return ctx.violation(
                "TypeProfileLevel", value, f"Invalid value ({value}) for TypeProfileLevel: maximal 3 digits"
            )
        # excess digits are dropped
        corrected = True

    if corrected:
        ctx.correct("TypeProfileLevel", value, pack_digits(digits))
    return None


def verify_iterative_gvn(value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    digits, overflow = unpack_digits(value, 2)
    for position, digit in enumerate(digits):
        if digit > 1:
            return ctx.violation(
                "VerifyIterativeGVN", value, f"Invalid value ({value}) in VerifyIterativeGVN at position {position}"
            )
    if overflow != 0:
        return ctx.violation(
            "VerifyIterativeGVN", value, f"Invalid value ({value}) for VerifyIterativeGVN: maximal 2 digits"
        )
    return None


def init_array_short_size(value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    if not is_multiple_of(value, BYTES_PER_LONG):
        return ctx.violation(
            "InitArrayShortSize", value, f"InitArrayShortSize ({value}) must be a multiple of {BYTES_PER_LONG}"
        )
    return None


def node_limit_fudge_factor(value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    # MaxNodeLimit itself is not validated here.
    max_node_limit = ctx.get("MaxNodeLimit")
    return _range_check(
        ctx,
        "NodeLimitFudgeFactor",
        value,
        percent_of(max_node_limit, NODE_LIMIT_FUDGE_MIN_PERCENT),
        percent_of(max_node_limit, NODE_LIMIT_FUDGE_MAX_PERCENT),
        message=(
            f"NodeLimitFudgeFactor ({value}) must be between {NODE_LIMIT_FUDGE_MIN_PERCENT}% and "
            f"{NODE_LIMIT_FUDGE_MAX_PERCENT}% of MaxNodeLimit ({max_node_limit})"
        ),
    )


def rtm_total_count_incr_rate(value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    """Reset to the default instead of rejecting, in either mode."""
    if ctx.platform.rtm and ctx.get("UseRTMLocking") and not is_power_of_two(value):
        ctx.report(f"RTMTotalCountIncrRate ({value}) must be a power of 2, resetting it to {RTM_DEFAULT_INCR_RATE}")
        ctx.correct("RTMTotalCountIncrRate", value, RTM_DEFAULT_INCR_RATE, announce=False, origin=Origin.DEFAULT)
    return None


def loop_strip_mining_iter(value: int, ctx: ConstraintContext) -> ConstraintViolation | None:
    """Keep LoopStripMiningIter consistent with UseCountedLoopSafepoints, in either mode."""
    safepoints = ctx.get("UseCountedLoopSafepoints")
    explicit = not ctx.is_default("UseCountedLoopSafepoints") or not ctx.is_default("LoopStripMiningIter")

    if safepoints and value == 0:
        if explicit:
            ctx.report(
                "When counted loop safepoints are enabled, LoopStripMiningIter must be at least 1 "
                "(a safepoint every 1 iteration): setting it to 1"
            )
        ctx.correct("LoopStripMiningIter", value, 1, announce=False)
    elif not safepoints and value > 0:
        if explicit:
            ctx.report("Disabling counted safepoints implies no loop strip mining: setting LoopStripMiningIter to 0")
        ctx.correct("LoopStripMiningIter", value, 0, announce=False)
    return None
