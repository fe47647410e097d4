"""
Constraint functions for the intrinsic list flags.

An unknown intrinsic has no sensible replacement, so both functions ignore
the mode and always report and fail.
"""

from __future__ import annotations

from .context import ConstraintContext
from .schema import ConstraintViolation


def _check_intrinsic_list(flag: str, value: str, ctx: ConstraintContext, *, signed: bool) -> ConstraintViolation | None:
    bad = ctx.intrinsics.unrecognized(value, signed=signed)
    if not bad:
        return None
    return ctx.violation(flag, value, f"Unrecognized intrinsic detected in {flag}: {', '.join(bad)}")


def disable_intrinsic(value: str, ctx: ConstraintContext) -> ConstraintViolation | None:
    return _check_intrinsic_list("DisableIntrinsic", value, ctx, signed=False)


def control_intrinsic(value: str, ctx: ConstraintContext) -> ConstraintViolation | None:
    return _check_intrinsic_list("ControlIntrinsic", value, ctx, signed=True)
