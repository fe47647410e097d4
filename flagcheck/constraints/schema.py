from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

from ..flags.catalog import FlagValue
from ..flags.platform import Capability, Platform

if TYPE_CHECKING:
    from .context import ConstraintContext


class Mode(str, Enum):
    STRICT = "strict"  # report only
    VERIFY = "verify"  # substitute the nearest acceptable value


class Outcome(str, Enum):
    SATISFIED = "satisfied"
    VIOLATED = "violated"


@dataclass(frozen=True)
class ConstraintViolation:
    flag: str
    value: FlagValue
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"flag": self.flag, "value": self.value, "message": self.message}


@dataclass(frozen=True)
class Correction:
    flag: str
    original: FlagValue
    corrected: FlagValue

    def to_dict(self) -> dict[str, Any]:
        return {"flag": self.flag, "original": self.original, "corrected": self.corrected}


ConstraintFn = Callable[[Any, "ConstraintContext"], "ConstraintViolation | None"]


@dataclass(frozen=True)
class ConstraintDef:
    flag: str
    func: ConstraintFn
    depends_on: tuple[str, ...] = ()
    requires: Capability | None = None
    correctable: bool = True
    summary: str = ""

    def available(self, platform: Platform) -> bool:
        return platform.supports(self.requires)


@dataclass
class FlagResult:
    """Outcome of one constraint function invocation."""

    flag: str
    value: FlagValue
    outcome: Outcome
    violation: ConstraintViolation | None = None
    corrections: list[Correction] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SATISFIED

    def to_dict(self) -> dict[str, Any]:
        return {
            "flag": self.flag,
            "value": self.value,
            "outcome": self.outcome.value,
            "violation": self.violation.to_dict() if self.violation else None,
            "corrections": [c.to_dict() for c in self.corrections],
        }


@dataclass
class ValidationReport:
    """Results of a validation pass, in evaluation order."""

    mode: Mode
    results: list[FlagResult] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results)

    @property
    def violations(self) -> list[ConstraintViolation]:
        return [r.violation for r in self.results if r.violation is not None]

    @property
    def corrections(self) -> list[Correction]:
        return [c for r in self.results for c in r.corrections]

    def result(self, flag: str) -> FlagResult | None:
        """Most recent result for `flag` in this pass."""
        for r in reversed(self.results):
            if r.flag == flag:
                return r
        return None

    def extend(self, other: "ValidationReport") -> None:
        self.results.extend(other.results)
        self.skipped.extend(s for s in other.skipped if s not in self.skipped)

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "ok": self.ok,
            "results": [r.to_dict() for r in self.results],
            "skipped": list(self.skipped),
            "summary": {
                "checked": len(self.results),
                "violations": len(self.violations),
                "corrections": len(self.corrections),
                "skipped": len(self.skipped),
            },
        }
