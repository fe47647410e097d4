from __future__ import annotations

from dataclasses import dataclass, field, replace

from ..diagnostics import DiagnosticSink
from ..flags.catalog import FlagValue
from ..flags.intrinsics import IntrinsicRegistry
from ..flags.platform import Platform
from ..flags.store import FlagStore, Origin
from .schema import ConstraintViolation, Correction, Mode


@dataclass(frozen=True)
class ConstraintContext:
    """Everything a constraint function may consult or touch during one call."""

    store: FlagStore
    platform: Platform
    sink: DiagnosticSink
    intrinsics: IntrinsicRegistry = field(default_factory=IntrinsicRegistry)
    mode: Mode = Mode.STRICT
    verbose: bool = True
    # Flags treated as explicitly set even if the store still holds a default
    # (a proposal that has not been committed yet).
    explicit: frozenset[str] = frozenset()
    corrections: list[Correction] = field(default_factory=list)

    @property
    def verify(self) -> bool:
        return self.mode is Mode.VERIFY

    def get(self, name: str) -> FlagValue:
        return self.store.get(name)

    def is_default(self, name: str) -> bool:
        if name in self.explicit:
            return False
        return self.store.is_default(name)

    def quiet(self) -> "ConstraintContext":
        """A side-effect free copy for checking a dependency's validity."""
        return replace(self, mode=Mode.STRICT, verbose=False, corrections=[])

    def report(self, message: str) -> None:
        self.sink.print_error(self.verbose, message)

    def violation(self, flag: str, value: FlagValue, message: str) -> ConstraintViolation:
        self.report(message)
        return ConstraintViolation(flag=flag, value=value, message=message)

    def correct(
        self,
        flag: str,
        original: FlagValue,
        corrected: FlagValue,
        *,
        announce: bool = True,
        origin: Origin = Origin.ERGONOMIC,
    ) -> None:
        """Write a substituted value back to the store and record it."""
        self.store.set(flag, corrected, origin=origin)
        self.corrections.append(Correction(flag=flag, original=original, corrected=corrected))
        if announce:
            self.sink.announce(flag, corrected)
