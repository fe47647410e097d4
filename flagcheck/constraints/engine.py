from __future__ import annotations

from typing import Iterable, Mapping

from ..diagnostics import DiagnosticSink
from ..flags.catalog import FlagValue
from ..flags.graph import DependencyGraph
from ..flags.intrinsics import IntrinsicRegistry
from ..flags.platform import Platform
from ..flags.store import FlagStore, Origin
from .context import ConstraintContext
from .registry import CONSTRAINTS
from .schema import ConstraintDef, FlagResult, Mode, Outcome, ValidationReport


class ConstraintEngine:
    """
    Dispatches flag values to their constraint functions in dependency order.

    The engine owns the evaluation order: a constraint always runs after the
    constraints of every flag it declares in `depends_on`.
    """

    def __init__(
        self,
        store: FlagStore,
        platform: Platform,
        *,
        sink: DiagnosticSink | None = None,
        intrinsics: IntrinsicRegistry | None = None,
        constraints: Mapping[str, ConstraintDef] | None = None,
    ):
        self.store = store
        self.platform = platform
        self.sink = sink or DiagnosticSink()
        self.intrinsics = intrinsics or IntrinsicRegistry()
        self.constraints = dict(constraints if constraints is not None else CONSTRAINTS)
        self.graph = DependencyGraph.from_dependencies(
            {flag: definition.depends_on for flag, definition in self.constraints.items()}
        )

        cycles = self.graph.find_cycles()
        if cycles:
            described = "; ".join(" <-> ".join(cycle) for cycle in cycles)
            raise ValueError(f"Constraint dependency cycle: {described}")

        unknown = [flag for flag in self.graph.nodes if flag not in store]
        if unknown:
            raise ValueError(f"Constraints reference unknown flags: {', '.join(unknown)}")

    def evaluation_order(self) -> list[str]:
        """Constrained flags, dependencies first, ties in registry order."""
        return [flag for flag in self.graph.topological_sort() if flag in self.constraints]

    def _context(self, mode: Mode, verbose: bool, explicit: frozenset[str] = frozenset()) -> ConstraintContext:
        return ConstraintContext(
            store=self.store,
            platform=self.platform,
            sink=self.sink,
            intrinsics=self.intrinsics,
            mode=mode,
            verbose=verbose,
            explicit=explicit,
        )

    def _definition(self, flag: str) -> ConstraintDef:
        definition = self.constraints.get(flag)
        if definition is None:
            raise ValueError(f"No constraint registered for {flag}")
        return definition

    @staticmethod
    def _run(definition: ConstraintDef, value: FlagValue, ctx: ConstraintContext) -> FlagResult:
        violation = definition.func(value, ctx)
        return FlagResult(
            flag=definition.flag,
            value=value,
            outcome=Outcome.VIOLATED if violation is not None else Outcome.SATISFIED,
            violation=violation,
            corrections=list(ctx.corrections),
        )

    def check(
        self,
        flag: str,
        *,
        mode: Mode = Mode.STRICT,
        verbose: bool = True,
        value: FlagValue | None = None,
    ) -> FlagResult:
        """
        Run one flag's constraint against its stored value (or `value`).

        A given `value` is only checked, not stored; verify-mode corrections
        are still written back.
        """
        definition = self._definition(flag)
        proposed = self.store.get(flag) if value is None else self.store.spec(flag).check_value(value)
        return self._run(definition, proposed, self._context(mode, verbose))

    def check_all(
        self,
        *,
        mode: Mode = Mode.STRICT,
        verbose: bool = True,
        flags: Iterable[str] | None = None,
    ) -> ValidationReport:
        """
        Validate stored values, every available constraint once, in evaluation order.

        A constraint reading a flag that was violated earlier in the pass fails
        closed instead of evaluating against the invalid value.
        """
        selected = set(flags) if flags is not None else None
        report = ValidationReport(mode=mode)
        invalid: set[str] = set()

        for flag in self.evaluation_order():
            if selected is not None and flag not in selected:
                continue
            definition = self.constraints[flag]
            if not definition.available(self.platform):
                report.skipped.append(flag)
                continue

            blocked = [dep for dep in definition.depends_on if dep in invalid]
            if blocked:
                result = self._fail_closed(definition, blocked[0], mode, verbose)
            else:
                result = self.check(flag, mode=mode, verbose=verbose)
            if not result.ok:
                invalid.add(flag)
            report.results.append(result)

        return report

    def _fail_closed(self, definition: ConstraintDef, dependency: str, mode: Mode, verbose: bool) -> FlagResult:
        value = self.store.get(definition.flag)
        violation = self._context(mode, verbose).violation(
            definition.flag,
            value,
            f"{definition.flag} cannot be validated because {dependency} value is invalid",
        )
        return FlagResult(flag=definition.flag, value=value, outcome=Outcome.VIOLATED, violation=violation)

    def propose(
        self,
        flag: str,
        value: FlagValue,
        *,
        mode: Mode = Mode.STRICT,
        verbose: bool = True,
        origin: Origin = Origin.MANAGEMENT,
        recheck_dependents: bool = True,
    ) -> ValidationReport:
        """
        Validate a new value for `flag` and commit it if acceptable.

        A violated proposal leaves the store untouched. After a commit, every
        constraint that reads `flag` is validated again.
        """
        value = self.store.spec(flag).check_value(value)
        report = ValidationReport(mode=mode)
        definition = self.constraints.get(flag)

        if definition is not None and definition.available(self.platform):
            result = self._run(definition, value, self._context(mode, verbose, explicit=frozenset({flag})))
            report.results.append(result)
            if not result.ok:
                return report
            if not any(c.flag == flag for c in result.corrections):
                self.store.set(flag, value, origin=origin)
        else:
            if definition is not None:
                report.skipped.append(flag)
            self.store.set(flag, value, origin=origin)

        if recheck_dependents:
            dependents = self.graph.transitive_dependents(flag)
            if dependents:
                report.extend(self.check_all(mode=mode, verbose=verbose, flags=dependents))
        return report

    def reconfigure(
        self,
        values: Mapping[str, FlagValue],
        *,
        mode: Mode = Mode.STRICT,
        verbose: bool = True,
        origin: Origin = Origin.MANAGEMENT,
    ) -> ValidationReport:
        """Propose every changed value in dependency order, then revalidate untouched dependents."""
        changed = {
            name: value
            for name, value in values.items()
            if type(self.store.get(name)) is not type(value) or self.store.get(name) != value
        }

        position = {flag: i for i, flag in enumerate(self.graph.topological_sort())}
        ordered = sorted(changed, key=lambda name: position.get(name, -1))

        report = ValidationReport(mode=mode)
        affected: set[str] = set()
        committed: set[str] = set()
        for name in ordered:
            proposal = self.propose(
                name, changed[name], mode=mode, verbose=verbose, origin=origin, recheck_dependents=False
            )
            report.extend(proposal)
            if proposal.ok:
                committed.add(name)
            affected |= self.graph.transitive_dependents(name)

        # A rejected proposal keeps its old value, which still has to hold
        # against the dependencies committed above.
        affected -= committed
        if affected:
            report.extend(self.check_all(mode=mode, verbose=verbose, flags=affected))
        return report
