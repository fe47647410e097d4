"""Check, explain and list command implementations."""

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..audit_log import log_validation
from ..constraints.engine import ConstraintEngine
from ..constraints.registry import CONSTRAINTS, get_constraint
from ..constraints.schema import FlagResult, Mode, ValidationReport
from ..diagnostics import DiagnosticSink
from ..flags.catalog import FLAGS, get_flag
from ..flags.load import load_flag_config
from ..flags.platform import Platform


def run_check(
    config_path: Path,
    mode: str | None = None,
    output_json: bool = False,
    quiet: bool = False,
    record: bool = False,
    only: tuple[str, ...] = (),
    console: Console | None = None,
) -> int:
    """Validate every flag of a configuration.

    Args:
        config_path: Path to the TOML flag configuration
        mode: Override the configured mode ("strict" or "verify")
        output_json: Output the report as JSON instead of human-readable
        quiet: Suppress strict-mode violation messages while checking
        record: Append corrections and violations to the audit log
        only: Restrict the pass to these flags
        console: Console for all output (defaults to stderr)

    Returns:
        Exit code (0 = all satisfied, 1 = violations remain)
    """
    console = console or Console(stderr=True)

    config = load_flag_config(config_path)
    effective_mode = Mode(mode) if mode else config.mode
    verbose = config.verbose and not quiet

    unknown = [name for name in only if name not in CONSTRAINTS]
    if unknown:
        console.print(f"No constraint registered for: {', '.join(unknown)}", style="bold red")
        return 1

    if not output_json:
        console.print(f"Checking {config_path} ({effective_mode.value} mode, {config.platform.describe()})...", style="dim")

    engine = ConstraintEngine(
        config.build_store(),
        config.platform,
        sink=DiagnosticSink(console),
        intrinsics=config.build_intrinsics(),
    )
    report = engine.check_all(mode=effective_mode, verbose=verbose, flags=only or None)

    if record and (report.corrections or report.violations):
        log_validation(config_path, "startup", report, metadata={"platform": config.platform.describe()})

    if output_json:
        payload = report.to_dict()
        payload["values"] = engine.store.snapshot()
        print(json.dumps(payload, indent=2, default=str))
    else:
        _print_report(console, report, messages_shown=verbose)

    return 0 if report.ok else 1


def _print_report(console: Console, report: ValidationReport, messages_shown: bool = False) -> None:
    """Print a validation report as a summary plus per-flag lines.

    When the sink already printed the violation messages while checking,
    ERROR lines only name the flag and value.
    """
    for result in report.results:
        _print_result(console, result, messages_shown)

    if report.skipped:
        console.print(f"  skipped (not built): {', '.join(report.skipped)}", style="dim")

    violations = len(report.violations)
    corrections = len(report.corrections)
    console.print()
    if violations:
        console.print(f"✗ {violations} violation(s), {corrections} correction(s)", style="bold red")
    elif corrections:
        console.print(f"⚠ All constraints satisfied after {corrections} correction(s)", style="yellow")
    else:
        console.print(f"✓ All {len(report.results)} constraints satisfied", style="bold green")


def _print_result(console: Console, result: FlagResult, messages_shown: bool = False) -> None:
    if result.violation is not None:
        if messages_shown:
            line = f"  ERROR: {result.flag} ({result.value})"
        else:
            line = f"  ERROR: {result.flag} - {result.violation.message}"
        console.print(line, style="bold red", markup=False)
        return
    for c in result.corrections:
        console.print(f"  FIXED: {c.flag} {c.original} -> {c.corrected}", style="yellow", markup=False)


def run_explain(flag: str, console: Console | None = None) -> int:
    """Explain a flag and its constraint.

    Returns:
        Exit code (0 = found, 1 = unknown flag)
    """
    console = console or Console()

    try:
        spec = get_flag(flag)
    except ValueError:
        console.print(f"Unknown flag: {flag}", style="bold red")
        console.print(f"Known flags: {', '.join(sorted(FLAGS))}", style="dim")
        return 1

    console.print(f"[bold]{spec.name}[/bold] ({spec.type.value}, default {spec.default!r})")
    console.print(f"  {spec.description}", style="dim")

    definition = get_constraint(flag)
    if definition is None:
        console.print("  No constraint; any value of the flag's type is accepted.")
        return 0

    console.print(f"  Constraint: {definition.summary}")
    console.print(f"  Auto-correct: {'yes' if definition.correctable else 'no (violations are fatal)'}")
    if definition.depends_on:
        console.print(f"  Reads: {', '.join(definition.depends_on)}")
    if definition.requires:
        console.print(f"  Only checked when built with: {definition.requires}")

    dependents = sorted(d.flag for d in CONSTRAINTS.values() if flag in d.depends_on)
    if dependents:
        console.print(f"  Read by: {', '.join(dependents)}")
    return 0


def run_list(platform: Platform, console: Console | None = None) -> int:
    """Print the constraint table in evaluation order for a platform."""
    console = console or Console()

    from ..flags.store import FlagStore

    engine = ConstraintEngine(FlagStore(), platform, sink=DiagnosticSink(console))

    table = Table(title=f"Flag constraints ({platform.describe()})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Flag", style="bold")
    table.add_column("Type")
    table.add_column("Default", justify="right")
    table.add_column("Reads")
    table.add_column("Fix", justify="center")
    table.add_column("Constraint")

    for i, flag in enumerate(engine.evaluation_order(), start=1):
        definition = CONSTRAINTS[flag]
        spec = FLAGS[flag]
        name = flag if definition.available(platform) else f"[dim]{flag} (not built)[/dim]"
        table.add_row(
            str(i),
            name,
            spec.type.value,
            repr(spec.default),
            ", ".join(definition.depends_on),
            "✓" if definition.correctable else "✗",
            definition.summary,
        )

    console.print(table)
    return 0
