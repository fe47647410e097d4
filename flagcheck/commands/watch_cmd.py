"""Watch command - revalidate flags whenever the config file changes."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from rich.console import Console

from ..audit_log import format_audit_entry, log_validation, read_audit_log
from ..constraints.engine import ConstraintEngine
from ..constraints.schema import Mode, ValidationReport
from ..diagnostics import DiagnosticSink
from ..flags.load import load_flag_config
from ..flags.store import Origin
from ..watcher import run_watch_loop
from .check import _print_report


class ConfigReloader:
    """
    Holds the live engine for a watched config and applies edits to it.

    The platform and mode come from the first load; later edits only change
    flag values.
    """

    def __init__(self, config_path: Path, console: Console, mode: Mode | None = None, record: bool = False):
        self.config_path = config_path
        self.console = console
        self.record = record

        config = load_flag_config(config_path)
        self.mode = mode or config.mode
        self.verbose = config.verbose
        self.engine = ConstraintEngine(
            config.build_store(),
            config.platform,
            sink=DiagnosticSink(console),
            intrinsics=config.build_intrinsics(),
        )
        self.platform_description = config.platform.describe()
        self.file_values = self._with_defaults(config.values)

    def _with_defaults(self, values: dict) -> dict:
        merged = {name: spec.default for name, spec in self.engine.store.catalog.items()}
        merged.update(values)
        return merged

    def startup(self) -> ValidationReport:
        report = self.engine.check_all(mode=self.mode, verbose=self.verbose)
        self._record("startup", report)
        return report

    def reload(self) -> ValidationReport | None:
        """Re-read the config and propose every changed value. None if the file is unusable."""
        try:
            config = load_flag_config(self.config_path)
        except (OSError, ValueError) as e:
            self.console.print(f"Ignoring change: {e}", style="yellow")
            return None

        if config.platform != self.engine.platform:
            self.console.print("Platform changes need a restart; only flag values are reloaded.", style="yellow")

        # Flags dropped from the file fall back to their defaults. Only values
        # that differ from the previous version of the file are proposed, so
        # earlier corrections are not redone on every save.
        values = self._with_defaults(config.values)
        edited = {}
        for name, value in values.items():
            previous = self.file_values.get(name)
            if type(value) is not type(previous) or value != previous:
                edited[name] = value
        self.file_values = values

        report = self.engine.reconfigure(edited, mode=self.mode, verbose=self.verbose, origin=Origin.MANAGEMENT)
        self._record("reconfigure", report)
        return report

    def _record(self, operation: str, report: ValidationReport) -> None:
        if self.record and (report.corrections or report.violations):
            log_validation(self.config_path, operation, report, metadata={"platform": self.platform_description})


def run_watch(config_path: Path, *, mode: str | None = None, record: bool = False) -> None:
    """
    Validate a config, then revalidate changed values on every save.

    This is a blocking command that runs until interrupted (Ctrl+C).
    """
    console = Console(stderr=True)
    reloader = ConfigReloader(config_path, console, mode=Mode(mode) if mode else None, record=record)

    console.print(f"[bold]Watching[/bold] {config_path}")
    console.print(f"  Mode: {reloader.mode.value}")
    console.print(f"  Platform: {reloader.platform_description}")
    console.print()
    _print_report(console, reloader.startup(), messages_shown=reloader.verbose)
    console.print()
    console.print("[dim]Press Ctrl+C to stop watching[/dim]")

    reload_count = 0

    def on_change(path: Path) -> None:
        nonlocal reload_count
        timestamp = datetime.now().strftime("%H:%M:%S")
        console.print(f"\n[dim]{timestamp}[/dim] {path.name} changed")
        report = reloader.reload()
        if report is None:
            return
        reload_count += 1
        if report.results:
            _print_report(console, report, messages_shown=reloader.verbose)
        else:
            console.print("  no flag values changed", style="dim")

    try:
        run_watch_loop(config_path, on_change)
    except KeyboardInterrupt:
        pass
    console.print()
    console.print(f"[bold]Stopped.[/bold] Applied {reload_count} reload(s).")


def run_history(config_path: Path, *, last_n: int | None = None, output_json: bool = False) -> int:
    """Show recorded validation passes for a config."""
    entries = read_audit_log(config_path, last_n=last_n)

    if output_json:
        import json

        print(json.dumps([e.to_dict() for e in entries], indent=2))
        return 0

    console = Console()
    if not entries:
        console.print("No recorded validation passes.", style="dim")
        return 0

    for entry in entries:
        console.print(format_audit_entry(entry), markup=False, highlight=False)
        console.print()
    return 0
