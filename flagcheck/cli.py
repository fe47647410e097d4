"""CLI entrypoint for flagcheck."""

import sys
from pathlib import Path

import click

from . import __version__
from .flags.platform import ARCHES

_CONFIG_ARG = click.argument(
    "config",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path),
)

_MODE_OPTION = click.option(
    "--mode",
    type=click.Choice(["strict", "verify"]),
    default=None,
    help="Override the [validation] mode from the config",
)


@click.group()
@click.version_option(__version__, prog_name="flagcheck")
def cli() -> None:
    """flagcheck - constraint checking for runtime tuning flags.

    Validate compiler flag values against their constraints, either
    rejecting bad values (strict) or replacing them with the nearest
    acceptable value (verify).
    """


@cli.command()
@_CONFIG_ARG
@_MODE_OPTION
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output the report as JSON",
)
@click.option(
    "--quiet",
    is_flag=True,
    help="Do not print strict-mode violation messages while checking (corrections are still announced)",
)
@click.option(
    "--record",
    is_flag=True,
    help="Append corrections and violations to .flagcheck/corrections.log",
)
@click.option(
    "--only",
    "only",
    multiple=True,
    metavar="FLAG",
    help="Only check this flag (repeatable)",
)
def check(config: Path, mode: str | None, output_json: bool, quiet: bool, record: bool, only: tuple[str, ...]) -> None:
    """Check every flag of CONFIG against its constraint.

    Constraints run in dependency order: a constraint that reads another
    flag always runs after that flag's own constraint.

    Examples:

        flagcheck check flags.toml

        flagcheck check flags.toml --mode verify --record
    """
    from .commands.check import run_check

    try:
        exit_code = run_check(config, mode, output_json, quiet, record, only)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    sys.exit(exit_code)


@cli.command()
@click.argument("flag")
def explain(flag: str) -> None:
    """Explain FLAG and the constraint applied to it."""
    from .commands.check import run_explain

    sys.exit(run_explain(flag))


@cli.command("list")
@click.option(
    "--arch",
    type=click.Choice(sorted(ARCHES)),
    default="x86_64",
    show_default=True,
    help="Target architecture",
)
@click.option(
    "--compilers",
    type=click.Choice(["c1", "c2", "c1+c2", "none"]),
    default="c1+c2",
    show_default=True,
    help="Compilers built into the runtime",
)
def list_constraints(arch: str, compilers: str) -> None:
    """List constraints in evaluation order."""
    from .commands.check import run_list
    from .flags.platform import Platform

    built = set() if compilers == "none" else set(compilers.split("+"))
    platform = Platform(arch=arch, compiler1="c1" in built, compiler2="c2" in built)
    sys.exit(run_list(platform))


@cli.command()
@_CONFIG_ARG
@_MODE_OPTION
@click.option(
    "--record",
    is_flag=True,
    help="Append corrections and violations to .flagcheck/corrections.log",
)
def watch(config: Path, mode: str | None, record: bool) -> None:
    """Validate CONFIG, then revalidate changed values on every save.

    Runs until interrupted (Ctrl+C). Only flags whose value changed, and the
    constraints that read them, are revalidated.
    """
    from .commands.watch_cmd import run_watch

    try:
        run_watch(config, mode=mode, record=record)
    except ValueError as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@_CONFIG_ARG
@click.option(
    "--last",
    "last_n",
    type=int,
    default=None,
    help="Show only the last N entries",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output entries as JSON",
)
def history(config: Path, last_n: int | None, output_json: bool) -> None:
    """Show recorded corrections and violations for CONFIG."""
    from .commands.watch_cmd import run_history

    sys.exit(run_history(config, last_n=last_n, output_json=output_json))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
