"""CLI entry point for cleanshare.

Invoked as::

    cleanshare [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m cleanshare.cli.main

Commands
--------
clean       Clean URLs from arguments, a file and/or piped stdin
explain     Show which rules fire for a single URL
rules       Dump the active (merged) rule set as YAML or JSON
check       Load and compile a rules file, reporting any error
version     Show version information
"""
from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from cleanshare.sanitizer.sanitizer import DEFAULT_MAX_UNWRAP_DEPTH

if TYPE_CHECKING:
    from cleanshare.rules.model import RuleSet
    from cleanshare.sanitizer.sanitizer import UrlSanitizer

console = Console()
err_console = Console(stderr=True)

EXIT_NO_INPUT = 2
_LOG_LEVELS = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


def _configure_logging(level: str) -> None:
    """Route cleanshare's library logging to stderr through rich."""
    package_logger = logging.getLogger("cleanshare")
    for handler in list(package_logger.handlers):
        if isinstance(handler, RichHandler):
            package_logger.removeHandler(handler)
    package_logger.addHandler(RichHandler(console=err_console, show_path=False))
    package_logger.setLevel(getattr(logging, level.upper()))


def _load_rules_or_exit(rules_path: str | None, builtin: bool) -> "RuleSet":
    """Return built-in rules merged with an optional rules file, exiting on error."""
    from cleanshare.errors import RuleError
    from cleanshare.rules import RuleSet, load_rules

    rules = RuleSet.builtin() if builtin else RuleSet.empty()
    if rules_path is None:
        return rules
    try:
        return rules.merge(load_rules(rules_path))
    except RuleError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)


def _sanitizer_or_exit(
    rules_path: str | None, builtin: bool, max_unwrap_depth: int = DEFAULT_MAX_UNWRAP_DEPTH
) -> "UrlSanitizer":
    """Build a sanitizer from CLI options, exiting on any rule error."""
    from cleanshare.errors import RuleError
    from cleanshare.sanitizer import SanitizerConfig, UrlSanitizer

    rules = _load_rules_or_exit(rules_path, builtin)
    try:
        return UrlSanitizer(rules, SanitizerConfig(max_unwrap_depth=max_unwrap_depth))
    except RuleError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)


def _rules_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the shared ``--rules`` / ``--no-builtin`` options."""
    func = click.option(
        "--no-builtin",
        is_flag=True,
        default=False,
        help="Do not start from the built-in rules.",
    )(func)
    func = click.option(
        "--rules",
        "-r",
        "rules_path",
        default=None,
        type=click.Path(dir_okay=False),
        help="Additional rules file (YAML or JSON), merged over the built-ins.",
    )(func)
    return func


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="cleanshare")
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    envvar="CLEANSHARE_LOG_LEVEL",
    show_default=True,
    help="Library log level (also read from CLEANSHARE_LOG_LEVEL).",
)
def cli(log_level: str) -> None:
    """Clean trackers and redirect wrappers from URLs."""
    _configure_logging(log_level)


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from cleanshare import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]cleanshare[/bold]", f"v{__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# clean command
# ---------------------------------------------------------------------------


@cli.command(name="clean")
@click.option("--url", "-u", "urls", multiple=True, help="URL to clean (can be repeated).")
@click.option(
    "--file",
    "-f",
    "input_file",
    default=None,
    type=click.Path(dir_okay=False),
    help="Read URLs from a file, one per line.",
)
@click.option("--output", "-o", default=None, help="Output file path (defaults to stdout).")
@_rules_options
@click.option(
    "--max-unwrap-depth",
    type=click.IntRange(min=0),
    default=DEFAULT_MAX_UNWRAP_DEPTH,
    show_default=True,
    help="Maximum number of redirect wrappers followed per URL.",
)
@click.option("--no-stdin", is_flag=True, default=False, help="Never read URLs from stdin.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Report skipped URLs on stderr.")
def clean_command(
    urls: tuple[str, ...],
    input_file: str | None,
    output: str | None,
    rules_path: str | None,
    no_builtin: bool,
    max_unwrap_depth: int,
    no_stdin: bool,
    verbose: bool,
) -> None:
    """Clean trackers from URLs.

    URLs are taken from --url values, then lines of --file, then piped
    stdin, in that order.  Invalid lines are skipped.

    Examples:

    \b
        cleanshare clean -u "https://example.com/?utm_source=x&id=1"
        cleanshare clean -f links.txt -o clean.txt
        pbpaste | cleanshare clean -r my-rules.yaml
    """
    from cleanshare.batch import BatchRunner, collect_inputs

    # Rules first: a broken rule set aborts before any input is read
    sanitizer = _sanitizer_or_exit(rules_path, not no_builtin, max_unwrap_depth)

    stdin = click.get_text_stream("stdin")
    piped = None if no_stdin or stdin.isatty() else stdin
    try:
        inputs = collect_inputs(
            urls, Path(input_file) if input_file else None, piped
        )
    except OSError as exc:
        err_console.print(f"[red]Error:[/red] Failed to open input file {input_file}: {escape(str(exc))}")
        sys.exit(1)

    if not inputs:
        err_console.print("No input URLs provided. Use -u, -f, or pipe input.")
        sys.exit(EXIT_NO_INPUT)

    result = BatchRunner(sanitizer).run(inputs)

    if verbose:
        for failure in result.failures:
            err_console.print(f"[yellow]{escape(str(failure))}[/yellow]", highlight=False)

    text = result.render()
    if output:
        try:
            Path(output).write_text(text, encoding="utf-8")
        except OSError as exc:
            err_console.print(f"[red]Error:[/red] Failed to create output file {output}: {escape(str(exc))}")
            sys.exit(1)
    else:
        click.echo(text, nl=False)


# ---------------------------------------------------------------------------
# explain command
# ---------------------------------------------------------------------------


@cli.command(name="explain")
@click.argument("url")
@_rules_options
def explain_command(url: str, rules_path: str | None, no_builtin: bool) -> None:
    """Show which rules fire for URL and why.

    URL is the address to analyse.
    """
    from cleanshare.errors import UrlError

    sanitizer = _sanitizer_or_exit(rules_path, not no_builtin)
    try:
        report = sanitizer.explain(url)
    except UrlError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    for step in report.unwrap_chain:
        console.print(f"[cyan]unwrap[/cyan] {escape(step.wrapper)} [dim]via {escape(step.param)!r}[/dim]", highlight=False)
    for fragment in report.fragments_removed:
        console.print(f"[cyan]fragment removed[/cyan] #{escape(fragment)}", highlight=False)

    if report.decisions:
        table = Table(title="Query parameters", show_lines=False)
        table.add_column("Parameter", style="bold")
        table.add_column("Value")
        table.add_column("Decision")
        table.add_column("Rule")
        for decision in report.decisions:
            color = "green" if decision.retained else "red"
            verdict = "kept" if decision.retained else "removed"
            table.add_row(
                escape(decision.name),
                escape(decision.value),
                f"[{color}]{verdict}[/{color}]",
                escape(decision.reason.name.lower() + (f" ({decision.pattern})" if decision.pattern else "")),
            )
        console.print(table)

    console.print(f"[bold]Result:[/bold] {escape(report.cleaned)}", highlight=False)


# ---------------------------------------------------------------------------
# rules command
# ---------------------------------------------------------------------------


@cli.command(name="rules")
@_rules_options
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["yaml", "json"], case_sensitive=False),
    default="yaml",
    help="Output format",
)
@click.option("--output", "-o", default=None, help="Output file path (defaults to stdout)")
def rules_command(
    rules_path: str | None, no_builtin: bool, output_format: str, output: str | None
) -> None:
    """Dump the active rule set (built-ins merged with --rules)."""
    from cleanshare.rules import dumps_rules

    rules = _load_rules_or_exit(rules_path, not no_builtin)
    text = dumps_rules(rules, output_format.lower())

    if output:
        Path(output).write_text(text, encoding="utf-8")
        console.print(f"[green]Rules written to[/green] {output}")
    else:
        syntax = Syntax(text, output_format.lower(), line_numbers=False)
        console.print(syntax)


# ---------------------------------------------------------------------------
# check command
# ---------------------------------------------------------------------------


@cli.command(name="check")
@click.argument("file", type=click.Path(dir_okay=False))
def check_command(file: str) -> None:
    """Load and compile a rules file on its own.

    FILE is the path to the .yaml, .yml or .json rules file.
    """
    from cleanshare.errors import RuleError
    from cleanshare.rules import load_rules

    try:
        rules = load_rules(file)
        compiled = rules.compile()
    except RuleError as exc:
        err_console.print(f"[red]INVALID[/red] {escape(str(exc))}")
        sys.exit(1)

    skipped = sum(
        len(host.rule.remove_param_globs) - len(host.remove_param_globs)
        for host in compiled.host_rules
    )

    table = Table(title=f"Rules: {file}", show_header=False)
    table.add_row("remove_params", str(len(rules.remove_params)))
    table.add_row("remove_param_globs", str(len(rules.remove_param_globs)))
    table.add_row("keep_params", str(len(rules.keep_params)))
    table.add_row("host_rules", str(len(rules.host_rules)))
    console.print(table)

    if skipped:
        console.print(f"[yellow]OK[/yellow] {file}: {skipped} invalid host glob(s) will be ignored")
    else:
        console.print(f"[green]OK[/green] {file}: no issues found")


if __name__ == "__main__":
    cli()
