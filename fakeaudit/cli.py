"""fakeaudit CLI — Entry point for the fake code detector."""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from fakeaudit import __app_name__, __version__
from fakeaudit.core.pipeline import run_scan
from fakeaudit.core.report import emit, render_json, write_reports
from fakeaudit.core.scoring import impact_score, priority, quality_rating
from fakeaudit.core.selftest import run_selftest
from fakeaudit.errors import FakeAuditError
from fakeaudit.models import CRITICAL, MINOR, SEVERITIES, WARNING, ScanResult
from fakeaudit.scanners.catalog import DEFAULT_CATALOG, PatternCatalog, load_catalog
from fakeaudit.utils import shorten_path

# ---------------------------------------------------------------------------
# App & Console
# ---------------------------------------------------------------------------

app = typer.Typer(
    name=__app_name__,
    help="🕵️ fakeaudit — Detect fake and placeholder code in shell scripts.",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

_NO_GATE = "NONE"
_EXIT_INTERRUPTED = 130

# ---------------------------------------------------------------------------
# Severity → Rich color mapping
# ---------------------------------------------------------------------------

_SEVERITY_COLORS: dict[str, str] = {
    CRITICAL: "red",
    WARNING: "yellow",
    MINOR: "cyan",
}

# ---------------------------------------------------------------------------
# Version callback
# ---------------------------------------------------------------------------


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]{__app_name__}[/bold cyan] v{__version__}")
        raise typer.Exit()


# ---------------------------------------------------------------------------
# Global options
# ---------------------------------------------------------------------------


@app.callback()
def main(
    version: Optional[bool] = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show the application version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging.",
    ),
) -> None:
    """fakeaudit — find functions that fake success in your shell scripts."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def scan(
    path: str = typer.Argument(
        ...,
        help="Shell script or directory of shell scripts to scan.",
    ),
    output_dir: Optional[str] = typer.Option(  # noqa: UP007
        None,
        "--output-dir",
        "-o",
        help="Write Markdown, JSON and CSV reports into this directory.",
    ),
    output_json: bool = typer.Option(
        False,
        "--json",
        help="Output results as JSON instead of Rich tables.",
    ),
    catalog_path: Optional[str] = typer.Option(  # noqa: UP007
        None,
        "--catalog",
        "-c",
        help="YAML pattern catalog extending or replacing the built-in rules.",
    ),
    no_shellcheck: bool = typer.Option(
        False,
        "--no-shellcheck",
        help="Do not merge ShellCheck findings even if shellcheck is installed.",
    ),
    fail_on: str = typer.Option(
        CRITICAL,
        "--fail-on",
        help="Exit with code 1 if any finding meets this severity "
        "(CRITICAL, WARNING, MINOR, or NONE to never fail).",
    ),
) -> None:
    """Scan shell scripts for fake implementations and placeholders."""

    target = Path(path).resolve()

    # --- Validate path ---
    if not target.exists():
        console.print(f"[bold red]✗[/bold red] Path does not exist: {target}")
        raise typer.Exit(code=1)

    # --- Validate --fail-on value ---
    fail_on = fail_on.upper()
    if fail_on not in SEVERITIES and fail_on != _NO_GATE:
        console.print(
            f"[bold red]✗[/bold red] Invalid --fail-on value: {fail_on}. "
            f"Must be one of: CRITICAL, WARNING, MINOR, NONE"
        )
        raise typer.Exit(code=1)

    catalog = _load_catalog_or_exit(catalog_path)

    # --- Run pipeline ---
    if not output_json:
        console.print(
            Panel(
                "[bold green]fakeaudit initialized[/bold green]",
                title="🕵️ fakeaudit",
                subtitle=f"v{__version__}",
                border_style="cyan",
            )
        )
        console.print(f"[dim]Target:[/dim] {target}")
        console.print(f"[dim]Catalog:[/dim] {catalog.version}\n")
        console.print("[bold]Scanning…[/bold]\n")

    result = run_scan(target, catalog, use_linter=not no_shellcheck)
    report = emit(result)

    # --- Output ---
    if output_json:
        print(render_json(report, result))
    else:
        _print_rich(result)

    if output_dir:
        try:
            written = write_reports(report, result, output_dir)
        except FakeAuditError as exc:
            console.print(f"[bold red]✗[/bold red] {escape(str(exc))}")
            raise typer.Exit(code=1)
        if not output_json:
            _print_written(written)

    # --- Exit status ---
    if result.summary.interrupted:
        if not output_json:
            console.print(
                "\n[bold yellow]⚠ Scan interrupted.[/bold yellow] "
                "Results above are partial; run the scan again to complete it."
            )
        raise typer.Exit(code=_EXIT_INTERRUPTED)

    if fail_on != _NO_GATE and result.has_severity(fail_on):
        if not output_json:
            console.print(
                f"\n[bold red]✗ Scan failed:[/bold red] "
                f"Findings at severity [bold]{fail_on}[/bold] or above were found."
            )
        raise typer.Exit(code=1)


@app.command()
def patterns(
    catalog_path: Optional[str] = typer.Option(  # noqa: UP007
        None,
        "--catalog",
        "-c",
        help="YAML pattern catalog to list instead of the built-in one.",
    ),
) -> None:
    """List the rules of the pattern catalog."""
    catalog = _load_catalog_or_exit(catalog_path)

    table = Table(
        title=f"📚 Pattern Catalog ({catalog.version})",
        header_style="bold magenta",
    )
    table.add_column("Rule", style="bold")
    table.add_column("Severity", justify="center")
    table.add_column("Category")
    table.add_column("Pattern", style="dim", max_width=50)
    table.add_column("Description", max_width=40)

    for rule in catalog.rules:
        color = _SEVERITY_COLORS.get(rule.severity, "white")
        table.add_row(
            rule.name,
            f"[bold {color}]{rule.severity}[/bold {color}]",
            rule.category,
            escape(rule.pattern.pattern),
            rule.description,
        )

    console.print(table)


@app.command()
def selftest() -> None:
    """Scan a built-in sample script and verify the expected detections."""
    outcome = run_selftest()

    table = Table(title="🧪 Self-test findings", header_style="bold magenta")
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Severity", justify="center")
    table.add_column("Category", style="bold")
    table.add_column("Description", max_width=60)
    for finding in outcome.findings:
        color = _SEVERITY_COLORS.get(finding.severity, "white")
        table.add_row(
            str(finding.line_number),
            f"[bold {color}]{finding.severity}[/bold {color}]",
            finding.category,
            escape(finding.description),
        )
    console.print(table)

    if outcome.passed:
        console.print("[bold green]✔ Self-test passed[/bold green]")
        return

    for category in outcome.missing:
        console.print(f"[bold red]✗[/bold red] Expected detection missing: {category}")
    for finding in outcome.false_positives:
        console.print(f"[bold red]✗[/bold red] False positive: {escape(finding.description)}")
    raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def _load_catalog_or_exit(catalog_path: str | None) -> PatternCatalog:
    if catalog_path is None:
        return DEFAULT_CATALOG
    try:
        return load_catalog(catalog_path)
    except FakeAuditError as exc:
        console.print(f"[bold red]✗[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)


def _print_rich(result: ScanResult) -> None:
    """Render scan results using Rich tables and panels."""
    if result.findings:
        _print_findings_table(result)
    else:
        console.print(
            Panel(
                "[bold green]✔ No fake code found[/bold green]",
                border_style="green",
            )
        )
    _print_summary(result)


def _print_findings_table(result: ScanResult) -> None:
    """Render detected findings as a Rich table."""
    table = Table(
        title="🔍 Detected Findings",
        show_lines=True,
        header_style="bold magenta",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("File", style="cyan", max_width=40)
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Category", style="bold")
    table.add_column("Severity", justify="center")
    table.add_column("Impact", justify="right")
    table.add_column("Priority")
    table.add_column("Description", max_width=50)

    ordered = sorted(result.findings, key=lambda f: (f.file_path, f.line_number))
    for idx, finding in enumerate(ordered, start=1):
        color = _SEVERITY_COLORS.get(finding.severity, "white")
        table.add_row(
            str(idx),
            shorten_path(finding.file_path, result.target),
            str(finding.line_number),
            finding.category,
            f"[bold {color}]{finding.severity}[/bold {color}]",
            str(impact_score(finding)),
            priority(finding),
            escape(finding.description),
        )

    console.print(table)
    console.print()


def _print_summary(result: ScanResult) -> None:
    """Print a scan summary with severity breakdown and quality score."""
    s = result.summary

    summary_lines = [
        f"[bold]Files scanned:[/bold] {s.files_scanned}",
        f"[bold]Files skipped:[/bold] {s.files_skipped}",
        f"[bold]Total issues:[/bold]  {s.total_issues}",
        "",
        f"[bold red]CRITICAL:[/bold red] {s.critical}",
        f"[bold yellow]WARNING:[/bold yellow]  {s.warning}",
        f"[bold cyan]MINOR:[/bold cyan]    {s.minor}",
        f"[bold blue]ShellCheck:[/bold blue] {s.tool_issues}",
        "",
        f"[bold]Quality score:[/bold] {s.quality_score}/100 "
        f"({quality_rating(s.quality_score)})",
    ]
    if not s.linter_available:
        summary_lines.append("[dim]shellcheck not found — syntax analysis skipped[/dim]")

    console.print(
        Panel(
            "\n".join(summary_lines),
            title="📊 Scan Summary",
            border_style="cyan",
        )
    )


def _print_written(written: dict[str, Path]) -> None:
    console.print("\n[bold]📁 Reports written:[/bold]")
    for kind, path in written.items():
        console.print(f"   [dim]{kind}:[/dim] [cyan]{path}[/cyan]")
