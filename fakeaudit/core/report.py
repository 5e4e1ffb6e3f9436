"""Report emitter.

Turns a :class:`~fakeaudit.models.ScanResult` into a Markdown report, one
machine-readable record per finding, a CSV priority matrix and a dependency
summary.  Findings are read, never modified.
"""

import csv
import io
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from fakeaudit import __version__
from fakeaudit.config import REPORT_CSV, REPORT_DEPENDENCIES, REPORT_JSON, REPORT_MARKDOWN
from fakeaudit.core.scoring import effort, impact_score, priority, quality_rating, risk_level
from fakeaudit.errors import ReportWriteError
from fakeaudit.models import CRITICAL, WARNING, Finding, ScanResult
from fakeaudit.scanners.dependencies import dependency_total

PRIORITY_COLUMNS: list[str] = [
    "File",
    "Line",
    "Severity",
    "Category",
    "Impact_Score",
    "Priority",
    "Dependencies",
    "Effort_Estimate",
    "Risk_Level",
    "Finding_ID",
]

SEVERITY_ICONS: dict[str, str] = {
    CRITICAL: "🔴",
    WARNING: "🟡",
}
_DEFAULT_ICON = "🔵"

# Functions called more often than this are listed in the dependency summary
_HIGH_DEPENDENCY_CALLS = 3


@dataclass
class Report:
    """All renderings of a scan run."""

    markdown: str
    records: list[dict] = field(default_factory=list)
    priority_rows: list[dict] = field(default_factory=list)
    dependency_markdown: str = ""
    generated_at: str = ""


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


def finding_record(finding: Finding) -> dict:
    """Finding fields plus computed impact, priority and effort."""
    record = finding.to_dict()
    record["impact_score"] = impact_score(finding)
    record["priority"] = priority(finding)
    record["effort_estimate"] = effort(finding.category)
    return record


def priority_row(finding: Finding, dependencies: int) -> dict:
    impact = impact_score(finding)
    return {
        "File": finding.file_path,
        "Line": finding.line_number,
        "Severity": finding.severity,
        "Category": finding.category,
        "Impact_Score": impact,
        "Priority": priority(finding),
        "Dependencies": dependencies,
        "Effort_Estimate": effort(finding.category),
        "Risk_Level": risk_level(finding.severity, impact),
        "Finding_ID": finding.finding_id,
    }


def _sorted_findings(findings: list[Finding]) -> list[Finding]:
    return sorted(findings, key=lambda f: (f.file_path, f.line_number))


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------


def _render_header(result: ScanResult, generated_at: str) -> list[str]:
    s = result.summary
    lines = [
        "# Comprehensive Fake Code Audit Report",
        "",
        f"**Generated:** {generated_at}  ",
        f"**Version:** {__version__}  ",
        f"**Target:** `{result.target}`  ",
        f"**Catalog:** {result.catalog_version}  ",
        f"**Files Scanned:** {s.files_scanned}  ",
        f"**Total Issues:** {s.total_issues}  ",
        f"**ShellCheck Issues:** {s.tool_issues}",
        "",
    ]

    notes: list[str] = []
    if s.interrupted:
        notes.append("> ⚠️ The scan was interrupted. Results are partial.")
    if s.files_skipped:
        notes.append(f"> ⚠️ {s.files_skipped} file(s) could not be read and were skipped.")
    if not s.linter_available:
        notes.append("> ℹ️ shellcheck was not available. Syntax analysis was skipped.")
    if notes:
        lines.extend(notes + [""])

    lines += [
        "## Executive Summary",
        "",
        f"This audit identified **{s.total_issues}** potential issues across "
        f"**{s.files_scanned}** shell script files:",
        "",
        f"- 🔴 **Critical Issues:** {s.critical} (Immediate action required)",
        f"- 🟡 **Warning Issues:** {s.warning} (Review and fix within sprint)",
        f"- 🔵 **Minor Issues:** {s.minor} (Address during next refactor)",
        f"- 🔧 **ShellCheck Issues:** {s.tool_issues} (Syntax and style improvements)",
        "",
        f"**Quality Score:** {s.quality_score}/100 ({quality_rating(s.quality_score)})",
        "",
        "## Risk Assessment",
        "",
        "| Severity | Count | Risk Level | Action Required |",
        "|----------|-------|------------|-----------------|",
        f"| Critical | {s.critical} | HIGH | Immediate remediation required |",
        f"| Warning | {s.warning} | MEDIUM | Review and fix within sprint |",
        f"| Minor | {s.minor} | LOW | Address during next refactor |",
        f"| ShellCheck | {s.tool_issues} | VARIES | Follow shellcheck recommendations |",
        "",
    ]
    return lines


def _render_findings(findings: list[Finding]) -> list[str]:
    lines = ["## Detailed Findings by File", ""]
    if not findings:
        return lines + ["No issues found.", ""]

    current_file = None
    file_issues = 0
    for finding in _sorted_findings(findings):
        if finding.file_path != current_file:
            if current_file is not None:
                lines += [f"**Total Issues in File:** {file_issues}", ""]
            lines += [f"### 📁 `{finding.file_path}`", ""]
            current_file = finding.file_path
            file_issues = 0
        file_issues += 1

        icon = SEVERITY_ICONS.get(finding.severity, _DEFAULT_ICON)
        lines += [
            f"#### {icon} {finding.severity} - Line {finding.line_number} "
            f"(ID: {finding.finding_id})",
            "",
            f"**Category:** `{finding.category}`  ",
            f"**Description:** {finding.description}",
            "",
            "```bash",
            finding.snippet,
            "```",
            "",
            f"**Impact Score:** {impact_score(finding)}  ",
            f"**Priority:** {priority(finding)}  ",
            f"**Effort Estimate:** {effort(finding.category)}",
            "",
            "---",
            "",
        ]

    lines += [f"**Total Issues in File:** {file_issues}", ""]
    return lines


def _render_dependency_table(result: ScanResult) -> list[str]:
    if not result.dependencies:
        return []
    lines = [
        "## Function Dependency Analysis",
        "",
        "Call counts are name-based and limited to the defining file.",
        "",
        "| File | Function | Call Count | Risk Level |",
        "|------|----------|------------|------------|",
    ]
    for edge in result.dependencies:
        lines.append(
            f"| `{edge.file_path}` | `{edge.function}` | {edge.call_count} | {edge.risk} |"
        )
    return lines + [""]


def _render_file_metrics(result: ScanResult) -> list[str]:
    if not result.file_metrics:
        return []
    lines = [
        "## File Metrics",
        "",
        "| File | Lines | Functions | Comment Ratio |",
        "|------|-------|-----------|---------------|",
    ]
    for metrics in sorted(result.file_metrics, key=lambda m: m.file_path):
        lines.append(
            f"| `{metrics.file_path}` | {metrics.total_lines} | "
            f"{metrics.function_count} | {metrics.comment_ratio}% |"
        )
    return lines + [""]


def render_markdown(result: ScanResult, generated_at: str) -> str:
    lines = _render_header(result, generated_at)
    lines += _render_findings(result.findings)
    lines += _render_file_metrics(result)
    lines += _render_dependency_table(result)
    lines += [
        "## Elimination Priority Matrix",
        "",
        f"See `{REPORT_CSV}` for the per-finding prioritization.",
        "",
        "---",
        f"*Report generated by fakeaudit v{__version__}*",
        "",
    ]
    return "\n".join(lines)


def render_dependency_markdown(result: ScanResult) -> str:
    lines = [
        "# Function Dependency Analysis",
        "",
        "## High-Risk Dependencies",
        "",
        "Functions with high call counts that may amplify fake code impact:",
        "",
    ]
    busy = [e for e in result.dependencies if e.call_count > _HIGH_DEPENDENCY_CALLS]
    if not busy:
        lines.append("None.")
    for edge in sorted(busy, key=lambda e: e.call_count, reverse=True):
        lines.append(
            f"- **`{edge.function}`** in `{edge.file_path}` "
            f"(called {edge.call_count} times, risk {edge.risk})"
        )
    lines += [
        "",
        "## Elimination Strategy",
        "",
        "When fixing fake functions, prioritize based on:",
        "1. Critical severity level",
        "2. High dependency count",
        "3. Impact on core functionality",
        "4. Implementation effort required",
        "",
    ]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def emit(result: ScanResult) -> Report:
    """Build every report rendering for *result*."""
    generated_at = datetime.now(timezone.utc).isoformat(timespec="seconds")
    dependency_totals = {
        path: dependency_total(result.dependencies, path)
        for path in {f.file_path for f in result.findings}
    }

    return Report(
        markdown=render_markdown(result, generated_at),
        records=[finding_record(f) for f in result.findings],
        priority_rows=[
            priority_row(f, dependency_totals[f.file_path]) for f in result.findings
        ],
        dependency_markdown=render_dependency_markdown(result),
        generated_at=generated_at,
    )


def render_json(report: Report, result: ScanResult) -> str:
    document = {
        "metadata": {
            "version": __version__,
            "timestamp": report.generated_at,
            "scan_target": result.target,
            "catalog_version": result.catalog_version,
            "files_scanned": result.summary.files_scanned,
            "total_issues": result.summary.total_issues,
            "shellcheck_issues": result.summary.tool_issues,
        },
        "summary": result.summary.to_dict(),
        "findings": report.records,
        "dependencies": [edge.to_dict() for edge in result.dependencies],
        "skipped_files": list(result.skipped_files),
        "file_metrics": [metrics.to_dict() for metrics in result.file_metrics],
    }
    return json.dumps(document, indent=2, ensure_ascii=False)


def render_csv(report: Report) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=PRIORITY_COLUMNS, lineterminator="\n")
    writer.writeheader()
    writer.writerows(report.priority_rows)
    return buffer.getvalue()


def write_reports(report: Report, result: ScanResult, output_dir: str | Path) -> dict[str, Path]:
    """Write all report files into *output_dir*.

    Returns:
        Mapping of report kind (``markdown``, ``json``, ``csv``,
        ``dependencies``) to the written path.

    Raises:
        ReportWriteError: If the directory or a file cannot be written.
    """
    out = Path(output_dir)
    outputs = {
        "markdown": (out / REPORT_MARKDOWN, report.markdown),
        "json": (out / REPORT_JSON, render_json(report, result)),
        "csv": (out / REPORT_CSV, render_csv(report)),
        "dependencies": (out / REPORT_DEPENDENCIES, report.dependency_markdown),
    }

    written: dict[str, Path] = {}
    try:
        out.mkdir(parents=True, exist_ok=True)
        for kind, (path, text) in outputs.items():
            path.write_text(text, encoding="utf-8")
            written[kind] = path
    except OSError as exc:
        raise ReportWriteError(f"Cannot write reports to {out}: {exc}") from exc

    return written
