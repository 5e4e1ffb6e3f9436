"""Fake code scanner.

Runs the pattern catalog over every line of a shell script, suppresses
Critical-tier matches that sit in a legitimate context, and analyzes every
function definition for hollow or suspicious bodies.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from fakeaudit.config import SNIPPET_MAX_CHARS
from fakeaudit.models import CRITICAL, DependencyEdge, FileMetrics, Finding, FunctionRecord
from fakeaudit.scanners.catalog import DEFAULT_CATALOG, PatternCatalog
from fakeaudit.scanners.context import context_snippet, is_legitimate_context
from fakeaudit.scanners.dependencies import map_dependencies
from fakeaudit.scanners.functions import analyze_function, find_functions, function_finding

logger = logging.getLogger(__name__)


@dataclass
class FileScan:
    """Everything extracted from a single file."""

    file_path: str
    findings: list[Finding] = field(default_factory=list)
    functions: list[FunctionRecord] = field(default_factory=list)
    dependencies: list[DependencyEdge] = field(default_factory=list)
    metrics: FileMetrics | None = None


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _check_line_patterns(
    lines: list[str],
    file_path: str,
    catalog: PatternCatalog,
    seen: set[tuple[int, str]],
) -> list[Finding]:
    """Apply the catalog to each line; first rule per (line, category) wins."""
    findings: list[Finding] = []

    for line_num, line in enumerate(lines, start=1):
        for candidate in catalog.classify(line):
            key = (line_num, candidate.category)
            if key in seen:
                continue

            if candidate.severity == CRITICAL:
                if is_legitimate_context(lines, line_num):
                    logger.debug(
                        "Suppressed %s at %s:%d (legitimate context)",
                        candidate.rule.name,
                        file_path,
                        line_num,
                    )
                    continue
                snippet = context_snippet(lines, line_num)
            else:
                snippet = line.strip()[:SNIPPET_MAX_CHARS]

            seen.add(key)
            findings.append(
                Finding(
                    severity=candidate.severity,
                    file_path=file_path,
                    line_number=line_num,
                    description=candidate.rule.description,
                    snippet=snippet,
                    category=candidate.category,
                )
            )

    return findings


def _check_functions(
    lines: list[str],
    file_path: str,
    definitions: list[tuple[int, str, str]],
    seen: set[tuple[int, str]],
) -> tuple[list[FunctionRecord], list[Finding]]:
    records: list[FunctionRecord] = []
    findings: list[Finding] = []

    for line_num, name, style in definitions:
        record = analyze_function(lines, file_path, line_num, name, style)
        records.append(record)

        finding = function_finding(record, lines[line_num - 1])
        if finding is None or (line_num, finding.category) in seen:
            continue
        seen.add((line_num, finding.category))
        findings.append(finding)

    return records, findings


def file_metrics(
    file_path: str,
    lines: list[str],
    definitions: list[tuple[int, str, str]],
) -> FileMetrics:
    """Line, function and comment counts for one file (the shebang counts as a comment)."""
    return FileMetrics(
        file_path=file_path,
        total_lines=len(lines),
        function_count=len(definitions),
        comment_lines=sum(1 for line in lines if line.lstrip().startswith("#")),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def scan_content(
    file_path: str,
    content: str,
    catalog: PatternCatalog = DEFAULT_CATALOG,
) -> FileScan:
    """Scan a single file's content.

    Args:
        file_path: Path to the file (for reporting).
        content: Full text content of the file.
        catalog: Pattern catalog to apply.

    Returns:
        A :class:`FileScan` whose findings are ordered by line number.
    """
    lines = content.splitlines()
    seen: set[tuple[int, str]] = set()

    findings = _check_line_patterns(lines, file_path, catalog, seen)

    definitions = find_functions(lines)
    records, function_findings = _check_functions(lines, file_path, definitions, seen)
    findings.extend(function_findings)
    findings.sort(key=lambda f: f.line_number)

    return FileScan(
        file_path=file_path,
        findings=findings,
        functions=records,
        dependencies=map_dependencies(file_path, lines, definitions),
        metrics=file_metrics(file_path, lines, definitions),
    )


def read_source(file_path: str | Path) -> str:
    """Read a source file, ignoring undecodable bytes.

    Raises:
        OSError: If the file cannot be read.
    """
    with open(file_path, encoding="utf-8", errors="ignore") as fh:
        return fh.read()


def scan_file(
    file_path: str | Path,
    catalog: PatternCatalog = DEFAULT_CATALOG,
) -> FileScan:
    """Read and scan one file.

    Raises:
        OSError: If the file cannot be read.
    """
    return scan_content(str(file_path), read_source(file_path), catalog)


def scan_file_findings(
    file_path: str | Path,
    catalog: PatternCatalog = DEFAULT_CATALOG,
) -> list[Finding]:
    """Return only the findings for *file_path*."""
    return scan_file(file_path, catalog).findings
