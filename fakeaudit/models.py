"""fakeaudit data models for scan findings."""

import uuid
from dataclasses import dataclass, field
from pathlib import Path


# ---------------------------------------------------------------------------
# Severity constants & ordering
# ---------------------------------------------------------------------------

CRITICAL: str = "CRITICAL"
WARNING: str = "WARNING"
MINOR: str = "MINOR"

SEVERITIES: tuple[str, ...] = (CRITICAL, WARNING, MINOR)

SEVERITY_ORDER: dict[str, int] = {
    CRITICAL: 3,
    WARNING: 2,
    MINOR: 1,
}


# ---------------------------------------------------------------------------
# Finding categories
# ---------------------------------------------------------------------------

FAKE_IMPLEMENTATION: str = "FAKE_IMPLEMENTATION"
FAKE_SUCCESS: str = "FAKE_SUCCESS"
PLACEHOLDER_CODE: str = "PLACEHOLDER_CODE"
HOLLOW_FUNCTION: str = "HOLLOW_FUNCTION"
SUSPICIOUS_RATIO: str = "SUSPICIOUS_RATIO"
TEST_CODE_IN_PROD: str = "TEST_CODE_IN_PROD"
TEST_MODE_FLAG: str = "TEST_MODE_FLAG"
FAKE_FILE_OP: str = "FAKE_FILE_OP"
PLACEHOLDER_COMMENT: str = "PLACEHOLDER_COMMENT"
SHELLCHECK_ISSUE: str = "SHELLCHECK_ISSUE"

CATEGORIES: tuple[str, ...] = (
    FAKE_IMPLEMENTATION,
    FAKE_SUCCESS,
    PLACEHOLDER_CODE,
    HOLLOW_FUNCTION,
    SUSPICIOUS_RATIO,
    TEST_CODE_IN_PROD,
    TEST_MODE_FLAG,
    FAKE_FILE_OP,
    PLACEHOLDER_COMMENT,
    SHELLCHECK_ISSUE,
)


# ---------------------------------------------------------------------------
# Function classification
# ---------------------------------------------------------------------------

LEGITIMATE: str = "LEGITIMATE"
HOLLOW: str = "HOLLOW"
SUSPICIOUS: str = "SUSPICIOUS_RATIO"


def new_finding_id(file_path: str, line_number: int) -> str:
    """Return a unique finding id such as ``install.sh_12_3f9a1c2e``."""
    return f"{Path(file_path).name}_{line_number}_{uuid.uuid4().hex[:8]}"


# ---------------------------------------------------------------------------
# Finding model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Finding:
    """A single heuristic issue detected during a scan.

    Attributes:
        severity: ``CRITICAL``, ``WARNING`` or ``MINOR``.
        file_path: Path of the scanned file the finding belongs to.
        line_number: 1-based line number where the issue was found.
        description: Human-readable explanation of the finding.
        snippet: Offending source text, possibly with surrounding lines.
        category: One of :data:`CATEGORIES`.
        finding_id: Unique identifier. Only uniqueness is guaranteed, the
            value differs between two scans of the same file.
    """

    severity: str
    file_path: str
    line_number: int
    description: str
    snippet: str
    category: str
    finding_id: str = ""

    def __post_init__(self) -> None:
        if self.severity not in SEVERITY_ORDER:
            raise ValueError(f"Unknown severity: {self.severity}")
        if self.category not in CATEGORIES:
            raise ValueError(f"Unknown category: {self.category}")
        if not self.finding_id:
            object.__setattr__(
                self, "finding_id", new_finding_id(self.file_path, self.line_number)
            )

    def __str__(self) -> str:
        return (
            f"[{self.severity}] {self.category} "
            f"at {self.file_path}:{self.line_number} — {self.description}"
        )

    def to_dict(self) -> dict:
        """Return a JSON-serializable dictionary representation."""
        return {
            "id": self.finding_id,
            "severity": self.severity,
            "file": self.file_path,
            "line": self.line_number,
            "description": self.description,
            "code": self.snippet,
            "category": self.category,
        }


# ---------------------------------------------------------------------------
# Function & dependency records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FunctionRecord:
    """A named shell function extracted from a file, with its operation counts."""

    name: str
    file_path: str
    start_line: int
    style: str = "block"
    real_ops: int = 0
    validation_ops: int = 0
    error_handling_ops: int = 0
    fake_ops: int = 0
    classification: str = LEGITIMATE
    impact: int = 0
    is_utility: bool = False

    @property
    def legitimate_ops(self) -> int:
        return self.real_ops + self.validation_ops + self.error_handling_ops

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "file": self.file_path,
            "start_line": self.start_line,
            "style": self.style,
            "real_ops": self.real_ops,
            "validation_ops": self.validation_ops,
            "error_handling_ops": self.error_handling_ops,
            "fake_ops": self.fake_ops,
            "classification": self.classification,
            "impact": self.impact,
        }


def dependency_risk(call_count: int) -> str:
    """Risk label for a function called *call_count* times in its file."""
    if call_count > 5:
        return "HIGH"
    if call_count > 2:
        return "MEDIUM"
    return "LOW"


@dataclass(frozen=True)
class DependencyEdge:
    """Number of call sites of *function* observed elsewhere in *file_path*."""

    file_path: str
    function: str
    call_count: int

    @property
    def risk(self) -> str:
        return dependency_risk(self.call_count)

    def to_dict(self) -> dict:
        return {
            "file": self.file_path,
            "function": self.function,
            "call_count": self.call_count,
            "risk_level": self.risk,
        }


@dataclass(frozen=True)
class FileMetrics:
    """Size and comment density of one scanned file."""

    file_path: str
    total_lines: int = 0
    function_count: int = 0
    comment_lines: int = 0

    @property
    def comment_ratio(self) -> int:
        """Comment lines as a whole-number percentage of all lines."""
        if not self.total_lines:
            return 0
        return self.comment_lines * 100 // self.total_lines

    def to_dict(self) -> dict:
        return {
            "file": self.file_path,
            "total_lines": self.total_lines,
            "function_count": self.function_count,
            "comment_lines": self.comment_lines,
            "comment_ratio": self.comment_ratio,
        }


# ---------------------------------------------------------------------------
# ScanSummary & ScanResult models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScanSummary:
    """Aggregate counts for a scan run, computed once from the final findings.

    Attributes:
        files_scanned: Number of files that were fully scanned.
        files_skipped: Number of files that could not be read.
        total_issues: Number of findings.
        critical: Number of ``CRITICAL`` findings.
        warning: Number of ``WARNING`` findings.
        minor: Number of ``MINOR`` findings.
        tool_issues: Findings imported from the external linter (also
            included in the per-severity counts).
        linter_available: ``False`` when the linter was requested but missing.
        interrupted: ``True`` when the run stopped early; results are partial.
        quality_score: 0-100 display heuristic, see
            :func:`fakeaudit.core.scoring.quality_score`.
    """

    files_scanned: int = 0
    files_skipped: int = 0
    total_issues: int = 0
    critical: int = 0
    warning: int = 0
    minor: int = 0
    tool_issues: int = 0
    linter_available: bool = True
    interrupted: bool = False
    quality_score: int = 100

    @classmethod
    def from_findings(
        cls,
        findings: list[Finding],
        *,
        files_scanned: int,
        files_skipped: int = 0,
        linter_available: bool = True,
        interrupted: bool = False,
    ) -> "ScanSummary":
        """Fold *findings* into a summary."""
        from fakeaudit.core.scoring import quality_score

        counts = {level: 0 for level in SEVERITIES}
        tool_issues = 0
        for finding in findings:
            counts[finding.severity] += 1
            if finding.category == SHELLCHECK_ISSUE:
                tool_issues += 1

        return cls(
            files_scanned=files_scanned,
            files_skipped=files_skipped,
            total_issues=len(findings),
            critical=counts[CRITICAL],
            warning=counts[WARNING],
            minor=counts[MINOR],
            tool_issues=tool_issues,
            linter_available=linter_available,
            interrupted=interrupted,
            quality_score=quality_score(
                counts[CRITICAL], counts[WARNING], counts[MINOR], tool_issues
            ),
        )

    @property
    def severity_counts(self) -> dict[str, int]:
        return {CRITICAL: self.critical, WARNING: self.warning, MINOR: self.minor}

    def to_dict(self) -> dict:
        return {
            "files_scanned": self.files_scanned,
            "files_skipped": self.files_skipped,
            "total_issues": self.total_issues,
            "critical": self.critical,
            "warning": self.warning,
            "minor": self.minor,
            "shellcheck": self.tool_issues,
            "linter_available": self.linter_available,
            "interrupted": self.interrupted,
            "quality_score": self.quality_score,
        }


@dataclass
class ScanResult:
    """Aggregated result from a complete scan run.

    Attributes:
        target: The file or directory that was scanned.
        findings: All findings across every scanned file.
        functions: Every function record extracted during the run.
        dependencies: Intra-file call counts for detected functions.
        summary: Aggregate counts, built once at the end of the run.
        catalog_version: Version of the pattern catalog used.
        skipped_files: Paths that could not be read or scanned.
        file_metrics: Per-file line, function and comment counts.
    """

    target: str
    findings: list[Finding] = field(default_factory=list)
    functions: list[FunctionRecord] = field(default_factory=list)
    dependencies: list[DependencyEdge] = field(default_factory=list)
    summary: ScanSummary = field(default_factory=ScanSummary)
    catalog_version: str = ""
    skipped_files: list[str] = field(default_factory=list)
    file_metrics: list[FileMetrics] = field(default_factory=list)

    # --- helpers ---

    def has_severity(self, level: str) -> bool:
        """Return ``True`` if any finding meets or exceeds *level*.

        Severity ordering: ``CRITICAL > WARNING > MINOR``.
        """
        threshold = SEVERITY_ORDER.get(level, 0)
        return any(
            SEVERITY_ORDER.get(finding.severity, 0) >= threshold
            for finding in self.findings
        )

    def to_dict(self) -> dict:
        """Return a JSON-serializable dictionary of the full scan result."""
        return {
            "target": self.target,
            "catalog_version": self.catalog_version,
            "summary": self.summary.to_dict(),
            "findings": [finding.to_dict() for finding in self.findings],
            "functions": [record.to_dict() for record in self.functions],
            "dependencies": [edge.to_dict() for edge in self.dependencies],
            "skipped_files": list(self.skipped_files),
            "file_metrics": [metrics.to_dict() for metrics in self.file_metrics],
        }
