"""Unified scanning pipeline.

Walks the target **once**, scans each file fully before moving to the next and
builds a :class:`~fakeaudit.models.ScanResult` whose summary is computed from
the final findings at the end of the run.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from fakeaudit.models import ScanResult, ScanSummary
from fakeaudit.scanners.catalog import DEFAULT_CATALOG, PatternCatalog
from fakeaudit.scanners.fake_code import FileScan, read_source, scan_content
from fakeaudit.scanners.shellcheck import run_shellcheck, shellcheck_available
from fakeaudit.utils import validate_path, walk_project_files

logger = logging.getLogger(__name__)


def run_scan(
    target: str | Path,
    catalog: PatternCatalog = DEFAULT_CATALOG,
    *,
    use_linter: bool = True,
) -> ScanResult:
    """Scan a directory of shell scripts, or a single file.

    Args:
        target: Directory (walked recursively) or file to scan.
        catalog: Pattern catalog to apply.
        use_linter: Merge ShellCheck findings when the binary is available.

    Returns:
        A :class:`ScanResult` containing all findings and metadata.

    Raises:
        FileNotFoundError: If *target* does not exist.
    """
    root = validate_path(target)

    if root.is_dir():
        walk = walk_project_files(root)
        files = walk.files
        logger.debug(
            "Found %d shell script(s) under %s (pruned: %s)",
            len(files),
            root,
            ", ".join(walk.pruned_dirs) or "none",
        )
    else:
        files = [str(root)]

    return scan_files(files, catalog, use_linter=use_linter, target=str(root))


def scan_files(
    paths: Iterable[str | Path],
    catalog: PatternCatalog = DEFAULT_CATALOG,
    *,
    use_linter: bool = True,
    target: str = "",
) -> ScanResult:
    """Scan an explicit list of files.

    A file that cannot be read or scanned is logged, recorded as skipped, and
    the run continues.  A ``KeyboardInterrupt`` stops the run between files;
    the file being scanned at that moment contributes nothing and the summary
    is marked interrupted.
    """
    linter = use_linter and shellcheck_available()
    if use_linter and not linter:
        logger.warning("shellcheck not found. Skipping syntax analysis.")

    scans: list[FileScan] = []
    skipped: list[str] = []
    interrupted = False

    try:
        for path in paths:
            path = str(path)
            try:
                content = read_source(path)
            except (OSError, UnicodeError) as e:
                logger.warning("Cannot read file %s: %s", path, e)
                skipped.append(path)
                continue

            logger.debug("Analyzing %s", path)
            try:
                scans.append(_scan_one(path, content, catalog, linter))
            except Exception as e:
                logger.warning(
                    "Failed to scan %s: %s",
                    path,
                    e,
                    exc_info=logger.isEnabledFor(logging.DEBUG),
                )
                skipped.append(path)
    except KeyboardInterrupt:
        interrupted = True
        logger.warning("Scan interrupted after %d file(s); results are partial", len(scans))

    findings = [finding for scan in scans for finding in scan.findings]

    return ScanResult(
        target=target,
        findings=findings,
        functions=[record for scan in scans for record in scan.functions],
        dependencies=[edge for scan in scans for edge in scan.dependencies],
        summary=ScanSummary.from_findings(
            findings,
            files_scanned=len(scans),
            files_skipped=len(skipped),
            linter_available=linter or not use_linter,
            interrupted=interrupted,
        ),
        catalog_version=catalog.version,
        skipped_files=skipped,
        file_metrics=[scan.metrics for scan in scans if scan.metrics is not None],
    )


def _scan_one(path: str, content: str, catalog: PatternCatalog, linter: bool) -> FileScan:
    file_scan = scan_content(path, content, catalog)
    if not linter:
        return file_scan

    tool_findings = run_shellcheck(path, content.splitlines())
    return FileScan(
        file_path=path,
        findings=sorted(tool_findings + file_scan.findings, key=lambda f: f.line_number),
        functions=file_scan.functions,
        dependencies=file_scan.dependencies,
        metrics=file_scan.metrics,
    )
