"""Optional ShellCheck integration.

When the ``shellcheck`` binary is on ``PATH`` its JSON output is converted
into findings.  A missing binary or broken output never fails the scan.
"""

import json
import logging
import shutil
import subprocess

from fakeaudit.config import SHELLCHECK_BINARY, SHELLCHECK_TIMEOUT, SNIPPET_MAX_CHARS
from fakeaudit.models import CRITICAL, MINOR, SHELLCHECK_ISSUE, WARNING, Finding

logger = logging.getLogger(__name__)

_LEVEL_TO_SEVERITY: dict[str, str] = {
    "error": CRITICAL,
    "warning": WARNING,
    "info": MINOR,
    "style": MINOR,
}


def shellcheck_available() -> bool:
    return shutil.which(SHELLCHECK_BINARY) is not None


def parse_shellcheck_output(
    output: str,
    file_path: str,
    lines: list[str],
) -> list[Finding]:
    """Convert ``shellcheck -f json`` output into findings."""
    try:
        entries = json.loads(output or "[]")
    except json.JSONDecodeError as e:
        logger.warning("Unparseable shellcheck output for %s: %s", file_path, e)
        return []
    if not isinstance(entries, list):
        logger.warning(
            "Unexpected shellcheck output for %s: expected a list, got %s",
            file_path,
            type(entries).__name__,
        )
        return []

    findings: list[Finding] = []
    for entry in entries:
        try:
            line_num = int(entry["line"])
            level = str(entry.get("level", "info"))
            code = entry.get("code", "")
            message = entry.get("message", "")
        except (KeyError, TypeError, ValueError):
            continue

        source = lines[line_num - 1] if 0 < line_num <= len(lines) else "N/A"
        findings.append(
            Finding(
                severity=_LEVEL_TO_SEVERITY.get(level, MINOR),
                file_path=file_path,
                line_number=line_num,
                description=f"ShellCheck {level}: {message} (SC{code})",
                snippet=source.strip()[:SNIPPET_MAX_CHARS],
                category=SHELLCHECK_ISSUE,
            )
        )
    return findings


def run_shellcheck(file_path: str, lines: list[str]) -> list[Finding]:
    """Run shellcheck on *file_path*; returns ``[]`` when it cannot run."""
    try:
        proc = subprocess.run(
            [SHELLCHECK_BINARY, "-f", "json", file_path],
            capture_output=True,
            text=True,
            errors="replace",
            timeout=SHELLCHECK_TIMEOUT,
        )
    except (OSError, UnicodeDecodeError, subprocess.SubprocessError) as e:
        logger.warning("shellcheck failed on %s: %s", file_path, e)
        return []

    # shellcheck exits 1 when it reports issues; anything else is an error
    if proc.returncode not in (0, 1):
        logger.warning(
            "shellcheck exited with code %d on %s: %s",
            proc.returncode,
            file_path,
            proc.stderr.strip(),
        )
        return []

    return parse_shellcheck_output(proc.stdout, file_path, lines)
