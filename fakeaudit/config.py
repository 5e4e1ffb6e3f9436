"""fakeaudit configuration constants."""

from fakeaudit import __app_name__, __version__

APP_NAME: str = __app_name__
VERSION: str = __version__

# Directories / files to skip during scanning
DEFAULT_IGNORE_DIRS: list[str] = [
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "__pycache__",
    ".venv",
    "venv",
    "dist",
    "build",
]

DEFAULT_IGNORE_FILES: list[str] = [
    ".DS_Store",
]

DEFAULT_SCAN_EXTENSIONS: list[str] = [
    ".sh",
    ".bash",
]

# Lines inspected on each side of a Critical-tier match
CONTEXT_WINDOW: int = 5

# Lines shown on each side of a Critical-tier match in the snippet
SNIPPET_CONTEXT: int = 2

SNIPPET_MAX_CHARS: int = 160

# Report file names written into the output directory
REPORT_MARKDOWN: str = "audit_report.md"
REPORT_JSON: str = "audit_results.json"
REPORT_CSV: str = "priority_matrix.csv"
REPORT_DEPENDENCIES: str = "dependency_analysis.md"

SHELLCHECK_BINARY: str = "shellcheck"
SHELLCHECK_TIMEOUT: float = 60.0
