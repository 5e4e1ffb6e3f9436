"""Function analyzer.

Finds shell function definitions, extracts their bodies by brace counting and
classifies each function from the kinds of operations it performs.

Known limitation: braces inside strings, heredocs and comments are counted like
any other brace.  A body that never balances runs to the end of the file.
"""

import re
from dataclasses import dataclass

from fakeaudit.config import SNIPPET_MAX_CHARS
from fakeaudit.models import (
    CRITICAL,
    HOLLOW,
    HOLLOW_FUNCTION,
    LEGITIMATE,
    SUSPICIOUS,
    SUSPICIOUS_RATIO,
    WARNING,
    Finding,
    FunctionRecord,
)

# ---------------------------------------------------------------------------
# Function definitions
# ---------------------------------------------------------------------------

# function name() {   |   function name {   |   name() {   |   name()
_DEF_RE = re.compile(
    r"^\s*(?:function\s+([A-Za-z_][\w:.-]*)\s*(?:\(\s*\))?|([A-Za-z_][\w:.-]*)\s*\(\s*\))"
    r"\s*(\{.*)?$"
)

_RESERVED = {
    "if", "then", "else", "elif", "fi", "for", "while", "until", "do",
    "done", "case", "esac", "select", "return", "echo", "local",
}

BLOCK: str = "block"
INLINE: str = "inline"


def find_functions(lines: list[str]) -> list[tuple[int, str, str]]:
    """Return ``(line_number, name, style)`` for each function definition.

    ``style`` is ``"inline"`` when the whole body sits between braces on the
    definition line, ``"block"`` otherwise.
    """
    found: list[tuple[int, str, str]] = []
    for line_num, line in enumerate(lines, start=1):
        match = _DEF_RE.match(line)
        if not match:
            continue
        name = match.group(1) or match.group(2)
        if name in _RESERVED:
            continue
        rest = match.group(3) or ""
        style = INLINE if rest and rest.count("{") <= rest.count("}") else BLOCK
        found.append((line_num, name, style))
    return found


def extract_function_body(lines: list[str], start_line: int) -> list[str]:
    """Return the body lines of the function defined at *start_line*.

    Text before the opening brace is dropped.  The opening brace must be on
    the definition line or on the next non-blank line, otherwise the body is
    empty.
    """
    body: list[str] = []
    depth = 0
    opened = False

    for offset, line in enumerate(lines[start_line - 1 :]):
        if not opened:
            brace = line.find("{")
            if brace < 0:
                if offset == 0 or not line.strip():
                    continue
                return []
            opened = True
            depth = 1
            line = line[brace + 1 :]

        depth += line.count("{") - line.count("}")
        body.append(line)
        if depth <= 0:
            break

    return body


# ---------------------------------------------------------------------------
# Operation counting
# ---------------------------------------------------------------------------

_REAL_OPS_RE = re.compile(
    r"\b(?:cp|mv|rm|rmdir|mkdir|touch|ln|chmod|chown|tar|unzip|rsync|dd|sed|awk"
    r"|curl|wget|ssh|scp|git|make|cmake|gcc|clang|python3?|node|npm|yarn|pip3?"
    r"|apt-get|apt|yum|dnf|brew|systemctl|service|launchctl|docker)\b"
)
_VALIDATION_RE = re.compile(
    r"\[\[.*\]\]|\[\s.*\s\]|\btest\s|\bgrep\b|\bfind\b|\bwhich\b|\bcommand\s+-v\b"
)
_ERROR_HANDLING_RE = re.compile(
    r"\blog(?:ger|_\w+)?\b|\b\w+_log\b|\b(?:trap|kill|pkill)\b"
    r"|\bexit\s+[1-9]|\breturn\s+[1-9]|\bset\s+-[euo]|>&2"
)
_FAKE_RES: list[re.Pattern[str]] = [
    re.compile(r"\becho\b.*\b(?:success\w*|completed?|done|finished)\b", re.IGNORECASE),
    re.compile(r"\breturn\s+(?:0|true)\s*(?:[;}#]|$)"),
    re.compile(r"(?:^|[;{&|])\s*(?:true|:)\s*(?:[;}#]|$)"),
]


@dataclass(frozen=True)
class OperationCounts:
    real: int = 0
    validation: int = 0
    error_handling: int = 0
    fake: int = 0

    @property
    def legitimate(self) -> int:
        return self.real + self.validation + self.error_handling


def count_operations(body: list[str]) -> OperationCounts:
    """Count body lines in each operation category.

    A line may count in several categories.  Comment-only lines are ignored.
    """
    real = validation = error_handling = fake = 0
    for line in body:
        if line.strip().startswith("#"):
            continue
        if _REAL_OPS_RE.search(line):
            real += 1
        if _VALIDATION_RE.search(line):
            validation += 1
        if _ERROR_HANDLING_RE.search(line):
            error_handling += 1
        if any(p.search(line) for p in _FAKE_RES):
            fake += 1
    return OperationCounts(real, validation, error_handling, fake)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

_UTILITY_NAMES = {
    "error_handler",
    "handle_error",
    "on_error",
    "cleanup",
    "trap_handler",
    "signal_handler",
}
_UTILITY_PREFIXES = (
    "validate_",
    "check_",
    "verify_",
    "log_",
    "print_",
    "show_",
    "display_",
)
_UTILITY_BODY_RE = re.compile(
    r"\b(?:trap|signal|cleanup|printf)\b|\blog(?:ger|_\w+)?\b"
)

_DESTRUCTIVE_NAME_RE = re.compile(r"install|remove|delete|create|setup|configure")
_ENTRY_NAME_RE = re.compile(r"main|init|start|stop|run")


def is_utility_function(name: str, body: list[str]) -> bool:
    """Return ``True`` for names or bodies of recognised utility functions."""
    lowered = name.lower()
    if (
        lowered in _UTILITY_NAMES
        or lowered.endswith("_handler")
        or lowered.startswith(_UTILITY_PREFIXES)
    ):
        return True
    return any(
        _UTILITY_BODY_RE.search(line)
        for line in body
        if not line.strip().startswith("#")
    )


def classify_function(
    counts: OperationCounts,
    name: str,
    body: list[str],
) -> tuple[str, bool]:
    """Return ``(classification, is_utility)`` for a function.

    1. No legitimate operations but some fake ones: ``HOLLOW``, unless the
       function is a recognised utility (then ``LEGITIMATE``).
    2. More fake than legitimate operations (and at least one legitimate):
       ``SUSPICIOUS_RATIO``.
    3. Otherwise ``LEGITIMATE``.
    """
    if counts.legitimate == 0 and counts.fake > 0:
        if is_utility_function(name, body):
            return LEGITIMATE, True
        return HOLLOW, False
    if counts.fake > counts.legitimate > 0:
        return SUSPICIOUS, False
    return LEGITIMATE, False


def function_impact(name: str, fake_ops: int) -> int:
    """Impact score (1-10) of a hollow function."""
    lowered = name.lower()
    score = 5
    if _DESTRUCTIVE_NAME_RE.search(lowered):
        score += 3
    elif _ENTRY_NAME_RE.search(lowered):
        score += 2
    score += fake_ops
    return max(1, min(score, 10))


def analyze_function(
    lines: list[str],
    file_path: str,
    start_line: int,
    name: str,
    style: str = BLOCK,
) -> FunctionRecord:
    body = extract_function_body(lines, start_line)
    counts = count_operations(body)
    classification, utility = classify_function(counts, name, body)
    impact = function_impact(name, counts.fake) if classification == HOLLOW else 0

    return FunctionRecord(
        name=name,
        file_path=file_path,
        start_line=start_line,
        style=style,
        real_ops=counts.real,
        validation_ops=counts.validation,
        error_handling_ops=counts.error_handling,
        fake_ops=counts.fake,
        classification=classification,
        impact=impact,
        is_utility=utility,
    )


def function_finding(record: FunctionRecord, definition_line: str) -> Finding | None:
    """Finding for a hollow or suspicious function; ``None`` when legitimate."""
    snippet = definition_line.strip()[:SNIPPET_MAX_CHARS]

    if record.classification == HOLLOW:
        return Finding(
            severity=CRITICAL,
            file_path=record.file_path,
            line_number=record.start_line,
            description=(
                f"Function '{record.name}' has no real operations "
                f"(Impact: {record.impact})"
            ),
            snippet=snippet,
            category=HOLLOW_FUNCTION,
        )
    if record.classification == SUSPICIOUS:
        return Finding(
            severity=WARNING,
            file_path=record.file_path,
            line_number=record.start_line,
            description=(
                f"Function '{record.name}' has more fake operations than real ones"
            ),
            snippet=snippet,
            category=SUSPICIOUS_RATIO,
        )
    return None
