"""Context classifier.

Decides whether a Critical-tier match sits in a legitimate context (error
handling, or a conditional that validates something first) so the scanner can
drop it.  This is a heuristic allowlist; misses in both directions are
expected.
"""

import re

from fakeaudit.config import CONTEXT_WINDOW, SNIPPET_CONTEXT, SNIPPET_MAX_CHARS

# Substring match on purpose: on_exit_handler, trapped and bootstrap all count.
# Adding word boundaries changes which Critical matches get suppressed.
_ERROR_HANDLING_RE = re.compile(
    r"trap|catch|exception|cleanup|finally|signal|handler", re.IGNORECASE
)
_CONDITIONAL_RE = re.compile(r"\bif\b|\bcase\b.*\bin\b|\bwhile\b")
_VALIDATION_RE = re.compile(r"\b(?:test|check|validate|verify)", re.IGNORECASE)


def _window(lines: list[str], line_number: int, size: int) -> list[str]:
    start = max(line_number - 1 - size, 0)
    return lines[start : line_number + size]


def is_legitimate_context(
    lines: list[str],
    line_number: int,
    window_size: int = CONTEXT_WINDOW,
) -> bool:
    """Return ``True`` when the match at *line_number* should be suppressed.

    Args:
        lines: The file content as a list of lines.
        line_number: 1-based line of the candidate match.
        window_size: Lines inspected before and after the match.
    """
    context = "\n".join(_window(lines, line_number, window_size))

    if _ERROR_HANDLING_RE.search(context):
        return True

    return bool(_CONDITIONAL_RE.search(context) and _VALIDATION_RE.search(context))


def context_snippet(
    lines: list[str],
    line_number: int,
    context: int = SNIPPET_CONTEXT,
) -> str:
    """Render the lines around *line_number*, marking the match with ``>>>``."""
    start = max(line_number - context, 1)
    end = min(line_number + context, len(lines))

    rendered: list[str] = []
    for num in range(start, end + 1):
        marker = ">>> " if num == line_number else "    "
        rendered.append(marker + lines[num - 1].rstrip()[:SNIPPET_MAX_CHARS])
    return "\n".join(rendered)
