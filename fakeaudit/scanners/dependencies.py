"""Dependency mapper.

Counts, for every function defined in a file, the lines of the same file that
mention the function name.  The mapping is name based and intra-file: callers
in other files are missed and unrelated identifiers with the same name are
counted.  It only weights findings, it is not a call graph.
"""

import re

from fakeaudit.models import DependencyEdge, dependency_risk
from fakeaudit.scanners.functions import find_functions

__all__ = ["dependency_risk", "dependency_total", "map_dependencies"]


def map_dependencies(
    file_path: str,
    lines: list[str],
    functions: list[tuple[int, str, str]] | None = None,
) -> list[DependencyEdge]:
    """Return one edge per detected function with at least one call site.

    Args:
        file_path: Path used to label the edges.
        lines: The file content as a list of lines.
        functions: Pre-computed :func:`find_functions` output, if available.
    """
    if functions is None:
        functions = find_functions(lines)

    definition_lines: dict[str, set[int]] = {}
    for line_num, name, _ in functions:
        definition_lines.setdefault(name, set()).add(line_num)

    edges: list[DependencyEdge] = []
    for name, defined_at in definition_lines.items():
        call_re = re.compile(rf"(?<![\w-]){re.escape(name)}(?![\w-])")
        calls = sum(
            1
            for line_num, line in enumerate(lines, start=1)
            if line_num not in defined_at
            and not line.lstrip().startswith("#")
            and call_re.search(line)
        )
        if calls:
            edges.append(DependencyEdge(file_path, name, calls))
    return edges


def dependency_total(dependencies: list[DependencyEdge], file_path: str) -> int:
    """Sum of call counts for all functions of *file_path*."""
    return sum(edge.call_count for edge in dependencies if edge.file_path == file_path)
