"""Pattern catalog for fake-code detection.

A catalog is an immutable, versioned, ordered list of line rules grouped in
three severity tiers.  The scanner receives a catalog at construction time;
changing the rules means building a new catalog, either in code with
:meth:`PatternCatalog.with_rules` / :meth:`PatternCatalog.without` or from a
YAML file with :func:`load_catalog`.
"""

import re
from dataclasses import dataclass
from pathlib import Path

import yaml

from fakeaudit.errors import CatalogError
from fakeaudit.models import (
    CATEGORIES,
    CRITICAL,
    FAKE_FILE_OP,
    FAKE_IMPLEMENTATION,
    FAKE_SUCCESS,
    MINOR,
    PLACEHOLDER_CODE,
    PLACEHOLDER_COMMENT,
    SEVERITY_ORDER,
    TEST_CODE_IN_PROD,
    TEST_MODE_FLAG,
    WARNING,
)

# ---------------------------------------------------------------------------
# Rule model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Rule:
    """A single-line heuristic rule.

    Attributes:
        name: Unique rule identifier inside a catalog.
        pattern: Compiled regex searched in each source line.
        severity: Default severity of findings produced by the rule.
        category: Category tag of findings produced by the rule.
        description: Human-readable explanation used in reports.
        unless: Optional regex; when it also matches the line the rule
            does not fire.
    """

    name: str
    pattern: re.Pattern[str]
    severity: str
    category: str
    description: str
    unless: re.Pattern[str] | None = None

    def matches(self, line: str) -> bool:
        if not self.pattern.search(line):
            return False
        return not (self.unless and self.unless.search(line))


@dataclass(frozen=True)
class CandidateMatch:
    """A rule that fired on a line, before any context suppression."""

    rule: Rule
    line: str

    @property
    def severity(self) -> str:
        return self.rule.severity

    @property
    def category(self) -> str:
        return self.rule.category


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PatternCatalog:
    """Ordered, versioned collection of rules."""

    version: str
    rules: tuple[Rule, ...] = ()

    def classify(self, line: str) -> list[CandidateMatch]:
        """Return one candidate for every rule that fires on *line*."""
        return [CandidateMatch(rule, line) for rule in self.rules if rule.matches(line)]

    def by_severity(self, severity: str) -> tuple[Rule, ...]:
        return tuple(rule for rule in self.rules if rule.severity == severity)

    def names(self) -> list[str]:
        return [rule.name for rule in self.rules]

    def with_rules(self, *rules: Rule, version: str | None = None) -> "PatternCatalog":
        """Return a new catalog with *rules* appended (replacing same-named rules)."""
        replaced = {rule.name for rule in rules}
        kept = tuple(rule for rule in self.rules if rule.name not in replaced)
        return PatternCatalog(
            version=version or f"{self.version}+custom",
            rules=kept + tuple(rules),
        )

    def without(self, *names: str, version: str | None = None) -> "PatternCatalog":
        """Return a new catalog without the named rules."""
        unknown = set(names) - set(self.names())
        if unknown:
            raise CatalogError(f"Unknown rule(s): {', '.join(sorted(unknown))}")
        return PatternCatalog(
            version=version or f"{self.version}+custom",
            rules=tuple(rule for rule in self.rules if rule.name not in names),
        )


def _rule(
    name: str,
    pattern: str,
    severity: str,
    category: str,
    description: str,
    *,
    unless: str | None = None,
    flags: int = 0,
) -> Rule:
    return Rule(
        name=name,
        pattern=re.compile(pattern, flags),
        severity=severity,
        category=category,
        description=description,
        unless=re.compile(unless, flags) if unless else None,
    )


# ---------------------------------------------------------------------------
# 1. Critical tier — success without real work
# ---------------------------------------------------------------------------

_CRITICAL_RULES: list[Rule] = [
    _rule(
        "bare_success_return",
        r"^\s*return\s+(?:0|true)\s*;?\s*$",
        CRITICAL,
        FAKE_SUCCESS,
        "Suspicious success return pattern",
    ),
    _rule(
        "bare_success_exit",
        r"^\s*exit\s+0\s*;?\s*$",
        CRITICAL,
        FAKE_SUCCESS,
        "Suspicious success exit pattern",
    ),
    _rule(
        "bare_true",
        r"^\s*true\s*;?\s*$",
        CRITICAL,
        FAKE_SUCCESS,
        "Bare 'true' used as a result",
    ),
    _rule(
        "success_message_return",
        r"""\becho\s+(["'])[^"']*\b(?:success\w*|completed?|done)\b[^"']*\1\s*;\s*return\s+0\b""",
        CRITICAL,
        FAKE_SUCCESS,
        "Success message immediately followed by a success return",
        flags=re.IGNORECASE,
    ),
    _rule(
        "todo_with_return",
        r"\b(?:TODO|FIXME)\b.*\b(?:return|exit)\s+0\b"
        r"|\b(?:return|exit)\s+0\b.*#.*\b(?:TODO|FIXME)\b",
        CRITICAL,
        PLACEHOLDER_CODE,
        "TODO/FIXME with placeholder return",
    ),
    _rule(
        "true_placeholder",
        r"\btrue\s*#.*\b(?:fake|placeholder|mock|stub)",
        CRITICAL,
        FAKE_IMPLEMENTATION,
        "'true' marked as fake or placeholder",
        flags=re.IGNORECASE,
    ),
    _rule(
        "noop_comment",
        r"^\s*:\s*#.*\b(?:no-?op|fake|placeholder|mock)",
        CRITICAL,
        FAKE_IMPLEMENTATION,
        "Explicit no-operation used as an implementation",
        flags=re.IGNORECASE,
    ),
    _rule(
        "true_binary",
        r"(?:^|[\s;&|(])(?:/usr)?/bin/true\b",
        CRITICAL,
        FAKE_IMPLEMENTATION,
        "Explicit no-operation or true command used",
    ),
    _rule(
        "command_true",
        r"\bcommand\s+true\b",
        CRITICAL,
        FAKE_IMPLEMENTATION,
        "Explicit no-operation or true command used",
    ),
]

# ---------------------------------------------------------------------------
# 2. Warning tier — test and simulation code in production
# ---------------------------------------------------------------------------

_FAKE_WORDS = r"(?:test|mock|fake|simulat|stub|dummy)"

_WARNING_RULES: list[Rule] = [
    _rule(
        "test_function_name",
        rf"^\s*(?:function\s+[\w-]*{_FAKE_WORDS}[\w-]*|[\w-]*{_FAKE_WORDS}[\w-]*\s*\(\s*\))",
        WARNING,
        TEST_CODE_IN_PROD,
        "Function name suggests test/mock code",
        flags=re.IGNORECASE,
    ),
    _rule(
        "test_mode_flag",
        r"""\b(?:TEST_MODE|DEBUG_MODE|MOCK_MODE)\s*=\s*["']?(?i:true|1|yes)\b""",
        WARNING,
        TEST_MODE_FLAG,
        "Test mode flag detected",
    ),
    _rule(
        "simulated_file_op",
        r"""\b(?:echo|printf)\b.*["'][^"']*\b(?:created|deleted|copied|moved|removed)\b""",
        WARNING,
        FAKE_FILE_OP,
        "Message claims a file operation that is not performed",
        unless=r"\b(?:cp|mv|rm|mkdir|touch|ln|install|rsync)\b",
        flags=re.IGNORECASE,
    ),
    _rule(
        "simulated_message",
        r"""\becho\b.*["'](?:simulat|mocking)""",
        WARNING,
        TEST_CODE_IN_PROD,
        "Simulated or mocked operation message",
        flags=re.IGNORECASE,
    ),
    _rule(
        "artificial_delay",
        r"\bsleep\s+\d+.*#.*\bdelay",
        WARNING,
        TEST_CODE_IN_PROD,
        "Artificial delay",
        flags=re.IGNORECASE,
    ),
    _rule(
        "fake_dependency_check",
        r"\bwhich\s+nonexistent\S*.*>\s*/dev/null",
        WARNING,
        FAKE_IMPLEMENTATION,
        "Dependency check against a command that cannot exist",
    ),
    _rule(
        "silenced_fake_output",
        r"\becho\b.*>\s*/dev/null.*2>&1.*#.*\bfake",
        WARNING,
        FAKE_IMPLEMENTATION,
        "Silenced output marked as fake",
        flags=re.IGNORECASE,
    ),
    _rule(
        "fake_heredoc",
        r"\bcat\s+<<.*EOF.*\bfake.*EOF",
        WARNING,
        FAKE_IMPLEMENTATION,
        "Here-document producing fake content",
        flags=re.IGNORECASE,
    ),
]

# ---------------------------------------------------------------------------
# 3. Minor tier — development markers
# ---------------------------------------------------------------------------

_MINOR_RULES: list[Rule] = [
    _rule(
        "dev_marker",
        r"#.*\b(?:TODO|FIXME|HACK|XXX|BUG)\b",
        MINOR,
        PLACEHOLDER_COMMENT,
        "Development comment or placeholder found",
    ),
    _rule(
        "placeholder_noop",
        r"^\s*:\s*#.*\b(?:placeholder|stub)\b",
        MINOR,
        PLACEHOLDER_COMMENT,
        "Placeholder no-op left in code",
        flags=re.IGNORECASE,
    ),
    _rule(
        "fake_sleep",
        r"\bsleep\s+\d+.*#.*\bfake",
        MINOR,
        PLACEHOLDER_COMMENT,
        "Sleep used to fake work",
        flags=re.IGNORECASE,
    ),
]

DEFAULT_CATALOG = PatternCatalog(
    version="builtin-1",
    rules=tuple(_CRITICAL_RULES + _WARNING_RULES + _MINOR_RULES),
)


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------


def load_catalog(path: str | Path) -> PatternCatalog:
    """Load a catalog from a YAML file.

    Example::

        version: team-2
        extends: default        # or "none"
        disable: [bare_true]
        rules:
          - name: echo_ok
            pattern: 'echo "OK"$'
            severity: WARNING
            category: FAKE_SUCCESS
            description: Hard-coded OK message

    Raises:
        CatalogError: If the file cannot be read or a rule is invalid.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogError(f"Cannot read catalog {path}: {exc}") from exc
    return load_catalog_from_string(text, default_version=Path(path).stem)


def load_catalog_from_string(text: str, default_version: str = "custom") -> PatternCatalog:
    """Parse a YAML string into a :class:`PatternCatalog`."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise CatalogError(f"Invalid catalog YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise CatalogError("Catalog YAML must be a mapping")

    extends = str(data.get("extends", "default")).lower()
    if extends == "default":
        base = DEFAULT_CATALOG
    elif extends == "none":
        base = PatternCatalog(version="empty")
    else:
        raise CatalogError(f"Unknown catalog base: {extends!r}")

    version = str(data.get("version", default_version))

    disabled = data.get("disable", []) or []
    if isinstance(disabled, str):
        disabled = [disabled]
    if disabled:
        base = base.without(*disabled)

    rules = [_parse_rule(entry) for entry in data.get("rules", []) or []]
    return base.with_rules(*rules, version=version)


def _parse_rule(entry: object) -> Rule:
    if not isinstance(entry, dict):
        raise CatalogError(f"Rule must be a mapping, got {entry!r}")

    try:
        name = entry["name"]
        pattern = entry["pattern"]
    except KeyError as exc:
        raise CatalogError(f"Rule is missing required key {exc}") from exc

    severity = str(entry.get("severity", WARNING)).upper()
    if severity not in SEVERITY_ORDER:
        raise CatalogError(f"Rule {name!r}: unknown severity {severity!r}")

    category = str(entry.get("category", TEST_CODE_IN_PROD)).upper()
    if category not in CATEGORIES:
        raise CatalogError(f"Rule {name!r}: unknown category {category!r}")

    flags = re.IGNORECASE if entry.get("ignore_case") else 0
    try:
        return _rule(
            str(name),
            str(pattern),
            severity,
            category,
            str(entry.get("description", name)),
            unless=entry.get("unless"),
            flags=flags,
        )
    except re.error as exc:
        raise CatalogError(f"Rule {name!r}: invalid regex: {exc}") from exc
