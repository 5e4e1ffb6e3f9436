"""Scoring and prioritization.

Pure functions of a finding's severity and category.  The quality score is a
display heuristic for a whole run, not a validated metric.
"""

from fakeaudit.models import (
    CRITICAL,
    FAKE_IMPLEMENTATION,
    FAKE_SUCCESS,
    HOLLOW_FUNCTION,
    MINOR,
    PLACEHOLDER_COMMENT,
    SHELLCHECK_ISSUE,
    TEST_CODE_IN_PROD,
    WARNING,
    Finding,
)

P1_URGENT: str = "P1-URGENT"
P1_HIGH: str = "P1-HIGH"
P2_MEDIUM: str = "P2-MEDIUM"
P3_LOW: str = "P3-LOW"

HIGH: str = "HIGH"
MEDIUM: str = "MEDIUM"
LOW: str = "LOW"

_SEVERITY_BASE: dict[str, int] = {
    CRITICAL: 8,
    WARNING: 5,
    MINOR: 2,
}

_CATEGORY_ADJUSTMENT: dict[str, int] = {
    FAKE_IMPLEMENTATION: 2,
    HOLLOW_FUNCTION: 2,
    FAKE_SUCCESS: 1,
    TEST_CODE_IN_PROD: 1,
    SHELLCHECK_ISSUE: -1,
}

_EFFORT: dict[str, str] = {
    FAKE_IMPLEMENTATION: HIGH,
    HOLLOW_FUNCTION: HIGH,
    SHELLCHECK_ISSUE: LOW,
    PLACEHOLDER_COMMENT: LOW,
}


def impact_score(finding: Finding) -> int:
    """Impact (1-10) from severity base plus category adjustment."""
    score = _SEVERITY_BASE.get(finding.severity, 1)
    score += _CATEGORY_ADJUSTMENT.get(finding.category, 0)
    return max(1, min(score, 10))


def priority(finding: Finding) -> str:
    if finding.severity == CRITICAL:
        return P1_URGENT
    if finding.severity == WARNING:
        if finding.category in (FAKE_IMPLEMENTATION, HOLLOW_FUNCTION):
            return P1_HIGH
        return P2_MEDIUM
    return P3_LOW


def effort(category: str) -> str:
    """Estimated remediation effort for a category."""
    return _EFFORT.get(category, MEDIUM)


def risk_level(severity: str, impact: int) -> str:
    if severity == CRITICAL and impact >= 8:
        return CRITICAL
    if severity == CRITICAL or impact >= 6:
        return HIGH
    if severity == WARNING or impact >= 4:
        return MEDIUM
    return LOW


def quality_score(critical: int, warning: int, minor: int, tool_issues: int = 0) -> int:
    """``100 - 25*critical - 10*warning - 2*minor - tool_issues``, floored at 0."""
    score = 100 - 25 * critical - 10 * warning - 2 * minor - tool_issues
    return max(score, 0)


def quality_rating(score: int) -> str:
    if score >= 90:
        return "Excellent"
    if score >= 70:
        return "Good"
    if score >= 50:
        return "Moderate"
    return "Poor"
