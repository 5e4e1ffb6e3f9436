"""Built-in self-test: scan a known sample script and check the detections."""

from dataclasses import dataclass, field

from fakeaudit.models import (
    FAKE_SUCCESS,
    HOLLOW_FUNCTION,
    PLACEHOLDER_COMMENT,
    TEST_CODE_IN_PROD,
    TEST_MODE_FLAG,
    Finding,
)
from fakeaudit.scanners.catalog import DEFAULT_CATALOG, PatternCatalog
from fakeaudit.scanners.fake_code import scan_content

SAMPLE_PATH = "selftest_sample.sh"

SAMPLE_SCRIPT = """\
#!/bin/bash

# Test function with fake implementation
function fake_install() {
    # TODO: Implement actual installation
    return 0
}

# Test function with simulated operation
function simulate_download() {
    echo "Downloaded file successfully"
    true
}

# Legitimate function
function validate_input() {
    [[ -n "$1" ]] && return 0 || return 1
}

# Test mode flag
TEST_MODE=true
"""

EXPECTED_CATEGORIES: tuple[str, ...] = (
    HOLLOW_FUNCTION,
    FAKE_SUCCESS,
    TEST_CODE_IN_PROD,
    TEST_MODE_FLAG,
    PLACEHOLDER_COMMENT,
)

# Functions in the sample that must never be reported as hollow
LEGITIMATE_FUNCTIONS: tuple[str, ...] = ("validate_input",)


@dataclass
class SelfTestResult:
    findings: list[Finding] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    false_positives: list[Finding] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.missing and not self.false_positives


def run_selftest(catalog: PatternCatalog = DEFAULT_CATALOG) -> SelfTestResult:
    scan = scan_content(SAMPLE_PATH, SAMPLE_SCRIPT, catalog)
    found = {f.category for f in scan.findings}

    false_positives = [
        f
        for f in scan.findings
        if f.category == HOLLOW_FUNCTION
        and any(f"'{name}'" in f.description for name in LEGITIMATE_FUNCTIONS)
    ]

    return SelfTestResult(
        findings=scan.findings,
        missing=[c for c in EXPECTED_CATEGORIES if c not in found],
        false_positives=false_positives,
    )
