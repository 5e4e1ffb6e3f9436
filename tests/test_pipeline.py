"""Unit tests for the unified pipeline, ScanResult model, and CLI options."""

import dataclasses
import json
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from fakeaudit.cli import app
from fakeaudit.core.pipeline import run_scan, scan_files
from fakeaudit.models import (
    CRITICAL,
    MINOR,
    SHELLCHECK_ISSUE,
    WARNING,
    Finding,
    ScanResult,
    ScanSummary,
)
from fakeaudit.scanners.fake_code import scan_content
from fakeaudit.utils import walk_project_files

runner = CliRunner()

FAKE_SCRIPT = "function f() { return 0; }\n# TODO: finish this\nTEST_MODE=true\n"
CLEAN_SCRIPT = '#!/bin/bash\nset -e\nbuild() {\n  make all\n}\nbuild\n'
MINOR_SCRIPT = "#!/bin/bash\n# TODO: tidy up\nmake all\n"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _create_test_project(files: dict[str, str]) -> str:
    """Create a temporary project directory with the given files."""
    tmpdir = tempfile.mkdtemp(prefix="fakeaudit_pipe_")
    for name, content in files.items():
        filepath = os.path.join(tmpdir, name)
        os.makedirs(os.path.dirname(filepath), exist_ok=True)
        with open(filepath, "w") as fh:
            fh.write(content)
    return tmpdir


def _sample_findings() -> list[Finding]:
    """Return a small set of findings for model tests."""
    return [
        Finding(CRITICAL, "a.sh", 1, "hollow", "f() {", "HOLLOW_FUNCTION"),
        Finding(WARNING, "b.sh", 5, "flag", "TEST_MODE=true", "TEST_MODE_FLAG"),
        Finding(MINOR, "c.sh", 10, "todo", "# TODO", "PLACEHOLDER_COMMENT"),
        Finding(MINOR, "c.sh", 11, "sc", "echo $x", SHELLCHECK_ISSUE),
    ]


# ---------------------------------------------------------------------------
# ScanSummary / ScanResult model tests
# ---------------------------------------------------------------------------


class TestScanSummary:
    """Tests for the summary fold."""

    def test_counts(self) -> None:
        """Counts are derived from the findings."""
        summary = ScanSummary.from_findings(_sample_findings(), files_scanned=3)

        assert summary.total_issues == 4
        assert summary.severity_counts == {CRITICAL: 1, WARNING: 1, MINOR: 2}
        assert summary.tool_issues == 1
        assert summary.quality_score == 100 - 25 - 10 - 4 - 1

    def test_total_matches_severities(self) -> None:
        summary = ScanSummary.from_findings(_sample_findings(), files_scanned=3)
        assert summary.total_issues == summary.critical + summary.warning + summary.minor

    def test_summary_is_frozen(self) -> None:
        """The summary cannot be changed after the run."""
        summary = ScanSummary.from_findings([], files_scanned=0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            summary.critical = 5  # type: ignore[misc]

    def test_finding_validates_tags(self) -> None:
        with pytest.raises(ValueError):
            Finding("HIGH", "a.sh", 1, "x", "x", "HOLLOW_FUNCTION")
        with pytest.raises(ValueError):
            Finding(MINOR, "a.sh", 1, "x", "x", "NOT_A_CATEGORY")


class TestScanResult:
    """Tests for the ScanResult dataclass."""

    def test_has_severity_critical(self) -> None:
        result = ScanResult(target="x", findings=_sample_findings())
        assert result.has_severity(CRITICAL) is True

    def test_has_severity_minor_when_only_warning(self) -> None:
        """has_severity('MINOR') is True when WARNING findings exist."""
        findings = [f for f in _sample_findings() if f.severity == WARNING]
        result = ScanResult(target="x", findings=findings)
        assert result.has_severity(MINOR) is True
        assert result.has_severity(CRITICAL) is False

    def test_to_dict_structure(self) -> None:
        findings = _sample_findings()
        result = ScanResult(
            target="x",
            findings=findings,
            summary=ScanSummary.from_findings(findings, files_scanned=3),
        )
        d = result.to_dict()
        assert d["summary"]["files_scanned"] == 3
        assert d["summary"]["total_issues"] == 4
        assert len(d["findings"]) == 4
        assert d["findings"][0]["severity"] == CRITICAL


# ---------------------------------------------------------------------------
# Pipeline tests
# ---------------------------------------------------------------------------


class TestPipeline:
    """Tests for the run_scan pipeline."""

    def test_pipeline_returns_scan_result(self) -> None:
        """run_scan should return a ScanResult with correct counts."""
        project = _create_test_project(
            {"install.sh": FAKE_SCRIPT, "lib/clean.bash": CLEAN_SCRIPT, "notes.txt": FAKE_SCRIPT}
        )
        result = run_scan(Path(project), use_linter=False)

        assert isinstance(result, ScanResult)
        assert result.summary.files_scanned == 2
        assert result.summary.total_issues == 3
        assert result.summary.severity_counts == {CRITICAL: 1, WARNING: 1, MINOR: 1}
        assert result.catalog_version == "builtin-1"
        assert result.summary.linter_available is True

    def test_single_file_target(self) -> None:
        project = _create_test_project({"install.sh": FAKE_SCRIPT})
        result = run_scan(os.path.join(project, "install.sh"), use_linter=False)

        assert result.summary.files_scanned == 1
        assert len(result.findings) == 3

    def test_missing_target(self) -> None:
        with pytest.raises(FileNotFoundError):
            run_scan("/definitely/not/here/fakeaudit", use_linter=False)

    def test_pipeline_single_walk(self) -> None:
        """run_scan should call walk_project_files exactly once."""
        project = _create_test_project({"app.sh": CLEAN_SCRIPT})

        with patch(
            "fakeaudit.core.pipeline.walk_project_files", wraps=walk_project_files
        ) as mock_walk:
            run_scan(Path(project), use_linter=False)
            assert mock_walk.call_count == 1

    def test_unreadable_file_skipped(self) -> None:
        """A file that cannot be read does not stop the run."""
        project = _create_test_project({"install.sh": FAKE_SCRIPT})
        good = os.path.join(project, "install.sh")
        missing = os.path.join(project, "gone.sh")

        result = scan_files([missing, good], use_linter=False)

        assert result.skipped_files == [missing]
        assert result.summary.files_skipped == 1
        assert result.summary.files_scanned == 1
        assert result.summary.total_issues == 3

    def test_scan_error_isolated_to_file(self) -> None:
        """An exception while scanning one file skips that file only."""
        project = _create_test_project({"a.sh": FAKE_SCRIPT, "b.sh": FAKE_SCRIPT})
        broken = os.path.join(str(Path(project).resolve()), "a.sh")

        def _fail_on_first(path, content, catalog):
            if path == broken:
                raise ValueError("unexpected content")
            return scan_content(path, content, catalog)

        with patch("fakeaudit.core.pipeline.scan_content", side_effect=_fail_on_first):
            result = run_scan(Path(project), use_linter=False)

        assert result.skipped_files == [broken]
        assert result.summary.files_scanned == 1
        assert result.summary.files_skipped == 1
        assert result.summary.total_issues == 3

    def test_linter_error_isolated_to_file(self) -> None:
        """A crash inside the linter stage does not abort the run."""
        project = _create_test_project({"a.sh": FAKE_SCRIPT, "b.sh": CLEAN_SCRIPT})

        with patch("fakeaudit.core.pipeline.shellcheck_available", return_value=True), patch(
            "fakeaudit.core.pipeline.run_shellcheck", side_effect=RuntimeError("linter crashed")
        ):
            result = run_scan(Path(project))

        assert result.summary.files_skipped == 2
        assert result.summary.files_scanned == 0
        assert result.summary.interrupted is False

    @pytest.mark.skipif(os.name == "nt", reason="needs a POSIX shell")
    def test_linter_with_undecodable_output(self, tmp_path, monkeypatch) -> None:
        """A linter printing non-UTF-8 bytes still yields a full result."""
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir()
        linter = bin_dir / "shellcheck"
        linter.write_text("#!/bin/sh\nprintf '\\377[{\"line\": 1}]'\nexit 1\n", encoding="utf-8")
        linter.chmod(0o755)
        monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")

        project = _create_test_project({"a.sh": FAKE_SCRIPT, "b.sh": CLEAN_SCRIPT})
        paths = [os.path.join(project, "a.sh"), os.path.join(project, "b.sh")]
        result = scan_files(paths)

        assert result.summary.files_scanned == 2
        assert result.summary.linter_available is True
        assert result.summary.tool_issues == 0
        assert result.summary.total_issues == 3

    def test_file_metrics_collected(self) -> None:
        project = _create_test_project({"a.sh": FAKE_SCRIPT, "b.sh": CLEAN_SCRIPT})
        result = run_scan(Path(project), use_linter=False)

        metrics = {os.path.basename(m.file_path): m for m in result.file_metrics}
        assert metrics["a.sh"].total_lines == 3
        assert metrics["a.sh"].function_count == 1
        assert metrics["b.sh"].comment_lines == 1

    def test_interrupt_keeps_partial_results(self) -> None:
        """An interrupt stops the run and marks the summary."""
        project = _create_test_project({"a.sh": FAKE_SCRIPT, "b.sh": FAKE_SCRIPT})
        calls: list[str] = []

        def _interrupt_second(path, content, catalog):
            calls.append(path)
            if len(calls) == 2:
                raise KeyboardInterrupt
            return scan_content(path, content, catalog)

        with patch("fakeaudit.core.pipeline.scan_content", side_effect=_interrupt_second):
            result = run_scan(Path(project), use_linter=False)

        assert result.summary.interrupted is True
        assert result.summary.files_scanned == 1
        assert {f.file_path for f in result.findings} == {calls[0]}

    def test_linter_missing(self) -> None:
        """A missing shellcheck is recorded, not fatal."""
        project = _create_test_project({"install.sh": FAKE_SCRIPT})

        with patch("fakeaudit.core.pipeline.shellcheck_available", return_value=False):
            result = run_scan(Path(project))

        assert result.summary.linter_available is False
        assert result.summary.tool_issues == 0
        assert result.summary.total_issues == 3

    def test_linter_findings_merged(self) -> None:
        """ShellCheck findings are merged and counted separately."""
        project = _create_test_project({"install.sh": FAKE_SCRIPT})
        path = os.path.join(str(Path(project).resolve()), "install.sh")
        tool_finding = Finding(MINOR, path, 2, "ShellCheck style: x (SC1)", "", SHELLCHECK_ISSUE)

        with patch("fakeaudit.core.pipeline.shellcheck_available", return_value=True), patch(
            "fakeaudit.core.pipeline.run_shellcheck", return_value=[tool_finding]
        ):
            result = run_scan(Path(project))

        assert result.summary.tool_issues == 1
        assert result.summary.total_issues == 4
        assert [f.line_number for f in result.findings] == [1, 2, 2, 3]


# ---------------------------------------------------------------------------
# CLI --json tests
# ---------------------------------------------------------------------------


class TestJSONOutput:
    """Tests for the --json CLI option."""

    def test_json_output_is_valid(self) -> None:
        """--json flag should produce valid, parseable JSON."""
        project = _create_test_project({"install.sh": FAKE_SCRIPT})
        result = runner.invoke(
            app, ["scan", project, "--json", "--no-shellcheck", "--fail-on", "NONE"]
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["metadata"]["total_issues"] == 3
        assert data["summary"]["critical"] == 1
        assert isinstance(data["findings"], list)
        assert "impact_score" in data["findings"][0]

    def test_json_output_clean_project(self) -> None:
        """--json on a clean project should report zero issues."""
        project = _create_test_project({"build.sh": CLEAN_SCRIPT})
        result = runner.invoke(app, ["scan", project, "--json", "--no-shellcheck"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["metadata"]["total_issues"] == 0


# ---------------------------------------------------------------------------
# CLI --fail-on tests
# ---------------------------------------------------------------------------


class TestFailOn:
    """Tests for the --fail-on CLI option."""

    def test_default_fails_on_critical(self) -> None:
        """Critical findings fail the run by default."""
        project = _create_test_project({"install.sh": FAKE_SCRIPT})
        result = runner.invoke(app, ["scan", project, "--no-shellcheck"])
        assert result.exit_code == 1

    def test_fail_on_critical_without_critical(self) -> None:
        project = _create_test_project({"todo.sh": MINOR_SCRIPT})
        result = runner.invoke(app, ["scan", project, "--no-shellcheck"])
        assert result.exit_code == 0

    def test_fail_on_minor_with_minor(self) -> None:
        project = _create_test_project({"todo.sh": MINOR_SCRIPT})
        result = runner.invoke(app, ["scan", project, "--no-shellcheck", "--fail-on", "minor"])
        assert result.exit_code == 1

    def test_fail_on_none(self) -> None:
        project = _create_test_project({"install.sh": FAKE_SCRIPT})
        result = runner.invoke(app, ["scan", project, "--no-shellcheck", "--fail-on", "NONE"])
        assert result.exit_code == 0

    def test_fail_on_invalid_value(self) -> None:
        """--fail-on with bad value should exit 1 with error."""
        project = _create_test_project({"build.sh": CLEAN_SCRIPT})
        result = runner.invoke(app, ["scan", project, "--fail-on", "HIGH"])
        assert result.exit_code == 1
        assert "Invalid --fail-on value" in result.stdout


# ---------------------------------------------------------------------------
# Other CLI behaviour
# ---------------------------------------------------------------------------


class TestCLI:
    """Tests for paths, reports, catalogs and the extra commands."""

    def test_missing_path(self) -> None:
        result = runner.invoke(app, ["scan", "/definitely/not/here/fakeaudit"])
        assert result.exit_code == 1
        assert "Path does not exist" in result.stdout

    def test_output_dir_writes_reports(self, tmp_path) -> None:
        project = _create_test_project({"install.sh": FAKE_SCRIPT})
        out = tmp_path / "reports"
        result = runner.invoke(
            app,
            ["scan", project, "--no-shellcheck", "--fail-on", "NONE", "-o", str(out)],
        )

        assert result.exit_code == 0
        for name in (
            "audit_report.md",
            "audit_results.json",
            "priority_matrix.csv",
            "dependency_analysis.md",
        ):
            assert (out / name).is_file()

    def test_interrupted_exit_code(self) -> None:
        project = _create_test_project({"a.sh": CLEAN_SCRIPT})

        with patch("fakeaudit.core.pipeline.scan_content", side_effect=KeyboardInterrupt):
            result = runner.invoke(app, ["scan", project, "--no-shellcheck"])

        assert result.exit_code == 130

    def test_custom_catalog(self, tmp_path) -> None:
        """A catalog file can disable rules."""
        catalog = tmp_path / "quiet.yaml"
        catalog.write_text("disable: [dev_marker]\n", encoding="utf-8")
        project = _create_test_project({"todo.sh": MINOR_SCRIPT})

        result = runner.invoke(
            app,
            ["scan", project, "--json", "--no-shellcheck", "--fail-on", "MINOR", "-c", str(catalog)],
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["metadata"]["catalog_version"] == "quiet"
        assert data["metadata"]["total_issues"] == 0

    def test_bad_catalog(self, tmp_path) -> None:
        catalog = tmp_path / "bad.yaml"
        catalog.write_text("rules:\n  - name: x\n    pattern: '(unclosed'\n", encoding="utf-8")
        project = _create_test_project({"build.sh": CLEAN_SCRIPT})

        result = runner.invoke(app, ["scan", project, "-c", str(catalog)])
        assert result.exit_code == 1

    def test_patterns_command(self) -> None:
        result = runner.invoke(app, ["patterns"])
        assert result.exit_code == 0
        assert "Pattern Catalog (builtin-1)" in result.stdout

    def test_selftest_command(self) -> None:
        result = runner.invoke(app, ["selftest"])
        assert result.exit_code == 0
        assert "Self-test passed" in result.stdout

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "fakeaudit" in result.stdout
