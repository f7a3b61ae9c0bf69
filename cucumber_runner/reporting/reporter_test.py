"""Tests for run report generation."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

import yaml

from cucumber_runner.analysis.events import StepResultEvent, StepStatus
from cucumber_runner.analysis.summary import RunSummary
from cucumber_runner.lifecycle.entities import EntityKind, TestEntity
from cucumber_runner.lifecycle.synchronizer import StatusSynchronizer
from cucumber_runner.reporting.reporter import Reporter, run_passed


def _finished_session(fail: bool = True):
    feature = TestEntity(id="f", kind=EntityKind.FEATURE, text="Login")
    scenario = feature.add_child(TestEntity(id="s", kind=EntityKind.SCENARIO, text="Ok", line=3))
    scenario.add_child(TestEntity(id="s:1", kind=EntityKind.STEP, keyword="Given", text="a", line=4))
    scenario.add_child(TestEntity(id="s:2", kind=EntityKind.STEP, keyword="When", text="b", line=5))
    sync = StatusSynchronizer()
    session = sync.start_run([feature])
    sync.apply(StepResultEvent("Given", "a", StepStatus.PASSED))
    if fail:
        sync.apply(StepResultEvent("When", "b", StepStatus.FAILED, "AssertionError: boom"))
    sync.apply(StepResultEvent("Then", "unknown", StepStatus.PASSED))
    sync.finish(exit_code=1 if fail else 0)
    return session


class TestGenerateReport:
    """Tests for the report dictionary."""

    def test_tree_and_states(self):
        report = Reporter(_finished_session()).generate_report()["report"]
        feature = report["entities"][0]
        assert feature["state"] == "failed"
        scenario = feature["children"][0]
        assert scenario["name"] == "Ok"
        assert [s["name"] for s in scenario["children"]] == ["Given a", "When b"]
        assert scenario["children"][1]["message"] == "AssertionError: boom"
        assert "message" not in scenario["children"][0]
        assert report["exit_code"] == 1
        assert report["cancelled"] is False

    def test_summary_counts(self):
        summary = Reporter(_finished_session()).generate_report()["report"]["summary"]
        assert summary["total"] == 4
        assert summary["step"] == {"total": 2, "passed": 1, "failed": 1}
        assert summary["feature"] == {"total": 1, "failed": 1}

    def test_unmatched_listed(self):
        report = Reporter(_finished_session()).generate_report()["report"]
        assert report["unmatched"] == [{"step": "Then unknown", "status": "passed"}]

    def test_cucumber_summary_included_when_seen(self):
        summary = RunSummary()
        summary.consume("2 Steps (1 failed, 1 passed)")
        report = Reporter(_finished_session(), summary).generate_report()["report"]
        assert report["cucumber_summary"]["steps"] == 2
        no_summary = Reporter(_finished_session(), RunSummary()).generate_report()["report"]
        assert "cucumber_summary" not in no_summary

    def test_run_passed(self):
        assert not run_passed(_finished_session(fail=True))
        assert run_passed(_finished_session(fail=False))


class TestWriteReport:
    """Tests for JSON and YAML file output."""

    def test_json_output(self):
        reporter = Reporter(_finished_session())
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "nested" / "report.json"
            reporter.write_report(path)
            loaded = json.loads(path.read_text())
        assert loaded["report"]["entities"][0]["id"] == "f"

    def test_yaml_output_valid(self):
        """Written YAML file is valid and can be loaded."""
        reporter = Reporter(_finished_session())
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "report.yaml"
            reporter.write_yaml(path)
            loaded = yaml.safe_load(path.read_text())
        assert "report" in loaded
        assert loaded["report"]["summary"]["total"] == 4
        assert loaded["report"]["entities"][0]["children"][0]["state"] == "failed"
