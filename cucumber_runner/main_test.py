"""Tests for the command-line entry point."""

from __future__ import annotations

import json
import stat
import tempfile
from pathlib import Path
from unittest.mock import patch

from cucumber_runner.main import main, parse_args

FEATURE = """Feature: Login

  Scenario: Good
    Given a user
    When they log in
    Then they see the dashboard

  Scenario: Bad
    Given a user
    When they use a wrong password
    Then they see an error
"""


def _workspace(
    tmpdir: Path,
    output: str,
    exit_code: int = 0,
    test_class: str | None = "RunCucumberTest",
) -> Path:
    """Create a Maven-like workspace whose 'mvn' prints *output*."""
    resources = tmpdir / "src" / "test" / "resources" / "features"
    resources.mkdir(parents=True)
    (tmpdir / "pom.xml").write_text("<project/>")
    feature = resources / "login.feature"
    feature.write_text(FEATURE)

    script = tmpdir / "fake-mvn.sh"
    script.write_text(
        "#!/bin/bash\n"
        f"echo \"$@\" > {tmpdir / 'args.txt'}\n"
        f"cat <<'OUT'\n{output}OUT\n"
        f"exit {exit_code}\n"
    )
    script.chmod(script.stat().st_mode | stat.S_IEXEC)
    config = {"maven_executable": str(script)}
    if test_class:
        config["test_class"] = test_class
    (tmpdir / ".cucumber_runner.json").write_text(json.dumps(config))
    return feature


PASSING = (
    "Scenario: Good\n"
    "  ✔ Given a user\n"
    "  ✔ When they log in\n"
    "  ✔ Then they see the dashboard\n"
    "\n"
    "Scenario: Bad\n"
    "  ✔ Given a user\n"
    "  ✔ When they use a wrong password\n"
    "  ✔ Then they see an error\n"
)


class TestParseArgs:
    def test_defaults(self):
        args = parse_args(["a.feature"])
        assert args.feature == Path("a.feature")
        assert args.line is None
        assert args.example_line is None
        assert args.output is None
        assert not args.verbose

    def test_lines(self):
        args = parse_args(["a.feature", "--line", "3", "--example-line", "9"])
        assert (args.line, args.example_line) == (3, 9)


class TestMain:
    """Tests for full CLI runs against a fake Maven."""

    def test_passing_run_writes_reports(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            feature = _workspace(root, PASSING, exit_code=0)
            out = root / "out" / "report.json"
            yaml_out = root / "out" / "report.yaml"
            code = main([
                str(feature), "--workspace-root", str(root),
                "--output", str(out), "--yaml-output", str(yaml_out),
            ])
            report = json.loads(out.read_text())["report"]
            args = (root / "args.txt").read_text().split()
            assert yaml_out.exists()

        assert code == 0
        assert report["entities"][0]["state"] == "passed"
        assert report["summary"]["step"] == {"total": 6, "passed": 6}
        assert args == [
            "test",
            "-Dcucumber.features=classpath:features/login.feature",
            "-Dtest=RunCucumberTest",
        ]

    def test_failed_step_fails_run(self):
        output = PASSING.replace(
            "  ✔ When they use a wrong password\n",
            "  ✘ When they use a wrong password\n"
            "      java.lang.AssertionError: expected error page\n"
            "  ↷ Then they see an error\n",
        ).replace("  ✔ Then they see an error\n", "")
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            feature = _workspace(root, output, exit_code=1)
            out = root / "report.json"
            code = main([str(feature), "--workspace-root", str(root), "--output", str(out)])
            report = json.loads(out.read_text())["report"]

        assert code == 1
        good, bad = report["entities"][0]["children"]
        assert good["state"] == "passed"
        assert bad["state"] == "failed"
        assert "expected error page" in bad["children"][1]["message"]
        assert bad["children"][2]["state"] == "skipped"

    def test_single_scenario_line_selector(self):
        output = (
            "Scenario: Bad\n"
            "  ✔ Given a user\n"
            "  ✔ When they use a wrong password\n"
            "  ✔ Then they see an error\n"
        )
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            feature = _workspace(root, output)
            out = root / "report.json"
            code = main([
                str(feature), "--line", "8",
                "--workspace-root", str(root), "--output", str(out),
            ])
            report = json.loads(out.read_text())["report"]
            args = (root / "args.txt").read_text().split()

        assert code == 0
        assert [e["name"] for e in report["entities"]] == ["Bad"]
        assert report["summary"]["total"] == 4
        assert "-Dcucumber.features=classpath:features/login.feature:8" in args

    def test_test_class_detected_when_not_configured(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            feature = _workspace(root, PASSING, test_class=None)
            runner = root / "src" / "test" / "java" / "com" / "acme"
            runner.mkdir(parents=True)
            (runner / "CucumberRunner.java").write_text(
                "import io.cucumber.junit.platform.engine.Constants;\n"
                "public class CucumberRunner {}\n"
            )
            code = main([str(feature), "--workspace-root", str(root)])
            args = (root / "args.txt").read_text().split()

        assert code == 0
        assert "-Dtest=CucumberRunner" in args

    def test_no_test_class_anywhere(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            feature = _workspace(root, PASSING, test_class=None)
            main([str(feature), "--workspace-root", str(root)])
            args = (root / "args.txt").read_text().split()
        assert not any(a.startswith("-Dtest=") for a in args)

    def test_unknown_line(self, capsys):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            feature = _workspace(root, PASSING)
            code = main([str(feature), "--line", "2", "--workspace-root", str(root)])
        assert code == 2
        assert "no scenario or example at line 2" in capsys.readouterr().err

    def test_not_a_feature(self, capsys):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "empty.feature"
            path.write_text("nothing here\n")
            code = main([str(path), "--workspace-root", tmpdir])
        assert code == 2
        assert "no feature found" in capsys.readouterr().err

    def test_process_start_failure(self, capsys):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            feature = _workspace(root, PASSING)
            with patch("cucumber_runner.main.run_process") as mock_run:
                mock_run.side_effect = RuntimeError("Failed to start mvn")
                code = main([str(feature), "--workspace-root", str(root)])
        assert code == 2
        assert "Failed to start mvn" in capsys.readouterr().err
