"""Unit tests for the runner config module."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest

from cucumber_runner.lifecycle.config import DEFAULT_CONFIG, RunnerConfig


class TestRunnerConfigCreate:
    """Tests for creating RunnerConfig instances."""

    def test_no_path_uses_defaults(self):
        """No path gives default config values."""
        cfg = RunnerConfig(None)
        assert cfg.collapse_threshold == DEFAULT_CONFIG["collapse_threshold"]
        assert cfg.show_step_results is True
        assert cfg.maven_executable == "mvn"
        assert cfg.maven_args == []
        assert cfg.maven_profile == ""
        assert cfg.cucumber_tags == ""
        assert cfg.environment_variables == {}
        assert cfg.test_class is None

    def test_nonexistent_path_uses_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg = RunnerConfig(Path(tmpdir) / "missing.json")
            assert cfg.collapse_threshold == 200

    def test_load_from_file(self):
        """Config is loaded from a JSON file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / ".cucumber_runner.json"
            path.write_text(json.dumps({
                "collapse_threshold": 50,
                "maven_args": "-o  -B",
                "maven_profile": "it",
                "cucumber_tags": "@smoke and not @wip",
                "environment_variables": {"ENV": "qa", "RETRIES": 3},
                "test_class": "RunCucumberTest",
            }))
            cfg = RunnerConfig(path)
            assert cfg.collapse_threshold == 50
            assert cfg.maven_args == ["-o", "-B"]
            assert cfg.maven_profile == "it"
            assert cfg.cucumber_tags == "@smoke and not @wip"
            assert cfg.environment_variables == {"ENV": "qa", "RETRIES": "3"}
            assert cfg.test_class == "RunCucumberTest"

    def test_partial_file_fills_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / ".cucumber_runner.json"
            path.write_text(json.dumps({"collapse_threshold": 10}))
            cfg = RunnerConfig(path)
            assert cfg.collapse_threshold == 10
            assert cfg.show_step_results is True  # default

    def test_corrupted_file_uses_defaults(self):
        """Corrupted JSON file falls back to defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / ".cucumber_runner.json"
            path.write_text("{ invalid json }")
            cfg = RunnerConfig(path)
            assert cfg.collapse_threshold == 200

    def test_invalid_environment_variables(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / ".cucumber_runner.json"
            path.write_text(json.dumps({"environment_variables": ["A=1"]}))
            cfg = RunnerConfig(path)
            with pytest.raises(ValueError):
                cfg.environment_variables


class TestRunnerConfigSave:
    """Tests for saving config."""

    def test_save_roundtrip(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "nested" / ".cucumber_runner.json"
            cfg = RunnerConfig(path)
            cfg.set_config(collapse_threshold=25, test_class="MyTest")
            cfg.save()

            reloaded = RunnerConfig(path)
            assert reloaded.collapse_threshold == 25
            assert reloaded.test_class == "MyTest"

    def test_save_without_path_raises(self):
        cfg = RunnerConfig(None)
        with pytest.raises(ValueError):
            cfg.save()

    def test_defaults_not_shared(self):
        """Mutating one config's data does not leak into defaults."""
        cfg = RunnerConfig(None)
        cfg.config["environment_variables"]["X"] = "1"
        assert RunnerConfig(None).environment_variables == {}
