"""Runner configuration file management.

Reads and writes the .cucumber_runner.json file that holds the collapse
threshold, Maven invocation options and console preferences.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_NAME = ".cucumber_runner.json"

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "collapse_threshold": 200,
    "show_step_results": True,
    "maven_executable": "mvn",
    "maven_args": "",
    "maven_profile": "",
    "cucumber_tags": "",
    "environment_variables": {},
    "test_class": None,
}


class RunnerConfig:
    """Manages the .cucumber_runner.json configuration file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._data: dict[str, Any] = _defaults()
        if path is not None and path.exists():
            self._load()

    def _load(self) -> None:
        """Load config from the file."""
        assert self.path is not None
        try:
            text = self.path.read_text()
            data = json.loads(text)
            if isinstance(data, dict):
                self._data = {**_defaults(), **data}
        except (json.JSONDecodeError, OSError):
            self._data = _defaults()

    def save(self) -> None:
        """Write config to the file."""
        if self.path is None:
            raise ValueError("No config file path specified")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(self._data, f, indent=2)
            f.write("\n")

    @property
    def config(self) -> dict[str, Any]:
        """Get the full configuration dict."""
        return dict(self._data)

    @property
    def collapse_threshold(self) -> int:
        """Step count above which steps are shown collapsed."""
        return int(
            self._data.get("collapse_threshold", DEFAULT_CONFIG["collapse_threshold"])
        )

    @property
    def show_step_results(self) -> bool:
        return bool(self._data.get("show_step_results", True))

    @property
    def maven_executable(self) -> str:
        return str(self._data.get("maven_executable") or "mvn")

    @property
    def maven_args(self) -> list[str]:
        """Extra Maven arguments, split on whitespace."""
        return str(self._data.get("maven_args") or "").split()

    @property
    def maven_profile(self) -> str:
        return str(self._data.get("maven_profile") or "")

    @property
    def cucumber_tags(self) -> str:
        return str(self._data.get("cucumber_tags") or "")

    @property
    def environment_variables(self) -> dict[str, str]:
        """Extra environment variables for the test process.

        Raises:
            ValueError: If the configured value is not a JSON object.
        """
        env = self._data.get("environment_variables") or {}
        if not isinstance(env, dict):
            raise ValueError("environment_variables must be an object")
        return {str(k): str(v) for k, v in env.items()}

    @property
    def test_class(self) -> str | None:
        val = self._data.get("test_class")
        return str(val) if val else None

    def set_config(
        self,
        collapse_threshold: int | None = None,
        test_class: str | None = None,
    ) -> None:
        """Update configuration values."""
        if collapse_threshold is not None:
            self._data["collapse_threshold"] = collapse_threshold
        if test_class is not None:
            self._data["test_class"] = test_class


def _defaults() -> dict[str, Any]:
    data = dict(DEFAULT_CONFIG)
    data["environment_variables"] = {}
    return data
