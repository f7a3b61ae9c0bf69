"""Cucumber end-of-run summary lines.

Cucumber closes its console output with lines such as::

    3 Scenarios (1 failed, 2 passed)
    12 Steps (1 failed, 2 skipped, 9 passed)

These counts are informational only; entity outcomes are always derived
from the individual step results.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from cucumber_runner.analysis.normalizer import normalize

_SUMMARY_RE = re.compile(
    r"^\s*(?P<total>\d+)\s+(?P<kind>scenarios?|steps?)\s+\((?P<details>[^)]*)\)",
    re.IGNORECASE,
)
_DETAIL_RE = re.compile(r"(\d+)\s+([a-z]+)", re.IGNORECASE)


@dataclass
class RunSummary:
    """Counts reported by Cucumber itself."""

    scenarios: int = 0
    steps: int = 0
    scenario_counts: dict[str, int] = field(default_factory=dict)
    step_counts: dict[str, int] = field(default_factory=dict)
    seen: bool = False

    def consume(self, raw_line: str) -> bool:
        """Record the line if it is a summary line.

        Returns:
            True if the line was recognized.
        """
        match = _SUMMARY_RE.match(normalize(raw_line))
        if match is None:
            return False
        total = int(match.group("total"))
        counts = {
            status.lower(): int(count)
            for count, status in _DETAIL_RE.findall(match.group("details"))
        }
        if match.group("kind").lower().startswith("scenario"):
            self.scenarios = total
            self.scenario_counts = counts
        else:
            self.steps = total
            self.step_counts = counts
        self.seen = True
        return True

    @property
    def failures(self) -> int:
        return self.step_counts.get("failed", 0)

    @property
    def skipped(self) -> int:
        return self.step_counts.get("skipped", 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "scenarios": self.scenarios,
            "steps": self.steps,
            "scenario_counts": dict(self.scenario_counts),
            "step_counts": dict(self.step_counts),
        }
