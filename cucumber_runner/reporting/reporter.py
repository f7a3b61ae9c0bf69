"""Report generation for a completed Cucumber run.

Produces a nested report mirroring the entity tree (features, scenarios,
example rows, steps) with each entity's final state and message, plus a
per-state summary and the counts Cucumber printed itself.
"""

from __future__ import annotations

import datetime
import json
from pathlib import Path
from typing import Any

import yaml

from cucumber_runner.analysis.summary import RunSummary
from cucumber_runner.lifecycle.entities import RunState, TestEntity
from cucumber_runner.lifecycle.synchronizer import RunSession


class Reporter:
    """Builds JSON and YAML reports from a run session."""

    def __init__(self, session: RunSession, summary: RunSummary | None = None) -> None:
        self.session = session
        self.summary = summary

    def generate_report(self) -> dict[str, Any]:
        """Generate the report dictionary.

        Returns:
            ``{"report": {...}}`` with run metadata, a ``summary`` of entity
            counts and the ``entities`` tree.
        """
        session = self.session
        now = datetime.datetime.now(tz=datetime.timezone.utc).isoformat()
        report: dict[str, Any] = {
            "generated_at": now,
            "exit_code": session.exit_code,
            "cancelled": session.cancelled,
            "collapsed": session.collapsed,
            "summary": self._compute_summary(),
            "entities": [self._build_node(root) for root in session.roots],
        }
        if session.unmatched:
            report["unmatched"] = [
                {"step": e.label, "status": e.status.value}
                for e in session.unmatched
            ]
        if self.summary is not None and self.summary.seen:
            report["cucumber_summary"] = self.summary.to_dict()
        return {"report": report}

    def write_report(self, path: Path) -> None:
        """Write the report as a JSON file.

        Args:
            path: File path to write the JSON report to.
        """
        report = self.generate_report()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(report, f, indent=2)

    def write_yaml(self, path: Path) -> None:
        """Write the report as a YAML file.

        Args:
            path: File path to write the YAML report to.
        """
        report = self.generate_report()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(report, f, sort_keys=False, allow_unicode=True)

    def _build_node(self, entity: TestEntity) -> dict[str, Any]:
        node: dict[str, Any] = {
            "id": entity.id,
            "kind": entity.kind.value,
            "name": entity.label,
            "line": entity.line,
            "state": self.session.state_of(entity).value,
        }
        message = self.session.message_of(entity)
        if message:
            node["message"] = message
        if entity.children:
            node["children"] = [self._build_node(c) for c in entity.children]
        return node

    def _compute_summary(self) -> dict[str, Any]:
        """Count entities per kind and final state."""
        summary: dict[str, Any] = {"total": len(self.session.order)}
        for entity in self.session.order:
            kind = summary.setdefault(entity.kind.value, {"total": 0})
            kind["total"] += 1
            state = self.session.state_of(entity).value
            kind[state] = kind.get(state, 0) + 1
        return summary


def run_passed(session: RunSession) -> bool:
    """True when every run root ended passed or skipped."""
    return all(
        session.state_of(root) in (RunState.PASSED, RunState.SKIPPED)
        for root in session.roots
    )
