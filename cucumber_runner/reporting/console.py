"""Console rendering of live test-tree transitions."""

from __future__ import annotations

import sys
from typing import TextIO

from cucumber_runner.analysis.events import StepResultEvent
from cucumber_runner.lifecycle.entities import EntityKind, RunState, TestEntity
from cucumber_runner.lifecycle.synchronizer import TestTreeListener

ICONS = {
    RunState.PASSED: "✅",
    RunState.FAILED: "❌",
    RunState.SKIPPED: "⊝",
    RunState.CANCELLED: "⏹",
}

_INDENT = {
    EntityKind.FEATURE: 0,
    EntityKind.SCENARIO: 1,
    EntityKind.EXAMPLE: 2,
    EntityKind.STEP: 3,
}


class ConsoleListener(TestTreeListener):
    """Prints one line per terminal transition.

    Step lines are suppressed when *show_steps* is False or when the run
    was collapsed; failure messages are always shown.  Unmatched step
    results go to *error_stream* (stderr by default).
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        show_steps: bool = True,
        error_stream: TextIO | None = None,
    ) -> None:
        self.stream = stream or sys.stdout
        self.error_stream = error_stream or sys.stderr
        self.show_steps = show_steps
        self._collapsed: set[str] = set()

    def running(self, entity: TestEntity) -> None:
        if entity.kind is not EntityKind.STEP:
            self._write(entity, "▶", entity.label)

    def terminal(
        self, entity: TestEntity, state: RunState, message: str | None
    ) -> None:
        if entity.is_step and not self._steps_visible(entity):
            if state is RunState.FAILED and message:
                self._write(entity, ICONS[state], entity.label)
                self._write_message(entity, message)
            return
        self._write(entity, ICONS.get(state, "?"), entity.label)
        if message:
            self._write_message(entity, message)

    def collapse(self, entity: TestEntity) -> None:
        self._collapsed.add(entity.id)

    def unmatched(self, event: StepResultEvent) -> None:
        print(f"⚠ unmatched step: {event.label}", file=self.error_stream)

    def _steps_visible(self, step: TestEntity) -> bool:
        if not self.show_steps:
            return False
        scenario = step.scenario()
        return scenario is None or scenario.id not in self._collapsed

    def _write(self, entity: TestEntity, icon: str, text: str) -> None:
        indent = "  " * _INDENT[entity.kind]
        self.stream.write(f"{indent}{icon} {text}\n")
        self.stream.flush()

    def _write_message(self, entity: TestEntity, message: str) -> None:
        indent = "  " * (_INDENT[entity.kind] + 2)
        for line in message.splitlines():
            self.stream.write(f"{indent}{line.strip()}\n")
        self.stream.flush()
