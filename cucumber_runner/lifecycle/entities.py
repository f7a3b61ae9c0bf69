"""Test entity tree: features, scenarios, example rows and steps."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator


class EntityKind(str, enum.Enum):
    FEATURE = "feature"
    SCENARIO = "scenario"
    EXAMPLE = "example"
    STEP = "step"


class RunState(str, enum.Enum):
    """Lifecycle state of an entity within one run."""

    IDLE = "idle"
    PREPARING = "preparing"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({
    RunState.PASSED,
    RunState.FAILED,
    RunState.SKIPPED,
    RunState.CANCELLED,
})

# Scenario-like entities own steps directly
SCENARIO_KINDS = frozenset({EntityKind.SCENARIO, EntityKind.EXAMPLE})


@dataclass(eq=False)
class TestEntity:
    """A node of the static test tree.

    Entities are built once by feature discovery and never mutated during
    a run; lifecycle state lives in the ``RunSession``.  For steps,
    ``text`` is the step text without its keyword.  For every other kind
    ``text`` is the display name.
    """

    __test__ = False

    id: str
    kind: EntityKind
    text: str
    keyword: str = ""
    line: int = 0
    path: str = ""
    children: list[TestEntity] = field(default_factory=list)
    parent: TestEntity | None = field(default=None, repr=False)

    def add_child(self, child: TestEntity) -> TestEntity:
        if self.kind is EntityKind.STEP:
            raise ValueError(f"Step {self.id} cannot have children")
        child.parent = self
        self.children.append(child)
        return child

    @property
    def label(self) -> str:
        """Display text; steps are shown as ``Keyword text``."""
        if self.kind is EntityKind.STEP:
            return f"{self.keyword} {self.text}".strip()
        return self.text

    @property
    def is_step(self) -> bool:
        return self.kind is EntityKind.STEP

    def walk(self) -> Iterator[TestEntity]:
        """This entity and all descendants, depth-first in document order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def steps(self) -> Iterator[TestEntity]:
        return (e for e in self.walk() if e.is_step)

    def ancestors(self) -> Iterator[TestEntity]:
        """Parents from the nearest upwards."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def scenario(self) -> TestEntity | None:
        """The nearest scenario-like entity containing this one (or itself)."""
        if self.kind in SCENARIO_KINDS:
            return self
        for node in self.ancestors():
            if node.kind in SCENARIO_KINDS:
                return node
        return None
