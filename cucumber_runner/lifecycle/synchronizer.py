"""Status synchronizer: drives entity lifecycle states from step results.

Every entity in a run moves through::

    idle -> preparing -> running -> passed | failed | skipped | cancelled

``preparing`` is entered when the run is requested, ``running`` on the
first step result that touches the entity, and exactly one terminal
state is reached per run.  Later terminal requests are no-ops.

Scenario, example and feature outcomes are aggregated from their steps,
never taken from the process exit code: Maven reports a non-zero exit
for reasons unrelated to the scenarios themselves (a failing sibling
module, a surefire configuration error).

The synchronizer is the only writer of a ``RunSession``.  Each
transition is forwarded to the listener before the call returns.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from cucumber_runner.analysis.events import StepResultEvent, StepStatus
from cucumber_runner.lifecycle.entities import (
    SCENARIO_KINDS,
    RunState,
    TestEntity,
)
from cucumber_runner.lifecycle.matcher import resolve

logger = logging.getLogger(__name__)

DEFAULT_COLLAPSE_THRESHOLD = 200

NOT_EXECUTED_MESSAGE = "Step was not executed"
PENDING_MESSAGE = "Step is pending"
UNDEFINED_MESSAGE = "Step is undefined"


class TestTreeListener:
    """Receives state transitions for the test tree UI.

    Subclasses override what they need; every hook defaults to a no-op.
    """

    __test__ = False

    def preparing(self, entity: TestEntity) -> None:
        pass

    def running(self, entity: TestEntity) -> None:
        pass

    def terminal(
        self, entity: TestEntity, state: RunState, message: str | None
    ) -> None:
        pass

    def collapse(self, entity: TestEntity) -> None:
        """Present the steps of a scenario-like entity on demand only."""

    def unmatched(self, event: StepResultEvent) -> None:
        """A step result could not be resolved to any known step."""


@dataclass
class RunSession:
    """State of one test execution.

    ``order`` lists every entity of the run in document order, parents
    before children.
    """

    roots: list[TestEntity]
    order: list[TestEntity] = field(default_factory=list)
    states: dict[str, RunState] = field(default_factory=dict)
    messages: dict[str, str] = field(default_factory=dict)
    observed: set[str] = field(default_factory=set)
    unmatched: list[StepResultEvent] = field(default_factory=list)
    step_count: int = 0
    collapsed: bool = False
    cancelled: bool = False
    finished: bool = False
    exit_code: int | None = None
    current_scenario: TestEntity | None = None

    def __contains__(self, entity: TestEntity) -> bool:
        return entity.id in self.states

    def state_of(self, entity: TestEntity) -> RunState:
        return self.states.get(entity.id, RunState.IDLE)

    def message_of(self, entity: TestEntity) -> str | None:
        return self.messages.get(entity.id)

    def steps(self) -> list[TestEntity]:
        return [e for e in self.order if e.is_step]

    def counts(self) -> dict[str, int]:
        """Number of entities per state, keyed by state value."""
        result: dict[str, int] = {}
        for state in self.states.values():
            result[state.value] = result.get(state.value, 0) + 1
        return result


def aggregate_states(states: Iterable[RunState]) -> RunState:
    """Derive a parent outcome from its descendant step states.

    Any failure wins, then any cancellation; all-skipped (or nothing at
    all) is skipped; anything else passed.

    Pending and undefined steps end as skipped, so a scenario mixing passed
    steps with unimplemented ones still aggregates to passed.  The
    synchronizer names such steps in the parent's message instead.
    """
    states = list(states)
    if RunState.FAILED in states:
        return RunState.FAILED
    if RunState.CANCELLED in states:
        return RunState.CANCELLED
    if all(s is RunState.SKIPPED for s in states):
        return RunState.SKIPPED
    return RunState.PASSED


def step_outcome(event: StepResultEvent) -> tuple[RunState, str | None]:
    """Map a step result to the terminal state and message of its step."""
    status = event.status
    if status is StepStatus.PASSED:
        return RunState.PASSED, None
    if status is StepStatus.FAILED:
        return RunState.FAILED, event.error_message or "Step failed"
    if status is StepStatus.SKIPPED:
        return RunState.SKIPPED, None
    if status is StepStatus.PENDING:
        return RunState.SKIPPED, PENDING_MESSAGE
    if status is StepStatus.UNDEFINED:
        return RunState.SKIPPED, UNDEFINED_MESSAGE
    raise ValueError(f"Unknown step status: {status!r}")


class StatusSynchronizer:
    """Applies step results to the entity tree of the active run."""

    def __init__(
        self,
        listener: TestTreeListener | None = None,
        collapse_threshold: int = DEFAULT_COLLAPSE_THRESHOLD,
    ) -> None:
        self.listener = listener or TestTreeListener()
        self.collapse_threshold = collapse_threshold
        self.session: RunSession | None = None

    def start_run(self, roots: Iterable[TestEntity]) -> RunSession:
        """Begin a run over *roots* and all their descendants.

        Any previous session is discarded.  Every member enters
        ``preparing`` immediately, parents first.
        """
        roots = _outermost(list(roots))
        session = RunSession(roots=roots)
        for root in roots:
            for entity in root.walk():
                if entity in session:
                    continue
                session.order.append(entity)
                session.states[entity.id] = RunState.IDLE
        session.step_count = sum(1 for e in session.order if e.is_step)
        self.session = session

        for entity in session.order:
            self._set(entity, RunState.PREPARING)
            self.listener.preparing(entity)

        if session.step_count > self.collapse_threshold:
            session.collapsed = True
            logger.info(
                "%d steps exceed collapse threshold %d; collapsing step display",
                session.step_count,
                self.collapse_threshold,
            )
            for entity in session.order:
                if entity.kind in SCENARIO_KINDS:
                    self.listener.collapse(entity)
        return session

    def state_of(self, entity: TestEntity) -> RunState:
        if self.session is None:
            return RunState.IDLE
        return self.session.state_of(entity)

    def mark_running(self, entity: TestEntity) -> bool:
        """Move a preparing entity to running.

        Returns:
            True if the transition happened.
        """
        session = self.session
        if session is None or session.state_of(entity) is not RunState.PREPARING:
            return False
        self._set(entity, RunState.RUNNING)
        self.listener.running(entity)
        return True

    def request_terminal(
        self,
        entity: TestEntity,
        state: RunState,
        message: str | None = None,
    ) -> bool:
        """Move an entity to a terminal state, at most once per run.

        Returns:
            True if the transition happened; False for entities outside
            the run, not yet preparing, or already terminal.

        Raises:
            ValueError: If *state* is not terminal.
        """
        if not state.is_terminal:
            raise ValueError(f"{state.value} is not a terminal state")
        session = self.session
        if session is None:
            return False
        current = session.state_of(entity)
        if current not in (RunState.PREPARING, RunState.RUNNING):
            if current.is_terminal:
                logger.debug(
                    "ignoring %s for %s: already %s",
                    state.value, entity.id, current.value,
                )
            return False
        self._set(entity, state)
        if message:
            session.messages[entity.id] = message
        self.listener.terminal(entity, state, message)
        return True

    def apply(self, event: StepResultEvent) -> TestEntity | None:
        """Apply one step result.

        Returns:
            The step entity that was updated, or None when the event could
            not be resolved or the run is no longer accepting results.
        """
        session = self.session
        if session is None or session.cancelled or session.finished:
            return None

        entity = resolve(event, self._candidates())
        if entity is None:
            logger.warning(
                "unmatched step result: %s [%s]", event.label, event.status.value
            )
            session.unmatched.append(event)
            self.listener.unmatched(event)
            return None

        for ancestor in reversed(list(entity.ancestors())):
            if ancestor in session:
                self.mark_running(ancestor)
        self.mark_running(entity)
        state, message = step_outcome(event)
        session.observed.add(entity.id)
        self.request_terminal(entity, state, message)
        session.current_scenario = entity.scenario()
        self._complete_ancestors(entity)
        return entity

    def cancel(self) -> None:
        """Cancel every entity still preparing or running, children first."""
        session = self.session
        if session is None or session.cancelled:
            return
        session.cancelled = True
        for entity in reversed(session.order):
            if not session.state_of(entity).is_terminal:
                self.request_terminal(entity, RunState.CANCELLED)

    def finish(self, exit_code: int | None = None) -> None:
        """Close the run after the stream has ended.

        Steps that never produced a result are skipped, then every open
        parent is resolved from its steps, innermost first.
        """
        session = self.session
        if session is None or session.finished:
            return
        session.exit_code = exit_code
        if session.cancelled:
            session.finished = True
            return

        for entity in session.order:
            if entity.is_step and not session.state_of(entity).is_terminal:
                self.request_terminal(entity, RunState.SKIPPED, NOT_EXECUTED_MESSAGE)

        for entity in reversed(session.order):
            if entity.is_step or session.state_of(entity).is_terminal:
                continue
            steps = list(entity.steps())
            notes = [self._unimplemented_note(steps)]
            if exit_code and not any(s.id in session.observed for s in steps):
                notes.append(f"No step results observed (process exit code {exit_code})")
            self.request_terminal(
                entity,
                aggregate_states(session.state_of(s) for s in steps),
                "\n".join(n for n in notes if n) or None,
            )
        session.finished = True

    def _candidates(self) -> list[TestEntity]:
        """Open steps, those of the current scenario first."""
        session = self.session
        assert session is not None
        open_steps = [
            e for e in session.order
            if e.is_step and not session.state_of(e).is_terminal
        ]
        current = session.current_scenario
        if current is None:
            return open_steps
        first = [e for e in open_steps if e.scenario() is current]
        return first + [e for e in open_steps if e.scenario() is not current]

    def _complete_ancestors(self, entity: TestEntity) -> None:
        session = self.session
        assert session is not None
        for ancestor in entity.ancestors():
            if ancestor not in session or session.state_of(ancestor).is_terminal:
                return
            steps = list(ancestor.steps())
            states = [session.state_of(s) for s in steps]
            if not all(s.is_terminal for s in states):
                return
            self.request_terminal(
                ancestor, aggregate_states(states), self._unimplemented_note(steps)
            )

    def _unimplemented_note(self, steps: list[TestEntity]) -> str | None:
        """Name the pending or undefined steps among *steps*, if any."""
        session = self.session
        assert session is not None
        labels = [
            s.label for s in steps
            if session.message_of(s) in (PENDING_MESSAGE, UNDEFINED_MESSAGE)
        ]
        if not labels:
            return None
        return "Pending or undefined steps: " + ", ".join(labels)

    def _set(self, entity: TestEntity, state: RunState) -> None:
        assert self.session is not None
        self.session.states[entity.id] = state


def _outermost(roots: list[TestEntity]) -> list[TestEntity]:
    """Drop roots nested inside another root, keeping order."""
    ids = {r.id for r in roots}
    result: list[TestEntity] = []
    seen: set[str] = set()
    for root in roots:
        if root.id in seen:
            continue
        if any(a.id in ids for a in root.ancestors()):
            continue
        seen.add(root.id)
        result.append(root)
    return result
