"""Incremental parser for Cucumber console output.

Consumes one complete line at a time and emits a ``StepResultEvent`` each
time a step is finalized.  A step is held as pending until something
supersedes it (the next step line, a blank line, a scenario/feature
header, a summary line or build-tool output) so that the stack trace of
a failed step can be collected underneath it.

Unrecognized lines are skipped; the parser never raises on input shape.
"""

from __future__ import annotations

import logging
import re

from cucumber_runner.analysis.events import PendingStep, StepResultEvent, StepStatus
from cucumber_runner.analysis.normalizer import classify_color, classify_symbols, normalize

logger = logging.getLogger(__name__)

STEP_KEYWORDS = ("Given", "When", "Then", "And", "But")

# [glyphs] [tags] Keyword text [# location]
# A location comment is either padded away from the text or looks like a
# glue method reference; a lone "#" inside step text is kept.
_STEP_RE = re.compile(
    r"^\s*(?P<glyphs>[^\sA-Za-z0-9\[|]*)\s*"
    r"(?P<tags>(?:\[[A-Za-z0-9]+\]\s*)*)"
    r"(?P<keyword>" + "|".join(STEP_KEYWORDS) + r")\s+"
    r"(?P<text>\S.*?)"
    r"(?:\s{2,}#.*|\s+#\s*[\w$.<>]+\(.*\))?\s*$"
)

_ERROR_RE = re.compile(
    r"^\s*(?:"
    r"at\s+[\w$.<>/\\-]+\s*\("
    r"|at\s+\S+:\d+"
    r"|Caused by:"
    r"|\.\.\.\s+\d+\s+more"
    r"|Traceback \(most recent call last\)"
    r"|File \"[^\"]+\", line \d+"
    r"|(?:[A-Za-z_$][\w$]*\.)*[A-Za-z_$][\w$]*(?:Exception|Error|Failure|Throwable)\b"
    r")"
)

_BOUNDARY_RE = re.compile(
    r"^\s*(?:"
    r"(?:Feature|Rule|Background|Scenario(?: Outline| Template)?|Examples?):"
    r"|\d+\s+(?:Scenarios?|Steps?)\s*\("
    r"|\[(?:INFO|WARNING|WARN|ERROR)\]"
    r"|Tests run:"
    r")"
)

# Application logging interleaved with test output
_APP_LOG_RE = re.compile(r"^\s*\[?\d{4}-\d{2}-\d{2}[ T]\d{2}:\d{2}:\d{2}")


def is_error_line(line: str) -> bool:
    """True if the line looks like an exception header or stack frame."""
    return _ERROR_RE.match(line) is not None


def is_boundary_line(line: str) -> bool:
    """True if the line ends the current step block."""
    return not line.strip() or _BOUNDARY_RE.match(line) is not None


def is_app_log_line(line: str) -> bool:
    """True for ``YYYY-MM-DD HH:MM:SS``-prefixed application log lines."""
    return _APP_LOG_RE.match(line) is not None


class LineParser:
    """Turns complete output lines into finalized step results.

    At most one step is pending at any time.  Callers must invoke
    :meth:`finalize` when the stream ends so the last step is not lost.
    """

    def __init__(self) -> None:
        self._pending: PendingStep | None = None

    @property
    def pending(self) -> PendingStep | None:
        return self._pending

    @property
    def capturing_error(self) -> bool:
        return self._pending is not None and self._pending.capturing_error

    def consume(self, raw_line: str) -> list[StepResultEvent]:
        """Feed one line.

        Args:
            raw_line: A complete line, without its terminator, possibly
                carrying ANSI escapes.

        Returns:
            Events finalized by this line, in stream order.  Usually empty
            or one event; two when a new skipped step supersedes a pending
            one.
        """
        line = normalize(raw_line)

        if is_app_log_line(line):
            return []

        match = _STEP_RE.match(line)
        if match is not None:
            return self._start_step(match, raw_line)

        if is_boundary_line(line):
            event = self.finalize()
            return [event] if event is not None else []

        pending = self._pending
        if pending is not None and pending.status is StepStatus.FAILED:
            continuation = pending.capturing_error and line[:1].isspace()
            if is_error_line(line) or continuation:
                pending.error_lines.append(line)
                pending.capturing_error = True
        return []

    def _start_step(self, match: re.Match[str], raw_line: str) -> list[StepResultEvent]:
        events: list[StepResultEvent] = []
        previous = self.finalize()
        if previous is not None:
            events.append(previous)

        status = (
            classify_symbols(match.group("glyphs"))
            or classify_color(raw_line)
            or StepStatus.UNDEFINED
        )
        text = match.group("text")
        tags = match.group("tags").strip()
        if tags:
            text = f"{tags} {text}"
        self._pending = PendingStep(
            keyword=match.group("keyword"),
            text=text,
            status=status,
        )

        # Skipped steps never carry error context
        if status is StepStatus.SKIPPED:
            skipped = self.finalize()
            if skipped is not None:
                events.append(skipped)
        return events

    def finalize(self) -> StepResultEvent | None:
        """Flush the pending step, if any, as an event."""
        if self._pending is None:
            return None
        event = self._pending.to_event()
        self._pending = None
        logger.debug("step finalized: %s [%s]", event.label, event.status.value)
        return event

    def reset(self) -> None:
        """Drop any pending state without emitting an event."""
        self._pending = None
