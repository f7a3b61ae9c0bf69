"""Step result values produced by the line parser."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class StepStatus(str, enum.Enum):
    """Outcome of a single step as reported by Cucumber."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    PENDING = "pending"
    UNDEFINED = "undefined"


@dataclass(frozen=True)
class StepResultEvent:
    """A finalized step result.

    ``text`` is the free text after the keyword and may still carry tag
    tokens such as ``[TAG123]``; the identity matcher deals with those.
    """

    keyword: str
    text: str
    status: StepStatus
    error_message: str | None = None

    @property
    def label(self) -> str:
        """Keyword and text joined the way step entities are labelled."""
        return f"{self.keyword} {self.text}".strip()


@dataclass
class PendingStep:
    """Step observed in the stream but not yet finalized."""

    keyword: str
    text: str
    status: StepStatus
    error_lines: list[str] = field(default_factory=list)
    capturing_error: bool = False

    def to_event(self) -> StepResultEvent:
        message = "\n".join(self.error_lines) if self.error_lines else None
        return StepResultEvent(
            keyword=self.keyword,
            text=self.text,
            status=self.status,
            error_message=message,
        )
