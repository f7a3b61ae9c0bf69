"""ANSI stripping and status glyph recognition.

Cucumber formatters differ between versions and platforms in the glyphs
they print in front of a step (``✔`` vs ``✓`` vs ``√`` on Windows code
pages, and so on).  Everything here is a pure function; the line parser
calls :func:`normalize` before any pattern matching.
"""

from __future__ import annotations

import re

from cucumber_runner.analysis.events import StepStatus

# CSI sequences: SGR (``ESC [ ... m``) plus cursor/erase controls
_ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")
_SGR_RE = re.compile(r"\x1b\[([0-9;]*)m")

PASSED_GLYPHS = frozenset("✔✓√✅")
FAILED_GLYPHS = frozenset("✘✗✖×❌✕")
SKIPPED_GLYPHS = frozenset("↷⊝○-−")

# Highest priority first: a failure signal must never be downgraded
_PRIORITY = (
    (StepStatus.FAILED, FAILED_GLYPHS),
    (StepStatus.SKIPPED, SKIPPED_GLYPHS),
    (StepStatus.PASSED, PASSED_GLYPHS),
)

_COLOR_STATUS = {
    32: StepStatus.PASSED,
    92: StepStatus.PASSED,
    31: StepStatus.FAILED,
    91: StepStatus.FAILED,
    36: StepStatus.SKIPPED,
    96: StepStatus.SKIPPED,
    33: StepStatus.PENDING,
    93: StepStatus.PENDING,
}


def normalize(line: str) -> str:
    """Remove ANSI control sequences and a trailing carriage return."""
    return _ANSI_RE.sub("", line).rstrip("\r")


def classify_symbol(token: str) -> StepStatus | None:
    """Map a single status glyph to passed, failed or skipped.

    Args:
        token: One glyph, optionally surrounded by whitespace.

    Returns:
        The canonical status, or None for anything unrecognized.
    """
    token = token.strip()
    if len(token) != 1:
        return None
    for status, glyphs in _PRIORITY:
        if token in glyphs:
            return status
    return None


def classify_symbols(prefix: str) -> StepStatus | None:
    """Classify every glyph in *prefix*, keeping the highest-priority one.

    Malformed output occasionally carries more than one glyph; the result
    is decided by priority failed > skipped > passed, never by position.
    """
    found = {classify_symbol(ch) for ch in prefix}
    for status, _ in _PRIORITY:
        if status in found:
            return status
    return None


def classify_color(raw_line: str) -> StepStatus | None:
    """Infer a status from the first foreground colour of an un-normalized line.

    The JVM ``pretty`` plugin prints no glyphs and signals status by colour
    alone, so this is only consulted when no glyph was found.
    """
    for match in _SGR_RE.finditer(raw_line):
        for code in match.group(1).split(";"):
            if code.isdigit() and int(code) in _COLOR_STATUS:
                return _COLOR_STATUS[int(code)]
    return None
