"""Output analysis: ANSI/glyph normalization, incremental line parsing, run summaries."""

from cucumber_runner.analysis.events import PendingStep, StepResultEvent, StepStatus
from cucumber_runner.analysis.line_parser import LineParser
from cucumber_runner.analysis.normalizer import (
    classify_color,
    classify_symbol,
    classify_symbols,
    normalize,
)
from cucumber_runner.analysis.summary import RunSummary

__all__ = [
    "LineParser",
    "PendingStep",
    "RunSummary",
    "StepResultEvent",
    "StepStatus",
    "classify_color",
    "classify_symbol",
    "classify_symbols",
    "normalize",
]
