"""Feature file discovery.

Builds the static entity tree from ``.feature`` files: one FEATURE per
file, SCENARIO children, and STEP leaves.  Background steps are copied
into every scenario because Cucumber reports them again for each one;
a rule's background applies only to the scenarios of that rule.
Scenario outlines get one EXAMPLE child per examples-table row, whose
steps carry the row's values substituted for ``<placeholders>``, which
is how Cucumber prints them.

Identifiers are derived from source locations:

* feature: normalized file path
* scenario: ``<feature>:scenario:<line>``
* example row: ``<scenario>:example:<line>``
* step: ``<parent>:step:<line>``
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from cucumber_runner.analysis.line_parser import STEP_KEYWORDS
from cucumber_runner.lifecycle.entities import EntityKind, TestEntity

# Build output and VCS directories never hold sources of truth
EXCLUDED_DIRS = frozenset({"target", "build", "out", "dist", "node_modules", ".git"})

_STEP_RE = re.compile(r"^(?P<keyword>" + "|".join(STEP_KEYWORDS) + r")\s+(?P<text>.+)$")
_PLACEHOLDER_RE = re.compile(r"<([^<>]+)>")


@dataclass
class _StepSource:
    keyword: str
    text: str
    line: int


def parse_feature(text: str, path: str | Path) -> TestEntity | None:
    """Parse feature file content into an entity tree.

    Args:
        text: File content.
        path: File path, used for identifiers.

    Returns:
        The FEATURE entity, or None if the text has no ``Feature:`` header.
    """
    path = os.path.normpath(str(path))
    feature: TestEntity | None = None
    background: list[_StepSource] = []
    # Feature-level background steps, captured when the first rule opens
    feature_background: list[_StepSource] | None = None
    scenario: TestEntity | None = None
    outline_steps: list[_StepSource] | None = None
    header: list[str] | None = None
    in_background = False
    in_examples = False
    in_docstring = False

    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if line.startswith('"""') or line.startswith("```"):
            in_docstring = not in_docstring
            continue
        if in_docstring or not line or line.startswith("#") or line.startswith("@"):
            continue

        if line.startswith("Feature:"):
            feature = TestEntity(
                id=path,
                kind=EntityKind.FEATURE,
                text=line[len("Feature:"):].strip(),
                line=number,
                path=path,
            )
            continue
        if feature is None:
            continue

        if line.startswith("Rule:"):
            if feature_background is None:
                feature_background = list(background)
            background = list(feature_background)
            in_background, in_examples = False, False
            scenario, outline_steps = None, None
        elif line.startswith("Background:"):
            in_background, in_examples = True, False
            scenario, outline_steps = None, None
        elif line.startswith(("Scenario Outline:", "Scenario Template:")):
            name = line.split(":", 1)[1].strip()
            scenario = feature.add_child(TestEntity(
                id=f"{path}:scenario:{number}",
                kind=EntityKind.SCENARIO,
                text=f"{name} (Outline)",
                line=number,
                path=path,
            ))
            outline_steps = list(background)
            in_background, in_examples = False, False
        elif line.startswith(("Scenario:", "Example:")):
            scenario = feature.add_child(TestEntity(
                id=f"{path}:scenario:{number}",
                kind=EntityKind.SCENARIO,
                text=line.split(":", 1)[1].strip(),
                line=number,
                path=path,
            ))
            outline_steps = None
            in_background, in_examples = False, False
            for step in background:
                _add_step(scenario, step)
        elif line.startswith(("Examples:", "Scenarios:")):
            in_examples = outline_steps is not None
            header = None
        elif line.startswith("|"):
            if in_examples and scenario is not None and outline_steps is not None:
                cells = _cells(line)
                if header is None:
                    header = cells
                else:
                    _add_example(scenario, outline_steps, header, cells, line, number)
        else:
            match = _STEP_RE.match(line)
            if match is None:
                continue
            step = _StepSource(match.group("keyword"), match.group("text").strip(), number)
            if in_background:
                background.append(step)
            elif outline_steps is not None:
                outline_steps.append(step)
            elif scenario is not None:
                _add_step(scenario, step)

    return feature


def _cells(row: str) -> list[str]:
    return [c.strip() for c in row.strip().strip("|").split("|")]


def _add_step(parent: TestEntity, step: _StepSource, text: str | None = None) -> None:
    parent.add_child(TestEntity(
        id=f"{parent.id}:step:{step.line}",
        kind=EntityKind.STEP,
        text=step.text if text is None else text,
        keyword=step.keyword,
        line=step.line,
        path=parent.path,
    ))


def _add_example(
    scenario: TestEntity,
    steps: list[_StepSource],
    header: list[str],
    cells: list[str],
    row: str,
    number: int,
) -> None:
    values = dict(zip(header, cells))
    example = scenario.add_child(TestEntity(
        id=f"{scenario.id}:example:{number}",
        kind=EntityKind.EXAMPLE,
        text=f"Example: {row}",
        line=number,
        path=scenario.path,
    ))
    for step in steps:
        text = _PLACEHOLDER_RE.sub(lambda m: values.get(m.group(1), m.group(0)), step.text)
        _add_step(example, step, text)


def parse_feature_file(path: Path) -> TestEntity | None:
    """Read and parse one feature file; unreadable files yield None."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    return parse_feature(text, path)


def discover_features(root: Path) -> list[TestEntity]:
    """Parse every ``*.feature`` file below *root*, skipping build directories."""
    features: list[TestEntity] = []
    for path in sorted(root.rglob("*.feature")):
        if EXCLUDED_DIRS.intersection(path.relative_to(root).parts[:-1]):
            continue
        feature = parse_feature_file(path)
        if feature is not None:
            features.append(feature)
    return features


def select_entities(
    feature: TestEntity,
    line: int | None = None,
    example_line: int | None = None,
) -> list[TestEntity]:
    """Pick the run roots for a feature and optional line selectors.

    Returns:
        ``[feature]`` without *line*; otherwise the scenario (or example
        row) declared at that line, or an empty list if nothing is there.
    """
    if not line:
        return [feature]
    for scenario in feature.children:
        if example_line:
            if scenario.line != line:
                continue
            return [e for e in scenario.children if e.line == example_line][:1]
        if scenario.line == line:
            return [scenario]
        for example in scenario.children:
            if example.kind is EntityKind.EXAMPLE and example.line == line:
                return [example]
    return []
