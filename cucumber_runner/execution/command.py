"""Maven command construction for running Cucumber features."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from cucumber_runner.lifecycle.config import RunnerConfig

# Source roots stripped when mapping a feature file onto the classpath
SOURCE_ROOTS = (
    "src/test/resources/",
    "src/main/resources/",
    "src/test/java/",
    "src/main/java/",
)


@dataclass
class ModuleInfo:
    """Maven module containing a feature file."""

    module_path: Path
    module_relative_path: str
    workspace_root: Path


def find_maven_module(feature_path: Path, workspace_root: Path) -> ModuleInfo:
    """Locate the nearest directory with a pom.xml above *feature_path*.

    Falls back to the workspace root when no module directory is found
    below it.
    """
    workspace_root = workspace_root.resolve()
    current = feature_path.resolve().parent
    while True:
        if (current / "pom.xml").exists():
            break
        if current == workspace_root or current.parent == current:
            current = workspace_root
            break
        current = current.parent

    try:
        rel = current.relative_to(workspace_root).as_posix()
    except ValueError:
        current, rel = workspace_root, "."
    return ModuleInfo(
        module_path=current,
        module_relative_path=rel or ".",
        workspace_root=workspace_root,
    )


# Markers of a JUnit class that launches Cucumber
RUNNER_MARKERS = ("@RunWith", "@CucumberOptions", "io.cucumber")


def find_cucumber_test_class(module_path: Path) -> str | None:
    """Find the Cucumber runner class under *module_path*'s ``src/test/java``.

    Only ``*Test.java`` and ``*Runner.java`` files are considered; the first
    one (in path order) that mentions a Cucumber marker wins.

    Returns:
        The simple class name, or None when no runner class exists.
    """
    test_dir = module_path / "src" / "test" / "java"
    if not test_dir.is_dir():
        return None
    for path in sorted(test_dir.rglob("*.java")):
        if not path.name.endswith(("Test.java", "Runner.java")):
            continue
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            continue
        if any(marker in content for marker in RUNNER_MARKERS):
            return path.stem
    return None


def to_classpath_feature(feature_relative_path: str, module_relative_path: str) -> str:
    """Convert a workspace-relative feature path to a ``classpath:`` URI.

    Example: ``src/test/resources/feature/login.feature`` becomes
    ``classpath:feature/login.feature``.
    """
    path = feature_relative_path.replace("\\", "/")
    module = module_relative_path.replace("\\", "/")
    if module not in (".", "") and path.startswith(module + "/"):
        path = path[len(module) + 1:]
    for prefix in SOURCE_ROOTS:
        if path.startswith(prefix):
            return "classpath:" + path[len(prefix):]
    return "classpath:" + path


def feature_selector(
    feature: str,
    line: int | None = None,
    example_line: int | None = None,
) -> str:
    """Append a line selector; an example row line wins over its scenario line."""
    if line and line > 0:
        if example_line and example_line > 0:
            return f"{feature}:{example_line}"
        return f"{feature}:{line}"
    return feature


def build_maven_args(
    config: RunnerConfig,
    feature: str,
    module: ModuleInfo,
    test_class: str | None = None,
) -> list[str]:
    """Build the full Maven command line.

    Args:
        config: Runner configuration (profile, tags, extra arguments).
        feature: Value for ``-Dcucumber.features`` including any line selector.
        module: Module containing the feature file.
        test_class: Test class for ``-Dtest``; defaults to the configured one.
    """
    args = [config.maven_executable, "test"]
    if config.maven_profile:
        args.append(f"-P{config.maven_profile}")
    args.append(f"-Dcucumber.features={feature}")
    if config.cucumber_tags:
        args.append(f"-Dcucumber.filter.tags={config.cucumber_tags}")
    test_class = test_class or config.test_class
    if test_class:
        args.append(f"-Dtest={test_class}")
    if module.module_relative_path != ".":
        args.extend(["-pl", module.module_relative_path])
    args.extend(config.maven_args)
    return args
