"""Test process execution: command construction, streaming, line framing, pipeline."""

from cucumber_runner.execution.command import (
    ModuleInfo,
    build_maven_args,
    feature_selector,
    find_cucumber_test_class,
    find_maven_module,
    to_classpath_feature,
)
from cucumber_runner.execution.framer import StreamFramer
from cucumber_runner.execution.pipeline import OutputPipeline
from cucumber_runner.execution.process import run_process

__all__ = [
    "ModuleInfo",
    "OutputPipeline",
    "StreamFramer",
    "build_maven_args",
    "feature_selector",
    "find_cucumber_test_class",
    "find_maven_module",
    "run_process",
    "to_classpath_feature",
]
