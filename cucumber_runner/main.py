"""Entry point for the Cucumber runner.

Parses a feature file, runs the selected feature, scenario or example row
through Maven, and reflects step results live on the console as they
stream out of the process.  Optionally writes JSON and YAML reports.
"""

from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
import threading
from pathlib import Path

from cucumber_runner.discovery.feature_parser import parse_feature_file, select_entities
from cucumber_runner.execution.command import (
    build_maven_args,
    feature_selector,
    find_cucumber_test_class,
    find_maven_module,
    to_classpath_feature,
)
from cucumber_runner.execution.pipeline import OutputPipeline
from cucumber_runner.execution.process import run_process
from cucumber_runner.lifecycle.config import DEFAULT_CONFIG_NAME, RunnerConfig
from cucumber_runner.lifecycle.synchronizer import RunSession, StatusSynchronizer
from cucumber_runner.reporting.console import ConsoleListener
from cucumber_runner.reporting.reporter import Reporter, run_passed


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Cucumber runner - runs features through Maven with live step results"
    )
    parser.add_argument(
        "feature",
        type=Path,
        help="Path to the .feature file",
    )
    parser.add_argument(
        "--line",
        type=int,
        default=None,
        help="Line of the scenario (or example row) to run",
    )
    parser.add_argument(
        "--example-line",
        type=int,
        default=None,
        help="Line of the example row within the outline given by --line",
    )
    parser.add_argument(
        "--workspace-root",
        type=Path,
        default=None,
        help="Workspace root (default: current directory)",
    )
    parser.add_argument(
        "--config-file",
        type=Path,
        default=None,
        help=f"Path to the runner config file (default: <workspace>/{DEFAULT_CONFIG_NAME})",
    )
    parser.add_argument(
        "--test-class",
        type=str,
        default=None,
        help="Test class passed as -Dtest (overrides config)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Path to write the JSON report file",
    )
    parser.add_argument(
        "--yaml-output",
        type=Path,
        default=None,
        help="Path to write the YAML report file",
    )
    parser.add_argument(
        "--show-output",
        action="store_true",
        default=False,
        help="Echo the raw process output to stderr",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def _print_summary(session: RunSession) -> None:
    counts = session.counts()
    parts = [f"{state}: {n}" for state, n in sorted(counts.items())]
    print(f"Entities ({len(session.order)}): {', '.join(parts)}", file=sys.stderr)
    if session.unmatched:
        print(
            f"Unmatched step results: {len(session.unmatched)}",
            file=sys.stderr,
        )


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Returns:
        0 if every selected entity passed or was skipped, 1 on failures or
        cancellation, 2 on setup errors.
    """
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    workspace = (args.workspace_root or Path.cwd()).resolve()
    config = RunnerConfig(args.config_file or workspace / DEFAULT_CONFIG_NAME)

    feature_path = args.feature.resolve()
    feature = parse_feature_file(feature_path)
    if feature is None:
        print(f"Error: no feature found in {args.feature}", file=sys.stderr)
        return 2
    roots = select_entities(feature, args.line, args.example_line)
    if not roots:
        print(
            f"Error: no scenario or example at line {args.example_line or args.line}",
            file=sys.stderr,
        )
        return 2

    module = find_maven_module(feature_path, workspace)
    relative = os.path.relpath(feature_path, workspace)
    selector = feature_selector(
        to_classpath_feature(relative, module.module_relative_path),
        args.line,
        args.example_line,
    )
    test_class = args.test_class or config.test_class
    if not test_class:
        test_class = find_cucumber_test_class(module.module_path)
        if test_class:
            print(f"Detected Cucumber test class: {test_class}", file=sys.stderr)
    try:
        command = build_maven_args(config, selector, module, test_class)
        env = config.environment_variables
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    listener = ConsoleListener(show_steps=config.show_step_results)
    synchronizer = StatusSynchronizer(listener, config.collapse_threshold)
    echo = (lambda line: print(line, file=sys.stderr)) if args.show_output else None
    pipeline = OutputPipeline(synchronizer, roots, on_line=echo)

    cancel_requested = threading.Event()

    def _on_sigint(signum: int, frame: object) -> None:
        cancel_requested.set()

    def _on_chunk(chunk: bytes) -> None:
        if cancel_requested.is_set():
            pipeline.cancel()
        pipeline.feed(chunk)

    previous = signal.signal(signal.SIGINT, _on_sigint)
    try:
        exit_code = run_process(
            command,
            module.workspace_root,
            _on_chunk,
            env=env,
            should_cancel=cancel_requested.is_set,
        )
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        pipeline.cancel()
        pipeline.end()
        return 2
    finally:
        signal.signal(signal.SIGINT, previous)

    if cancel_requested.is_set():
        pipeline.cancel()
    session = pipeline.end(exit_code)

    reporter = Reporter(session, pipeline.summary)
    if args.output:
        reporter.write_report(args.output)
        print(f"Report written to {args.output}", file=sys.stderr)
    if args.yaml_output:
        reporter.write_yaml(args.yaml_output)
        print(f"Report written to {args.yaml_output}", file=sys.stderr)

    _print_summary(session)
    if session.cancelled:
        return 1
    return 0 if run_passed(session) else 1


if __name__ == "__main__":
    sys.exit(main())
