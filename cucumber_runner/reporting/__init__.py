"""Run reporting: JSON/YAML reports and console rendering."""

from cucumber_runner.reporting.console import ConsoleListener
from cucumber_runner.reporting.reporter import Reporter, run_passed

__all__ = ["ConsoleListener", "Reporter", "run_passed"]
