"""Live Cucumber runner: turns streaming Cucumber output into test-tree state."""

__version__ = "0.1.0"
