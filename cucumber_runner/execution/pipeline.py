"""Output pipeline: framer -> line parser -> status synchronizer.

One pipeline serves one run.  Everything runs synchronously inside
``feed``; each transition has reached the listener before ``feed``
returns.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from cucumber_runner.analysis.line_parser import LineParser
from cucumber_runner.analysis.summary import RunSummary
from cucumber_runner.execution.framer import StreamFramer
from cucumber_runner.lifecycle.entities import TestEntity
from cucumber_runner.lifecycle.synchronizer import RunSession, StatusSynchronizer

logger = logging.getLogger(__name__)


class OutputPipeline:
    """Feeds process output chunks into the status synchronizer.

    Args:
        synchronizer: Owner of the run's entity states.
        roots: Entities requested for this run.
        on_line: Optional callback receiving every complete raw line
            (for echoing output to a console or log).
    """

    def __init__(
        self,
        synchronizer: StatusSynchronizer,
        roots: Iterable[TestEntity],
        on_line: Callable[[str], None] | None = None,
    ) -> None:
        self.synchronizer = synchronizer
        self.framer = StreamFramer()
        self.parser = LineParser()
        self.summary = RunSummary()
        self.on_line = on_line
        self.session: RunSession = synchronizer.start_run(roots)
        self._ended = False

    @property
    def cancelled(self) -> bool:
        return self.session.cancelled

    def feed(self, chunk: bytes | str) -> None:
        """Process one chunk of output."""
        if self._ended:
            return
        for line in self.framer.feed(chunk):
            if self.cancelled:
                return
            self._process_line(line)

    def end(self, exit_code: int | None = None) -> RunSession:
        """Handle end of stream: flush partial line and pending step, close the run."""
        if not self._ended:
            self._ended = True
            for line in self.framer.close():
                if self.cancelled:
                    break
                self._process_line(line)
            event = self.parser.finalize()
            if event is not None and not self.cancelled:
                self.synchronizer.apply(event)
            self.synchronizer.finish(exit_code)
            logger.debug(
                "run ended: exit_code=%s cancelled=%s", exit_code, self.cancelled
            )
        return self.session

    def cancel(self) -> None:
        """Cancel the run; results already reached are kept."""
        self.parser.reset()
        self.synchronizer.cancel()

    def _process_line(self, line: str) -> None:
        if self.on_line is not None:
            self.on_line(line)
        self.summary.consume(line)
        for event in self.parser.consume(line):
            self.synchronizer.apply(event)
