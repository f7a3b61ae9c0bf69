"""Line framing for chunked process output."""

from __future__ import annotations

import codecs


class StreamFramer:
    """Splits arbitrary chunks into complete lines.

    A trailing partial line is buffered until the next chunk (or
    :meth:`close`) completes it.  Byte chunks go through an incremental
    UTF-8 decoder so a multi-byte glyph split across two chunks is
    reassembled rather than replaced.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""
        self._closed = False

    def feed(self, chunk: bytes | str) -> list[str]:
        """Add a chunk and return the lines it completed, without terminators."""
        if self._closed:
            raise ValueError("feed() called after close()")
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        self._buffer += chunk
        if "\n" not in self._buffer:
            return []
        *complete, self._buffer = self._buffer.split("\n")
        return [line.rstrip("\r") for line in complete]

    def close(self) -> list[str]:
        """Flush the decoder and any unterminated final line."""
        if self._closed:
            return []
        self._closed = True
        self._buffer += self._decoder.decode(b"", final=True)
        rest, self._buffer = self._buffer, ""
        if not rest:
            return []
        return [line.rstrip("\r") for line in rest.split("\n")]
