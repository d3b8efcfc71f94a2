"""Incremental line splitting over a chunked byte stream."""

from __future__ import annotations

import codecs


class LineBuffer:
    """Turn arbitrarily split byte chunks into complete text lines.

    Decoding is stateful, so a multi-byte character split across two chunks
    is reassembled. Lines end at ``\\n``; one trailing ``\\r`` is stripped.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Text received after the last newline."""
        return self._buffer

    def feed(self, chunk: bytes) -> list[str]:
        """Add a chunk and return every line it completed."""
        self._buffer += self._decoder.decode(chunk)
        return self._drain()

    def close(self) -> list[str]:
        """Flush the decoder and return the unterminated tail, if any."""
        self._buffer += self._decoder.decode(b"", final=True)
        lines = self._drain()
        if self._buffer:
            lines.append(_strip_cr(self._buffer))
            self._buffer = ""
        return lines

    def _drain(self) -> list[str]:
        parts = self._buffer.split("\n")
        self._buffer = parts.pop()
        return [_strip_cr(part) for part in parts]


def _strip_cr(line: str) -> str:
    return line[:-1] if line.endswith("\r") else line
