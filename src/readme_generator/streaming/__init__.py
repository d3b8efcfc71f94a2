"""Streaming protocol helpers."""

from readme_generator.streaming.lines import LineBuffer
from readme_generator.streaming.reframer import (
    LineKind,
    ReframerState,
    StreamReframer,
    classify_line,
)

__all__ = ["LineBuffer", "LineKind", "ReframerState", "StreamReframer", "classify_line"]
