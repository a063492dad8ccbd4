"""Bounded per-job log with stable sequence numbers."""

import re
from collections import deque
from itertools import islice
from dataclasses import dataclass
from typing import Deque, List, Tuple

_LINE_BREAK = re.compile(r"\r\n|\r|\n")

DEFAULT_MAX_LINES = 2000


@dataclass(frozen=True)
class LogLine:
    seq: int
    tag: str
    text: str

    def render(self) -> str:
        return f"[{self.tag}] {self.text}"


class LogBuffer:
    """Append-only log that keeps the newest ``max_lines`` entries.

    Every line gets the next value of a counter that is never reset, so a
    cursor handed out before older lines were evicted still points at the
    right place afterwards.
    """

    def __init__(self, max_lines: int = DEFAULT_MAX_LINES):
        if max_lines < 1:
            raise ValueError("max_lines must be >= 1")
        self._lines: Deque[LogLine] = deque(maxlen=max_lines)
        self._next_seq = 0

    @property
    def next_seq(self) -> int:
        return self._next_seq

    @property
    def max_lines(self) -> int:
        return self._lines.maxlen

    def __len__(self) -> int:
        return len(self._lines)

    def append(self, tag: str, text: str) -> None:
        """Split ``text`` into lines and append each non-empty one under ``tag``."""
        for line in _LINE_BREAK.split(text):
            if not line:
                continue
            self._lines.append(LogLine(self._next_seq, tag, line))
            self._next_seq += 1

    def read_from(self, cursor: int) -> Tuple[List[str], int]:
        """Return rendered lines with ``seq >= cursor`` and the cursor for the next read.

        A cursor older than the oldest retained line starts at the oldest
        retained line. If nothing is at or past the cursor it is returned as is.
        """
        cursor = max(0, cursor)
        if not self._lines or cursor >= self._next_seq:
            return [], cursor

        # seqs are contiguous inside the deque, so the start offset is direct
        oldest = self._lines[0].seq
        start = max(0, cursor - oldest)
        selected = list(islice(self._lines, start, None))
        return [line.render() for line in selected], selected[-1].seq + 1
