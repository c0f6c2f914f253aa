"""
Line source and line cleaning.

Lines keep their 1-based position in the original file so that every
error can point at the line the user actually wrote, even after comments
and blank lines have been dropped.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Union

__all__ = ['COMMENT_MARKERS', 'SourceLine', 'strip_comment', 'clean_lines', 'read_lines']

logger = logging.getLogger(__name__)

COMMENT_MARKERS = ('#', '//', '--')


@dataclass(frozen=True)
class SourceLine:
    """A cleaned source line and where it came from."""
    line_num: int
    text: str

    def __str__(self) -> str:
        return self.text


def strip_comment(line: str) -> str:
    """Cut the line at the first occurrence of any comment marker."""
    cut = len(line)
    for marker in COMMENT_MARKERS:
        pos = line.find(marker)
        if 0 <= pos < cut:
            cut = pos
    return line[:cut]


def clean_lines(lines: Iterable[str]) -> List[SourceLine]:
    """Trim, strip comments and drop lines left empty."""
    cleaned = []
    for line_num, line in enumerate(lines, 1):
        text = strip_comment(line.strip()).strip()
        if text:
            cleaned.append(SourceLine(line_num, text))
    return cleaned


def read_lines(path: Union[str, Path]) -> List[str]:
    """Read a program file into a list of lines (line terminators removed)."""
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        lines = f.read().splitlines()
    logger.debug(f"Read {len(lines)} lines from {path}")
    return lines
