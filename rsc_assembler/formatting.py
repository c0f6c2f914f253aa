"""
Output formats for assembled programs.

  bin      one zero-padded 16-digit binary string per word (default)
  hex      one 4-digit hex word per line
  listing  address, binary, hex and source line, for reading
  raw      big-endian 16-bit words, for loading into a ROM image
"""

from __future__ import annotations
import struct
from typing import List, Sequence

from .assembler import AssembledWord
from .instructions import INSTRUCTION_SIZE
from .number_utils import binary_representation, max_uint

__all__ = ['format_words', 'format_listing', 'to_raw_image']


def format_words(words: Sequence[int], fmt: str = 'bin') -> str:
    """Render words one per line in a text format."""
    if fmt == 'bin':
        lines = [binary_representation(word, INSTRUCTION_SIZE) for word in words]
    elif fmt == 'hex':
        digits = INSTRUCTION_SIZE // 4
        lines = [f"{word & max_uint(INSTRUCTION_SIZE):0{digits}X}" for word in words]
    else:
        raise ValueError(f"Unknown text format: {fmt}")
    return '\n'.join(lines)


def format_listing(listing: Sequence[AssembledWord]) -> str:
    """Return a human-readable listing showing address, word and source."""
    lines: List[str] = []
    lines.append(f"{'ADDR':>4}  {'BINARY':<16}  {'HEX':<4}  {'LINE':>4}  SOURCE")
    lines.append("-" * 60)
    for entry in listing:
        lines.append(
            f"{entry.address:4d}  {binary_representation(entry.word, INSTRUCTION_SIZE)}  "
            f"{entry.word:04X}  {entry.source.line_num:4d}  {entry.source.text}")
    return '\n'.join(lines)


def to_raw_image(words: Sequence[int]) -> bytes:
    """Pack words as big-endian unsigned 16-bit integers."""
    return struct.pack(f">{len(words)}H", *words)
