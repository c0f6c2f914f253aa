"""
Label resolution (first pass).

Walks the cleaned lines once, binding every `.label` to the address of
the next instruction and collecting the instruction lines in address
order. Because the whole table exists before any operand is validated,
jumps may refer to labels defined further down the file.

  .loop ADD r1 r1 r0     .loop → address of this ADD
  .end                   .end  → address of whatever instruction follows
"""

from __future__ import annotations
import logging
from types import MappingProxyType
from typing import Iterable, List, Mapping, Tuple

from .errors import DuplicateLabelError, LabelError
from .source import SourceLine
from .token_types import LABEL_MARKER

__all__ = ['resolve_labels']

logger = logging.getLogger(__name__)


def resolve_labels(lines: Iterable[SourceLine]) -> Tuple[Mapping[str, int], Tuple[SourceLine, ...]]:
    """Return (label table, instruction lines); index in the latter is the address."""
    labels = {}
    instructions: List[SourceLine] = []

    for line in lines:
        if not line.text.startswith(LABEL_MARKER):
            instructions.append(line)
            continue

        parts = line.text[len(LABEL_MARKER):].split(None, 1)
        if not parts:
            raise LabelError("Label definition is missing a name.", line.line_num, line.text)
        name = parts[0]
        if name in labels:
            raise DuplicateLabelError(name, line.line_num, line.text)
        labels[name] = len(instructions)
        logger.debug(f"Label '{name}' -> {len(instructions)} (line {line.line_num})")

        # Label and instruction may share one line
        if len(parts) > 1:
            instructions.append(SourceLine(line.line_num, parts[1].strip()))

    return MappingProxyType(labels), tuple(instructions)
