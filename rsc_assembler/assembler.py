"""
RSC Two-Pass Assembler.

Assembles RSC assembly text into a list of 16-bit machine words, one per
instruction, where the index of a word is its address.

Source syntax:
  ADD r3 r1 r2          mnemonic followed by whitespace-separated operands
  .loop                 label definition (binds to the next instruction)
  .loop DEC r1          label and instruction on the same line
  BRC nz .loop          label reference
  # comment             also // and --, anywhere on the line

How the two passes work:
  Pass 1: Clean the lines, then bind every label to the address of the
          instruction that follows it (see labels.py).
  Pass 2: For each instruction line, look up the mnemonic, validate the
          operands against the now-complete label table and pack the word.

The run is all-or-nothing: the first error aborts assembly and no partial
output is returned.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Mapping, Tuple, Union

from .errors import ProgramTooLargeError, UnknownMnemonicError
from .instructions import INSTRUCTION_SIZE, lookup
from .labels import resolve_labels
from .number_utils import binary_representation
from .source import SourceLine, clean_lines, read_lines
from .token_types import ADDRESS_SIZE

__all__ = [
    'MAX_PROGRAM_SIZE', 'AssembledWord', 'Assembler',
    'assemble_lines', 'assemble_source', 'assemble_file',
]

logger = logging.getLogger(__name__)

MAX_PROGRAM_SIZE = 1 << ADDRESS_SIZE


@dataclass(frozen=True)
class AssembledWord:
    """One machine word together with the source line it came from."""
    address: int
    word: int
    source: SourceLine


class Assembler:
    """Two-pass RSC assembler.

    Usage:
        asm = Assembler()
        words = asm.assemble(lines)
        asm.labels, asm.listing
    """

    def __init__(self):
        self.labels: Mapping[str, int] = {}       # Label table: name -> address
        self.words: List[int] = []                # Final machine words
        self.listing: List[AssembledWord] = []    # Words with their source lines

    def assemble(self, lines: Iterable[str]) -> List[int]:
        """Assemble raw source lines into machine words."""
        self.labels = {}
        self.words = []
        self.listing = []

        cleaned = clean_lines(lines)
        logger.debug(f"{len(cleaned)} non-empty lines after cleaning")

        # Pass 1: label table + flat instruction list
        labels, instructions = resolve_labels(cleaned)
        logger.debug(f"Resolved {len(labels)} labels, {len(instructions)} instructions")

        if len(instructions) > MAX_PROGRAM_SIZE:
            # Report the first instruction that has no address
            overflow = instructions[MAX_PROGRAM_SIZE]
            raise ProgramTooLargeError(len(instructions), MAX_PROGRAM_SIZE,
                                       overflow.line_num, overflow.text)

        # Pass 2: encode
        listing = [self._assemble_line(address, line, labels)
                   for address, line in enumerate(instructions)]

        self.labels = labels
        self.listing = listing
        self.words = [entry.word for entry in listing]
        logger.info(f"Assembled {len(self.words)} words")
        return self.words

    def _assemble_line(self, address: int, line: SourceLine,
                       labels: Mapping[str, int]) -> AssembledWord:
        tokens = line.text.split()
        mnemonic = tokens.pop(0)

        instruction = lookup(mnemonic)
        if instruction is None:
            raise UnknownMnemonicError(mnemonic, line.line_num, line.text)

        error = instruction.validate_pattern(tokens, labels)
        if error is not None:
            raise error.at_line(line.line_num, line.text)

        word = instruction.assemble(tokens, labels)
        logger.debug(f"{address:4d}: {binary_representation(word, INSTRUCTION_SIZE)}  {line.text}")
        return AssembledWord(address, word, line)


# ──────────────────────────────────────────────
# Convenience functions
# ──────────────────────────────────────────────

def assemble_lines(lines: Iterable[str]) -> List[int]:
    """Assemble source lines, return the machine words."""
    return Assembler().assemble(lines)


def assemble_source(source: str) -> List[int]:
    """Assemble source text, return the machine words."""
    return assemble_lines(source.splitlines())


def assemble_file(path: Union[str, Path]) -> Tuple[List[int], Assembler]:
    """Assemble a program file, return (words, assembler) for listings."""
    asm = Assembler()
    words = asm.assemble(read_lines(path))
    return words, asm
