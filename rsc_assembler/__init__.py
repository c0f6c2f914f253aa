"""
RSC Assembler
=============
A line-oriented assembler for the RSC 16-bit instruction set.

Architecture:
    ┌──────────┐    ┌───────────┐    ┌──────────┐    ┌───────────┐    ┌─────────┐
    │  Source  │───>│  Cleaner  │───>│  Labels  │───>│  Encoder  │───>│  Words  │
    │ (.rsc)   │    │ (lines)   │    │ (pass 1) │    │ (pass 2)  │    │ (u16[]) │
    └──────────┘    └───────────┘    └──────────┘    └───────────┘    └─────────┘

    - source.py:       line source, comment stripping
    - labels.py:       label table + flat instruction list
    - token_types.py:  operand kinds (register, immediates, address, flag)
    - instructions.py: base + pseudo instruction catalog, bit packing
    - assembler.py:    the pipeline
    - formatting.py:   binary/hex/listing/raw output
    - layout.py:       physical ROM block layout (JSON)
"""

__version__ = "0.3.0"

from .errors import (
    AssemblerError, UnknownMnemonicError, ArityError, TokenValidationError,
    LabelError, DuplicateLabelError, ProgramTooLargeError, LayoutError,
)
from .instructions import INSTRUCTION_SIZE, INSTRUCTIONS, lookup
from .assembler import (
    MAX_PROGRAM_SIZE, Assembler, assemble_lines, assemble_source, assemble_file,
)
