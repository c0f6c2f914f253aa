"""
RSC instruction catalog.

Every machine word is 16 bits: a 4-bit opcode followed by the operand
fields of the instruction's pattern, packed MSB first.

  15  12 11    8 7     4 3     0
  ┌─────┬───────┬───────┬───────┐
  │ op  │   W   │   A   │   B   │   ADD SUB NOR AND XOR
  ├─────┼───────┼───────┴───────┤
  │ op  │   W   │     imm8      │   LDI ADI
  ├─────┼───┬───┴───────────────┤
  │ op  │ F │     addr10        │   JMP (F blank) / BRC (F = flag)
  ├─────┼───┴───┬───────┬───────┤
  │ op  │  W/B  │   A   │ off4  │   RED WRT
  └─────┴───────┴───────┴───────┘

Pseudo instructions have no opcode of their own: they rewrite their
operand tokens and hand them to exactly one base instruction.
"""

from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional, Protocol, Sequence, Tuple

from .errors import ArityError, AssemblerError
from .token_types import (
    BLANK, FLAG, INSTRUCTION_ADDRESS, INT, REGISTER, UINT, LabelTable, TokenType,
)

__all__ = [
    'INSTRUCTION_SIZE', 'OPCODE_SIZE', 'Instruction', 'BaseInstruction',
    'PseudoInstruction', 'BASE_INSTRUCTIONS', 'PSEUDO_INSTRUCTIONS',
    'INSTRUCTIONS', 'lookup',
]

INSTRUCTION_SIZE = 16
OPCODE_SIZE = 4

Pattern = Tuple[TokenType, ...]


class Instruction(Protocol):
    """Capabilities shared by base and pseudo instructions."""
    mnemonic: str
    pattern: Pattern

    def validate_pattern(self, tokens: Sequence[str], labels: LabelTable) -> Optional[AssemblerError]: ...

    def assemble(self, tokens: Sequence[str], labels: LabelTable) -> int: ...


def _validate_tokens(pattern: Pattern, tokens: Sequence[str],
                     labels: LabelTable) -> Optional[AssemblerError]:
    """Check arity, then each token in order. Returns the first error only."""
    expected = [token_type for token_type in pattern if token_type.consumes_token]
    if len(tokens) != len(expected):
        return ArityError(len(expected), len(tokens))
    for token_type, token in zip(expected, tokens):
        error = token_type.validate(token, labels)
        if error is not None:
            return error
    return None


@dataclass(frozen=True)
class BaseInstruction:
    """Directly encodable instruction with a real opcode."""
    mnemonic: str
    opcode: int
    pattern: Pattern = ()

    def validate_pattern(self, tokens, labels):
        return _validate_tokens(self.pattern, tokens, labels)

    def assemble(self, tokens, labels):
        machine_code = self.opcode
        available_bits = INSTRUCTION_SIZE - OPCODE_SIZE
        remaining = iter(tokens)
        for token_type in self.pattern:
            token = next(remaining) if token_type.consumes_token else None
            machine_code = (machine_code << token_type.size) | token_type.encode(token, labels)
            available_bits -= token_type.size
        return machine_code << available_bits


@dataclass(frozen=True)
class PseudoInstruction:
    """Syntactic sugar rewritten into a single base instruction."""
    mnemonic: str
    pattern: Pattern
    base: BaseInstruction
    rewrite: Callable[[List[str]], List[str]]

    def expand(self, tokens: Sequence[str]) -> List[str]:
        """Operand tokens for the base instruction."""
        return self.rewrite(list(tokens))

    def validate_pattern(self, tokens, labels):
        return _validate_tokens(self.pattern, tokens, labels)

    def assemble(self, tokens, labels):
        return self.base.assemble(self.expand(tokens), labels)


# ──────────────────────────────────────────────
# Base instructions
# ──────────────────────────────────────────────

_RRR = (REGISTER, REGISTER, REGISTER)

NOP = BaseInstruction('NOP', 0)
HLT = BaseInstruction('HLT', 1)
ADD = BaseInstruction('ADD', 2, _RRR)
SUB = BaseInstruction('SUB', 3, _RRR)
NOR = BaseInstruction('NOR', 4, _RRR)
AND = BaseInstruction('AND', 5, _RRR)
XOR = BaseInstruction('XOR', 6, _RRR)
RSH = BaseInstruction('RSH', 7, (REGISTER, REGISTER))
LDI = BaseInstruction('LDI', 8, (REGISTER, UINT(8)))
ADI = BaseInstruction('ADI', 9, (REGISTER, INT(8, strict=False)))
JMP = BaseInstruction('JMP', 10, (BLANK(2), INSTRUCTION_ADDRESS))
BRC = BaseInstruction('BRC', 11, (FLAG, INSTRUCTION_ADDRESS))
RED = BaseInstruction('RED', 12, (REGISTER, REGISTER, INT(4, strict=True)))
WRT = BaseInstruction('WRT', 13, (REGISTER, REGISTER, INT(4, strict=True)))

# ──────────────────────────────────────────────
# Pseudo instructions
# ──────────────────────────────────────────────

MOV = PseudoInstruction('MOV', (REGISTER, REGISTER), ADD, lambda t: [t[0], t[1], 'r0'])
INC = PseudoInstruction('INC', (REGISTER,), ADI, lambda t: [t[0], '1'])
DEC = PseudoInstruction('DEC', (REGISTER,), ADI, lambda t: [t[0], '-1'])
CMP = PseudoInstruction('CMP', (REGISTER, REGISTER), SUB, lambda t: ['r0', t[0], t[1]])
LSH = PseudoInstruction('LSH', (REGISTER, REGISTER), ADD, lambda t: [t[0], t[1], t[1]])
NOT = PseudoInstruction('NOT', (REGISTER, REGISTER), XOR, lambda t: [t[0], t[1], '0xFF'])
NEG = PseudoInstruction('NEG', (REGISTER, REGISTER), SUB, lambda t: [t[0], 'r0', t[1]])


def _table(*instructions) -> Mapping[str, Instruction]:
    return MappingProxyType({instruction.mnemonic: instruction for instruction in instructions})


BASE_INSTRUCTIONS = _table(NOP, HLT, ADD, SUB, NOR, AND, XOR, RSH, LDI, ADI, JMP, BRC, RED, WRT)
PSEUDO_INSTRUCTIONS = _table(MOV, INC, DEC, CMP, LSH, NOT, NEG)


def _check_catalog():
    """Catalog invariants, checked once at import time."""
    for instruction in BASE_INSTRUCTIONS.values():
        width = OPCODE_SIZE + sum(token_type.size for token_type in instruction.pattern)
        if width > INSTRUCTION_SIZE:
            raise AssertionError(f"{instruction.mnemonic}: fields take {width} bits")
        if not 0 <= instruction.opcode < (1 << OPCODE_SIZE):
            raise AssertionError(f"{instruction.mnemonic}: opcode {instruction.opcode} out of range")
    clashes = set(BASE_INSTRUCTIONS) & set(PSEUDO_INSTRUCTIONS)
    if clashes:
        raise AssertionError(f"Pseudo instructions shadow base instructions: {sorted(clashes)}")


_check_catalog()

INSTRUCTIONS = MappingProxyType({**BASE_INSTRUCTIONS, **PSEUDO_INSTRUCTIONS})


def lookup(mnemonic: str) -> Optional[Instruction]:
    """Find a base or pseudo instruction by mnemonic, case-insensitively."""
    return INSTRUCTIONS.get(mnemonic.upper())
