"""
Operand token types for the RSC instruction set.

A token type describes one field of an instruction word: how many bits it
occupies, whether it consumes an operand token from the source line, how
to validate that token and how to turn it into the field's bits.

Kinds:
  REGISTER             r0..r15, 4 bits
  UINT(n)              n-bit unsigned immediate
  INT(n, strict)       n-bit signed immediate (see IntType for the range)
  BLANK(n)             reserved bits, consumes nothing, always 0
  INSTRUCTION_ADDRESS  10-bit jump target, literal or .label
  FLAG                 2-bit branch condition, literal or alias

Instances are immutable and shared: the factories are cached, so UINT(8)
always returns the same object.
"""

from __future__ import annotations
import abc
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional, Tuple

from .errors import TokenValidationError
from .number_utils import max_uint, parse_int

__all__ = [
    'TokenType', 'RegisterType', 'UIntType', 'IntType', 'BlankType',
    'InstructionAddressType', 'FlagType',
    'REGISTER', 'UINT', 'INT', 'BLANK', 'INSTRUCTION_ADDRESS', 'FLAG',
    'ADDRESS_SIZE', 'LABEL_MARKER', 'FLAG_ALIASES',
]

LabelTable = Mapping[str, int]

ADDRESS_SIZE = 10
LABEL_MARKER = '.'

# Condition code aliases; the group index is the encoded flag value.
FLAG_ALIASES: Tuple[Tuple[str, ...], ...] = (
    ('=', 'eq', 'z', 'zero'),             # 0: zero / equal
    ('!=', 'ne', 'nz', 'notzero'),        # 1: not zero / not equal
    ('>=', 'ge', 'c', 'carry'),           # 2: carry / greater or equal
    ('<', 'lt', 'nc', 'notcarry'),        # 3: no carry / less than
)

_REGISTER_RE = re.compile(r'^r(1[0-5]|[0-9])$', re.IGNORECASE)


class TokenType(abc.ABC):
    """One field of an instruction word."""

    size: int
    consumes_token: bool = True

    @abc.abstractmethod
    def validate(self, token: str, labels: LabelTable) -> Optional[TokenValidationError]:
        """Return an error if the token does not fit this field, None otherwise."""

    @abc.abstractmethod
    def encode(self, token: Optional[str], labels: LabelTable) -> int:
        """Return the field bits for an already validated token."""


# ──────────────────────────────────────────────
# Registers
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class RegisterType(TokenType):
    size: int = 4

    def validate(self, token, labels):
        if _REGISTER_RE.match(token):
            return None
        return TokenValidationError(f"'{token}' does not match any known register.", token)

    def encode(self, token, labels):
        if _REGISTER_RE.match(token):
            return int(token[1:])  # r15 → 15
        # Pseudo-instruction rewrites may place a literal in a register field
        value = parse_int(token)
        return (value or 0) & max_uint(self.size)


# ──────────────────────────────────────────────
# Immediates
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class UIntType(TokenType):
    size: int

    def validate(self, token, labels):
        value = parse_int(token)
        if value is not None and 0 <= value <= max_uint(self.size):
            return None
        return TokenValidationError(
            f"'{token}' is not a valid {self.size}-bit unsigned integer "
            f"(expected 0 to {max_uint(self.size)}).", token)

    def encode(self, token, labels):
        return parse_int(token)


@dataclass(frozen=True)
class IntType(TokenType):
    """Signed immediate, truncated to its low `size` bits on encoding.

    strict:     accepts the true signed range  -2**(size-1) .. 2**(size-1) - 1
    non-strict: accepts                        -2**(size-1) .. 2**size - 1

    Non-strict mode is deliberately permissive: only the resulting bit
    pattern matters, so `ADI r1 255` and `ADI r1 -1` encode the same byte.
    """
    size: int
    strict: bool = False

    @property
    def bounds(self) -> Tuple[int, int]:
        low = -(1 << (self.size - 1))
        high = (1 << (self.size - 1)) - 1 if self.strict else max_uint(self.size)
        return low, high

    def validate(self, token, labels):
        value = parse_int(token)
        low, high = self.bounds
        if value is not None and low <= value <= high:
            return None
        kind = 'signed' if self.strict else 'signed or unsigned'
        return TokenValidationError(
            f"'{token}' is not a valid {self.size}-bit {kind} integer "
            f"(expected {low} to {high}).", token)

    def encode(self, token, labels):
        return parse_int(token) & max_uint(self.size)


@dataclass(frozen=True)
class BlankType(TokenType):
    """Reserved bits. Takes no operand and always encodes to zero."""
    size: int
    consumes_token: bool = False

    def validate(self, token, labels):
        return None

    def encode(self, token, labels):
        return 0


# ──────────────────────────────────────────────
# Control flow operands
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class InstructionAddressType(TokenType):
    size: int = ADDRESS_SIZE

    def validate(self, token, labels):
        if token.startswith(LABEL_MARKER):
            name = token[len(LABEL_MARKER):]
            if name not in labels:
                return TokenValidationError(f"Label '{name}' is not defined.", token)
            if labels[name] > max_uint(self.size):
                return TokenValidationError(
                    f"Label '{name}' resolves to address {labels[name]}, outside the "
                    f"{self.size}-bit address space.", token)
            return None
        value = parse_int(token)
        if value is not None and 0 <= value <= max_uint(self.size):
            return None
        return TokenValidationError(
            f"'{token}' is neither a label nor a valid instruction address "
            f"(expected 0 to {max_uint(self.size)}).", token)

    def encode(self, token, labels):
        if token.startswith(LABEL_MARKER):
            return labels[token[len(LABEL_MARKER):]]
        return parse_int(token)


@dataclass(frozen=True)
class FlagType(TokenType):
    size: int = 2

    @staticmethod
    def _alias_group(token: str) -> Optional[int]:
        lowered = token.lower()
        for group, aliases in enumerate(FLAG_ALIASES):
            if lowered in aliases:
                return group
        return None

    def validate(self, token, labels):
        value = parse_int(token)
        if value is not None and 0 <= value <= max_uint(self.size):
            return None
        if self._alias_group(token) is not None:
            return None
        return TokenValidationError(f"'{token}' does not match any known flag.", token)

    def encode(self, token, labels):
        value = parse_int(token)
        if value is not None:
            return value
        return self._alias_group(token)


# ──────────────────────────────────────────────
# Registry
# ──────────────────────────────────────────────

REGISTER = RegisterType()
INSTRUCTION_ADDRESS = InstructionAddressType()
FLAG = FlagType()


@lru_cache(maxsize=None)
def UINT(size: int) -> UIntType:
    return UIntType(size)


@lru_cache(maxsize=None)
def INT(size: int, strict: bool = False) -> IntType:
    return IntType(size, strict)


@lru_cache(maxsize=None)
def BLANK(size: int) -> BlankType:
    return BlankType(size)
