"""
Integer literal parsing and bit helpers shared by the token types,
the word formatter and the layout renderer.
"""

from __future__ import annotations
import re
from typing import Optional

__all__ = ['parse_int', 'max_uint', 'binary_representation', 'read_bits']

# ASCII only: no underscores, no non-ASCII digits
_INT_LITERAL_RE = re.compile(r'[+-]?(0[xX][0-9a-fA-F]+|0[bB][01]+|0[oO][0-7]+|[0-9]+)')


def parse_int(text: str) -> Optional[int]:
    """Parse an integer literal, or return None if the text is not one.

    Supports: 123, -5, +7 (decimal), 0xFF (hex), 0b1010 (binary), 0o17 (octal).
    Leading zeros on decimal literals are allowed ('007' == 7).
    """
    text = text.strip()
    if not _INT_LITERAL_RE.fullmatch(text):
        return None
    try:
        return int(text, 0)
    except ValueError:
        # int(..., 0) refuses '010'; plain decimal with leading zeros is still a number
        return int(text, 10)


def max_uint(bits: int) -> int:
    """Largest unsigned value representable in the given number of bits."""
    return (1 << bits) - 1


def binary_representation(value: int, size: int = 32) -> str:
    """Zero-padded binary text of the low `size` bits of value.

    Negative values are shown as their two's complement bit pattern.
    """
    return format(value & max_uint(size), f'0{size}b')


def read_bits(value: int, bits: int, offset: int) -> int:
    """Extract `bits` bits of value starting at `offset` (counted from the LSB)."""
    return (value >> offset) & max_uint(bits)
