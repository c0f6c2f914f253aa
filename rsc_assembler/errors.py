"""
Exception taxonomy for the RSC assembler.

Every failure of an assembly run surfaces as one AssemblerError subclass.
Token types and instructions *return* errors without a location; the
pipeline tags them with the offending source line via at_line() and raises.
"""

from __future__ import annotations

__all__ = [
    'AssemblerError', 'UnknownMnemonicError', 'ArityError',
    'TokenValidationError', 'LabelError', 'DuplicateLabelError',
    'ProgramTooLargeError', 'LayoutError',
]


class AssemblerError(Exception):
    """Raised on assembly errors."""
    def __init__(self, message: str, line_num: int = 0, line_text: str = ""):
        self.message = message
        self.line_num = line_num
        self.line_text = line_text
        super().__init__(self._format())

    def _format(self) -> str:
        return f"Line {self.line_num}: {self.message}" if self.line_num else self.message

    def at_line(self, line_num: int, line_text: str = "") -> AssemblerError:
        """Attach the offending source line to this error and return it."""
        self.line_num = line_num
        self.line_text = line_text
        self.args = (self._format(),)
        return self


class UnknownMnemonicError(AssemblerError):
    """Mnemonic not present in the instruction catalog."""
    def __init__(self, mnemonic: str, line_num: int = 0, line_text: str = ""):
        self.mnemonic = mnemonic
        super().__init__(f"'{mnemonic}' does not match any known instruction.",
                         line_num, line_text)


class ArityError(AssemblerError):
    """Operand count does not match the instruction's pattern."""
    def __init__(self, expected: int, actual: int, line_num: int = 0, line_text: str = ""):
        self.expected = expected
        self.actual = actual
        which = 'many' if actual > expected else 'few'
        super().__init__(f"Too {which} arguments: expected {expected}, got {actual}.",
                         line_num, line_text)


class TokenValidationError(AssemblerError):
    """An operand does not fit its token type (register, integer, label, flag)."""
    def __init__(self, message: str, token: str = "", line_num: int = 0, line_text: str = ""):
        self.token = token
        super().__init__(message, line_num, line_text)


class LabelError(AssemblerError):
    """Malformed label definition."""


class DuplicateLabelError(LabelError):
    """Label defined more than once."""
    def __init__(self, label: str, line_num: int = 0, line_text: str = ""):
        self.label = label
        super().__init__(f"Label '{label}' is already defined.", line_num, line_text)


class ProgramTooLargeError(AssemblerError):
    """Program does not fit in the instruction address space."""
    def __init__(self, count: int, limit: int, line_num: int = 0, line_text: str = ""):
        self.count = count
        self.limit = limit
        super().__init__(f"Program too large: {count} instructions, "
                         f"address space holds {limit}.", line_num, line_text)


class LayoutError(AssemblerError):
    """Word array cannot be mapped onto the physical ROM layout."""
