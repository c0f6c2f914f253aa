"""
Assembler Pipeline Tests for the RSC Assembler.

Covers complete programs, forward references, the error taxonomy with
line numbers, and the all-or-nothing behaviour of a run.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from rsc_assembler import (
    MAX_PROGRAM_SIZE, ArityError, Assembler, AssemblerError, DuplicateLabelError,
    ProgramTooLargeError, TokenValidationError, UnknownMnemonicError,
    assemble_file, assemble_lines, assemble_source,
)

PROGRAMS_DIR = os.path.join(os.path.dirname(__file__), "..", "programs")


class TestCompleteProgram:
    """Full program assembly with known-good machine code."""

    def test_load_add_halt(self):
        words = assemble_source("LDI r1 5\nLDI r2 3\nADD r3 r1 r2\nHLT")
        assert len(words) == 4
        assert words == [0x8105, 0x8203, 0x2312, 0x1000]
        assert format(words[2], '016b') == "0010001100010010"

    def test_deterministic(self):
        src = "LDI r1 5\n.loop DEC r1\nBRC nz .loop\nHLT"
        assert assemble_source(src) == assemble_source(src)

    def test_empty_program(self):
        assert assemble_source("") == []
        assert assemble_source("# nothing\n\n// here") == []

    def test_comments_and_blanks_do_not_shift_addresses(self):
        src = "# header\n\nNOP\n   // spacer\nJMP .end -- jump\n\n.end HLT"
        assert assemble_source(src) == [0x0000, 0xA002, 0x1000]

    def test_whitespace_and_case(self):
        assert assemble_source("   add\tR3   r1 R2   ") == [0x2312]

    def test_lines_interface(self):
        assert assemble_lines(["NOP", "HLT"]) == [0x0000, 0x1000]


class TestLabels:
    def test_forward_reference(self):
        src = "JMP .end\nNOP\nNOP\n.end\nHLT"
        words = assemble_source(src)
        assert words[0] == (10 << 12) | 3

    def test_backward_reference(self):
        src = "NOP\n.loop ADD r1 r1 r0\nBRC z .loop"
        words = assemble_source(src)
        assert words[2] == (11 << 12) | (0 << 10) | 1

    def test_same_line_label_address(self):
        asm = Assembler()
        asm.assemble(["NOP", ".loop ADD r1 r1 r0", "JMP .loop"])
        assert asm.labels['loop'] == 1
        assert asm.words[2] == 0xA001

    def test_duplicate_label_cites_second_line(self):
        with pytest.raises(DuplicateLabelError) as excinfo:
            assemble_source(".start\nNOP\n.start HLT")
        assert excinfo.value.line_num == 3

    def test_undefined_label(self):
        with pytest.raises(TokenValidationError, match="'nowhere'") as excinfo:
            assemble_source("NOP\nJMP .nowhere")
        assert excinfo.value.line_num == 2


class TestErrors:
    def test_unknown_mnemonic(self):
        with pytest.raises(UnknownMnemonicError) as excinfo:
            assemble_source("NOP\nFOO r1")
        err = excinfo.value
        assert err.mnemonic == "FOO"
        assert err.line_num == 2
        assert "FOO" in str(err) and "Line 2" in str(err)

    def test_arity(self):
        with pytest.raises(ArityError) as excinfo:
            assemble_source("ADD r1 r2")
        assert (excinfo.value.expected, excinfo.value.actual) == (3, 2)
        assert "expected 3, got 2" in str(excinfo.value)

    def test_bad_register(self):
        with pytest.raises(TokenValidationError, match="r16"):
            assemble_source("ADD r1 r2 r16")

    def test_out_of_range_immediate(self):
        with pytest.raises(TokenValidationError, match="8-bit"):
            assemble_source("LDI r1 256")

    def test_unknown_flag(self):
        with pytest.raises(TokenValidationError, match="flag"):
            assemble_source("BRC sometimes 0")

    def test_line_number_counts_original_lines(self):
        src = "# comment\n\n\nNOP\n// another\nADD r1 r2"
        with pytest.raises(AssemblerError) as excinfo:
            assemble_source(src)
        assert excinfo.value.line_num == 6
        assert excinfo.value.line_text == "ADD r1 r2"

    def test_first_error_aborts(self):
        asm = Assembler()
        with pytest.raises(UnknownMnemonicError):
            asm.assemble(["NOP", "BAD", "ALSO_BAD"])
        assert asm.words == []
        assert asm.listing == []

    def test_all_errors_share_base(self):
        for src in ("FOO", "ADD r1", "LDI r1 -1", ".a\n.a", "JMP .x"):
            with pytest.raises(AssemblerError):
                assemble_source(src)


class TestAddressSpace:
    def test_full_address_space_fits(self):
        words = assemble_source("\n".join(["NOP"] * MAX_PROGRAM_SIZE))
        assert len(words) == 1024

    def test_program_too_large(self):
        with pytest.raises(ProgramTooLargeError) as excinfo:
            assemble_source("\n".join(["NOP"] * (MAX_PROGRAM_SIZE + 1)))
        assert excinfo.value.count == 1025
        assert excinfo.value.limit == 1024
        assert excinfo.value.line_num == 1025
        assert str(excinfo.value).startswith("Line 1025: ")

    def test_program_too_large_cites_original_line(self):
        source = "# header\n\n" + "\n".join(["NOP"] * (MAX_PROGRAM_SIZE + 1))
        with pytest.raises(ProgramTooLargeError) as excinfo:
            assemble_source(source)
        assert excinfo.value.line_num == 1027
        assert excinfo.value.line_text == "NOP"

    def test_label_past_last_address_rejected(self):
        source = "JMP .end\n" + "\n".join(["NOP"] * (MAX_PROGRAM_SIZE - 1)) + "\n.end"
        with pytest.raises(TokenValidationError, match="'end'") as excinfo:
            assemble_source(source)
        assert excinfo.value.line_num == 1

    def test_branch_to_label_past_last_address_rejected(self):
        source = "BRC z .end\n" + "\n".join(["NOP"] * (MAX_PROGRAM_SIZE - 1)) + "\n.end"
        with pytest.raises(TokenValidationError, match="address space"):
            assemble_source(source)

    def test_label_on_last_address(self):
        source = "JMP .end\n" + "\n".join(["NOP"] * (MAX_PROGRAM_SIZE - 2)) + "\n.end HLT"
        words = assemble_source(source)
        assert len(words) == MAX_PROGRAM_SIZE
        assert words[0] == 0xA3FF


class TestProgramFiles:
    EXPECTED = [
        0x810A,  # LDI r1 10
        0x8200,  # LDI r2 0
        0x8320,  # LDI r3 0x20
        0x2221,  # .loop ADD r2 r2 r1
        0x91FF,  # DEC r1
        0x3010,  # CMP r1 r0
        0xB403,  # BRC nz .loop
        0xD230,  # WRT r2 r3 0
        0xA00A,  # JMP .end
        0x0000,  # NOP
        0x1000,  # .end HLT
    ]

    def test_sample_program(self):
        words, asm = assemble_file(os.path.join(PROGRAMS_DIR, "test.rsc"))
        assert words == self.EXPECTED
        assert dict(asm.labels) == {'loop': 3, 'end': 10}
        assert asm.listing[3].source.text == "ADD r2 r2 r1"

    def test_existing_programs_assemble(self):
        """All example programs should assemble without exceptions."""
        for fname in os.listdir(PROGRAMS_DIR):
            if fname.endswith(".rsc"):
                assemble_file(os.path.join(PROGRAMS_DIR, fname))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            assemble_file(tmp_path / "absent.rsc")
