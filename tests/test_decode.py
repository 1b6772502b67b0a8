"""Tests for instruction decoding and classification."""

import pytest
from chip8vm import Instruction, classify, decode, instruction_name


class TestDecode:
    """Test operand extraction."""

    def test_decode_fields(self):
        decoded = decode(0xD12A)
        assert decoded.opcode == 0xD
        assert decoded.x == 0x1
        assert decoded.y == 0x2
        assert decoded.n == 0xA
        assert decoded.nn == 0x2A
        assert decoded.nnn == 0x12A

    def test_decode_is_pure(self):
        assert decode(0x8AB4) == decode(0x8AB4)


class TestClassify:
    """Test mapping of words to instruction kinds."""

    @pytest.mark.parametrize("word, kind", [
        (0x00E0, Instruction.CLS),
        (0x00EE, Instruction.RET),
        (0x1234, Instruction.JP),
        (0x2ABC, Instruction.CALL),
        (0x3A42, Instruction.SE_BYTE),
        (0x4A42, Instruction.SNE_BYTE),
        (0x5AB0, Instruction.SE_REG),
        (0x6A42, Instruction.LD_BYTE),
        (0x7A42, Instruction.ADD_BYTE),
        (0x8AB0, Instruction.LD_REG),
        (0x8AB1, Instruction.OR),
        (0x8AB2, Instruction.AND),
        (0x8AB3, Instruction.XOR),
        (0x8AB4, Instruction.ADD_REG),
        (0x8AB5, Instruction.SUB),
        (0x8AB6, Instruction.SHR),
        (0x8AB7, Instruction.SUBN),
        (0x8ABE, Instruction.SHL),
        (0x9AB0, Instruction.SNE_REG),
        (0xA123, Instruction.LD_I),
        (0xB123, Instruction.JP_V0),
        (0xCA0F, Instruction.RND),
        (0xDAB5, Instruction.DRW),
        (0xEA9E, Instruction.SKP),
        (0xEAA1, Instruction.SKNP),
        (0xFA07, Instruction.LD_VX_DT),
        (0xFA0A, Instruction.LD_VX_K),
        (0xFA15, Instruction.LD_DT_VX),
        (0xFA18, Instruction.LD_ST_VX),
        (0xFA1E, Instruction.ADD_I_VX),
        (0xFA29, Instruction.LD_F_VX),
        (0xFA33, Instruction.LD_B_VX),
        (0xFA55, Instruction.LD_MEM_VX),
        (0xFA65, Instruction.LD_VX_MEM),
    ])
    def test_classify_defined_instructions(self, word, kind):
        assert int(classify(word)) == kind

    @pytest.mark.parametrize("word", [
        0x0000, 0x0123, 0x00E1, 0x00FF,
        0x5AB1, 0x9ABF,
        0x8AB8, 0x8AB9, 0x8ABA, 0x8ABB, 0x8ABC, 0x8ABD, 0x8ABF,
        0xEA9F, 0xEAA0, 0xE000,
        0xFA00, 0xFA08, 0xFA30, 0xFA66, 0xFFFF,
    ])
    def test_classify_undefined_words(self, word):
        assert int(classify(word)) == Instruction.INVALID

    def test_every_kind_has_a_pattern(self):
        from chip8vm.decode import INSTRUCTION_PATTERNS

        kinds = {kind for _, _, kind in INSTRUCTION_PATTERNS}
        assert kinds == set(Instruction) - {Instruction.INVALID}

    def test_instruction_name(self):
        assert instruction_name(0x8014) == "ADD_REG"
        assert instruction_name(0x0000) == "INVALID"
