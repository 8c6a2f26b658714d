import pytest

from neolith.asm_code import AddrMode, Mnemonic, ParamExt
from neolith.icg_core import RegLoad, Storage, Symbol
from neolith.icg_ops import InstructionGenerator

M = Mnemonic


def instrs(gen):
    return [i for block in gen.blocks for i in block.instrs if i.mne != M.NONE]


def mnes(gen):
    return [i.mne for i in instrs(gen)]


@pytest.fixture
def gen():
    return InstructionGenerator()


def test_negate_sequence(gen):
    gen.negate()
    assert mnes(gen) == [M.EOR, M.CLC, M.ADC]
    assert instrs(gen)[0].operand == 0xFF


def test_not_and_not_bool(gen):
    gen.not_()
    gen.not_bool()
    assert [(i.mne, i.operand) for i in instrs(gen)] == [(M.EOR, 0xFF), (M.EOR, 0x01)]


def test_pre_op_none_emits_nothing(gen):
    gen.pre_op(M.NONE)
    gen.pre_op(M.SEC)
    assert mnes(gen) == [M.SEC]


def test_op_with_const_16bit_add_carries(gen):
    gen.op_with_const(M.ADC, 5, 2)
    assert mnes(gen) == [M.ADC, M.BCC, M.INX]


def test_op_with_const_forgets_accumulator(gen):
    gen.load_const(5, 1)
    gen.op_with_const(M.AND, 5, 1)
    gen.load_const(5, 1)
    assert mnes(gen) == [M.LDA, M.AND, M.LDA]


def test_op_with_var_const_symbol_uses_immediate(gen):
    sym = Symbol("LIMIT", is_const=True)
    gen.op_with_var(M.CMP, sym, 1)
    instr = instrs(gen)[0]
    assert (instr.mode, instr.operand) == (AddrMode.IMM, "LIMIT")


def test_op_with_var_param_reads_through_stack(gen):
    sym = Symbol("p", is_param=True)
    gen.op_with_var(M.ADC, sym, 1)
    assert mnes(gen) == [M.TSX, M.ADC]
    assert instrs(gen)[1].mode == AddrMode.ABX


def test_op_with_var_inc_16bit(gen):
    sym = Symbol("w", size=2)
    gen.op_with_var(M.INC, sym, 2)
    result = instrs(gen)
    assert [i.mne for i in result] == [M.INC, M.BNE, M.INC]
    assert result[2].ext == ParamExt.PLUS_ONE


def test_inc_clears_register_holding_var(gen):
    x = Symbol("x")
    gen.load_var(x)
    gen.op_with_var(M.INC, x, 1)
    gen.load_var(x)
    assert mnes(gen) == [M.LDA, M.INC, M.LDA]


def test_op_property_var_comment_and_offset(gen):
    struct = Symbol("player")
    prop = Symbol("hp", location=3)
    gen.op_property_var(M.ADC, struct, prop)
    instr = instrs(gen)[0]
    assert instr.comment == "structure ref: player.hp"
    assert instr.offset == "$3"


def test_op_property_var_indexed_inc_goes_through_x(gen):
    gen.op_property_var_indexed(M.INC, Symbol("objs"), Symbol("t", location=2))
    assert mnes(gen) == [M.LDX, M.INX, M.TXA, M.STA]


def test_op_property_var_indexed_other(gen):
    gen.op_property_var_indexed(M.LDA, Symbol("objs"), Symbol("t", location=2))
    assert [(i.mne, i.mode) for i in instrs(gen)] == [(M.LDA, AddrMode.ABY)]


def test_op_indexed_modes(gen):
    arr = Symbol("arr", storage=Storage.ABSOLUTE)
    idx = Symbol("i")
    gen.op_indexed(M.LDA, arr, idx)
    result = instrs(gen)
    assert (result[0].mne, result[0].mode) == (M.LDX, AddrMode.ZP)
    assert result[1].mode == AddrMode.ABX


def test_op_with_stack(gen):
    gen.op_with_stack(M.ADC)
    result = instrs(gen)
    assert [i.mne for i in result] == [M.TSX, M.ADC, M.INX, M.TXS]
    assert result[1].mode == AddrMode.ZPX


def test_move_acc_to_index(gen):
    gen.move_acc_to_index("Y")
    gen.move_acc_to_index("X")
    assert mnes(gen) == [M.TAY, M.TAX]
    assert gen.y_reg.loaded_with == RegLoad.NONE


def test_move_acc_to_unknown_register(gen):
    with pytest.raises(ValueError):
        gen.move_acc_to_index("A")


def test_inc_using_addr_word(gen):
    gen.inc_using_addr(Symbol("w"), 0, 2)
    assert mnes(gen) == [M.INC, M.BNE, M.INC]


def test_dec_using_addr_word(gen):
    gen.dec_using_addr(Symbol("w"), 0, 2)
    assert mnes(gen) == [M.LDA, M.BNE, M.DEC, M.DEC]


def test_op_with_offset_only_inc_dec(gen):
    base = Symbol("b")
    gen.op_with_offset(M.ADC, base, 1)
    assert mnes(gen) == []
    gen.op_with_offset(M.DEC, base, 1)
    assert mnes(gen) == [M.DEC]


def test_shift_left_loads_and_shifts(gen):
    gen.shift_left(Symbol("x"), 3)
    assert mnes(gen) == [M.LDA, M.ASL, M.ASL, M.ASL]
    assert gen.a_reg.loaded_with == RegLoad.NONE


def test_shift_right_without_var(gen):
    gen.shift_right(None, 2)
    assert mnes(gen) == [M.LSR, M.LSR]


def test_add_to_int(gen):
    gen.add_to_int(Symbol("x"))
    assert mnes(gen) == [M.CLC, M.ADC, M.BCC, M.INX]


def test_add_offset_and_temp(gen):
    gen.add_offset_to_int(4)
    gen.add_temp_var_to_int(0x80)
    result = instrs(gen)
    assert result[1].mode == AddrMode.IMM
    assert result[5].mode == AddrMode.ZP


def test_add_addr(gen):
    gen.add_addr(Symbol("tbl"))
    result = instrs(gen)
    assert [i.mne for i in result] == [M.CLC, M.ADC, M.LDX, M.BCC, M.INX]
    assert (result[1].ext, result[2].ext) == (ParamExt.LO, ParamExt.HI)


def test_compare_variants(gen):
    gen.compare_const_name("MAX")
    gen.compare_const(7)
    gen.compare_var(Symbol("K", is_const=True, const_value=12))
    gen.compare_var(Symbol("v"))
    result = instrs(gen)
    assert [i.operand for i in result] == ["MAX", 7, 12, "v"]
    assert result[3].mode == AddrMode.ZP