import pytest

from neolith.asm_code import AddrMode, Mnemonic
from neolith.icg_core import Storage, Symbol
from neolith.icg_math import ACC_MUL_ADDR, Multiplier, is_power_of_2
from neolith.icg_ops import InstructionGenerator

M = Mnemonic


def instrs(gen):
    return [i for block in gen.blocks for i in block.instrs if i.mne != M.NONE]


def mnes(gen):
    return [i.mne for i in instrs(gen)]


def comments(gen):
    return [i.comment for block in gen.blocks for i in block.instrs if i.comment]


@pytest.fixture
def setup():
    gen = InstructionGenerator()
    symbols = {}
    return gen, symbols, Multiplier(gen, symbols)


def test_is_power_of_2():
    assert is_power_of_2(32)
    assert is_power_of_2(32768)
    assert not is_power_of_2(8)
    assert not is_power_of_2(22)


def test_x_times_5(setup):
    gen, _, mul = setup
    mul.multiply_var_with_const(Symbol("x"), 5)
    assert mnes(gen) == [M.LDA, M.CLC, M.ASL, M.ASL, M.CLC, M.ADC]
    assert comments(gen)[0] == "Start of Multiplication"
    assert comments(gen)[-1] == "End of Multiplication"


def test_x_times_7_subtracts(setup):
    gen, _, mul = setup
    mul.multiply_var_with_const(Symbol("x"), 7)
    assert mnes(gen) == [M.LDA, M.CLC, M.ASL, M.ASL, M.ASL, M.SEC, M.SBC]


def test_times_16_uses_steps(setup):
    gen, _, mul = setup
    mul.multiply_var_with_const(Symbol("x"), 16)
    assert mnes(gen).count(M.ASL) == 4


def test_power_of_two_shifts(setup):
    gen, _, mul = setup
    mul.multiply_var_with_const(Symbol("x"), 32)
    assert mnes(gen) == [M.LDA] + [M.ASL] * 5


def test_generic_multiply(setup):
    gen, _, mul = setup
    mul.multiply_var_with_const(Symbol("c"), 22)
    result = instrs(gen)
    adc = next(i for i in result if i.mne == M.ADC)
    assert adc.operand == 21
    assert result[-1].operand == ACC_MUL_ADDR


def test_lookup_table(setup):
    gen, symbols, mul = setup
    table = mul.add_lookup_table(10)
    assert symbols["QL_10"] is table
    assert len(table.data) == 25
    assert table.data[3] == 30
    assert mul.has_lookup_table(10)
    mul.multiply_var_with_const(Symbol("x"), 10)
    result = instrs(gen)
    assert [i.mne for i in result] == [M.LDY, M.LDA]
    assert (result[1].mode, result[1].operand) == (AddrMode.ABY, "QL_10")


def test_lookup_table_range(setup):
    _, _, mul = setup
    with pytest.raises(ValueError):
        mul.add_lookup_table(64)
    with pytest.raises(ValueError):
        mul.add_lookup_table(0)


def test_non_positive_multiplier(setup):
    _, _, mul = setup
    with pytest.raises(ValueError):
        mul.multiply_var_with_const(Symbol("x"), 0)


def test_var_with_var_zero_page(setup):
    gen, _, mul = setup
    mul.multiply_var_with_var(Symbol("x"), Symbol("y"))
    result = instrs(gen)
    assert [i.mne for i in result[:2]] == [M.LDA, M.STA]
    bcc = next(i for i in result if i.mne == M.BCC)
    bne = next(i for i in result if i.mne == M.BNE)
    assert (bcc.operand, bne.operand) == (5, -9)


def test_expr_with_absolute_var(setup):
    gen, _, mul = setup
    mul.multiply_expr_with_var(0, Symbol("big", storage=Storage.ABSOLUTE))
    result = instrs(gen)
    assert result[0].mne == M.STA
    bcc = next(i for i in result if i.mne == M.BCC)
    bne = next(i for i in result if i.mne == M.BNE)
    assert (bcc.operand, bne.operand) == (6, -10)


def test_param_var_loaded_through_stack(setup):
    gen, _, mul = setup
    mul.load_var_for_multiply(Symbol("p", is_param=True))
    result = instrs(gen)
    assert [i.mne for i in result] == [M.TSX, M.LDA]
    assert result[1].mode == AddrMode.ABX


def test_multiply_acc_with_const(setup):
    gen, _, mul = setup
    mul.multiply_with_const(2)
    assert mnes(gen)[0] == M.STA
    assert comments(gen)[0] == "Start of Multiplication Acc with Const"
    assert M.TAX in mnes(gen)