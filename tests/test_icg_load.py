import pytest

from neolith.asm_code import AddrMode, Mnemonic, ParamExt
from neolith.icg_core import RegLoad, Storage, Symbol, VarHint
from neolith.icg_load import LoadStoreGenerator


def real(gen):
    return [i for i in gen.blocks[-1].instrs if i.mne != Mnemonic.NONE] if gen.blocks else []


def mnes(gen):
    return [i.mne for i in real(gen)]


@pytest.fixture
def gen():
    return LoadStoreGenerator()


def test_reg_tracker_case(gen):
    a, b, c, d, e, f = (Symbol(n) for n in "abcdef")

    def assign_const(sym, value):
        gen.load_const(value, 1)
        gen.store_var_sym(sym)

    def assign_var(dst, src):
        gen.load_var(src)
        gen.store_var_sym(dst)

    for sym in (a, b, c, d):
        assign_const(sym, 0)
    assign_const(e, 10)
    assign_const(f, 0)
    assign_const(a, 10)
    assign_var(b, a)
    assign_var(c, a)

    loads = [i.operand for i in real(gen) if i.mne == Mnemonic.LDA]
    assert loads == [0, 10, 0, 10]
    stores = [i.operand for i in real(gen) if i.mne == Mnemonic.STA]
    assert stores == ["a", "b", "c", "d", "e", "f", "a", "b", "c"]

    gen.load_const(5, 1)
    gen.store_var_sym(a)
    before = len(real(gen))
    gen.load_var(a)
    assert len(real(gen)) == before


def test_load_const_word(gen):
    gen.load_const(0x1234, 2)
    ops = [(i.mne, i.mode, i.operand) for i in real(gen)]
    assert ops == [(Mnemonic.LDA, AddrMode.IMM, 0x34), (Mnemonic.LDX, AddrMode.IMM, 0x12)]
    assert gen.a_reg.loaded_with == RegLoad.CONST


def test_load_var_word_and_const(gen):
    w = Symbol("w", size=2)
    gen.load_var(w)
    assert [(i.mne, i.ext) for i in real(gen)] == [
        (Mnemonic.LDA, ParamExt.NORMAL),
        (Mnemonic.LDX, ParamExt.PLUS_ONE),
    ]
    k = Symbol("K", size=2, is_const=True)
    gen.load_var(k)
    assert [(i.mne, i.mode, i.ext) for i in real(gen)[2:]] == [
        (Mnemonic.LDA, AddrMode.IMM, ParamExt.LO),
        (Mnemonic.LDX, AddrMode.IMM, ParamExt.HI),
    ]


def test_load_var_skips_when_loaded(gen):
    v = Symbol("v")
    gen.load_var(v)
    gen.load_var(v)
    assert mnes(gen) == [Mnemonic.LDA]


@pytest.mark.parametrize(
    "hint, expected",
    [
        (VarHint.A_REG, []),
        (VarHint.X_REG, [Mnemonic.TXA]),
        (VarHint.Y_REG, [Mnemonic.TYA]),
        (VarHint.NONE, [Mnemonic.TSX, Mnemonic.LDA]),
    ],
)
def test_load_param_var(gen, hint, expected):
    p = Symbol("p", is_param=True, hint=hint)
    gen.load_var(p)
    assert mnes(gen) == expected
    assert gen.a_reg.var_sym is p


def test_param_var_uses_abx(gen):
    p = Symbol("p", is_param=True)
    instr = gen.op_with_param_var(Mnemonic.LDA, p)
    assert instr.mode == AddrMode.ABX
    assert real(gen)[0].comment == "prepare to read param var"


def test_load_index_var_tracks_y(gen):
    i = Symbol("i")
    gen.load_index_var(i, 1)
    gen.load_index_var(i, 1)
    assert mnes(gen) == [Mnemonic.LDY]
    assert gen.is_last_y_use(i, 1)
    assert not gen.is_last_y_use(i, 2)
    gen.load_index_var(i, 2)
    assert mnes(gen)[1:] == [Mnemonic.LDA, Mnemonic.ASL, Mnemonic.TAY]
    assert gen.y_reg.loaded_with == RegLoad.VAR_X2


def test_store_clears_index_tracking(gen):
    i = Symbol("i")
    gen.load_index_var(i, 1)
    gen.store_var_sym(i)
    assert not gen.is_last_y_use(i, 1)


def test_load_from_array(gen):
    arr = Symbol("arr", storage=Storage.ABSOLUTE)
    gen.load_from_array(arr, 3, True)
    assert [(i.mne, i.mode, i.offset) for i in real(gen)] == [
        (Mnemonic.LDA, AddrMode.ABS, "6"),
        (Mnemonic.LDX, AddrMode.ABS, "7"),
    ]
    gen.load_from_array(arr, 3, False)
    assert real(gen)[-1].offset == "3"


def test_load_byte_var_mode(gen):
    v = Symbol("v")
    gen.load_byte_var(v, 0x10)
    gen.load_byte_var(v, 0x100)
    assert [(i.mode, i.offset) for i in real(gen)] == [(AddrMode.ZP, "$10"), (AddrMode.ABS, "$100")]


def test_load_addr_plus_index(gen):
    v = Symbol("v")
    gen.load_addr_plus_index(v, 0x105)
    assert [(i.offset, i.ext) for i in real(gen)] == [
        ("$5", ParamExt.ADD | ParamExt.LO),
        ("$5", ParamExt.ADD | ParamExt.HI),
    ]


def test_load_indirect_word(gen):
    gen.load_indirect(Symbol("ptr"), 2)
    assert mnes(gen) == [Mnemonic.INY, Mnemonic.LDA, Mnemonic.TAX, Mnemonic.DEY, Mnemonic.LDA]


def test_load_property_var(gen):
    s = Symbol("obj")
    prop = Symbol("x", size=2, location=3)
    gen.load_property_var(s, prop)
    first, second = real(gen)
    assert first.comment == "load structure ref: obj.x"
    assert (first.offset, second.offset) == ("$3", "$4")


def test_load_reg_const_y_cached(gen):
    gen.load_reg_const("Y", 7)
    gen.load_reg_const("Y", 7)
    gen.load_reg_const("X", 7)
    gen.load_reg_const("X", 7)
    assert mnes(gen) == [Mnemonic.LDY, Mnemonic.LDX, Mnemonic.LDX]
    with pytest.raises(ValueError):
        gen.load_reg_const("Q", 1)


def test_load_reg_var(gen):
    gen.load_reg_var(Symbol("K", is_const=True), "X")
    assert (real(gen)[0].mne, real(gen)[0].mode) == (Mnemonic.LDX, AddrMode.IMM)
    with pytest.raises(ValueError):
        gen.load_reg_var(Symbol("v"), "Z")


def test_load_pointer_addr(gen):
    gen.load_pointer_addr(Symbol("buf"))
    assert mnes(gen) == [Mnemonic.LDA, Mnemonic.PHA, Mnemonic.LDA, Mnemonic.PHA]
    assert real(gen)[0].line_comment == "buf"
    assert gen.a_reg.loaded_with == RegLoad.NONE


def test_adjust_stack(gen):
    gen.adjust_stack(3)
    assert mnes(gen) == [Mnemonic.TSX, Mnemonic.INX, Mnemonic.INX, Mnemonic.INX, Mnemonic.TXS]


def test_store_to_addr(gen):
    gen.store_to_addr(0x200, 2)
    assert [(i.mne, i.mode, i.operand) for i in real(gen)] == [
        (Mnemonic.STA, AddrMode.ABS, 0x200),
        (Mnemonic.STX, AddrMode.ABS, 0x201),
    ]


def test_store_var_offset_struct_pointer(gen):
    ptr = Symbol("p", is_pointer=True, user_type=Symbol("S", members=[Symbol("a")]))
    gen.store_var_offset(ptr, 1, 2)
    assert mnes(gen) == [Mnemonic.LDY, Mnemonic.STA, Mnemonic.TXA, Mnemonic.INY, Mnemonic.STA]


def test_store_var_offset_plain(gen):
    gen.store_var_offset(Symbol("v"), 2, 2)
    stx, sta = real(gen)
    assert stx.ext == ParamExt.LO | ParamExt.ADD | ParamExt.PLUS_ONE
    assert sta.ext == ParamExt.LO | ParamExt.ADD


def test_store_var_indexed(gen):
    gen.store_var_indexed(Symbol("w", size=2))
    assert [(i.mne, i.mode) for i in real(gen)] == [
        (Mnemonic.STA, AddrMode.ABY),
        (Mnemonic.STX, AddrMode.ZPY),
    ]
    gen2 = LoadStoreGenerator()
    gen2.store_var_indexed(Symbol("w", size=2, storage=Storage.ABSOLUTE))
    assert mnes(gen2) == [Mnemonic.STA, Mnemonic.TXA, Mnemonic.STA]
    gen3 = LoadStoreGenerator()
    gen3.store_var_indexed(Symbol("p", is_pointer=True))
    assert [(i.mne, i.mode) for i in real(gen3)] == [(Mnemonic.STA, AddrMode.IY)]


def test_store_indexed_with_offset(gen):
    gen.store_indexed_with_offset(Symbol("arr"), 4, 2)
    assert mnes(gen) == [Mnemonic.STA, Mnemonic.TXA, Mnemonic.STA]
    assert real(gen)[2].ext == ParamExt.PLUS_ONE | ParamExt.ADD