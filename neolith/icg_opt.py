"""Generators for optimised code blocks."""

from __future__ import annotations

from collections.abc import Sequence
from itertools import count

from neolith.asm_code import AddrMode, Mnemonic, ParamExt
from neolith.icg_core import Label, Symbol
from neolith.icg_load import LoadStoreGenerator

# Zero page location used as a temporary pointer for indirect stores.
TEMP_PTR_ADDR = 0x80

_label_ids = count(1)


def _new_label(kind: str) -> Label:
    return Label(f"_{kind}_{next(_label_ids)}")


def copy_data_into_struct(
    gen: LoadStoreGenerator,
    init_values: Sequence[int],
    dest_var: Symbol,
    use_indirect: bool,
) -> None:
    """Copy initial values into a structure variable with a tight loop.

    The values are placed as data in the code, jumped over, and copied
    backwards into the destination with Y as the index. Values beyond the
    structure's members are ignored. With ``use_indirect`` the destination
    is reached through the pointer at the temporary zero page address.

    Raises ValueError when there are no values or the variable has no
    structure type.
    """
    if not init_values:
        raise ValueError("Initializer list is empty")
    if dest_var.user_type is None or not dest_var.user_type.members:
        raise ValueError(f"'{dest_var.name}' is not a structure variable")

    init_data = _new_label("data")
    init_copy = _new_label("code")
    loop_start = _new_label("loop")

    gen.jump(init_copy, "jump over data")

    gen.add_comment("Initializer data")
    gen.label(init_data)
    for value, member in zip(init_values, dest_var.user_type.members):
        gen.asm_data(value, member.base_size() > 1)

    gen.add_comment("Copy data to destination")
    gen.label(init_copy)
    gen.load_reg_const("Y", dest_var.struct_size())
    gen.label(loop_start)
    gen.emit(Mnemonic.LDA, AddrMode.ABY, init_data.name, None, ParamExt.NORMAL)
    if use_indirect:
        gen.emit(Mnemonic.STA, AddrMode.IY, TEMP_PTR_ADDR)
    else:
        gen.emit(Mnemonic.STA, AddrMode.ABY, dest_var.name, None, ParamExt.NORMAL)
    gen.emit(Mnemonic.DEY)
    gen.branch(Mnemonic.BPL, loop_start)