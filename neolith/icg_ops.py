"""Arithmetic, logic, comparison and read-modify-write instruction generators."""

from __future__ import annotations

from neolith.asm_code import X_OFFSET, AddrMode, Mnemonic, ParamExt
from neolith.common import num_to_str, struct_ref_comment
from neolith.icg_core import NOTHING, Instr, Symbol
from neolith.icg_load import LoadStoreGenerator

_TRANSFER_FROM_ACC = {"X": Mnemonic.TAX, "Y": Mnemonic.TAY}


class InstructionGenerator(LoadStoreGenerator):
    """The complete instruction generator: loads, stores and operations."""

    def _forget_acc(self) -> None:
        self.a_reg = NOTHING
        self.a_stored = NOTHING

    # -- unary operations -------------------------------------------------

    def not_(self) -> Instr:
        """Invert all bits of A."""
        return self.emit(Mnemonic.EOR, AddrMode.IMM, 0xFF)

    def not_bool(self) -> Instr:
        """Invert a boolean held in A."""
        return self.emit(Mnemonic.EOR, AddrMode.IMM, 0x01)

    def negate(self) -> None:
        """Two's complement negation of A."""
        self.emit(Mnemonic.EOR, AddrMode.IMM, 0xFF)
        self.emit(Mnemonic.CLC)
        self.emit(Mnemonic.ADC, AddrMode.IMM, 1)

    def pre_op(self, mne: Mnemonic) -> None:
        """Emit a preparatory single-byte instruction such as CLC or SEC."""
        if mne != Mnemonic.NONE:
            self.emit(mne)

    # -- binary operations ------------------------------------------------

    def op_high_byte(self, mne: Mnemonic, var_name: str | None) -> None:
        """Carry the operation into the high byte of a 16-bit value."""
        if mne == Mnemonic.ADC:
            self.emit(Mnemonic.BCC, AddrMode.REL, 3)
            self.emit(Mnemonic.INX)
        elif mne == Mnemonic.SBC:
            self.emit(Mnemonic.BCS, AddrMode.REL, 3)
            self.emit(Mnemonic.DEX)
        elif mne == Mnemonic.INC:
            if var_name is not None:
                self.emit(Mnemonic.BNE, AddrMode.REL, 4)
                self.emit(mne, AddrMode.ZP, var_name, None, ParamExt.PLUS_ONE)
            else:
                self.emit(Mnemonic.BNE, AddrMode.REL, 3)
                self.emit(Mnemonic.INX)

    def op_with_const(self, mne: Mnemonic, num: int, data_size: int) -> None:
        """Apply an operation with an immediate value."""
        self.emit(mne, AddrMode.IMM, num)
        if data_size > 1:
            self.op_high_byte(mne, None)
        self._forget_acc()

    def op_with_var(self, mne: Mnemonic, var_sym: Symbol, data_size: int) -> None:
        """Apply an operation with a variable (or constant symbol)."""
        name = var_sym.var_name()
        if var_sym.is_const:
            self.emit(mne, AddrMode.IMM, name, None, ParamExt.NORMAL)
        elif var_sym.is_param:
            self.op_with_param_var(mne, var_sym)
        else:
            self.emit(mne, AddrMode.ZP, name, None, ParamExt.NORMAL)
            if data_size > 1:
                self.op_high_byte(mne, name)

        if mne in (Mnemonic.INC, Mnemonic.DEC):
            # the variable changed in memory, not the accumulator
            self.clear_on_update(var_sym)
        else:
            self._forget_acc()

    def op_property_var(self, mne: Mnemonic, struct_sym: Symbol, prop_sym: Symbol) -> None:
        """Apply an operation with a structure member."""
        name = struct_sym.var_name()
        ofs = prop_sym.location & 0xFF
        self.emit(mne, struct_sym.addr_mode(), name, num_to_str(ofs), ParamExt.ADD).comment = (
            struct_ref_comment("structure ref", name, prop_sym.name)
        )
        self._forget_acc()

    def op_property_var_indexed(self, mne: Mnemonic, struct_sym: Symbol, prop_sym: Symbol) -> None:
        """Apply an operation with a member of a structure array element indexed by Y."""
        name = struct_sym.var_name()
        ofs = num_to_str(prop_sym.location & 0xFF)
        comment = struct_ref_comment("structure ref", name, prop_sym.name)
        if mne in (Mnemonic.INC, Mnemonic.DEC):
            # INC and DEC have no absolute,Y mode: go through X instead
            self.emit(Mnemonic.LDX, AddrMode.ABY, name, ofs, ParamExt.ADD).comment = comment
            self.emit(Mnemonic.INX if mne == Mnemonic.INC else Mnemonic.DEX)
            self.emit(Mnemonic.TXA)
            self.emit(Mnemonic.STA, AddrMode.ABY, name, ofs, ParamExt.ADD)
        else:
            self.emit(mne, AddrMode.ABY, name, ofs, ParamExt.ADD).comment = comment
        self._forget_acc()

    def op_indexed(self, mne: Mnemonic, var_sym: Symbol, index_sym: Symbol) -> None:
        """Apply an operation with an array element indexed by a variable in X."""
        self.emit(
            Mnemonic.LDX, index_sym.addr_mode(), index_sym.var_name(), None, ParamExt.NORMAL
        ).comment = "loading index var for array op"
        mode = AddrMode(var_sym.addr_mode() + X_OFFSET)
        self.emit(mne, mode, var_sym.var_name(), None, ParamExt.NORMAL).comment = (
            "op with data from array using index"
        )
        self._forget_acc()

    def op_indexed_with_offset(self, mne: Mnemonic, var_sym: Symbol, ofs: int) -> None:
        """Apply an operation with an array element indexed by Y plus an offset."""
        self.emit(mne, AddrMode.ABY, var_sym.var_name(), num_to_str(ofs), ParamExt.ADD).comment = (
            "op with data from array using index with offset"
        )
        self._forget_acc()

    def op_with_stack(self, mne: Mnemonic) -> None:
        """Apply an operation with the value on top of the stack, then drop it."""
        self.emit(Mnemonic.TSX, AddrMode.NONE, 0)
        self.emit(mne, AddrMode.ZPX, 1)
        self.emit(Mnemonic.INX, AddrMode.NONE, 0)
        self.emit(Mnemonic.TXS, AddrMode.NONE, 0)
        self._forget_acc()

    def move_acc_to_index(self, reg: str) -> None:
        """Copy A into X or Y.

        Raises ValueError for a register other than X or Y.
        """
        try:
            mne = _TRANSFER_FROM_ACC[reg]
        except KeyError:
            raise ValueError(f"Cannot move accumulator to register {reg!r}") from None
        self.emit(mne, AddrMode.NONE, 0)
        self.y_reg = NOTHING

    # -- memory increment / decrement -------------------------------------

    def inc_using_addr(self, base_sym: Symbol, ofs: int, size: int) -> None:
        """Increment a value in memory at an offset from a symbol."""
        mode = base_sym.addr_mode()
        name = base_sym.var_name()
        ofs_str = num_to_str(ofs)
        self.emit(Mnemonic.INC, mode, name, ofs_str, ParamExt.ADD)
        if size == 2:
            self.emit(Mnemonic.BNE, AddrMode.REL, 4)
            self.emit(Mnemonic.INC, mode, name, ofs_str, ParamExt.ADD | ParamExt.PLUS_ONE)

    def dec_using_addr(self, base_sym: Symbol, ofs: int, size: int) -> None:
        """Decrement a value in memory at an offset from a symbol."""
        mode = base_sym.addr_mode()
        name = base_sym.var_name()
        ofs_str = num_to_str(ofs)
        if size == 2:
            self.emit(Mnemonic.LDA, mode, name, ofs_str, ParamExt.ADD)
            self.emit(Mnemonic.BNE, AddrMode.REL, 4)
            self.emit(Mnemonic.DEC, mode, name, ofs_str, ParamExt.ADD | ParamExt.PLUS_ONE)
        self.emit(Mnemonic.DEC, mode, name, ofs_str, ParamExt.ADD)

    def op_with_offset(self, mne: Mnemonic, base_sym: Symbol, ofs: int) -> None:
        """Increment or decrement a byte at an offset; other operations emit nothing."""
        if mne == Mnemonic.INC:
            self.inc_using_addr(base_sym, ofs, 1)
        elif mne == Mnemonic.DEC:
            self.dec_using_addr(base_sym, ofs, 1)

    # -- shifts and additions ---------------------------------------------

    def _shift(self, mne: Mnemonic, var_sym: Symbol | None, count: int) -> None:
        if var_sym is not None:
            self.load_var(var_sym)
        for _ in range(count):
            self.emit(mne, AddrMode.ACC, 0)
        self._forget_acc()

    def shift_left(self, var_sym: Symbol | None, count: int) -> None:
        """Shift A (after loading ``var_sym`` if given) left ``count`` times."""
        self._shift(Mnemonic.ASL, var_sym, count)

    def shift_right(self, var_sym: Symbol | None, count: int) -> None:
        """Shift A (after loading ``var_sym`` if given) right ``count`` times."""
        self._shift(Mnemonic.LSR, var_sym, count)

    def _carry_into_x(self) -> None:
        self.emit(Mnemonic.BCC, AddrMode.REL, 3)
        self.emit(Mnemonic.INX)
        self._forget_acc()

    def add_to_int(self, var_sym: Symbol) -> None:
        """Add a byte variable to the 16-bit value in A/X."""
        self.emit(Mnemonic.CLC)
        if var_sym.is_param:
            self.op_with_param_var(Mnemonic.ADC, var_sym)
        else:
            self.emit(Mnemonic.ADC, AddrMode.ZP, var_sym.var_name(), None, ParamExt.NORMAL)
        self._carry_into_x()

    def add_offset_to_int(self, ofs: int) -> None:
        """Add a constant to the 16-bit value in A/X."""
        self.emit(Mnemonic.CLC)
        self.emit(Mnemonic.ADC, AddrMode.IMM, ofs)
        self._carry_into_x()

    def add_temp_var_to_int(self, addr: int) -> None:
        """Add the byte at a zero page address to the 16-bit value in A/X."""
        self.emit(Mnemonic.CLC)
        self.emit(Mnemonic.ADC, AddrMode.ZP, addr)
        self._carry_into_x()

    def add_addr(self, var_sym: Symbol) -> None:
        """Add the address of a variable to A, leaving the 16-bit result in A/X."""
        name = var_sym.var_name()
        self.emit(Mnemonic.CLC)
        self.emit(Mnemonic.ADC, AddrMode.IMM, name, None, ParamExt.LO)
        self.emit(Mnemonic.LDX, AddrMode.IMM, name, None, ParamExt.HI)
        self._carry_into_x()

    # -- comparisons ------------------------------------------------------

    def compare_const_name(self, name: str) -> Instr:
        """Compare A with a named constant."""
        return self.emit(Mnemonic.CMP, AddrMode.IMM, name, None, ParamExt.NORMAL)

    def compare_const(self, value: int) -> Instr:
        """Compare A with an immediate value."""
        return self.emit(Mnemonic.CMP, AddrMode.IMM, value)

    def compare_var(self, var_sym: Symbol) -> Instr:
        """Compare A with a variable, or with the value of a constant symbol."""
        if var_sym.is_const:
            return self.emit(Mnemonic.CMP, AddrMode.IMM, var_sym.const_value)
        return self.emit(Mnemonic.CMP, AddrMode.ZP, var_sym.var_name(), None, ParamExt.NORMAL)