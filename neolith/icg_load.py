"""Load and store instruction generators with register-use tracking."""

from __future__ import annotations

from dataclasses import replace

from neolith.asm_code import Y_OFFSET, AddrMode, Mnemonic, ParamExt
from neolith.common import num_to_str, struct_ref_comment
from neolith.icg_core import NOTHING, CoreGenerator, Instr, RegisterUse, RegLoad, Symbol, VarHint

_LOAD_FOR_REG = {"A": Mnemonic.LDA, "X": Mnemonic.LDX, "Y": Mnemonic.LDY}


class LoadStoreGenerator(CoreGenerator):
    """Emits loads into and stores from the A, X and Y registers."""

    # -- loads ------------------------------------------------------------

    def load_from_array(self, array_sym: Symbol, index: int, dest_is_pointer: bool) -> None:
        """Load an array element at a constant index (two bytes for pointers)."""
        self.a_reg = NOTHING
        mode = array_sym.addr_mode()
        name = array_sym.name
        if dest_is_pointer:
            ofs = index * 2
            self.emit(Mnemonic.LDA, mode, name, str(ofs), ParamExt.ADD)
            self.emit(Mnemonic.LDX, mode, name, str(ofs + 1), ParamExt.ADD)
        else:
            self.emit(Mnemonic.LDA, mode, name, str(index), ParamExt.ADD)

    def load_const(self, value: int, size: int) -> None:
        """Load a constant, skipping the load when A already holds it."""
        if self.a_reg.loaded_with == RegLoad.CONST and self.a_reg.const_value == value:
            return
        self.emit(Mnemonic.LDA, AddrMode.IMM, value & 0xFF)
        if size == 2:
            self.emit(Mnemonic.LDX, AddrMode.IMM, value >> 8)
        self.a_reg = RegisterUse(RegLoad.CONST, const_value=value)

    def op_with_param_var(self, mne: Mnemonic, var_sym: Symbol) -> Instr:
        """Apply an operation to a parameter passed on the stack."""
        self.emit(Mnemonic.TSX).comment = "prepare to read param var"
        return self.emit(mne, AddrMode.ABX, var_sym.var_name(), None, ParamExt.NORMAL)

    def load_byte_var(self, var_sym: Symbol, ofs: int) -> None:
        """Load one byte of a variable at an offset."""
        mode = AddrMode.ZP if ofs < 0x100 else AddrMode.ABS
        self.emit(Mnemonic.LDA, mode, var_sym.var_name(), num_to_str(ofs), ParamExt.ADD)
        self.a_reg = NOTHING

    def load_var(self, var_sym: Symbol) -> None:
        """Load a variable into A (and X for two-byte values), unless already there."""
        if self.a_reg.loaded_with == RegLoad.VAR and self.a_reg.var_sym is var_sym:
            return
        if self.a_stored.loaded_with == RegLoad.VAR and self.a_stored.var_sym is var_sym:
            self.a_reg = self.a_stored
            return

        name = var_sym.var_name()
        if var_sym.is_const:
            self.emit(Mnemonic.LDA, AddrMode.IMM, name, None, ParamExt.LO)
            if var_sym.base_size() == 2:
                self.emit(Mnemonic.LDX, AddrMode.IMM, name, None, ParamExt.HI)
        elif var_sym.is_param:
            if var_sym.hint == VarHint.X_REG:
                self.emit(Mnemonic.TXA)
            elif var_sym.hint == VarHint.Y_REG:
                self.emit(Mnemonic.TYA)
            elif var_sym.hint != VarHint.A_REG:
                self.op_with_param_var(Mnemonic.LDA, var_sym)
        else:
            self.emit(Mnemonic.LDA, AddrMode.ZP, name, None, ParamExt.NORMAL)
            if var_sym.base_size() == 2:
                self.emit(Mnemonic.LDX, AddrMode.ZP, name, None, ParamExt.PLUS_ONE)

        self.a_stored = replace(self.a_stored, loaded_with=RegLoad.NONE)
        self.a_reg = RegisterUse(RegLoad.VAR, var_sym=var_sym)

    def is_last_y_use(self, var_sym: Symbol, size: int) -> bool:
        """Tell whether Y already holds the index variable (doubled when size is 2)."""
        kind = RegLoad.VAR_X2 if size == 2 else RegLoad.VAR
        held = self.y_reg.var_sym
        return self.y_reg.loaded_with == kind and held is not None and held.name == var_sym.name

    def load_index_var(self, var_sym: Symbol, size: int) -> None:
        """Load an array index into Y, doubled for two-byte elements."""
        if self.is_last_y_use(var_sym, size):
            return
        name = var_sym.var_name()
        if size == 2:
            self.emit(Mnemonic.LDA, AddrMode.ZP, name, None, ParamExt.NORMAL).comment = "load array index"
            self.emit(Mnemonic.ASL, AddrMode.ACC, 0)
            self.emit(Mnemonic.TAY)
            self.y_reg = RegisterUse(RegLoad.VAR_X2, var_sym=var_sym)
            self.a_reg = NOTHING
        else:
            if var_sym.is_param:
                self.op_with_param_var(Mnemonic.LDY, var_sym)
            else:
                self.emit(Mnemonic.LDY, AddrMode.ZP, name, None, ParamExt.NORMAL).comment = "load array index"
            self.y_reg = RegisterUse(RegLoad.VAR, var_sym=var_sym)

    def load_addr(self, var_sym: Symbol) -> None:
        """Load the address of a variable into A (low) and X (high)."""
        name = var_sym.var_name()
        self.emit(Mnemonic.LDA, AddrMode.IMM, name, None, ParamExt.LO)
        self.emit(Mnemonic.LDX, AddrMode.IMM, name, None, ParamExt.HI)
        self.a_reg = RegisterUse(RegLoad.VAR, var_sym=var_sym)

    def load_addr_plus_index(self, var_sym: Symbol, index: int) -> None:
        """Load the address of a variable plus a byte index into A and X."""
        name = var_sym.var_name()
        index_str = num_to_str(index & 0xFF)
        self.emit(Mnemonic.LDA, AddrMode.IMM, name, index_str, ParamExt.ADD | ParamExt.LO)
        self.emit(Mnemonic.LDX, AddrMode.IMM, name, index_str, ParamExt.ADD | ParamExt.HI)
        self.a_reg = NOTHING

    def load_indirect(self, var_sym: Symbol, dest_size: int) -> None:
        """Load through a pointer variable indexed by Y."""
        name = var_sym.var_name()
        if dest_size == 2:
            self.emit(Mnemonic.INY).comment = "load indirect - high byte first"
            self.emit(Mnemonic.LDA, AddrMode.IY, name, None, ParamExt.NORMAL).comment = (
                "load from pointer location using index"
            )
            self.emit(Mnemonic.TAX)
            self.emit(Mnemonic.DEY)
        self.emit(Mnemonic.LDA, AddrMode.IY, name, None, ParamExt.NORMAL).comment = (
            "load from pointer location using index"
        )
        self.a_reg = NOTHING

    def load_indexed(self, var_sym: Symbol) -> None:
        """Load an array element indexed by Y."""
        name = var_sym.var_name()
        self.emit(Mnemonic.LDA, AddrMode.ABY, name, None, ParamExt.NORMAL).comment = "load from array using index"
        if var_sym.base_size() > 1:
            self.emit(Mnemonic.LDX, AddrMode.ABY, name, None, ParamExt.PLUS_ONE)
        self.a_reg = NOTHING

    def load_indexed_with_offset(self, var_sym: Symbol, ofs: int, var_size: int) -> None:
        """Load an array element indexed by Y plus a constant offset."""
        name = var_sym.var_name()
        self.emit(Mnemonic.LDA, AddrMode.ABY, name, num_to_str(ofs), ParamExt.ADD).comment = (
            "load from array using index with offset"
        )
        if var_size == 2:
            self.emit(Mnemonic.LDX, AddrMode.ABY, name, num_to_str(ofs + 1), ParamExt.ADD)
        self.a_reg = NOTHING

    def load_property_var(self, struct_sym: Symbol, prop_sym: Symbol) -> None:
        """Load a structure member."""
        name = struct_sym.var_name()
        mode = struct_sym.addr_mode()
        ofs = prop_sym.location & 0xFF
        self.emit(Mnemonic.LDA, mode, name, num_to_str(ofs), ParamExt.ADD).comment = struct_ref_comment(
            "load structure ref", name, prop_sym.name
        )
        if prop_sym.base_size() == 2:
            self.emit(Mnemonic.LDX, mode, name, num_to_str(ofs + 1), ParamExt.ADD)
        self.a_reg = NOTHING

    def load_reg_const(self, reg: str, value: int) -> None:
        """Load a constant into a register, skipping loads A or Y already hold.

        Raises ValueError for a register other than A, X or Y.
        """
        if reg == "A":
            if not (self.a_reg.loaded_with == RegLoad.CONST and self.a_reg.const_value == value):
                self.emit(Mnemonic.LDA, AddrMode.IMM, value)
                self.a_reg = RegisterUse(RegLoad.CONST, const_value=value)
        elif reg == "X":
            self.emit(Mnemonic.LDX, AddrMode.IMM, value)
        elif reg == "Y":
            if not (self.y_reg.loaded_with == RegLoad.CONST and self.y_reg.const_value == value):
                self.emit(Mnemonic.LDY, AddrMode.IMM, value)
                self.y_reg = RegisterUse(RegLoad.CONST, const_value=value)
        else:
            raise ValueError(f"Unknown register: {reg!r}")

    def load_reg_var(self, var_sym: Symbol, reg: str) -> None:
        """Load a variable into a register.

        Raises ValueError for a register other than A, X or Y.
        """
        try:
            mne = _LOAD_FOR_REG[reg]
        except KeyError:
            raise ValueError(f"Unknown register: {reg!r}") from None
        mode = AddrMode.IMM if var_sym.is_const else var_sym.addr_mode()
        self.emit(mne, mode, var_sym.var_name(), None, ParamExt.NORMAL)
        if reg == "A":
            self.a_reg = NOTHING

    def load_pointer_addr(self, var_sym: Symbol) -> None:
        """Push the address of a variable onto the stack, low byte first."""
        self.line_comment = var_sym.name
        name = var_sym.var_name()
        self.emit(Mnemonic.LDA, AddrMode.IMM, name, None, ParamExt.LO).comment = "load pointer address"
        self.push_acc()
        self.emit(Mnemonic.LDA, AddrMode.IMM, name, None, ParamExt.HI)
        self.push_acc()
        self.a_reg = replace(self.a_reg, loaded_with=RegLoad.NONE)

    def adjust_stack(self, ofs: int) -> None:
        """Drop ``ofs`` bytes from the stack."""
        self.emit(Mnemonic.TSX)
        for count in range(ofs):
            self.emit(Mnemonic.INX, AddrMode.NONE, count)
        self.emit(Mnemonic.TXS)

    # -- stores -----------------------------------------------------------

    def store_to_addr(self, ofs: int, size: int) -> None:
        """Store A (and X for two bytes) to a fixed address."""
        mode = AddrMode.ZP if ofs < 0x100 else AddrMode.ABS
        self.emit(Mnemonic.STA, mode, ofs)
        if size == 2:
            self.emit(Mnemonic.STX, mode, ofs + 1)

    def store_var_offset(self, var_sym: Symbol, ofs: int, dest_size: int) -> None:
        """Store to a variable at a constant offset (through the pointer for struct pointers)."""
        name = var_sym.var_name()
        if var_sym.is_pointer and var_sym.user_type is not None:
            self.load_reg_const("Y", ofs)
            self.emit(Mnemonic.STA, AddrMode.IY, name, None, ParamExt.NORMAL)
            if dest_size == 2:
                self.emit(Mnemonic.TXA)
                self.emit(Mnemonic.INY)
                self.emit(Mnemonic.STA, AddrMode.IY, name, None, ParamExt.NORMAL)
            return
        mode = var_sym.addr_mode()
        ext = ParamExt.LO if mode == AddrMode.ZP else ParamExt.NORMAL
        if dest_size == 2:
            self.emit(Mnemonic.STX, mode, name, num_to_str(ofs), ext | ParamExt.ADD | ParamExt.PLUS_ONE)
        self.emit(Mnemonic.STA, mode, name, num_to_str(ofs), ext | ParamExt.ADD)

    def store_var_indexed(self, var_sym: Symbol) -> None:
        """Store to an array element (or through a pointer) indexed by Y."""
        name = var_sym.var_name()
        if var_sym.is_pointer:
            self.emit(Mnemonic.STA, AddrMode.IY, name, None, ParamExt.NORMAL)
            return
        self.emit(Mnemonic.STA, AddrMode.ABY, name, None, ParamExt.NORMAL)
        if var_sym.base_size() == 2:
            mode = AddrMode(var_sym.addr_mode() + Y_OFFSET)
            if mode == AddrMode.ZPY:
                self.emit(Mnemonic.STX, mode, name, None, ParamExt.PLUS_ONE | ParamExt.LO)
            else:
                self.emit(Mnemonic.TXA)
                self.emit(Mnemonic.STA, mode, name, None, ParamExt.PLUS_ONE)

    def store_var_sym(self, var_sym: Symbol) -> None:
        """Store A (and X) to a variable, remembering that A now holds it."""
        a_unknown = self.a_reg.loaded_with == RegLoad.NONE
        self.clear_on_update(var_sym)
        name = var_sym.var_name()
        self.emit(Mnemonic.STA, AddrMode.ZP, name, None, ParamExt.NORMAL)
        if var_sym.base_size() == 2:
            self.emit(Mnemonic.STX, AddrMode.ZP, name, None, ParamExt.PLUS_ONE)
        if a_unknown:
            self.a_reg = RegisterUse(RegLoad.VAR, var_sym=var_sym)
        self.a_stored = RegisterUse(RegLoad.VAR, var_sym=var_sym)

    def store_indexed_with_offset(self, var_sym: Symbol, ofs: int, var_size: int) -> None:
        """Store to an array element indexed by Y plus a constant offset."""
        name = var_sym.var_name()
        self.emit(Mnemonic.STA, AddrMode.ABY, name, num_to_str(ofs), ParamExt.ADD).comment = (
            "store to array using index with offset"
        )
        if var_size == 2:
            self.emit(Mnemonic.TXA)
            self.emit(Mnemonic.STA, AddrMode.ABY, name, num_to_str(ofs), ParamExt.PLUS_ONE | ParamExt.ADD)