"""Multiplication code generation, with step macros and lookup tables."""

from __future__ import annotations

from collections.abc import MutableMapping

from neolith.asm_code import AddrMode, Mnemonic, ParamExt
from neolith.icg_core import Symbol
from neolith.icg_ops import InstructionGenerator

# Zero page bytes used as the multiply accumulator.
ACC_MUL_ADDR = 0x80

# Lookup tables are only built for multipliers below this value.
LOOKUP_LIMIT = 64

_N, _ASL, _ADC, _SBC = Mnemonic.NOP, Mnemonic.ASL, Mnemonic.ADC, Mnemonic.SBC

# Instruction steps that multiply A by 1..16.
_MULTIPLIER_STEPS: tuple[tuple[Mnemonic, ...], ...] = (
    (_N, _N, _N, _N, _N),            # 1
    (_ASL, _N, _N, _N, _N),          # 2
    (_ASL, _ADC, _N, _N, _N),        # 3
    (_ASL, _ASL, _N, _N, _N),        # 4
    (_ASL, _ASL, _ADC, _N, _N),      # 5
    (_ASL, _ADC, _ASL, _N, _N),      # 6
    (_ASL, _ASL, _ASL, _SBC, _N),    # 7
    (_ASL, _ASL, _ASL, _N, _N),      # 8
    (_ASL, _ASL, _ASL, _ADC, _N),    # 9
    (_ASL, _ASL, _ADC, _ASL, _N),    # 10
    (_ASL, _ASL, _ADC, _ASL, _ADC),  # 11
    (_ASL, _ADC, _ASL, _ASL, _N),    # 12
    (_ASL, _ADC, _ASL, _ASL, _ADC),  # 13
    (_ASL, _ASL, _ASL, _SBC, _ASL),  # 14
    (_ASL, _ASL, _ASL, _ASL, _SBC),  # 15
    (_ASL, _ASL, _ASL, _ASL, _N),    # 16
)

_POWERS_OF_2 = frozenset(1 << bit for bit in range(4, 16))


def is_power_of_2(num: int) -> bool:
    """Tell whether num is a power of two from 16 to 32768."""
    return num in _POWERS_OF_2


def _table_name(value: int) -> str:
    return f"QL_{value}"


class Multiplier:
    """Emits multiplication code through an instruction generator."""

    def __init__(self, gen: InstructionGenerator, symbols: MutableMapping[str, Symbol]) -> None:
        self.gen = gen
        self.symbols = symbols
        self._tables: set[int] = set()

    # -- lookup tables ----------------------------------------------------

    def add_lookup_table(self, value: int) -> Symbol:
        """Create the constant table ``QL_<value>`` of multiples of value.

        Raises ValueError unless 1 <= value < 64.
        """
        if not 1 <= value < LOOKUP_LIMIT:
            raise ValueError(f"Lookup tables need a multiplier from 1 to {LOOKUP_LIMIT - 1}")
        data = [index * value for index in range(256 // value)]
        name = _table_name(value)
        table = Symbol(name, size=1, is_const=True, array_size=len(data), data=data)
        self.symbols[name] = table
        self._tables.add(value)
        return table

    def has_lookup_table(self, value: int) -> bool:
        """Tell whether a lookup table exists for the multiplier."""
        return value in self._tables

    def _multiply_with_table(self, var_sym: Symbol, multiplier: int) -> None:
        self.gen.load_index_var(var_sym, 1)
        table = self.symbols.get(_table_name(multiplier))
        if table is not None:
            self.gen.load_indexed(table)

    # -- building blocks --------------------------------------------------

    def load_var_for_multiply(self, var_sym: Symbol) -> None:
        """Load the variable to be multiplied into A."""
        mode = var_sym.addr_mode()
        if var_sym.is_param:
            self.gen.emit(Mnemonic.TSX)
            mode = AddrMode.ABX
        self.gen.emit(Mnemonic.LDA, mode, var_sym.var_name(), None, ParamExt.NORMAL)

    def _generic_multiply_with_const(self, multiplier: int) -> None:
        gen = self.gen
        gen.emit(Mnemonic.STA, AddrMode.ZP, ACC_MUL_ADDR)
        gen.emit(Mnemonic.LDA, AddrMode.IMM, 0)
        gen.emit(Mnemonic.LDX, AddrMode.IMM, 9)
        gen.emit(Mnemonic.LSR)
        gen.emit(Mnemonic.ROR, AddrMode.ZP, ACC_MUL_ADDR)
        gen.emit(Mnemonic.BCC, AddrMode.REL, 4)
        # carry is set here, so adding multiplier-1 adds the multiplier
        gen.emit(Mnemonic.ADC, AddrMode.IMM, multiplier - 1)
        gen.emit(Mnemonic.DEX)
        gen.emit(Mnemonic.BNE, AddrMode.REL, -8).comment = "Branch back to start of multiply loop"
        gen.emit(Mnemonic.TAX).comment = "Move high order byte into X"
        gen.emit(Mnemonic.LDA, AddrMode.ZP, ACC_MUL_ADDR)

    def _multiply_by_var(self, var_sym2: Symbol) -> None:
        gen = self.gen
        mode = var_sym2.addr_mode()
        is_zp = mode == AddrMode.ZP
        gen.emit(Mnemonic.LDA, AddrMode.IMM, 0)
        gen.emit(Mnemonic.LDX, AddrMode.IMM, 9)
        gen.emit(Mnemonic.LSR)
        gen.emit(Mnemonic.ROR, AddrMode.ZP, ACC_MUL_ADDR)
        gen.emit(Mnemonic.BCC, AddrMode.REL, 5 if is_zp else 6)
        gen.emit(Mnemonic.CLC)
        gen.emit(Mnemonic.ADC, mode, var_sym2.var_name(), None, ParamExt.NORMAL)
        gen.emit(Mnemonic.DEX)
        gen.emit(Mnemonic.BNE, AddrMode.REL, -9 if is_zp else -10).comment = (
            "Branch back to start of multiply loop"
        )
        gen.emit(Mnemonic.TAX).comment = "Move high order byte into X"
        gen.emit(Mnemonic.LDA, AddrMode.ZP, ACC_MUL_ADDR)

    def _step_multiply_with_const(self, var_sym: Symbol, multiplier: int) -> None:
        if multiplier > len(_MULTIPLIER_STEPS):
            return
        name = var_sym.var_name()
        mode = AddrMode.ABX if var_sym.is_param else var_sym.addr_mode()
        self.gen.emit(Mnemonic.CLC, AddrMode.NONE, 0)
        for step in _MULTIPLIER_STEPS[multiplier - 1]:
            if step in (Mnemonic.ADC, Mnemonic.SBC):
                self.gen.emit(Mnemonic.SEC if step == Mnemonic.SBC else Mnemonic.CLC)
                self.gen.emit(step, mode, name, None, ParamExt.NORMAL)
            elif step == Mnemonic.ASL:
                self.gen.emit(Mnemonic.ASL)

    def _multiply_power_of_2(self, multiplier: int) -> None:
        while multiplier := multiplier >> 1:
            self.gen.emit(Mnemonic.ASL)

    # -- public entry points ----------------------------------------------

    def multiply_var_with_var(self, var_sym: Symbol, var_sym2: Symbol) -> None:
        """Multiply two byte variables; the 16-bit result ends in A (low) and X (high)."""
        self.load_var_for_multiply(var_sym)
        self.gen.emit(Mnemonic.STA, AddrMode.ZP, ACC_MUL_ADDR)
        self._multiply_by_var(var_sym2)

    def multiply_expr_with_var(self, var_loc: int, var_sym2: Symbol) -> None:
        """Multiply the evaluated expression in A by a variable."""
        self.gen.emit(Mnemonic.STA, AddrMode.ZP, ACC_MUL_ADDR)
        self._multiply_by_var(var_sym2)

    def multiply_var_with_const(self, var_sym: Symbol, multiplier: int) -> None:
        """Multiply a variable by a constant, choosing the cheapest method.

        Raises ValueError for a multiplier below 1.
        """
        if multiplier < 1:
            raise ValueError("Multiplier must be positive")
        self.gen.add_comment("Start of Multiplication")
        if multiplier < LOOKUP_LIMIT and self.has_lookup_table(multiplier):
            self._multiply_with_table(var_sym, multiplier)
        elif multiplier <= len(_MULTIPLIER_STEPS):
            self.load_var_for_multiply(var_sym)
            self._step_multiply_with_const(var_sym, multiplier)
        elif is_power_of_2(multiplier):
            self.load_var_for_multiply(var_sym)
            self._multiply_power_of_2(multiplier)
        else:
            self.load_var_for_multiply(var_sym)
            self._generic_multiply_with_const(multiplier)
        self.gen.add_comment("End of Multiplication")

    def multiply_with_const(self, multiplier: int) -> None:
        """Multiply the value in A by a constant."""
        self.gen.add_comment("Start of Multiplication Acc with Const")
        self._generic_multiply_with_const(multiplier)
        self.gen.add_comment("End of Multiplication")