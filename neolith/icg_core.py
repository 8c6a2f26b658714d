"""Instruction list, labels, symbols and the core of the instruction generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from neolith.asm_code import AddrMode, Mnemonic, ParamExt, instr_size


class RegLoad(Enum):
    """What a register is known to hold."""

    NONE = 0
    CONST = 1
    VAR = 2
    VAR_X2 = 3


@dataclass(frozen=True)
class RegisterUse:
    """Tracked contents of a register."""

    loaded_with: RegLoad = RegLoad.NONE
    const_value: int = 0
    var_sym: Symbol | None = None


NOTHING = RegisterUse()


class VarHint(Enum):
    """Register a variable (usually a parameter) is passed in."""

    NONE = 0
    A_REG = 1
    X_REG = 2
    Y_REG = 3


class Storage(Enum):
    """Where a variable lives."""

    ZEROPAGE = 1
    ABSOLUTE = 2
    STACK = 3
    REGISTER = 4


@dataclass(eq=False)
class Label:
    """A code or data label; ``link`` points to a label it was merged into."""

    name: str
    references: int = 0
    link: Label | None = None

    @property
    def has_been_referenced(self) -> bool:
        return self.references > 0


@dataclass(eq=False)
class Symbol:
    """A variable, constant, structure or function as seen by code generation."""

    name: str
    size: int = 1
    storage: Storage = Storage.ZEROPAGE
    hint: VarHint = VarHint.NONE
    location: int = 0
    is_const: bool = False
    is_param: bool = False
    is_pointer: bool = False
    const_value: int = 0
    array_size: int = 1
    user_type: Symbol | None = None
    members: list[Symbol] = field(default_factory=list)
    data: list[int] | None = None

    def var_name(self) -> str:
        """Name used for the symbol in assembly output."""
        return self.name

    def addr_mode(self) -> AddrMode:
        """Zero page or absolute, depending on where the symbol lives."""
        return AddrMode.ZP if self.storage == Storage.ZEROPAGE else AddrMode.ABS

    def base_size(self) -> int:
        """Size in bytes of one element (pointers take two bytes)."""
        return 2 if self.is_pointer else self.size

    def struct_size(self) -> int:
        """Size in bytes of the structure this symbol is or has as its type."""
        if self.members:
            return sum(member.base_size() * member.array_size for member in self.members)
        if self.user_type is not None:
            return self.user_type.struct_size()
        return 0


@dataclass(eq=False)
class Instr:
    """One generated instruction, data item or comment line."""

    mne: Mnemonic
    mode: AddrMode = AddrMode.NONE
    operand: int | str | None = None
    offset: str | None = None
    ext: ParamExt = ParamExt.NORMAL
    comment: str | None = None
    label: Label | None = None
    line_comment: str | None = None


@dataclass(eq=False)
class InstrBlock:
    """The instructions of one function."""

    name: str
    func_sym: Symbol | None = None
    instrs: list[Instr] = field(default_factory=list)

    @property
    def last_instr(self) -> Instr | None:
        return self.instrs[-1] if self.instrs else None

    def code_size(self) -> int:
        """Total size in bytes of the block's instructions."""
        return sum(instr_size(instr.mne, instr.mode) for instr in self.instrs)


def _is_main(func_sym: Symbol | None) -> bool:
    return func_sym is not None and func_sym.name == "main"


class CoreGenerator:
    """Builds instruction blocks while tracking what the registers hold."""

    def __init__(self) -> None:
        self.blocks: list[InstrBlock] = []
        self.block: InstrBlock | None = None
        self.pending_label: Label | None = None
        self.line_comment: str | None = None
        self.a_reg = NOTHING
        self.a_stored = NOTHING
        self.x_reg = NOTHING
        self.y_reg = NOTHING

    # -- instruction list -------------------------------------------------

    def _current_block(self) -> InstrBlock:
        if self.block is None:
            self.block = InstrBlock("")
            self.blocks.append(self.block)
        return self.block

    def emit(self, mne, mode=AddrMode.NONE, operand=None, offset=None, ext=ParamExt.NORMAL) -> Instr:
        """Append an instruction to the open block and return it.

        A pending label and line comment are attached to it. An unnamed
        block is opened when none is open.
        """
        instr = Instr(Mnemonic(mne), AddrMode(mode), operand, offset, ParamExt(ext))
        instr.label, self.pending_label = self.pending_label, None
        instr.line_comment, self.line_comment = self.line_comment, None
        self._current_block().instrs.append(instr)
        return instr

    def add_comment(self, comment: str) -> Instr:
        """Append a comment-only line to the code."""
        return self.emit(Mnemonic.NONE).__class__ and self._comment_line(comment)

    def _comment_line(self, comment: str) -> Instr:
        instr = self.emit(Mnemonic.NONE)
        instr.comment = comment
        return instr

    def _forget_registers(self) -> None:
        self.a_reg = NOTHING
        self.a_stored = NOTHING
        self.y_reg = NOTHING

    def reset(self) -> None:
        """Forget everything known about register contents."""
        self.a_reg = NOTHING
        self.a_stored = NOTHING
        self.x_reg = NOTHING
        self.y_reg = NOTHING
        self.line_comment = None

    def system_init_code(self) -> None:
        """Emit the start-up code that resets the stack."""
        self.emit(Mnemonic.CLD)
        self.emit(Mnemonic.LDX, AddrMode.IMM, 0xFF).comment = "Initialize the Stack"
        self.emit(Mnemonic.TXS)

    # -- functions --------------------------------------------------------

    def start_function(self, label: Label, func_sym: Symbol) -> InstrBlock:
        """Open a new block for a function; main also gets the start-up code."""
        self.block = InstrBlock(label.name, func_sym)
        self.blocks.append(self.block)
        self.label(label)
        self._forget_registers()
        if _is_main(func_sym):
            self.system_init_code()
        return self.block

    def end_function(self) -> InstrBlock:
        """Close the open function block, adding an RTS except for main."""
        block = self._current_block()
        if not _is_main(block.func_sym):
            last = block.last_instr
            if last is None or last.mne != Mnemonic.RTS:
                self.return_()
        self.block = None
        return block

    # -- register tracking ------------------------------------------------

    def clear_on_update(self, var_sym: Symbol) -> None:
        """Forget registers holding a variable that has just been changed."""
        name = var_sym.name

        def holds(use: RegisterUse, *kinds: RegLoad) -> bool:
            return use.loaded_with in kinds and use.var_sym is not None and use.var_sym.name == name

        if holds(self.a_reg, RegLoad.VAR):
            self.a_reg = NOTHING
        if holds(self.a_stored, RegLoad.VAR):
            self.a_stored = NOTHING
        if holds(self.x_reg, RegLoad.VAR):
            self.x_reg = NOTHING
        if holds(self.y_reg, RegLoad.VAR, RegLoad.VAR_X2):
            self.y_reg = NOTHING

    def preload(self, var_sym: Symbol) -> None:
        """Record that a hinted variable already sits in its register.

        Raises ValueError when the variable has no register hint.
        """
        use = RegisterUse(RegLoad.VAR, var_sym=var_sym)
        if var_sym.hint == VarHint.A_REG:
            self.a_reg = use
        elif var_sym.hint == VarHint.X_REG:
            self.x_reg = use
        elif var_sym.hint == VarHint.Y_REG:
            self.y_reg = use
        else:
            raise ValueError(f"Cannot preload '{var_sym.name}' using hint")

    def label(self, label: Label) -> None:
        """Place a label at the current position in the code."""
        current = self.pending_label
        if current is not None and not label.has_been_referenced:
            label.link = current
        else:
            if label.has_been_referenced and current is not None and current.has_been_referenced:
                # keep both labels until they can be consolidated
                self.emit(Mnemonic.NONE)
            elif self.pending_label is not None:
                self.pending_label.link = label
            self.pending_label = label
        self._forget_registers()

    def tag(self, reg: str, var_sym: Symbol) -> None:
        """Record that a register holds a variable."""
        use = RegisterUse(RegLoad.VAR, var_sym=var_sym)
        if reg == "A":
            self.a_reg = use
        elif reg == "X":
            self.x_reg = use
        elif reg == "Y":
            self.y_reg = use

    def is_current_tag(self, reg: str, var_sym: Symbol) -> bool:
        """Tell whether a register is tagged with the variable."""
        use = {"A": self.a_reg, "X": self.x_reg, "Y": self.y_reg}.get(reg)
        return use is not None and use.var_sym is var_sym

    def last_instr_is_return(self) -> bool:
        """Tell whether the last instruction emitted is an RTS."""
        last = self._current_block().last_instr
        return last is not None and last.mne == Mnemonic.RTS

    # -- control flow -----------------------------------------------------

    @staticmethod
    def _target(label: Label) -> Label:
        target = label.link if label.link is not None else label
        target.references += 1
        return target

    def branch(self, mne: Mnemonic, label: Label) -> Instr:
        """Emit a relative branch to a label."""
        target = self._target(label)
        return self.emit(mne, AddrMode.REL, target.name)

    def jump(self, label: Label, comment: str | None) -> Instr:
        """Emit an absolute jump to a label."""
        target = self._target(label)
        instr = self.emit(Mnemonic.JMP, AddrMode.ABS, target.name)
        instr.comment = comment
        return instr

    def call(self, func_name: str) -> Instr:
        """Emit a subroutine call; the call clobbers A and Y."""
        instr = self.emit(Mnemonic.JSR, AddrMode.ABS, func_name)
        self._forget_registers()
        return instr

    def return_(self) -> Instr:
        return self.emit(Mnemonic.RTS)

    def push_acc(self) -> Instr:
        return self.emit(Mnemonic.PHA)

    def pull_acc(self) -> Instr:
        return self.emit(Mnemonic.PLA)

    def nop(self) -> Instr:
        return self.emit(Mnemonic.NOP)

    def asm_data(self, value: int, is_word: bool) -> Instr:
        """Emit an inline data byte or word."""
        mne = Mnemonic.DATA_WORD if is_word else Mnemonic.DATA
        return self.emit(mne, AddrMode.NONE, value)