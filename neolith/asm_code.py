"""6502 mnemonics, addressing modes and the opcode table."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, IntFlag


class Mnemonic(IntEnum):
    """Instruction mnemonics, plus pseudo-ops for inline data."""

    NONE = 0
    ADC = 1
    AND = 2
    ASL = 3
    BCC = 4
    BCS = 5
    BEQ = 6
    BIT = 7
    BMI = 8
    BNE = 9
    BPL = 10
    BRK = 11
    BVC = 12
    BVS = 13
    CLC = 14
    CLD = 15
    CLI = 16
    CLV = 17
    CMP = 18
    CPX = 19
    CPY = 20
    DEC = 21
    DEX = 22
    DEY = 23
    EOR = 24
    INC = 25
    INX = 26
    INY = 27
    JMP = 28
    JSR = 29
    LDA = 30
    LDX = 31
    LDY = 32
    LSR = 33
    NOP = 34
    ORA = 35
    PHA = 36
    PHP = 37
    PLA = 38
    PLP = 39
    ROL = 40
    ROR = 41
    RTI = 42
    RTS = 43
    SBC = 44
    SEC = 45
    SED = 46
    SEI = 47
    STA = 48
    STX = 49
    STY = 50
    TAX = 51
    TAY = 52
    TSX = 53
    TXA = 54
    TXS = 55
    TYA = 56
    # undocumented opcodes
    DCP = 57
    LAX = 58
    # data placed in the middle of code (inline assembly only)
    DATA = 59
    DATA_WORD = 60


class AddrMode(IntEnum):
    """Addressing modes; values 16 and up mark incomplete parser information."""

    NONE = 0
    ACC = 1
    IMM = 2
    ZP = 3
    ZPX = 4
    ZPY = 5
    ABS = 6
    ABX = 7
    ABY = 8
    IX = 9
    IY = 10
    IND = 11
    REL = 12
    UNK_M = 16
    UNK_MX = 17
    UNK_MY = 18


# Offsets added to ZP/ABS to get the X- or Y-indexed variant of the mode.
X_OFFSET = 1
Y_OFFSET = 2
# Bit set on modes where it is not yet known whether zero page or absolute applies.
INCOMPLETE_BIT = 16


class ParamExt(IntFlag):
    """How an instruction's operand is to be extended when written out."""

    NORMAL = 0
    LO = 0x1
    HI = 0x2
    ADD = 0x4
    PLUS_ONE = 0x10


@dataclass(frozen=True)
class AddressModeInfo:
    """Size, base cycle count and operand format of an addressing mode."""

    name: str
    mode: AddrMode
    instr_size: int
    cycles: int
    format: str


@dataclass(frozen=True)
class OpcodeEntry:
    """One machine opcode: mnemonic and mode mapped to byte value and cycles."""

    mne: Mnemonic
    mode: AddrMode
    opcode: int
    cycles: int


# name, mnemonic, single-byte (no operand)
_MNEMONIC_TABLE: tuple[tuple[str, Mnemonic, bool], ...] = (
    ("", Mnemonic.NONE, False),
    ("ADC", Mnemonic.ADC, False),
    ("AND", Mnemonic.AND, False),
    ("ASL", Mnemonic.ASL, False),
    ("BCC", Mnemonic.BCC, False),
    ("BCS", Mnemonic.BCS, False),
    ("BEQ", Mnemonic.BEQ, False),
    ("BIT", Mnemonic.BIT, False),
    ("BMI", Mnemonic.BMI, False),
    ("BNE", Mnemonic.BNE, False),
    ("BPL", Mnemonic.BPL, False),
    ("BRK", Mnemonic.BRK, True),
    ("BVC", Mnemonic.BVC, False),
    ("BVS", Mnemonic.BVS, False),
    ("CLC", Mnemonic.CLC, True),
    ("CLD", Mnemonic.CLD, True),
    ("CLI", Mnemonic.CLI, True),
    ("CLV", Mnemonic.CLV, True),
    ("CMP", Mnemonic.CMP, False),
    ("CPX", Mnemonic.CPX, False),
    ("CPY", Mnemonic.CPY, False),
    ("DEC", Mnemonic.DEC, False),
    ("DEX", Mnemonic.DEX, True),
    ("DEY", Mnemonic.DEY, True),
    ("EOR", Mnemonic.EOR, False),
    ("INC", Mnemonic.INC, False),
    ("INX", Mnemonic.INX, True),
    ("INY", Mnemonic.INY, True),
    ("JMP", Mnemonic.JMP, False),
    ("JSR", Mnemonic.JSR, False),
    ("LDA", Mnemonic.LDA, False),
    ("LDX", Mnemonic.LDX, False),
    ("LDY", Mnemonic.LDY, False),
    ("LSR", Mnemonic.LSR, False),
    ("NOP", Mnemonic.NOP, True),
    ("ORA", Mnemonic.ORA, False),
    ("PHA", Mnemonic.PHA, True),
    ("PHP", Mnemonic.PHP, True),
    ("PLA", Mnemonic.PLA, True),
    ("PLP", Mnemonic.PLP, True),
    ("ROL", Mnemonic.ROL, False),
    ("ROR", Mnemonic.ROR, False),
    ("RTI", Mnemonic.RTI, True),
    ("RTS", Mnemonic.RTS, True),
    ("SBC", Mnemonic.SBC, False),
    ("SEC", Mnemonic.SEC, True),
    ("SED", Mnemonic.SED, True),
    ("SEI", Mnemonic.SEI, True),
    ("STA", Mnemonic.STA, False),
    ("STX", Mnemonic.STX, False),
    ("STY", Mnemonic.STY, False),
    ("TAX", Mnemonic.TAX, True),
    ("TAY", Mnemonic.TAY, True),
    ("TSX", Mnemonic.TSX, True),
    ("TXA", Mnemonic.TXA, True),
    ("TXS", Mnemonic.TXS, True),
    ("TYA", Mnemonic.TYA, True),
    ("DCP", Mnemonic.DCP, False),
    ("LAX", Mnemonic.LAX, False),
    ("byte", Mnemonic.DATA, False),
    ("word", Mnemonic.DATA_WORD, False),
)

_MNEMONIC_NAMES = {code: name for name, code, _ in _MNEMONIC_TABLE}
_SINGLE_BYTE = {code: single for _, code, single in _MNEMONIC_TABLE}

_ADDRESS_MODES: dict[AddrMode, AddressModeInfo] = {
    info.mode: info
    for info in (
        # cycles = 0 where the count depends on the instruction
        AddressModeInfo("", AddrMode.NONE, 1, 0, ""),
        AddressModeInfo("A", AddrMode.ACC, 1, 2, ""),
        AddressModeInfo("IMM", AddrMode.IMM, 2, 2, "#%s"),
        AddressModeInfo("ZP", AddrMode.ZP, 2, 0, "%s"),
        AddressModeInfo("ZPX", AddrMode.ZPX, 2, 0, "%s,x"),
        AddressModeInfo("ZPY", AddrMode.ZPY, 2, 0, "%s,y"),
        AddressModeInfo("ABS", AddrMode.ABS, 3, 0, "%s"),
        AddressModeInfo("ABX", AddrMode.ABX, 3, 0, "%s,x"),
        AddressModeInfo("ABY", AddrMode.ABY, 3, 0, "%s,y"),
        AddressModeInfo("IX", AddrMode.IX, 2, 0, "(%s,x)"),
        AddressModeInfo("IY", AddrMode.IY, 2, 0, "(%s),y"),
        AddressModeInfo("IND", AddrMode.IND, 3, 0, "(%s)"),
        # branch cycles can be 2 or 3
        AddressModeInfo("REL", AddrMode.REL, 2, 2, "%s"),
        # resolved later, during code generation
        AddressModeInfo("UNK_MEM", AddrMode.UNK_M, 0, 0, "%s"),
        AddressModeInfo("UNK_MX", AddrMode.UNK_MX, 0, 0, "%s,x"),
        AddressModeInfo("UNK_MY", AddrMode.UNK_MY, 0, 0, "%s,y"),
    )
}

_M = Mnemonic
_A = AddrMode

_OPCODE_TABLE: tuple[tuple[Mnemonic, AddrMode, int, int], ...] = (
    (_M.ADC, _A.IMM, 0x69, 2), (_M.ADC, _A.ZP, 0x65, 3), (_M.ADC, _A.ZPX, 0x75, 4),
    (_M.ADC, _A.ABS, 0x6D, 4), (_M.ADC, _A.ABX, 0x7D, 4), (_M.ADC, _A.ABY, 0x79, 4),
    (_M.ADC, _A.IX, 0x61, 6), (_M.ADC, _A.IY, 0x71, 5),
    (_M.AND, _A.IMM, 0x29, 2), (_M.AND, _A.ZP, 0x25, 3), (_M.AND, _A.ZPX, 0x35, 4),
    (_M.AND, _A.ABS, 0x2D, 4), (_M.AND, _A.ABX, 0x3D, 4), (_M.AND, _A.ABY, 0x39, 4),
    (_M.AND, _A.IX, 0x21, 6), (_M.AND, _A.IY, 0x31, 5),
    (_M.ASL, _A.NONE, 0x0A, 2), (_M.ASL, _A.ACC, 0x0A, 2), (_M.ASL, _A.ZP, 0x06, 5),
    (_M.ASL, _A.ZPX, 0x16, 6), (_M.ASL, _A.ABS, 0x0E, 6), (_M.ASL, _A.ABX, 0x1E, 7),
    (_M.BIT, _A.ZP, 0x24, 3), (_M.BIT, _A.ABS, 0x2C, 4),
    (_M.BPL, _A.REL, 0x10, 2), (_M.BMI, _A.REL, 0x30, 2), (_M.BVC, _A.REL, 0x50, 2),
    (_M.BVS, _A.REL, 0x70, 2), (_M.BCC, _A.REL, 0x90, 2), (_M.BCS, _A.REL, 0xB0, 2),
    (_M.BNE, _A.REL, 0xD0, 2), (_M.BEQ, _A.REL, 0xF0, 2),
    (_M.BRK, _A.NONE, 0x00, 7),
    (_M.CLC, _A.NONE, 0x18, 2), (_M.CLD, _A.NONE, 0xD8, 2), (_M.CLI, _A.NONE, 0x58, 2),
    (_M.CLV, _A.NONE, 0xB8, 2),
    (_M.CMP, _A.IMM, 0xC9, 2), (_M.CMP, _A.ZP, 0xC5, 3), (_M.CMP, _A.ZPX, 0xD5, 4),
    (_M.CMP, _A.ABS, 0xCD, 4), (_M.CMP, _A.ABX, 0xDD, 4), (_M.CMP, _A.ABY, 0xD9, 4),
    (_M.CMP, _A.IX, 0xC1, 6), (_M.CMP, _A.IY, 0xD1, 5),
    (_M.CPX, _A.IMM, 0xE0, 2), (_M.CPX, _A.ZP, 0xE4, 3), (_M.CPX, _A.ABS, 0xEC, 4),
    (_M.CPY, _A.IMM, 0xC0, 2), (_M.CPY, _A.ZP, 0xC4, 3), (_M.CPY, _A.ABS, 0xCC, 4),
    (_M.DCP, _A.ZP, 0xC7, 5), (_M.DCP, _A.ZPX, 0xD7, 6), (_M.DCP, _A.ABS, 0xCF, 6),
    (_M.DCP, _A.ABX, 0xDF, 7), (_M.DCP, _A.ABY, 0xDB, 7), (_M.DCP, _A.IX, 0xC3, 8),
    (_M.DCP, _A.IY, 0xD3, 8),
    (_M.DEC, _A.ZP, 0xC6, 5), (_M.DEC, _A.ZPX, 0xD6, 6), (_M.DEC, _A.ABS, 0xCE, 6),
    (_M.DEC, _A.ABX, 0xDE, 7),
    (_M.DEX, _A.NONE, 0xCA, 2), (_M.DEY, _A.NONE, 0x88, 2),
    (_M.EOR, _A.IMM, 0x49, 2), (_M.EOR, _A.ZP, 0x45, 3), (_M.EOR, _A.ZPX, 0x55, 4),
    (_M.EOR, _A.ABS, 0x4D, 4), (_M.EOR, _A.ABX, 0x5D, 4), (_M.EOR, _A.ABY, 0x59, 4),
    (_M.EOR, _A.IX, 0x41, 6), (_M.EOR, _A.IY, 0x51, 5),
    (_M.INC, _A.ZP, 0xE6, 5), (_M.INC, _A.ZPX, 0xF6, 6), (_M.INC, _A.ABS, 0xEE, 6),
    (_M.INC, _A.ABX, 0xFE, 7),
    (_M.INX, _A.NONE, 0xE8, 2), (_M.INY, _A.NONE, 0xC8, 2),
    (_M.JMP, _A.ABS, 0x4C, 3), (_M.JMP, _A.IND, 0x6C, 5), (_M.JSR, _A.ABS, 0x20, 6),
    (_M.LAX, _A.IMM, 0xAB, 2), (_M.LAX, _A.ZP, 0xA7, 3), (_M.LAX, _A.ZPX, 0xB7, 4),
    (_M.LAX, _A.ABS, 0xAF, 4), (_M.LAX, _A.ABX, 0xBF, 4), (_M.LAX, _A.ABY, 0xBB, 4),
    (_M.LAX, _A.IX, 0xA3, 6), (_M.LAX, _A.IY, 0xB3, 5),
    (_M.LDA, _A.IMM, 0xA9, 2), (_M.LDA, _A.ZP, 0xA5, 3), (_M.LDA, _A.ZPX, 0xB5, 4),
    (_M.LDA, _A.ABS, 0xAD, 4), (_M.LDA, _A.ABX, 0xBD, 4), (_M.LDA, _A.ABY, 0xB9, 4),
    (_M.LDA, _A.IX, 0xA1, 6), (_M.LDA, _A.IY, 0xB1, 5),
    (_M.LDX, _A.IMM, 0xA2, 2), (_M.LDX, _A.ZP, 0xA6, 3), (_M.LDX, _A.ZPY, 0xB6, 4),
    (_M.LDX, _A.ABS, 0xAE, 4), (_M.LDX, _A.ABY, 0xBE, 4),
    (_M.LDY, _A.IMM, 0xA0, 2), (_M.LDY, _A.ZP, 0xA4, 3), (_M.LDY, _A.ZPX, 0xB4, 4),
    (_M.LDY, _A.ABS, 0xAC, 4), (_M.LDY, _A.ABX, 0xBC, 4),
    (_M.LSR, _A.NONE, 0x4A, 2), (_M.LSR, _A.ACC, 0x4A, 2), (_M.LSR, _A.ZP, 0x46, 5),
    (_M.LSR, _A.ZPX, 0x56, 6), (_M.LSR, _A.ABS, 0x4E, 6), (_M.LSR, _A.ABX, 0x5E, 7),
    (_M.NOP, _A.NONE, 0xEA, 2), (_M.NOP, _A.IMM, 0x80, 2), (_M.NOP, _A.ZP, 0x04, 3),
    (_M.NOP, _A.ABS, 0x0C, 4), (_M.NOP, _A.ZPX, 0x14, 3), (_M.NOP, _A.ABX, 0x1C, 4),
    (_M.ORA, _A.IMM, 0x09, 2), (_M.ORA, _A.ZP, 0x05, 3), (_M.ORA, _A.ZPX, 0x15, 4),
    (_M.ORA, _A.ABS, 0x0D, 4), (_M.ORA, _A.ABX, 0x1D, 4), (_M.ORA, _A.ABY, 0x19, 4),
    (_M.ORA, _A.IX, 0x01, 6), (_M.ORA, _A.IY, 0x11, 5),
    (_M.PHA, _A.NONE, 0x48, 3), (_M.PHP, _A.NONE, 0x08, 3), (_M.PLA, _A.NONE, 0x68, 4),
    (_M.PLP, _A.NONE, 0x28, 4),
    (_M.ROL, _A.NONE, 0x2A, 2), (_M.ROL, _A.ACC, 0x2A, 2), (_M.ROL, _A.ZP, 0x26, 5),
    (_M.ROL, _A.ZPX, 0x36, 6), (_M.ROL, _A.ABS, 0x2E, 6), (_M.ROL, _A.ABX, 0x3E, 7),
    (_M.ROR, _A.NONE, 0x6A, 2), (_M.ROR, _A.ACC, 0x6A, 2), (_M.ROR, _A.ZP, 0x66, 5),
    (_M.ROR, _A.ZPX, 0x76, 6), (_M.ROR, _A.ABS, 0x6E, 6), (_M.ROR, _A.ABX, 0x7E, 7),
    (_M.RTI, _A.NONE, 0x40, 6), (_M.RTS, _A.NONE, 0x60, 6),
    (_M.SBC, _A.IMM, 0xE9, 2), (_M.SBC, _A.ZP, 0xE5, 3), (_M.SBC, _A.ZPX, 0xF5, 4),
    (_M.SBC, _A.ABS, 0xED, 4), (_M.SBC, _A.ABX, 0xFD, 4), (_M.SBC, _A.ABY, 0xF9, 4),
    (_M.SBC, _A.IX, 0xE1, 6), (_M.SBC, _A.IY, 0xF1, 5),
    (_M.SEC, _A.NONE, 0x38, 2), (_M.SED, _A.NONE, 0xF8, 2), (_M.SEI, _A.NONE, 0x78, 2),
    (_M.STA, _A.ZP, 0x85, 3), (_M.STA, _A.ZPX, 0x95, 4), (_M.STA, _A.ABS, 0x8D, 4),
    (_M.STA, _A.ABX, 0x9D, 5), (_M.STA, _A.ABY, 0x99, 5), (_M.STA, _A.IX, 0x81, 6),
    (_M.STA, _A.IY, 0x91, 6),
    (_M.STX, _A.ZP, 0x86, 3), (_M.STX, _A.ZPY, 0x96, 4), (_M.STX, _A.ABS, 0x8E, 4),
    (_M.STY, _A.ZP, 0x84, 3), (_M.STY, _A.ZPX, 0x94, 4), (_M.STY, _A.ABS, 0x8C, 4),
    (_M.TAX, _A.NONE, 0xAA, 2), (_M.TAY, _A.NONE, 0xA8, 2), (_M.TSX, _A.NONE, 0xBA, 2),
    (_M.TXA, _A.NONE, 0x8A, 2), (_M.TXS, _A.NONE, 0x9A, 2), (_M.TYA, _A.NONE, 0x98, 2),
)

_OPCODES: dict[tuple[Mnemonic, AddrMode], OpcodeEntry] = {}
for _mne, _mode, _opcode, _cycles in _OPCODE_TABLE:
    _OPCODES.setdefault((_mne, _mode), OpcodeEntry(_mne, _mode, _opcode, _cycles))

_BRANCH_INVERSES = {
    Mnemonic.BEQ: Mnemonic.BNE,
    Mnemonic.BNE: Mnemonic.BEQ,
    Mnemonic.BCC: Mnemonic.BCS,
    Mnemonic.BCS: Mnemonic.BCC,
    Mnemonic.BMI: Mnemonic.BPL,
    Mnemonic.BPL: Mnemonic.BMI,
    Mnemonic.BVC: Mnemonic.BVS,
    Mnemonic.BVS: Mnemonic.BVC,
}


def lookup_mnemonic(name: str) -> Mnemonic:
    """Find the mnemonic for an opcode name, case-insensitively.

    Names longer than four characters never match; otherwise the first three
    characters decide. Returns Mnemonic.NONE when nothing matches.
    """
    if len(name) > 4:
        return Mnemonic.NONE
    prefix = name.upper()[:3]
    for table_name, code, _ in _MNEMONIC_TABLE[1:]:
        if prefix == table_name[:3]:
            return code
    return Mnemonic.NONE


def mnemonic_name(code: Mnemonic) -> str:
    """Return the assembler name of a mnemonic."""
    return _MNEMONIC_NAMES[Mnemonic(code)]


def is_single_byte(code: Mnemonic) -> bool:
    """Tell whether the mnemonic is an operand-less single byte instruction."""
    return _SINGLE_BYTE[Mnemonic(code)]


def lookup_addr_mode(name: str) -> AddrMode:
    """Find an addressing mode by its exact name; AddrMode.NONE if unknown."""
    if name:
        for info in _ADDRESS_MODES.values():
            if info.name == name:
                return info.mode
    return AddrMode.NONE


def address_mode_info(mode: AddrMode) -> AddressModeInfo:
    """Return the description of an addressing mode.

    Raises ValueError for a value that is not an addressing mode.
    """
    return _ADDRESS_MODES[AddrMode(mode)]


def instr_size(mne: Mnemonic, mode: AddrMode) -> int:
    """Return the size in bytes of an instruction."""
    if mne == Mnemonic.DATA_WORD:
        return 2
    if mne == Mnemonic.NONE:
        return 0
    return address_mode_info(mode).instr_size


def is_branch(mne: Mnemonic) -> bool:
    """Tell whether the mnemonic is a conditional relative branch."""
    return mne in _BRANCH_INVERSES


def invert_branch(mne: Mnemonic) -> Mnemonic:
    """Return the branch with the opposite condition; others pass unchanged."""
    return _BRANCH_INVERSES.get(mne, mne)


def lookup_opcode(mne: Mnemonic, mode: AddrMode) -> OpcodeEntry | None:
    """Return the opcode entry for a mnemonic and mode, or None if invalid."""
    return _OPCODES.get((mne, mode))


def cycle_count(mne: Mnemonic, mode: AddrMode) -> int:
    """Return the cycle count of an instruction, 0 when there is no such opcode."""
    entry = lookup_opcode(mne, mode)
    return entry.cycles if entry is not None else 0