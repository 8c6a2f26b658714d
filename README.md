# neolith

This package is the instruction-generation layer of a small C-like cross-compiler for the 6502.
It turns high-level operations into lists of 6502 instructions: loads, stores, arithmetic, logic,
shifts, comparisons, branches, jumps, calls and multiplication, on 8-bit and 16-bit values.

While it generates code, it keeps track of what the A, X and Y registers hold. When a register
already holds the needed value, the load is left out.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from neolith.icg_core import Label, Symbol
from neolith.icg_ops import InstructionGenerator

gen = InstructionGenerator()
a, b = Symbol("a"), Symbol("b")

gen.start_function(Label("setup"), Symbol("setup"))
gen.load_const(10, 1)
gen.store_var_sym(a)
gen.load_var(a)        # left out: A already holds a
gen.store_var_sym(b)
block = gen.end_function()

for instr in block.instrs:
    print(instr.mne.name, instr.mode.name, instr.operand)
# LDA IMM 10
# STA ZP a
# STA ZP b
# RTS NONE None
```

Looking up opcodes:

```python
from neolith.asm_code import AddrMode, Mnemonic, invert_branch, lookup_opcode

entry = lookup_opcode(Mnemonic.LDA, AddrMode.IMM)
print(hex(entry.opcode), entry.cycles)   # 0xa9 2
print(invert_branch(Mnemonic.BEQ).name)  # BNE
```

## Modules

### `neolith.asm_code`

This module describes the 6502 instruction set.

- `Mnemonic` lists the mnemonics, together with the `DATA` and `DATA_WORD` pseudo-ops.
- `AddrMode` lists the addressing modes.
- `ParamExt` holds the operand flags: `LO`, `HI`, `ADD` and `PLUS_ONE`.
- `AddressModeInfo` and `OpcodeEntry` are the table records.

Functions:

- `lookup_mnemonic` matches case-insensitively on the first three letters. It returns `Mnemonic.NONE` for names longer than four characters and for names it does not know.
- `mnemonic_name` and `is_single_byte`.
- `lookup_addr_mode` and `address_mode_info`.
- `lookup_opcode` returns `None` when there is no opcode for the mnemonic and mode.
- `instr_size` and `cycle_count`.
- `is_branch` and `invert_branch`.

### `neolith.common`

This module holds general helpers.

- `num_to_str(num)` formats a number as assembler hex: `$1F`, or `-$1F` for a negative number.
- `str_to_int(text)` parses decimal numbers, hex written with `0x` or `$`, and binary written with `0b` or `%`. A leading `-` is allowed. Like C's `strtol`, it stops at the first invalid digit.
- `struct_ref_comment`, `substring`, `unquoted_string` and `gen_file_name` are string helpers. `gen_file_name` replaces a trailing `.c` with the extension it is given.
- `SourceCodeLine(line_num, data).render()` returns `"Line #<n>   :\t<text>"`. The line number is padded to four characters.
- `CompilerOptions` is a dataclass of compiler settings.

### `neolith.tree_walker`

- `find_handler(table, token)` looks up a handler in a mapping or in an iterable of `(token, handler)` pairs.
- `call_handler(table, token, data, dest_type)` calls the handler it finds and returns the result. It returns `None` when no handler is registered.

### `neolith.icg_core`

This module holds the data model and the base generator.

Data model:

- `Symbol` is a variable, constant, structure or function. Its fields cover size, storage, register hint, pointer or parameter status, structure members and array size.
- `Label` is a code or data label. It has a reference count and can be linked to another label.
- `Instr` is one generated instruction.
- `InstrBlock` is a function's list of instructions. It has `code_size()`.
- `RegLoad`, `RegisterUse`, `VarHint` and `Storage` support the register tracking.

`CoreGenerator` collects blocks in `blocks`. Its methods:

- `emit` adds an instruction.
- `add_comment` adds a comment to the code.
- `start_function` and `end_function` open and close a function's block. A function named `main` gets the stack-reset start-up code when it starts. Every other function gets an `RTS` at the end, unless one is already there.
- `label`, `branch`, `jump`, `call`, `return_`, `push_acc`, `pull_acc`, `nop` and `asm_data` emit code.
- `tag`, `is_current_tag`, `preload`, `clear_on_update` and `reset` manage the register tracking. `preload` raises `ValueError` for a variable that has no register hint.

### `neolith.icg_load`

`LoadStoreGenerator` extends `CoreGenerator` with loads and stores. These cover:

- constants
- variables
- array elements, with constant, Y-indexed or offset indexes
- pointers, read and written indirectly
- structure members
- addresses
- stack adjustment

`load_reg_const` and `load_reg_var` raise `ValueError` for any register other than `"A"`, `"X"` or `"Y"`.

### `neolith.icg_ops`

`InstructionGenerator` extends `LoadStoreGenerator`. It adds:

- bitwise and boolean not, and negation
- operations with a constant, a variable, a structure member, an indexed element or the stack
- carry handling for 16-bit values
- increment and decrement in memory
- shifts
- additions to a 16-bit value held in A/X
- comparisons

### `neolith.icg_math`

`Multiplier(gen, symbols)` generates multiplication code through an `InstructionGenerator`. `symbols` is a mutable mapping from names to symbols.

`add_lookup_table(n)` creates a constant table symbol `QL_<n>` that holds the multiples of `n`. `n` must be from 1 to 63.

`multiply_var_with_const` picks one method, in this order:

1. a lookup table, when one exists;
2. a shift and add sequence, for multipliers up to 16;
3. shifts alone, for powers of two from 32 to 32768;
4. a generic 8x8 multiply loop, whose 16-bit result ends up in A (low byte) and X (high byte).

`multiply_var_with_var`, `multiply_expr_with_var` and `multiply_with_const` use the same loop. `is_power_of_2` covers the powers from 16 to 32768.

### `neolith.icg_opt`

`copy_data_into_struct(gen, init_values, dest_var, use_indirect)` emits the initial values as inline data and then a Y-indexed loop that copies them into a structure variable. With `use_indirect=True` the loop writes through the pointer at zero page `$80`.

## What the package does not do

This package only builds instruction lists in memory. It does not contain:

- a parser or preprocessor for source text;
- symbol-table construction from a syntax tree;
- memory allocation for variables;
- an optimizer;
- anything that writes assembly listings or binary files;
- a command-line program.

The `Instr` objects carry symbolic operands such as names, offset strings and `ParamExt` flags. The package never resolves these to bytes.