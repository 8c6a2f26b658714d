"""Shared helpers: number formatting, string utilities and compiler options."""

from __future__ import annotations

import re
from dataclasses import dataclass

_DIGITS = {
    2: re.compile(r"[01]*"),
    10: re.compile(r"[0-9]*"),
    16: re.compile(r"[0-9a-fA-F]*"),
}


@dataclass(frozen=True)
class SourceCodeLine:
    """A line of source text kept for commenting the assembly output."""

    line_num: int
    data: str

    def render(self) -> str:
        """Return the line formatted for the assembly listing."""
        return f"Line #{self.line_num:<4d}:\t{self.data}"


@dataclass
class CompilerOptions:
    """Settings that steer what the compiler does and reports."""

    entry_point_func_name: str = "main"
    show_general_info: bool = False
    show_call_tree: bool = False
    show_var_allocations: bool = False
    show_output_block_list: bool = False
    report_function_processing: bool = False
    max_func_call_depth: int = 0
    run_optimizer: bool = False
    show_optimizer_steps: bool = False


def num_to_str(num: int) -> str:
    """Format a number as assembler-style hexadecimal, e.g. ``$1F`` or ``-$1F``."""
    if num < 0:
        return f"-${-num:X}"
    return f"${num:X}"


def _parse_digits(text: str, base: int) -> int:
    digits = _DIGITS[base].match(text).group(0)
    return int(digits, base) if digits else 0


def str_to_int(text: str) -> int:
    """Parse an integer literal in C or assembler notation.

    Accepts an optional leading ``-`` followed by ``0x``/``$`` hexadecimal,
    ``0b``/``%`` binary or plain decimal digits. As with C's strtol, parsing
    stops at the first invalid digit, and no digits at all give 0.
    """
    negative = text.startswith("-")
    body = text[1:] if negative else text
    if body.startswith("0x"):
        value = _parse_digits(body[2:], 16)
    elif body.startswith("0b"):
        value = _parse_digits(body[2:], 2)
    elif body.startswith("$"):
        value = _parse_digits(body[1:], 16)
    elif body.startswith("%"):
        value = _parse_digits(body[1:], 2)
    else:
        value = _parse_digits(body, 10)
    return -value if negative else value


def struct_ref_comment(prefix: str, struct_name: str, prop_name: str) -> str:
    """Build the comment that annotates a structure property reference."""
    return f"{prefix}: {struct_name}.{prop_name}"


def substring(text: str, begin: int, end: int) -> str:
    """Return text from begin up to end; when end equals begin, up to the end of text."""
    if end == begin:
        return text[begin:]
    return text[begin:end]


def unquoted_string(text: str) -> str:
    """Return the text between the first pair of double quotes, or ''.

    The character right after the opening quote is always taken as content,
    so an empty pair of quotes is not recognised as a closed string.
    """
    opening = text.find('"')
    if opening < 0:
        return ""
    begin = opening + 1
    if begin >= len(text):
        return ""
    closing = text.find('"', begin + 1)
    if closing < 0:
        return ""
    return text[begin:closing]


def gen_file_name(name: str, ext: str) -> str:
    """Replace a trailing ``.c`` extension (if any) with ``ext``."""
    if name.endswith(".c"):
        name = name[:-2]
    return name + ext