"""6502 instruction code generation with register tracking, for a C-like cross-compiler."""

__version__ = "0.1.0"