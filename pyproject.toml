[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "neolith"
version = "0.1.0"
description = "6502 instruction code generation with register tracking for a small C-like cross-compiler"
requires-python = ">=3.10"
dependencies = []
keywords = ["6502", "compiler", "code-generation", "instruction-selection", "retro"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Compilers",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["neolith"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
