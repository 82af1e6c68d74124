"""TypeScript bindings for WebAssembly modules.

Decodes the type, function and export sections of a WebAssembly binary and
generates typed bindings for its exported functions and memory.
"""

from .decoder import decode_module, resolve_exports
from .reader import BinaryReader, decode_unsigned_leb128
from .errors import (
    WasmError,
    DecodeError,
    InvalidHeaderError,
    UnsupportedVersionError,
    UnexpectedEndOfInputError,
    IntegerOverflowError,
    TruncatedSectionError,
    DuplicateSectionError,
    InvalidTypeFormError,
    UnknownValueTypeError,
    InvalidNameError,
    InvalidFunctionIndexError,
    InvalidTypeIndexError,
    GenerateError,
    OptimizerError,
)
from .types import (
    ValType,
    ExportKind,
    FuncType,
    Export,
    ExportedFunction,
    ModuleDescription,
)
from .generator import generate_bindings, render_declarations, render_wrapper

__version__ = "0.1.0"

__all__ = [
    # Main API
    "decode_module",
    "generate_bindings",
    "render_declarations",
    "render_wrapper",
    # Decoder internals (for testing)
    "BinaryReader",
    "decode_unsigned_leb128",
    "resolve_exports",
    # Types
    "ValType",
    "ExportKind",
    "FuncType",
    "Export",
    "ExportedFunction",
    "ModuleDescription",
    # Errors
    "WasmError",
    "DecodeError",
    "InvalidHeaderError",
    "UnsupportedVersionError",
    "UnexpectedEndOfInputError",
    "IntegerOverflowError",
    "TruncatedSectionError",
    "DuplicateSectionError",
    "InvalidTypeFormError",
    "UnknownValueTypeError",
    "InvalidNameError",
    "InvalidFunctionIndexError",
    "InvalidTypeIndexError",
    "GenerateError",
    "OptimizerError",
]
