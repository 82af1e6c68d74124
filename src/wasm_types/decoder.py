"""WebAssembly binary format decoder.

Only the parts of a module that bindings depend on are decoded: the type,
function and export sections. Every other section is skipped using its
length prefix, so modules using newer features still decode as long as the
exported signatures themselves stay within the supported scalar types.
"""

from pathlib import Path
from typing import BinaryIO

from .errors import (
    DuplicateSectionError,
    InvalidFunctionIndexError,
    InvalidHeaderError,
    InvalidTypeFormError,
    InvalidTypeIndexError,
    TruncatedSectionError,
    UnexpectedEndOfInputError,
    UnknownValueTypeError,
    UnsupportedVersionError,
)
from .reader import BinaryReader, decode_name, decode_unsigned_leb128
from .types import (
    EXPORT_KIND_ENCODING,
    Export,
    ExportedFunction,
    ExportKind,
    FuncType,
    ModuleDescription,
    ValType,
    VALTYPE_ENCODING,
)


# WASM magic number and version
WASM_MAGIC = b"\x00asm"
WASM_VERSION = 1

# Section IDs; every other id is skipped
SECTION_TYPE = 1
SECTION_FUNCTION = 3
SECTION_EXPORT = 7

SECTION_NAMES = {
    SECTION_TYPE: "type",
    SECTION_FUNCTION: "function",
    SECTION_EXPORT: "export",
}

FUNC_TYPE_FORM = 0x60


class _Sections:
    """Raw section contents collected while walking the module."""

    def __init__(self) -> None:
        self.types: list[FuncType] = []
        self.func_type_indices: list[int] = []
        self.exports: list[Export] = []
        self.seen: set[int] = set()


def decode_valtype(reader: BinaryReader) -> ValType:
    """Decode a value type."""
    offset = reader.position
    byte = reader.read_byte()
    if byte not in VALTYPE_ENCODING:
        raise UnknownValueTypeError(f"Unknown value type: 0x{byte:02x}", offset=offset)
    return VALTYPE_ENCODING[byte]


def decode_func_type(reader: BinaryReader) -> FuncType:
    """Decode a function type."""
    offset = reader.position
    form = reader.read_byte()
    if form != FUNC_TYPE_FORM:
        raise InvalidTypeFormError(
            f"Expected function type marker 0x60, got 0x{form:02x}", offset=offset
        )

    # Parameters
    param_count = decode_unsigned_leb128(reader)
    params = tuple(decode_valtype(reader) for _ in range(param_count))

    # Results
    result_count = decode_unsigned_leb128(reader)
    results = tuple(decode_valtype(reader) for _ in range(result_count))

    return FuncType(params, results)


def decode_type_section(reader: BinaryReader) -> list[FuncType]:
    """Decode the type section."""
    count = decode_unsigned_leb128(reader)
    return [decode_func_type(reader) for _ in range(count)]


def decode_function_section(reader: BinaryReader) -> list[int]:
    """Decode the function section (just type indices).

    Indices are not checked here; resolve_exports rejects bad ones.
    """
    count = decode_unsigned_leb128(reader)
    return [decode_unsigned_leb128(reader) for _ in range(count)]


def decode_export_section(reader: BinaryReader) -> list[Export]:
    """Decode the export section.

    Exports of an unknown kind are read and dropped so that later entries
    stay aligned.
    """
    count = decode_unsigned_leb128(reader)
    exports = []
    for _ in range(count):
        name = decode_name(reader)
        kind_byte = reader.read_byte()
        index = decode_unsigned_leb128(reader)
        kind = EXPORT_KIND_ENCODING.get(kind_byte)
        if kind is None:
            continue
        exports.append(Export(name, kind, index))
    return exports


def decode_header(reader: BinaryReader) -> None:
    """Check the magic number and version."""
    if reader.remaining() < len(WASM_MAGIC):
        raise InvalidHeaderError("Invalid WASM magic number: file too short", offset=0)
    magic = reader.read_bytes(4)
    if magic != WASM_MAGIC:
        raise InvalidHeaderError(
            f"Invalid WASM magic number: expected {WASM_MAGIC!r}, got {magic!r}",
            offset=0,
        )

    try:
        version_bytes = reader.read_bytes(4)
    except UnexpectedEndOfInputError as e:
        raise UnsupportedVersionError(
            "Unsupported WASM version: missing version field", offset=e.offset
        ) from e
    version = int.from_bytes(version_bytes, "little")
    if version != WASM_VERSION:
        raise UnsupportedVersionError(f"Unsupported WASM version: {version}", offset=4)


def decode_section(reader: BinaryReader, sections: _Sections) -> None:
    """Decode a single section, skipping it if it is not one we need."""
    section_offset = reader.position
    section_id = reader.read_byte()
    section_size = decode_unsigned_leb128(reader)
    if section_size > reader.remaining():
        raise TruncatedSectionError(
            f"Section {section_id} declares {section_size} bytes but only "
            f"{reader.remaining()} remain",
            offset=section_offset,
        )

    # The parent reader moves to the section end whatever the decoders consume
    section_reader = reader.sub_reader(section_size)

    if section_id not in (SECTION_TYPE, SECTION_FUNCTION, SECTION_EXPORT):
        return

    if section_id in sections.seen:
        raise DuplicateSectionError(
            f"Duplicate {SECTION_NAMES[section_id]} section", offset=section_offset
        )
    sections.seen.add(section_id)

    if section_id == SECTION_TYPE:
        sections.types = decode_type_section(section_reader)
    elif section_id == SECTION_FUNCTION:
        sections.func_type_indices = decode_function_section(section_reader)
    elif section_id == SECTION_EXPORT:
        sections.exports = decode_export_section(section_reader)


def resolve_exports(
    exports: list[Export], func_type_indices: list[int], types: list[FuncType]
) -> list[ExportedFunction]:
    """Join function exports with their signatures, in export order.

    Function indices are counted from the first function defined in this
    module. Imported functions would shift that index space, and imports are
    not decoded, so modules that import functions can resolve to the wrong
    signature.
    """
    resolved = []
    for export in exports:
        if export.kind is not ExportKind.FUNC:
            continue
        if export.index >= len(func_type_indices):
            raise InvalidFunctionIndexError(
                f"Export {export.name!r} refers to function {export.index}, "
                f"but only {len(func_type_indices)} functions are declared"
            )
        type_idx = func_type_indices[export.index]
        if type_idx >= len(types):
            raise InvalidTypeIndexError(
                f"Function {export.index} (exported as {export.name!r}) refers "
                f"to type {type_idx}, but only {len(types)} types are declared"
            )
        resolved.append(ExportedFunction(export.name, type_idx, types[type_idx]))
    return resolved


def read_source(source: bytes | bytearray | BinaryIO | Path | str) -> bytes:
    """Read module bytes from bytes, a path, or a binary file-like object."""
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, (str, Path)):
        with open(source, "rb") as f:
            return f.read()
    # Assume file-like object
    return source.read()


def decode_module(source: bytes | bytearray | BinaryIO | Path | str) -> ModuleDescription:
    """Decode the binding-relevant parts of a WebAssembly module.

    Args:
        source: WASM bytes, file-like object, or path to .wasm file

    Returns:
        ModuleDescription for the module

    Raises:
        DecodeError: If the binary format is invalid. No partial description
            is ever returned.
    """
    reader = BinaryReader(read_source(source))
    decode_header(reader)

    sections = _Sections()
    while not reader.eof():
        decode_section(reader, sections)

    exported_functions = resolve_exports(
        sections.exports, sections.func_type_indices, sections.types
    )
    memory_exports = [e for e in sections.exports if e.kind is ExportKind.MEMORY]

    return ModuleDescription(
        function_types=tuple(sections.types),
        function_type_indices=tuple(sections.func_type_indices),
        exported_functions=tuple(exported_functions),
        has_exported_memory=bool(memory_exports),
        exports=tuple(sections.exports),
        memory_export_name=memory_exports[0].name if memory_exports else None,
    )
