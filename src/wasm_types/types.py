"""WebAssembly type definitions for binding generation."""

from dataclasses import dataclass
from enum import Enum, IntEnum


class ValType(str, Enum):
    """Scalar value types that can cross the binding boundary."""

    I32 = "i32"
    I64 = "i64"
    F32 = "f32"
    F64 = "f64"

    def __str__(self) -> str:
        return self.value


# Binary encoding of value types. Vector and reference types are absent on
# purpose: a module using them is rejected rather than misdecoded.
VALTYPE_ENCODING = {
    0x7F: ValType.I32,
    0x7E: ValType.I64,
    0x7D: ValType.F32,
    0x7C: ValType.F64,
}


class ExportKind(IntEnum):
    """Export descriptor kinds, valued by their binary encoding."""

    FUNC = 0x00
    TABLE = 0x01
    MEMORY = 0x02
    GLOBAL = 0x03


EXPORT_KIND_ENCODING = {kind.value: kind for kind in ExportKind}


@dataclass(frozen=True)
class FuncType:
    """WebAssembly function type (signature)."""

    params: tuple[ValType, ...]
    results: tuple[ValType, ...]

    def __repr__(self) -> str:
        params = ", ".join(str(p) for p in self.params)
        results = ", ".join(str(r) for r in self.results)
        return f"({params}) -> ({results})"


@dataclass(frozen=True)
class Export:
    """An export entry as it appears in the export section."""

    name: str
    kind: ExportKind
    index: int


@dataclass(frozen=True)
class ExportedFunction:
    """An exported function joined with its signature."""

    name: str
    type_idx: int
    signature: FuncType


@dataclass(frozen=True)
class ModuleDescription:
    """Everything the binding generator needs to know about a module."""

    function_types: tuple[FuncType, ...]
    function_type_indices: tuple[int, ...]
    exported_functions: tuple[ExportedFunction, ...]
    has_exported_memory: bool
    exports: tuple[Export, ...] = ()
    memory_export_name: str | None = None
