"""TypeScript binding generation from a decoded module description."""

import json
import re
import shutil
from pathlib import Path

from .errors import GenerateError
from .types import ModuleDescription, ValType


# Host type for each WASM value type
TS_TYPES = {
    ValType.I32: "number",
    ValType.I64: "bigint",
    ValType.F32: "number",
    ValType.F64: "number",
}

# Properties the wrapper adds next to the module's own exports
RESERVED_NAMES = {"rawExports", "memory"}

IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def property_name(name: str) -> str:
    """Return name as a TypeScript property key, quoting it if needed."""
    if IDENTIFIER_RE.match(name):
        return name
    return json.dumps(name)


def property_access(name: str) -> str:
    if IDENTIFIER_RE.match(name):
        return f".{name}"
    return f"[{json.dumps(name)}]"


def interface_name(module_name: str) -> str:
    """Turn a module name like ``my-lib`` into ``MyLibExports``."""
    words = re.split(r"[^A-Za-z0-9]+", module_name)
    base = "".join(w[:1].upper() + w[1:] for w in words if w)
    if not base or base[0].isdigit():
        base = "Wasm" + base
    return f"{base}Exports"


def ts_params(params: tuple[ValType, ...]) -> str:
    return ", ".join(f"arg{i}: {TS_TYPES[p]}" for i, p in enumerate(params))


def ts_return(results: tuple[ValType, ...]) -> str:
    if not results:
        return "void"
    if len(results) == 1:
        return TS_TYPES[results[0]]
    return "[" + ", ".join(TS_TYPES[r] for r in results) + "]"


def _unique_functions(description: ModuleDescription):
    """Exported functions with duplicate names dropped (first one wins)."""
    seen = set()
    functions = []
    for func in description.exported_functions:
        if func.name in seen:
            continue
        if func.name in RESERVED_NAMES:
            raise GenerateError(
                f"Exported function {func.name!r} clashes with a property "
                "the wrapper provides"
            )
        seen.add(func.name)
        functions.append(func)
    return functions


def render_declarations(description: ModuleDescription, module_name: str) -> str:
    """Render the .d.ts declaration file for a module."""
    exports_type = interface_name(module_name)
    memory_type = "WebAssembly.Memory" if description.has_exported_memory else "null"

    lines = [
        f"// Generated by wasm-types for {module_name}.wasm. Do not edit.",
        "",
        f"export interface {exports_type} {{",
    ]
    for func in _unique_functions(description):
        sig = func.signature
        lines.append(
            f"  {property_name(func.name)}({ts_params(sig.params)}): "
            f"{ts_return(sig.results)};"
        )
    lines += [
        "}",
        "",
        "export interface LoaderOptions {",
        "  importObject?: WebAssembly.Imports;",
        "}",
        "",
        f"export type LoadedExports = {exports_type} & {{",
        "  rawExports: WebAssembly.Exports;",
        f"  memory: {memory_type};",
        "};",
        "",
        "export declare function load(options?: LoaderOptions): Promise<LoadedExports>;",
        "",
    ]
    return "\n".join(lines)


def render_wrapper(
    description: ModuleDescription, module_name: str, wasm_filename: str
) -> str:
    """Render the ES module that loads the binary and exposes typed exports."""
    if description.memory_export_name is not None:
        memory_expr = f"rawExports{property_access(description.memory_export_name)}"
    else:
        memory_expr = "null"

    lines = [
        f"// Generated by wasm-types for {module_name}.wasm. Do not edit.",
        "",
        f"const wasmUrl = new URL({json.dumps('./' + wasm_filename)}, import.meta.url);",
        "",
        "async function readWasm() {",
        '  if (typeof process !== "undefined" && process.versions && process.versions.node) {',
        '    const { readFile } = await import("node:fs/promises");',
        "    return readFile(wasmUrl);",
        "  }",
        "  const response = await fetch(wasmUrl);",
        "  return response.arrayBuffer();",
        "}",
        "",
        "export async function load(options = {}) {",
        "  const bytes = await readWasm();",
        "  const { instance } = await WebAssembly.instantiate(bytes, options.importObject || {});",
        "  const rawExports = instance.exports;",
        "  return {",
    ]
    for func in _unique_functions(description):
        lines.append(
            f"    {property_name(func.name)}: rawExports{property_access(func.name)},"
        )
    lines += [
        "    rawExports,",
        f"    memory: {memory_expr},",
        "  };",
        "}",
        "",
    ]
    return "\n".join(lines)


def generate_bindings(
    description: ModuleDescription,
    wasm_path: Path,
    out_dir: Path,
    module_name: str,
    wrapper: bool = True,
    copy_binary: bool | None = None,
) -> list[Path]:
    """Write bindings for a module into out_dir.

    Writes ``<module_name>.d.ts`` and, with ``wrapper``, ``<module_name>.js``.
    With ``copy_binary`` (defaults to ``wrapper``) the binary is copied to
    ``<module_name>.wasm``. The binary is copied last, so it only lands in
    out_dir once the text files were written. On failure, files already
    written are removed again.

    Returns:
        The paths written, in the order they were written.
    """
    wasm_path = Path(wasm_path)
    out_dir = Path(out_dir)
    wasm_filename = f"{module_name}.wasm"
    if copy_binary is None:
        copy_binary = wrapper

    # Render everything before touching the filesystem
    declarations = render_declarations(description, module_name)
    wrapper_source = (
        render_wrapper(description, module_name, wasm_filename) if wrapper else None
    )

    written = []
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        dts_path = out_dir / f"{module_name}.d.ts"
        dts_path.write_text(declarations, encoding="utf-8")
        written.append(dts_path)

        if wrapper_source is not None:
            js_path = out_dir / f"{module_name}.js"
            js_path.write_text(wrapper_source, encoding="utf-8")
            written.append(js_path)

        if copy_binary:
            target = out_dir / wasm_filename
            if wasm_path.resolve() != target.resolve():
                shutil.copyfile(wasm_path, target)
            written.append(target)
    except OSError as e:
        for path in written:
            path.unlink(missing_ok=True)
        raise GenerateError(f"Could not write bindings to {out_dir}: {e}") from e

    return written
