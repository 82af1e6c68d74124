"""Command-line interface for wasm-types.

Usage:
    wasm-types generate module.wasm                # bindings in ./bindings
    wasm-types generate module.wasm -o out -n lib  # custom directory and name
    wasm-types generate module.wasm --optimize     # also run wasm-opt
    wasm-types inspect module.wasm                 # list exported signatures
"""

import argparse
import sys
from pathlib import Path

from . import __version__
from .decoder import decode_module
from .errors import WasmError
from .generator import generate_bindings
from .optimizer import DEFAULT_LEVEL, optimize


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wasm-types",
        description="Generate TypeScript bindings for WebAssembly modules",
    )
    parser.add_argument(
        "--version", action="version", version=f"wasm-types {__version__}"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Write bindings for a module")
    generate.add_argument("wasm_file", type=Path, help="Path to the .wasm file")
    generate.add_argument(
        "-o", "--out-dir", type=Path, default=Path("bindings"), help="Output directory"
    )
    generate.add_argument(
        "-n", "--name", help="Module name (default: file name without .wasm)"
    )
    generate.add_argument(
        "--no-wrapper",
        dest="wrapper",
        action="store_false",
        help="Only write the .d.ts declaration file",
    )
    generate.add_argument(
        "--optimize", action="store_true", help="Optimize the binary with wasm-opt"
    )
    generate.add_argument(
        "--opt-level", default=DEFAULT_LEVEL, help=f"wasm-opt level (default: {DEFAULT_LEVEL})"
    )
    generate.add_argument(
        "-q", "--quiet", action="store_true", help="Only print errors"
    )

    inspect = subparsers.add_parser("inspect", help="Print exported signatures")
    inspect.add_argument("wasm_file", type=Path, help="Path to the .wasm file")

    return parser


def run_generate(args: argparse.Namespace) -> int:
    def log(message: str) -> None:
        if not args.quiet:
            print(f"[wasm-types] {message}")

    wasm_path = args.wasm_file.resolve()
    module_name = args.name or wasm_path.stem
    out_dir = args.out_dir.resolve()

    log(f"Parsing {wasm_path}...")
    description = decode_module(wasm_path)

    source_path = wasm_path
    intermediate = None
    try:
        if args.optimize:
            out_dir.mkdir(parents=True, exist_ok=True)
            intermediate = out_dir / f".{module_name}.opt.wasm"
            log(f"Optimizing with wasm-opt {args.opt_level}...")
            source_path = optimize(wasm_path, intermediate, args.opt_level)

        log(f"Generating bindings in {out_dir}...")
        written = generate_bindings(
            description,
            source_path,
            out_dir,
            module_name,
            wrapper=args.wrapper,
            copy_binary=args.wrapper or args.optimize,
        )
    finally:
        if intermediate is not None:
            intermediate.unlink(missing_ok=True)

    for path in written:
        log(f"  wrote {path}")
    log("Done!")
    return 0


def run_inspect(args: argparse.Namespace) -> int:
    description = decode_module(args.wasm_file)
    for func in description.exported_functions:
        print(f"{func.name}: {func.signature!r}  [type {func.type_idx}]")
    if description.has_exported_memory:
        print(f"{description.memory_export_name}: memory")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "generate":
            return run_generate(args)
        return run_inspect(args)
    except WasmError as e:
        print(f"error: {e}", file=sys.stderr)
        if getattr(e, "stderr", ""):
            print(e.stderr, file=sys.stderr, end="")
        return 1
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
