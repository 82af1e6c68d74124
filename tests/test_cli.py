"""Tests for the command-line interface and the optimizer wrapper."""

import shutil
import subprocess

import pytest
from wasm_types import optimizer
from wasm_types.cli import main
from wasm_types.errors import OptimizerError

from builders import (
    FUNC,
    I32,
    MEMORY,
    export_entry,
    export_section,
    func_type,
    function_section,
    module,
    type_section,
)


ADD_MEMORY_MODULE = module(
    type_section(func_type([I32, I32], [I32])),
    function_section(0),
    export_section(export_entry("add", FUNC, 0), export_entry("memory", MEMORY, 0)),
)


@pytest.fixture
def wasm_file(tmp_path):
    path = tmp_path / "calc.wasm"
    path.write_bytes(ADD_MEMORY_MODULE)
    return path


def fake_wasm_opt(monkeypatch, returncode=0, stderr=""):
    """Replace wasm-opt with a stub that copies its input to its output."""
    calls = []

    def run(args, **kwargs):
        calls.append(args)
        if returncode == 0:
            shutil.copyfile(args[1], args[4])
        return subprocess.CompletedProcess(args, returncode, "", stderr)

    monkeypatch.setattr(optimizer.shutil, "which", lambda name: "/usr/bin/wasm-opt")
    monkeypatch.setattr(optimizer.subprocess, "run", run)
    return calls


class TestGenerateCommand:
    def test_generate(self, tmp_path, wasm_file, capsys):
        out_dir = tmp_path / "bindings"
        assert main(["generate", str(wasm_file), "-o", str(out_dir)]) == 0

        assert (out_dir / "calc.d.ts").exists()
        assert (out_dir / "calc.js").exists()
        assert (out_dir / "calc.wasm").read_bytes() == ADD_MEMORY_MODULE
        output = capsys.readouterr().out
        assert "[wasm-types] Parsing" in output
        assert "[wasm-types] Done!" in output

    def test_generate_custom_name_quiet(self, tmp_path, wasm_file, capsys):
        out_dir = tmp_path / "out"
        args = ["generate", str(wasm_file), "-o", str(out_dir), "-n", "math", "-q"]
        assert main(args) == 0

        assert "MathExports" in (out_dir / "math.d.ts").read_text()
        assert capsys.readouterr().out == ""

    def test_no_wrapper(self, tmp_path, wasm_file):
        out_dir = tmp_path / "out"
        assert main(["generate", str(wasm_file), "-o", str(out_dir), "--no-wrapper"]) == 0
        assert sorted(p.name for p in out_dir.iterdir()) == ["calc.d.ts"]

    def test_invalid_module(self, tmp_path, capsys):
        path = tmp_path / "broken.wasm"
        path.write_bytes(b"not wasm at all")
        out_dir = tmp_path / "out"

        assert main(["generate", str(path), "-o", str(out_dir)]) == 1

        assert "error: Invalid WASM magic number" in capsys.readouterr().err
        assert not out_dir.exists()

    def test_missing_file(self, tmp_path, capsys):
        assert main(["generate", str(tmp_path / "nope.wasm")]) == 1
        assert "error:" in capsys.readouterr().err


class TestOptimize:
    def test_optimized_binary_is_final_output(self, tmp_path, wasm_file, monkeypatch):
        calls = fake_wasm_opt(monkeypatch)
        out_dir = tmp_path / "out"

        args = ["generate", str(wasm_file), "-o", str(out_dir), "--optimize", "-q"]
        assert main(args) == 0

        assert calls[0][2] == "-O2"
        assert (out_dir / "calc.wasm").read_bytes() == ADD_MEMORY_MODULE
        assert not (out_dir / ".calc.opt.wasm").exists()

    def test_optimized_binary_kept_without_wrapper(self, tmp_path, wasm_file, monkeypatch):
        calls = fake_wasm_opt(monkeypatch)
        out_dir = tmp_path / "out"

        args = [
            "generate",
            str(wasm_file),
            "-o",
            str(out_dir),
            "--optimize",
            "--no-wrapper",
            "-q",
        ]
        assert main(args) == 0

        assert len(calls) == 1
        assert sorted(p.name for p in out_dir.iterdir()) == ["calc.d.ts", "calc.wasm"]
        assert (out_dir / "calc.wasm").read_bytes() == ADD_MEMORY_MODULE

    def test_optimizer_failure(self, tmp_path, wasm_file, monkeypatch, capsys):
        fake_wasm_opt(monkeypatch, returncode=1, stderr="[wasm-validator error]\n")
        out_dir = tmp_path / "out"

        args = ["generate", str(wasm_file), "-o", str(out_dir), "--optimize", "-q"]
        assert main(args) == 1

        err = capsys.readouterr().err
        assert "wasm-opt exited with status 1" in err
        assert "[wasm-validator error]" in err
        assert not (out_dir / "calc.wasm").exists()
        assert not (out_dir / "calc.d.ts").exists()

    def test_optimizer_missing(self, tmp_path, monkeypatch):
        monkeypatch.setattr(optimizer.shutil, "which", lambda name: None)
        with pytest.raises(OptimizerError, match="not found"):
            optimizer.optimize(tmp_path / "a.wasm", tmp_path / "b.wasm")

    def test_generation_failure_discards_intermediate(
        self, tmp_path, monkeypatch, capsys
    ):
        fake_wasm_opt(monkeypatch)
        path = tmp_path / "clash.wasm"
        path.write_bytes(
            module(
                type_section(func_type([], [])),
                function_section(0),
                export_section(export_entry("rawExports", FUNC, 0)),
            )
        )
        out_dir = tmp_path / "out"

        assert main(["generate", str(path), "-o", str(out_dir), "--optimize", "-q"]) == 1

        assert list(out_dir.iterdir()) == []

    @pytest.mark.skipif(
        shutil.which("wasm-opt") is None, reason="wasm-opt not installed"
    )
    def test_real_wasm_opt(self, tmp_path, wasm_file):
        output = optimizer.optimize(wasm_file, tmp_path / "opt.wasm")
        assert output.read_bytes()[:4] == b"\x00asm"


class TestInspectCommand:
    def test_inspect(self, wasm_file, capsys):
        assert main(["inspect", str(wasm_file)]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out == ["add: (i32, i32) -> (i32)  [type 0]", "memory: memory"]

    def test_inspect_invalid(self, tmp_path, capsys):
        path = tmp_path / "bad.wasm"
        path.write_bytes(module(export_section(export_entry("f", FUNC, 0))))
        assert main(["inspect", str(path)]) == 1
        assert "refers to function 0" in capsys.readouterr().err
