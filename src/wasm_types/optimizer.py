"""Invocation of the external Binaryen ``wasm-opt`` optimizer."""

import shutil
import subprocess
from pathlib import Path

from .errors import OptimizerError


OPTIMIZER_COMMAND = "wasm-opt"
DEFAULT_LEVEL = "-O2"
OPTIMIZER_TIMEOUT = 300


def find_optimizer() -> str | None:
    """Return the path of wasm-opt if it is on PATH."""
    return shutil.which(OPTIMIZER_COMMAND)


def optimize(input_path: Path, output_path: Path, level: str = DEFAULT_LEVEL) -> Path:
    """Run wasm-opt on input_path, writing the result to output_path.

    Raises:
        OptimizerError: If wasm-opt is missing, times out or fails.
    """
    executable = find_optimizer()
    if executable is None:
        raise OptimizerError(f"{OPTIMIZER_COMMAND} not found in PATH")

    try:
        result = subprocess.run(
            [executable, str(input_path), level, "-o", str(output_path)],
            capture_output=True,
            text=True,
            timeout=OPTIMIZER_TIMEOUT,
        )
    except subprocess.TimeoutExpired as e:
        raise OptimizerError(
            f"{OPTIMIZER_COMMAND} timed out after {OPTIMIZER_TIMEOUT}s"
        ) from e

    if result.returncode != 0:
        raise OptimizerError(
            f"{OPTIMIZER_COMMAND} exited with status {result.returncode}",
            stderr=result.stderr,
        )
    return Path(output_path)
