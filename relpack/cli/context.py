from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relpack.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    cwd: Path
    console: ConsoleProtocol


def build_context() -> CLIContext:
    # The only place the process working directory is read.
    return CLIContext(cwd=Path.cwd().resolve(), console=RichConsole())
