"""Build step: one build tool invocation for every target."""

from __future__ import annotations

from pathlib import Path

from relpack.core.manifest import ReleaseManifest
from relpack.core.result import Err, Ok, Result
from relpack.platform.detection import Platform
from relpack.platform.process import run as run_process
from relpack.services.errors import BuildError

__all__ = ["build_targets", "expected_binaries"]


def expected_binaries(manifest: ReleaseManifest, platform: Platform) -> list[Path]:
    """Paths the build tool is expected to produce, in target order."""
    output_dir = manifest.root / manifest.build.output_dir
    return [
        output_dir / manifest.build.binary_name(target, platform.exe_suffix)
        for target in manifest.targets
    ]


def build_targets(
    manifest: ReleaseManifest, platform: Platform
) -> Result[list[Path], BuildError]:
    """Run the build tool once for all targets and return the built binaries.

    No process is started when there are no targets.
    """
    if not manifest.targets:
        return Ok([])

    argv = manifest.build.argv(manifest.targets)
    result = run_process(argv, cwd=manifest.root, timeout=manifest.build.timeout)
    if isinstance(result, Err):
        return Err(BuildError(message=str(result.error), cause=result.error))

    binaries = expected_binaries(manifest, platform)
    missing = [p for p in binaries if not p.is_file()]
    if missing:
        names = ", ".join(str(p) for p in missing)
        return Err(BuildError(message=f"build succeeded but output is missing: {names}"))

    return Ok(binaries)
