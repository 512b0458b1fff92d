"""Shared helpers for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

import typer

from relpack.core.errors import ErrorCode
from relpack.core.manifest import (
    DEFAULT_MANIFEST_NAME,
    ReleaseManifest,
    bundled_manifest_path,
    load_manifest,
)
from relpack.core.result import Err

if TYPE_CHECKING:
    from relpack.cli.context import CLIContext


def resolve_manifest_path(cwd: Path, manifest: Path | None) -> tuple[Path, Path | None]:
    """Pick the manifest file and the base dir its relative paths resolve against.

    Order: explicit --manifest, ./release.toml, the bundled manifest. The
    bundled manifest resolves against cwd since its own directory is inside
    the installed package.
    """
    if manifest is not None:
        return (cwd / manifest, None)
    local = cwd / DEFAULT_MANIFEST_NAME
    if local.is_file():
        return (local, None)
    return (bundled_manifest_path(), cwd)


def load_manifest_or_exit(ctx: CLIContext, manifest: Path | None) -> ReleaseManifest:
    path, base_dir = resolve_manifest_path(ctx.cwd, manifest)
    result = load_manifest(path, base_dir=base_dir)
    if isinstance(result, Err):
        ctx.console.error(str(result.error))
        exit_with_code(int(ErrorCode.MANIFEST_ERROR))
    return result.value


def exit_with_code(code: int) -> NoReturn:
    """Exit with given code. Explicit helper for clarity."""
    raise typer.Exit(code=code)
