from __future__ import annotations

from pathlib import Path

import typer

from relpack import __version__
from relpack.cli.commands._helpers import exit_with_code, load_manifest_or_exit
from relpack.cli.context import build_context
from relpack.core.errors import ErrorCode
from relpack.core.result import Err
from relpack.output.console import Style
from relpack.output.errors import packaging_error_exit_code, print_packaging_error
from relpack.services.packager import Packager
from relpack.tools.http import RealHttpClient


def package(
    out: Path | None = typer.Option(
        None, "--out", help="Output directory (overrides the manifest)"
    ),
    skip_verify: bool = typer.Option(
        False,
        "--skip-verify",
        help="Do not check the dependency checksum. Debugging only, never for releases.",
    ),
    manifest: Path | None = typer.Option(
        None,
        "--manifest",
        "-m",
        help="Release manifest (default: ./release.toml, else the bundled Quincy manifest)",
    ),
    temp_dir: Path | None = typer.Option(
        None, "--temp-dir", help="Parent directory for scratch files"
    ),
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Build the release binaries, fetch the pinned dependency and assemble the bundle."""
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    ctx = build_context()
    release = load_manifest_or_exit(ctx, manifest)
    if out is not None:
        release = release.with_out_dir(ctx.cwd / out)

    if skip_verify:
        ctx.console.warning("--skip-verify: the dependency will NOT be checked against its pin")

    packager = Packager(
        http=RealHttpClient(timeout=release.dependency.timeout),
        console=ctx.console,
        temp_root=(ctx.cwd / temp_dir) if temp_dir is not None else None,
    )

    try:
        result = packager.package(release, skip_verify=skip_verify)
    except KeyboardInterrupt:
        ctx.console.error("interrupted")
        ctx.console.warning("bundle is incomplete")
        exit_with_code(int(ErrorCode.INTERRUPTED))

    if isinstance(result, Err):
        print_packaging_error(result.error, ctx.console)
        exit_with_code(packaging_error_exit_code(result.error))

    bundle = result.value
    ctx.console.header("bundle")
    for f in bundle.files:
        ctx.console.print(f"{f.sha256}  {f.size:>10}  {f.name}", Style.DIM)
    ctx.console.success(str(bundle.out_dir))
