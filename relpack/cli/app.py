from __future__ import annotations

import typer

from relpack.cli.commands.package_cmd import package

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
)

# Single command: `relpack [OPTIONS]` runs it directly.
app.command()(package)


def main() -> None:
    app()
