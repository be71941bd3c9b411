from __future__ import annotations

import typer

from relman import __version__
from relman.cli.commands.release_cmd import release
from relman.cli.commands.status import status
from relman.cli.commands.targets import targets
from relman.cli.commands.upgrade_config import upgrade_config

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="A utility for creating release binaries for multiple platforms.",
)

app.command()(release)
app.command()(status)
app.command()(targets)
app.command("upgrade-config")(upgrade_config)


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def main() -> None:
    app()
