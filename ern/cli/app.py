from __future__ import annotations

import typer

from ern import __version__
from ern.cli.commands.cauldron_cmd import cauldron_app
from ern.cli.commands.config_cmd import config
from ern.cli.commands.container_cmd import container_app
from ern.cli.commands.module_cmd import module_name

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Commands
app.command()(config)
app.command("module-name")(module_name)

# Sub-apps
app.add_typer(cauldron_app, name="cauldron")
app.add_typer(container_app, name="container")


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


def main() -> None:
    app()
