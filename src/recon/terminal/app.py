# SPDX-License-Identifier: MIT

from typing import Annotated

import typer

from recon.terminal import analytics, configuration, section, vehicle
from recon.terminal.custom_typer import OrderedAliasedTyperGroup
from recon.view import state as view_state

app = typer.Typer(
    cls=OrderedAliasedTyperGroup,
    help="recon - Vehicle reconditioning board in the CLI",
    no_args_is_help=True,
)
app.add_typer(vehicle.app, name="vehicle, v")
app.add_typer(analytics.app, name="analytics, a")
app.add_typer(section.app, name="section, s")
app.add_typer(configuration.app, name="config, c")


@app.callback()
def main_callback(
    no_header: Annotated[
        bool,
        typer.Option(
            "--no-header",
            "-nh",
            help="Suppress header output in reports",
        ),
    ] = False,
) -> None:
    """
    recon - Vehicle reconditioning board in the CLI

    Global options that apply to all commands.
    """
    if no_header:
        view_state.set_show_header(False)


def run() -> None:
    app()
