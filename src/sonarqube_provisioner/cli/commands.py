"""CLI command implementations."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from sonarqube_provisioner.cli import app
from sonarqube_provisioner.cli.errors import handle_error

if TYPE_CHECKING:
    from sonarqube_provisioner.core.state import ResourceInstance

ConfigPath = Annotated[
    Path,
    typer.Option("--config", "-c", help="Path to the configuration file."),
]

NoColor = Annotated[
    bool,
    typer.Option("--no-color", help="Disable colored output."),
]


def _use_color(no_color: bool) -> bool:
    """Determine whether to use color output."""
    return not (no_color or os.environ.get("NO_COLOR"))


def _dump(inst: ResourceInstance) -> str:
    return json.dumps(inst.model_dump(mode="json"), indent=2, sort_keys=True)


@app.command()
def validate(
    config: ConfigPath = Path("sonarqube-provisioner.yaml"),
    no_color: NoColor = False,
) -> None:
    """Validate the configuration file."""
    from sonarqube_provisioner.config import load
    from sonarqube_provisioner.config import validate as validate_fn

    color = _use_color(no_color)
    try:
        cfg = load(config)
        validate_fn(cfg)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    msg = "Configuration is valid."
    typer.echo(typer.style(msg, fg="green") if color else msg)


@app.command()
def read(
    address: Annotated[
        str, typer.Argument(help="Resource address, e.g. sonarqube_permissions.devs")
    ],
    resource_id: Annotated[
        str, typer.Option("--id", help="Identity the resource is tracked under.")
    ],
    config: ConfigPath = Path("sonarqube-provisioner.yaml"),
    no_color: NoColor = False,
) -> None:
    """Read one declared resource back from the server."""
    from sonarqube_provisioner.config import load
    from sonarqube_provisioner.config import read as read_fn

    color = _use_color(no_color)
    try:
        cfg = load(config)
        inst = read_fn(cfg, address, resource_id)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    if inst is None:
        typer.echo(f"{address} no longer exists on the server.")
        raise typer.Exit(2)
    typer.echo(_dump(inst))


@app.command(name="import")
def import_cmd(
    resource_type: Annotated[
        str, typer.Argument(help="Resource type, e.g. sonarqube_gitlab_binding")
    ],
    resource_id: Annotated[str, typer.Argument(help="Identity of the existing server object.")],
    name: Annotated[
        str, typer.Option("--name", "-n", help="Local name for the resource.")
    ] = "imported",
    config: ConfigPath = Path("sonarqube-provisioner.yaml"),
    no_color: NoColor = False,
) -> None:
    """Import an existing server object and print its attributes."""
    from sonarqube_provisioner.config import import_resource, load

    color = _use_color(no_color)
    try:
        cfg = load(config)
        inst = import_resource(cfg, resource_type, resource_id, name=name)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    typer.echo(_dump(inst))
