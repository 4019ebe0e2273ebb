"""CLI application for sonarqube-provisioner."""

from __future__ import annotations

import logging
import os
import sys

import typer

from sonarqube_provisioner import __version__

app = typer.Typer(
    name="sonarqube-provisioner",
    no_args_is_help=True,
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"sonarqube-provisioner {__version__}")
        raise typer.Exit


_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_VERBOSITY = {1: logging.INFO, 2: logging.DEBUG}
# requests' connection pool; only switched on at the highest verbosity.
_TRANSPORT_LOGGER = "urllib3"


def _resolve_level(verbose: int) -> int | None:
    """Level for the package logger, or None to leave logging alone.

    ``SONAR_LOG`` wins over ``-v`` flags. An unknown name falls back to INFO.
    """
    env_level = os.environ.get("SONAR_LOG", "").upper()
    if env_level:
        if env_level not in _VALID_LEVELS:
            typer.echo(
                f"WARNING: invalid SONAR_LOG level '{env_level}', "
                f"expected one of {', '.join(sorted(_VALID_LEVELS))}; defaulting to INFO",
                err=True,
            )
            return logging.INFO
        return getattr(logging, env_level)
    if verbose <= 0:
        return None
    return _VERBOSITY.get(verbose, logging.DEBUG)


def _configure_logging(verbose: int) -> None:
    """Send package logs to stderr; ``-vvv`` adds connection-level HTTP logs."""
    level = _resolve_level(verbose)
    if level is None:
        return
    logging.basicConfig(
        level=logging.WARNING,
        format=_LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )
    logging.getLogger("sonarqube_provisioner").setLevel(level)
    if verbose >= 3:
        logging.getLogger(_TRANSPORT_LOGGER).setLevel(logging.DEBUG)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase log verbosity (-v info, -vv requests, -vvv HTTP connections).",
    ),
) -> None:
    """Declarative permissions and ALM bindings for SonarQube."""
    _ = version
    _configure_logging(verbose)


# Register commands after app is created to avoid circular imports.
from sonarqube_provisioner.cli import commands as _commands  # noqa: E402, F401
