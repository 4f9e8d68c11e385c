"""CLI principal (Typer).

Comandos:
- `get PATH`: GET tipado (JSON libre) y muestra el body.
- `post PATH`: POST sin body; solo importa el status.
- `doctor ...`: diagnóstico y configuración del dispositivo.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from adapters.rest_client import DevicePortalRest, decode_stream
from cli import doctor
from cli.ui_components import build_error_panel, print_banner, render_json
from core.config import AppSettings
from core.domain.errors import DevicePortalError

app = typer.Typer(no_args_is_help=True, help="Typed client for the Device Portal REST API.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, rich_tracebacks=False, show_path=False)],
        force=True,
    )


def _build_rest(settings: AppSettings) -> DevicePortalRest:
    try:
        connection = settings.to_connection()
    except ValueError as exc:
        _err_console.print(f"[red]Invalid device configuration:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    return DevicePortalRest(connection, settings=settings)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests at DEBUG level."),
    banner: bool = typer.Option(False, "--banner", help="Print the welcome banner."),
) -> None:
    try:
        settings = AppSettings()
    except ValidationError as exc:
        _err_console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    configure_logging("DEBUG" if verbose else settings.log_level)
    if banner:
        print_banner(_console)


@app.command()
def get(
    api_path: str = typer.Argument(..., help="API path relative to the device, e.g. /api/os/info."),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Raw query string."),
    insecure: bool = typer.Option(
        False,
        "--insecure",
        help="Accept any server certificate (self-signed devices). Trust downgrade.",
    ),
) -> None:
    """GET an API path and print the JSON response."""

    settings = AppSettings()
    rest = _build_rest(settings)

    async def _run() -> Any:
        if insecure:
            uri = rest.build_uri(api_path, query)
            stream = await rest.get_stream(uri, validate_certificate=False)
            return decode_stream(Any, stream, source=str(uri))
        return await rest.get(Any, api_path, query)

    try:
        result = asyncio.run(_run())
    except DevicePortalError as exc:
        _err_console.print(build_error_panel(exc))
        raise typer.Exit(code=1) from exc

    if result is not None:
        _console.print(render_json(result))


@app.command()
def post(
    api_path: str = typer.Argument(..., help="API path relative to the device, e.g. /api/control/restart."),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Raw query string."),
) -> None:
    """POST (empty body) to an API path."""

    settings = AppSettings()
    rest = _build_rest(settings)

    try:
        asyncio.run(rest.post(api_path, query))
    except DevicePortalError as exc:
        _err_console.print(build_error_panel(exc))
        raise typer.Exit(code=1) from exc

    _console.print(f"[green]OK[/green] POST {rest.build_uri(api_path, query)}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
