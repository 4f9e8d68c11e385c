"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.certificates import PermissiveCertificateValidation, StrictCertificateValidation
from adapters.http_client import build_async_client
from core.config import AppSettings, write_user_env_vars
from core.domain.models import DeviceConnection
from core.interfaces.certificates import CertificateValidator

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and device configuration.")

_console = Console()


async def _check_http(
    connection: DeviceConnection,
    validator: CertificateValidator,
    settings: AppSettings,
) -> tuple[bool, str]:
    """Best-effort reachability probe; any HTTP status counts as reachable."""

    try:
        async with build_async_client(connection, validator=validator, settings=settings) as client:
            response = await client.get(connection.base_url + "/")
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, f"{exc.__class__.__name__}: {exc}"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="devportal doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    try:
        connection = settings.to_connection()
    except ValueError as exc:
        table.add_row("Device config", "FAIL", str(exc).splitlines()[0])
        _console.print(table)
        _console.print("\n[yellow]Tip:[/yellow] run `devportal doctor setup-device`.")
        raise typer.Exit(code=2) from exc

    table.add_row("Device", "OK", connection.base_url)
    scheme = "token" if connection.credentials.uses_token else "basic"
    table.add_row("Credentials", "OK", scheme)
    if settings.device_ca_file:
        ca_ok = settings.device_ca_file.is_file()
        table.add_row("Device CA", "OK" if ca_ok else "FAIL", str(settings.device_ca_file))

    ok_strict, detail_strict = asyncio.run(
        _check_http(connection, StrictCertificateValidation.from_settings(settings), settings)
    )
    table.add_row("HTTPS (strict)", "OK" if ok_strict else "FAIL", detail_strict)

    if not ok_strict:
        ok_any, detail_any = asyncio.run(
            _check_http(connection, PermissiveCertificateValidation(), settings)
        )
        table.add_row("HTTPS (any cert)", "OK" if ok_any else "FAIL", detail_any)
        if ok_any:
            _console.print(table)
            _console.print(
                "\n[yellow]Note:[/yellow] the device certificate is not trusted. "
                "Set DEVPORTAL_DEVICE_CA_FILE to the device root certificate."
            )
            return

    _console.print(table)


@app.command(name="setup-device")
def setup_device() -> None:
    """Interactive device setup (stores config in the user config .env)."""

    address = typer.prompt("Device address (host[:port] or URL)").strip()
    if not address:
        raise typer.BadParameter("device address is required")

    use_token = typer.confirm("Authenticate with a token instead of username/password?", default=False)

    values: dict[str, str | None] = {"DEVPORTAL_DEVICE_ADDRESS": address}
    if use_token:
        values["DEVPORTAL_TOKEN"] = typer.prompt("Token", hide_input=True).strip()
    else:
        values["DEVPORTAL_USERNAME"] = typer.prompt("Username").strip()
        values["DEVPORTAL_PASSWORD"] = typer.prompt("Password", hide_input=True).strip()

    ca_file = typer.prompt("Device root certificate (PEM path, empty to skip)", default="", show_default=False).strip()
    if ca_file:
        values["DEVPORTAL_DEVICE_CA_FILE"] = ca_file

    env_path = write_user_env_vars(values)
    _console.print(f"[green]Saved device config to:[/green] {env_path}")
