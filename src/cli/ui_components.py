"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from typing import Any

from rich.align import Align
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.errors import DevicePortalError, RequestFailed


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("devportal", style="bold cyan")
    subtitle = Text("Device Portal REST client", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def render_json(data: Any) -> JSON:
    return JSON.from_data(data, indent=2, sort_keys=True)


def build_error_panel(error: DevicePortalError) -> Panel:
    """Panel para presentar un error de la capa REST."""

    if isinstance(error, RequestFailed):
        table = Table(show_header=False, box=None)
        table.add_column("Key", style="cyan", no_wrap=True)
        table.add_column("Value", style="white")
        table.add_row("Status", f"{error.status_code} {error.reason}")
        table.add_row("URL", error.url)
        for name, value in sorted(error.headers.items()):
            table.add_row(name, value)
        if error.body:
            table.add_row("Body", error.body)
        return Panel(table, title=Text(str(error), style="bold red"), border_style="red")
    body = Text(str(error), style="bold")
    return Panel(body, title=Text(type(error).__name__, style="bold red"), border_style="red")
