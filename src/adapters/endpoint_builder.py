"""Constructor de endpoints por defecto.

Función pura: `(connection, api_path, payload) -> httpx.URL`.
Implementa `core.interfaces.endpoint.EndpointBuilder`.
"""

from __future__ import annotations

import httpx

from core.domain.models import DeviceConnection


def build_endpoint(
    connection: DeviceConnection,
    api_path: str,
    payload: str | None = None,
) -> httpx.URL:
    """Compone la URI completa de una API del dispositivo.

    Reglas:
    - `api_path` es relativo a la autoridad; el `/` inicial es opcional.
    - `payload` es el query string crudo (sin codificar de nuevo); se tolera
      un `?` inicial. `None` o vacío -> sin query.
    """

    if api_path is None:
        raise ValueError("api_path is required")

    target = connection.base_url + "/" + api_path.lstrip("/")
    query = (payload or "").lstrip("?")
    if query:
        target = f"{target}?{query}"
    return httpx.URL(target)
