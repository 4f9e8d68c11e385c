"""Errores tipados de la capa REST.

Por qué una jerarquía propia:
- Los callers capturan `DevicePortalError` sin conocer httpx.
- Cada error lleva el diagnóstico suficiente (status, headers, body) para
  depurar sin reintentar la request.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass(eq=False)
class DevicePortalError(Exception):
    """Base de todos los errores de la capa REST."""

    message: str

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


@dataclass(eq=False)
class TransportError(DevicePortalError):
    """No se pudo completar la conexión (DNS, rechazo, TLS, timeout)."""

    url: str = ""
    cause: Exception | None = None


@dataclass(eq=False)
class RequestFailed(DevicePortalError):
    """El dispositivo respondió con un status fuera del rango 2xx."""

    status_code: int = 0
    reason: str = ""
    url: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    body: str = ""


@dataclass(eq=False)
class DeserializationError(DevicePortalError):
    """El body no es JSON válido o no encaja con el tipo declarado."""

    result_type: str = ""
    detail: str = ""
