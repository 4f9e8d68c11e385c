"""Contrato del constructor de endpoints.

Por qué Protocol:
- El cliente REST no compone URIs; recibe una función pura que lo hace.
- Permite sustituirla en tests o para dispositivos con prefijos distintos.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import httpx

from core.domain.models import DeviceConnection


@runtime_checkable
class EndpointBuilder(Protocol):
    """Compone autoridad base + path + query en una URI completa."""

    def __call__(
        self,
        connection: DeviceConnection,
        api_path: str,
        payload: str | None = None,
    ) -> httpx.URL:
        ...
