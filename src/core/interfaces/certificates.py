"""Contrato de validación de certificados TLS.

Reglas de diseño:
- El cliente recibe dos estrategias explícitas (estricta / permisiva) y elige
  una por request; nunca hay estado global de confianza.
"""

from __future__ import annotations

import ssl
from typing import Protocol, runtime_checkable


@runtime_checkable
class CertificateValidator(Protocol):
    """Estrategia de confianza para el certificado del servidor."""

    @property
    def name(self) -> str:
        """Nombre corto de la estrategia (`strict` / `permissive`)."""

        ...

    def ssl_context(self) -> ssl.SSLContext:
        """Contexto SSL que aplica la estrategia."""

        ...
