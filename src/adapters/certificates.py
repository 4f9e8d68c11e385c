"""Estrategias de validación de certificados.

- `StrictCertificateValidation`: store del sistema + (opcional) la raíz del
  dispositivo descargada/instalada por el usuario. Verifica hostname.
- `PermissiveCertificateValidation`: acepta cualquier certificado. Es una
  degradación de confianza explícita para dispositivos con certificado
  autofirmado; nunca se usa por defecto.
"""

from __future__ import annotations

import ssl
from pathlib import Path

from core.config import AppSettings


class StrictCertificateValidation:
    name = "strict"

    def __init__(self, *, ca_file: Path | str | None = None, ca_data: str | None = None) -> None:
        self._ca_file = str(ca_file) if ca_file else None
        self._ca_data = ca_data

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "StrictCertificateValidation":
        return cls(ca_file=settings.device_ca_file)

    def ssl_context(self) -> ssl.SSLContext:
        ctx = ssl.create_default_context()
        if self._ca_file or self._ca_data:
            ctx.load_verify_locations(cafile=self._ca_file, cadata=self._ca_data)
        return ctx


class PermissiveCertificateValidation:
    name = "permissive"

    def ssl_context(self) -> ssl.SSLContext:
        ctx = ssl.create_default_context()
        # check_hostname debe desactivarse antes que verify_mode.
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
        return ctx
