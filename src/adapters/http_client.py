"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers, credenciales y la estrategia TLS en un solo
  punto para GET y POST.
- Facilita testeo: se puede inyectar un `transport` (p.ej. `httpx.MockTransport`).
"""

from __future__ import annotations

import httpx

from core.config import AppSettings
from core.domain.models import DeviceConnection
from core.interfaces.certificates import CertificateValidator


def build_auth(connection: DeviceConnection) -> tuple[httpx.Auth | None, dict[str, str]]:
    """Traduce las credenciales del dominio a auth/headers de httpx."""

    creds = connection.credentials
    if creds.token is not None:
        return None, {"Authorization": f"Bearer {creds.token.get_secret_value()}"}
    assert creds.username is not None and creds.password is not None
    return httpx.BasicAuth(creds.username, creds.password.get_secret_value()), {}


def build_async_client(
    connection: DeviceConnection,
    *,
    validator: CertificateValidator,
    settings: AppSettings | None = None,
    timeout: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` de vida corta para una sola request.

    Reglas:
    - Un cliente por llamada: sin pooling entre requests.
    - `trust_env=False`: ni proxies ni `.netrc` inyectan un segundo juego de
      credenciales.
    - Sin redirects: la request emitida es la única que sale.
    """

    settings = settings or AppSettings()
    auth, headers = build_auth(connection)
    headers.update(
        {
            "User-Agent": settings.user_agent,
            "Accept": "application/json",
        }
    )
    return httpx.AsyncClient(
        auth=auth,
        headers=headers,
        verify=validator.ssl_context(),
        timeout=httpx.Timeout(timeout or settings.http_timeout_seconds),
        follow_redirects=False,
        trust_env=False,
        transport=transport,
    )
