"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.models import Credentials, DeviceConnection


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "devportal"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "devportal"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "devportal"
    return Path.home() / ".config" / "devportal"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None]) -> Path:
    """Escribe/actualiza variables en el .env global del usuario.

    Las claves con valor `None` se ignoran (no borran lo existente).
    """

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# devportal user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="DEVPORTAL_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    device_address: str | None = Field(
        default=None,
        description="Autoridad del dispositivo (p.ej. '192.168.1.20:11443' o 'https://host').",
    )
    username: str | None = Field(
        default=None,
        description="Usuario para autenticación Basic.",
    )
    password: SecretStr | None = Field(
        default=None,
        description="Password para autenticación Basic.",
    )
    token: SecretStr | None = Field(
        default=None,
        description="Token Bearer (alternativa a usuario/password).",
    )
    device_ca_file: Path | None = Field(
        default=None,
        description="Certificado raíz del dispositivo (PEM) a confiar además del store del sistema.",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="devportal-client/0.1",
        min_length=1,
        description="User-Agent para peticiones al dispositivo.",
    )
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = Field(
        default="WARNING",
        description="Nivel de logging de la CLI (DEBUG, INFO, WARNING, ERROR, CRITICAL).",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.strip().upper() if isinstance(value, str) else value

    def to_connection(self) -> DeviceConnection:
        """Construye el contexto de conexión a partir de la configuración.

        Raises:
        - ValueError si falta la dirección o las credenciales.
        """

        if not self.device_address:
            raise ValueError("device_address is not configured (DEVPORTAL_DEVICE_ADDRESS)")
        credentials = Credentials(
            username=self.username,
            password=self.password,
            token=self.token,
        )
        return DeviceConnection(address=self.device_address, credentials=credentials)
