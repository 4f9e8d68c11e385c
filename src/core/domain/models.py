"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Los modelos son inmutables (`frozen`): el contexto de conexión se lee en
  cada request y nunca se modifica.

Nota:
- Estos modelos describen *con quién* hablamos, no *cómo* (eso vive en adapters).
"""

from __future__ import annotations

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic.config import ConfigDict


class Credentials(BaseModel):
    """Credenciales de una sesión con el dispositivo.

    Reglas:
    - O bien usuario + password (HTTP Basic), o bien un token Bearer.
    - Nunca ambos: cada request usa exactamente un juego de credenciales.
    """

    model_config = ConfigDict(frozen=True)

    username: str | None = Field(
        default=None,
        min_length=1,
        description="Usuario para autenticación Basic.",
    )
    password: SecretStr | None = Field(
        default=None,
        description="Password para autenticación Basic.",
    )
    token: SecretStr | None = Field(
        default=None,
        description="Token Bearer.",
    )

    @model_validator(mode="after")
    def _exactly_one_scheme(self) -> "Credentials":
        if self.username is not None and self.password is None:
            raise ValueError("password is required when username is set")
        has_basic = self.username is not None and self.password is not None
        has_token = self.token is not None
        if has_basic == has_token:
            raise ValueError("credentials require either username/password or token, not both")
        return self

    @property
    def uses_token(self) -> bool:
        return self.token is not None


class DeviceConnection(BaseModel):
    """Contexto de conexión: autoridad base + credenciales."""

    model_config = ConfigDict(frozen=True)

    address: str = Field(
        ...,
        min_length=1,
        description="Autoridad del dispositivo, con o sin esquema (por defecto https).",
    )
    credentials: Credentials = Field(
        ...,
        description="Credenciales usadas en todas las requests de esta conexión.",
    )

    @field_validator("address")
    @classmethod
    def _strip_address(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("address must not be blank")
        return value

    @property
    def base_url(self) -> str:
        """URL base normalizada (`https://host[:port]`)."""

        if "://" in self.address:
            return self.address
        return f"https://{self.address}"
