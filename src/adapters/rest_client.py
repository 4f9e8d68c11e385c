"""Cliente REST tipado para Device Portal.

Responsabilidad:
- GET: una request autenticada, body completo en memoria (`io.BytesIO` en 0).
- GET tipado: decodifica el JSON al tipo declarado por el caller (pydantic).
- POST: una request autenticada sin body; solo importa el status.

Reglas:
- Sin reintentos, sin backoff, sin pooling: un `httpx.AsyncClient` por llamada.
- Cada fallo sale como error tipado (`core.domain.errors`); los recursos
  (cliente, response, stream) se liberan antes de propagarlo, también ante
  cancelación de la task.
"""

from __future__ import annotations

import io
import logging
from typing import Any, TypeVar, get_origin

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from adapters.certificates import PermissiveCertificateValidation, StrictCertificateValidation
from adapters.endpoint_builder import build_endpoint
from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.errors import DeserializationError, RequestFailed, TransportError
from core.domain.models import DeviceConnection
from core.interfaces.certificates import CertificateValidator
from core.interfaces.endpoint import EndpointBuilder

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MAX_ERROR_BODY_CHARS = 4096


def _type_name(result_type: Any) -> str:
    return getattr(result_type, "__name__", None) or repr(result_type)


def default_for(result_type: Any) -> Any:
    """Valor por defecto del tipo declarado (caso body vacío).

    - Modelos pydantic: instancia con sus defaults, o `None` si tiene campos
      obligatorios.
    - Contenedores y escalares builtin: su valor cero (`[]`, `{}`, `0`, `""`...).
    - Cualquier otro tipo (Optional, Union, dataclass...): `None`.
    """

    origin = get_origin(result_type) or result_type
    if isinstance(origin, type) and issubclass(origin, BaseModel):
        try:
            return origin()
        except ValidationError:
            return None
    if origin in (list, dict, set, frozenset, tuple, str, bytes, int, float, bool):
        return origin()
    return None


def decode_stream(result_type: type[T], stream: io.BytesIO, *, source: str) -> T:
    """Decodifica (y cierra) un body buffereado como JSON de `result_type`.

    Body vacío -> `default_for(result_type)`. JSON inválido o con forma
    incorrecta -> `DeserializationError`.
    """

    with stream:
        body = stream.read()

    if not body.strip():
        return default_for(result_type)

    try:
        return TypeAdapter(result_type).validate_json(body, strict=True)
    except ValidationError as exc:
        name = _type_name(result_type)
        logger.warning("GET %s returned a body that does not match %s", source, name)
        raise DeserializationError(
            message=f"response from {source} does not match {name}: {exc.error_count()} error(s)",
            result_type=name,
            detail=str(exc),
        ) from exc


def _request_failed(method: str, response: httpx.Response) -> RequestFailed:
    body = response.text[:_MAX_ERROR_BODY_CHARS] if response.content else ""
    url = str(response.request.url)
    return RequestFailed(
        message=f"{method} {url} failed: HTTP {response.status_code} {response.reason_phrase}".strip(),
        status_code=response.status_code,
        reason=response.reason_phrase,
        url=url,
        headers=dict(response.headers),
        body=body,
    )


def _transport_error(method: str, url: httpx.URL, exc: httpx.RequestError) -> TransportError:
    return TransportError(
        message=f"{method} {url} could not be completed: {exc.__class__.__name__}: {exc}",
        url=str(url),
        cause=exc,
    )


def _require_absolute(uri: httpx.URL | str) -> httpx.URL:
    if uri is None:
        raise ValueError("uri is required")
    url = httpx.URL(uri)
    if not url.is_absolute_url:
        raise ValueError(f"uri must be absolute: {uri!r}")
    return url


class DevicePortalRest:
    """Helpers GET/POST sobre un `DeviceConnection`.

    Colaboradores inyectables:
    - `endpoint_builder`: compone la URI (por defecto `build_endpoint`).
    - `strict` / `permissive`: estrategias de certificado.
    - `transport`: transporte httpx (tests).
    """

    def __init__(
        self,
        connection: DeviceConnection,
        *,
        settings: AppSettings | None = None,
        endpoint_builder: EndpointBuilder = build_endpoint,
        strict: CertificateValidator | None = None,
        permissive: CertificateValidator | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._connection = connection
        self._settings = settings or AppSettings()
        self._endpoint_builder = endpoint_builder
        self._strict = strict or StrictCertificateValidation.from_settings(self._settings)
        self._permissive = permissive or PermissiveCertificateValidation()
        self._transport = transport

    @property
    def connection(self) -> DeviceConnection:
        return self._connection

    def build_uri(self, api_path: str, payload: str | None = None) -> httpx.URL:
        return self._endpoint_builder(self._connection, api_path, payload)

    def _client(self, validator: CertificateValidator, timeout: float | None) -> httpx.AsyncClient:
        return build_async_client(
            self._connection,
            validator=validator,
            settings=self._settings,
            timeout=timeout,
            transport=self._transport,
        )

    async def get_stream(
        self,
        uri: httpx.URL | str,
        *,
        validate_certificate: bool = True,
        timeout: float | None = None,
    ) -> io.BytesIO:
        """GET a `uri` y devuelve el body completo posicionado en el offset 0.

        `validate_certificate=False` acepta cualquier certificado: es una
        degradación de confianza explícita (dispositivos autofirmados).

        Raises:
        - RequestFailed: status fuera de 2xx.
        - TransportError: no hubo respuesta (DNS, rechazo, TLS, timeout).
        """

        url = _require_absolute(uri)
        validator = self._strict if validate_certificate else self._permissive
        if not validate_certificate:
            logger.warning("Certificate validation disabled for GET %s", url)
        logger.debug("GET %s (certificates=%s)", url, validator.name)

        data = io.BytesIO()
        try:
            async with self._client(validator, timeout) as client:
                async with client.stream("GET", url) as response:
                    if not response.is_success:
                        await response.aread()
                        error = _request_failed("GET", response)
                        logger.warning("%s", error)
                        raise error
                    async for chunk in response.aiter_bytes():
                        data.write(chunk)
        except httpx.RequestError as exc:
            data.close()
            logger.warning("GET %s transport failure: %s", url, exc)
            raise _transport_error("GET", url, exc) from exc
        except BaseException:
            data.close()
            raise

        data.seek(0)
        return data

    async def get(
        self,
        result_type: type[T],
        api_path: str,
        payload: str | None = None,
        *,
        timeout: float | None = None,
    ) -> T:
        """Llama a `api_path` y decodifica el JSON de respuesta como `result_type`.

        - Campos desconocidos se ignoran; tipos incompatibles fallan.
        - Body vacío -> `default_for(result_type)`.

        Raises:
        - RequestFailed / TransportError: propagados desde `get_stream`.
        - DeserializationError: JSON inválido o forma incorrecta.
        """

        uri = self.build_uri(api_path, payload)
        stream = await self.get_stream(uri, timeout=timeout)
        return decode_stream(result_type, stream, source=str(uri))

    async def post_uri(self, uri: httpx.URL | str, *, timeout: float | None = None) -> None:
        """POST sin body a `uri`. Siempre con validación estricta de certificado.

        El body de la respuesta nunca se entrega al caller; solo se lee para el
        diagnóstico de `RequestFailed`.
        """

        url = _require_absolute(uri)
        logger.debug("POST %s (certificates=%s)", url, self._strict.name)

        try:
            async with self._client(self._strict, timeout) as client:
                async with client.stream("POST", url, content=b"") as response:
                    if not response.is_success:
                        await response.aread()
                        error = _request_failed("POST", response)
                        logger.warning("%s", error)
                        raise error
        except httpx.RequestError as exc:
            logger.warning("POST %s transport failure: %s", url, exc)
            raise _transport_error("POST", url, exc) from exc

    async def post(
        self,
        api_path: str,
        payload: str | None = None,
        *,
        timeout: float | None = None,
    ) -> None:
        await self.post_uri(self.build_uri(api_path, payload), timeout=timeout)
