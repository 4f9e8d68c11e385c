from __future__ import annotations

import asyncio
import base64
import json

import httpx
import pytest
from pydantic import BaseModel

import adapters.rest_client as rest_module
from core.domain.errors import DeserializationError, RequestFailed, TransportError
from core.domain.models import Credentials, DeviceConnection


class DeviceStatus(BaseModel):
    ready: bool


class OsInfo(BaseModel):
    computer_name: str = ""
    os_version: str = ""
    platform: str = ""


class Battery(BaseModel):
    level: float
    charging: bool = False


@pytest.mark.asyncio
async def test_get_stream_returns_body_at_offset_zero(make_rest):
    payload = b"x" * 100_000
    rest = make_rest(lambda request: httpx.Response(200, content=payload))

    stream = await rest.get_stream("https://device.local:11443/api/blob")

    assert stream.tell() == 0
    assert stream.read() == payload


@pytest.mark.asyncio
async def test_get_stream_empty_body(make_rest):
    rest = make_rest(lambda request: httpx.Response(200))

    stream = await rest.get_stream("https://device.local:11443/api/empty")

    assert stream.tell() == 0
    assert stream.read() == b""


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 404, 500])
async def test_get_stream_non_success_raises_request_failed(make_rest, status):
    rest = make_rest(
        lambda request: httpx.Response(status, json={"Reason": "nope"}, headers={"X-Trace": "abc"})
    )

    with pytest.raises(RequestFailed) as excinfo:
        await rest.get_stream("https://device.local:11443/api/thing")

    error = excinfo.value
    assert error.status_code == status
    assert error.url == "https://device.local:11443/api/thing"
    assert error.headers["x-trace"] == "abc"
    assert json.loads(error.body) == {"Reason": "nope"}


@pytest.mark.asyncio
async def test_get_stream_rejects_relative_uri(make_rest):
    rest = make_rest(lambda request: httpx.Response(200))

    with pytest.raises(ValueError):
        await rest.get_stream("/api/status")


@pytest.mark.asyncio
async def test_get_sends_basic_credentials_and_query(make_rest):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ready": True})

    rest = make_rest(handler)
    await rest.get(DeviceStatus, "/api/status", "verbose=1")

    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/api/status"
    assert request.url.query == b"verbose=1"
    expected = base64.b64encode(b"admin:s3cret").decode("ascii")
    assert request.headers["Authorization"] == f"Basic {expected}"
    assert request.headers["User-Agent"] == "devportal-tests"


@pytest.mark.asyncio
async def test_get_sends_bearer_token(make_rest):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ready": False})

    connection = DeviceConnection(address="10.0.0.5", credentials=Credentials(token="tok-123"))
    rest = make_rest(handler, connection=connection)
    status = await rest.get(DeviceStatus, "api/status")

    assert status.ready is False
    assert seen[0].headers["Authorization"] == "Bearer tok-123"
    assert str(seen[0].url) == "https://10.0.0.5/api/status"


@pytest.mark.asyncio
async def test_typed_get_decodes_declared_shape(make_rest):
    rest = make_rest(lambda request: httpx.Response(200, json={"ready": True}))

    status = await rest.get(DeviceStatus, "/api/status", None)

    assert status == DeviceStatus(ready=True)


@pytest.mark.asyncio
async def test_typed_get_ignores_unknown_fields_and_preserves_known(make_rest):
    body = {"computer_name": "HOLO-01", "os_version": "10.0.19041", "platform": "HoloLens", "Extra": 1}
    rest = make_rest(lambda request: httpx.Response(200, json=body))

    info = await rest.get(OsInfo, "/api/os/info")

    assert info.model_dump() == {k: v for k, v in body.items() if k != "Extra"}


@pytest.mark.asyncio
async def test_typed_get_generic_container(make_rest):
    rest = make_rest(lambda request: httpx.Response(200, json=[{"level": 0.5}, {"level": 1, "charging": True}]))

    batteries = await rest.get(list[Battery], "/api/power/batteries")

    assert batteries == [Battery(level=0.5), Battery(level=1.0, charging=True)]


@pytest.mark.asyncio
async def test_typed_get_type_mismatch_raises(make_rest):
    rest = make_rest(lambda request: httpx.Response(200, json={"ready": "true"}))

    with pytest.raises(DeserializationError) as excinfo:
        await rest.get(DeviceStatus, "/api/status")

    assert excinfo.value.result_type == "DeviceStatus"


@pytest.mark.asyncio
async def test_typed_get_invalid_json_raises(make_rest):
    rest = make_rest(lambda request: httpx.Response(200, content=b"<html>oops</html>"))

    with pytest.raises(DeserializationError):
        await rest.get(DeviceStatus, "/api/status")


@pytest.mark.asyncio
async def test_typed_get_propagates_request_failed(make_rest):
    rest = make_rest(lambda request: httpx.Response(404))

    with pytest.raises(RequestFailed) as excinfo:
        await rest.get(DeviceStatus, "/api/missing")

    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("result_type", "expected"),
    [
        (OsInfo, OsInfo()),
        (DeviceStatus, None),
        (list[Battery], []),
        (dict, {}),
        (int, 0),
    ],
)
async def test_typed_get_empty_body_returns_default(make_rest, result_type, expected):
    rest = make_rest(lambda request: httpx.Response(200, content=b""))

    assert await rest.get(result_type, "/api/empty") == expected


@pytest.mark.asyncio
async def test_connection_failure_raises_transport_error(make_rest):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    rest = make_rest(handler)

    with pytest.raises(TransportError) as excinfo:
        await rest.get(DeviceStatus, "/api/status")

    assert isinstance(excinfo.value.cause, httpx.ConnectError)
    assert excinfo.value.url == "https://device.local:11443/api/status"


@pytest.mark.asyncio
async def test_timeout_raises_transport_error(make_rest):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    rest = make_rest(handler)

    with pytest.raises(TransportError):
        await rest.get_stream("https://device.local:11443/api/slow", timeout=0.1)


@pytest.mark.asyncio
async def test_cancellation_propagates(make_rest):
    started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.sleep(3600)
        return httpx.Response(200)

    rest = make_rest(handler)
    task = asyncio.create_task(rest.get_stream("https://device.local:11443/api/hang"))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_certificate_strategy_selection(monkeypatch, make_rest):
    used: list[str] = []
    original = rest_module.build_async_client

    def recording_client(connection, *, validator, **kwargs):
        used.append(validator.name)
        return original(connection, validator=validator, **kwargs)

    monkeypatch.setattr(rest_module, "build_async_client", recording_client)
    rest = make_rest(lambda request: httpx.Response(200, json={"ready": True}))

    await rest.get_stream("https://device.local:11443/api/a", validate_certificate=False)
    await rest.get_stream("https://device.local:11443/api/b")
    await rest.get(DeviceStatus, "/api/status")

    assert used == ["permissive", "strict", "strict"]
