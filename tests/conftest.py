from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from adapters.rest_client import DevicePortalRest
from core.config import AppSettings
from core.domain.models import Credentials, DeviceConnection


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(_env_file=None, http_timeout_seconds=5.0, user_agent="devportal-tests")


@pytest.fixture
def connection() -> DeviceConnection:
    return DeviceConnection(
        address="device.local:11443",
        credentials=Credentials(username="admin", password="s3cret"),
    )


@pytest.fixture
def make_rest(connection: DeviceConnection, settings: AppSettings) -> Callable[..., DevicePortalRest]:
    """Build a `DevicePortalRest` whose requests are served by `handler`."""

    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> DevicePortalRest:
        return DevicePortalRest(
            kwargs.pop("connection", connection),
            settings=settings,
            transport=httpx.MockTransport(handler),
            **kwargs,
        )

    return _make
