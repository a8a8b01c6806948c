"""Test configuration and helper fixtures."""

from __future__ import annotations

import asyncio
import inspect
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from netbird_exporter.models import DNSSettings


@pytest.hookimpl
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the test-suite."""

    config.addinivalue_line("markers", "asyncio: run the test inside an event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute ``async def`` tests marked with ``@pytest.mark.asyncio``."""

    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None

    if pyfuncitem.get_closest_marker("asyncio") is None:
        return None

    fixture_names = pyfuncitem._fixtureinfo.argnames  # type: ignore[attr-defined]
    call_kwargs = {name: pyfuncitem.funcargs[name] for name in fixture_names}
    asyncio.run(test_func(**call_kwargs))
    return True


Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@pytest.fixture
def api_server() -> Callable[[Dict[str, Handler]], Any]:
    """Serve a fake NetBird API from ``aiohttp`` handlers inside the running test loop.

    Usage::

        async with api_server({"/api/peers": handler}) as server:
            url = str(server.make_url(""))
    """

    @asynccontextmanager
    async def factory(routes: Dict[str, Handler]) -> AsyncIterator[TestServer]:
        app = web.Application()
        for path, handler in routes.items():
            app.router.add_get(path, handler)
        server = TestServer(app)
        await server.start_server()
        try:
            yield server
        finally:
            await server.close()

    return factory


class FakeNetBirdClient:
    """Stand-in for ``NetBirdClient`` returning canned records.

    Each payload is either the value to return or an exception to raise.
    ``delay`` adds an ``asyncio.sleep`` before every call.
    """

    def __init__(self, delay: float = 0.0, **payloads: Any):
        self.delay = delay
        self.payloads: Dict[str, Any] = {
            "peers": [],
            "groups": [],
            "users": [],
            "nameserver_groups": [],
            "dns_settings": DNSSettings(),
            "networks": [],
        }
        self.payloads.update(payloads)
        self.calls: List[str] = []

    @asynccontextmanager
    async def session(self) -> AsyncIterator[None]:
        yield None

    async def _get(self, key: str) -> Any:
        self.calls.append(key)
        if self.delay:
            await asyncio.sleep(self.delay)
        value = self.payloads[key]
        if callable(value) and not isinstance(value, type):
            value = value()
        if isinstance(value, BaseException):
            raise value
        return value

    async def list_peers(self, session):
        return await self._get("peers")

    async def list_groups(self, session):
        return await self._get("groups")

    async def list_users(self, session):
        return await self._get("users")

    async def list_nameserver_groups(self, session):
        return await self._get("nameserver_groups")

    async def get_dns_settings(self, session):
        return await self._get("dns_settings")

    async def list_networks(self, session):
        return await self._get("networks")


@pytest.fixture
def fake_client() -> Callable[..., FakeNetBirdClient]:
    return FakeNetBirdClient
