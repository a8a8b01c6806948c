# NetBird API Exporter
# Copyright (C) 2025 Amirreza "Farnam" Taheri
# This program comes with ABSOLUTELY NO WARRANTY; for details type `show w`.
# This is free software, and you are welcome to redistribute it
# under certain conditions; type `show c` for details.

"""
Thin client for the NetBird management API.

Every call is a single authenticated GET decoded into a pydantic model.
Requests are not retried: a failure surfaces as one of the
``NetBirdAPIError`` subclasses and is handled by the collector that asked.
"""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import Any, List

import aiohttp
from aiohttp import ClientTimeout
from pydantic import TypeAdapter, ValidationError

from .constants import (
    DEFAULT_API_TIMEOUT,
    DNS_SETTINGS_PATH,
    GROUPS_PATH,
    NAMESERVERS_PATH,
    NETWORKS_PATH,
    PEERS_PATH,
    USERS_PATH,
)
from .exceptions import APIStatusError, DecodeError, TransportError
from .models import DNSSettings, Group, NameserverGroup, Network, Peer, User

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _adapter(schema: Any) -> TypeAdapter:
    return TypeAdapter(schema)


class NetBirdClient:
    """Client for the NetBird REST API.

    Example:
        >>> client = NetBirdClient("https://api.netbird.io", token)
        >>> async with client.session() as session:
        ...     peers = await client.list_peers(session)
    """

    def __init__(self, base_url: str, token: str, timeout: float = DEFAULT_API_TIMEOUT):
        """Initialize the client.

        Args:
            base_url: API endpoint; one trailing slash is dropped
            token: Personal access token sent as ``Authorization: Token <token>``
            timeout: Upper bound in seconds for each request
        """
        self.base_url = base_url.removesuffix("/")
        self.token = token
        self.timeout = timeout

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Authorization": f"Token {self.token}",
        }

    def session(self) -> aiohttp.ClientSession:
        """Create a session carrying the auth headers and request timeout.

        The caller owns the session and should use it as an async context manager.
        """
        return aiohttp.ClientSession(
            headers=self.headers,
            timeout=ClientTimeout(total=self.timeout),
        )

    async def fetch(self, session: aiohttp.ClientSession, path: str, schema: Any) -> Any:
        """
        GET ``base_url + path`` and decode the JSON body into ``schema``.

        Raises:
            TransportError: connection failure or timeout
            APIStatusError: any status other than 200; the body is not read
            DecodeError: body is not JSON or does not match ``schema``
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"GET {url}")

        try:
            async with session.get(url) as response:
                if response.status != 200:
                    raise APIStatusError(path, response.status)
                body = await response.read()
        except asyncio.TimeoutError as exc:
            raise TransportError(path, f"request timed out after {self.timeout}s") from exc
        except aiohttp.ClientError as exc:
            raise TransportError(path, f"executing request: {exc}") from exc

        try:
            return _adapter(schema).validate_json(body)
        except ValidationError as exc:
            first = exc.errors()[0]["msg"]
            raise DecodeError(path, f"decoding response: {exc.error_count()} error(s), first: {first}") from exc

    async def list_peers(self, session: aiohttp.ClientSession) -> List[Peer]:
        return await self.fetch(session, PEERS_PATH, List[Peer])

    async def list_groups(self, session: aiohttp.ClientSession) -> List[Group]:
        return await self.fetch(session, GROUPS_PATH, List[Group])

    async def list_users(self, session: aiohttp.ClientSession) -> List[User]:
        return await self.fetch(session, USERS_PATH, List[User])

    async def list_nameserver_groups(self, session: aiohttp.ClientSession) -> List[NameserverGroup]:
        return await self.fetch(session, NAMESERVERS_PATH, List[NameserverGroup])

    async def get_dns_settings(self, session: aiohttp.ClientSession) -> DNSSettings:
        return await self.fetch(session, DNS_SETTINGS_PATH, DNSSettings)

    async def list_networks(self, session: aiohttp.ClientSession) -> List[Network]:
        return await self.fetch(session, NETWORKS_PATH, List[Network])
