"""Amadeus API client — OAuth2 client-credentials token cache and JSON helpers."""

import asyncio
import logging
import time
from typing import Any, Callable

import httpx

from voyage.config import settings

logger = logging.getLogger(__name__)

TOKEN_PATH = "/v1/security/oauth2/token"
# Refresh this many seconds before the upstream expiry
TOKEN_EXPIRY_SKEW = 60
DEFAULT_EXPIRES_IN = 1800


class AmadeusError(Exception):
    """Upstream HTTP or transport failure. ``status_code`` is 0 for transport errors."""

    def __init__(self, status_code: int, message: str, payload: Any = None):
        self.status_code = status_code
        self.message = message
        self.payload = payload
        super().__init__(message)


class AmadeusDisabledError(AmadeusError):
    def __init__(self):
        super().__init__(0, "Amadeus disabled")


class AmadeusClient:
    """Adapter for the Amadeus Self-Service REST API."""

    def __init__(
        self,
        base_url: str | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        *,
        timeout: float | None = None,
        disabled: bool | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.base_url = base_url or settings.amadeus_base_url
        self._client_id = settings.amadeus_client_id if client_id is None else client_id
        self._client_secret = (
            settings.amadeus_client_secret if client_secret is None else client_secret
        )
        self._timeout = settings.amadeus_timeout if timeout is None else timeout
        self._disabled = settings.amadeus_disable if disabled is None else disabled
        self._transport = transport
        self._clock = clock

        self._token: str | None = None
        self._token_expires: float = 0.0
        self._token_lock: asyncio.Lock | None = None
        self._client: httpx.AsyncClient | None = None

    @property
    def token_expires_at(self) -> float:
        return self._token_expires

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    def _token_valid(self) -> bool:
        return bool(self._token) and self._clock() < self._token_expires - TOKEN_EXPIRY_SKEW

    async def get_access_token(self) -> str:
        """Return a bearer token, fetching a new one only when absent or near expiry."""
        if self._disabled:
            raise AmadeusDisabledError()
        if self._token_valid():
            return self._token

        if self._token_lock is None:
            self._token_lock = asyncio.Lock()
        async with self._token_lock:
            # Another task may have refreshed while we waited
            if self._token_valid():
                return self._token
            await self._refresh_token()
        return self._token

    async def _refresh_token(self) -> None:
        if not self._client_id or not self._client_secret:
            raise AmadeusError(0, "amadeus_missing_credentials")

        client = await self._get_client()
        fetched_at = self._clock()
        try:
            resp = await client.post(
                TOKEN_PATH,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._status_error(e) from e
        except httpx.RequestError as e:
            raise AmadeusError(0, f"Amadeus token request failed: {e}") from e

        data = resp.json()
        self._token = data["access_token"]
        self._token_expires = fetched_at + float(data.get("expires_in") or DEFAULT_EXPIRES_IN)
        logger.info("Amadeus token refreshed")

    async def get(self, path: str, params: dict | None = None) -> dict:
        return await self._request("GET", path, params=_clean(params))

    async def post(self, path: str, body: dict | None = None) -> dict:
        return await self._request("POST", path, json=body or {})

    async def _request(self, method: str, path: str, **kwargs) -> dict:
        token = await self.get_access_token()
        client = await self._get_client()
        try:
            resp = await client.request(
                method,
                path,
                headers={"Authorization": f"Bearer {token}"},
                **kwargs,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Amadeus {method} {path} error: {e.response.status_code}")
            raise self._status_error(e) from e
        except httpx.RequestError as e:
            logger.error(f"Amadeus {method} {path} request error: {e}")
            raise AmadeusError(0, f"Amadeus request failed: {e}") from e
        return resp.json()

    @staticmethod
    def _status_error(e: httpx.HTTPStatusError) -> AmadeusError:
        try:
            payload = e.response.json()
        except ValueError:
            payload = e.response.text
        return AmadeusError(
            e.response.status_code,
            f"Amadeus responded {e.response.status_code} for {e.request.url.path}",
            payload,
        )

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None


def _clean(params: dict | None) -> dict:
    return {k: v for k, v in (params or {}).items() if v is not None}


amadeus_client = AmadeusClient()
